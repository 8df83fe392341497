"""Frozen dataclass records for UniFi controller documents.

Each field's JSON key is its attribute name unless ``metadata["json"]``
says otherwise (the controller uses keys such as ``guest-num_sta`` that are
not valid identifiers).  Decoding is done by :mod:`unifi_poller.decode`.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from unifi_poller.flex import FlexBool, FlexInt


def _flex(key: Optional[str] = None) -> Any:
    meta = {"json": key} if key else {}
    return field(default_factory=FlexInt, metadata=meta)


def _flag(key: Optional[str] = None) -> Any:
    meta = {"json": key} if key else {}
    return field(default_factory=FlexBool, metadata=meta)


def _text(key: str) -> Any:
    return field(default="", metadata={"json": key})


@dataclass(frozen=True)
class IPGeo:
    """Geo-IP lookup result.  ``[]`` from the controller means no data."""

    asn: int = 0
    city: str = ""
    continent_code: str = ""
    country_code: str = ""
    country_name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    organization: str = ""


@dataclass(frozen=True)
class DeviceRef:
    """Parent-device context copied into each network and port entry."""

    id: str = ""
    name: str = ""
    mac: str = ""
    site_id: str = ""
    site_name: str = ""


@dataclass(frozen=True)
class ConfigNetwork:
    type: str = ""
    ip: str = ""


@dataclass(frozen=True)
class Wan:
    """One WAN interface (``wan1`` / ``wan2``)."""

    bytes_r: FlexInt = _flex("bytes-r")
    enable: FlexBool = _flag()
    full_duplex: FlexBool = _flag()
    gateway: str = ""
    ifname: str = ""
    ip: str = ""
    mac: str = ""
    max_speed: FlexInt = _flex()
    name: str = ""
    netmask: str = ""
    rx_bytes: FlexInt = _flex()
    rx_bytes_r: FlexInt = _flex("rx_bytes-r")
    rx_dropped: FlexInt = _flex()
    rx_errors: FlexInt = _flex()
    rx_multicast: FlexInt = _flex()
    rx_packets: FlexInt = _flex()
    type: str = ""
    speed: FlexInt = _flex()
    up: FlexBool = _flag()
    tx_bytes: FlexInt = _flex()
    tx_bytes_r: FlexInt = _flex("tx_bytes-r")
    tx_dropped: FlexInt = _flex()
    tx_errors: FlexInt = _flex()
    tx_packets: FlexInt = _flex()


@dataclass(frozen=True)
class SpeedtestStatus:
    latency: FlexInt = _flex()
    rundate: FlexInt = _flex()
    runtime: FlexInt = _flex()
    status_download: FlexInt = _flex()
    status_ping: FlexInt = _flex()
    status_summary: FlexInt = _flex()
    status_upload: FlexInt = _flex()
    xput_download: FlexInt = _flex()
    xput_upload: FlexInt = _flex()


@dataclass(frozen=True)
class SysStats:
    loadavg_1: FlexInt = _flex()
    loadavg_5: FlexInt = _flex()
    loadavg_15: FlexInt = _flex()
    mem_buffer: FlexInt = _flex()
    mem_total: FlexInt = _flex()
    mem_used: FlexInt = _flex()


@dataclass(frozen=True)
class SystemStats:
    cpu: FlexInt = _flex()
    mem: FlexInt = _flex()
    uptime: FlexInt = _flex()


@dataclass(frozen=True)
class Uplink:
    name: str = ""
    latency: FlexInt = _flex()
    speed: FlexInt = _flex()
    num_port: FlexInt = _flex()
    max_speed: FlexInt = _flex()


@dataclass(frozen=True)
class GatewayStat:
    """Gateway-role statistics (``stat.gw``)."""

    oid: str = ""
    gw: str = ""
    lan_rx_bytes: FlexInt = _flex("lan-rx_bytes")
    lan_rx_packets: FlexInt = _flex("lan-rx_packets")
    lan_tx_bytes: FlexInt = _flex("lan-tx_bytes")
    lan_tx_packets: FlexInt = _flex("lan-tx_packets")
    wan_rx_bytes: FlexInt = _flex("wan-rx_bytes")
    wan_rx_dropped: FlexInt = _flex("wan-rx_dropped")
    wan_rx_packets: FlexInt = _flex("wan-rx_packets")
    wan_tx_bytes: FlexInt = _flex("wan-tx_bytes")
    wan_tx_packets: FlexInt = _flex("wan-tx_packets")


@dataclass(frozen=True)
class SwitchStat:
    """Switch-role statistics (``stat.sw``)."""

    oid: str = ""
    sw: str = ""
    bytes: FlexInt = _flex()
    rx_bytes: FlexInt = _flex()
    rx_crypts: FlexInt = _flex()
    rx_dropped: FlexInt = _flex()
    rx_errors: FlexInt = _flex()
    rx_frags: FlexInt = _flex()
    rx_packets: FlexInt = _flex()
    tx_bytes: FlexInt = _flex()
    tx_dropped: FlexInt = _flex()
    tx_errors: FlexInt = _flex()
    tx_packets: FlexInt = _flex()
    tx_retries: FlexInt = _flex()


@dataclass(frozen=True)
class Stat:
    """Both role blocks are ``None`` when the device is disabled."""

    gw: Optional[GatewayStat] = None
    sw: Optional[SwitchStat] = None


@dataclass(frozen=True)
class NetworkEntry:
    """One row of a device's ``network_table``."""

    id: str = _text("_id")
    attr_hidden_id: str = ""
    attr_no_delete: FlexBool = _flag()
    dhcp_relay_enabled: FlexBool = _flag()
    dhcpd_dns_enabled: FlexBool = _flag()
    dhcpd_enabled: FlexBool = _flag()
    dhcpd_gateway_enabled: FlexBool = _flag()
    dhcpd_start: str = ""
    dhcpd_stop: str = ""
    dhcpd_time_offset_enabled: FlexBool = _flag()
    domain_name: str = ""
    enabled: FlexBool = _flag()
    ip: str = ""
    ip_subnet: str = ""
    ipv6_interface_type: str = ""
    is_guest: FlexBool = _flag()
    is_nat: FlexBool = _flag()
    mac: str = ""
    name: str = ""
    networkgroup: str = ""
    num_sta: FlexInt = _flex()
    purpose: str = ""
    rx_bytes: FlexInt = _flex()
    rx_packets: FlexInt = _flex()
    site_id: str = ""
    tx_bytes: FlexInt = _flex()
    tx_packets: FlexInt = _flex()
    up: FlexBool = _flag()
    vlan_enabled: FlexBool = _flag()
    device: DeviceRef = field(default_factory=DeviceRef, metadata={"decode": False})


@dataclass(frozen=True)
class PortEntry:
    """One row of a device's ``port_table``."""

    aggregated_by: FlexBool = _flag()
    autoneg: FlexBool = _flag()
    bytes_r: FlexInt = _flex("bytes-r")
    dot1x_mode: str = ""
    dot1x_status: str = ""
    enable: FlexBool = _flag()
    flowctrl_rx: FlexBool = _flag()
    flowctrl_tx: FlexBool = _flag()
    full_duplex: FlexBool = _flag()
    is_uplink: FlexBool = _flag()
    jumbo: FlexBool = _flag()
    masked: FlexBool = _flag()
    media: str = ""
    name: str = ""
    op_mode: str = ""
    poe_caps: FlexInt = _flex()
    poe_class: str = ""
    poe_current: FlexInt = _flex()
    poe_enable: FlexBool = _flag()
    poe_good: FlexBool = _flag()
    poe_mode: str = ""
    poe_power: FlexInt = _flex()
    poe_voltage: FlexInt = _flex()
    port_idx: FlexInt = _flex()
    port_poe: FlexBool = _flag()
    portconf_id: str = ""
    rx_broadcast: FlexInt = _flex()
    rx_bytes: FlexInt = _flex()
    rx_bytes_r: FlexInt = _flex("rx_bytes-r")
    rx_dropped: FlexInt = _flex()
    rx_errors: FlexInt = _flex()
    rx_multicast: FlexInt = _flex()
    rx_packets: FlexInt = _flex()
    sfp_found: FlexBool = _flag()
    speed: FlexInt = _flex()
    stp_pathcost: FlexInt = _flex()
    stp_state: str = ""
    tx_broadcast: FlexInt = _flex()
    tx_bytes: FlexInt = _flex()
    tx_bytes_r: FlexInt = _flex("tx_bytes-r")
    tx_dropped: FlexInt = _flex()
    tx_errors: FlexInt = _flex()
    tx_multicast: FlexInt = _flex()
    tx_packets: FlexInt = _flex()
    up: FlexBool = _flag()
    device: DeviceRef = field(default_factory=DeviceRef, metadata={"decode": False})


@dataclass(frozen=True)
class UDM:
    """A UniFi Dream Machine: one unit reporting both gateway and switch roles."""

    id: str = _text("_id")
    mac: str = ""
    site_id: str = ""
    site_name: str = ""
    adopted: FlexBool = _flag()
    name: str = ""
    cfgversion: str = ""
    config_network: ConfigNetwork = field(default_factory=ConfigNetwork)
    connect_request_ip: str = ""
    connect_request_port: str = ""
    device_id: str = ""
    guest_token: str = ""
    inform_ip: str = ""
    known_cfgversion: str = ""
    model: str = ""
    serial: str = ""
    type: str = ""
    version: str = ""
    ip: str = ""
    license_state: str = ""
    usg_caps: FlexInt = _flex()
    speedtest_status_saved: FlexBool = _flag("speedtest-status-saved")
    locating: FlexBool = _flag()
    dot1x_portctrl_enabled: FlexBool = _flag()
    flowctrl_enabled: FlexBool = _flag()
    has_fan: FlexBool = _flag()
    has_temperature: FlexBool = _flag()
    jumboframe_enabled: FlexBool = _flag()
    overheating: FlexBool = _flag()
    stp_priority: str = ""
    stp_version: str = ""
    fan_level: FlexInt = _flex()
    general_temperature: FlexInt = _flex()
    bytes: FlexInt = _flex()
    last_seen: FlexInt = _flex()
    fw_caps: FlexInt = _flex()
    guest_num_sta: FlexInt = _flex("guest-num_sta")
    user_num_sta: FlexInt = _flex("user-num_sta")
    rx_bytes: FlexInt = _flex()
    tx_bytes: FlexInt = _flex()
    uptime: FlexInt = _flex()
    state: FlexInt = _flex()
    num_desktop: FlexInt = _flex()
    num_handheld: FlexInt = _flex()
    num_mobile: FlexInt = _flex()
    speedtest_status: SpeedtestStatus = field(
        default_factory=SpeedtestStatus, metadata={"json": "speedtest-status"}
    )
    wan1: Wan = field(default_factory=Wan)
    wan2: Wan = field(default_factory=Wan)
    sys_stats: SysStats = field(default_factory=SysStats)
    system_stats: SystemStats = field(
        default_factory=SystemStats, metadata={"json": "system-stats"}
    )
    uplink: Uplink = field(default_factory=Uplink)
    stat: Stat = field(default_factory=Stat)
    network_table: tuple[NetworkEntry, ...] = ()
    port_table: tuple[PortEntry, ...] = ()

    @property
    def ref(self) -> DeviceRef:
        """The by-value context handed to this device's sub-records."""
        return DeviceRef(
            id=self.id,
            name=self.name,
            mac=self.mac,
            site_id=self.site_id,
            site_name=self.site_name,
        )
