"""Project decoded UDM records into InfluxDB-style series.

Every UDM yields, in this order::

    usg            gateway role (one)
    usw            switch role (one)
    usg_networks   one per ``network_table`` entry
    usw_ports      one per ``port_table`` entry

Tag and field keys are declared once in the registries below as
``key → attribute path``.  Dashboards query these exact keys, so a key
rename is a breaking change.  Tags always carry the textual form of a value
(``FlexInt.txt`` / ``FlexBool.txt``); fields carry the typed form.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from operator import attrgetter
from typing import Any, Callable, Iterator, Mapping, Protocol, Union

from unifi_poller.flex import FlexBool, FlexInt
from unifi_poller.models import UDM, GatewayStat, NetworkEntry, PortEntry, Stat, SwitchStat

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Any]
Registry = dict[str, Extractor]


class PointBuilder(Protocol):
    """Anything able to turn a series description into a backend point."""

    def build(
        self,
        name: str,
        tags: Mapping[str, str],
        fields: Mapping[str, Any],
        time: datetime,
    ) -> Any: ...


class ProjectionError(Exception):
    """The point builder rejected a series.

    ``points`` holds everything built before the failure so the caller can
    still ship it.
    """

    def __init__(self, series: str, points: list[Any]) -> None:
        self.series = series
        self.points = points
        super().__init__(f"point builder rejected series {series!r}")


@dataclass(frozen=True)
class Series:
    name: str
    tags: dict[str, str]
    fields: dict[str, Any]
    time: datetime


# ── registry helpers ────────────────────────────────────────────────


def _registry(spec: Mapping[str, Union[str, Extractor]]) -> Registry:
    """Compile dotted attribute paths into getters."""
    return {
        key: attrgetter(src) if isinstance(src, str) else src
        for key, src in spec.items()
    }


def _tag(value: Any) -> str:
    if isinstance(value, (FlexInt, FlexBool)):
        return value.txt
    return value if isinstance(value, str) else str(value)


def _field(value: Any) -> Any:
    if isinstance(value, (FlexInt, FlexBool)):
        return value.val
    return value


def _wan(prefix: str) -> dict[str, str]:
    keys = {
        "bytes-r": "bytes_r",
        "enable": "enable",
        "full_duplex": "full_duplex",
        "gateway": "gateway",
        "ifname": "ifname",
        "ip": "ip",
        "mac": "mac",
        "max_speed": "max_speed",
        "name": "name",
        "netmask": "netmask",
        "rx_bytes": "rx_bytes",
        "rx_bytes-r": "rx_bytes_r",
        "rx_dropped": "rx_dropped",
        "rx_errors": "rx_errors",
        "rx_multicast": "rx_multicast",
        "rx_packets": "rx_packets",
        "type": "type",
        "speed": "speed",
        "up": "up",
        "tx_bytes": "tx_bytes",
        "tx_bytes-r": "tx_bytes_r",
        "tx_dropped": "tx_dropped",
        "tx_errors": "tx_errors",
        "tx_packets": "tx_packets",
    }
    return {f"{prefix}_{key}": f"{prefix}.{attr}" for key, attr in keys.items()}


# ── registries ──────────────────────────────────────────────────────

_DEVICE_TAGS = {
    "id": "id",
    "mac": "mac",
    "site_id": "site_id",
    "site_name": "site_name",
    "adopted": "adopted",
    "name": "name",
    "cfgversion": "cfgversion",
    "config_network_ip": "config_network.ip",
    "config_network_type": "config_network.type",
    "device_id": "device_id",
    "inform_ip": "inform_ip",
    "known_cfgversion": "known_cfgversion",
    "model": "model",
    "serial": "serial",
    "type": "type",
}

_DEVICE_FIELDS = {
    "fw_caps": "fw_caps",
    "guest-num_sta": "guest_num_sta",
    "ip": "ip",
    "bytes": "bytes",
    "last_seen": "last_seen",
    "license_state": "license_state",
    "rx_bytes": "rx_bytes",
    "tx_bytes": "tx_bytes",
    "uptime": "uptime",
    "state": "state",
    "user-num_sta": "user_num_sta",
    "version": "version",
    "loadavg_1": "sys_stats.loadavg_1",
    "loadavg_5": "sys_stats.loadavg_5",
    "loadavg_15": "sys_stats.loadavg_15",
    "mem_buffer": "sys_stats.mem_buffer",
    "mem_used": "sys_stats.mem_used",
    "mem_total": "sys_stats.mem_total",
    "cpu": "system_stats.cpu",
    "mem": "system_stats.mem",
    "system_uptime": "system_stats.uptime",
}

USG_TAGS = _registry({
    **_DEVICE_TAGS,
    "device_oid": "stat.gw.oid",
    "connect_request_ip": "connect_request_ip",
    "connect_request_port": "connect_request_port",
    "guest_token": "guest_token",
    "usg_caps": "usg_caps",
    "speedtest-status-saved": "speedtest_status_saved",
    "wan1_up": "wan1.up",
    "wan2_up": "wan2.up",
})

USG_FIELDS = _registry({
    **_DEVICE_FIELDS,
    "num_desktop": "num_desktop",
    "num_handheld": "num_handheld",
    "num_mobile": "num_mobile",
    "speedtest-status_latency": "speedtest_status.latency",
    "speedtest-status_rundate": "speedtest_status.rundate",
    "speedtest-status_runtime": "speedtest_status.runtime",
    "speedtest-status_download": "speedtest_status.status_download",
    "speedtest-status_ping": "speedtest_status.status_ping",
    "speedtest-status_summary": "speedtest_status.status_summary",
    "speedtest-status_upload": "speedtest_status.status_upload",
    "speedtest-status_xput_download": "speedtest_status.xput_download",
    "speedtest-status_xput_upload": "speedtest_status.xput_upload",
    "config_network_wan_type": "config_network.type",
    **_wan("wan1"),
    **_wan("wan2"),
    "gw": "stat.gw.gw",
    "lan-rx_bytes": "stat.gw.lan_rx_bytes",
    "lan-rx_packets": "stat.gw.lan_rx_packets",
    "lan-tx_bytes": "stat.gw.lan_tx_bytes",
    "lan-tx_packets": "stat.gw.lan_tx_packets",
    "wan-rx_bytes": "stat.gw.wan_rx_bytes",
    "wan-rx_dropped": "stat.gw.wan_rx_dropped",
    "wan-rx_packets": "stat.gw.wan_rx_packets",
    "wan-tx_bytes": "stat.gw.wan_tx_bytes",
    "wan-tx_packets": "stat.gw.wan_tx_packets",
    "uplink_name": "uplink.name",
    "uplink_latency": "uplink.latency",
    "uplink_speed": "uplink.speed",
    "uplink_num_ports": "uplink.num_port",
    "uplink_max_speed": "uplink.max_speed",
})

USW_TAGS = _registry({
    **_DEVICE_TAGS,
    "device_oid": "stat.sw.oid",
    "locating": "locating",
    "dot1x_portctrl_enabled": "dot1x_portctrl_enabled",
    "flowctrl_enabled": "flowctrl_enabled",
    "has_fan": "has_fan",
    "has_temperature": "has_temperature",
    "jumboframe_enabled": "jumboframe_enabled",
    "stp_priority": "stp_priority",
    "stp_version": "stp_version",
})

USW_FIELDS = _registry({
    **_DEVICE_FIELDS,
    "fan_level": "fan_level",
    "general_temperature": "general_temperature",
    "overheating": "overheating",
    "stat_bytes": "stat.sw.bytes",
    "stat_rx_bytes": "stat.sw.rx_bytes",
    "stat_rx_crypts": "stat.sw.rx_crypts",
    "stat_rx_dropped": "stat.sw.rx_dropped",
    "stat_rx_errors": "stat.sw.rx_errors",
    "stat_rx_frags": "stat.sw.rx_frags",
    "stat_rx_packets": "stat.sw.rx_packets",
    "stat_tx_bytes": "stat.sw.tx_bytes",
    "stat_tx_dropped": "stat.sw.tx_dropped",
    "stat_tx_errors": "stat.sw.tx_errors",
    "stat_tx_packets": "stat.sw.tx_packets",
    "stat_tx_retries": "stat.sw.tx_retries",
    "uplink_depth": lambda udm: "0",
})

NETWORK_TAGS = _registry({
    "device_name": "device.name",
    "device_id": "device.id",
    "device_mac": "device.mac",
    "site_name": "device.site_name",
    "up": "up",
    "dhcpd_dns_enabled": "dhcpd_dns_enabled",
    "dhcpd_enabled": "dhcpd_enabled",
    "dhcpd_time_offset_enabled": "dhcpd_time_offset_enabled",
    # sic
    "dhcp_relay_enabledy": "dhcp_relay_enabled",
    "dhcpd_gateway_enabled": "dhcpd_gateway_enabled",
    "enabled": "enabled",
    "vlan_enabled": "vlan_enabled",
    "attr_no_delete": "attr_no_delete",
    "is_guest": "is_guest",
    "is_nat": "is_nat",
    "networkgroup": "networkgroup",
    "site_id": "site_id",
})

NETWORK_FIELDS = _registry({
    "domain_name": "domain_name",
    "dhcpd_start": "dhcpd_start",
    "dhcpd_stop": "dhcpd_stop",
    "ip": "ip",
    "ip_subnet": "ip_subnet",
    "mac": "mac",
    "name": "name",
    "num_sta": "num_sta",
    "purpose": "purpose",
    "rx_bytes": "rx_bytes",
    "rx_packets": "rx_packets",
    "tx_bytes": "tx_bytes",
    "tx_packets": "tx_packets",
    "ipv6_interface_type": "ipv6_interface_type",
    "attr_hidden_id": "attr_hidden_id",
})

PORT_TAGS = _registry({
    "site_id": "device.site_id",
    "site_name": "device.site_name",
    "device_name": "device.name",
    "name": "name",
    "enable": "enable",
    "is_uplink": "is_uplink",
    "up": "up",
    "portconf_id": "portconf_id",
    "dot1x_mode": "dot1x_mode",
    "dot1x_status": "dot1x_status",
    "stp_state": "stp_state",
    "sfp_found": "sfp_found",
    "op_mode": "op_mode",
    "poe_mode": "poe_mode",
    "port_poe": "port_poe",
    "port_idx": "port_idx",
    "port_id": lambda port: f"{port.device.name} Port {port.port_idx.txt}",
    "poe_enable": "poe_enable",
    "flowctrl_rx": "flowctrl_rx",
    "flowctrl_tx": "flowctrl_tx",
    "autoneg": "autoneg",
    "full_duplex": "full_duplex",
    "jumbo": "jumbo",
    "masked": "masked",
    "poe_good": "poe_good",
    "media": "media",
    "poe_class": "poe_class",
    "poe_caps": "poe_caps",
    "aggregated_by": "aggregated_by",
})

PORT_FIELDS = _registry({
    "dbytes_r": "bytes_r",
    "rx_broadcast": "rx_broadcast",
    "rx_bytes": "rx_bytes",
    "rx_bytes-r": "rx_bytes_r",
    "rx_dropped": "rx_dropped",
    "rx_errors": "rx_errors",
    "rx_multicast": "rx_multicast",
    "rx_packets": "rx_packets",
    "speed": "speed",
    "stp_pathcost": "stp_pathcost",
    "tx_broadcast": "tx_broadcast",
    "tx_bytes": "tx_bytes",
    "tx_bytes-r": "tx_bytes_r",
    "tx_dropped": "tx_dropped",
    "tx_errors": "tx_errors",
    "tx_multicast": "tx_multicast",
    "tx_packets": "tx_packets",
    "poe_current": "poe_current",
    "poe_power": "poe_power",
    "poe_voltage": "poe_voltage",
    "full_duplex": "full_duplex",
})


# ── projector ───────────────────────────────────────────────────────


class PointProjector:
    """Flatten UDM records into series and hand them to a :class:`PointBuilder`."""

    def __init__(self, builder: PointBuilder) -> None:
        self._builder = builder

    def series(self, udm: UDM, now: datetime) -> Iterator[Series]:
        """Lazily yield every series for *udm*, in emission order."""
        if udm.stat.gw is None or udm.stat.sw is None:
            # Disabled devices lack stats.
            udm = dataclasses.replace(
                udm,
                stat=Stat(gw=udm.stat.gw or GatewayStat(), sw=udm.stat.sw or SwitchStat()),
            )

        yield _series("usg", USG_TAGS, USG_FIELDS, udm, now)
        yield _series("usw", USW_TAGS, USW_FIELDS, udm, now)
        for network in udm.network_table:
            yield _series("usg_networks", NETWORK_TAGS, NETWORK_FIELDS, network, now)
        for port in udm.port_table:
            yield _series("usw_ports", PORT_TAGS, PORT_FIELDS, port, now)

    def points(self, udm: UDM, now: datetime) -> list[Any]:
        """Build a backend point for every series of *udm*.

        Raises
        ------
        ProjectionError
            On the first series the builder rejects; no further series are
            attempted.
        """
        points: list[Any] = []
        for s in self.series(udm, now):
            try:
                points.append(self._builder.build(s.name, s.tags, s.fields, s.time))
            except Exception as exc:
                logger.debug("Builder rejected %s for device %s: %s", s.name, udm.mac, exc)
                raise ProjectionError(s.name, points) from exc
        return points


def _series(
    name: str,
    tags: Registry,
    fields: Registry,
    record: UDM | NetworkEntry | PortEntry,
    now: datetime,
) -> Series:
    return Series(
        name=name,
        tags={key: _tag(get(record)) for key, get in tags.items()},
        fields={key: _field(get(record)) for key, get in fields.items()},
        time=now,
    )
