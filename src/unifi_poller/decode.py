"""Decode controller JSON documents into typed records.

Decoding pipeline::

    raw bytes
      │
      ├─ not JSON                    → DecodeError(kind="invalid JSON")
      ├─ envelope {"meta", "data"}   → unwrap ``data``
      └─ each device object
           ├─ field by field against the dataclass schema
           │    └─ first bad field   → DecodeError(field=<dotted path>)
           └─ sub-records get a by-value copy of the parent identity

Unknown keys are ignored and missing keys keep their zero value.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import types
import typing
from typing import Any, Union

import orjson

from unifi_poller.flex import DecodeError, FlexBool, FlexInt, json_kind
from unifi_poller.models import UDM, IPGeo

logger = logging.getLogger(__name__)

#: Device ``type`` values decoded by :func:`decode_devices`.
DEVICE_TYPES = ("udm",)

_NoneType = type(None)


def decode_record(cls: type, value: Any, path: str = "") -> Any:
    """Decode an already-parsed JSON *value* into the dataclass *cls*.

    ``null`` and ``[]`` yield the zero record.  Any other non-object value
    raises :class:`DecodeError`.
    """
    if value is None or (isinstance(value, list) and not value):
        return cls()
    if not isinstance(value, dict):
        raise DecodeError(path, json_kind(value))

    hints = _type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.metadata.get("decode", True):
            continue
        key = f.metadata.get("json", f.name)
        if key not in value:
            continue
        kwargs[f.name] = _decode_value(hints[f.name], value[key], _join(path, key))
    return cls(**kwargs)


def decode_device(raw: str | bytes) -> UDM:
    """Decode a single device object."""
    doc = _loads(raw)
    if not isinstance(doc, dict):
        raise DecodeError("", json_kind(doc))
    return _device(doc, "")


def decode_devices(raw: str | bytes, site_name: str = "") -> list[UDM]:
    """Decode a ``stat/device`` response into UDM records.

    Parameters
    ----------
    raw:
        Response body: the controller envelope, a bare array of devices, or
        one device object.
    site_name:
        Stamped onto devices whose payload carries no ``site_name``.

    Returns
    -------
    list[UDM]
        Devices whose ``type`` is in :data:`DEVICE_TYPES`, in payload order.
    """
    doc = _loads(raw)
    prefix = ""
    if isinstance(doc, dict) and "data" in doc:
        doc = doc["data"]
        prefix = "data"
    if isinstance(doc, dict):
        items = [doc]
    elif isinstance(doc, list):
        items = doc
    else:
        raise DecodeError(prefix, json_kind(doc))

    devices: list[UDM] = []
    for idx, item in enumerate(items):
        path = f"{prefix}[{idx}]" if prefix or isinstance(doc, list) else ""
        if not isinstance(item, dict):
            raise DecodeError(path, json_kind(item))
        if item.get("type") not in DEVICE_TYPES:
            logger.debug("Skipping device %s of type %s", item.get("mac"), item.get("type"))
            continue
        if site_name and not item.get("site_name"):
            item = {**item, "site_name": site_name}
        devices.append(_device(item, path))
    return devices


def decode_geo(raw: str | bytes) -> IPGeo:
    """Decode a geo-IP lookup; ``[]`` is a valid "no data" answer."""
    return decode_record(IPGeo, _loads(raw))


# ── helpers ─────────────────────────────────────────────────────────


def _loads(raw: str | bytes) -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise DecodeError("", "invalid JSON") from exc


def _device(obj: dict, path: str) -> UDM:
    udm: UDM = decode_record(UDM, obj, path)
    ref = udm.ref
    return dataclasses.replace(
        udm,
        network_table=tuple(dataclasses.replace(n, device=ref) for n in udm.network_table),
        port_table=tuple(dataclasses.replace(p, device=ref) for p in udm.port_table),
    )


@functools.lru_cache(maxsize=None)
def _type_hints(cls: type) -> dict[str, Any]:
    return typing.get_type_hints(cls)


def _decode_value(tp: Any, value: Any, path: str) -> Any:
    if tp is FlexInt:
        return FlexInt.decode(value, path)
    if tp is FlexBool:
        return FlexBool.decode(value, path)

    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        if value is None:
            return None
        inner = [a for a in typing.get_args(tp) if a is not _NoneType]
        return _decode_value(inner[0], value, path)
    if origin is tuple:
        if value is None:
            return ()
        if not isinstance(value, list):
            raise DecodeError(path, json_kind(value))
        item_tp = typing.get_args(tp)[0]
        return tuple(
            _decode_value(item_tp, item, f"{path}[{idx}]") for idx, item in enumerate(value)
        )
    if dataclasses.is_dataclass(tp):
        return decode_record(tp, value, path)

    if tp is str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
    elif tp is bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
    elif tp is int:
        if value is None:
            return 0
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif tp is float:
        if value is None:
            return 0.0
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    else:
        raise TypeError(f"unsupported schema type {tp!r} at {path}")
    raise DecodeError(path, json_kind(value))


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key
