"""Translate between Policy and the HNS ``L4Proxy`` settings schema.

HNS carries the proxy port and protocol number as decimal strings. That is
part of its schema and must be kept exactly, even though both are integers.

Two decode failure modes are deliberately kept apart:

* a malformed *numeric string* inside an otherwise valid setting decodes to
  0, since HNS is trusted never to hand those back;
* a malformed *structure* (wrong kind, unparseable payload, wrong JSON types)
  raises SchemaError.
"""

from __future__ import annotations

import ipaddress
import json
import logging
import re
from typing import Any

from proxyctl.errors import SchemaError
from proxyctl.policy.models import (
    L4_PROXY,
    EndpointPolicyRecord,
    FiveTuple,
    IPAddress,
    Policy,
    Protocol,
    ProxyType,
    WireProxyPolicy,
)

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"[+-]?[0-9]+")

# Decoded values wrap to the width of their Policy field.
_PORT_MASK = 0xFFFF
_BYTE_MASK = 0xFF


def encode(policy: Policy) -> WireProxyPolicy:
    """Build the HNS setting for a policy. Callers must validate first."""
    # TCP is the only protocol the proxy driver supports.
    policy.protocol = Protocol.TCP

    return WireProxyPolicy(
        port=str(int(policy.proxy_port)),
        user_sid=policy.user_sid,
        compartment_id=policy.compartment_id,
        filter_tuple=FiveTuple(
            local_addresses=_format_ip(policy.local_addr),
            remote_addresses=_format_ip(policy.remote_addr),
            protocols=str(int(policy.protocol)),
            priority=policy.priority,
        ),
        proxy_type=ProxyType.WFP,
    )


def decode(wire: WireProxyPolicy) -> Policy:
    """Convert an HNS setting back into a Policy."""
    protocol_number = _parse_decimal(wire.filter_tuple.protocols, "Protocols") & _BYTE_MASK
    try:
        protocol: int = Protocol(protocol_number)
    except ValueError:
        protocol = protocol_number

    return Policy(
        proxy_port=_parse_decimal(wire.port, "Port") & _PORT_MASK,
        user_sid=wire.user_sid,
        compartment_id=wire.compartment_id,
        local_addr=_parse_ip(wire.filter_tuple.local_addresses),
        remote_addr=_parse_ip(wire.filter_tuple.remote_addresses),
        priority=wire.filter_tuple.priority & _BYTE_MASK,
        protocol=protocol,
    )


def to_store_envelope(wire: WireProxyPolicy) -> EndpointPolicyRecord:
    """Wrap a setting in the endpoint policy envelope HNS stores."""
    return EndpointPolicyRecord(type=L4_PROXY, settings=wire_to_dict(wire))


def from_envelope(record: EndpointPolicyRecord) -> WireProxyPolicy:
    """Unwrap an ``L4Proxy`` envelope, raising SchemaError if it is malformed."""
    if not record.is_proxy:
        raise SchemaError(f"not an {L4_PROXY} policy: {record.type!r}")

    settings = record.settings
    if isinstance(settings, (bytes, bytearray, str)):
        try:
            settings = json.loads(settings)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaError(f"{L4_PROXY} settings are not valid JSON: {e}") from e

    if not isinstance(settings, dict):
        raise SchemaError(
            f"{L4_PROXY} settings must be an object, got {type(settings).__name__}"
        )
    return wire_from_dict(settings)


# ---------------------------------------------------------------------------
# JSON mappings
# ---------------------------------------------------------------------------


def wire_to_dict(wire: WireProxyPolicy) -> dict[str, Any]:
    """Render a setting with HNS key names. No key is ever omitted."""
    return {
        "Port": wire.port,
        "UserSID": wire.user_sid,
        "CompartmentID": wire.compartment_id,
        "FilterTuple": {
            "LocalAddresses": wire.filter_tuple.local_addresses,
            "RemoteAddresses": wire.filter_tuple.remote_addresses,
            "Protocols": wire.filter_tuple.protocols,
            "Priority": wire.filter_tuple.priority,
        },
        "ProxyType": int(wire.proxy_type),
    }


def wire_from_dict(data: dict[str, Any]) -> WireProxyPolicy:
    """Parse an HNS setting. HNS drops empty fields, so missing keys are zero."""
    tuple_data = data.get("FilterTuple") or {}
    if not isinstance(tuple_data, dict):
        raise SchemaError("FilterTuple must be an object")

    proxy_type = _field(data, "ProxyType", int, int(ProxyType.WFP))
    try:
        proxy_type = ProxyType(proxy_type)
    except ValueError as e:
        raise SchemaError(f"unknown ProxyType {proxy_type}") from e

    return WireProxyPolicy(
        port=_field(data, "Port", str, ""),
        user_sid=_field(data, "UserSID", str, ""),
        compartment_id=_field(data, "CompartmentID", int, 0),
        filter_tuple=FiveTuple(
            local_addresses=_field(tuple_data, "LocalAddresses", str, ""),
            remote_addresses=_field(tuple_data, "RemoteAddresses", str, ""),
            protocols=_field(tuple_data, "Protocols", str, ""),
            priority=_field(tuple_data, "Priority", int, 0),
        ),
        proxy_type=proxy_type,
    )


def record_to_dict(record: EndpointPolicyRecord) -> dict[str, Any]:
    return {"Type": record.type, "Settings": record.settings}


def record_from_dict(data: dict[str, Any]) -> EndpointPolicyRecord:
    if not isinstance(data, dict) or not isinstance(data.get("Type"), str):
        raise SchemaError(f"malformed endpoint policy: {data!r}")
    return EndpointPolicyRecord(type=data["Type"], settings=data.get("Settings", {}))


def policy_to_dict(policy: Policy) -> dict[str, Any]:
    """Plain-JSON view of a Policy, used for ``list --json``."""
    return {
        "proxy_port": policy.proxy_port,
        "user_sid": policy.user_sid,
        "compartment_id": policy.compartment_id,
        "local_addr": _format_ip(policy.local_addr) or None,
        "remote_addr": _format_ip(policy.remote_addr) or None,
        "priority": policy.priority,
        "protocol": int(policy.protocol),
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass; HNS never sends booleans for these fields.
    if not isinstance(value, kind) or isinstance(value, bool):
        raise SchemaError(
            f"{key} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _parse_decimal(text: str, name: str) -> int:
    # int() alone would also take "8_000", " 80" and non-ASCII digits.
    if not _DECIMAL.fullmatch(text):
        logger.debug("Malformed %s value %r from HNS, using 0", name, text)
        return 0
    return int(text, 10)


def _format_ip(ip: IPAddress | None) -> str:
    if ip is None:
        return ""
    return str(ip)


def _parse_ip(text: str) -> IPAddress | None:
    if not text:
        return None
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        logger.debug("Unparseable address %r from HNS, treating as absent", text)
        return None
