"""Load Policy objects from YAML files."""

from __future__ import annotations

import ipaddress
from pathlib import Path
from typing import Any

import yaml

from proxyctl.errors import ValidationError
from proxyctl.policy.models import IPAddress, Policy

# (key, upper bound) for the integer fields; lower bound is always 0.
_INT_FIELDS = {
    "port": 65535,
    "compartment": 0xFFFFFFFF,
    "priority": 255,
}


def load_policies(path: str | Path) -> list[Policy]:
    """Load one or more policies from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_policies_from_string(text)


def load_policies_from_string(text: str) -> list[Policy]:
    """Parse a YAML string holding a policy mapping or a ``policies:`` list."""
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValidationError("Policy YAML must be a mapping")

    if "policies" in data:
        entries = data["policies"]
        if not isinstance(entries, list):
            raise ValidationError("'policies' must be a list")
    else:
        entries = [data]

    return [_build_policy(entry) for entry in entries]


def _build_policy(data: Any) -> Policy:
    if not isinstance(data, dict):
        raise ValidationError("Each policy must be a mapping")
    if "port" not in data:
        raise ValidationError("Policy is missing required key 'port'")

    return Policy(
        proxy_port=_parse_int(data, "port"),
        user_sid=_parse_sid(data.get("usersid")),
        compartment_id=_parse_int(data, "compartment"),
        local_addr=_parse_ip(data.get("localaddr")),
        remote_addr=_parse_ip(data.get("remoteaddr")),
        priority=_parse_int(data, "priority"),
    )


def _parse_int(data: dict, key: str) -> int:
    raw = data.get(key, 0)
    if isinstance(raw, bool):
        raise ValidationError(f"'{key}' must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{key}' must be an integer, got {raw!r}") from e
    if not 0 <= value <= _INT_FIELDS[key]:
        raise ValidationError(f"'{key}' out of range: {value}")
    return value


def _parse_sid(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise ValidationError(f"'usersid' must be a string, got {raw!r}")
    return raw


def _parse_ip(raw: Any) -> IPAddress | None:
    if raw in (None, ""):
        return None
    try:
        return ipaddress.ip_address(str(raw))
    except ValueError as e:
        raise ValidationError(str(e)) from e
