"""Policy data models — the caller-facing policy and its HNS wire shapes."""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass, field
from typing import Any, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# SID of the "Local System" account. Sidecar proxies usually run under it and
# pass it as user_sid so the proxy's own traffic is not redirected back to it.
LOCAL_SYSTEM_SID = "S-1-5-18"

L4_PROXY = "L4Proxy"


class Protocol(enum.IntEnum):
    """IANA protocol numbers accepted by the proxy driver."""

    TCP = 6


class ProxyType(enum.IntEnum):
    """Which HNS proxy backend handles the policy."""

    VFP = 0
    WFP = 1


@dataclass
class Policy:
    """A layer-4 proxy policy and the traffic it applies to.

    Only ``proxy_port`` is required. ``protocol`` is always reset to TCP
    before the policy is sent to HNS.
    """

    proxy_port: int
    user_sid: str = ""
    compartment_id: int = 0
    local_addr: IPAddress | None = None
    remote_addr: IPAddress | None = None
    priority: int = 0
    protocol: int = Protocol.TCP


@dataclass
class FiveTuple:
    """HNS filter tuple. Every field is always serialized."""

    local_addresses: str = ""
    remote_addresses: str = ""
    protocols: str = ""
    priority: int = 0


@dataclass
class WireProxyPolicy:
    """An ``L4ProxyPolicySetting`` as HNS expects it.

    Port and protocol are decimal strings on the wire.
    """

    port: str = ""
    user_sid: str = ""
    compartment_id: int = 0
    filter_tuple: FiveTuple = field(default_factory=FiveTuple)
    proxy_type: ProxyType = ProxyType.WFP


@dataclass
class EndpointPolicyRecord:
    """A policy as stored on an endpoint: a kind tag plus opaque settings."""

    type: str
    settings: Any = field(default_factory=dict)

    @property
    def is_proxy(self) -> bool:
        return self.type == L4_PROXY
