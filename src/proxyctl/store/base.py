"""EndpointPolicyStore protocol and the request shapes HNS understands."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Protocol

from proxyctl.policy.codec import record_from_dict, record_to_dict
from proxyctl.policy.models import EndpointPolicyRecord


class RequestType(enum.Enum):
    ADD = "Add"
    REMOVE = "Remove"
    UPDATE = "Update"
    REFRESH = "Refresh"


class ResourceType(enum.Enum):
    POLICY = "Policy"
    PORT = "Port"


@dataclass
class EndpointDescriptor:
    """An HNS endpoint and the policies currently applied to it."""

    id: str
    policies: list[EndpointPolicyRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EndpointDescriptor:
        return cls(
            id=data.get("ID", ""),
            policies=[record_from_dict(p) for p in data.get("Policies") or []],
        )


@dataclass
class PolicyEndpointRequest:
    policies: list[EndpointPolicyRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"Policies": [record_to_dict(p) for p in self.policies]}


@dataclass
class ModifyEndpointSettingRequest:
    request_type: RequestType
    settings: PolicyEndpointRequest
    resource_type: ResourceType = ResourceType.POLICY

    def to_dict(self) -> dict[str, Any]:
        return {
            "ResourceType": self.resource_type.value,
            "RequestType": self.request_type.value,
            "Settings": self.settings.to_dict(),
        }


class EndpointPolicyStore(Protocol):
    """Where endpoint policies live. Implementations raise NotFoundError
    for unknown endpoints and StoreError for anything else."""

    def get_endpoint(self, endpoint_id: str) -> EndpointDescriptor:
        ...

    def apply_policy(
        self,
        endpoint_id: str,
        request_type: RequestType,
        policies: list[EndpointPolicyRecord],
    ) -> None:
        ...

    def modify_settings(
        self, endpoint_id: str, request: ModifyEndpointSettingRequest
    ) -> None:
        ...
