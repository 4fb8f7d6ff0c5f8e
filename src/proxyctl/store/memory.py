"""In-process endpoint store for tests and dry runs."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable

from proxyctl.errors import NotFoundError, StoreError
from proxyctl.policy.models import EndpointPolicyRecord
from proxyctl.store.base import (
    EndpointDescriptor,
    ModifyEndpointSettingRequest,
    PolicyEndpointRequest,
    RequestType,
    ResourceType,
)

logger = logging.getLogger(__name__)


class InMemoryEndpointStore:
    """Keeps endpoint policies in a dict, behaving like HNS for add/remove."""

    def __init__(self) -> None:
        self._endpoints: dict[str, list[EndpointPolicyRecord]] = {}

    def add_endpoint(
        self, endpoint_id: str, policies: Iterable[EndpointPolicyRecord] = ()
    ) -> None:
        self._endpoints[endpoint_id] = list(policies)

    def get_endpoint(self, endpoint_id: str) -> EndpointDescriptor:
        policies = self._lookup(endpoint_id)
        return EndpointDescriptor(id=endpoint_id, policies=copy.deepcopy(policies))

    def apply_policy(
        self,
        endpoint_id: str,
        request_type: RequestType,
        policies: list[EndpointPolicyRecord],
    ) -> None:
        self.modify_settings(
            endpoint_id,
            ModifyEndpointSettingRequest(
                request_type=request_type,
                settings=PolicyEndpointRequest(policies=policies),
            ),
        )

    def modify_settings(
        self, endpoint_id: str, request: ModifyEndpointSettingRequest
    ) -> None:
        current = self._lookup(endpoint_id)
        if request.resource_type != ResourceType.POLICY:
            raise StoreError(f"unsupported resource type {request.resource_type.value}")

        requested = request.settings.policies
        if request.request_type == RequestType.ADD:
            current.extend(copy.deepcopy(requested))
        elif request.request_type == RequestType.REMOVE:
            # All or nothing: a rejected request leaves the endpoint unchanged.
            remaining = list(current)
            for record in requested:
                try:
                    remaining.remove(record)
                except ValueError:
                    raise StoreError(
                        f"policy {record.type} not present on endpoint {endpoint_id}"
                    ) from None
            current[:] = remaining
        else:
            raise StoreError(f"unsupported request type {request.request_type.value}")

        logger.debug(
            "%s %d policies on endpoint %s",
            request.request_type.value,
            len(requested),
            endpoint_id,
        )

    def _lookup(self, endpoint_id: str) -> list[EndpointPolicyRecord]:
        try:
            return self._endpoints[endpoint_id]
        except KeyError:
            raise NotFoundError(f"endpoint {endpoint_id} not found") from None
