"""Caller-facing operations: add, list and clear proxy policies, and look up
the endpoint a container is attached to."""

from __future__ import annotations

import logging

from proxyctl.config import ProxyctlConfig
from proxyctl.hns import resolver
from proxyctl.policy import codec
from proxyctl.policy.models import EndpointPolicyRecord, Policy
from proxyctl.policy.validator import validate_policy
from proxyctl.store.base import (
    EndpointPolicyStore,
    ModifyEndpointSettingRequest,
    PolicyEndpointRequest,
    RequestType,
)

logger = logging.getLogger(__name__)


def add_policy(store: EndpointPolicyStore, endpoint_id: str, policy: Policy) -> None:
    """Add a layer-4 proxy policy to an HNS endpoint.

    The policy is validated before the store is touched. ``policy.protocol``
    is reset to TCP.
    """
    validate_policy(policy)
    record = codec.to_store_envelope(codec.encode(policy))

    endpoint = store.get_endpoint(endpoint_id)
    store.apply_policy(endpoint.id or endpoint_id, RequestType.ADD, [record])
    logger.info("Added proxy policy on port %d to endpoint %s", policy.proxy_port, endpoint_id)


def list_policies(store: EndpointPolicyStore, endpoint_id: str) -> list[Policy]:
    """Return the proxy policies currently active on an endpoint."""
    return [
        codec.decode(codec.from_envelope(record))
        for record in _proxy_records(store, endpoint_id)
    ]


def clear_policies(store: EndpointPolicyStore, endpoint_id: str) -> int:
    """Remove every proxy policy from an endpoint and return how many.

    This lists then removes, with no locking. A policy another caller adds
    after the list survives; one another caller removes in between makes the
    store reject the request.
    """
    records = _proxy_records(store, endpoint_id)
    request = ModifyEndpointSettingRequest(
        request_type=RequestType.REMOVE,
        settings=PolicyEndpointRequest(policies=records),
    )
    store.modify_settings(endpoint_id, request)
    logger.info("Removed %d proxy policies from endpoint %s", len(records), endpoint_id)
    return len(records)


def get_endpoint_from_container(
    container_id: str, config: ProxyctlConfig | None = None
) -> str:
    """Return the ID of the HNS endpoint a container is attached to."""
    return resolver.get_endpoint_from_container(container_id, config)


def _proxy_records(
    store: EndpointPolicyStore, endpoint_id: str
) -> list[EndpointPolicyRecord]:
    endpoint = store.get_endpoint(endpoint_id)
    return [record for record in endpoint.policies if record.is_proxy]
