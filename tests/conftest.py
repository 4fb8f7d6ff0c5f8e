"""Shared test fixtures."""

from __future__ import annotations

import ipaddress
from pathlib import Path

import pytest

from proxyctl.policy import codec
from proxyctl.policy.models import EndpointPolicyRecord, Policy
from proxyctl.store.memory import InMemoryEndpointStore

ENDPOINT_ID = "5e7c9a44-2b1d-4f4e-8a77-0b2d9c6e1f22"


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def hnsdiag_output(fixtures_dir: Path) -> bytes:
    return (fixtures_dir / "hnsdiag_endpoints.txt").read_bytes()


@pytest.fixture
def full_policy() -> Policy:
    return Policy(
        proxy_port=15001,
        user_sid="S-1-5-18",
        compartment_id=3,
        local_addr=ipaddress.ip_address("10.0.0.4"),
        remote_addr=ipaddress.ip_address("fd00::1"),
        priority=7,
    )


@pytest.fixture
def store() -> InMemoryEndpointStore:
    store = InMemoryEndpointStore()
    store.add_endpoint(ENDPOINT_ID)
    return store


@pytest.fixture
def acl_record() -> EndpointPolicyRecord:
    return EndpointPolicyRecord(
        type="ACL",
        settings={"Action": "Block", "Direction": "Out", "Priority": 200},
    )


@pytest.fixture
def populated_store(acl_record: EndpointPolicyRecord) -> InMemoryEndpointStore:
    """An endpoint with three proxy policies and one ACL policy."""
    records = [
        codec.to_store_envelope(codec.encode(Policy(proxy_port=port)))
        for port in (8000, 8001, 8002)
    ]
    records.insert(1, acl_record)
    store = InMemoryEndpointStore()
    store.add_endpoint(ENDPOINT_ID, records)
    return store
