"""Tests for the HNS store's platform-independent parts."""

from __future__ import annotations

import json
import sys
import uuid
from unittest.mock import patch

import pytest

from proxyctl.errors import NotFoundError, StoreError
from proxyctl.policy.models import EndpointPolicyRecord
from proxyctl.store.base import EndpointDescriptor, RequestType
from proxyctl.store.hcn import GUID, HcnEndpointStore, _check

ENDPOINT_ID = "5e7c9a44-2b1d-4f4e-8a77-0b2d9c6e1f22"


def test_guid_layout():
    guid = GUID.from_string(ENDPOINT_ID)
    assert guid.Data1 == 0x5E7C9A44
    assert guid.Data2 == 0x2B1D
    assert guid.Data3 == 0x4F4E
    assert bytes(guid.Data4) == uuid.UUID(ENDPOINT_ID).bytes[8:]


def test_guid_rejects_garbage():
    with pytest.raises(ValueError):
        GUID.from_string("not-a-guid")


def test_check_success():
    _check(0, "", "open endpoint")


def test_check_not_found():
    with pytest.raises(NotFoundError, match="0x80070490"):
        _check(-2147023728, '{"Error": "Element not found."}', "open endpoint")


def test_check_other_failure():
    with pytest.raises(StoreError, match="0x80004005.*Unspecified"):
        _check(-2147467259, "Unspecified error", "modify endpoint")


def test_invalid_endpoint_id_is_not_found():
    with pytest.raises(NotFoundError, match="not a GUID"):
        HcnEndpointStore().get_endpoint("ep1")


@pytest.mark.skipif(sys.platform == "win32", reason="checks the non-Windows error")
def test_unavailable_off_windows():
    with pytest.raises(StoreError, match="only available on Windows"):
        HcnEndpointStore().get_endpoint(ENDPOINT_ID)


def test_get_endpoint_parses_properties():
    properties = json.dumps(
        {
            "ID": ENDPOINT_ID,
            "Policies": [{"Type": "ACL", "Settings": {"Action": "Block"}}],
        }
    )
    store = HcnEndpointStore()
    with patch.object(HcnEndpointStore, "_with_endpoint", return_value=properties):
        endpoint = store.get_endpoint(ENDPOINT_ID)
    assert endpoint == EndpointDescriptor(
        id=ENDPOINT_ID,
        policies=[EndpointPolicyRecord(type="ACL", settings={"Action": "Block"})],
    )


def test_get_endpoint_invalid_json():
    with patch.object(HcnEndpointStore, "_with_endpoint", return_value="{"):
        with pytest.raises(StoreError, match="invalid endpoint JSON"):
            HcnEndpointStore().get_endpoint(ENDPOINT_ID)


def test_apply_policy_sends_modify_request():
    store = HcnEndpointStore()
    record = EndpointPolicyRecord(type="L4Proxy", settings={"Port": "8000"})
    with (
        patch.object(HcnEndpointStore, "_with_endpoint") as mock_with,
        patch.object(HcnEndpointStore, "_modify") as mock_modify,
    ):
        store.apply_policy(ENDPOINT_ID, RequestType.ADD, [record])
        endpoint_id, fn = mock_with.call_args.args
        fn("handle")

    assert endpoint_id == ENDPOINT_ID
    handle, settings = mock_modify.call_args.args
    assert handle == "handle"
    assert json.loads(settings) == {
        "ResourceType": "Policy",
        "RequestType": "Add",
        "Settings": {"Policies": [{"Type": "L4Proxy", "Settings": {"Port": "8000"}}]},
    }
