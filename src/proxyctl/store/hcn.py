"""Windows HNS endpoint store — the HCN JSON API in computenetwork.dll.

Every call opens the endpoint, does one query or modify, and closes it
again. Nothing is retried.
"""

from __future__ import annotations

import ctypes
import json
import logging
import sys
import uuid
from collections.abc import Callable
from typing import Any

from proxyctl.errors import NotFoundError, StoreError
from proxyctl.policy.models import EndpointPolicyRecord
from proxyctl.store.base import (
    EndpointDescriptor,
    ModifyEndpointSettingRequest,
    PolicyEndpointRequest,
    RequestType,
)

logger = logging.getLogger(__name__)

# HRESULT_FROM_WIN32(ERROR_NOT_FOUND)
_E_NOT_FOUND = 0x80070490

_QUERY = json.dumps({"SchemaVersion": {"Major": 2, "Minor": 0}, "Flags": 0})


class GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", ctypes.c_uint32),
        ("Data2", ctypes.c_uint16),
        ("Data3", ctypes.c_uint16),
        ("Data4", ctypes.c_uint8 * 8),
    ]

    @classmethod
    def from_string(cls, text: str) -> GUID:
        """Parse an endpoint ID. Raises ValueError if it is not a GUID."""
        guid = cls()
        ctypes.memmove(ctypes.byref(guid), uuid.UUID(text).bytes_le, ctypes.sizeof(guid))
        return guid


class _HcnApi:
    """Thin ctypes bindings, loaded on first use."""

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise StoreError("the HNS store is only available on Windows")
        try:
            hcn = ctypes.WinDLL("computenetwork.dll")
            ole32 = ctypes.WinDLL("ole32.dll")
        except OSError as e:
            raise StoreError(f"could not load computenetwork.dll: {e}") from e

        out_str = ctypes.POINTER(ctypes.c_void_p)

        self.open_endpoint = hcn.HcnOpenEndpoint
        self.open_endpoint.argtypes = [ctypes.POINTER(GUID), ctypes.POINTER(ctypes.c_void_p), out_str]
        self.open_endpoint.restype = ctypes.c_long

        self.query_properties = hcn.HcnQueryEndpointProperties
        self.query_properties.argtypes = [ctypes.c_void_p, ctypes.c_wchar_p, out_str, out_str]
        self.query_properties.restype = ctypes.c_long

        self.modify_endpoint = hcn.HcnModifyEndpoint
        self.modify_endpoint.argtypes = [ctypes.c_void_p, ctypes.c_wchar_p, out_str]
        self.modify_endpoint.restype = ctypes.c_long

        self.close_endpoint = hcn.HcnCloseEndpoint
        self.close_endpoint.argtypes = [ctypes.c_void_p]
        self.close_endpoint.restype = ctypes.c_long

        self.free = ole32.CoTaskMemFree
        self.free.argtypes = [ctypes.c_void_p]
        self.free.restype = None

    def take_string(self, ptr: ctypes.c_void_p) -> str:
        """Copy out and free a string HCN allocated for us."""
        if not ptr.value:
            return ""
        try:
            return ctypes.wstring_at(ptr.value)
        finally:
            self.free(ptr)


class HcnEndpointStore:
    """EndpointPolicyStore backed by the Host Networking Service."""

    def __init__(self) -> None:
        self._api: _HcnApi | None = None

    @property
    def api(self) -> _HcnApi:
        if self._api is None:
            self._api = _HcnApi()
        return self._api

    def get_endpoint(self, endpoint_id: str) -> EndpointDescriptor:
        properties = self._with_endpoint(endpoint_id, self._query)
        try:
            data = json.loads(properties)
        except json.JSONDecodeError as e:
            raise StoreError(f"HNS returned invalid endpoint JSON: {e}") from e
        return EndpointDescriptor.from_dict(data)

    def apply_policy(
        self,
        endpoint_id: str,
        request_type: RequestType,
        policies: list[EndpointPolicyRecord],
    ) -> None:
        # HNS applies policies through the generic modify call.
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
        settings = json.dumps(request.to_dict())
        logger.debug("Modifying endpoint %s: %s", endpoint_id, settings)
        self._with_endpoint(endpoint_id, lambda handle: self._modify(handle, settings))

    # -- ctypes plumbing ---------------------------------------------------

    def _with_endpoint(
        self, endpoint_id: str, fn: Callable[[ctypes.c_void_p], Any]
    ) -> Any:
        try:
            guid = GUID.from_string(endpoint_id)
        except ValueError:
            raise NotFoundError(f"endpoint {endpoint_id} not found: not a GUID") from None

        api = self.api
        handle = ctypes.c_void_p()
        error = ctypes.c_void_p()
        hr = api.open_endpoint(ctypes.byref(guid), ctypes.byref(handle), ctypes.byref(error))
        _check(hr, api.take_string(error), f"open endpoint {endpoint_id}")
        try:
            return fn(handle)
        finally:
            api.close_endpoint(handle)

    def _query(self, handle: ctypes.c_void_p) -> str:
        api = self.api
        properties = ctypes.c_void_p()
        error = ctypes.c_void_p()
        hr = api.query_properties(
            handle, _QUERY, ctypes.byref(properties), ctypes.byref(error)
        )
        result = api.take_string(properties)
        _check(hr, api.take_string(error), "query endpoint")
        return result

    def _modify(self, handle: ctypes.c_void_p, settings: str) -> None:
        api = self.api
        error = ctypes.c_void_p()
        hr = api.modify_endpoint(handle, settings, ctypes.byref(error))
        _check(hr, api.take_string(error), "modify endpoint")


def _check(hr: int, error_record: str, action: str) -> None:
    if hr >= 0:
        return
    code = hr & 0xFFFFFFFF
    message = f"HNS failed to {action} (HRESULT 0x{code:08X})"
    if error_record:
        message += f": {error_record}"
    if code == _E_NOT_FOUND:
        raise NotFoundError(message)
    raise StoreError(message)
