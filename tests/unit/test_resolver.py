"""Tests for resolving a container ID to its HNS endpoint."""

from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from proxyctl.config import ProxyctlConfig
from proxyctl.errors import ExternalToolError, NotFoundError, SchemaError
from proxyctl.hns.resolver import (
    get_endpoint_from_container,
    resolve_endpoint,
    run_hnsdiag,
)


def _stream(*endpoints: dict) -> bytes:
    return b"".join(json.dumps(ep, indent=2).encode() + b"\n" for ep in endpoints)


DIAG = _stream(
    {"ID": "ep1", "SharedContainers": ["c1"]},
    {"ID": "ep2", "SharedContainers": ["c2", "c3"]},
)


class TestResolveEndpoint:
    def test_match_in_second_record(self):
        assert resolve_endpoint("c3", DIAG) == "ep2"

    def test_match_in_first_record(self):
        assert resolve_endpoint("c1", DIAG) == "ep1"

    def test_not_found(self):
        with pytest.raises(NotFoundError):
            resolve_endpoint("c9", DIAG)

    def test_empty_output(self):
        with pytest.raises(NotFoundError):
            resolve_endpoint("c1", b"")

    def test_exact_match_only(self):
        with pytest.raises(NotFoundError):
            resolve_endpoint("c", DIAG)

    def test_first_match_wins(self):
        stream = _stream(
            {"ID": "ep1", "SharedContainers": ["dup"]},
            {"ID": "ep2", "SharedContainers": ["dup"]},
        )
        assert resolve_endpoint("dup", stream) == "ep1"

    def test_missing_or_null_shared_containers(self):
        stream = _stream(
            {"ID": "ep0"},
            {"ID": "ep1", "SharedContainers": None},
            {"ID": "ep2", "SharedContainers": ["c2"]},
        )
        assert resolve_endpoint("c2", stream) == "ep2"

    def test_unparseable_record_is_fatal(self):
        stream = b'{\n  "ID": "ep1",\n  oops\n}' + DIAG
        with pytest.raises(SchemaError, match="unparseable"):
            resolve_endpoint("c3", stream)

    def test_shared_containers_not_a_list(self):
        stream = _stream({"ID": "ep1", "SharedContainers": "c1"})
        with pytest.raises(SchemaError):
            resolve_endpoint("c1", stream)

    def test_real_hnsdiag_output(self, hnsdiag_output: bytes):
        assert (
            resolve_endpoint("c3", hnsdiag_output)
            == "5e7c9a44-2b1d-4f4e-8a77-0b2d9c6e1f22"
        )


class TestRunHnsdiag:
    @patch("proxyctl.hns.resolver.subprocess.run")
    def test_runs_default_command(self, mock_run: MagicMock):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout=DIAG, stderr=b""
        )
        assert run_hnsdiag(ProxyctlConfig()) == DIAG
        mock_run.assert_called_once_with(
            ["hnsdiag", "list", "endpoints", "-df"], capture_output=True
        )

    @patch("proxyctl.hns.resolver.subprocess.run", side_effect=FileNotFoundError("hnsdiag"))
    def test_missing_tool(self, mock_run: MagicMock):
        with pytest.raises(ExternalToolError, match="failed to run hnsdiag"):
            run_hnsdiag(ProxyctlConfig())

    @patch("proxyctl.hns.resolver.subprocess.run")
    def test_nonzero_exit(self, mock_run: MagicMock):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=5, stdout=b"", stderr=b"Access is denied.\r\n"
        )
        with pytest.raises(ExternalToolError, match="status 5: Access is denied."):
            run_hnsdiag(ProxyctlConfig())


@patch("proxyctl.hns.resolver.subprocess.run")
def test_get_endpoint_from_container(mock_run: MagicMock):
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=0, stdout=DIAG, stderr=b""
    )
    config = ProxyctlConfig(hnsdiag_path=r"C:\tools\hnsdiag.exe")
    assert get_endpoint_from_container("c2", config) == "ep2"
    assert mock_run.call_args.args[0][0] == r"C:\tools\hnsdiag.exe"


@patch("proxyctl.hns.resolver.subprocess.run")
def test_get_endpoint_runs_tool_every_call(mock_run: MagicMock):
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=0, stdout=DIAG, stderr=b""
    )
    get_endpoint_from_container("c1", ProxyctlConfig())
    get_endpoint_from_container("c1", ProxyctlConfig())
    assert mock_run.call_count == 2
