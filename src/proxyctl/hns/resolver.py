"""Find the HNS endpoint a container is attached to, using hnsdiag."""

from __future__ import annotations

import json
import logging
import subprocess

from proxyctl.config import ProxyctlConfig
from proxyctl.errors import ExternalToolError, NotFoundError, SchemaError
from proxyctl.hns.scanner import Source, iter_objects

logger = logging.getLogger(__name__)


def get_endpoint_from_container(
    container_id: str, config: ProxyctlConfig | None = None
) -> str:
    """Return the ID of the HNS endpoint the given container is attached to.

    There is no check that ``container_id`` names an actual container, and
    nothing is cached: every call runs hnsdiag again.
    """
    output = run_hnsdiag(config or ProxyctlConfig.load())
    return resolve_endpoint(container_id, output)


def run_hnsdiag(config: ProxyctlConfig) -> bytes:
    """Run hnsdiag and return its captured stdout. Waits for it to exit."""
    cmd = config.hnsdiag_command
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        raise ExternalToolError(f"failed to run {cmd[0]}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ExternalToolError(
            f"{cmd[0]} exited with status {result.returncode}: {stderr}"
        )
    return result.stdout


def resolve_endpoint(container_id: str, source: Source) -> str:
    """Scan hnsdiag output for the first endpoint listing ``container_id``.

    If several endpoints list the container, the first one in hnsdiag's
    output wins. hnsdiag does not document that order.
    """
    for token in iter_objects(source):
        try:
            endpoint = json.loads(token)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaError(f"hnsdiag emitted an unparseable endpoint: {e}") from e
        if not isinstance(endpoint, dict):
            raise SchemaError("hnsdiag emitted a non-object endpoint record")

        attached = endpoint.get("SharedContainers") or []
        if not isinstance(attached, list):
            raise SchemaError("SharedContainers must be a list")
        if container_id in attached:
            endpoint_id = endpoint.get("ID", "")
            logger.debug("Container %s is attached to endpoint %s", container_id, endpoint_id)
            return endpoint_id

    raise NotFoundError("could not find an endpoint attached to that container")
