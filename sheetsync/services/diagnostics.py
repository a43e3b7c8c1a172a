from __future__ import annotations

import logging
from dataclasses import dataclass

from ..tms.client import TMSClient
from ..tms.result import Result

"""Connection diagnostics (test-connection / test-endpoints commands)."""

__all__ = [
    "EndpointCheck",
    "check_connection",
    "check_endpoints",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointCheck:
    name: str
    path: str
    ok: bool
    status: int | None
    detail: str = ""


def check_connection(client: TMSClient) -> Result[str]:
    """Fetch the project; success carries the project name."""
    result = client.get_project()
    if not result.ok:
        logger.error("connection failed: %s", result.error)
        return Result.failure(result.error)  # type: ignore[arg-type]
    project = result.value or {}
    name = str(project.get("name") or project.get("identifier") or client.project_id)
    logger.info("connected to project %s (id=%s)", name, client.project_id)
    return Result.success(name)


def check_endpoints(client: TMSClient) -> list[EndpointCheck]:
    """Probe each read endpoint the sync path relies on."""
    base = client.project_path
    probes = [
        ("project", base, None),
        ("branches", f"{base}/branches", None),
        ("strings", f"{base}/strings", {"limit": 1}),
        ("translations", f"{base}/translations", {"limit": 1}),
    ]
    checks: list[EndpointCheck] = []
    for name, path, params in probes:
        result = client.request("GET", path, params=params)
        if result.ok:
            checks.append(EndpointCheck(name, path, True, 200))
        else:
            err = result.error
            checks.append(EndpointCheck(name, path, False, err.status, str(err)))  # type: ignore[union-attr]
        level = logging.INFO if checks[-1].ok else logging.WARNING
        logger.log(level, "endpoint %s %s ok=%s", name, path, checks[-1].ok)
    return checks
