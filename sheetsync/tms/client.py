from __future__ import annotations

import logging
from typing import Any

import requests

from ..models.strings import RemoteString, TranslatableString, Translation
from .result import Result, TransportError

"""REST client for the Translation Management Service.

Wraps a ``requests.Session`` with bearer-token auth and unwraps the TMS JSON
envelope:

- single resource: ``{"data": {...}}``
- list:            ``{"data": [{"data": {...}}, ...]}``

Every public method returns a ``Result``; nothing here raises for HTTP or
connection failures.
"""

__all__ = [
    "DEFAULT_BASE_URL",
    "TMSClient",
    "build_create_payload",
    "build_update_ops",
    "unwrap_envelope",
]

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.crowdin.com/api/v2"
DEFAULT_TIMEOUT = 30.0


def unwrap_envelope(payload: Any) -> Any:
    """Strip the ``data`` envelope from a response body."""
    if not isinstance(payload, dict) or "data" not in payload:
        return payload
    data = payload["data"]
    if isinstance(data, list):
        return [item.get("data", item) if isinstance(item, dict) else item for item in data]
    return data


def build_create_payload(item: TranslatableString, branch_id: int | None) -> dict[str, Any]:
    """Body for POST /strings. maxLength is sent only when set (> 0)."""
    body: dict[str, Any] = {
        "text": item.text,
        "identifier": item.identifier,
        "context": item.context,
    }
    if branch_id:
        body["branchId"] = branch_id
    if item.max_length > 0:
        body["maxLength"] = item.max_length
    return body


def build_update_ops(text: str, context: str, max_length: int = 0) -> list[dict[str, Any]]:
    """JSON-patch operations for PATCH /strings/{id}."""
    ops: list[dict[str, Any]] = [
        {"op": "replace", "path": "/text", "value": text},
        {"op": "replace", "path": "/context", "value": context},
    ]
    if max_length > 0:
        ops.append({"op": "replace", "path": "/maxLength", "value": max_length})
    return ops


def _malformed(what: str, detail: Any) -> Result[Any]:
    logger.debug("%s: unusable payload %r", what, detail)
    return Result.failure(TransportError(f"{what} returned an unusable payload: {detail}"))


def _as_records(what: str, value: Any) -> Result[list[Any]]:
    """A list payload, with an empty body read as no records."""
    if value is None:
        return Result.success([])
    if not isinstance(value, list):
        return _malformed(what, f"expected a list, got {type(value).__name__}")
    return Result.success(value)


def _as_remote_string(what: str, value: Any) -> Result[RemoteString]:
    try:
        return Result.success(RemoteString.from_api(value))
    except (TypeError, ValueError) as e:
        return _malformed(what, e)


class TMSClient:
    """Thin TMS API client bound to one project."""

    def __init__(
        self,
        project_id: int,
        token: str,
        *,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.project_id = project_id
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )

    @property
    def project_path(self) -> str:
        return f"/projects/{self.project_id}"

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> TMSClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ core
    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[Any]:
        """Issue one request and return the unwrapped ``data`` payload."""
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        logger.debug("request %s %s params=%s", method, path, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return Result.failure(TransportError(f"{method} {path} failed: {e}"))

        if not 200 <= response.status_code < 300:
            return Result.failure(
                TransportError(f"{method} {path} failed", status=response.status_code, body=response.text)
            )
        if response.status_code == 204 or not response.content:
            return Result.success(None)
        try:
            payload = response.json()
        except ValueError as e:
            return Result.failure(
                TransportError(f"{method} {path} returned invalid JSON: {e}", status=response.status_code, body=response.text)
            )
        return Result.success(unwrap_envelope(payload))

    # -------------------------------------------------------------- project
    def get_project(self) -> Result[dict[str, Any]]:
        return self.request("GET", self.project_path)

    def list_branches(self) -> Result[list[dict[str, Any]]]:
        return self.request("GET", f"{self.project_path}/branches")

    # -------------------------------------------------------------- strings
    def list_strings(
        self, branch_id: int | None = None, *, limit: int = 500, offset: int = 0
    ) -> Result[list[RemoteString]]:
        result = self.request(
            "GET",
            f"{self.project_path}/strings",
            params={"branchId": branch_id or None, "limit": limit, "offset": offset},
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        records = _as_records("GET strings", result.value)
        if not records.ok:
            return Result.failure(records.error)  # type: ignore[arg-type]
        strings: list[RemoteString] = []
        for raw in records.value or []:
            remote = _as_remote_string("GET strings", raw)
            if not remote.ok:
                return Result.failure(remote.error)  # type: ignore[arg-type]
            strings.append(remote.unwrap())
        return Result.success(strings)

    def find_string(self, identifier: str, branch_id: int | None = None) -> Result[RemoteString | None]:
        """Look a string up by identifier.

        The server-side filter also matches text and partial identifiers, so
        only an exact identifier match is returned.
        """
        result = self.request(
            "GET",
            f"{self.project_path}/strings",
            params={"filter": identifier, "branchId": branch_id or None},
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        records = _as_records("GET strings", result.value)
        if not records.ok:
            return Result.failure(records.error)  # type: ignore[arg-type]
        for raw in records.value or []:
            if isinstance(raw, dict) and raw.get("identifier") == identifier:
                return _as_remote_string("GET strings", raw)  # type: ignore[return-value]
        return Result.success(None)

    def create_string(self, item: TranslatableString, branch_id: int | None = None) -> Result[RemoteString]:
        result = self.request(
            "POST", f"{self.project_path}/strings", json=build_create_payload(item, branch_id)
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        return _as_remote_string("POST strings", result.value)

    def update_string(
        self, string_id: int, text: str, context: str, max_length: int = 0
    ) -> Result[RemoteString]:
        result = self.request(
            "PATCH",
            f"{self.project_path}/strings/{string_id}",
            json=build_update_ops(text, context, max_length),
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        return _as_remote_string(f"PATCH strings/{string_id}", result.value)

    # --------------------------------------------------------- translations
    def list_translations(self, string_id: int, language_id: str) -> Result[list[Translation]]:
        result = self.request(
            "GET",
            f"{self.project_path}/translations",
            params={"stringId": string_id, "languageId": language_id},
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        records = _as_records("GET translations", result.value)
        if not records.ok:
            return Result.failure(records.error)  # type: ignore[arg-type]
        try:
            return Result.success(
                [Translation.from_api(d, string_id, language_id) for d in records.value or []]
            )
        except (TypeError, ValueError) as e:
            return _malformed("GET translations", e)

    # ------------------------------------------------------- files (fallback)
    def add_storage(self, filename: str, content: bytes) -> Result[int]:
        result = self.request(
            "POST",
            "/storages",
            data=content,
            headers={
                "Crowdin-API-FileName": filename,
                "Content-Type": "application/octet-stream",
            },
        )
        if not result.ok:
            return Result.failure(result.error)  # type: ignore[arg-type]
        if not isinstance(result.value, dict) or result.value.get("id") is None:
            return _malformed("POST /storages", result.value)
        return Result.success(int(result.value["id"]))

    def create_file(self, storage_id: int, name: str, branch_id: int | None = None) -> Result[dict[str, Any]]:
        body: dict[str, Any] = {"storageId": storage_id, "name": name}
        if branch_id:
            body["branchId"] = branch_id
        return self.request("POST", f"{self.project_path}/files", json=body)
