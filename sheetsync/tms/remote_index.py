from __future__ import annotations

import logging
from collections.abc import Iterator

from ..models.strings import RemoteString
from .client import TMSClient
from .result import Result

"""Index of strings already registered on the TMS, keyed by identifier.

Loaded once per push run so the create-vs-update decision is a dict lookup
instead of one request per cell.
"""

__all__ = [
    "RemoteStringIndex",
    "resolve_branch_id",
]

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


def resolve_branch_id(client: TMSClient, configured: int | None = None) -> Result[int | None]:
    """Pick the branch to work against.

    A configured id (> 0) wins. Otherwise the first branch the project lists
    is used; a project without branches yields None (unbranched).
    """
    if configured:
        return Result.success(configured)
    result = client.list_branches()
    if not result.ok:
        return Result.failure(result.error)  # type: ignore[arg-type]
    branches = result.value or []
    if not branches:
        logger.debug("project %s has no branches; using unbranched strings", client.project_id)
        return Result.success(None)
    branch = branches[0]
    logger.info("using branch %s (id=%s)", branch.get("name", "?"), branch.get("id"))
    return Result.success(int(branch["id"]))


class RemoteStringIndex:
    """identifier -> RemoteString mapping for one branch."""

    def __init__(self, strings: dict[str, RemoteString] | None = None, branch_id: int | None = None) -> None:
        self._by_identifier: dict[str, RemoteString] = dict(strings or {})
        self.branch_id = branch_id

    @classmethod
    def load(
        cls,
        client: TMSClient,
        branch_id: int | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Result[RemoteStringIndex]:
        """Fetch every string of the branch, paging until a short page.

        Paging also stops when a full page brings no string id not already
        seen, which happens against a server that ignores ``offset``.
        """
        strings: dict[str, RemoteString] = {}
        seen_ids: set[int] = set()
        offset = 0
        while True:
            page = client.list_strings(branch_id, limit=page_size, offset=offset)
            if not page.ok:
                return Result.failure(page.error)  # type: ignore[arg-type]
            batch = page.value or []
            new_ids = {remote.id for remote in batch} - seen_ids
            seen_ids |= new_ids
            for remote in batch:
                if remote.identifier:
                    strings[remote.identifier] = remote
            if len(batch) < page_size:
                break
            if not new_ids:
                logger.warning(
                    "string listing repeated a page at offset %d; stopping with %d string(s)",
                    offset,
                    len(strings),
                )
                break
            offset += page_size
        logger.debug("loaded %d remote strings (branch=%s)", len(strings), branch_id)
        return Result.success(cls(strings, branch_id=branch_id))

    def get(self, identifier: str) -> RemoteString | None:
        return self._by_identifier.get(identifier)

    def add(self, remote: RemoteString) -> None:
        self._by_identifier[remote.identifier] = remote

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_identifier

    def __len__(self) -> int:
        return len(self._by_identifier)

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_identifier)
