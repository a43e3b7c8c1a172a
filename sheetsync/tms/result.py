from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

"""Tagged success/failure values returned by every TMS client call.

Loops in the push and pull engines branch on ``result.ok`` instead of
catching exceptions, so one failing item never unwinds the batch.
"""

__all__ = [
    "TransportError",
    "Result",
]

T = TypeVar("T")


class TransportError(Exception):
    """Non-2xx response or failed request.

    ``status`` is None when no response was received (connection error,
    timeout, undecodable body).
    """

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is None:
            return base
        detail = self.body[:200] if self.body else ""
        return f"{base} (status={self.status}) {detail}".rstrip()


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one remote operation: a value or a TransportError."""
    value: T | None = None
    error: TransportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def failure(error: TransportError) -> Result[T]:
        return Result(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried TransportError."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
