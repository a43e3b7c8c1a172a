from __future__ import annotations

import time
from collections.abc import Callable

"""Cooperative, time-based request pacing.

The TMS enforces request quotas; engines call ``after_item()`` after each
remote round trip and ``after_group()`` after each logical group (a language
row during pull). ``group_every`` additionally inserts the group pause every
N items for long pushes. Tests inject a zero-delay limiter.
"""

__all__ = [
    "RateLimiter",
]


class RateLimiter:
    """Fixed-interval gate."""

    def __init__(
        self,
        item_delay: float = 0.0,
        group_delay: float = 0.0,
        group_every: int = 0,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if item_delay < 0 or group_delay < 0 or group_every < 0:
            raise ValueError("rate limit settings must be non-negative")
        self.item_delay = item_delay
        self.group_delay = group_delay
        self.group_every = group_every
        self._sleep = sleep
        self._items = 0
        self.total_slept = 0.0

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)
            self.total_slept += seconds

    def after_item(self) -> None:
        self._items += 1
        self._pause(self.item_delay)
        if self.group_every and self._items % self.group_every == 0:
            self._pause(self.group_delay)

    def after_group(self) -> None:
        self._pause(self.group_delay)
