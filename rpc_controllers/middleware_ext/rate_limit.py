"""
Rate Limiting Middleware - fixed-window request counting.

For each ``(procedure path, limiter key)`` pair a counter entry
``{count, reset_at}`` is kept:

- first call, or a call at/after ``reset_at``: reset to count 1, admit
- otherwise: increment; reject once the count exceeds ``points``

Fixed windows admit bursts of up to ``2 * points`` around a boundary.
This is coarse abuse prevention, not quota enforcement.

Entries are never evicted. Counters live in a ``FixedWindowStore``;
markers created without an explicit store share one process-wide
default.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..config import get_config
from ..faults import RateLimitExceededFault

if TYPE_CHECKING:
    from ..controller.base import Middleware, MiddlewareCall

logger = logging.getLogger("rpc_controllers.middleware.rate_limit")


@dataclass
class WindowEntry:
    count: int
    reset_at: float


class FixedWindowStore:
    """
    In-memory counter store for fixed windows.

    Args:
        clock: Returns the current time in seconds; inject a fake clock
               in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, WindowEntry] = {}
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Optional[WindowEntry]:
        return self._entries.get(key)

    def set(self, key: str, entry: WindowEntry) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_default_store = FixedWindowStore()


def get_default_store() -> FixedWindowStore:
    return _default_store


def create_rate_limit_middleware(
    points: int,
    duration_sec: float,
    key: Optional[Callable[[Any], Any]] = None,
    *,
    store: Optional[FixedWindowStore] = None,
) -> "Middleware":
    """
    Build a fixed-window limiter admitting ``points`` calls per window.

    The window is ``duration_sec`` seconds, clamped to the configured
    ``min_rate_limit_window``.
    """
    window = max(get_config().min_rate_limit_window, float(duration_sec))
    counters = store if store is not None else get_default_store()

    async def rate_limit_middleware(call: "MiddlewareCall") -> Any:
        key_part = key(call.ctx) if key is not None else None
        if inspect.isawaitable(key_part):
            key_part = await key_part
        if key_part is None:
            key_part = get_config().global_rate_limit_key
        window_key = f"{call.path or 'unknown'}:{key_part}"

        now = counters.now()
        entry = counters.get(window_key)
        if entry is None or now >= entry.reset_at:
            counters.set(window_key, WindowEntry(count=1, reset_at=now + window))
            return await call.next()

        entry.count += 1
        if entry.count > points:
            retry_after = max(0.0, entry.reset_at - now)
            logger.warning(
                "Rate limit exceeded for %s (%d/%d, retry in %.1fs)",
                window_key, entry.count, points, retry_after,
            )
            raise RateLimitExceededFault(
                points, window, retry_after, metadata={"key": window_key},
            )
        return await call.next()

    rate_limit_middleware.points = points
    rate_limit_middleware.window = window
    rate_limit_middleware.store = counters
    return rate_limit_middleware
