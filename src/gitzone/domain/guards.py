"""Re-entry guard for refresh operations."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Concatenate, Protocol

log = getLogger(__name__)


class BusyFlag:
    """Marks an operation as outstanding; a second start while set is refused."""

    __slots__ = ("_busy",)

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self) -> None:
        self._busy = False


class Guarded(Protocol):
    @property
    def busy_flag(self) -> BusyFlag: ...


def skip_if_busy[S: Guarded, **P, T](
    func: Callable[Concatenate[S, P], Awaitable[T]],
) -> Callable[Concatenate[S, P], Awaitable[T | None]]:
    """Make an async method a no-op returning ``None`` while a previous call is running."""

    @functools.wraps(func)
    async def wrapper(self: S, *args: P.args, **kwargs: P.kwargs) -> T | None:
        flag = self.busy_flag
        if not flag.acquire():
            log.debug("%s already running; ignoring request", func.__qualname__)
            return None
        try:
            return await func(self, *args, **kwargs)
        finally:
            flag.release()

    return wrapper
