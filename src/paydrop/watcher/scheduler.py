"""Fixed-interval task scheduler."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

log = logging.getLogger(__name__)


class PeriodicTask:
    """Runs an async callable on a fixed interval until stopped.

    The first run happens immediately on start. A run that raises is
    logged and followed by ``error_backoff`` instead of ``interval``; the
    loop itself never dies from a failed run. Runs never overlap.

    ``stop()`` only interrupts the wait between runs. A run in progress
    is allowed to finish so its collaborator calls and their bookkeeping
    complete together.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval: float,
        error_backoff: float | None = None,
    ) -> None:
        self._name = name
        self._func = func
        self._interval = interval
        self._error_backoff = error_backoff if error_backoff is not None else interval
        self._task: asyncio.Task | None = None
        self._running = False
        self._wake = asyncio.Event()
        self.runs = 0
        self.failures = 0
        self.last_result: Any = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._task is not None:
            return
        self._running = True
        self._wake.clear()
        self._task = asyncio.create_task(self._loop(), name=self._name)
        log.info("%s started (interval=%ss)", self._name, self._interval)

    async def stop(self) -> None:
        """Stop after the current run, if any, has finished."""
        self._running = False
        self._wake.set()
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("%s stopped", self._name)

    async def run_once(self) -> bool:
        """Run the callable once. Returns False if it raised."""
        self.runs += 1
        try:
            self.last_result = await self._func()
            return True
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failures += 1
            log.error("%s run failed: %s", self._name, exc, exc_info=True)
            return False

    async def _loop(self) -> None:
        while self._running:
            ok = await self.run_once()
            if not self._running:
                break
            try:
                await asyncio.wait_for(
                    self._wake.wait(),
                    timeout=self._interval if ok else self._error_backoff,
                )
            except asyncio.TimeoutError:
                pass
