"""
Cancellable recurring task driven by the asyncio event loop.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger


class PeriodicTask:
    """
    Runs ``callback`` every ``interval`` seconds until stopped.

    - ``start()`` while running and ``stop()`` while stopped are no-ops.
    - ``stop()`` is synchronous: once it returns, no tick that was already
      scheduled will invoke the callback again.
    - A tick is skipped while the previous tick's callback is still running,
      so the callback never overlaps with itself.
    """

    def __init__(
        self,
        name: str,
        callback: Callable[[], Awaitable[None]],
        interval: float,
        run_immediately: bool = False,
        initial_delay: Optional[float] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._run_immediately = run_immediately
        self._initial_delay = initial_delay
        self._runner: Optional[asyncio.Task] = None
        self._tick: Optional[asyncio.Task] = None
        self._generation = 0
        self.ticks_skipped = 0

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def is_busy(self) -> bool:
        return self._tick is not None and not self._tick.done()

    def start(self) -> bool:
        """Start the loop. Must be called from within a running event loop."""
        if self.is_running:
            return False
        self._generation += 1
        self._runner = asyncio.get_running_loop().create_task(
            self._run(self._generation), name=f"periodic:{self.name}"
        )
        logger.debug(f"Periodic task {self.name} started (interval={self.interval}s)")
        return True

    def stop(self) -> bool:
        if self._runner is None:
            return False
        self._generation += 1
        current = asyncio.current_task() if _loop_running() else None
        for task in (self._runner, self._tick):
            if task is not None and task is not current and not task.done():
                task.cancel()
        self._runner = None
        self._tick = None
        logger.debug(f"Periodic task {self.name} stopped")
        return True

    async def _run(self, generation: int):
        if self._initial_delay is not None:
            await asyncio.sleep(self._initial_delay)
        elif not self._run_immediately:
            await asyncio.sleep(self.interval)

        while generation == self._generation:
            self._dispatch(generation)
            await asyncio.sleep(self.interval)

    def _dispatch(self, generation: int):
        if self.is_busy:
            self.ticks_skipped += 1
            logger.debug(f"Periodic task {self.name} still busy, skipping tick")
            return
        self._tick = asyncio.get_running_loop().create_task(
            self._execute(generation), name=f"periodic-tick:{self.name}"
        )

    async def _execute(self, generation: int):
        if generation != self._generation:
            return
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Continue scheduling despite errors
            logger.error(f"Error in periodic task {self.name}: {e}")


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
        return True
    except RuntimeError:
        return False
