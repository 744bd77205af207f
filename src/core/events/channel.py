"""
Typed publish/subscribe channels.

A channel carries exactly one event type. Subscribing returns a handle whose
``unsubscribe()`` detaches the listener. Listeners may be plain callables or
coroutine functions; coroutine listeners are scheduled on the running loop and
can be awaited with ``drain()``.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Generic, List, Set, TypeVar, Union

from loguru import logger

E = TypeVar("E")

Listener = Callable[[E], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by EventChannel.subscribe."""

    def __init__(self, channel: "EventChannel", listener: Callable):
        self._channel = channel
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._channel._remove(self._listener)
            self._active = False


class EventChannel(Generic[E]):
    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable] = []
        self._pending: Set[asyncio.Future] = set()

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: Callable) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, event: E) -> None:
        """Deliver an event to every listener. A failing listener never stops the others."""
        for listener in list(self._listeners):
            try:
                result = listener(event)
            except Exception as e:
                logger.error(f"Listener on channel {self.name} failed: {e}")
                continue
            if inspect.isawaitable(result):
                self._schedule(result)

    def _schedule(self, awaitable: Awaitable) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        future.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Async listener on channel {self.name} failed: {error}")

    async def drain(self) -> None:
        """Wait until every scheduled async listener has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
