"""Per-run notification surface returned by ``Engine.resolve``.

A ``RunEvents`` instance settles exactly once, either with ``succeed(value)``
or with ``fail(error)``.  Listeners subscribe by event name or through the
chainable shortcuts::

    engine.resolve(tree, "foo/bar").on_success(show).on_failure(report)

The sink is also awaitable, which is the natural way to consume it from a
coroutine::

    value = await engine.resolve(tree, "foo/bar")
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class RunEvents:
    """Event sink owned by a single run.

    Attributes:
        SUCCESS: Event name fired with the resolved value.
        FAILURE: Event name fired with the unrecovered error.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    _ABORTED = "aborted"

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._outcome: Optional[Tuple[str, Any]] = None
        self._waiters: List[asyncio.Future] = []

    # -- subscription -------------------------------------------------------

    def on(self, event: str, callback: Listener) -> RunEvents:
        """Subscribe *callback* to *event*.  Returns the sink for chaining."""
        self._listeners[event].append(callback)
        return self

    def on_success(self, callback: Listener) -> RunEvents:
        return self.on(self.SUCCESS, callback)

    def on_failure(self, callback: Listener) -> RunEvents:
        return self.on(self.FAILURE, callback)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* in subscription order.

        Producers may use this for custom progress events.  Returns whether
        any listener was called.
        """
        listeners = list(self._listeners.get(event, ()))
        for callback in listeners:
            callback(*args)
        return bool(listeners)

    # -- settlement ---------------------------------------------------------

    @property
    def settled(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[Tuple[str, Any]]:
        """``(event_name, payload)`` once settled, otherwise ``None``."""
        return self._outcome

    def succeed(self, value: Any) -> None:
        self._settle(self.SUCCESS, value)
        self.emit(self.SUCCESS, value)

    def fail(self, error: Any) -> None:
        awaited = bool(self._waiters)
        self._settle(self.FAILURE, error)
        if not self.emit(self.FAILURE, error) and not awaited:
            logger.warning("run failed with no failure listener: %r", error)

    def abort(self, error: BaseException) -> None:
        """Settle on a fatal condition without notifying any listener.

        Coroutines awaiting the sink are woken and see *error* raised.
        """
        self._settle(self._ABORTED, error)

    def _settle(self, kind: str, payload: Any) -> None:
        if self._outcome is not None:
            raise RuntimeError(f"run already settled with {self._outcome[0]!r}")
        self._outcome = (kind, payload)
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(None)
        self._waiters.clear()

    # -- awaiting -----------------------------------------------------------

    def __await__(self) -> Generator[Any, None, Any]:
        return self._wait().__await__()

    async def _wait(self) -> Any:
        if self._outcome is None:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            await waiter
        kind, payload = self._outcome
        if kind == self.SUCCESS:
            return payload
        raise payload
