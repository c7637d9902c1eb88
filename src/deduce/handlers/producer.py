"""Asynchronous producers — callables that compute the next target.

Two calling conventions are supported.

*Callback style*: the producer receives a completion callback and the run::

    def load_user(complete, run):
        user_id = run.take_segment()
        fetch(user_id, lambda err, user: complete(err, user))

    complete(value)          # continue with value
    complete(None, value)    # continue with value
    complete(err, value)     # fail with err (value ignored)

*Coroutine style*: an ``async def`` receives only the run; its return value
continues the run and an exception it raises fails it::

    async def load_user(run):
        return await db.users.get(run.take_segment())

Whatever is reported goes back through the scheduler as the next step, so an
error is routed to recovery and a container is descended into as usual.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Set

from ..core import Run, TargetHandler
from ..errors import ProducerError

logger = logging.getLogger(__name__)


class Completion:
    """One-shot completion callback handed to a producer.

    The first call wins.  Later calls are logged and ignored so a producer
    that answers twice cannot fork the run.
    """

    def __init__(self, run: Run, producer: Any) -> None:
        self._run = run
        self._producer = producer
        self.answered = False

    def __call__(self, *args: Any) -> None:
        if self.answered:
            logger.warning("producer %r answered more than once; ignoring %r", self._producer, args)
            return
        target = self._next_target(args)
        self.answered = True
        self._run.engine.schedule(target, self._run)

    @staticmethod
    def _next_target(args: tuple) -> Any:
        if len(args) == 1:
            return args[0]
        if len(args) != 2:
            raise TypeError(f"complete() takes 1 or 2 arguments ({len(args)} given)")
        error, value = args
        if error is None:
            return value
        if isinstance(error, BaseException):
            return error
        return ProducerError(error)


class ProducerHandler(TargetHandler):
    """Invoke the producer now; its answer is scheduled as the next step.

    Anything the producer raises while being called is reported as its
    answer, except ``KeyboardInterrupt`` and ``SystemExit``.  Pending
    coroutine tasks are held in ``_tasks`` until they finish.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Future] = set()

    def execute(self, target: Any, run: Run) -> None:
        complete = Completion(run, target)

        try:
            if inspect.iscoroutinefunction(target):
                self._start_task(target(run), complete)
            else:
                target(complete, run)
        except (KeyboardInterrupt, SystemExit):
            raise
        except BaseException as exc:
            logger.debug("producer %r raised %r", target, exc)
            complete(exc)

    def _start_task(self, coro: Any, complete: Completion) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: self._task_done(t, complete))

    @staticmethod
    def _task_done(task: asyncio.Future, complete: Completion) -> None:
        if task.cancelled():
            complete(asyncio.CancelledError())
            return
        error = task.exception()
        if error is not None:
            complete(error)
        else:
            complete(task.result())
