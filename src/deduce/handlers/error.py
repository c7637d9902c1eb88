"""Error recovery — the nearest visited ancestor with an error handler wins.

When a step fails, the run's backtrace is walked from the most recent target
back to the root.  The first target exposing a non-void value under the
engine's error key (``"$error"`` by default) has that value scheduled on the
*same* run: same remaining path, same backtrace.  The handler value may be a
terminal (the recovered answer), a producer, or a container that keeps
consuming the path.

A run recovers at most once.  A failure while ``run.error`` is already set
raises ``DoubleFailureError``, which aborts the run without notifying any
listener.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core import Run, TargetHandler, lookup
from ..errors import DoubleFailureError

logger = logging.getLogger(__name__)


class ErrorRecoveryHandler(TargetHandler):

    def execute(self, target: Any, run: Run) -> None:
        if run.error is not None:
            raise DoubleFailureError(target, previous=run.error) from target

        run.error = target
        engine = run.engine

        for entry in run.backtrace.walk_back():
            handler = lookup(entry.target, engine.error_key)
            if not engine.is_void(handler):
                logger.debug("recovering from %r with handler at %r", target, entry.target)
                engine.schedule(handler, run)
                return

        logger.debug("no error handler for %r", target)
        run.events.fail(target)
