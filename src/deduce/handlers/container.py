"""Container descent — mappings, lists and tuples.

One segment is consumed per container step.  The lookup order is:

1. path exhausted (void segment)  → the container itself is the answer;
2. member at the segment          → schedule it;
3. member at the fallback key     → put the segment back, schedule the fallback;
4. nothing                        → put the segment back, recover from
                                    ``NotFoundError``.

The segment is restored *before* the fallback is scheduled, so the fallback
value sees the same path the container did.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core import Run, TargetHandler, lookup
from ..errors import NotFoundError

logger = logging.getLogger(__name__)


class ContainerHandler(TargetHandler):

    def execute(self, target: Any, run: Run) -> None:
        engine = run.engine
        segment = run.take_segment()

        if engine.is_void(segment):
            run.events.succeed(target)
            return

        member = lookup(target, segment)
        if not engine.is_void(member):
            engine.schedule(member, run)
            return

        run.restore_segment(segment)

        fallback = lookup(target, engine.fallback_key)
        if not engine.is_void(fallback):
            logger.debug("segment %r missing, using fallback key %r", segment, engine.fallback_key)
            engine.schedule(fallback, run)
            return

        engine.recover(NotFoundError(segment), run)
