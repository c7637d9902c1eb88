"""Terminal (string / number) handler — the end of a successful run."""

from __future__ import annotations

from typing import Any

from ..core import Run, TargetHandler


class TerminalHandler(TargetHandler):
    """Complete the run with the value itself.

    Any remaining path segments are ignored: a terminal has no members to
    descend into.
    """

    def execute(self, target: Any, run: Run) -> None:
        run.events.succeed(target)
