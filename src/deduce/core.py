"""Core abstractions: Run, Backtrace, DispatchTable, Scheduler, and Engine.

This module owns every *interface* in the system.  Concrete category
handlers live in the ``handlers`` sub-package and are wired together by
``factory``.

Execution flow (``Engine.resolve`` entry point)::

    path_or_context (raw user input)
      │
      ▼
    normalize_context → ensure_path      ← may raise PathNotArrayError
      │
      ▼
    Scheduler.schedule(target, run)      ← loop.call_soon, never inline
      │
      ▼  (next loop turn)
    run.backtrace.append(entry)
    Classifier.classify(target)          ← closed Category set
    DispatchTable[category].execute(target, run)
        │
        ├── run.events.succeed(value)                  ← terminal
        ├── run.engine.schedule(next_target, run)      ← keep going
        └── run.engine.recover(error, run)             ← backtrace walk
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .errors import FatalResolutionError, StepFailedError
from .events import RunEvents
from .matchers import Category, Classifier, VoidPredicate, is_void
from .paths import CURSOR_KEYS, ensure_path, normalize_context

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_KEY = "$index"
DEFAULT_ERROR_KEY = "$error"


# ─────────────────────────────────────────────────────────────────────────────
# Private helpers
# ─────────────────────────────────────────────────────────────────────────────


def lookup(target: Any, key: Any) -> Any:
    """Read *key* from *target*, returning ``None`` when it is not there.

    * Mappings  → ``target.get(key)``.
    * Lists / tuples → non-negative ``int`` keys or canonical ASCII index
      strings (``"1"``, not ``"01"``);
      out-of-range reads as ``None``.
    * Anything else has no members and always yields ``None``.
    """
    if isinstance(target, Mapping):
        return target.get(key)
    if isinstance(target, (list, tuple)):
        if isinstance(key, str) and key.isascii() and key.isdigit() and key == str(int(key)):
            key = int(key)
        if isinstance(key, int) and not isinstance(key, bool) and 0 <= key < len(target):
            return target[key]
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Backtrace — append-only record of visited targets
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BacktraceEntry:
    """One scheduled step: the target it visited and the run it belongs to."""

    target: Any
    run: 'Run' = field(repr=False)


class Backtrace:
    """Append-only log of every step a run executed, oldest first.

    Only the recovery walker reads it, through ``walk_back``.
    """

    def __init__(self) -> None:
        self._entries: List[BacktraceEntry] = []

    def append(self, entry: BacktraceEntry) -> None:
        self._entries.append(entry)

    def walk_back(self) -> Iterator[BacktraceEntry]:
        """Yield entries newest first."""
        return reversed(self._entries)

    def __iter__(self) -> Iterator[BacktraceEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


# ─────────────────────────────────────────────────────────────────────────────
# Run — per-call mutable state
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class Run:
    """State exclusively owned by one ``Engine.resolve`` call.

    Attributes:
        path:      Remaining segments; consumed from the front.
        engine:    Back-reference to the owning Engine (gives producers
                   access to ``schedule``, ``recover`` and the reserved keys).
        events:    The sink returned to the caller.
        backtrace: Every target visited so far.
        error:     The failure currently being recovered from, if any.
        metadata:  Extra descriptor keys; free for producers to use.
        cursor_overrides: Optional ``take_segment(run)`` /
                   ``restore_segment(run, segment)`` replacements supplied
                   by the caller's descriptor.
    """

    path: List[Any]
    engine: 'Engine'
    events: RunEvents = field(default_factory=RunEvents)
    backtrace: Backtrace = field(default_factory=Backtrace)
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    cursor_overrides: Dict[str, Callable[..., Any]] = field(default_factory=dict)

    def take_segment(self) -> Any:
        """Remove and return the next segment, or ``None`` when exhausted."""
        override = self.cursor_overrides.get("take_segment")
        if override is not None:
            return override(self)
        return self.path.pop(0) if self.path else None

    def restore_segment(self, segment: Any) -> None:
        """Put *segment* back at the front of the path."""
        override = self.cursor_overrides.get("restore_segment")
        if override is not None:
            override(self, segment)
            return
        self.path.insert(0, segment)


# ─────────────────────────────────────────────────────────────────────────────
# Dispatch — one handler per category
# ─────────────────────────────────────────────────────────────────────────────


class TargetHandler(ABC):
    """Apply the resolution rule of one category to *target*.

    A handler finishes its work by doing exactly one of: settling
    ``run.events``, calling ``run.engine.schedule`` with the next target, or
    calling ``run.engine.recover`` with an error.
    """

    @abstractmethod
    def execute(self, target: Any, run: Run) -> None: ...


class DispatchTable(Mapping):
    """Immutable ``Category → TargetHandler`` table covering every category."""

    def __init__(self, handlers: Mapping[Category, TargetHandler]) -> None:
        missing = [c.name for c in Category if c not in handlers]
        if missing:
            raise ValueError(f"no handler for categories: {', '.join(missing)}")
        self._handlers = MappingProxyType(dict(handlers))

    def __getitem__(self, category: Category) -> TargetHandler:
        return self._handlers[category]

    def __iter__(self) -> Iterator[Category]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


# ─────────────────────────────────────────────────────────────────────────────
# Scheduler — one loop turn per step
# ─────────────────────────────────────────────────────────────────────────────


class Scheduler:
    """Defers each step to the next turn of the running asyncio loop.

    Because every step is its own loop callback, resolution depth never
    grows the call stack, and ``Engine.resolve`` always returns its sink
    before any listener can fire.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def schedule(self, target: Any, run: Run) -> None:
        asyncio.get_running_loop().call_soon(self._step, target, run)

    def _step(self, target: Any, run: Run) -> None:
        run.backtrace.append(BacktraceEntry(target, run))
        logger.debug("step %d: %r (remaining path %r)", len(run.backtrace), target, run.path)
        try:
            self._engine.dispatch(target, run)
        except FatalResolutionError as exc:
            self._abort(run, exc)
            raise
        except Exception as exc:
            fatal = StepFailedError(target, exc)
            self._abort(run, fatal)
            raise fatal from exc

    @staticmethod
    def _abort(run: Run, error: FatalResolutionError) -> None:
        logger.error("run aborted: %s", error)
        if not run.events.settled:
            run.events.abort(error)


# ─────────────────────────────────────────────────────────────────────────────
# Engine — orchestrator / public entry point
# ─────────────────────────────────────────────────────────────────────────────


class Engine:
    """Holds the classifier, the dispatch table and the reserved keys; creates
    runs and drives them through the scheduler.

    Entry points:

    * ``resolve``        – start a run, return its ``RunEvents`` sink.
    * ``resolve_async``  – ``await`` the outcome from a coroutine.
    * ``resolve_sync``   – run a fresh event loop until the outcome is known.

    Use ``factory.build_default_engine`` rather than wiring one by hand.
    """

    def __init__(
            self,
            *,
            handlers: Mapping[Category, TargetHandler],
            classifier: Optional[Classifier] = None,
            fallback_key: Any = DEFAULT_FALLBACK_KEY,
            error_key: Any = DEFAULT_ERROR_KEY,
            is_void: VoidPredicate = is_void,
    ) -> None:
        self.handlers = DispatchTable(handlers)
        self.classifier = classifier or Classifier()
        self.fallback_key = fallback_key
        self.error_key = error_key
        self.is_void = is_void
        self.scheduler = Scheduler(self)

    # -- public API ---------------------------------------------------------

    def resolve(self, target: Any, path_or_context: Any = None) -> RunEvents:
        """Start resolving *path_or_context* against *target*.

        Must be called while an asyncio event loop is running.  Nothing is
        resolved before this method returns, so listeners attached to the
        returned sink right away never miss the outcome.

        Raises:
            PathNotArrayError: the descriptor's ``path`` is not a list.
        """
        run = self.create_run(path_or_context)
        self.schedule(target, run)
        return run.events

    async def resolve_async(self, target: Any, path_or_context: Any = None) -> Any:
        """Resolve and return the value; an unrecovered failure is raised."""
        return await self.resolve(target, path_or_context)

    def resolve_sync(self, target: Any, path_or_context: Any = None) -> Any:
        """Blocking variant for code that does not run an event loop."""
        return asyncio.run(self.resolve_async(target, path_or_context))

    def create_run(self, path_or_context: Any) -> Run:
        """Build a fresh ``Run`` from any accepted path-or-context shape."""
        descriptor = normalize_context(path_or_context)
        path = ensure_path(descriptor)
        overrides = {
            key: descriptor.pop(key)
            for key in CURSOR_KEYS
            if callable(descriptor.get(key))
        }
        descriptor.pop("path")
        return Run(path=path, engine=self, metadata=descriptor, cursor_overrides=overrides)

    # -- step plumbing (used by handlers) -----------------------------------

    def schedule(self, target: Any, run: Run) -> None:
        self.scheduler.schedule(target, run)

    def dispatch(self, target: Any, run: Run) -> None:
        category = self.classifier.classify(target)
        self.handlers[category].execute(target, run)

    def recover(self, error: BaseException, run: Run) -> None:
        """Hand *error* to the ``ERROR`` category handler."""
        self.handlers[Category.ERROR].execute(error, run)
