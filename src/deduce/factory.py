"""Engine factory — the single place where all pieces are assembled.

``build_default_engine`` is the recommended entry point for users who want a
working Engine without wiring the dispatch table by hand.

Customisation points:

* **fallback_key** – container key used when a segment is missing
                     (default ``"$index"``).
* **error_key**    – key holding an error handler (default ``"$error"``).
* **is_void**      – absence predicate (default: ``None`` and ``False``).
* **handlers**     – per-category overrides merged over the defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

from .core import DEFAULT_ERROR_KEY, DEFAULT_FALLBACK_KEY, Engine, TargetHandler
from .events import RunEvents
from .handlers import ContainerHandler, ErrorRecoveryHandler, ProducerHandler, TerminalHandler
from .matchers import Category, Classifier, VoidPredicate, is_void as default_is_void


def build_default_engine(
        *,
        fallback_key: Any = DEFAULT_FALLBACK_KEY,
        error_key: Any = DEFAULT_ERROR_KEY,
        is_void: VoidPredicate = default_is_void,
        handlers: Mapping[Category, TargetHandler] | None = None,
) -> Engine:
    """Assemble an Engine with the standard classifier and handlers.

    What gets wired
    ---------------
    classifier
        ``Classifier`` with the default order: error, terminal, container,
        producer.

    handlers
        * ``Category.TERMINAL``  → ``TerminalHandler``
        * ``Category.PRODUCER``  → ``ProducerHandler``
        * ``Category.CONTAINER`` → ``ContainerHandler``
        * ``Category.ERROR``     → ``ErrorRecoveryHandler``

    Example::

        engine = build_default_engine(fallback_key="fallback")
        value = engine.resolve_sync({"foo": {"fallback": "Hello"}}, "foo/yam")
        # → "Hello"
    """
    table = {
        Category.TERMINAL: TerminalHandler(),
        Category.PRODUCER: ProducerHandler(),
        Category.CONTAINER: ContainerHandler(),
        Category.ERROR: ErrorRecoveryHandler(),
    }
    if handlers:
        table.update(handlers)

    return Engine(
        handlers=table,
        classifier=Classifier(),
        fallback_key=fallback_key,
        error_key=error_key,
        is_void=is_void,
    )


@lru_cache(maxsize=None)
def default_engine() -> Engine:
    """Shared engine with default settings (built on first use)."""
    return build_default_engine()


def resolve(target: Any, path_or_context: Any = None) -> RunEvents:
    """Shortcut for ``default_engine().resolve(target, path_or_context)``."""
    return default_engine().resolve(target, path_or_context)
