"""Error kinds raised or reported while resolving a path.

Two families live here:

* **Recoverable** errors (``NotFoundError``, ``ProducerError`` and any
  exception a producer raises) travel through the scheduler as ordinary
  values.  The recovery walker may rescue them with an ancestor's error
  handler; otherwise they reach the caller via ``RunEvents.on_failure``.

* **Fatal** errors (subclasses of ``FatalResolutionError``) are never
  delivered to listeners.  They abort the run and are raised out of the
  event-loop callback, where the host's exception handler sees them.

``PathNotArrayError`` is neither: it is raised synchronously by
``Engine.resolve`` before a run exists.
"""

from __future__ import annotations

from typing import Any


class DeduceError(Exception):
    """Base class for every error defined by this package."""


class PathNotArrayError(DeduceError, TypeError):
    """The run descriptor's ``path`` is not a list or tuple."""

    def __init__(self, path: Any) -> None:
        self.path = path
        super().__init__(f"run descriptor path must be a list, got {type(path).__name__}")


class NotFoundError(DeduceError, LookupError):
    """A container has neither the requested segment nor a fallback value.

    Attributes:
        segment: The segment that could not be resolved.
    """

    def __init__(self, segment: Any) -> None:
        self.segment = segment
        super().__init__(f"path could not be resolved on target at segment {segment!r}")


class ProducerError(DeduceError):
    """A producer reported a failure that is not an exception instance.

    ``complete("timeout", None)`` fails the run with
    ``ProducerError("timeout")``; the original object is kept in ``reason``.
    """

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(f"producer failed: {reason!r}")


class FatalResolutionError(DeduceError):
    """A condition the engine cannot recover from inside the run."""


class DoubleFailureError(FatalResolutionError):
    """A second failure happened while the run was already recovering.

    Attributes:
        error:    The new failure.
        previous: The failure that was already in progress.
    """

    def __init__(self, error: Any, previous: Any) -> None:
        self.error = error
        self.previous = previous
        super().__init__(f"{error!r} raised while recovering from {previous!r}")


class UnsupportedTargetError(FatalResolutionError, TypeError):
    """A value fits none of the terminal / producer / container / error categories."""

    def __init__(self, target: Any) -> None:
        self.target = target
        super().__init__(f"cannot resolve target of type {type(target).__name__}: {target!r}")


class StepFailedError(FatalResolutionError):
    """A step raised an exception the engine does not treat as data.

    Typical causes are an unhashable path segment or a listener raising.

    Attributes:
        target: The value the failing step was resolving.
        cause:  The exception the step raised.
    """

    def __init__(self, target: Any, cause: Exception) -> None:
        self.target = target
        self.cause = cause
        super().__init__(f"step on {target!r} raised {cause!r}")
