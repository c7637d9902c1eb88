"""Normalization of the caller's path-or-context argument.

``Engine.resolve`` accepts several shapes for its second argument; this module
turns every one of them into a run descriptor, a plain dict with a ``"path"``
key::

    normalize_context("foo/bar")            → {"path": ["foo", "bar"]}
    normalize_context("/foo/bar")           → {"path": ["foo", "bar"]}
    normalize_context(["foo", "bar"])       → {"path": ["foo", "bar"]}
    normalize_context({"path": ["foo"]})    → {"path": ["foo"]}
    normalize_context(lambda: "foo")        → {"path": ["foo"]}
    normalize_context(None)                 → {"path": []}

``ensure_path`` then checks the descriptor before a run is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from .errors import PathNotArrayError

if TYPE_CHECKING:
    from .core import Run

PATH_SEPARATOR = "/"

#: Descriptor keys that replace the run's default cursor operations.
CURSOR_KEYS = ("take_segment", "restore_segment")


def split_path(text: str) -> List[str]:
    """Split *text* on ``/``; a single leading separator is ignored.

    Empty inner or trailing segments are kept (``"a//b"`` → ``["a", "", "b"]``).
    """
    segments = text.split(PATH_SEPARATOR)
    if segments[0] == "":
        segments.pop(0)
    return segments


def normalize_context(path_or_context: Any) -> Dict[str, Any]:
    """Return a run descriptor for *path_or_context*.

    The result is always a fresh dict so the caller's mapping is never
    touched.  The ``"path"`` value is not validated here; see
    ``ensure_path``.
    """
    from .core import Run

    if isinstance(path_or_context, Run):
        return _descriptor_from_run(path_or_context)
    if isinstance(path_or_context, Mapping):
        return dict(path_or_context)
    if isinstance(path_or_context, (list, tuple)):
        return {"path": list(path_or_context)}
    if isinstance(path_or_context, str):
        return {"path": split_path(path_or_context)}
    if callable(path_or_context):
        return normalize_context(path_or_context())
    return {"path": []}


def ensure_path(descriptor: Mapping[str, Any]) -> List[Any]:
    """Return a private copy of the descriptor's path.

    Raises:
        PathNotArrayError: ``path`` is missing or not a list / tuple.
    """
    path = descriptor.get("path")
    if not isinstance(path, (list, tuple)):
        raise PathNotArrayError(path)
    return list(path)


def _descriptor_from_run(run: Run) -> Dict[str, Any]:
    descriptor: Dict[str, Any] = dict(run.metadata)
    descriptor["path"] = list(run.path)
    for key in CURSOR_KEYS:
        override = run.cursor_overrides.get(key)
        if override is not None:
            descriptor[key] = override
    return descriptor
