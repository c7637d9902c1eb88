"""Target classification: the closed set of categories a value can fall into.

Exports
-------
Category
    ``TERMINAL``, ``PRODUCER``, ``CONTAINER``, ``ERROR``.

is_void
    Default absence predicate.  ``None`` and ``False`` are void; everything
    else (``0``, ``""``, ``[]`` included) is present.

ErrorMatcher, TerminalMatcher, ContainerMatcher, ProducerMatcher
    One matcher per category.

Classifier
    Evaluates the matchers in a fixed order and raises
    ``UnsupportedTargetError`` when none fires.
"""

from __future__ import annotations

import enum
import numbers
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Sequence, Tuple

from .errors import UnsupportedTargetError

#: Signature of an absence predicate.
VoidPredicate = Callable[[Any], bool]


def is_void(value: Any) -> bool:
    """Return ``True`` for ``None`` and ``False``.

    Identity checks on purpose: ``0 == False`` in Python, but ``0`` is a
    present value.
    """
    return value is None or value is False


class Category(enum.Enum):
    TERMINAL = "terminal"
    PRODUCER = "producer"
    CONTAINER = "container"
    ERROR = "error"


class CategoryMatcher(ABC):
    """Predicate: does *target* belong to this matcher's category?"""

    @abstractmethod
    def matches(self, target: Any) -> bool: ...


class ErrorMatcher(CategoryMatcher):
    """Exception instances, routed to recovery instead of treated as data."""

    def matches(self, target: Any) -> bool:
        return isinstance(target, BaseException)


class TerminalMatcher(CategoryMatcher):
    """Strings and numbers.  ``bool`` is excluded even though it is an ``int``."""

    def matches(self, target: Any) -> bool:
        if isinstance(target, bool):
            return False
        return isinstance(target, (str, numbers.Number))


class ContainerMatcher(CategoryMatcher):
    """Mappings, lists and tuples."""

    def matches(self, target: Any) -> bool:
        return isinstance(target, (Mapping, list, tuple))


class ProducerMatcher(CategoryMatcher):
    """Any callable not already claimed by another category."""

    def matches(self, target: Any) -> bool:
        return callable(target)


class Classifier:
    """Ordered, closed category lookup.

    ::

        Classifier().classify("Baz")           # Category.TERMINAL
        Classifier().classify({"a": 1})        # Category.CONTAINER
        Classifier().classify(None)            # raises UnsupportedTargetError
    """

    DEFAULT_ORDER: Tuple[Tuple[Category, CategoryMatcher], ...] = (
        (Category.ERROR, ErrorMatcher()),
        (Category.TERMINAL, TerminalMatcher()),
        (Category.CONTAINER, ContainerMatcher()),
        (Category.PRODUCER, ProducerMatcher()),
    )

    def __init__(self, matchers: Sequence[Tuple[Category, CategoryMatcher]] | None = None) -> None:
        self._matchers = tuple(matchers) if matchers is not None else self.DEFAULT_ORDER

    def classify(self, target: Any) -> Category:
        for category, matcher in self._matchers:
            if matcher.matches(target):
                return category
        raise UnsupportedTargetError(target)
