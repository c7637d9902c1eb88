from .core import (
    DEFAULT_ERROR_KEY,
    DEFAULT_FALLBACK_KEY,
    Backtrace,
    BacktraceEntry,
    DispatchTable,
    Engine,
    Run,
    Scheduler,
    TargetHandler,
    lookup,
)
from .errors import (
    DeduceError,
    DoubleFailureError,
    FatalResolutionError,
    NotFoundError,
    PathNotArrayError,
    ProducerError,
    StepFailedError,
    UnsupportedTargetError,
)
from .events import RunEvents
from .factory import build_default_engine, default_engine, resolve
from .handlers import (
    Completion,
    ContainerHandler,
    ErrorRecoveryHandler,
    ProducerHandler,
    TerminalHandler,
)
from .matchers import (
    Category,
    CategoryMatcher,
    Classifier,
    ContainerMatcher,
    ErrorMatcher,
    ProducerMatcher,
    TerminalMatcher,
    is_void,
)
from .paths import ensure_path, normalize_context, split_path

__all__ = [
    # core
    "Engine",
    "Run",
    "Backtrace",
    "BacktraceEntry",
    "DispatchTable",
    "Scheduler",
    "TargetHandler",
    "lookup",
    "DEFAULT_FALLBACK_KEY",
    "DEFAULT_ERROR_KEY",
    # errors
    "DeduceError",
    "PathNotArrayError",
    "NotFoundError",
    "ProducerError",
    "FatalResolutionError",
    "DoubleFailureError",
    "StepFailedError",
    "UnsupportedTargetError",
    # events
    "RunEvents",
    # factory
    "build_default_engine",
    "default_engine",
    "resolve",
    # handlers
    "TerminalHandler",
    "ProducerHandler",
    "Completion",
    "ContainerHandler",
    "ErrorRecoveryHandler",
    # matchers
    "Category",
    "CategoryMatcher",
    "Classifier",
    "ErrorMatcher",
    "TerminalMatcher",
    "ContainerMatcher",
    "ProducerMatcher",
    "is_void",
    # paths
    "normalize_context",
    "ensure_path",
    "split_path",
]
