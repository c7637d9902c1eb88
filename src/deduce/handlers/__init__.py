"""Handlers sub-package — one ``TargetHandler`` per target category.

terminal  – strings and numbers end the run
producer  – callback-style and coroutine producers, one-shot completion
container – segment lookup with fallback key
error     – backtrace walk to the nearest error handler
"""

from .container import ContainerHandler
from .error import ErrorRecoveryHandler
from .producer import Completion, ProducerHandler
from .terminal import TerminalHandler

__all__ = [
    "TerminalHandler",
    "ProducerHandler",
    "Completion",
    "ContainerHandler",
    "ErrorRecoveryHandler",
]
