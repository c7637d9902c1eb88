"""pytest configuration and shared fixtures."""

import asyncio

import pytest
import pytest_asyncio

from deduce import build_default_engine


@pytest.fixture
def engine():
    """Engine whose reserved keys read naturally in test trees."""
    return build_default_engine(fallback_key="fallback", error_key="errorHandler")


@pytest.fixture
def default_engine():
    """Engine with the default ``$index`` / ``$error`` keys."""
    return build_default_engine()


@pytest.fixture
def sample():
    """Sample tree: one nested container with a fallback value."""
    return {"foo": {"bar": "Baz", "fallback": "Hello"}}


@pytest_asyncio.fixture
async def loop_errors():
    """Capture contexts passed to the running loop's exception handler."""
    loop = asyncio.get_running_loop()
    captured = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: captured.append(context))
    yield captured
    loop.set_exception_handler(previous)


@pytest.fixture
def later():
    """Return a helper that answers a producer from a future loop turn."""

    def answer(complete, *args, delay=0.01):
        asyncio.get_running_loop().call_later(delay, complete, *args)

    return answer
