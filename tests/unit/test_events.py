"""Tests for the RunEvents sink."""

import asyncio
import logging

import pytest

from deduce import RunEvents


class TestSubscription:
    """Test on() / on_success() / on_failure()."""

    def test_shortcuts_are_chainable(self):
        events = RunEvents()

        assert events.on_success(lambda v: None) is events
        assert events.on_failure(lambda e: None) is events
        assert events.on("progress", lambda *a: None) is events

    def test_success_notifies_success_listeners_only(self):
        events = RunEvents()
        seen = []
        events.on_success(lambda v: seen.append(("ok", v))).on_failure(lambda e: seen.append(("err", e)))

        events.succeed("Baz")

        assert seen == [("ok", "Baz")]
        assert events.outcome == (RunEvents.SUCCESS, "Baz")

    def test_failure_notifies_failure_listeners_only(self):
        events = RunEvents()
        error = ValueError("boom")
        seen = []
        events.on_success(lambda v: seen.append(("ok", v))).on_failure(lambda e: seen.append(("err", e)))

        events.fail(error)

        assert seen == [("err", error)]

    def test_generic_event_name(self):
        events = RunEvents()
        seen = []
        events.on(RunEvents.SUCCESS, seen.append)

        events.succeed(1)
        assert seen == [1]

    def test_custom_event(self):
        events = RunEvents()
        seen = []
        events.on("progress", lambda *args: seen.append(args))

        assert events.emit("progress", 1, 2) is True
        assert events.emit("other") is False
        assert seen == [(1, 2)]


class TestSettlement:
    """The sink settles exactly once."""

    def test_second_settlement_raises(self):
        events = RunEvents()
        events.succeed(1)

        with pytest.raises(RuntimeError):
            events.fail(ValueError("late"))
        with pytest.raises(RuntimeError):
            events.succeed(2)

    def test_abort_notifies_nobody(self):
        events = RunEvents()
        seen = []
        events.on_success(seen.append).on_failure(seen.append)

        events.abort(RuntimeError("fatal"))

        assert seen == []
        assert events.settled

    def test_unobserved_failure_is_logged(self, caplog):
        events = RunEvents()
        with caplog.at_level(logging.WARNING, logger="deduce.events"):
            events.fail(ValueError("nobody listens"))

        assert "no failure listener" in caplog.text


class TestAwaiting:
    """RunEvents is awaitable."""

    @pytest.mark.asyncio
    async def test_await_already_succeeded(self):
        events = RunEvents()
        events.succeed("done")

        assert await events == "done"

    @pytest.mark.asyncio
    async def test_await_failure_raises(self):
        events = RunEvents()
        events.fail(KeyError("k"))

        with pytest.raises(KeyError):
            await events

    @pytest.mark.asyncio
    async def test_await_abort_raises(self):
        events = RunEvents()
        events.abort(RuntimeError("fatal"))

        with pytest.raises(RuntimeError, match="fatal"):
            await events

    @pytest.mark.asyncio
    async def test_await_pending_then_settled(self):
        events = RunEvents()
        asyncio.get_running_loop().call_soon(events.succeed, "later")

        assert await events == "later"
