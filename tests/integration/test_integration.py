"""End-to-end scenarios: a lazily computed configuration tree."""

import asyncio

import pytest

import deduce
from deduce import DoubleFailureError, NotFoundError, build_default_engine


@pytest.fixture
def config_tree():
    """A settings tree whose leaves are partly computed on demand."""

    async def database(run):
        await asyncio.sleep(0)
        return {"host": "db.internal", "port": 5432, "$index": "unknown"}

    def feature(complete, run):
        name = run.take_segment()
        flags = {"search": "on", "beta": "off"}
        if name not in flags:
            complete(KeyError(name), None)
        else:
            asyncio.get_running_loop().call_soon(complete, None, flags[name])

    def broken(complete, run):
        raise ConnectionError("service down")

    return {
        "services": {
            "database": database,
            "cache": broken,
            "$error": lambda complete, run: complete(None, "degraded"),
        },
        "features": feature,
        "limits": [10, 100, {"burst": 1000}],
    }


class TestConfigurationTree:
    """Resolution across producers, containers and error handlers."""

    @pytest.mark.asyncio
    async def test_produced_container(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "services/database/host") == "db.internal"
        assert await default_engine.resolve(config_tree, "services/database/port") == 5432

    @pytest.mark.asyncio
    async def test_fallback_inside_produced_container(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "services/database/user") == "unknown"

    @pytest.mark.asyncio
    async def test_producer_consuming_segment(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "/features/search") == "on"

    @pytest.mark.asyncio
    async def test_producer_error_without_handler(self, default_engine, config_tree):
        with pytest.raises(KeyError):
            await default_engine.resolve(config_tree, "features/nope")

    @pytest.mark.asyncio
    async def test_service_error_handled_by_scope(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "services/cache") == "degraded"

    @pytest.mark.asyncio
    async def test_missing_service_handled_by_scope(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "services/queue") == "degraded"

    @pytest.mark.asyncio
    async def test_missing_top_level_key(self, default_engine, config_tree):
        with pytest.raises(NotFoundError):
            await default_engine.resolve(config_tree, "nothing/here")

    @pytest.mark.asyncio
    async def test_list_members(self, default_engine, config_tree):
        assert await default_engine.resolve(config_tree, "limits/2/burst") == 1000

    @pytest.mark.asyncio
    async def test_concurrent_runs(self, default_engine, config_tree):
        results = await asyncio.gather(
            default_engine.resolve_async(config_tree, "services/database/host"),
            default_engine.resolve_async(config_tree, "features/beta"),
            default_engine.resolve_async(config_tree, "services/cache"),
        )

        assert results == ["db.internal", "off", "degraded"]


class TestListenerStyle:
    """The callback surface, without awaiting."""

    @pytest.mark.asyncio
    async def test_on_success_chain(self):
        sample = {"foo": {"bar": "Baz", "$index": "Hello"}}
        seen = []
        done = asyncio.Event()

        def show(result):
            seen.append(result)
            done.set()

        deduce.resolve(sample, ["foo", "bar"]).on_success(show).on_failure(lambda error: done.set())
        await done.wait()

        assert seen == ["Baz"]

    @pytest.mark.asyncio
    async def test_generic_on(self):
        sample = {"foo": {"bar": "Baz", "$index": "Hello"}}
        seen = []

        events = deduce.resolve(sample, "foo/yam").on("success", seen.append)
        await events

        assert seen == ["Hello"]

    @pytest.mark.asyncio
    async def test_failure_listener(self):
        errors = []
        events = deduce.resolve({"foo": {}}, ["foo", "missing"]).on_failure(errors.append)

        with pytest.raises(NotFoundError):
            await events
        assert len(errors) == 1


class TestFatalConditions:
    """Fatal conditions surface to the host, not to listeners."""

    @pytest.mark.asyncio
    async def test_failing_error_handler(self, loop_errors):
        engine = build_default_engine(error_key="errorHandler")

        def bad_handler(complete, run):
            complete(RuntimeError("handler broke"))

        root = {"errorHandler": bad_handler, "a": lambda complete, run: complete(ValueError("X"))}

        with pytest.raises(DoubleFailureError):
            await engine.resolve(root, "a")
        assert len(loop_errors) == 1
