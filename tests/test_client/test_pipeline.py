"""Tests for the pipeline executor."""

from __future__ import annotations

import asyncio

import pytest

from yafetch.client.pipeline import call_transport, execute_call
from yafetch.config import get_global_options, merge_options, set_global_options
from yafetch.exceptions import ConfigError
from yafetch.models import Options, PluginsConfig
from yafetch.plugins.base import FunctionPlugin, FunctionWrapPlugin
from yafetch.plugins.context import PluginContext

URL = "https://example.com/items"


def _recorder(name: str, trail: list[str], stage: str = "before") -> FunctionPlugin:
    return FunctionPlugin(name, lambda ctx: trail.append(name), stage=stage)


class TestExecuteCall:
    async def test_without_plugins_returns_transport_response(self, fake_transport) -> None:
        response = await execute_call(URL, merge_options({"transport": fake_transport}))

        assert response.status == 200
        assert await response.text() == "ok"
        assert fake_transport.calls[0][0] == URL

    async def test_global_plugins_run_before_call_plugins(self, fake_transport) -> None:
        trail: list[str] = []
        set_global_options(
            {
                "plugins": PluginsConfig(
                    before=[_recorder("global-before", trail)],
                    after=[_recorder("global-after", trail, "after")],
                )
            }
        )
        options = merge_options(
            {
                "transport": fake_transport,
                "plugins": {
                    "before": [_recorder("call-before", trail)],
                    "after": [_recorder("call-after", trail, "after")],
                },
            }
        )

        await execute_call(URL, options)

        assert trail == ["global-before", "call-before", "global-after", "call-after"]

    async def test_stages_run_in_order(self, make_response) -> None:
        trail: list[str] = []

        async def transport(request, options):
            trail.append("transport")
            return make_response()

        async def wrap(next, context):
            trail.append("wrap:enter")
            result = await next()
            trail.append("wrap:exit")
            return result

        options = merge_options(
            {
                "transport": transport,
                "plugins": {
                    "before": [_recorder("before", trail)],
                    "wrap": [FunctionWrapPlugin("wrap", wrap)],
                    "after": [_recorder("after", trail, "after")],
                },
            }
        )

        await execute_call(URL, options)

        assert trail == ["before", "wrap:enter", "transport", "wrap:exit", "after"]

    async def test_before_plugins_run_concurrently(self, fake_transport) -> None:
        started = asyncio.Event()

        async def waiter(ctx):
            await asyncio.wait_for(started.wait(), timeout=1)

        async def setter(ctx):
            started.set()

        options = merge_options(
            {
                "transport": fake_transport,
                "plugins": {
                    "before": [FunctionPlugin("waiter", waiter), FunctionPlugin("setter", setter)]
                },
            }
        )

        response = await execute_call(URL, options)
        assert response.ok

    async def test_skip_directive_filters_global_plugins(self, fake_transport) -> None:
        trail: list[str] = []
        set_global_options(
            {
                "plugins": PluginsConfig(
                    before=[_recorder("noisy", trail), _recorder("quiet", trail)],
                    after=[_recorder("noisy", trail, "after")],
                )
            }
        )
        options = merge_options(
            {
                "transport": fake_transport,
                "skip_plugins": {"noisy": "before"},
                "plugins": {"before": [_recorder("noisy", trail)]},
            }
        )

        await execute_call(URL, options)

        assert trail == ["quiet", "noisy", "noisy"]

    async def test_context_is_shared_and_mutable(self, fake_transport) -> None:
        seen: dict[str, object] = {}

        def before(ctx):
            ctx.data["token"] = "abc"
            ctx.request_options.headers["X-Token"] = "abc"

        async def wrap(next, ctx):
            seen["wrap_token"] = ctx.data["token"]
            seen["wrap_response"] = ctx.response
            return await next()

        def after(ctx):
            seen["after_token"] = ctx.data["token"]
            seen["after_status"] = ctx.response.status

        options = merge_options(
            {
                "transport": fake_transport,
                "plugins": {
                    "before": [FunctionPlugin("before", before)],
                    "wrap": [FunctionWrapPlugin("wrap", wrap)],
                    "after": [FunctionPlugin("after", after, stage="after")],
                },
            }
        )

        await execute_call(URL, options)

        assert seen == {
            "wrap_token": "abc",
            "wrap_response": None,
            "after_token": "abc",
            "after_status": 200,
        }
        _, sent_options = fake_transport.calls[0]
        assert sent_options.headers["X-Token"] == "abc"

    async def test_wrap_result_replaces_response(self, fake_transport) -> None:
        captured = []

        async def wrap(next, ctx):
            response = await next()
            return await response.text()

        options = merge_options(
            {
                "transport": fake_transport,
                "plugins": {
                    "wrap": [FunctionWrapPlugin("text", wrap)],
                    "after": [FunctionPlugin("cap", lambda ctx: captured.append(ctx.response), stage="after")],
                },
            }
        )

        assert await execute_call(URL, options) == "ok"
        assert captured == ["ok"]

    async def test_wrap_can_recover_from_transport_error(self, transport_factory) -> None:
        transport = transport_factory(RuntimeError("down"))

        async def fallback(next, ctx):
            try:
                return await next()
            except RuntimeError:
                return "fallback"

        options = merge_options(
            {"transport": transport, "plugins": {"wrap": [FunctionWrapPlugin("fallback", fallback)]}}
        )

        assert await execute_call(URL, options) == "fallback"

    async def test_transport_error_propagates(self, transport_factory) -> None:
        options = merge_options({"transport": transport_factory(RuntimeError("down"))})
        with pytest.raises(RuntimeError, match="down"):
            await execute_call(URL, options)

    async def test_before_plugin_error_stops_the_call(self, fake_transport) -> None:
        def fail(ctx):
            raise ValueError("bad before")

        options = merge_options(
            {"transport": fake_transport, "plugins": {"before": [FunctionPlugin("fail", fail)]}}
        )

        with pytest.raises(ValueError, match="bad before"):
            await execute_call(URL, options)
        assert fake_transport.calls == []

    async def test_after_plugin_error_propagates(self, fake_transport) -> None:
        def fail(ctx):
            raise ValueError("bad after")

        options = merge_options(
            {
                "transport": fake_transport,
                "plugins": {"after": [FunctionPlugin("fail", fail, stage="after")]},
            }
        )

        with pytest.raises(ValueError, match="bad after"):
            await execute_call(URL, options)
        assert len(fake_transport.calls) == 1

    async def test_global_plugins_read_at_call_time(self, fake_transport) -> None:
        trail: list[str] = []
        options = merge_options({"transport": fake_transport})

        get_global_options().plugins = PluginsConfig(before=[_recorder("late", trail)])
        await execute_call(URL, options)

        assert trail == ["late"]


class TestCallTransport:
    async def test_falls_back_to_global_transport(self, fake_transport) -> None:
        set_global_options({"transport": fake_transport})
        context = PluginContext(request=URL, request_options=Options())

        response = await call_transport(context)

        assert response.status == 200
        assert fake_transport.calls == [(URL, context.request_options)]

    async def test_missing_transport_raises(self) -> None:
        context = PluginContext(request=URL, request_options=Options())
        with pytest.raises(ConfigError, match="Unable to find a transport"):
            await call_transport(context)

    async def test_uses_options_replaced_by_wrap_plugin(self, transport_factory, make_response) -> None:
        first = transport_factory(make_response(500))
        second = transport_factory(make_response(201))

        async def swap(next, ctx):
            ctx.request_options = merge_options({"transport": second})
            return await next()

        options = merge_options(
            {"transport": first, "plugins": {"wrap": [FunctionWrapPlugin("swap", swap)]}}
        )

        response = await execute_call(URL, options)

        assert response.status == 201
        assert first.calls == []
