"""State container and debounce tests."""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from studio.hooks.api_state import (
    DEFAULT_ERROR,
    AIGenerationHook,
    ApiHook,
    CollectionHook,
    VideoProcessingHook,
)
from studio.utils.debounce import Debouncer


class TestApiHook:
    """Single call state container."""

    def test_success_sets_data(self):
        hook = ApiHook()

        async def fn():
            return {"id": 1}

        result = asyncio.run(hook.execute(fn))

        assert result == {"id": 1}
        assert hook.data == {"id": 1}
        assert hook.loading is False
        assert hook.error is None

    def test_failure_keeps_previous_data_and_reraises(self):
        hook = ApiHook()
        hook.data = "previous"

        async def fn():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(hook.execute(fn))

        assert hook.data == "previous"
        assert hook.loading is False
        assert hook.error == "boom"

    def test_blank_error_message_uses_default(self):
        hook = ApiHook()

        async def fn():
            raise RuntimeError()

        with pytest.raises(RuntimeError):
            asyncio.run(hook.execute(fn))

        assert hook.error == DEFAULT_ERROR

    def test_loading_true_while_running(self):
        hook = ApiHook()
        seen = []

        async def fn():
            seen.append(hook.loading)
            return 1

        asyncio.run(hook.execute(fn))
        assert seen == [True]

    def test_reset(self):
        hook = ApiHook()
        hook.data, hook.error, hook.loading = 1, "x", True
        hook.reset()
        assert (hook.data, hook.error, hook.loading) == (None, None, False)


class TestBoundHooks:
    """Hooks bound to a service client."""

    def test_generate_title_forwards_arguments(self):
        client = Mock()
        client.generate_title = AsyncMock(return_value=["t1"])
        hook = AIGenerationHook(client)

        result = asyncio.run(hook.generate_title("idea", "prompt"))

        assert result == ["t1"]
        client.generate_title.assert_awaited_once_with("idea", "prompt", "sonnet-4")
        assert hook.data == ["t1"]

    def test_publish_error_recorded(self):
        client = Mock()
        client.publish_video = AsyncMock(side_effect=RuntimeError("API call failed: 500"))
        hook = VideoProcessingHook(client)

        with pytest.raises(RuntimeError):
            asyncio.run(hook.publish_video("v1", "2026-01-01"))

        assert hook.error == "API call failed: 500"


class TestCollectionHook:
    """List loader."""

    def test_refetch(self):
        async def fetch():
            return [1, 2]

        hook = CollectionHook(fetch)
        assert asyncio.run(hook.refetch()) == [1, 2]
        assert hook.error is None

    def test_refetch_failure_keeps_rows(self):
        calls = []

        async def fetch():
            calls.append(1)
            if len(calls) > 1:
                raise RuntimeError("offline")
            return ["a"]

        hook = CollectionHook(fetch)
        asyncio.run(hook.refetch())
        asyncio.run(hook.refetch())

        assert hook.data == ["a"]
        assert hook.error == "offline"
        assert hook.loading is False


class TestDebouncer:
    """Debounce combinator."""

    def test_only_last_trigger_runs(self):
        calls = []

        async def fn(value):
            calls.append(value)
            return value

        async def run():
            debouncer = Debouncer(fn, 0.01)
            debouncer.trigger("a")
            debouncer.trigger("ab")
            debouncer.trigger("abc")
            return await debouncer.latest()

        assert asyncio.run(run()) == "abc"
        assert calls == ["abc"]

    def test_in_flight_run_is_cancelled(self):
        finished = []

        async def slow(value):
            await asyncio.sleep(0.05)
            finished.append(value)
            return value

        async def run():
            debouncer = Debouncer(slow, 0)
            first = debouncer.trigger("old")
            await asyncio.sleep(0.01)
            debouncer.trigger("new")
            result = await debouncer.latest()
            return first, result

        first, result = asyncio.run(run())
        assert result == "new"
        assert first.cancelled()
        assert finished == ["new"]

    def test_latest_without_trigger(self):
        async def fn():
            return 1

        assert asyncio.run(Debouncer(fn, 0).latest()) is None

    def test_aclose_cancels_pending(self):
        calls = []

        async def fn():
            calls.append(1)

        async def run():
            debouncer = Debouncer(fn, 0.05)
            debouncer.trigger()
            assert debouncer.pending
            await debouncer.aclose()
            await asyncio.sleep(0.06)
            return debouncer.pending

        assert asyncio.run(run()) is False
        assert calls == []
