"""Tests for boardportal.services.scope."""

from __future__ import annotations

import asyncio

import pytest

from boardportal.services.scope import OperationScope


class TestOperationScope:
    async def test_run_returns_result(self):
        scope = OperationScope("s")

        async def work():
            return 7

        assert await scope.run(work()) == 7
        assert scope.pending_count == 0

    async def test_tracks_in_flight_calls(self):
        scope = OperationScope("s")
        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return "done"

        task = asyncio.ensure_future(scope.run(slow()))
        await asyncio.sleep(0)
        assert scope.pending_count == 1

        gate.set()
        assert await task == "done"
        assert scope.pending_count == 0

    async def test_close_does_not_cancel(self):
        scope = OperationScope("s")
        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return "finished"

        task = asyncio.ensure_future(scope.run(slow()))
        await asyncio.sleep(0)
        scope.close()
        gate.set()

        assert await task == "finished"
        assert scope.is_active is False

    async def test_errors_propagate(self):
        scope = OperationScope("s")

        async def failing():
            raise OSError("down")

        with pytest.raises(OSError):
            await scope.run(failing())
        assert scope.pending_count == 0
