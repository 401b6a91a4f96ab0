"""Tests for boardportal.storage.base."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from boardportal.storage.base import BaseStorage


class TestAffectedRows:
    @pytest.mark.parametrize(
        "status, expected",
        [("UPDATE 3", 3), ("DELETE 0", 0), ("INSERT 0 1", 1), ("", 0), (None, 0)],
    )
    def test_command_tags(self, status, expected):
        assert BaseStorage.affected_rows(status) == expected


class TestInit:
    async def test_retries_until_backend_answers(self):
        pool = MagicMock()
        create_pool = AsyncMock(side_effect=[OSError("refused"), pool])
        storage = BaseStorage("postgresql://portal@db/boardportal", connect_retries=3)

        with patch("boardportal.storage.base.asyncpg.create_pool", new=create_pool), \
                patch("boardportal.storage.base.asyncio.sleep", new=AsyncMock()) as sleep:
            await storage.init()

        assert storage.pg_pool is pool
        assert create_pool.await_count == 2
        sleep.assert_awaited_once_with(1)

    async def test_gives_up_after_retries(self):
        create_pool = AsyncMock(side_effect=OSError("refused"))
        storage = BaseStorage("postgresql://portal@db/boardportal", connect_retries=2)

        with patch("boardportal.storage.base.asyncpg.create_pool", new=create_pool), \
                patch("boardportal.storage.base.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ConnectionError):
                await storage.init()

        assert not storage.is_connected
