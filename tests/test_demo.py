"""
End-to-end demo run against the in-memory pool
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import TEST_DSN
from tasklist import demo
from tasklist.services.task_repository import SELECT_ALL, SELECT_BY_STATUS


class TestRunDemo:

    @pytest.mark.asyncio
    async def test_full_run_prints_every_section(self, create_pool_mock, fake_pool, capsys):
        exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "=== All tasks ===" in out
        assert "=== Incomplete tasks ===" in out
        assert f"Found: #1 | {demo.SAMPLE_TITLES[0]} | done=False" in out
        assert "Updated list:" in out
        for title in demo.SAMPLE_TITLES + demo.BATCH_TITLES:
            assert title in out
        assert len(fake_pool.store.rows) == len(demo.SAMPLE_TITLES) + len(demo.BATCH_TITLES)
        assert fake_pool.closed

    @pytest.mark.asyncio
    async def test_open_failure_is_fatal(self, capsys):
        failing = AsyncMock(side_effect=ConnectionRefusedError("connection refused"))
        with patch("asyncpg.create_pool", new=failing):
            exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        assert exit_code == 1
        assert "=== All tasks ===" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_first_listing_failure_is_fatal(self, create_pool_mock, fake_pool, capsys):
        fake_pool.store.failing_queries[SELECT_ALL] = ConnectionResetError("connection reset")

        exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        assert exit_code == 1
        assert "=== All tasks ===" not in capsys.readouterr().out
        assert fake_pool.closed

    @pytest.mark.asyncio
    async def test_step_failures_are_logged_and_skipped(self, create_pool_mock, fake_pool, capsys, caplog, monkeypatch):
        monkeypatch.setattr(demo, "BATCH_TITLES", ["ok", None])
        fake_pool.store.failing_queries[SELECT_BY_STATUS] = ConnectionResetError("connection reset")

        exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Found: #1" in out
        assert "Updated list:" not in out
        assert "list_by_status_failed" in caplog.text
        assert "create_many_failed" in caplog.text
        assert len(fake_pool.store.rows) == len(demo.SAMPLE_TITLES)

    @pytest.mark.asyncio
    async def test_missing_lookup_id_is_not_fatal(self, create_pool_mock, fake_pool, capsys, caplog, monkeypatch):
        monkeypatch.setattr(demo, "LOOKUP_ID", 404)

        exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        assert exit_code == 0
        assert "find_by_id_failed" in caplog.text
        assert "Updated list:" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_driver_timeout_is_logged_and_skipped(self, create_pool_mock, fake_pool, capsys, caplog):
        import asyncio
        fake_pool.store.failing_queries[SELECT_BY_STATUS] = asyncio.TimeoutError()

        exit_code = await demo.run_demo(TEST_DSN, timeout=5)

        assert exit_code == 0
        assert "list_by_status_failed" in caplog.text
        assert "Updated list:" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_open_failure_log_hides_password(self, caplog):
        failing = AsyncMock(side_effect=ConnectionRefusedError("connection refused"))
        with patch("asyncpg.create_pool", new=failing):
            await demo.run_demo(TEST_DSN, timeout=5)

        assert "s3cret" not in caplog.text
        assert "tester:***REDACTED***@localhost" in caplog.text
