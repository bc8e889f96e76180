"""Tests for the sweep scheduler loop."""
import asyncio
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from src.nudge.sweep import SweepResult
from src.server.scheduler import SweepScheduler


def _sweeper(*results) -> MagicMock:
    """Sweeper whose sweeps yield ``results`` in turn, then empty successes."""
    pending = list(results)

    async def _sweep(*args, **kwargs) -> SweepResult:
        if not pending:
            return SweepResult(swept=True, nudged=0)
        result = pending.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    sweeper = MagicMock()
    sweeper.sweep = AsyncMock(side_effect=_sweep)
    return sweeper


class TestSweepScheduler:
    """Test the timer loop around IdleSweeper."""

    def test_interval_must_be_positive(self, policy, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="positive"):
            SweepScheduler(_sweeper(), policy, tmp_path / "s.json", interval_seconds=0)

    @pytest.mark.asyncio
    async def test_tick_passes_configuration(self, policy, tmp_path: Path) -> None:
        sweeper = _sweeper(SweepResult(swept=True, nudged=2))
        store, sessions = tmp_path / "s.json", tmp_path / "sessions"
        scheduler = SweepScheduler(sweeper, policy, store, sessions_dir=sessions)

        result = await scheduler.tick(force=True)

        assert result == SweepResult(swept=True, nudged=2)
        sweeper.sweep.assert_awaited_once_with(store, policy, sessions_dir=sessions, force=True)
        status = scheduler.get_status()
        assert status["last_nudged"] == 2
        assert status["total_nudged"] == 2
        assert status["last_tick_at"] is not None

    @pytest.mark.asyncio
    async def test_status_before_first_tick(self, policy, tmp_path: Path) -> None:
        scheduler = SweepScheduler(_sweeper(), policy, tmp_path / "s.json", interval_seconds=30)
        status = scheduler.get_status()
        assert status["running"] is False
        assert status["interval_seconds"] == 30
        assert status["last_swept"] is None
        assert status["sessions_dir"] is None

    @pytest.mark.asyncio
    async def test_loop_ticks_until_stopped(self, policy, tmp_path: Path) -> None:
        sweeper = _sweeper()
        scheduler = SweepScheduler(sweeper, policy, tmp_path / "s.json", interval_seconds=0.01)

        await scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert not scheduler.running
        assert sweeper.sweep.await_count >= 2
        calls = sweeper.sweep.await_count
        await asyncio.sleep(0.03)
        assert sweeper.sweep.await_count == calls

    @pytest.mark.asyncio
    async def test_loop_survives_tick_errors(self, policy, tmp_path: Path) -> None:
        sweeper = _sweeper(RuntimeError("unexpected"), SweepResult(swept=True, nudged=1))
        scheduler = SweepScheduler(sweeper, policy, tmp_path / "s.json", interval_seconds=0.01)

        await scheduler.start()
        for _ in range(50):
            await asyncio.sleep(0.01)
            if sweeper.sweep.await_count >= 2:
                break
        await scheduler.stop()

        status = scheduler.get_status()
        assert status["total_nudged"] == 1
        assert status["last_error"] is None

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, policy, tmp_path: Path) -> None:
        scheduler = SweepScheduler(_sweeper(), policy, tmp_path / "s.json", interval_seconds=10)
        await scheduler.start()
        first_task = scheduler._task
        await scheduler.start()
        assert scheduler._task is first_task
        await scheduler.stop()
