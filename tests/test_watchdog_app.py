"""Tests for watchdog wiring."""
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, patch

from src.nudge.accountant import NudgeAccountant
from src.nudge.config import NudgePolicy
from src.nudge.sweep import NudgeOutcome, NudgeStatus, SweepResult
from src.server.app import build_sweeper, create_watchdog
from src.server.config import DispatchConfig, WatchdogConfig
from src.server.scheduler import SweepScheduler
from src.state.runs import ActiveRunRegistry
from tests.conftest import MINUTE_MS, NOW_MS, assistant_record


@pytest.fixture
def config(tmp_path: Path, sessions_dir: Path, policy: NudgePolicy) -> WatchdogConfig:
    return WatchdogConfig(
        session_store_path=tmp_path / "sessions.json",
        policy=policy,
        sessions_dir=sessions_dir,
        interval_seconds=15,
        dispatch=DispatchConfig(method="webhook", target="http://localhost:9000/nudge"),
    )


class TestCreateWatchdog:
    def test_disabled_returns_none(self, config: WatchdogConfig) -> None:
        disabled = WatchdogConfig(session_store_path=config.session_store_path, policy=None)
        assert create_watchdog(disabled) is None

    def test_enabled_builds_scheduler(self, config: WatchdogConfig) -> None:
        scheduler = create_watchdog(config)
        assert isinstance(scheduler, SweepScheduler)
        status = scheduler.get_status()
        assert status["interval_seconds"] == 15
        assert status["session_store"] == str(config.session_store_path)

    def test_loads_env_when_no_config(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("IDLE_NUDGE_STORE_PATH", str(tmp_path / "sessions.json"))
        monkeypatch.setenv("IDLE_NUDGE_ENABLED", "no")
        assert create_watchdog() is None

    def test_invalid_dispatch_rejected(self, config: WatchdogConfig) -> None:
        bad = WatchdogConfig(
            session_store_path=config.session_store_path,
            policy=config.policy,
            dispatch=DispatchConfig(method="subprocess", target=""),
        )
        with pytest.raises(ValueError, match="target required"):
            create_watchdog(bad)


class TestEndToEndSweep:
    """Sweep a real store and transcripts through the wired components."""

    @pytest.mark.asyncio
    async def test_only_idle_open_sessions_nudged(
        self, config: WatchdogConfig, write_store, write_transcript
    ) -> None:
        write_store({
            "agent:main:main": ("main-1", NOW_MS - 60 * MINUTE_MS),
            "agent:main:cron:nightly": ("cron-1", NOW_MS - 10 * MINUTE_MS),
            "agent:main:subagent:done": ("sub-done", NOW_MS - 10 * MINUTE_MS),
            "agent:main:subagent:busy": ("sub-busy", NOW_MS - 10 * MINUTE_MS),
            "agent:main:ticket:12:dev": ("ticket-1", NOW_MS - 10 * MINUTE_MS),
        }, config.session_store_path)
        write_transcript("sub-done", [assistant_record("Shipped it.\nEND")])
        write_transcript("cron-1", [assistant_record("Still crunching numbers")])

        runs = ActiveRunRegistry()
        runs.mark_started("sub-busy")
        accountant = NudgeAccountant()
        sweeper = build_sweeper(config, runs, accountant)

        with patch(
            "src.server.dispatch.NudgeDispatcher.dispatch",
            new=AsyncMock(return_value=NudgeOutcome(NudgeStatus.OK)),
        ) as dispatch:
            result = await sweeper.sweep(
                config.session_store_path, config.policy,
                sessions_dir=config.sessions_dir, now_ms=NOW_MS,
            )

        assert result == SweepResult(swept=True, nudged=2)
        assert [c.args[0] for c in dispatch.await_args_list] == [
            "agent:main:cron:nightly",
            "agent:main:ticket:12:dev",
        ]
        assert accountant.nudge_counts == {"agent:main:cron:nightly": 1, "agent:main:ticket:12:dev": 1}

    @pytest.mark.asyncio
    async def test_noop_dispatch_consumes_no_budget(self, tmp_path: Path, policy, write_store) -> None:
        config = WatchdogConfig(session_store_path=tmp_path / "sessions.json", policy=policy)
        write_store({"agent:a:cron:x": ("s1", NOW_MS - 10 * MINUTE_MS)}, config.session_store_path)
        accountant = NudgeAccountant()
        sweeper = build_sweeper(config, accountant=accountant)

        result = await sweeper.sweep(config.session_store_path, config.policy, now_ms=NOW_MS)

        assert result == SweepResult(swept=True, nudged=0)
        assert accountant.nudge_counts == {}
