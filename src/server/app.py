"""Watchdog wiring: sweeper, dispatcher and scheduler from configuration."""
import asyncio
import logging
from typing import Optional

from src.nudge.accountant import NudgeAccountant
from src.nudge.sweep import IdleSweeper
from src.server.config import WatchdogConfig, load_config_from_env
from src.server.dispatch import NudgeDispatcher
from src.server.scheduler import SweepScheduler
from src.state.runs import ActiveRunRegistry

logger = logging.getLogger(__name__)


def build_dispatcher(config: WatchdogConfig) -> NudgeDispatcher:
    """Build a NudgeDispatcher from the dispatch configuration."""
    return NudgeDispatcher(
        method=config.dispatch.method,
        target=config.dispatch.target,
        timeout=config.dispatch.timeout,
    )


def build_sweeper(
    config: WatchdogConfig,
    runs: Optional[ActiveRunRegistry] = None,
    accountant: Optional[NudgeAccountant] = None,
) -> IdleSweeper:
    """Build an IdleSweeper with its own accountant unless one is given."""
    runs = runs or ActiveRunRegistry()
    return IdleSweeper(
        accountant=accountant or NudgeAccountant(),
        is_run_active=runs.is_active,
        dispatch=build_dispatcher(config),
    )


def create_watchdog(
    config: Optional[WatchdogConfig] = None,
    runs: Optional[ActiveRunRegistry] = None,
) -> Optional[SweepScheduler]:
    """Create the sweep scheduler, or None when idle nudging is disabled.

    When called without arguments, loads configuration from environment
    variables.
    """
    if config is None:
        config = load_config_from_env()
    if config.policy is None:
        logger.info("Idle nudge disabled")
        return None
    scheduler = SweepScheduler(
        sweeper=build_sweeper(config, runs),
        policy=config.policy,
        session_store_path=config.session_store_path,
        sessions_dir=config.sessions_dir,
        interval_seconds=config.interval_seconds,
    )
    logger.info(
        "Idle nudge active, idle_ms=%d max_nudges=%d dispatch=%s",
        config.policy.idle_ms, config.policy.max_nudges, config.dispatch.method,
    )
    return scheduler


async def serve(config: Optional[WatchdogConfig] = None) -> None:
    """Run the watchdog until cancelled."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    scheduler = create_watchdog(config)
    if scheduler is None:
        return
    await scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()
