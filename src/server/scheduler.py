"""Timer loop that drives the idle sweep."""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from src.nudge.config import NudgePolicy
from src.nudge.sweep import IdleSweeper, SweepResult

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Calls ``IdleSweeper.sweep`` every ``interval_seconds``.

    A single loop task runs the ticks, so sweeps never overlap. The
    sweeper's own throttle still applies when ticks come faster than
    once a minute.
    """

    def __init__(
        self,
        sweeper: IdleSweeper,
        policy: NudgePolicy,
        session_store_path: Path,
        sessions_dir: Optional[Path] = None,
        interval_seconds: float = 60.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sweeper = sweeper
        self._policy = policy
        self._session_store_path = session_store_path
        self._sessions_dir = sessions_dir
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._last_tick_at: Optional[datetime] = None
        self._last_result: Optional[SweepResult] = None
        self._last_error: Optional[str] = None
        self._total_nudged = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_result(self) -> Optional[SweepResult]:
        return self._last_result

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "Idle sweep scheduler started (every %ss, store: %s)",
            self._interval, self._session_store_path,
        )

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Idle sweep scheduler stopped.")

    async def tick(self, force: bool = False) -> SweepResult:
        """Run one sweep now."""
        self._last_tick_at = datetime.now(timezone.utc)
        result = await self._sweeper.sweep(
            self._session_store_path,
            self._policy,
            sessions_dir=self._sessions_dir,
            force=force,
        )
        self._last_result = result
        self._total_nudged += result.nudged
        return result

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.tick()
                self._last_error = None
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Idle sweep tick error: %s", e)
                self._last_error = str(e)

            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break

    def get_status(self) -> dict:
        return {
            "running": self._running,
            "interval_seconds": self._interval,
            "session_store": str(self._session_store_path),
            "sessions_dir": str(self._sessions_dir) if self._sessions_dir else None,
            "last_tick_at": self._last_tick_at.isoformat() if self._last_tick_at else None,
            "last_swept": self._last_result.swept if self._last_result else None,
            "last_nudged": self._last_result.nudged if self._last_result else None,
            "total_nudged": self._total_nudged,
            "last_error": self._last_error,
        }
