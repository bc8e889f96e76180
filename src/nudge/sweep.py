"""Idle session sweep: find quiet ephemeral sessions and nudge them.

Called from a timer tick. Each non-throttled sweep reloads the session
store, selects idle cron/subagent/ticket sessions that have not yet
replied END, and triggers one nudge turn per session, one at a time.
Nothing raises out of a sweep: failures are logged and the next tick
tries again.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from src.nudge.accountant import NudgeAccountant
from src.nudge.config import NudgePolicy
from src.nudge.eligibility import Candidate, RunActiveCheck, select_candidates
from src.state.session_store import SessionStore, load_session_store

logger = logging.getLogger(__name__)


class NudgeStatus(Enum):
    """Outcome reported by the nudge dispatcher."""
    OK = "ok"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class NudgeOutcome:
    status: NudgeStatus
    error: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union["NudgeOutcome", Mapping[str, Any]]) -> "NudgeOutcome":
        """Accept either an outcome or a ``{"status": ..., "error": ...}`` mapping."""
        if isinstance(value, NudgeOutcome):
            return value
        return cls(status=NudgeStatus(value["status"]), error=value.get("error"))


@dataclass(frozen=True)
class SweepResult:
    swept: bool
    nudged: int


NOT_SWEPT = SweepResult(swept=False, nudged=0)

NudgeDispatch = Callable[[str, str], Awaitable[Union[NudgeOutcome, Mapping[str, Any]]]]
StoreLoader = Callable[[Union[str, Path]], SessionStore]


def _now_ms() -> int:
    return int(time.time() * 1000)


class IdleSweeper:
    """Runs idle sweeps against a session store.

    Sweeps must not overlap; the caller invokes ``sweep`` from a single
    timer loop.
    """

    def __init__(
        self,
        accountant: NudgeAccountant,
        is_run_active: RunActiveCheck,
        dispatch: NudgeDispatch,
        load_store: StoreLoader = load_session_store,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._accountant = accountant
        self._is_run_active = is_run_active
        self._dispatch = dispatch
        self._load_store = load_store
        self._log = log or logger

    @property
    def accountant(self) -> NudgeAccountant:
        return self._accountant

    async def collect_candidates(
        self,
        store: SessionStore,
        policy: NudgePolicy,
        now_ms: int,
        sessions_dir: Optional[Union[str, Path]] = None,
    ) -> list[Candidate]:
        """Sessions that would be nudged at ``now_ms``. Does not touch accounting."""
        return await select_candidates(
            store,
            cutoff_ms=now_ms - policy.idle_ms,
            is_run_active=self._is_run_active,
            nudge_counts=self._accountant.nudge_counts,
            max_nudges=policy.max_nudges,
            sessions_dir=sessions_dir,
        )

    async def load_store(self, session_store_path: Union[str, Path]) -> Optional[SessionStore]:
        """Load the store off the event loop; None (and a warning) on failure."""
        try:
            return await asyncio.to_thread(self._load_store, session_store_path)
        except Exception as e:
            self._log.warning(
                "idle-nudge: failed to load session store path=%s err=%s", session_store_path, e
            )
            return None

    async def sweep(
        self,
        session_store_path: Union[str, Path],
        policy: NudgePolicy,
        *,
        sessions_dir: Optional[Union[str, Path]] = None,
        now_ms: Optional[int] = None,
        force: bool = False,
    ) -> SweepResult:
        now = _now_ms() if now_ms is None else now_ms
        if self._accountant.should_throttle(now, forced=force):
            return NOT_SWEPT
        self._accountant.mark_swept(now)

        store = await self.load_store(session_store_path)
        if store is None:
            return NOT_SWEPT

        candidates = await self.collect_candidates(store, policy, now, sessions_dir)

        nudged = 0
        for candidate in candidates:
            if await self._nudge(candidate, policy.message, now):
                nudged += 1

        self._accountant.prune_absent(store.keys())

        if nudged > 0:
            self._log.info("idle-nudge: nudged %d idle session(s)", nudged)
        return SweepResult(swept=True, nudged=nudged)

    async def _nudge(self, candidate: Candidate, message: str, now_ms: int) -> bool:
        """Dispatch one nudge. True when the attempt counts against the session's budget."""
        key = candidate.session_key
        try:
            self._log.info(
                "idle-nudge: nudging idle session session_key=%s session_id=%s idle_ms=%d",
                key, candidate.entry.session_id, now_ms - (candidate.entry.updated_at or 0),
            )
            outcome = NudgeOutcome.coerce(await self._dispatch(key, message))
        except Exception as e:
            self._log.warning("idle-nudge: failed to trigger nudge session_key=%s err=%s", key, e)
            return False

        if outcome.status == NudgeStatus.SKIPPED:
            return False
        self._accountant.record_attempt(key)
        if outcome.status == NudgeStatus.ERROR:
            self._log.warning("idle-nudge: nudge run failed session_key=%s error=%s", key, outcome.error)
        return True


_default_accountant = NudgeAccountant()


def get_default_accountant() -> NudgeAccountant:
    return _default_accountant


def reset_idle_nudge_state() -> None:
    """Clear the process-wide nudge counts and throttle timer."""
    _default_accountant.reset()


async def sweep_idle_sessions(
    session_store_path: Union[str, Path],
    policy: NudgePolicy,
    *,
    is_run_active: RunActiveCheck,
    nudge_session: NudgeDispatch,
    sessions_dir: Optional[Union[str, Path]] = None,
    now_ms: Optional[int] = None,
    force: bool = False,
    log: Optional[logging.Logger] = None,
) -> SweepResult:
    """One sweep using the process-wide accountant.

    The throttle timer is shared by every store swept from this process.
    Use an ``IdleSweeper`` with its own ``NudgeAccountant`` to sweep
    several stores independently.
    """
    sweeper = IdleSweeper(
        _default_accountant, is_run_active=is_run_active, dispatch=nudge_session, log=log
    )
    return await sweeper.sweep(
        session_store_path, policy, sessions_dir=sessions_dir, now_ms=now_ms, force=force
    )
