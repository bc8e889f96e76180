"""Idle session nudging for background agent sessions."""
from src.nudge.accountant import MIN_SWEEP_INTERVAL_MS, NudgeAccountant, should_throttle
from src.nudge.config import (
    DEFAULT_IDLE_NUDGE_MS,
    DEFAULT_MAX_NUDGES,
    IdleNudgeSettings,
    NudgeConfigError,
    NudgeMessageCache,
    NudgePolicy,
    get_default_nudge_message,
    normalize_idle_nudge,
    reset_nudge_message_cache,
    resolve_nudge_policy,
)
from src.nudge.eligibility import Candidate, select_candidates
from src.nudge.session_keys import is_nudge_eligible_session_key
from src.nudge.sweep import (
    IdleSweeper,
    NudgeOutcome,
    NudgeStatus,
    SweepResult,
    reset_idle_nudge_state,
    sweep_idle_sessions,
)
from src.nudge.transcript import session_ended_with_marker, transcript_is_terminal

__all__ = [
    "MIN_SWEEP_INTERVAL_MS",
    "NudgeAccountant",
    "should_throttle",
    "DEFAULT_IDLE_NUDGE_MS",
    "DEFAULT_MAX_NUDGES",
    "IdleNudgeSettings",
    "NudgeConfigError",
    "NudgeMessageCache",
    "NudgePolicy",
    "get_default_nudge_message",
    "normalize_idle_nudge",
    "reset_nudge_message_cache",
    "resolve_nudge_policy",
    "Candidate",
    "select_candidates",
    "is_nudge_eligible_session_key",
    "IdleSweeper",
    "NudgeOutcome",
    "NudgeStatus",
    "SweepResult",
    "reset_idle_nudge_state",
    "sweep_idle_sessions",
    "session_ended_with_marker",
    "transcript_is_terminal",
]
