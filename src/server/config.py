"""Watchdog configuration from environment variables."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

from src.nudge.config import NudgePolicy, RawIdleNudge, normalize_idle_nudge

logger = logging.getLogger(__name__)

_RECOGNISED_BOOL_VALUES = frozenset(
    ("1", "true", "yes", "0", "false", "no")
)


@dataclass(frozen=True)
class DispatchConfig:
    """How nudges are delivered to the agent runner.

    ``method``: 'webhook', 'subprocess' or 'noop'.
    ``target``: URL (webhook) or command template (subprocess).
    ``timeout``: seconds to wait for one dispatch.
    """

    method: str = "noop"
    target: str = ""
    timeout: float = 10.0


@dataclass(frozen=True)
class WatchdogConfig:
    session_store_path: Path
    policy: Optional[NudgePolicy]
    sessions_dir: Optional[Path] = None
    interval_seconds: float = 60.0
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)

    @property
    def enabled(self) -> bool:
        return self.policy is not None


def _parse_bool(value: str, default: bool) -> bool:
    """Parse a boolean environment variable with explicit default.

    Recognises ``true/1/yes`` and ``false/0/no`` (case-insensitive).
    Returns *default* when the value is empty or unset, and logs a
    warning for anything else.
    """
    if not value:
        return default
    normalised = value.lower()
    if normalised not in _RECOGNISED_BOOL_VALUES:
        logger.warning(
            "Unrecognised boolean value %r, using default %s. "
            "Expected one of: true/1/yes or false/0/no.",
            value,
            default,
        )
        return default
    return normalised in ("1", "true", "yes")


def _idle_nudge_from_env() -> RawIdleNudge:
    """Build the raw idleNudge setting from IDLE_NUDGE_* variables."""
    if not _parse_bool(os.environ.get("IDLE_NUDGE_ENABLED", ""), default=True):
        return False
    settings = {}
    if idle_ms := os.environ.get("IDLE_NUDGE_IDLE_MS"):
        settings["idleMs"] = int(idle_ms)
    if max_nudges := os.environ.get("IDLE_NUDGE_MAX_NUDGES"):
        settings["maxNudges"] = int(max_nudges)
    if message := os.environ.get("IDLE_NUDGE_MESSAGE"):
        settings["message"] = message
    return settings or True


def load_config_from_env() -> WatchdogConfig:
    store_path = os.environ.get("IDLE_NUDGE_STORE_PATH")
    if not store_path:
        raise ValueError("Missing: IDLE_NUDGE_STORE_PATH")

    method = os.environ.get("IDLE_NUDGE_DISPATCH_METHOD", "noop")
    target = os.environ.get("IDLE_NUDGE_DISPATCH_TARGET", "")
    if method in ("webhook", "subprocess") and not target:
        raise ValueError(
            f"IDLE_NUDGE_DISPATCH_TARGET required when dispatch method is '{method}'"
        )

    sessions_dir = os.environ.get("IDLE_NUDGE_SESSIONS_DIR")
    return WatchdogConfig(
        session_store_path=Path(store_path),
        policy=normalize_idle_nudge(_idle_nudge_from_env()),
        sessions_dir=Path(sessions_dir) if sessions_dir else None,
        interval_seconds=float(os.environ.get("IDLE_NUDGE_INTERVAL_SECONDS", "60")),
        dispatch=DispatchConfig(
            method=method,
            target=target,
            timeout=float(os.environ.get("IDLE_NUDGE_DISPATCH_TIMEOUT", "10.0")),
        ),
    )
