"""Idle nudge policy resolution from the agents.defaults.idleNudge setting."""
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_IDLE_NUDGE_MS = 5 * 60_000
DEFAULT_MAX_NUDGES = 3
SYSTEM_MESSAGE_PREFIX = "[System Message] "
HARDCODED_NUDGE_MESSAGE = (
    "This session has been idle for 5 min, if it is over update your files "
    "and reply END to prevent this message from repeating."
)
DEFAULT_PROMPT_PATH = Path(__file__).resolve().parents[2] / "prompts" / "idle-nudge.md"


class NudgeConfigError(Exception):
    """Invalid idleNudge setting."""


@dataclass(frozen=True)
class NudgePolicy:
    """Canonical nudge policy; the only form the sweep ever sees."""
    idle_ms: int
    message: str
    max_nudges: int


class IdleNudgeSettings(BaseModel):
    """Object form of the idleNudge setting. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    idle_ms: Optional[int] = Field(default=None, alias="idleMs", ge=0)
    message: Optional[str] = None
    max_nudges: Optional[int] = Field(default=None, alias="maxNudges", ge=0)


RawIdleNudge = Union[bool, int, float, Mapping[str, Any], IdleNudgeSettings, None]


class NudgeMessageCache:
    """Single-slot memo for the default nudge message text.

    The prompt file is read on first ``get()`` and kept until ``reset()``.
    A missing, unreadable or empty file falls back to the hardcoded text.
    """

    def __init__(self, prompt_path: Optional[Path] = None) -> None:
        self._prompt_path = prompt_path or DEFAULT_PROMPT_PATH
        self._cached: Optional[str] = None

    @property
    def prompt_path(self) -> Path:
        return self._prompt_path

    @property
    def is_loaded(self) -> bool:
        return self._cached is not None

    def get(self) -> str:
        if self._cached is None:
            self._cached = self._load()
        return self._cached

    def reset(self) -> None:
        self._cached = None

    def _load(self) -> str:
        try:
            text = self._prompt_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Nudge prompt %s unreadable (%s), using built-in text", self._prompt_path, e)
            text = ""
        return f"{SYSTEM_MESSAGE_PREFIX}{text or HARDCODED_NUDGE_MESSAGE}"


_default_messages = NudgeMessageCache()


def get_default_nudge_message() -> str:
    """Return the process-wide default nudge message."""
    return _default_messages.get()


def reset_nudge_message_cache() -> None:
    """Drop the cached default message (tests, or after the prompt file changes)."""
    _default_messages.reset()


def resolve_nudge_policy(
    agent_defaults: Optional[Mapping[str, Any]] = None,
    messages: Optional[NudgeMessageCache] = None,
) -> Optional[NudgePolicy]:
    """Resolve agents.defaults.idleNudge into a policy, or None when disabled."""
    raw = agent_defaults.get("idleNudge") if agent_defaults else None
    return normalize_idle_nudge(raw, messages)


def normalize_idle_nudge(
    raw: RawIdleNudge, messages: Optional[NudgeMessageCache] = None
) -> Optional[NudgePolicy]:
    """Normalize the union-typed setting.

    ``False``/``0`` disable the feature, ``True``/``None`` use defaults,
    a bare number is the idle threshold in ms, and an object overrides
    individual fields.
    """
    cache = messages or _default_messages
    if raw is False or (_is_number(raw) and raw == 0):
        return None
    if raw is True or raw is None:
        return NudgePolicy(DEFAULT_IDLE_NUDGE_MS, cache.get(), DEFAULT_MAX_NUDGES)
    if _is_number(raw):
        if not math.isfinite(raw) or raw != int(raw):
            raise NudgeConfigError(f"idleNudge must be a whole number of ms, got {raw}")
        if raw < 0:
            raise NudgeConfigError(f"idleNudge must not be negative, got {raw}")
        return NudgePolicy(int(raw), cache.get(), DEFAULT_MAX_NUDGES)
    settings = _parse_settings(raw)
    return NudgePolicy(
        idle_ms=settings.idle_ms if settings.idle_ms is not None else DEFAULT_IDLE_NUDGE_MS,
        message=settings.message if settings.message is not None else cache.get(),
        max_nudges=settings.max_nudges if settings.max_nudges is not None else DEFAULT_MAX_NUDGES,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_settings(raw: Any) -> IdleNudgeSettings:
    if isinstance(raw, IdleNudgeSettings):
        return raw
    if not isinstance(raw, Mapping):
        raise NudgeConfigError(
            f"idleNudge must be a boolean, number or object, got {type(raw).__name__}"
        )
    try:
        return IdleNudgeSettings.model_validate(dict(raw))
    except ValidationError as e:
        raise NudgeConfigError(f"Invalid idleNudge settings: {e}") from e
