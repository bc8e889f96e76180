"""Input validation utilities for CLI commands."""

import re

_DISPATCH_METHODS = ("webhook", "subprocess", "noop")
_SESSION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")


def validate_session_id(session_id: str) -> str:
    """Validate and return a transcript session ID. Raises ValueError if invalid."""
    if not session_id or not session_id.strip():
        raise ValueError("Session ID cannot be empty")
    session_id = session_id.strip()
    if len(session_id) > 256:
        raise ValueError("Session ID cannot exceed 256 characters")
    if not _SESSION_ID_PATTERN.match(session_id):
        raise ValueError(
            "Session ID can only contain letters, numbers, underscores, dots, and hyphens"
        )
    return session_id


def validate_dispatch(method: str, target: str) -> tuple[str, str]:
    """Validate a dispatch method and its target. Raises ValueError if invalid."""
    method = (method or "").strip().lower()
    target = (target or "").strip()
    if method not in _DISPATCH_METHODS:
        raise ValueError(
            f"Dispatch method must be one of: {', '.join(_DISPATCH_METHODS)}"
        )
    if method == "webhook":
        if not target.startswith(("http://", "https://")):
            raise ValueError("Webhook target must be an http:// or https:// URL")
        if len(target) > 2048:
            raise ValueError("Webhook URL cannot exceed 2048 characters")
    if method == "subprocess" and not target:
        raise ValueError("Subprocess target must be a command template")
    return method, target


def validate_interval(seconds: float) -> float:
    """Validate and return a sweep interval in seconds. Raises ValueError if invalid."""
    if seconds <= 0:
        raise ValueError("Interval must be positive")
    return seconds
