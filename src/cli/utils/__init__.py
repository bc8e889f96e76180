"""CLI utilities."""

from .config import ConfigError, ConfigManager
from .validation import validate_dispatch, validate_interval, validate_session_id

__all__ = [
    "ConfigError",
    "ConfigManager",
    "validate_dispatch",
    "validate_interval",
    "validate_session_id",
]
