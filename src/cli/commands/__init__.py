"""CLI commands."""

from . import (
    check_transcript,
    init,
    policy,
    sweep,
    watch,
)

__all__ = [
    "check_transcript",
    "init",
    "policy",
    "sweep",
    "watch",
]
