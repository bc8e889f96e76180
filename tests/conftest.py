"""Shared fixtures for idle nudge tests."""
import json
import pytest
from pathlib import Path
from typing import Callable, Optional

from src.nudge.accountant import NudgeAccountant
from src.nudge.config import NudgePolicy, reset_nudge_message_cache
from src.nudge.sweep import reset_idle_nudge_state

NOW_MS = 1_760_000_000_000
MINUTE_MS = 60_000


@pytest.fixture(autouse=True)
def _reset_process_state() -> None:
    reset_idle_nudge_state()
    reset_nudge_message_cache()


@pytest.fixture
def now_ms() -> int:
    return NOW_MS


@pytest.fixture
def policy() -> NudgePolicy:
    return NudgePolicy(
        idle_ms=5 * MINUTE_MS,
        message="[System Message] This session has been idle, reply END when done.",
        max_nudges=3,
    )


@pytest.fixture
def accountant() -> NudgeAccountant:
    return NudgeAccountant()


@pytest.fixture
def sessions_dir(tmp_path: Path) -> Path:
    path = tmp_path / "sessions"
    path.mkdir()
    return path


def assistant_record(content, record_id: str = "m") -> dict:
    return {"type": "message", "id": record_id, "message": {"role": "assistant", "content": content}}


def user_record(text: str, record_id: str = "u") -> dict:
    return {
        "type": "message",
        "id": record_id,
        "message": {"role": "user", "content": [{"type": "text", "text": text}]},
    }


@pytest.fixture
def write_transcript(sessions_dir: Path) -> Callable[[str, list], Path]:
    """Write ``<session_id>.jsonl`` with one JSON record (or raw string) per line."""

    def _write(session_id: str, records: list) -> Path:
        path = sessions_dir / f"{session_id}.jsonl"
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_store(tmp_path: Path) -> Callable[[dict], Path]:
    """Write a session store file from ``{key: (session_id, updated_at)}``."""

    def _write(entries: dict, path: Optional[Path] = None) -> Path:
        store_path = path or tmp_path / "sessions.json"
        data = {
            key: {"sessionId": session_id, "updatedAt": updated_at}
            for key, (session_id, updated_at) in entries.items()
        }
        store_path.write_text(json.dumps(data), encoding="utf-8")
        return store_path

    return _write
