"""Read-only access to the JSON session store.

The store file maps session keys to entries::

    {"agent:main:cron:nightly": {"sessionId": "abc", "updatedAt": 1760000000000}}

Other processes rewrite it at any time, so it is read fresh on every call.
"""
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union


@dataclass(frozen=True)
class SessionEntry:
    """Latest known state of one session slot."""
    session_id: str
    updated_at: Optional[int] = None


SessionStore = dict[str, SessionEntry]


class SessionStoreError(Exception):
    """Session store could not be read or parsed."""


def load_session_store(path: Union[str, Path]) -> SessionStore:
    """Load the store from disk. A missing file is an empty store."""
    store_path = Path(path)
    if not store_path.exists():
        return {}
    try:
        data = json.loads(store_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SessionStoreError(f"Cannot read session store {store_path}: {e}") from e
    if not isinstance(data, dict):
        raise SessionStoreError(f"Session store {store_path} is not a JSON object")

    store: SessionStore = {}
    for key, raw in data.items():
        entry = _parse_entry(raw)
        if entry is not None:
            store[key] = entry
    return store


def _parse_entry(raw: Any) -> Optional[SessionEntry]:
    if not isinstance(raw, dict):
        return None
    session_id = raw.get("sessionId")
    updated_at = raw.get("updatedAt")
    if isinstance(updated_at, bool) or not isinstance(updated_at, (int, float)):
        updated_at = None
    elif isinstance(updated_at, float) and not math.isfinite(updated_at):
        updated_at = None
    return SessionEntry(
        session_id=session_id if isinstance(session_id, str) else "",
        updated_at=int(updated_at) if updated_at is not None else None,
    )
