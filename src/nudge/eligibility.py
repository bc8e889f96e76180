"""Selection of idle sessions that qualify for a nudge this sweep."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

from src.nudge.session_keys import is_nudge_eligible_session_key
from src.nudge.transcript import transcript_is_terminal
from src.state.session_store import SessionEntry

logger = logging.getLogger(__name__)

RunActiveCheck = Callable[[str], bool]


@dataclass(frozen=True)
class Candidate:
    """A session selected for a nudge."""
    session_key: str
    entry: SessionEntry


def _run_active(is_run_active: RunActiveCheck, session_key: str, session_id: str) -> bool:
    try:
        return bool(is_run_active(session_id))
    except Exception as e:
        logger.warning(
            "idle-nudge: liveness check failed session_key=%s session_id=%s err=%s",
            session_key, session_id, e,
        )
        return True


async def select_candidates(
    store: Mapping[str, SessionEntry],
    *,
    cutoff_ms: int,
    is_run_active: RunActiveCheck,
    nudge_counts: Mapping[str, int],
    max_nudges: int,
    sessions_dir: Optional[Union[str, Path]] = None,
) -> list[Candidate]:
    """Return the sessions to nudge, in store order.

    A session qualifies when its key is a cron, subagent or ticket key, it
    has a session id, it was last updated at or before ``cutoff_ms``, no run
    is in flight, its transcript has not ended with END (checked only when
    ``sessions_dir`` is given) and it still has nudge budget left
    (``max_nudges == 0`` means unlimited).
    """
    candidates: list[Candidate] = []
    for key, entry in store.items():
        if entry is None or not entry.session_id:
            continue
        if not is_nudge_eligible_session_key(key):
            continue
        # Unknown age cannot be judged idle
        if not entry.updated_at or entry.updated_at > cutoff_ms:
            continue
        if _run_active(is_run_active, key, entry.session_id):
            continue
        if sessions_dir and await transcript_is_terminal(entry.session_id, sessions_dir):
            logger.debug("idle-nudge: session_key=%s already ended, skipping", key)
            continue
        if max_nudges > 0 and nudge_counts.get(key, 0) >= max_nudges:
            continue
        candidates.append(Candidate(session_key=key, entry=entry))
    return candidates
