"""In-process registry of sessions with an agent turn in flight."""
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ActiveRunRegistry:
    """Tracks which session ids currently have a running agent turn.

    ``is_active`` is the liveness check the idle sweep consults: a session
    with a run in flight is never idle, whatever its timestamp says.
    """

    def __init__(self) -> None:
        self._active: dict[str, int] = {}

    def mark_started(self, session_id: str) -> None:
        self._active[session_id] = self._active.get(session_id, 0) + 1

    def mark_finished(self, session_id: str) -> None:
        remaining = self._active.get(session_id, 0) - 1
        if remaining > 0:
            self._active[session_id] = remaining
        else:
            self._active.pop(session_id, None)

    def is_active(self, session_id: str) -> bool:
        return session_id in self._active

    def active_ids(self) -> list[str]:
        return list(self._active)

    @asynccontextmanager
    async def track(self, session_id: str) -> AsyncIterator[None]:
        """Mark the session active for the duration of the block."""
        self.mark_started(session_id)
        try:
            yield
        finally:
            self.mark_finished(session_id)
