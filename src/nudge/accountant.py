"""Per-session nudge accounting and sweep throttling."""
from typing import Iterable

MIN_SWEEP_INTERVAL_MS = 60_000


def should_throttle(
    now_ms: int, last_sweep_at_ms: int, min_interval_ms: int = MIN_SWEEP_INTERVAL_MS, forced: bool = False
) -> bool:
    return not forced and now_ms - last_sweep_at_ms < min_interval_ms


class NudgeAccountant:
    """Nudge counts per session key and the last sweep time.

    Construct one per running process (or per test) and hand it to the
    sweeper. State outlives individual sweeps; ``reset()`` clears it.
    """

    def __init__(self, min_interval_ms: int = MIN_SWEEP_INTERVAL_MS) -> None:
        self._min_interval_ms = min_interval_ms
        self._nudge_counts: dict[str, int] = {}
        self._last_sweep_at_ms = 0

    @property
    def min_interval_ms(self) -> int:
        return self._min_interval_ms

    @property
    def last_sweep_at_ms(self) -> int:
        return self._last_sweep_at_ms

    @property
    def nudge_counts(self) -> dict[str, int]:
        """Snapshot of the current counts."""
        return dict(self._nudge_counts)

    def count_for(self, session_key: str) -> int:
        return self._nudge_counts.get(session_key, 0)

    def record_attempt(self, session_key: str) -> int:
        count = self._nudge_counts.get(session_key, 0) + 1
        self._nudge_counts[session_key] = count
        return count

    def prune_absent(self, current_keys: Iterable[str]) -> int:
        """Drop counts for keys no longer in the store. Returns how many were dropped."""
        present = set(current_keys)
        stale = [key for key in self._nudge_counts if key not in present]
        for key in stale:
            del self._nudge_counts[key]
        return len(stale)

    def should_throttle(self, now_ms: int, forced: bool = False) -> bool:
        return should_throttle(now_ms, self._last_sweep_at_ms, self._min_interval_ms, forced)

    def mark_swept(self, now_ms: int) -> None:
        self._last_sweep_at_ms = now_ms

    def reset(self) -> None:
        self._nudge_counts.clear()
        self._last_sweep_at_ms = 0
