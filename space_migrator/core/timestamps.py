"""Collision-free per-second timestamps for imported messages."""

from __future__ import annotations

from datetime import datetime, timezone


class TimestampDeduplicator:
    """Hands out destination timestamps that never repeat within a run.

    Teams keeps second precision for imported messages, so source timestamps
    that fall in the same second are pushed forward one second at a time
    until they hit a free slot. The set of used seconds only grows.
    """

    def __init__(self) -> None:
        self._used: set[int] = set()

    def __len__(self) -> int:
        return len(self._used)

    def __contains__(self, seconds: object) -> bool:
        return seconds in self._used

    def assign_seconds(self, timestamp_ms: int) -> int:
        """Reserve and return the first free second at or after ``timestamp_ms``."""
        seconds = timestamp_ms // 1000
        while seconds in self._used:
            seconds += 1
        self._used.add(seconds)
        return seconds

    def assign(self, timestamp_ms: int) -> datetime:
        """Reserve a free second and return it as an aware UTC datetime."""
        return datetime.fromtimestamp(self.assign_seconds(timestamp_ms), tz=timezone.utc)
