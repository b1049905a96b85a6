"""Price history — bounded, time-ordered log of (price, status) samples."""

import json
from dataclasses import asdict, dataclass
from typing import Optional

from poimirror.zones.models import Status

DEFAULT_CAPACITY = 50


@dataclass(frozen=True)
class HistoryEntry:
    """One price sample."""

    timestamp: int  # ms since epoch
    price: float
    status: Status

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class HistoryTracker:
    """Append-only ring of the most recent price samples.

    Statistics are derived on demand and are ``None`` until at least two
    samples exist.

    Args:
        capacity: Maximum number of samples kept; the oldest are dropped first.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._entries: list[HistoryEntry] = []

    # ── Mutation ─────────────────────────────────────────────────────────

    def append(self, entry: HistoryEntry) -> None:
        """Push *entry* and trim to capacity."""
        self._entries.append(entry)
        overflow = len(self._entries) - self._capacity
        if overflow > 0:
            del self._entries[:overflow]

    def clear(self) -> None:
        self._entries.clear()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """All samples, oldest first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def recent(self, limit: int = 10) -> list[HistoryEntry]:
        """The last *limit* samples, newest first."""
        if limit <= 0:
            return []
        recent = self._entries[-limit:]
        recent.reverse()
        return recent

    @property
    def session_high(self) -> Optional[float]:
        """Highest sampled price."""
        if len(self._entries) < 2:
            return None
        return max(e.price for e in self._entries)

    @property
    def session_low(self) -> Optional[float]:
        """Lowest sampled price."""
        if len(self._entries) < 2:
            return None
        return min(e.price for e in self._entries)

    @property
    def change(self) -> Optional[float]:
        """Price delta between the two most recent samples."""
        if len(self._entries) < 2:
            return None
        return self._entries[-1].price - self._entries[-2].price

    @property
    def change_percent(self) -> Optional[float]:
        """``change`` as a percentage of the previous sample.

        A previous price of zero yields 0.0 instead of dividing by zero.
        """
        if len(self._entries) < 2:
            return None
        previous = self._entries[-2].price
        if previous == 0:
            return 0.0
        return (self._entries[-1].price - previous) / previous * 100.0

    def stats(self) -> dict:
        return {
            "count": len(self._entries),
            "session_high": self.session_high,
            "session_low": self.session_low,
            "change": self.change,
            "change_percent": self.change_percent,
        }

    # ── Export ───────────────────────────────────────────────────────────

    def to_json(self) -> str:
        """Pretty-printed JSON array of every sample, oldest first."""
        return json.dumps([e.to_dict() for e in self._entries], indent=2)
