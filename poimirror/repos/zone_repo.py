"""Zone repository — in-memory ordered collection of POI zones."""

import logging
from typing import Iterable, Optional

from poimirror.zones.filters import filter_and_sort
from poimirror.zones.models import (
    DEFAULT_ZONES,
    HIGHER_TIMEFRAMES,
    LOWER_TIMEFRAMES,
    PriceRange,
    Side,
    Timeframe,
    Zone,
)

logger = logging.getLogger("poimirror.zone_repo")

# Price units added around the zone bounds after a bulk replace.
RANGE_MARGIN = 10.0


def bounds_range(zones: Iterable[Zone], margin: float = RANGE_MARGIN) -> Optional[PriceRange]:
    """Display range that wraps every zone bound, or ``None`` with no zones."""
    bounds: list[float] = []
    for z in zones:
        bounds.append(z.start)
        bounds.append(z.end)
    if not bounds:
        return None
    return PriceRange(min(bounds) - margin, max(bounds) + margin)


class ZoneRepo:
    """Ordered zone store with index-based editing.

    Duplicates and overlapping zones are legal.  Order is insertion order;
    sorting for display goes through :meth:`view` and never reorders the
    store.

    Args:
        zones: Initial contents. Defaults to the canonical default set.
    """

    def __init__(self, zones: Optional[Iterable[Zone]] = None) -> None:
        self._zones: list[Zone] = list(DEFAULT_ZONES if zones is None else zones)

    # ── Read ─────────────────────────────────────────────────────────────

    @property
    def zones(self) -> tuple[Zone, ...]:
        """Snapshot of the current zones in repository order."""
        return tuple(self._zones)

    def __len__(self) -> int:
        return len(self._zones)

    def get(self, index: int) -> Zone:
        self._check_index(index)
        return self._zones[index]

    def view(
        self,
        timeframe: Optional[Timeframe] = None,
        side: Optional[Side] = None,
        search: str = "",
        sort_by: str = "timeframe",
    ) -> list[tuple[int, Zone]]:
        """Filtered, sorted ``(original_index, zone)`` pairs for display."""
        return filter_and_sort(
            self._zones, timeframe=timeframe, side=side,
            search=search, sort_by=sort_by,
        )

    def summary(self) -> dict:
        """Zone counts by side and by timeframe group."""
        return {
            "total": len(self._zones),
            "buy": sum(1 for z in self._zones if z.side is Side.BUY),
            "sell": sum(1 for z in self._zones if z.side is Side.SELL),
            "higher_timeframe": sum(1 for z in self._zones if z.timeframe in HIGHER_TIMEFRAMES),
            "lower_timeframe": sum(1 for z in self._zones if z.timeframe in LOWER_TIMEFRAMES),
        }

    # ── Write ────────────────────────────────────────────────────────────

    def add(self, zone: Zone) -> int:
        """Append *zone* and return its index."""
        self._zones.append(zone)
        logger.info("Added zone '%s' at index %d.", zone.label, len(self._zones) - 1)
        return len(self._zones) - 1

    def remove_at(self, index: int) -> Zone:
        """Remove and return the zone at *index*."""
        self._check_index(index)
        zone = self._zones.pop(index)
        logger.info("Removed zone '%s' from index %d.", zone.label, index)
        return zone

    def remove_many(self, indices: Iterable[int]) -> list[Zone]:
        """Remove several zones by their current indices.

        Indices are validated up front, de-duplicated and removed from the
        highest down so earlier removals never shift later targets.
        Returns the removed zones in descending-index order.
        """
        targets = sorted(set(indices), reverse=True)
        for index in targets:
            self._check_index(index)
        return [self.remove_at(index) for index in targets]

    def replace_at(self, index: int, zone: Zone) -> Zone:
        """Put *zone* at *index* and return the zone it replaced."""
        self._check_index(index)
        previous = self._zones[index]
        self._zones[index] = zone
        logger.info("Replaced zone %d: '%s' → '%s'.", index, previous.label, zone.label)
        return previous

    def replace_all(self, zones: Iterable[Zone]) -> Optional[PriceRange]:
        """Swap in a whole new zone list.

        Returns the display range recomputed from the new bounds, or
        ``None`` when the new list is empty (the caller keeps its range).
        """
        self._zones = list(zones)
        logger.info("Replaced all zones (%d total).", len(self._zones))
        return bounds_range(self._zones)

    def reset(self) -> None:
        """Restore the canonical default zone set."""
        self._zones = list(DEFAULT_ZONES)
        logger.info("Zones reset to %d defaults.", len(self._zones))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Zone index must be an int, got {index!r}")
        if not 0 <= index < len(self._zones):
            raise IndexError(
                f"Zone index {index} out of range (0–{len(self._zones) - 1})"
            )
