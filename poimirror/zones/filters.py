"""Display filters and sort keys for the zone list — read-only views."""

from typing import Callable, Optional, Sequence

from poimirror.zones.models import Side, Timeframe, Zone, effective_strength, timeframe_rank

SortKey = Callable[[Zone], object]

SORT_KEYS: dict[str, SortKey] = {
    "timeframe": lambda z: timeframe_rank(z.timeframe),
    "side": lambda z: z.side.value,
    "price": lambda z: z.start,
    # Descending strength via negation keeps the sort stable
    "strength": lambda z: -effective_strength(z),
}


def matches(
    zone: Zone,
    timeframe: Optional[Timeframe] = None,
    side: Optional[Side] = None,
    search: str = "",
) -> bool:
    """Return ``True`` if *zone* passes every given filter (logical AND).

    The label search is a case-insensitive substring match; an empty
    string matches everything.
    """
    if timeframe is not None and zone.timeframe is not timeframe:
        return False
    if side is not None and zone.side is not side:
        return False
    if search and search.lower() not in zone.label.lower():
        return False
    return True


def filter_and_sort(
    zones: Sequence[Zone],
    timeframe: Optional[Timeframe] = None,
    side: Optional[Side] = None,
    search: str = "",
    sort_by: str = "timeframe",
) -> list[tuple[int, Zone]]:
    """Build the display list as ``(original_index, zone)`` pairs.

    Raises ``KeyError`` if *sort_by* is not a registered sort key.
    """
    if sort_by not in SORT_KEYS:
        raise KeyError(
            f"Unknown sort key '{sort_by}'. "
            f"Available: {', '.join(SORT_KEYS.keys())}"
        )
    key = SORT_KEYS[sort_by]
    rows = [
        (i, z) for i, z in enumerate(zones)
        if matches(z, timeframe=timeframe, side=side, search=search)
    ]
    rows.sort(key=lambda row: key(row[1]))
    return rows
