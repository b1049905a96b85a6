"""POI Mirror — application state owner.

One ``Monitor`` holds every piece of mutable state: the zone repository,
the live price, the display price range and the price history.  Views and
routers read from it and change it only through the methods below, each of
which completes before the next one starts.
"""

import logging
import math
import time
from typing import Callable, Optional

from poimirror.repos.history_repo import DEFAULT_CAPACITY, HistoryEntry, HistoryTracker
from poimirror.repos.zone_repo import ZoneRepo
from poimirror.zones.classifier import Classification, classify
from poimirror.zones.codec import dump_zones, parse_zones
from poimirror.zones.models import (
    DEFAULT_LIVE_PRICE,
    DEFAULT_PRICE_RANGE,
    PRICE_PRESETS,
    IncompleteFormInputError,
    MalformedImportError,
    PriceRange,
    Side,
    Timeframe,
    Zone,
    parse_side,
    parse_timeframe,
)
from poimirror.zones.projection import DEFAULT_PAD, Projection, Viewport, build_projection

logger = logging.getLogger("poimirror")

# Quick-add zones straddle the live price by this many price units.
QUICK_ADD_OFFSET = 2.0
QUICK_ADD_STRENGTH = 0.6

_REQUIRED_FORM_FIELDS = ("label", "start", "end")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _coerce_number(name: str, value) -> float:
    """Numeric coercion for manual controls and form fields."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return number


def zone_from_form(form: dict) -> Zone:
    """Build a zone from create/edit form fields.

    Only label, start and end are required; timeframe and side fall back
    to the form defaults (15m, buy).  Start, end and strength are coerced
    to numbers, and an empty strength means "use the timeframe default".

    Raises:
        IncompleteFormInputError: if label, start or end is missing or blank.
        ZoneValidationError: if the assembled zone breaks a zone rule.
        ValueError: if a numeric field cannot be coerced.
    """
    missing = [
        name for name in _REQUIRED_FORM_FIELDS
        if form.get(name) is None or str(form.get(name)).strip() == ""
    ]
    if missing:
        raise IncompleteFormInputError(missing)

    strength = form.get("strength")
    if strength is not None and str(strength).strip() == "":
        strength = None

    return Zone(
        timeframe=parse_timeframe(form.get("timeframe") or Timeframe.M15.value),
        side=parse_side(form.get("side") or Side.BUY.value),
        start=_coerce_number("start", form["start"]),
        end=_coerce_number("end", form["end"]),
        label=str(form["label"]),
        strength=None if strength is None else _coerce_number("strength", strength),
    )


class Monitor:
    """Single owner of zones, live price, display range and history.

    Args:
        zones: Zone repository. Defaults to one holding the canonical set.
        history_capacity: Maximum number of history samples.
        projection_pad: Price padding for the chart projection domain.
        clock: Millisecond epoch clock, injectable for tests.
    """

    def __init__(
        self,
        zones: Optional[ZoneRepo] = None,
        history_capacity: int = DEFAULT_CAPACITY,
        projection_pad: float = DEFAULT_PAD,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._repo = zones if zones is not None else ZoneRepo()
        self._history = HistoryTracker(capacity=history_capacity)
        self._live_price: float = DEFAULT_LIVE_PRICE
        self._price_range: PriceRange = DEFAULT_PRICE_RANGE
        self._projection_pad = projection_pad
        self._clock = clock
        # Seed the history so the first tick already has a previous sample.
        self.record_sample()

    # ── Read ─────────────────────────────────────────────────────────────

    @property
    def repo(self) -> ZoneRepo:
        return self._repo

    @property
    def history(self) -> HistoryTracker:
        return self._history

    @property
    def zones(self) -> tuple[Zone, ...]:
        return self._repo.zones

    @property
    def live_price(self) -> float:
        return self._live_price

    @property
    def price_range(self) -> PriceRange:
        return self._price_range

    def classification(self) -> Classification:
        """Classify the live price against the current zones (never cached)."""
        return classify(self._repo.zones, self._live_price)

    def projection(self, viewport: Optional[Viewport] = None) -> Projection:
        return build_projection(
            self._repo.zones,
            self._live_price,
            viewport=viewport,
            pad=self._projection_pad,
        )

    # ── Manual controls ──────────────────────────────────────────────────

    def set_live_price(self, price) -> float:
        self._live_price = _coerce_number("price", price)
        return self._live_price

    def set_price_range(self, min_price, max_price) -> PriceRange:
        """Set the display range; ``min > max`` is accepted as-is."""
        self._price_range = PriceRange(
            _coerce_number("min", min_price), _coerce_number("max", max_price)
        )
        return self._price_range

    def jump_to_preset(self, name: str) -> float:
        """Set the live price from the named preset.

        Raises ``KeyError`` if the preset does not exist.
        """
        if name not in PRICE_PRESETS:
            raise KeyError(
                f"Unknown preset '{name}'. Available: {', '.join(PRICE_PRESETS)}"
            )
        return self.set_live_price(PRICE_PRESETS[name])

    def jump_to_zone(self, index: int) -> float:
        """Move the live price to the center of the zone at *index*."""
        return self.set_live_price(self._repo.get(index).center)

    # ── Zone editing ─────────────────────────────────────────────────────

    def create_zone(self, form: dict) -> int:
        """Validate a create form and append the zone. Returns its index."""
        try:
            zone = zone_from_form(form)
        except ValueError as exc:
            logger.warning("Rejected new zone: %s", exc)
            raise
        return self._repo.add(zone)

    def edit_zone(self, index: int, form: dict) -> Zone:
        """Validate an edit form and replace the zone at *index*."""
        self._repo.get(index)
        try:
            zone = zone_from_form(form)
        except ValueError as exc:
            logger.warning("Rejected edit of zone %d: %s", index, exc)
            raise
        self._repo.replace_at(index, zone)
        return zone

    def quick_add(self) -> int:
        """Append a 15m buy zone of ±2 around the live price."""
        start = self._live_price - QUICK_ADD_OFFSET
        end = self._live_price + QUICK_ADD_OFFSET
        zone = Zone(
            timeframe=Timeframe.M15,
            side=Side.BUY,
            start=start,
            end=end,
            label=f"Quick POI {start:.1f}-{end:.1f}",
            strength=QUICK_ADD_STRENGTH,
        )
        return self._repo.add(zone)

    def remove_zone(self, index: int) -> Zone:
        return self._repo.remove_at(index)

    def remove_zones(self, indices: list[int]) -> list[Zone]:
        return self._repo.remove_many(indices)

    # ── Bulk import / export ─────────────────────────────────────────────

    def import_json(self, text: str) -> int:
        """Replace every zone from JSON text.

        On success the display range is recomputed from the new bounds.
        On failure nothing changes and ``MalformedImportError`` propagates.
        Returns the number of imported zones.
        """
        try:
            zones = parse_zones(text)
        except MalformedImportError as exc:
            logger.warning("Rejected zone import: %s", exc)
            raise
        new_range = self._repo.replace_all(zones)
        if new_range is not None:
            self._price_range = new_range
        return len(zones)

    def dump_json(self) -> str:
        return dump_zones(self._repo.zones)

    def reset(self) -> None:
        """Restore default zones, display range and live price."""
        self._repo.reset()
        self._price_range = DEFAULT_PRICE_RANGE
        self._live_price = DEFAULT_LIVE_PRICE
        logger.info("Monitor reset to defaults.")

    # ── History ──────────────────────────────────────────────────────────

    def record_sample(self) -> HistoryEntry:
        """Append the current price and its fresh status to the history."""
        entry = HistoryEntry(
            timestamp=self._clock(),
            price=self._live_price,
            status=self.classification().status,
        )
        self._history.append(entry)
        return entry

    def clear_history(self) -> HistoryEntry:
        """Empty the history, then re-seed it with the current sample."""
        self._history.clear()
        logger.info("Price history cleared.")
        return self.record_sample()

    # ── Snapshot ─────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        """Status dict for the API and the console dashboard."""
        cls = self.classification()
        return {
            "live_price": self._live_price,
            "status": cls.status.value,
            "active_buy": [z.label for z in cls.active_buy],
            "active_sell": [z.label for z in cls.active_sell],
            "price_range": self._price_range.to_dict(),
            "zone_count": len(self._repo),
            "history": self._history.stats(),
        }
