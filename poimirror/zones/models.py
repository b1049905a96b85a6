"""Zone data models — typed representations of POI zones and their metadata."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Timeframe(str, Enum):
    """Chart granularity a zone was drawn on."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"
    H4 = "4h"
    H1 = "1h"
    M15 = "15m"


class Side(str, Enum):
    """Demand (buy) or supply (sell) zone."""

    BUY = "buy"
    SELL = "sell"


class Status(str, Enum):
    """Where the live price sits relative to all zones."""

    NEUTRAL = "neutral"
    BUY = "buy"
    SELL = "sell"
    CONFLICT = "conflict"


# Canonical lane order, highest timeframe first.
TIMEFRAME_ORDER: tuple[Timeframe, ...] = (
    Timeframe.MONTHLY,
    Timeframe.WEEKLY,
    Timeframe.DAILY,
    Timeframe.H4,
    Timeframe.H1,
    Timeframe.M15,
)

TIMEFRAME_LABELS: dict[Timeframe, str] = {
    Timeframe.MONTHLY: "Monthly",
    Timeframe.WEEKLY: "Weekly",
    Timeframe.DAILY: "Daily",
    Timeframe.H4: "4H",
    Timeframe.H1: "1H",
    Timeframe.M15: "15M",
}

DEFAULT_STRENGTH: dict[Timeframe, float] = {
    Timeframe.MONTHLY: 1.0,
    Timeframe.WEEKLY: 0.9,
    Timeframe.DAILY: 0.8,
    Timeframe.H4: 0.7,
    Timeframe.H1: 0.6,
    Timeframe.M15: 0.5,
}

HIGHER_TIMEFRAMES = frozenset({Timeframe.MONTHLY, Timeframe.WEEKLY, Timeframe.DAILY})
LOWER_TIMEFRAMES = frozenset({Timeframe.H4, Timeframe.H1, Timeframe.M15})


class ZoneValidationError(ValueError):
    """A candidate zone breaks one of the zone rules."""


class IncompleteFormInputError(ValueError):
    """A create/edit form is missing one of its required fields."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required field(s): {', '.join(missing)}")


class MalformedImportError(ValueError):
    """Bulk import text is not a JSON array of valid zones."""


@dataclass(frozen=True)
class Zone:
    """A price interval of interest on one timeframe.

    Zones are value objects; edits replace a zone in the repository
    instead of mutating it.
    """

    timeframe: Timeframe
    side: Side
    start: float
    end: float
    label: str
    strength: Optional[float] = None

    def __post_init__(self) -> None:
        validate_zone(self)

    @property
    def center(self) -> float:
        """Midpoint of the interval."""
        return (self.start + self.end) / 2

    @property
    def width(self) -> float:
        return self.end - self.start

    @property
    def effective_strength(self) -> float:
        return effective_strength(self)

    def contains(self, price: float) -> bool:
        """Return ``True`` if *price* lies inside the zone, both ends included."""
        return self.start <= price <= self.end

    def to_dict(self) -> dict:
        """Serialise to the JSON shape used by import/export.

        A missing strength is omitted rather than written as ``null``.
        """
        data = {
            "timeframe": self.timeframe.value,
            "side": self.side.value,
            "start": self.start,
            "end": self.end,
            "label": self.label,
        }
        if self.strength is not None:
            data["strength"] = self.strength
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Zone":
        """Build a zone from a decoded JSON object.

        Raises ``ZoneValidationError`` for unknown enum values, non-numeric
        prices, or anything ``validate_zone`` rejects.
        """
        if not isinstance(data, dict):
            raise ZoneValidationError(
                f"Zone must be an object, got {type(data).__name__}"
            )
        for key in ("timeframe", "side", "start", "end", "label"):
            if key not in data:
                raise ZoneValidationError(f"Zone is missing '{key}'")

        strength = data.get("strength")
        return cls(
            timeframe=parse_timeframe(data["timeframe"]),
            side=parse_side(data["side"]),
            start=_coerce_price("start", data["start"]),
            end=_coerce_price("end", data["end"]),
            label=data["label"],
            strength=None if strength is None else _coerce_price("strength", strength),
        )


# ── Validation ───────────────────────────────────────────────────────────


def parse_timeframe(value) -> Timeframe:
    """Resolve *value* to a ``Timeframe`` or raise ``ZoneValidationError``."""
    try:
        return Timeframe(value)
    except ValueError:
        raise ZoneValidationError(
            f"Unknown timeframe '{value}'. "
            f"Available: {', '.join(tf.value for tf in TIMEFRAME_ORDER)}"
        ) from None


def parse_side(value) -> Side:
    """Resolve *value* to a ``Side`` or raise ``ZoneValidationError``."""
    try:
        return Side(value)
    except ValueError:
        raise ZoneValidationError(
            f"Unknown side '{value}'. Available: buy, sell"
        ) from None


def _coerce_price(name: str, value) -> float:
    # bool is an int subclass; JSON true/false is never a price
    if isinstance(value, bool):
        raise ZoneValidationError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ZoneValidationError(
            f"{name} must be a number, got {value!r}"
        ) from None


def validate_zone(zone: Zone) -> None:
    """Check every zone rule, raising ``ZoneValidationError`` on the first failure.

    Rules:
        - timeframe and side are recognised enum members
        - label is a non-empty string
        - start and end are finite and ``start <= end``
        - strength, when given, is finite and in (0, 1]
    """
    if not isinstance(zone.timeframe, Timeframe):
        raise ZoneValidationError(f"Unknown timeframe '{zone.timeframe}'")
    if not isinstance(zone.side, Side):
        raise ZoneValidationError(f"Unknown side '{zone.side}'")
    if not isinstance(zone.label, str) or not zone.label.strip():
        raise ZoneValidationError("label must be a non-empty string")

    for name in ("start", "end"):
        value = getattr(zone, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ZoneValidationError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ZoneValidationError(f"{name} must be finite, got {value}")

    if zone.start > zone.end:
        raise ZoneValidationError(
            f"start ({zone.start}) must not exceed end ({zone.end})"
        )

    if zone.strength is not None:
        s = zone.strength
        if isinstance(s, bool) or not isinstance(s, (int, float)) or not math.isfinite(s):
            raise ZoneValidationError(f"strength must be a finite number, got {s!r}")
        if not 0.0 < s <= 1.0:
            raise ZoneValidationError(f"strength must be in (0, 1], got {s}")


def effective_strength(zone: Zone) -> float:
    """Return the zone's strength, falling back to its timeframe default."""
    if zone.strength is not None:
        return zone.strength
    return DEFAULT_STRENGTH[zone.timeframe]


def timeframe_rank(timeframe: Timeframe) -> int:
    """Position of *timeframe* in the canonical lane order."""
    return TIMEFRAME_ORDER.index(timeframe)


# ── Canonical defaults ───────────────────────────────────────────────────

DEFAULT_LIVE_PRICE = 1814.0
DEFAULT_PRICE_RANGE_MIN = 1790.0
DEFAULT_PRICE_RANGE_MAX = 1840.0

DEFAULT_ZONES: tuple[Zone, ...] = (
    Zone(Timeframe.MONTHLY, Side.SELL, 1820.0, 1825.0, "Monthly Sell 1820-1825", 1.0),
    Zone(Timeframe.WEEKLY, Side.BUY, 1800.0, 1805.0, "Weekly Buy 1800-1805", 0.9),
    Zone(Timeframe.DAILY, Side.SELL, 1815.0, 1818.0, "Daily Sell 1815-1818", 0.8),
    Zone(Timeframe.H4, Side.BUY, 1810.0, 1812.0, "4H Buy 1810-1812", 0.7),
    Zone(Timeframe.H1, Side.SELL, 1816.0, 1818.0, "1H Sell 1816-1818", 0.6),
    Zone(Timeframe.M15, Side.BUY, 1813.0, 1814.0, "15M Buy 1813-1814", 0.5),
)

PRICE_PRESETS: dict[str, float] = {
    "Support 1": 1800.0,
    "Support 2": 1810.0,
    "Current": 1814.0,
    "Resistance 1": 1820.0,
    "Resistance 2": 1830.0,
}


@dataclass(frozen=True)
class PriceRange:
    """Display/interaction bounds for the manual price control.

    Independent of the projection domain; ``min > max`` is accepted and
    simply yields a reversed range.
    """

    min: float
    max: float

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}


DEFAULT_PRICE_RANGE = PriceRange(DEFAULT_PRICE_RANGE_MIN, DEFAULT_PRICE_RANGE_MAX)
