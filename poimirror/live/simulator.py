"""Simulated price feed — random walk with a trend bias, clamped to fixed bounds."""

from enum import Enum
from typing import Optional

import numpy as np


class Trend(str, Enum):
    UP = "up"
    SIDEWAYS = "sideways"
    DOWN = "down"


TREND_BIAS: dict[Trend, float] = {
    Trend.UP: 0.3,
    Trend.SIDEWAYS: 0.0,
    Trend.DOWN: -0.3,
}

MIN_VOLATILITY = 0.1
MAX_VOLATILITY = 2.0


class PriceSimulator:
    """Generates the next live price from the current one.

    Each step moves by a uniform random amount in
    ``[-volatility, +volatility)`` plus the trend bias, then clamps to
    ``[floor, ceiling]``.  The clamp is a domain-wide sanity bound and has
    nothing to do with zone extents.

    Args:
        floor: Lowest price the feed may produce.
        ceiling: Highest price the feed may produce.
        volatility: Half-width of the random step (0.1–2.0).
        trend: Directional bias applied every step.
        seed: Optional seed for a reproducible walk.
    """

    def __init__(
        self,
        floor: float = 1790.0,
        ceiling: float = 1840.0,
        volatility: float = 0.5,
        trend: Trend = Trend.SIDEWAYS,
        seed: Optional[int] = None,
    ) -> None:
        if floor > ceiling:
            raise ValueError(f"floor ({floor}) must not exceed ceiling ({ceiling})")
        self._floor = floor
        self._ceiling = ceiling
        self.volatility = volatility
        self.trend = trend
        self._rng = np.random.default_rng(seed)

    @property
    def floor(self) -> float:
        return self._floor

    @property
    def ceiling(self) -> float:
        return self._ceiling

    @property
    def volatility(self) -> float:
        return self._volatility

    @volatility.setter
    def volatility(self, value: float) -> None:
        value = float(value)
        if not MIN_VOLATILITY <= value <= MAX_VOLATILITY:
            raise ValueError(
                f"volatility must be {MIN_VOLATILITY}–{MAX_VOLATILITY}, got {value}"
            )
        self._volatility = value

    @property
    def trend(self) -> Trend:
        return self._trend

    @trend.setter
    def trend(self, value) -> None:
        self._trend = Trend(value)

    def next_price(self, current: float) -> float:
        """Step the walk once from *current*."""
        random_change = (self._rng.random() - 0.5) * self._volatility * 2
        candidate = current + random_change + TREND_BIAS[self._trend]
        return float(np.clip(candidate, self._floor, self._ceiling))
