"""POI Mirror — application configuration.

Loads .env variables into a typed config object.
Validates values on startup; nothing is required, every variable has a
default.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from poimirror.live.simulator import MAX_VOLATILITY, MIN_VOLATILITY, Trend

# Live-feed tick intervals offered to the user, in milliseconds.
INTERVAL_PRESETS_MS: tuple[int, ...] = (1000, 5000, 15000, 60000, 300000)


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    log_level: str
    http_port: int
    price_floor: float
    price_ceiling: float
    tick_interval_ms: int
    volatility: float
    trend: Trend
    history_capacity: int
    projection_pad: float
    seed: Optional[int] = None


def _read(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a value cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    price_floor = _read("POI_PRICE_FLOOR", "1790", float)
    price_ceiling = _read("POI_PRICE_CEILING", "1840", float)
    if price_floor > price_ceiling:
        raise ValueError(
            f"POI_PRICE_FLOOR ({price_floor}) must not exceed "
            f"POI_PRICE_CEILING ({price_ceiling})"
        )

    tick_interval_ms = _read("POI_TICK_INTERVAL_MS", "5000", int)
    if tick_interval_ms not in INTERVAL_PRESETS_MS:
        raise ValueError(
            f"POI_TICK_INTERVAL_MS must be one of "
            f"{', '.join(str(i) for i in INTERVAL_PRESETS_MS)}, got {tick_interval_ms}"
        )

    volatility = _read("POI_VOLATILITY", "0.5", float)
    if not MIN_VOLATILITY <= volatility <= MAX_VOLATILITY:
        raise ValueError(
            f"POI_VOLATILITY must be {MIN_VOLATILITY}–{MAX_VOLATILITY}, got {volatility}"
        )

    history_capacity = _read("POI_HISTORY_CAPACITY", "50", int)
    if history_capacity < 1:
        raise ValueError(f"POI_HISTORY_CAPACITY must be at least 1, got {history_capacity}")

    projection_pad = _read("POI_PROJECTION_PAD", "8.0", float)
    if projection_pad < 0:
        raise ValueError(f"POI_PROJECTION_PAD must not be negative, got {projection_pad}")

    seed_raw = os.environ.get("POI_SEED")
    seed = _read("POI_SEED", seed_raw, int) if seed_raw else None

    return Config(
        log_level=os.environ.get("POI_LOG_LEVEL", "INFO").upper(),
        http_port=_read("POI_HTTP_PORT", "8080", int),
        price_floor=price_floor,
        price_ceiling=price_ceiling,
        tick_interval_ms=tick_interval_ms,
        volatility=volatility,
        trend=_read("POI_TREND", "sideways", Trend),
        history_capacity=history_capacity,
        projection_pad=projection_pad,
        seed=seed,
    )
