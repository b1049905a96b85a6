"""Projection engine — maps prices to chart coordinates for the mirror chart.

All zones share one vertical price axis.  The plot is also cut into one
horizontal lane per timeframe, but the lanes are only a labelled backdrop:
zone bands span the full plot width at their price-derived position, not
inside their own timeframe's lane.

The projection domain computed here is unrelated to the user's display
``PriceRange``; it always wraps every zone bound and the live price with a
fixed padding.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from poimirror.zones.classifier import classify
from poimirror.zones.models import (
    DEFAULT_STRENGTH,
    TIMEFRAME_LABELS,
    TIMEFRAME_ORDER,
    Status,
    Timeframe,
    Zone,
    effective_strength,
)

DEFAULT_PAD = 8.0
TICK_COUNT = 11


@dataclass(frozen=True)
class Viewport:
    """Chart canvas size and plot margins, in pixels."""

    width: float = 1200.0
    height: float = 600.0
    top: float = 40.0
    right: float = 120.0
    bottom: float = 40.0
    left: float = 120.0

    @property
    def plot_width(self) -> float:
        return self.width - self.left - self.right

    @property
    def plot_height(self) -> float:
        return self.height - self.top - self.bottom


@dataclass(frozen=True)
class Lane:
    """One timeframe row of the chart backdrop."""

    timeframe: Timeframe
    index: int
    label: str
    y: float
    height: float
    strength: float
    shaded: bool


@dataclass(frozen=True)
class ZoneBand:
    """Pixel geometry of one zone."""

    index: int  # position in the source zone sequence
    zone: Zone
    lane_index: Optional[int]
    x: float
    width: float
    y_top: float
    y_bottom: float
    strength: float
    active: bool

    @property
    def height(self) -> float:
        return self.y_bottom - self.y_top


@dataclass(frozen=True)
class ScaleTick:
    price: float
    y: float


@dataclass(frozen=True)
class Projection:
    """Immutable layout for one (zones, live price, viewport) triple."""

    viewport: Viewport
    domain_min: float
    domain_max: float
    live_price: float
    live_y: float
    status: Status
    lanes: tuple[Lane, ...]
    bands: tuple[ZoneBand, ...]
    ticks: tuple[ScaleTick, ...]

    def price_to_y(self, price: float) -> float:
        return price_to_y(price, self.domain_min, self.domain_max, self.viewport)

    def to_dict(self) -> dict:
        """Flatten to plain JSON-compatible types for the API."""
        vp = self.viewport
        return {
            "viewport": {
                "width": vp.width,
                "height": vp.height,
                "margins": {
                    "top": vp.top,
                    "right": vp.right,
                    "bottom": vp.bottom,
                    "left": vp.left,
                },
            },
            "domain": {"min": self.domain_min, "max": self.domain_max},
            "live": {
                "price": self.live_price,
                "y": self.live_y,
                "status": self.status.value,
            },
            "lanes": [
                {
                    "timeframe": lane.timeframe.value,
                    "index": lane.index,
                    "label": lane.label,
                    "y": lane.y,
                    "height": lane.height,
                    "strength": lane.strength,
                    "shaded": lane.shaded,
                }
                for lane in self.lanes
            ],
            "bands": [
                {
                    "index": band.index,
                    "zone": band.zone.to_dict(),
                    "lane_index": band.lane_index,
                    "x": band.x,
                    "width": band.width,
                    "y_top": band.y_top,
                    "y_bottom": band.y_bottom,
                    "height": band.height,
                    "strength": band.strength,
                    "active": band.active,
                }
                for band in self.bands
            ],
            "ticks": [{"price": t.price, "y": t.y} for t in self.ticks],
        }


def price_to_y(
    price: float,
    domain_min: float,
    domain_max: float,
    viewport: Viewport,
) -> float:
    """Linear inverse mapping: higher prices sit nearer the top.

    A single-point domain has no scale, so every price resolves to the
    vertical middle of the plot.
    """
    span = domain_max - domain_min
    if span == 0:
        return viewport.top + viewport.plot_height / 2
    return viewport.top + ((domain_max - price) / span) * viewport.plot_height


def build_projection(
    zones: Sequence[Zone],
    live_price: float,
    timeframe_order: Sequence[Timeframe] = TIMEFRAME_ORDER,
    viewport: Optional[Viewport] = None,
    pad: float = DEFAULT_PAD,
) -> Projection:
    """Compute the full chart layout.

    Args:
        zones: Zones to place, in repository order.
        live_price: Current price; always inside the domain.
        timeframe_order: Lane order, top to bottom.
        viewport: Canvas geometry. Defaults to ``Viewport()``.
        pad: Price units added below the lowest and above the highest value.

    Raises:
        ValueError: if *timeframe_order* is empty or the viewport leaves no
            room inside its margins.
    """
    if not timeframe_order:
        raise ValueError("timeframe_order must contain at least one timeframe")
    if viewport is None:
        viewport = Viewport()
    if viewport.plot_width <= 0 or viewport.plot_height <= 0:
        raise ValueError(
            f"viewport {viewport.width:g}x{viewport.height:g} must exceed its margins "
            f"({viewport.left + viewport.right:g} horizontal, "
            f"{viewport.top + viewport.bottom:g} vertical)"
        )

    values = [live_price]
    for zone in zones:
        values.append(zone.start)
        values.append(zone.end)
    domain_min = min(values) - pad
    domain_max = max(values) + pad

    def to_y(price: float) -> float:
        return price_to_y(price, domain_min, domain_max, viewport)

    lane_height = viewport.plot_height / len(timeframe_order)
    lanes = tuple(
        Lane(
            timeframe=tf,
            index=i,
            label=TIMEFRAME_LABELS[tf],
            y=viewport.top + i * lane_height,
            height=lane_height,
            strength=DEFAULT_STRENGTH[tf],
            shaded=i % 2 == 0,
        )
        for i, tf in enumerate(timeframe_order)
    )
    lane_lookup = {tf: i for i, tf in enumerate(timeframe_order)}

    bands = tuple(
        ZoneBand(
            index=i,
            zone=zone,
            lane_index=lane_lookup.get(zone.timeframe),
            x=viewport.left,
            width=viewport.plot_width,
            y_top=to_y(zone.end),
            y_bottom=to_y(zone.start),
            strength=effective_strength(zone),
            active=zone.contains(live_price),
        )
        for i, zone in enumerate(zones)
    )

    ticks = tuple(
        ScaleTick(price=float(p), y=to_y(float(p)))
        for p in np.linspace(domain_min, domain_max, TICK_COUNT)
    )

    return Projection(
        viewport=viewport,
        domain_min=domain_min,
        domain_max=domain_max,
        live_price=live_price,
        live_y=to_y(live_price),
        status=classify(zones, live_price).status,
        lanes=lanes,
        bands=bands,
        ticks=ticks,
    )
