"""Internal API routers — /status, /zones, /price, /projection, /history, /live endpoints.

No business logic. Delegates to the Monitor and the LiveFeed.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import Response

from poimirror.config import INTERVAL_PRESETS_MS
from poimirror.live.simulator import MAX_VOLATILITY, MIN_VOLATILITY, Trend
from poimirror.live_feed import LiveFeed
from poimirror.monitor import Monitor
from poimirror.zones.models import PRICE_PRESETS, parse_side, parse_timeframe
from poimirror.zones.projection import Viewport

logger = logging.getLogger("poimirror")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_monitor: Optional[Monitor] = None  # Set via configure_routers()
_feed: Optional[LiveFeed] = None  # Set via configure_routers()


def configure_routers(monitor: Monitor, feed: Optional[LiveFeed] = None) -> None:
    """Inject dependencies from the application startup.

    Args:
        monitor: The ``Monitor`` that owns all zone and price state.
        feed: A ``LiveFeed`` bound to the same monitor, or ``None`` to
              disable the live endpoints.
    """
    global _monitor, _feed  # noqa: PLW0603
    if _feed is not None and _feed is not feed:
        _feed.stop()
    _monitor = monitor
    _feed = feed


def _get_monitor() -> Monitor:
    if _monitor is None:
        configure_routers(Monitor())
    return _monitor


def _error(*errors: str) -> dict:
    return {"status": "error", "errors": list(errors)}


def _exact_int(name: str, value) -> int:
    """Integer coercion that refuses to truncate (``1.9`` and ``"1.9"`` fail)."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


# ── Status ───────────────────────────────────────────────────────────────


@router.get("/status")
async def get_status():
    """Return live price, zone status and history statistics."""
    snapshot = _get_monitor().snapshot()
    snapshot["live_mode"] = _feed.state if _feed else "paused"
    return snapshot


# ── Zones ────────────────────────────────────────────────────────────────


@router.get("/zones")
async def list_zones(
    timeframe: Optional[str] = Query(default=None),
    side: Optional[str] = Query(default=None),
    search: str = Query(default=""),
    sort: str = Query(default="timeframe"),
):
    """Return the filtered, sorted zone list with original indices."""
    try:
        rows = _get_monitor().repo.view(
            timeframe=parse_timeframe(timeframe) if timeframe and timeframe != "all" else None,
            side=parse_side(side) if side and side != "all" else None,
            search=search,
            sort_by=sort,
        )
    except (ValueError, KeyError) as exc:
        return _error(str(exc))
    return {
        "zones": [
            {"index": i, **z.to_dict(), "effective_strength": z.effective_strength}
            for i, z in rows
        ],
        "total": len(_get_monitor().repo),
    }


@router.get("/zones/summary")
async def zone_summary():
    """Return zone counts by side and timeframe group."""
    return _get_monitor().repo.summary()


@router.post("/zones")
async def create_zone(body: dict):
    """Create a zone from form fields (label, start, end required)."""
    try:
        index = _get_monitor().create_zone(body)
    except ValueError as exc:
        return _error(str(exc))
    return {"status": "ok", "index": index}


@router.post("/zones/quick")
async def quick_add_zone():
    """Add a 15m buy zone of ±2 around the live price."""
    index = _get_monitor().quick_add()
    return {"status": "ok", "index": index, "zone": _get_monitor().repo.get(index).to_dict()}


@router.post("/zones/remove")
async def remove_zones(body: dict):
    """Remove several zones by index. Expects ``{"indices": [...]}``."""
    indices = body.get("indices")
    if not isinstance(indices, list) or not indices:
        return _error("No indices provided")
    try:
        removed = _get_monitor().remove_zones([_exact_int("index", i) for i in indices])
    except (IndexError, TypeError, ValueError) as exc:
        return _error(str(exc))
    return {"status": "ok", "removed": len(removed)}


@router.post("/zones/import")
async def import_zones(body: dict):
    """Replace all zones from JSON text. Expects ``{"json": "<text>"}``."""
    text = body.get("json")
    if not isinstance(text, str):
        return _error("Missing 'json' text")
    monitor = _get_monitor()
    try:
        count = monitor.import_json(text)
    except ValueError as exc:
        return _error(str(exc))
    return {"status": "ok", "count": count, "price_range": monitor.price_range.to_dict()}


@router.get("/zones/export")
async def export_zones():
    """Return the current zones as pretty-printed JSON text."""
    return Response(content=_get_monitor().dump_json(), media_type="application/json")


@router.put("/zones/{index}")
async def edit_zone(index: int, body: dict):
    """Replace the zone at *index* from form fields."""
    try:
        zone = _get_monitor().edit_zone(index, body)
    except IndexError as exc:
        return {"error": str(exc)}
    except ValueError as exc:
        return _error(str(exc))
    return {"status": "ok", "zone": zone.to_dict()}


@router.delete("/zones/{index}")
async def delete_zone(index: int):
    """Remove the zone at *index*."""
    try:
        zone = _get_monitor().remove_zone(index)
    except IndexError as exc:
        return {"error": str(exc)}
    return {"status": "ok", "zone": zone.to_dict()}


@router.post("/zones/{index}/jump")
async def jump_to_zone(index: int):
    """Move the live price to the center of the zone at *index*."""
    try:
        price = _get_monitor().jump_to_zone(index)
    except IndexError as exc:
        return {"error": str(exc)}
    return {"status": "ok", "live_price": price}


@router.post("/reset")
async def reset():
    """Restore default zones, display range and live price."""
    _get_monitor().reset()
    return {"status": "ok", **_get_monitor().snapshot()}


# ── Price controls ───────────────────────────────────────────────────────


@router.post("/price")
async def set_price(body: dict):
    """Set the live price. Expects ``{"price": <number>}``."""
    try:
        price = _get_monitor().set_live_price(body.get("price"))
    except ValueError as exc:
        return _error(str(exc))
    return {"status": "ok", "live_price": price}


@router.post("/price/range")
async def set_price_range(body: dict):
    """Set the display price range. Expects ``{"min": ..., "max": ...}``."""
    try:
        rng = _get_monitor().set_price_range(body.get("min"), body.get("max"))
    except ValueError as exc:
        return _error(str(exc))
    return {"status": "ok", "price_range": rng.to_dict()}


@router.get("/price/presets")
async def get_presets():
    return {"presets": [{"label": k, "price": v} for k, v in PRICE_PRESETS.items()]}


@router.post("/price/presets/{name}")
async def jump_to_preset(name: str):
    """Set the live price from a named preset."""
    try:
        price = _get_monitor().jump_to_preset(name)
    except KeyError as exc:
        return {"error": exc.args[0]}
    return {"status": "ok", "live_price": price}


# ── Projection ───────────────────────────────────────────────────────────


@router.get("/projection")
async def get_projection(
    width: float = Query(default=1200.0, gt=0),
    height: float = Query(default=600.0, gt=0),
):
    """Return the mirror chart layout for the current state."""
    viewport = Viewport(width=width, height=height)
    try:
        projection = _get_monitor().projection(viewport)
    except ValueError as exc:
        return _error(str(exc))
    return projection.to_dict()


# ── History ──────────────────────────────────────────────────────────────


@router.get("/history")
async def get_history(limit: int = Query(default=10, ge=1)):
    """Return recent samples (newest first) and session statistics."""
    history = _get_monitor().history
    if limit > history.capacity:
        return _error(f"limit must be at most {history.capacity}")
    return {
        "entries": [e.to_dict() for e in history.recent(limit)],
        "stats": history.stats(),
    }


@router.delete("/history")
async def clear_history():
    _get_monitor().clear_history()
    return {"status": "ok"}


@router.get("/history/export")
async def export_history():
    """Download every sample as ``price-history.json``."""
    return Response(
        content=_get_monitor().history.to_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="price-history.json"'},
    )


# ── Live mode ────────────────────────────────────────────────────────────


@router.post("/live/start")
async def start_live():
    """Switch the simulated feed on."""
    if _feed is None:
        return {"error": "No live feed"}
    if not _feed.start():
        return {"status": "already_running"}
    return {"status": "live"}


@router.post("/live/stop")
async def stop_live():
    """Switch the simulated feed off."""
    if _feed is None:
        return {"error": "No live feed"}
    _feed.stop()
    return {"status": "paused"}


@router.get("/live/settings")
async def get_live_settings():
    if _feed is None:
        return {"error": "No live feed"}
    return {
        "state": _feed.state,
        "interval_ms": _feed.interval_ms,
        "interval_presets_ms": list(INTERVAL_PRESETS_MS),
        "volatility": _feed.simulator.volatility,
        "trend": _feed.simulator.trend.value,
    }


@router.post("/live/settings")
async def post_live_settings(body: dict):
    """Update live feed settings.

    Validates every field before applying any of them.
    """
    if _feed is None:
        return {"error": "No live feed"}
    errors = []

    interval = volatility = trend = None
    if "interval_ms" in body:
        try:
            interval = _exact_int("interval_ms", body["interval_ms"])
        except ValueError:
            interval = None
        if interval not in INTERVAL_PRESETS_MS:
            errors.append(
                f"interval_ms must be one of {', '.join(str(i) for i in INTERVAL_PRESETS_MS)}"
            )
    if "volatility" in body:
        try:
            volatility = float(body["volatility"])
        except (TypeError, ValueError):
            volatility = None
        if volatility is None or not MIN_VOLATILITY <= volatility <= MAX_VOLATILITY:
            errors.append(f"volatility must be {MIN_VOLATILITY}–{MAX_VOLATILITY}")
    if "trend" in body:
        try:
            trend = Trend(body["trend"])
        except ValueError:
            errors.append("trend must be one of up, sideways, down")
    if errors:
        return _error(*errors)

    if interval is not None:
        _feed.interval_ms = interval
    if volatility is not None:
        _feed.simulator.volatility = volatility
    if trend is not None:
        _feed.simulator.trend = trend

    logger.info(
        "Live settings updated: interval=%d ms, volatility=%.1f, trend=%s",
        _feed.interval_ms, _feed.simulator.volatility, _feed.simulator.trend.value,
    )
    return {"status": "ok", **(await get_live_settings())}
