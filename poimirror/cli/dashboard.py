"""CLI dashboard — prints monitor status to the console."""

_STATUS_BADGES = {
    "buy": "In Buy Zone",
    "sell": "In Sell Zone",
    "conflict": "Conflict Zone",
    "neutral": "No POI Zone",
}


def _fmt(value, spec: str = ".2f") -> str:
    return format(value, spec) if value is not None else "N/A"


def print_status(status: dict) -> str:
    """Format and print a monitor snapshot.

    Args:
        status: Dict produced by ``Monitor.snapshot()``.

    Returns:
        The formatted string (also printed to stdout).
    """
    price = status.get("live_price")
    state = status.get("status", "neutral")
    price_range = status.get("price_range") or {}
    history = status.get("history") or {}
    active = list(status.get("active_buy", [])) + list(status.get("active_sell", []))

    change = history.get("change")
    change_pct = history.get("change_percent")
    if change is not None and change_pct is not None:
        change_str = f"{change:+.2f} ({change_pct:+.2f}%)"
    else:
        change_str = "N/A"

    lines = [
        "──────────────── POI Mirror Status ────────────────",
        f"  Live Price:      {_fmt(price)}",
        f"  Status:          {state.upper()} ({_STATUS_BADGES.get(state, state)})",
        f"  Active Zones:    {', '.join(active) if active else 'none'}",
        f"  Zones:           {status.get('zone_count', 0)}",
        f"  Price Range:     {_fmt(price_range.get('min'), '.1f')} – {_fmt(price_range.get('max'), '.1f')}",
        f"  Change:          {change_str}",
        f"  Session High:    {_fmt(history.get('session_high'))}",
        f"  Session Low:     {_fmt(history.get('session_low'))}",
        f"  Samples:         {history.get('count', 0)}",
        "───────────────────────────────────────────────────",
    ]
    output = "\n".join(lines)
    print(output)
    return output
