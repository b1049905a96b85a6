"""POI Mirror — application entry point.

Boots the FastAPI internal server and provides the CLI entry point.
"""

import logging

from fastapi import FastAPI

from poimirror.api.routers import router

app = FastAPI(title="POI Mirror Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("poimirror")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and start the server (or print the dashboard)."""
    import argparse
    import asyncio
    import pathlib
    import sys

    from poimirror.api.routers import configure_routers
    from poimirror.cli.dashboard import print_status
    from poimirror.config import load_config
    from poimirror.live.simulator import PriceSimulator
    from poimirror.live_feed import LiveFeed
    from poimirror.monitor import Monitor
    from poimirror.zones.models import MalformedImportError

    parser = argparse.ArgumentParser(description="POI Mirror zone monitor")
    parser.add_argument("--port", type=int, help="HTTP port (default: POI_HTTP_PORT or 8080)")
    parser.add_argument("--zones", help="JSON file of zones to load at startup")
    parser.add_argument(
        "--live",
        action="store_true",
        help="Start the simulated live price feed immediately",
    )
    parser.add_argument(
        "--print-status",
        action="store_true",
        help="Print the console dashboard and exit",
    )
    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    monitor = Monitor(
        history_capacity=config.history_capacity,
        projection_pad=config.projection_pad,
    )
    if args.zones:
        text = pathlib.Path(args.zones).read_text(encoding="utf-8")
        try:
            count = monitor.import_json(text)
        except MalformedImportError as exc:
            logger.error("Could not load zones from %s: %s", args.zones, exc)
            sys.exit(1)
        logger.info("Loaded %d zone(s) from %s.", count, args.zones)

    if args.print_status:
        print_status(monitor.snapshot())
        return

    simulator = PriceSimulator(
        floor=config.price_floor,
        ceiling=config.price_ceiling,
        volatility=config.volatility,
        trend=config.trend,
        seed=config.seed,
    )
    feed = LiveFeed(monitor, simulator, interval_ms=config.tick_interval_ms)
    configure_routers(monitor=monitor, feed=feed)

    port = args.port or config.http_port
    asyncio.run(_serve(feed, port, start_live=args.live))


async def _serve(feed, port: int, start_live: bool = False) -> None:
    """Run the API server, optionally with the live feed already on."""
    import uvicorn

    if start_live:
        feed.start()

    uvi_config = uvicorn.Config(app, host="0.0.0.0", port=port, log_level="info")
    server = uvicorn.Server(uvi_config)
    logger.info("POI Mirror API available at http://localhost:%d", port)
    try:
        await server.serve()
    finally:
        feed.stop()
    logger.info("POI Mirror stopped.")


if __name__ == "__main__":
    _run_cli()
