"""LiveFeed — drives the simulated live price on a recurring asyncio task.

States are ``paused`` and ``live``.  Switching on records a sample at the
current price straight away and schedules a fresh task; every tick steps
the simulator, pushes the new price into the monitor and records another
sample.  Switching off cancels the task, so no tick runs afterwards.
"""

import asyncio
import logging
from typing import Optional

from poimirror.config import INTERVAL_PRESETS_MS
from poimirror.live.simulator import PriceSimulator
from poimirror.monitor import Monitor
from poimirror.repos.history_repo import HistoryEntry

logger = logging.getLogger("poimirror.live_feed")


class LiveFeed:
    """Start/stop lifecycle around the simulated price ticker.

    Args:
        monitor:     State owner that receives every new price.
        simulator:   Source of the next price.
        interval_ms: Tick interval; must be one of ``INTERVAL_PRESETS_MS``.
    """

    def __init__(
        self,
        monitor: Monitor,
        simulator: PriceSimulator,
        interval_ms: int = 5000,
    ) -> None:
        self._monitor = monitor
        self._simulator = simulator
        self.interval_ms = interval_ms
        self._task: Optional[asyncio.Task] = None
        self._tick_count: int = 0

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def simulator(self) -> PriceSimulator:
        return self._simulator

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> str:
        return "live" if self.running else "paused"

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @interval_ms.setter
    def interval_ms(self, value: int) -> None:
        value = int(value)
        if value not in INTERVAL_PRESETS_MS:
            raise ValueError(
                f"interval_ms must be one of "
                f"{', '.join(str(i) for i in INTERVAL_PRESETS_MS)}, got {value}"
            )
        self._interval_ms = value

    def start(self) -> bool:
        """Switch to live mode.

        Must be called from inside a running event loop.  Returns ``False``
        if the feed was already live.
        """
        if self.running:
            return False
        self._monitor.record_sample()
        self._task = asyncio.get_running_loop().create_task(self.run())
        logger.info("Live feed started (interval %d ms).", self._interval_ms)
        return True

    def stop(self) -> bool:
        """Switch to paused mode. Returns ``False`` if already paused."""
        if not self.running:
            self._task = None
            return False
        self._task.cancel()
        self._task = None
        logger.info("Live feed stopped after %d tick(s).", self._tick_count)
        return True

    def tick(self) -> HistoryEntry:
        """Advance the price once and record the sample."""
        price = self._simulator.next_price(self._monitor.live_price)
        self._monitor.set_live_price(price)
        entry = self._monitor.record_sample()
        self._tick_count += 1
        logger.debug("Tick %d: %.2f (%s)", self._tick_count, price, entry.status.value)
        return entry

    # ── Ticker loop ──────────────────────────────────────────────────────

    async def run(self, max_ticks: int = 0) -> list[HistoryEntry]:
        """Tick every ``interval_ms`` until cancelled.

        The interval is re-read each cycle so settings changes apply
        without restarting the feed.

        Args:
            max_ticks: Stop after this many ticks (0 = unlimited).

        Returns:
            The samples recorded by this run.
        """
        entries: list[HistoryEntry] = []
        while True:
            await asyncio.sleep(self._interval_ms / 1000)
            entries.append(self.tick())
            if max_ticks > 0 and len(entries) >= max_ticks:
                return entries
