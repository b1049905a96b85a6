"""Tests for the price history tracker."""

import json

import pytest

from poimirror.repos.history_repo import HistoryEntry, HistoryTracker
from poimirror.zones.models import Status


def _entry(i: int, price: float | None = None, status: Status = Status.NEUTRAL) -> HistoryEntry:
    return HistoryEntry(
        timestamp=1_700_000_000_000 + i * 1000,
        price=1800.0 + i if price is None else price,
        status=status,
    )


class TestHistoryCap:
    def test_sixty_appends_keep_last_fifty_in_order(self):
        history = HistoryTracker()
        for i in range(60):
            history.append(_entry(i))
        assert len(history) == 50
        assert [e.timestamp for e in history.entries] == [
            _entry(i).timestamp for i in range(10, 60)
        ]

    def test_custom_capacity(self):
        history = HistoryTracker(capacity=3)
        for i in range(5):
            history.append(_entry(i))
        assert [e.price for e in history.entries] == [1802.0, 1803.0, 1804.0]

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="capacity"):
            HistoryTracker(capacity=0)

    def test_clear(self):
        history = HistoryTracker()
        history.append(_entry(0))
        history.clear()
        assert len(history) == 0


class TestHistoryStats:
    def test_undefined_below_two_entries(self):
        history = HistoryTracker()
        assert history.session_high is None
        assert history.change is None
        history.append(_entry(0))
        assert history.session_low is None
        assert history.change_percent is None

    def test_high_low_and_change(self):
        history = HistoryTracker()
        for price in (1810.0, 1818.0, 1805.0, 1812.0):
            history.append(_entry(0, price=price))
        assert history.session_high == 1818.0
        assert history.session_low == 1805.0
        assert history.change == pytest.approx(7.0)
        assert history.change_percent == pytest.approx(7.0 / 1805.0 * 100)

    def test_change_percent_guards_zero_previous(self):
        history = HistoryTracker()
        history.append(_entry(0, price=0.0))
        history.append(_entry(1, price=5.0))
        assert history.change == 5.0
        assert history.change_percent == 0.0

    def test_stats_dict(self):
        history = HistoryTracker()
        history.append(_entry(0, price=1800.0))
        history.append(_entry(1, price=1810.0))
        assert history.stats() == {
            "count": 2,
            "session_high": 1810.0,
            "session_low": 1800.0,
            "change": 10.0,
            "change_percent": pytest.approx(10.0 / 1800.0 * 100),
        }


class TestHistoryRead:
    def test_recent_is_newest_first(self):
        history = HistoryTracker()
        for i in range(15):
            history.append(_entry(i))
        recent = history.recent(10)
        assert len(recent) == 10
        assert recent[0].price == 1814.0
        assert recent[-1].price == 1805.0
        assert history.entries[-1].price == 1814.0  # store untouched

    def test_recent_zero(self):
        history = HistoryTracker()
        history.append(_entry(0))
        assert history.recent(0) == []

    def test_to_json(self):
        history = HistoryTracker()
        history.append(_entry(0, status=Status.BUY))
        data = json.loads(history.to_json())
        assert data == [{"timestamp": 1_700_000_000_000, "price": 1800.0, "status": "buy"}]
