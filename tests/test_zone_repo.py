"""Tests for the zone repository and its display view."""

import pytest

from poimirror.repos.zone_repo import ZoneRepo, bounds_range
from poimirror.zones.models import DEFAULT_ZONES, PriceRange, Side, Timeframe, Zone


def _zone(label, start=1800.0, end=1805.0, side=Side.BUY, tf=Timeframe.DAILY, strength=None):
    return Zone(tf, side, start, end, label, strength)


def _five() -> ZoneRepo:
    return ZoneRepo([_zone(f"z{i}", 1800.0 + i, 1801.0 + i) for i in range(5)])


# ── Editing ──────────────────────────────────────────────────────────────


class TestZoneRepoEditing:
    def test_defaults(self):
        assert ZoneRepo().zones == DEFAULT_ZONES

    def test_add_appends_and_returns_index(self):
        repo = ZoneRepo([])
        assert repo.add(_zone("a")) == 0
        assert repo.add(_zone("a")) == 1  # duplicates are fine
        assert len(repo) == 2

    def test_remove_at(self):
        repo = _five()
        removed = repo.remove_at(2)
        assert removed.label == "z2"
        assert [z.label for z in repo.zones] == ["z0", "z1", "z3", "z4"]

    def test_remove_at_out_of_range(self):
        with pytest.raises(IndexError):
            _five().remove_at(5)

    def test_negative_index_rejected(self):
        with pytest.raises(IndexError):
            _five().remove_at(-1)

    def test_remove_many_keeps_survivors_in_order(self):
        repo = _five()
        repo.remove_many([0, 2, 4])
        assert [z.label for z in repo.zones] == ["z1", "z3"]

    def test_remove_many_order_and_duplicates_do_not_matter(self):
        repo = _five()
        removed = repo.remove_many([4, 0, 2, 2])
        assert [z.label for z in removed] == ["z4", "z2", "z0"]
        assert [z.label for z in repo.zones] == ["z1", "z3"]

    def test_remove_many_is_all_or_nothing(self):
        repo = _five()
        with pytest.raises(IndexError):
            repo.remove_many([1, 9])
        assert len(repo) == 5

    def test_replace_at(self):
        repo = _five()
        previous = repo.replace_at(1, _zone("new"))
        assert previous.label == "z1"
        assert repo.get(1).label == "new"
        assert len(repo) == 5

    def test_replace_all_recomputes_range(self):
        repo = _five()
        rng = repo.replace_all([_zone("a", 1700.0, 1710.0), _zone("b", 1750.0, 1760.0)])
        assert rng == PriceRange(1690.0, 1770.0)
        assert len(repo) == 2

    def test_replace_all_empty_returns_none(self):
        repo = _five()
        assert repo.replace_all([]) is None
        assert len(repo) == 0

    def test_reset(self):
        repo = ZoneRepo([])
        repo.reset()
        assert repo.zones == DEFAULT_ZONES

    def test_zones_snapshot_is_immutable(self):
        repo = _five()
        snapshot = repo.zones
        repo.add(_zone("later"))
        assert len(snapshot) == 5


class TestBoundsRange:
    def test_margin(self):
        assert bounds_range([_zone("a", 10.0, 20.0)], margin=1.0) == PriceRange(9.0, 21.0)

    def test_empty(self):
        assert bounds_range([]) is None


# ── Display view ─────────────────────────────────────────────────────────


class TestZoneRepoView:
    def test_default_sort_is_timeframe_rank(self):
        repo = ZoneRepo([
            _zone("m15", tf=Timeframe.M15),
            _zone("monthly", tf=Timeframe.MONTHLY),
            _zone("h4", tf=Timeframe.H4),
        ])
        rows = repo.view()
        assert [(i, z.label) for i, z in rows] == [(1, "monthly"), (2, "h4"), (0, "m15")]

    def test_view_does_not_mutate_order(self):
        repo = ZoneRepo(list(reversed(DEFAULT_ZONES)))
        before = repo.zones
        repo.view(sort_by="price")
        assert repo.zones == before

    def test_filters_compose_with_and(self):
        repo = ZoneRepo(list(DEFAULT_ZONES))
        rows = repo.view(side=Side.SELL, search="SELL 18")
        assert {z.label for _, z in rows} == {
            "Monthly Sell 1820-1825", "Daily Sell 1815-1818", "1H Sell 1816-1818",
        }
        rows = repo.view(side=Side.SELL, timeframe=Timeframe.H1)
        assert [i for i, _ in rows] == [4]

    def test_search_is_case_insensitive(self):
        repo = ZoneRepo(list(DEFAULT_ZONES))
        assert [z.label for _, z in repo.view(search="weekly")] == ["Weekly Buy 1800-1805"]

    def test_sort_by_side(self):
        repo = ZoneRepo(list(DEFAULT_ZONES))
        sides = [z.side for _, z in repo.view(sort_by="side")]
        assert sides == [Side.BUY] * 3 + [Side.SELL] * 3

    def test_sort_by_price(self):
        repo = ZoneRepo(list(DEFAULT_ZONES))
        starts = [z.start for _, z in repo.view(sort_by="price")]
        assert starts == sorted(starts)

    def test_sort_by_strength_uses_timeframe_default(self):
        repo = ZoneRepo([
            _zone("weak-explicit", tf=Timeframe.MONTHLY, strength=0.2),
            _zone("daily-default", tf=Timeframe.DAILY),
            _zone("strong-explicit", tf=Timeframe.M15, strength=0.95),
        ])
        assert [z.label for _, z in repo.view(sort_by="strength")] == [
            "strong-explicit", "daily-default", "weak-explicit",
        ]

    def test_unknown_sort_key(self):
        with pytest.raises(KeyError, match="Unknown sort key"):
            ZoneRepo().view(sort_by="colour")

    def test_summary(self):
        assert ZoneRepo().summary() == {
            "total": 6, "buy": 3, "sell": 3,
            "higher_timeframe": 3, "lower_timeframe": 3,
        }
