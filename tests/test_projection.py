"""Tests for the projection engine — domain, price mapping, lanes, bands, ticks."""

import pytest

from poimirror.zones.models import DEFAULT_ZONES, Side, Status, Timeframe, Zone
from poimirror.zones.projection import (
    DEFAULT_PAD,
    Viewport,
    build_projection,
    price_to_y,
)


def _zone(start, end, side=Side.BUY, tf=Timeframe.DAILY, strength=None):
    return Zone(tf, side, float(start), float(end), f"{side.value} {start}-{end}", strength)


# ── Domain ───────────────────────────────────────────────────────────────


class TestDomain:
    def test_domain_is_exact_padding_of_all_values(self):
        zones = [_zone(1800, 1805), _zone(1815, 1818, Side.SELL)]
        proj = build_projection(zones, 1810.0)
        assert proj.domain_min == 1800.0 - DEFAULT_PAD
        assert proj.domain_max == 1818.0 + DEFAULT_PAD

    def test_live_price_extends_domain(self):
        proj = build_projection([_zone(1800, 1805)], 1900.0)
        assert proj.domain_min == 1800.0 - DEFAULT_PAD
        assert proj.domain_max == 1900.0 + DEFAULT_PAD

    def test_no_zones_uses_live_price_only(self):
        proj = build_projection([], 1814.0)
        assert proj.domain_min == 1814.0 - DEFAULT_PAD
        assert proj.domain_max == 1814.0 + DEFAULT_PAD
        assert proj.bands == ()
        assert proj.status is Status.NEUTRAL

    def test_every_value_strictly_inside_visible_range(self):
        zones = list(DEFAULT_ZONES)
        proj = build_projection(zones, 1814.0)
        vp = proj.viewport
        for z in zones:
            for p in (z.start, z.end):
                assert vp.top < proj.price_to_y(p) < vp.top + vp.plot_height
        assert vp.top < proj.live_y < vp.top + vp.plot_height


# ── Price mapping ────────────────────────────────────────────────────────


class TestPriceToY:
    def test_higher_price_is_higher_on_screen(self):
        proj = build_projection([_zone(1800, 1805)], 1802.0)
        assert proj.price_to_y(1805.0) < proj.price_to_y(1800.0)

    def test_domain_edges_map_to_plot_edges(self):
        vp = Viewport()
        proj = build_projection([_zone(1800, 1805)], 1802.0, viewport=vp)
        assert proj.price_to_y(proj.domain_max) == pytest.approx(vp.top)
        assert proj.price_to_y(proj.domain_min) == pytest.approx(vp.top + vp.plot_height)

    def test_degenerate_domain_resolves_to_mid_plot(self):
        vp = Viewport()
        assert price_to_y(1805.0, 1805.0, 1805.0, vp) == vp.top + vp.plot_height / 2

    def test_zero_pad_single_point_does_not_divide_by_zero(self):
        vp = Viewport()
        proj = build_projection([_zone(1805, 1805)], 1805.0, pad=0.0, viewport=vp)
        assert proj.domain_min == proj.domain_max == 1805.0
        assert proj.live_y == vp.top + vp.plot_height / 2
        assert proj.bands[0].height == 0.0
        assert all(t.y == vp.top + vp.plot_height / 2 for t in proj.ticks)


# ── Lanes ────────────────────────────────────────────────────────────────


class TestLanes:
    def test_six_equal_lanes_in_canonical_order(self):
        vp = Viewport()
        proj = build_projection([], 1814.0, viewport=vp)
        assert [lane.timeframe for lane in proj.lanes] == [
            Timeframe.MONTHLY, Timeframe.WEEKLY, Timeframe.DAILY,
            Timeframe.H4, Timeframe.H1, Timeframe.M15,
        ]
        assert all(lane.height == pytest.approx(vp.plot_height / 6) for lane in proj.lanes)
        assert proj.lanes[0].y == vp.top
        assert proj.lanes[3].y == pytest.approx(vp.top + 3 * vp.plot_height / 6)

    def test_lane_labels_and_shading(self):
        proj = build_projection([], 1814.0)
        assert [lane.label for lane in proj.lanes] == ["Monthly", "Weekly", "Daily", "4H", "1H", "15M"]
        assert [lane.shaded for lane in proj.lanes] == [True, False, True, False, True, False]
        assert proj.lanes[0].strength == 1.0

    def test_custom_order(self):
        order = [Timeframe.H4, Timeframe.DAILY]
        proj = build_projection([_zone(1800, 1805, tf=Timeframe.M15)], 1802.0, timeframe_order=order)
        assert len(proj.lanes) == 2
        assert proj.bands[0].lane_index is None

    def test_empty_order_rejected(self):
        with pytest.raises(ValueError, match="timeframe_order"):
            build_projection([], 1814.0, timeframe_order=[])


# ── Bands ────────────────────────────────────────────────────────────────


class TestBands:
    def test_band_spans_full_plot_width_at_price_position(self):
        vp = Viewport()
        zone = _zone(1810, 1812, tf=Timeframe.M15)
        proj = build_projection([zone], 1811.0, viewport=vp)
        band = proj.bands[0]
        assert band.x == vp.left
        assert band.width == vp.plot_width
        assert band.y_top == proj.price_to_y(1812.0)
        assert band.y_bottom == proj.price_to_y(1810.0)
        assert band.height > 0
        assert band.lane_index == 5

    def test_band_position_independent_of_lane(self):
        a = _zone(1810, 1812, tf=Timeframe.MONTHLY)
        b = _zone(1810, 1812, tf=Timeframe.M15)
        proj = build_projection([a, b], 1800.0)
        assert proj.bands[0].y_top == proj.bands[1].y_top
        assert proj.bands[0].lane_index != proj.bands[1].lane_index

    def test_band_active_and_strength(self):
        zones = [_zone(1800, 1805, tf=Timeframe.WEEKLY), _zone(1815, 1818, Side.SELL, strength=0.3)]
        proj = build_projection(zones, 1800.0)
        assert proj.bands[0].active is True
        assert proj.bands[0].strength == 0.9
        assert proj.bands[1].active is False
        assert proj.bands[1].strength == 0.3
        assert [b.index for b in proj.bands] == [0, 1]


# ── Ticks & output ───────────────────────────────────────────────────────


class TestTicks:
    def test_eleven_ticks_inclusive(self):
        proj = build_projection([_zone(1800, 1820)], 1810.0)
        assert len(proj.ticks) == 11
        assert proj.ticks[0].price == pytest.approx(proj.domain_min)
        assert proj.ticks[-1].price == pytest.approx(proj.domain_max)
        step = (proj.domain_max - proj.domain_min) / 10
        for i, tick in enumerate(proj.ticks):
            assert tick.price == pytest.approx(proj.domain_min + i * step)


class TestProjectionOutput:
    def test_status_and_live_marker(self):
        zones = [_zone(1800, 1805), _zone(1801, 1806, Side.SELL)]
        proj = build_projection(zones, 1803.0)
        assert proj.status is Status.CONFLICT
        assert proj.live_y == proj.price_to_y(1803.0)

    def test_same_inputs_same_output(self):
        zones = list(DEFAULT_ZONES)
        assert build_projection(zones, 1814.0) == build_projection(zones, 1814.0)

    def test_to_dict_shape(self):
        data = build_projection(list(DEFAULT_ZONES), 1814.0).to_dict()
        assert set(data) == {"viewport", "domain", "live", "lanes", "bands", "ticks"}
        assert data["live"]["status"] == "buy"
        assert len(data["lanes"]) == 6
        assert len(data["bands"]) == 6
        assert data["bands"][0]["zone"]["label"] == "Monthly Sell 1820-1825"

    def test_rejects_viewport_inside_margins(self):
        with pytest.raises(ValueError, match="margins"):
            build_projection(list(DEFAULT_ZONES), 1814.0, viewport=Viewport(width=100, height=50))

    def test_rejects_viewport_equal_to_margins(self):
        with pytest.raises(ValueError, match="margins"):
            build_projection(list(DEFAULT_ZONES), 1814.0, viewport=Viewport(width=240, height=600))

    def test_smallest_usable_viewport_has_positive_geometry(self):
        proj = build_projection(list(DEFAULT_ZONES), 1814.0, viewport=Viewport(width=241, height=81))
        assert all(lane.height > 0 for lane in proj.lanes)
        assert all(band.width > 0 and band.height >= 0 for band in proj.bands)
