"""Tests for carpool aggregation and marker layout."""

import pytest

from carpool_map.domain.models import (
    Carpool,
    Coordinate,
    Direction,
    MarkerKind,
    ViewDirection,
)
from carpool_map.services.carpool_aggregator import (
    DEFAULT_PALETTE,
    aggregate_carpools,
    carpool_markers,
    filter_by_direction,
    marker_styles,
    split_on_map,
)

DOWNTOWN = Coordinate(43.65, -79.38)
NORTH = Coordinate(43.75, -79.40)


def make_carpool(cid="c1", departure=DOWNTOWN, ret=None, direction=Direction.BOTH, **kwargs):
    return Carpool(
        id=cid,
        driver_id=f"driver-{cid}",
        total_seats=3,
        departure_coords=departure,
        return_coords=ret,
        direction=direction,
        **kwargs,
    )


class TestAggregateCarpools:
    def test_stored_coordinates_win_over_link(self):
        carpool = make_carpool(departure_link="https://maps.google.com/?q=10,10")
        (view,) = aggregate_carpools([carpool])
        assert view.departure == DOWNTOWN

    def test_link_used_when_no_coordinates(self):
        carpool = make_carpool(
            departure=None,
            departure_link="https://www.google.com/maps/place/High+Park/@43.6465,-79.4637,15z",
        )
        (view,) = aggregate_carpools([carpool])
        assert view.departure == Coordinate(43.6465, -79.4637)

    def test_unresolvable_departure_is_off_map(self):
        carpool = make_carpool(departure=None, departure_link="https://maps.app.goo.gl/xyz")
        views = aggregate_carpools([carpool, make_carpool("c2")])
        on_map, off_map = split_on_map(views)
        assert [v.carpool.id for v in off_map] == ["c1"]
        assert [v.carpool.id for v in on_map] == ["c2"]
        assert carpool_markers(views[0], ViewDirection.ALL) == ([], [])

    def test_palette_cycles_by_index(self):
        views = aggregate_carpools([make_carpool(f"c{i}") for i in range(10)])
        assert [v.color for v in views[:8]] == list(DEFAULT_PALETTE)
        assert views[8].color == DEFAULT_PALETTE[0]
        assert views[9].color == DEFAULT_PALETTE[1]
        assert views[9].marker.label == "10"

    def test_return_style_pairs_with_departure(self):
        departure, ret = marker_styles(2)
        assert ret.color == departure.color
        assert ret.size < departure.size
        assert ret.shape != departure.shape
        assert ret.label == "3R"
        assert ret.opacity == pytest.approx(0.85)

    def test_custom_palette(self):
        views = aggregate_carpools([make_carpool("a"), make_carpool("b")], palette=("#000", "#fff"))
        assert [v.color for v in views] == ["#000", "#fff"]


class TestCarpoolMarkers:
    def test_from_view_without_return_uses_departure(self):
        (view,) = aggregate_carpools([make_carpool()])
        markers, connectors = carpool_markers(view, ViewDirection.FROM)
        assert len(markers) == 1
        assert markers[0].kind is MarkerKind.CARPOOL_RETURN
        assert markers[0].position == DOWNTOWN
        assert connectors == []

    def test_from_view_with_return(self):
        (view,) = aggregate_carpools([make_carpool(ret=NORTH)])
        markers, _ = carpool_markers(view, ViewDirection.FROM)
        assert [m.position for m in markers] == [NORTH]

    def test_to_view_shows_departure_only(self):
        (view,) = aggregate_carpools([make_carpool(ret=NORTH)])
        markers, connectors = carpool_markers(view, ViewDirection.TO)
        assert [m.kind for m in markers] == [MarkerKind.CARPOOL_DEPARTURE]
        assert connectors == []

    def test_all_view_with_distinct_return_draws_connector(self):
        (view,) = aggregate_carpools([make_carpool(ret=NORTH)])
        markers, connectors = carpool_markers(view, ViewDirection.ALL)
        assert [m.position for m in markers] == [DOWNTOWN, NORTH]
        assert len(connectors) == 1
        assert (connectors[0].start, connectors[0].end) == (DOWNTOWN, NORTH)
        assert connectors[0].color == view.color

    def test_all_view_with_same_return_has_no_connector(self):
        (view,) = aggregate_carpools([make_carpool(ret=DOWNTOWN)])
        markers, connectors = carpool_markers(view, ViewDirection.ALL)
        assert len(markers) == 1
        assert connectors == []

    def test_popup_escapes_user_text(self):
        carpool = make_carpool(
            driver_name="<img src=x onerror=alert(1)>",
            departure_text="Bloor & Yonge",
        )
        (view,) = aggregate_carpools([carpool])
        (marker,), _ = carpool_markers(view, ViewDirection.TO)
        assert "<img" not in marker.popup
        assert "Driver: &lt;img src=x onerror=alert(1)&gt;" in marker.popup
        assert "Bloor &amp; Yonge" in marker.popup
        assert marker.popup.count("<br>") == 3


class TestFilterByDirection:
    def test_direction_views(self):
        views = aggregate_carpools(
            [
                make_carpool("to", direction=Direction.TO),
                make_carpool("from", direction=Direction.FROM),
                make_carpool("both"),
            ]
        )
        ids = lambda d: [v.carpool.id for v in filter_by_direction(views, d)]  # noqa: E731
        assert ids(ViewDirection.ALL) == ["to", "from", "both"]
        assert ids(ViewDirection.TO) == ["to", "both"]
        assert ids(ViewDirection.FROM) == ["from", "both"]

    def test_hidden_carpools_excluded(self):
        views = aggregate_carpools([make_carpool("hidden", visible=False), make_carpool("shown")])
        assert [v.carpool.id for v in filter_by_direction(views, "all")] == ["shown"]
