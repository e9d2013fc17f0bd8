"""Tests for the folium renderer."""

from unittest.mock import patch

import pytest

from carpool_map.adapters.rendering import FoliumMapRenderer
from carpool_map.adapters.rendering.folium_adapter import marker_html
from carpool_map.config import MapConfig
from carpool_map.domain.errors import RenderingError
from carpool_map.domain.models import (
    Coordinate,
    FitRequest,
    MapConnector,
    MapMarker,
    MapScene,
    MarkerKind,
    MarkerStyle,
)

A = Coordinate(43.65, -79.38)
B = Coordinate(43.75, -79.40)


@pytest.fixture
def scene():
    return MapScene(
        center=A,
        zoom=12,
        markers=(
            MapMarker(MarkerKind.VENUE, A, MarkerStyle(color="#ef4444"), title="Venue", popup="Harbourfront"),
            MapMarker(MarkerKind.RIDER_PICKUP, B, MarkerStyle(color="#3b82f6", label="AB", size=24, shape="circle")),
        ),
        connectors=(MapConnector(A, B, "#3b82f6"),),
        fit=FitRequest(points=(A, B), padding=50, max_zoom=13),
    )


def test_marker_html_shapes():
    pin = marker_html(MarkerStyle(color="#10b981", label="2"))
    assert "rotate(-45deg)" in pin
    assert "#10b981" in pin
    circle = marker_html(MarkerStyle(color="#8b5cf6", label="<b>", shape="circle"))
    assert "border-radius: 50%" in circle
    assert "&lt;b&gt;" in circle


def test_render_writes_html(scene, tmp_path):
    out = tmp_path / "maps" / "carpools.html"
    path = FoliumMapRenderer(MapConfig()).render(scene, out)
    assert path == out
    html = out.read_text(encoding="utf-8")
    assert "fitBounds" in html
    assert "marker-venue" in html
    assert "marker-rider_pickup" in html
    assert "8, 8" in html


def test_no_fit_without_request(scene):
    m = FoliumMapRenderer(MapConfig()).build(
        MapScene(center=scene.center, zoom=12, markers=scene.markers[:1])
    )
    assert "fitBounds" not in m.get_root().render()


def test_render_failure_wrapped(scene, tmp_path):
    renderer = FoliumMapRenderer(MapConfig())
    with patch.object(FoliumMapRenderer, "build", side_effect=ValueError("bad tiles")):
        with pytest.raises(RenderingError) as excinfo:
            renderer.render(scene, tmp_path / "x.html")
    assert excinfo.value.renderer_type == "folium"
