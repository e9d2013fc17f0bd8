"""Tests for the map view orchestrator."""

import asyncio
from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from carpool_map.config import AppConfig, MapConfig
from carpool_map.container import Container
from carpool_map.domain.errors import RenderingError
from carpool_map.domain.models import Coordinate, MarkerKind, ViewDirection
from carpool_map.ports import RecordStorePort
from carpool_map.services.location_writer import CarpoolUpdate, LocationWriter
from carpool_map.services.map_view import MapViewService, ViewState


@pytest.fixture
def service(memory_store):
    return MapViewService(store=memory_store, renderer=MagicMock(), config=MapConfig())


def build(service, state=ViewState()):
    return asyncio.run(service.build("evt-1", state))


def test_all_view_scene(service):
    view = build(service)
    kinds = [m.kind for m in view.scene.markers]
    assert kinds.count(MarkerKind.VENUE) == 1
    assert kinds.count(MarkerKind.CARPOOL_DEPARTURE) == 2
    assert kinds.count(MarkerKind.CARPOOL_RETURN) == 1
    assert len(view.scene.markers) == 7
    assert len(view.scene.connectors) == 2
    assert [v.carpool.id for v in view.off_map] == ["cp-3"]
    assert [r.registration_id for r in view.riders] == ["reg-1", "reg-3"]
    assert view.scene.center == Coordinate(43.6426, -79.3871)
    assert view.scene.fit is not None
    assert view.scene.fit.max_zoom == 13
    assert len(set(view.scene.fit.points)) == len(view.scene.fit.points)


def test_from_view(service):
    view = build(service, ViewState(direction=ViewDirection.FROM))
    assert [v.carpool.id for v in view.listed] == ["cp-1", "cp-3"]
    carpool_markers = [m for m in view.scene.markers if m.kind is MarkerKind.CARPOOL_RETURN]
    assert [m.position for m in carpool_markers] == [Coordinate(43.7255, -79.4522)]
    assert len(view.scene.markers) == 4


def test_hidden_riders(service):
    view = build(service, ViewState(show_riders=False))
    assert not any(m.kind.value.startswith("rider") for m in view.scene.markers)
    assert len(view.riders) == 2


def test_all_riders_mode_includes_passengers(service):
    view = build(service, ViewState(show_all_riders=True))
    assert [r.registration_id for r in view.riders] == ["reg-1", "reg-2", "reg-3"]
    assert view.riders[1].is_passenger


def test_views_are_memoised_per_event_data(service):
    first = build(service)
    assert build(service) is first

    data = asyncio.run(service.load("evt-1"))
    carpools = tuple(
        replace(c, departure_coords=Coordinate(43.7, -79.3)) if c.id == "cp-3" else c
        for c in data.carpools
    )
    changed = service.compute(replace(data, carpools=carpools))
    assert changed is not first
    assert changed.off_map == ()
    assert service.compute(data) is first


def test_invalidate_reloads_records(service, memory_store):
    first = build(service)
    memory_store.carpools["cp-3"]["departure_lat"] = 43.7
    memory_store.carpools["cp-3"]["departure_lng"] = -79.3

    service.invalidate()
    refreshed = build(service)
    assert refreshed is not first
    assert refreshed.off_map == ()


def test_saved_location_reaches_next_build(memory_store):
    container = Container.create_default(AppConfig())
    container.register(RecordStorePort, lambda: memory_store)
    service = container.resolve(MapViewService)
    writer = container.resolve(LocationWriter)

    assert [v.carpool.id for v in build(service).off_map] == ["cp-3"]

    update = CarpoolUpdate(departure_lat=43.7, departure_lng=-79.3)
    asyncio.run(writer.save_carpool_coordinates("cp-3", update))

    view = build(service)
    assert view.off_map == ()
    departures = [m for m in view.scene.markers if m.kind is MarkerKind.CARPOOL_DEPARTURE]
    assert Coordinate(43.7, -79.3) in [m.position for m in departures]


def test_render_uses_renderer(service, tmp_path):
    out = tmp_path / "map.html"
    service.renderer.render.return_value = out
    assert asyncio.run(service.render("evt-1", out)) == out
    scene, path = service.renderer.render.call_args.args
    assert path == out
    assert len(scene.markers) == 7


def test_render_without_renderer(memory_store):
    service = MapViewService(store=memory_store, config=MapConfig())
    with pytest.raises(RenderingError):
        asyncio.run(service.render("evt-1", Path("map.html")))


def test_unregistered_members(service):
    members = asyncio.run(service.unregistered_members("evt-1"))
    assert [m.id for m in members] == ["u-rider-4"]
