"""Tests for maps link parsing."""

import pytest

from carpool_map.domain.models import Coordinate
from carpool_map.geo.links import (
    format_location_display,
    is_maps_link,
    maps_search_url,
    parse_maps_link,
)


class TestParseMapsLink:
    """Supported link shapes and their coordinate priority."""

    def test_place_link_with_at_coordinates(self):
        result = parse_maps_link(
            "https://www.google.com/maps/place/Union+Station/@43.6453,-79.3806,17z/data=!3m1"
        )
        assert result.is_valid_link
        assert result.has_coordinates
        assert result.name == "Union Station"
        assert (result.lat, result.lng) == (43.6453, -79.3806)

    def test_bare_at_link(self):
        result = parse_maps_link("https://www.google.com/maps/@40.7128,-74.0060,15z")
        assert result.coordinate == Coordinate(40.7128, -74.006)
        assert result.name is None

    def test_query_link(self):
        result = parse_maps_link("https://maps.google.com/?q=43.65,-79.38")
        assert result.has_coordinates
        assert (result.lat, result.lng) == (43.65, -79.38)

    def test_data_segment_link(self):
        result = parse_maps_link(
            "https://www.google.com/maps/place/Cafe/data=!4m5!3m4!1s0x0:0x0!8m2!3d40.7128!4d-74.0060"
        )
        assert result.has_coordinates
        assert (result.lat, result.lng) == (40.7128, -74.006)
        assert result.name == "Cafe"

    def test_at_wins_over_data_segment(self):
        result = parse_maps_link(
            "https://www.google.com/maps/place/X/@10.5,20.5,12z/data=!3d30.0!4d40.0"
        )
        assert (result.lat, result.lng) == (10.5, 20.5)

    def test_out_of_range_at_falls_through_to_data(self):
        result = parse_maps_link(
            "https://www.google.com/maps/place/X/@95.0,20.0,12z/data=!3d30.0!4d40.0"
        )
        assert result.has_coordinates
        assert (result.lat, result.lng) == (30.0, 40.0)

    def test_out_of_range_only(self):
        result = parse_maps_link("https://maps.google.com/?q=91,-79.38")
        assert result.is_valid_link
        assert not result.has_coordinates
        assert result.coordinate is None

    @pytest.mark.parametrize(
        "url",
        ["https://maps.app.goo.gl/AbCdEf123", "https://goo.gl/maps/xyz"],
    )
    def test_shortened_links_have_no_coordinates(self, url):
        result = parse_maps_link(url)
        assert result.is_valid_link
        assert not result.has_coordinates

    @pytest.mark.parametrize("text", ["", "   ", "123 Main St", "https://example.com/@1,2", None, 42])
    def test_non_links(self, text):
        result = parse_maps_link(text)
        assert not result.is_valid_link
        assert not result.has_coordinates

    def test_percent_encoded_place_name(self):
        result = parse_maps_link("https://www.google.com/maps/place/Caf%C3%A9+du+Parc/@45.5,-73.6,15z")
        assert result.name == "Café du Parc"

    def test_host_is_case_insensitive(self):
        assert is_maps_link("HTTPS://WWW.GOOGLE.COM/MAPS/@1,2,3z")

    def test_country_domain(self):
        assert parse_maps_link("https://www.google.ca/maps/@43.65,-79.38,12z").has_coordinates


class TestDisplayHelpers:
    def test_name_wins(self):
        assert format_location_display("Home", "https://maps.google.com/?q=1,2") == ("Home", True)

    def test_link_only_uses_place_name(self):
        display, has_link = format_location_display(
            None, "https://www.google.com/maps/place/High+Park/@43.64,-79.46,15z"
        )
        assert display == "High Park"
        assert has_link

    def test_link_without_name(self):
        assert format_location_display("", "https://maps.app.goo.gl/abc") == ("View on Maps", True)

    def test_nothing(self):
        assert format_location_display(None, None) == (None, False)

    def test_search_url(self):
        url = maps_search_url(Coordinate(43.65, -79.38))
        assert url == "https://www.google.com/maps/search/?api=1&query=43.65,-79.38"
