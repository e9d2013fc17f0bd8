"""Carpool map for team events.

Resolves carpool and rider locations (stored coordinates, pasted maps
links, geocoding searches), aggregates them into map markers for a
direction view, fits the viewport, and renders the result with folium.
"""

__version__ = "0.1.0"
