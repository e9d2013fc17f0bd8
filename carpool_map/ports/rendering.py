"""Rendering port - Abstraction for the map surface.

This protocol defines the contract for map rendering, allowing
different implementations (Folium, a web client, test fakes) to be used.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import MapScene


class MapRendererPort(Protocol):
    """Port for map rendering.

    Implementation: adapters/rendering/folium_adapter.py

    The renderer places markers and connectors, then applies the scene's
    fit request (if any) with its padding and maximum zoom.
    """

    def render(self, scene: MapScene, output_path: Path) -> Path:
        """Render a scene and save it to a file.

        Args:
            scene: Markers, connectors, center and optional fit request.
            output_path: Where to save the rendered map.

        Returns:
            Path to the generated map file.
        """
        ...
