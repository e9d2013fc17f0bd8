"""Folium map renderer adapter.

Turns a MapScene into an interactive Leaflet map saved as HTML:
- Pin markers for the venue and carpools, circle markers for riders
- Dashed connectors between paired markers
- A single fit_bounds call carrying padding and a max zoom
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ...config import MapConfig, get_config
from ...domain.errors import RenderingError
from ...domain.models import MapConnector, MapMarker, MapScene, MarkerStyle

_SHAPE_RADIUS = {
    "pin": "50% 50% 50% 0",
    "return": "50% 50% 0 50%",
}


def marker_html(style: MarkerStyle) -> str:
    """HTML body for a DivIcon drawing the given marker style."""
    label = html.escape(style.label)
    if style.shape == "circle":
        return (
            f'<div style="background-color: {style.color}; width: {style.size}px; '
            f"height: {style.size}px; border-radius: 50%; border: 2px solid white; "
            "box-shadow: 0 2px 4px rgba(0,0,0,0.3); display: flex; "
            "align-items: center; justify-content: center; font-size: 10px; "
            f'font-weight: bold; color: white; opacity: {style.opacity};">'
            f"{label or '?'}</div>"
        )

    radius = _SHAPE_RADIUS.get(style.shape, _SHAPE_RADIUS["pin"])
    font_size = 10 if style.size < 32 else 12
    return (
        f'<div style="background-color: {style.color}; width: {style.size}px; '
        f"height: {style.size}px; border-radius: {radius}; transform: rotate(-45deg); "
        "border: 3px solid white; box-shadow: 0 2px 6px rgba(0,0,0,0.3); "
        "display: flex; align-items: center; justify-content: center; "
        f'opacity: {style.opacity};">'
        '<span style="transform: rotate(45deg); color: white; font-weight: bold; '
        f'font-size: {font_size}px;">{label}</span></div>'
    )


def _icon_anchor(style: MarkerStyle) -> tuple[int, int]:
    # Pins point at their bottom tip, circles at their centre.
    if style.shape == "circle":
        return (style.size // 2, style.size // 2)
    return (style.size // 2, style.size)


@dataclass
class FoliumMapRenderer:
    """Folium-based interactive map renderer.

    This adapter implements MapRendererPort.
    """

    config: MapConfig = field(default_factory=lambda: get_config().map)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def build(self, scene: MapScene) -> Any:
        """Build the folium.Map for a scene without saving it."""
        import folium

        m = folium.Map(
            location=scene.center.as_pair(),
            zoom_start=scene.zoom,
            tiles=self.config.tiles,
            control_scale=True,
        )

        for connector in scene.connectors:
            self._add_connector(folium, m, connector)
        for marker in scene.markers:
            self._add_marker(folium, m, marker)

        if scene.fit is not None:
            m.fit_bounds(
                [list(p.as_pair()) for p in scene.fit.points],
                padding=(scene.fit.padding, scene.fit.padding),
                max_zoom=scene.fit.max_zoom,
            )
        return m

    @staticmethod
    def _add_marker(folium: Any, m: Any, marker: MapMarker) -> None:
        style = marker.style
        popup: Optional[Any] = None
        if marker.popup:
            popup = folium.Popup(marker.popup, max_width=260)
        folium.Marker(
            location=marker.position.as_pair(),
            icon=folium.DivIcon(
                html=marker_html(style),
                icon_size=(style.size, style.size),
                icon_anchor=_icon_anchor(style),
                class_name=f"marker-{marker.kind.value}",
            ),
            tooltip=html.escape(marker.title) if marker.title else None,
            popup=popup,
        ).add_to(m)

    @staticmethod
    def _add_connector(folium: Any, m: Any, connector: MapConnector) -> None:
        folium.PolyLine(
            locations=[connector.start.as_pair(), connector.end.as_pair()],
            color=connector.color,
            weight=2,
            dash_array="8, 8",
            opacity=0.5,
        ).add_to(m)

    def render(self, scene: MapScene, output_path: Path) -> Path:
        """Render a scene and save it as HTML.

        Args:
            scene: What to draw.
            output_path: Where to save the rendered map.

        Returns:
            Path to the generated map file.

        Raises:
            RenderingError: If rendering fails.
        """
        self._logger.info(
            "Rendering carpool map",
            extra={
                "markers": len(scene.markers),
                "connectors": len(scene.connectors),
                "fit": scene.fit is not None,
                "output_path": str(output_path),
            },
        )

        try:
            m = self.build(scene)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            m.save(str(output_path))
        except ImportError as e:
            raise RenderingError(
                "Folium not installed",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )
        except Exception as e:
            self._logger.error(
                "Map rendering failed",
                extra={"error": str(e), "output_path": str(output_path)},
            )
            raise RenderingError(
                f"Map rendering failed: {e}",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )

        self._logger.info(
            "Map rendered successfully",
            extra={"output_path": str(output_path)},
        )
        return output_path
