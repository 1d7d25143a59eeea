"""Folium map renderer adapter.

Renders the visited-places map as a standalone interactive HTML page:
one marker per place, with the name, country and visit date in the
popup. The map is centered on an explicit center (e.g., the user's last
fix) or on the mean of the places.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

import folium

from ...domain.errors import RenderingError
from ...domain.models import GeoLocation, Place


@dataclass
class FoliumMapRenderer:
    """Folium-based interactive map renderer.

    This adapter implements MapRendererPort.

    Attributes:
        zoom_start: Initial zoom when centered on a single point
        world_zoom: Initial zoom for the overview of many places
    """

    zoom_start: int = 12
    world_zoom: int = 2

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def render(
        self,
        places: Sequence[Place],
        output_path: Path,
        center: Optional[GeoLocation] = None,
    ) -> Path:
        """Render places on a map and save to file.

        Raises:
            RenderingError: If there is nothing to show or rendering fails.
        """
        if not places and center is None:
            raise RenderingError(
                "No places to show on the map",
                output_path=str(output_path),
                renderer_type="folium",
            )

        self._logger.info(
            "Rendering places map",
            extra={"places": len(places), "output_path": str(output_path)},
        )

        try:
            if center is not None:
                location = [center.latitude, center.longitude]
                zoom = self.zoom_start
            else:
                lats = [p.location.latitude for p in places]
                lons = [p.location.longitude for p in places]
                location = [sum(lats) / len(lats), sum(lons) / len(lons)]
                zoom = self.zoom_start if len(places) == 1 else self.world_zoom

            m = folium.Map(location=location, zoom_start=zoom)

            for place in places:
                popup = (
                    f"<b>{html.escape(place.name)}</b><br>"
                    f"{html.escape(place.country)}<br>"
                    f"Visited {place.visited_on.isoformat()}"
                )
                folium.Marker(
                    location=[place.location.latitude, place.location.longitude],
                    popup=folium.Popup(popup, max_width=250),
                    tooltip=place.name,
                    icon=folium.Icon(color="red", icon="map-marker"),
                ).add_to(m)

            if center is not None:
                folium.CircleMarker(
                    location=[center.latitude, center.longitude],
                    radius=8,
                    color="blue",
                    fill=True,
                    tooltip="My location",
                ).add_to(m)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            m.save(str(output_path))

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
