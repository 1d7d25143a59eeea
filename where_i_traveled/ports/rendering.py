"""Rendering port - Abstraction for the visited-places map.

This protocol defines the contract for map rendering, allowing
different implementations (Folium, static images, etc.) to be used.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import GeoLocation, Place


class MapRendererPort(Protocol):
    """Port for map rendering.

    Implementation: adapters/rendering/folium_adapter.py

    Map renderers place one marker per visited place.
    """

    def render(
        self,
        places: Sequence[Place],
        output_path: Path,
        center: Optional[GeoLocation] = None,
    ) -> Path:
        """Render places on a map and save to file.

        Args:
            places: Places to mark on the map.
            output_path: Where to save the rendered map.
            center: Optional map center (e.g., the user's last fix).

        Returns:
            Path to the generated map file.
        """
        ...
