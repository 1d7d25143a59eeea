"""Geocoding port - Abstraction for free-text place search.

This protocol defines the contract for geocoding services, allowing
different implementations (Nominatim, a platform search, fakes) to be
used by the search controller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import GeocodedItem


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py

    Geocoding converts a natural-language query ("Rome, Italy") into an
    ordered list of candidate coordinates.
    """

    async def search(self, text: str) -> Sequence[GeocodedItem]:
        """Search for places matching a query.

        Args:
            text: The trimmed query text.

        Returns:
            Matches in provider relevance order (possibly empty).

        Raises:
            GeocodingError: If the provider fails.
        """
        ...
