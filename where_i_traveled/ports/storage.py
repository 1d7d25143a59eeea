"""Storage ports - Abstractions for place records and photo selections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Place, PlaceSort


class PlaceStorePort(Protocol):
    """Port for persisting visited places.

    Implementation: adapters/storage/sqlite_store.py

    The store is a direct mapping of Place records; it performs no
    background mutation.
    """

    def create(self, place: Place) -> Place:
        """Insert a new place.

        Raises:
            StorageError: If the record cannot be written.
        """
        ...

    def update(self, place: Place) -> Place:
        """Replace an existing place with the same id.

        Raises:
            PlaceNotFoundError: If no place has this id.
        """
        ...

    def delete(self, place_id: str) -> None:
        """Delete a place by id.

        Raises:
            PlaceNotFoundError: If no place has this id.
        """
        ...

    def get(self, place_id: str) -> Optional[Place]:
        """Fetch a place by id, or None if unknown."""
        ...

    def query(
        self,
        sort: PlaceSort,
        text_filter: Optional[str] = None,
    ) -> Sequence[Place]:
        """List places.

        Args:
            sort: Ordering of the returned places.
            text_filter: Case-insensitive substring matched against the
                name or the country. Blank means no filtering.

        Returns:
            Matching places in the requested order.
        """
        ...


class PhotoHolderPort(Protocol):
    """Port for loading a user-selected photo.

    Implementation: adapters/photos/file_photo_holder.py
    """

    async def load(self, selection: str) -> Optional[bytes]:
        """Load the raw bytes of a selection.

        Returns:
            Raw image bytes, or None if the selection has no data.

        Raises:
            PhotoLoadError: If the selection exists but cannot be used.
        """
        ...
