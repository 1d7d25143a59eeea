"""Place journal service - Add, edit, delete and browse visited places.

This service holds the save rules of the add and edit flows and the
list filtering used by the places list. Storage, photo loading and map
rendering are injected ports.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from ..domain.errors import InvalidPlaceError, PlaceNotFoundError, RenderingError
from ..domain.models import (
    GeoLocation,
    LocationFix,
    Place,
    PlaceDraft,
    PlaceSort,
    SearchResult,
)
from ..ports.rendering import MapRendererPort
from ..ports.storage import PhotoHolderPort, PlaceStorePort

# Sentinel for "leave this field unchanged" in update_place().
_UNCHANGED = object()


@dataclass
class PlaceJournalService:
    """Orchestrates the place record flows.

    Attributes:
        store: Persistence for places
        photo_holder: Optional loader for photo selections
        map_renderer: Optional renderer for the places map
    """

    store: PlaceStorePort
    photo_holder: Optional[PhotoHolderPort] = None
    map_renderer: Optional[MapRendererPort] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # Drafts

    def new_draft(self, visited_on: Optional[date] = None) -> PlaceDraft:
        """Start an empty draft dated today unless told otherwise."""
        return PlaceDraft(visited_on=visited_on or date.today())

    def draft_with_fix(self, draft: PlaceDraft, fix: LocationFix) -> PlaceDraft:
        """Use a location fix as the draft's coordinate."""
        return dataclasses.replace(draft, location=fix.location)

    def draft_with_candidate(
        self, draft: PlaceDraft, candidate: SearchResult
    ) -> PlaceDraft:
        """Use a search candidate as the draft's coordinate.

        The candidate's name is only copied when the draft has no name yet.
        """
        name = draft.name if draft.name.strip() else candidate.name
        return dataclasses.replace(draft, location=candidate.location, name=name)

    async def attach_photo(self, draft: PlaceDraft, selection: str) -> PlaceDraft:
        """Load a photo selection into the draft.

        A selection without data leaves the draft unchanged.

        Raises:
            PhotoLoadError: If the selection cannot be loaded.
        """
        if self.photo_holder is None:
            return draft
        data = await self.photo_holder.load(selection)
        if data is None:
            self._logger.debug(
                "Photo selection has no data",
                extra={"selection": selection},
            )
            return draft
        return dataclasses.replace(draft, photo=data)

    # Records

    def add_place(self, draft: PlaceDraft) -> Place:
        """Validate and store a draft as a new place.

        Raises:
            InvalidPlaceError: If the draft fails the save rules.
        """
        name = _require_text(draft.name, "name")
        country = _require_text(draft.country, "country")
        if draft.location is None:
            raise InvalidPlaceError(
                "Pick a location from search or use the current location",
                field_name="location",
            )

        place = Place(
            id=uuid.uuid4().hex,
            name=name,
            country=country,
            visited_on=draft.visited_on,
            location=draft.location,
            notes=draft.notes,
            photo=draft.photo,
        )
        created = self.store.create(place)
        self._logger.info(
            "Place added",
            extra={"place_id": created.id, "place_name": created.name},
        )
        return created

    def update_place(
        self,
        place_id: str,
        *,
        name: Optional[str] = None,
        country: Optional[str] = None,
        notes: Optional[str] = None,
        visited_on: Optional[date] = None,
        photo: object = _UNCHANGED,
    ) -> Place:
        """Apply an edit-save to a stored place.

        Fields left as None keep their stored value. Pass photo=None to
        remove the photo. The coordinate is not editable.

        Raises:
            PlaceNotFoundError: If no place has this id.
            InvalidPlaceError: If the name or country becomes blank.
        """
        current = self.get_place(place_id)
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = _require_text(name, "name")
        if country is not None:
            changes["country"] = _require_text(country, "country")
        if notes is not None:
            changes["notes"] = notes
        if visited_on is not None:
            changes["visited_on"] = visited_on
        if photo is not _UNCHANGED:
            changes["photo"] = photo

        updated = self.store.update(dataclasses.replace(current, **changes))
        self._logger.info(
            "Place updated",
            extra={"place_id": place_id, "fields": sorted(changes)},
        )
        return updated

    def delete_place(self, place_id: str) -> None:
        """Delete a stored place.

        Raises:
            PlaceNotFoundError: If no place has this id.
        """
        self.store.delete(place_id)
        self._logger.info("Place deleted", extra={"place_id": place_id})

    def get_place(self, place_id: str) -> Place:
        """Fetch a stored place.

        Raises:
            PlaceNotFoundError: If no place has this id.
        """
        place = self.store.get(place_id)
        if place is None:
            raise PlaceNotFoundError(f"No place with id {place_id}", place_id=place_id)
        return place

    def list_places(
        self,
        search_text: str = "",
        sort: PlaceSort = PlaceSort.VISITED_NEWEST,
    ) -> Sequence[Place]:
        """List places, optionally filtered by name or country."""
        text_filter = search_text.strip() or None
        return self.store.query(sort, text_filter)

    def render_map(
        self,
        output_path: Path,
        center: Optional[GeoLocation] = None,
    ) -> Path:
        """Render every stored place on a map.

        Raises:
            RenderingError: If no renderer is configured or rendering fails.
        """
        if self.map_renderer is None:
            raise RenderingError(
                "No map renderer configured",
                output_path=str(output_path),
            )
        places = self.store.query(PlaceSort.VISITED_NEWEST)
        return self.map_renderer.render(places, output_path, center=center)


def _require_text(value: str, field_name: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise InvalidPlaceError(
            f"{field_name.capitalize()} must not be blank",
            field_name=field_name,
        )
    return trimmed
