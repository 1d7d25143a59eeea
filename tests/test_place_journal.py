"""Tests for the place journal service on the SQLite store."""

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from where_i_traveled.adapters.storage.sqlite_store import SQLitePlaceStore
from where_i_traveled.domain.errors import (
    InvalidPlaceError,
    PlaceNotFoundError,
    RenderingError,
)
from where_i_traveled.domain.models import (
    GeoLocation,
    LocationFix,
    PlaceDraft,
    PlaceSort,
    SearchResult,
)
from where_i_traveled.services.place_journal import PlaceJournalService

KYOTO = GeoLocation(35.0116, 135.7681)


@pytest.fixture
def store():
    store = SQLitePlaceStore()
    yield store
    store.close()


@pytest.fixture
def journal(store) -> PlaceJournalService:
    return PlaceJournalService(store=store)


def draft(name="Kyoto", country="Japan", visited_on=date(2023, 4, 2), **kwargs):
    kwargs.setdefault("location", KYOTO)
    return PlaceDraft(name=name, country=country, visited_on=visited_on, **kwargs)


class TestAddPlace:
    def test_saves_trimmed_fields(self, journal):
        place = journal.add_place(draft(name="  Kyoto ", country=" Japan", notes="temples"))

        assert place.name == "Kyoto"
        assert place.country == "Japan"
        assert place.notes == "temples"
        assert place.location == KYOTO
        assert journal.get_place(place.id) == place

    def test_ids_are_unique(self, journal):
        first = journal.add_place(draft())
        second = journal.add_place(draft())

        assert first.id != second.id
        assert len(journal.list_places()) == 2

    @pytest.mark.parametrize(
        "overrides, field_name",
        [
            ({"name": "   "}, "name"),
            ({"country": ""}, "country"),
            ({"location": None}, "location"),
        ],
    )
    def test_rejects_incomplete_draft(self, journal, overrides, field_name):
        with pytest.raises(InvalidPlaceError) as exc_info:
            journal.add_place(draft(**overrides))

        assert exc_info.value.field_name == field_name
        assert journal.list_places() == []

    def test_keeps_photo_bytes(self, journal):
        place = journal.add_place(draft(photo=b"\x89PNG"))

        assert journal.get_place(place.id).photo == b"\x89PNG"
        assert place.has_photo


class TestDrafts:
    def test_new_draft_defaults_to_today(self, journal):
        new = journal.new_draft()

        assert new.visited_on == date.today()
        assert not new.can_save

    def test_fix_sets_location(self, journal):
        fix = LocationFix(location=KYOTO, timestamp=MagicMock())

        updated = journal.draft_with_fix(PlaceDraft(name="Here"), fix)

        assert updated.location == KYOTO
        assert updated.name == "Here"

    def test_candidate_fills_blank_name(self, journal):
        candidate = SearchResult(id="c1", name="Kyoto", location=KYOTO)

        updated = journal.draft_with_candidate(PlaceDraft(name="  "), candidate)

        assert updated.name == "Kyoto"
        assert updated.location == KYOTO

    def test_candidate_keeps_typed_name(self, journal):
        candidate = SearchResult(id="c1", name="Kyoto", location=KYOTO)

        updated = journal.draft_with_candidate(PlaceDraft(name="Gion"), candidate)

        assert updated.name == "Gion"
        assert updated.location == KYOTO

    @pytest.mark.asyncio
    async def test_attach_photo_uses_holder(self, store):
        holder = MagicMock()
        holder.load = AsyncMock(return_value=b"jpeg")
        journal = PlaceJournalService(store=store, photo_holder=holder)

        updated = await journal.attach_photo(PlaceDraft(), "/tmp/a.jpg")

        holder.load.assert_awaited_once_with("/tmp/a.jpg")
        assert updated.photo == b"jpeg"

    @pytest.mark.asyncio
    async def test_attach_empty_selection_keeps_draft(self, store):
        holder = MagicMock()
        holder.load = AsyncMock(return_value=None)
        journal = PlaceJournalService(store=store, photo_holder=holder)
        original = PlaceDraft(photo=b"old")

        updated = await journal.attach_photo(original, "/tmp/missing.jpg")

        assert updated is original


class TestEditAndDelete:
    def test_update_changes_only_given_fields(self, journal):
        place = journal.add_place(draft(notes="first trip"))

        updated = journal.update_place(place.id, notes="second trip", country=" Nippon ")

        assert updated.notes == "second trip"
        assert updated.country == "Nippon"
        assert updated.name == "Kyoto"
        assert updated.location == KYOTO
        assert journal.get_place(place.id) == updated

    def test_update_rejects_blank_name(self, journal):
        place = journal.add_place(draft())

        with pytest.raises(InvalidPlaceError):
            journal.update_place(place.id, name=" ")

        assert journal.get_place(place.id).name == "Kyoto"

    def test_update_can_remove_photo(self, journal):
        place = journal.add_place(draft(photo=b"img"))

        updated = journal.update_place(place.id, photo=None)

        assert updated.photo is None
        assert journal.get_place(place.id).photo is None

    def test_update_unknown_place_raises(self, journal):
        with pytest.raises(PlaceNotFoundError):
            journal.update_place("missing", name="X")

    def test_delete_removes_place(self, journal):
        place = journal.add_place(draft())

        journal.delete_place(place.id)

        assert journal.list_places() == []
        with pytest.raises(PlaceNotFoundError):
            journal.get_place(place.id)

    def test_delete_unknown_place_raises(self, journal):
        with pytest.raises(PlaceNotFoundError) as exc_info:
            journal.delete_place("missing")

        assert exc_info.value.place_id == "missing"


class TestListPlaces:
    @pytest.fixture
    def seeded(self, journal):
        journal.add_place(draft("Kyoto", "Japan", date(2023, 4, 2)))
        journal.add_place(draft("Zürich", "Switzerland", date(2021, 8, 15)))
        journal.add_place(draft("Lisbon", "Portugal", date(2024, 1, 20)))
        return journal

    def test_default_sort_is_newest_visit_first(self, seeded):
        names = [p.name for p in seeded.list_places()]

        assert names == ["Lisbon", "Kyoto", "Zürich"]

    def test_oldest_and_name_sorts(self, seeded):
        oldest = [p.name for p in seeded.list_places(sort=PlaceSort.VISITED_OLDEST)]
        by_name = [p.name for p in seeded.list_places(sort=PlaceSort.NAME)]

        assert oldest == ["Zürich", "Kyoto", "Lisbon"]
        assert by_name == ["Kyoto", "Lisbon", "Zürich"]

    def test_filter_matches_name_or_country_case_insensitively(self, seeded):
        assert [p.name for p in seeded.list_places("JAPAN")] == ["Kyoto"]
        assert [p.name for p in seeded.list_places("lis")] == ["Lisbon"]

    def test_filter_folds_non_ascii(self, seeded):
        assert [p.name for p in seeded.list_places("ZÜRICH")] == ["Zürich"]

    def test_blank_filter_lists_everything(self, seeded):
        assert len(seeded.list_places("   ")) == 3

    def test_no_match_returns_empty(self, seeded):
        assert seeded.list_places("Atlantis") == []


def test_places_persist_across_reopen(tmp_path: Path):
    path = tmp_path / "nested" / "places.sqlite"
    first = SQLitePlaceStore(path)
    place = PlaceJournalService(store=first).add_place(draft(notes="ramen"))
    first.close()

    second = SQLitePlaceStore(path)
    try:
        assert PlaceJournalService(store=second).get_place(place.id) == place
    finally:
        second.close()


def test_render_map_passes_places_to_renderer(store, tmp_path):
    renderer = MagicMock()
    renderer.render.return_value = tmp_path / "map.html"
    journal = PlaceJournalService(store=store, map_renderer=renderer)
    place = journal.add_place(draft())

    result = journal.render_map(tmp_path / "map.html", center=KYOTO)

    assert result == tmp_path / "map.html"
    renderer.render.assert_called_once_with([place], tmp_path / "map.html", center=KYOTO)


def test_render_map_without_renderer_raises(journal, tmp_path):
    with pytest.raises(RenderingError):
        journal.render_map(tmp_path / "map.html")
