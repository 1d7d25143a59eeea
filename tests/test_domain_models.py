"""Tests for domain models and errors."""

from datetime import date

import pytest

from where_i_traveled.domain import (
    AuthorizationStatus,
    GeocodingError,
    GeoLocation,
    Place,
    PlaceDraft,
    SearchState,
    StorageError,
    WhereITraveledError,
)


class TestGeoLocation:
    def test_valid_bounds(self):
        assert GeoLocation(90, 180).latitude == 90
        assert GeoLocation(-90, -180).longitude == -180

    @pytest.mark.parametrize("lat, lon", [(90.1, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_out_of_range(self, lat, lon):
        with pytest.raises(ValueError):
            GeoLocation(lat, lon)

    def test_format(self):
        assert GeoLocation(41.9028, 12.4964).format() == "41.90280, 12.49640"
        assert GeoLocation(41.9028, 12.4964).format(2) == "41.90, 12.50"

    def test_is_frozen(self):
        location = GeoLocation(1.0, 2.0)
        with pytest.raises(AttributeError):
            location.latitude = 3.0


@pytest.mark.parametrize(
    "status, authorized",
    [
        (AuthorizationStatus.UNDETERMINED, False),
        (AuthorizationStatus.DENIED, False),
        (AuthorizationStatus.RESTRICTED, False),
        (AuthorizationStatus.AUTHORIZED_LIMITED, True),
        (AuthorizationStatus.AUTHORIZED_FULL, True),
    ],
)
def test_is_authorized(status, authorized):
    assert status.is_authorized is authorized


def test_draft_can_save():
    location = GeoLocation(35.0, 135.0)

    assert PlaceDraft(name="Kyoto", country="Japan", location=location).can_save
    assert not PlaceDraft(name="Kyoto", country=" ", location=location).can_save
    assert not PlaceDraft(name="Kyoto", country="Japan").can_save


def test_place_photo_flag():
    place = Place(
        id="p1",
        name="Kyoto",
        country="Japan",
        visited_on=date(2023, 4, 2),
        location=GeoLocation(35.0, 135.0),
    )

    assert not place.has_photo
    assert "photo" not in repr(place)


def test_search_state_has_candidates():
    assert not SearchState().has_candidates


def test_error_str_includes_cause():
    error = StorageError("Could not save", cause=OSError("disk full"))

    assert str(error) == "Could not save: disk full"
    assert isinstance(error, WhereITraveledError)


def test_error_fields():
    error = GeocodingError("busy", query="Rome", is_rate_limited=True)

    assert error.message == "busy"
    assert error.query == "Rome"
    assert error.is_rate_limited
    assert str(error) == "busy"
