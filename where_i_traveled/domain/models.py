"""Immutable domain models for Where I Traveled.

All models are frozen dataclasses with slots. These models have no
external dependencies and represent the core concepts of the journal:
places, location fixes and geocoded search candidates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, auto
from typing import Optional


class AuthorizationStatus(Enum):
    """Location permission state reported by a location provider."""

    UNDETERMINED = auto()
    DENIED = auto()
    RESTRICTED = auto()
    AUTHORIZED_LIMITED = auto()
    AUTHORIZED_FULL = auto()

    @property
    def is_authorized(self) -> bool:
        """Check if location readings may be requested."""
        return self in (
            AuthorizationStatus.AUTHORIZED_LIMITED,
            AuthorizationStatus.AUTHORIZED_FULL,
        )


class PlaceSort(Enum):
    """Ordering applied when listing stored places."""

    VISITED_NEWEST = auto()
    VISITED_OLDEST = auto()
    NAME = auto()


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )

    def format(self, precision: int = 5) -> str:
        """Render as 'lat, lon' with a fixed number of decimals."""
        return f"{self.latitude:.{precision}f}, {self.longitude:.{precision}f}"


@dataclass(frozen=True, slots=True)
class LocationFix:
    """A single successful location reading.

    Attributes:
        location: Coordinates of the reading
        timestamp: When the reading was taken (timezone-aware)
    """

    location: GeoLocation
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class GeocodedItem:
    """One raw result returned by a geocoding provider.

    Attributes:
        location: Coordinates of the match
        name: Provider-supplied display name, if any
    """

    location: GeoLocation
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A selectable search candidate.

    Attributes:
        id: Opaque unique identifier of the candidate
        name: Display name (falls back to the query text)
        location: Coordinates of the candidate
    """

    id: str
    name: str
    location: GeoLocation


@dataclass(frozen=True, slots=True)
class Place:
    """A visited place as stored in the journal.

    Attributes:
        id: Opaque unique identifier
        name: Place name (e.g., 'Kyoto')
        country: Country or region (e.g., 'Japan')
        visited_on: Calendar date of the visit
        location: Coordinates of the place
        notes: Free-text notes, may be empty
        photo: Optional raw image bytes
    """

    id: str
    name: str
    country: str
    visited_on: date
    location: GeoLocation
    notes: str = ""
    photo: Optional[bytes] = field(default=None, repr=False)

    @property
    def has_photo(self) -> bool:
        """Check if a photo is attached."""
        return self.photo is not None


@dataclass(frozen=True, slots=True)
class PlaceDraft:
    """The in-progress state of the add-place flow.

    A draft becomes a Place once it passes the save rules: a non-blank
    name, a non-blank country and a coordinate picked either from a
    location fix or from a search candidate.
    """

    name: str = ""
    country: str = ""
    notes: str = ""
    visited_on: date = field(default_factory=date.today)
    location: Optional[GeoLocation] = None
    photo: Optional[bytes] = field(default=None, repr=False)

    @property
    def can_save(self) -> bool:
        """Check if the draft satisfies the save rules."""
        return (
            bool(self.name.strip())
            and bool(self.country.strip())
            and self.location is not None
        )


@dataclass(frozen=True, slots=True)
class LocationStatus:
    """Snapshot of the location controller's observable state."""

    authorization_status: AuthorizationStatus
    last_fix: Optional[LocationFix] = None
    is_acquiring: bool = False
    last_error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SearchState:
    """Snapshot of the search controller's observable state."""

    query_text: str = ""
    candidates: tuple[SearchResult, ...] = field(default_factory=tuple)
    is_searching: bool = False
    error_message: Optional[str] = None

    @property
    def has_candidates(self) -> bool:
        """Check if any candidates are available."""
        return len(self.candidates) > 0
