"""Typed domain errors for Where I Traveled.

Adapters and the place journal service raise these errors; the two
controllers catch them at their boundary and turn them into observable
state instead of propagating them to presentation code.

All errors inherit from WhereITraveledError and can optionally wrap a
root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class WhereITraveledError(Exception):
    """Base error for the travel journal domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class LocationUnavailableError(WhereITraveledError):
    """A location provider could not produce a fix.

    Attributes:
        reason: Short machine-friendly reason (e.g., 'network', 'denied')
    """

    reason: str = ""


@dataclass
class GeocodingError(WhereITraveledError):
    """Failed to geocode a search query.

    Attributes:
        query: The query text that failed
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    is_rate_limited: bool = False


@dataclass
class InvalidPlaceError(WhereITraveledError):
    """A place draft or edit does not satisfy the save rules.

    Attributes:
        field_name: Name of the offending field
    """

    field_name: str = ""


@dataclass
class PlaceNotFoundError(WhereITraveledError):
    """No stored place has the requested id.

    Attributes:
        place_id: The id that was looked up
    """

    place_id: str = ""


@dataclass
class StorageError(WhereITraveledError):
    """The place store failed to read or write.

    Attributes:
        database_path: Path of the backing database, if relevant
    """

    database_path: Optional[str] = None


@dataclass
class PhotoLoadError(WhereITraveledError):
    """A photo selection could not be loaded.

    Attributes:
        selection: The selection that was requested (e.g., a file path)
    """

    selection: str = ""


@dataclass
class ConfigurationError(WhereITraveledError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class RenderingError(WhereITraveledError):
    """Map rendering failed.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of renderer that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""
