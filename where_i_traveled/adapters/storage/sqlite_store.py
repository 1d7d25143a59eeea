"""SQLite place store.

Places are stored one row per record; the schema is created on open.
Text filtering runs in Python with str.casefold() so that non-ASCII
names match case-insensitively (SQLite's LIKE only folds ASCII).
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ...domain.errors import PlaceNotFoundError, StorageError
from ...domain.models import GeoLocation, Place, PlaceSort

_SCHEMA = """
CREATE TABLE IF NOT EXISTS places (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    country TEXT NOT NULL,
    notes TEXT NOT NULL DEFAULT '',
    visited_on TEXT NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    photo BLOB
)
"""

_ORDER_BY = {
    PlaceSort.VISITED_NEWEST: "visited_on DESC, name COLLATE NOCASE ASC",
    PlaceSort.VISITED_OLDEST: "visited_on ASC, name COLLATE NOCASE ASC",
    PlaceSort.NAME: "name COLLATE NOCASE ASC, visited_on DESC",
}

_COLUMNS = "id, name, country, notes, visited_on, latitude, longitude, photo"


@dataclass
class SQLitePlaceStore:
    """PlaceStorePort implementation on a single SQLite connection.

    Attributes:
        database_path: File path of the database, or ":memory:"
    """

    database_path: Union[str, Path] = ":memory:"

    _conn: sqlite3.Connection = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        path = str(self.database_path)
        try:
            if path != ":memory:":
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(
                "Could not open the places database",
                database_path=path,
                cause=e,
            )
        self._logger.debug("Place store opened", extra={"database_path": path})

    def create(self, place: Place) -> Place:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    f"INSERT INTO places ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    _to_row(place),
                )
        except sqlite3.Error as e:
            raise self._error("Could not save the place", e)
        return place

    def update(self, place: Place) -> Place:
        try:
            with self._lock, self._conn:
                cursor = self._conn.execute(
                    """
                    UPDATE places
                    SET name=?, country=?, notes=?, visited_on=?,
                        latitude=?, longitude=?, photo=?
                    WHERE id=?
                    """,
                    _to_row(place)[1:] + (place.id,),
                )
        except sqlite3.Error as e:
            raise self._error("Could not update the place", e)
        if cursor.rowcount == 0:
            raise PlaceNotFoundError(f"No place with id {place.id}", place_id=place.id)
        return place

    def delete(self, place_id: str) -> None:
        try:
            with self._lock, self._conn:
                cursor = self._conn.execute("DELETE FROM places WHERE id=?", (place_id,))
        except sqlite3.Error as e:
            raise self._error("Could not delete the place", e)
        if cursor.rowcount == 0:
            raise PlaceNotFoundError(f"No place with id {place_id}", place_id=place_id)

    def get(self, place_id: str) -> Optional[Place]:
        try:
            with self._lock:
                row = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM places WHERE id=?", (place_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise self._error("Could not read the place", e)
        return _from_row(row) if row else None

    def query(
        self,
        sort: PlaceSort = PlaceSort.VISITED_NEWEST,
        text_filter: Optional[str] = None,
    ) -> Sequence[Place]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM places ORDER BY {_ORDER_BY[sort]}"
                ).fetchall()
        except sqlite3.Error as e:
            raise self._error("Could not list places", e)

        places: List[Place] = [_from_row(row) for row in rows]
        needle = (text_filter or "").strip().casefold()
        if not needle:
            return places
        return [
            p
            for p in places
            if needle in p.name.casefold() or needle in p.country.casefold()
        ]

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    def _error(self, message: str, cause: sqlite3.Error) -> StorageError:
        self._logger.error(
            message,
            extra={"database_path": str(self.database_path), "error": str(cause)},
        )
        return StorageError(message, database_path=str(self.database_path), cause=cause)


def _to_row(place: Place) -> tuple:
    return (
        place.id,
        place.name,
        place.country,
        place.notes,
        place.visited_on.isoformat(),
        place.location.latitude,
        place.location.longitude,
        place.photo,
    )


def _from_row(row: sqlite3.Row) -> Place:
    photo = row["photo"]
    return Place(
        id=row["id"],
        name=row["name"],
        country=row["country"],
        notes=row["notes"],
        visited_on=date.fromisoformat(row["visited_on"]),
        location=GeoLocation(latitude=row["latitude"], longitude=row["longitude"]),
        photo=bytes(photo) if photo is not None else None,
    )
