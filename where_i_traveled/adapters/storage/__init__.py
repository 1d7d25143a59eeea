"""Storage adapters - Implementations of PlaceStorePort.

Available implementations:
- SQLitePlaceStore: Places stored in a local SQLite database
"""

from .sqlite_store import SQLitePlaceStore

__all__ = ["SQLitePlaceStore"]
