"""File-based photo holder.

A photo selection is a filesystem path. The file is read off the event
loop; a missing file yields None, like an empty picker selection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ...domain.errors import PhotoLoadError


@dataclass
class FilePhotoHolder:
    """PhotoHolderPort implementation reading image files.

    Attributes:
        max_bytes: Largest accepted file size
    """

    max_bytes: int = 10 * 1024 * 1024
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def load(self, selection: str) -> Optional[bytes]:
        return await asyncio.to_thread(self._read, Path(selection).expanduser())

    def _read(self, path: Path) -> Optional[bytes]:
        if not path.is_file():
            self._logger.debug("Photo selection not found", extra={"path": str(path)})
            return None

        try:
            size = path.stat().st_size
            if size > self.max_bytes:
                raise PhotoLoadError(
                    f"Photo is too large ({size} bytes, limit {self.max_bytes})",
                    selection=str(path),
                )
            data = path.read_bytes()
        except OSError as e:
            raise PhotoLoadError("Could not read photo", selection=str(path), cause=e)

        self._logger.debug("Photo loaded", extra={"path": str(path), "bytes": len(data)})
        return data or None
