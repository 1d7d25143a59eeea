"""Photo adapters - Implementations of PhotoHolderPort.

Available implementations:
- FilePhotoHolder: Reads photo selections from the filesystem
"""

from .file_photo_holder import FilePhotoHolder

__all__ = ["FilePhotoHolder"]
