"""Rendering adapters - Implementations of MapRendererPort.

Available implementations:
- FoliumMapRenderer: Folium-based interactive map of visited places
"""

from .folium_adapter import FoliumMapRenderer

__all__ = ["FoliumMapRenderer"]
