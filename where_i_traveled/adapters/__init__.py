"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Location services (IP geolocation, simulated)
- Geocoding services (Nominatim)
- Place storage (SQLite)
- Photo selections (filesystem)
- Rendering engines (Folium)
- Caching systems (in-memory, null)
"""
