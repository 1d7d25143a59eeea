"""Where I Traveled - a journal of visited places.

Each place records a name, country, visit date, coordinate, optional
photo and notes. Coordinates come either from a single location fix
(LocationAcquisitionController) or from a debounced geocoding search
(SearchQueryController).
"""

__version__ = "0.1.0"
