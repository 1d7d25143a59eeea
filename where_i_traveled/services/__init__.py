"""Services layer - Application orchestration.

Available services:
- LocationAcquisitionController: Permission and single-fix state machine
- SearchQueryController: Debounced, cancellable geocoding search
- PlaceJournalService: Add, edit, delete and list visited places
"""

from .location_controller import LocationAcquisitionController
from .place_journal import PlaceJournalService
from .search_controller import SearchQueryController

__all__ = [
    "LocationAcquisitionController",
    "SearchQueryController",
    "PlaceJournalService",
]
