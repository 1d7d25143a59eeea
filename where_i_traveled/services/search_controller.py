"""Search-as-you-type controller.

Turns keystrokes into a debounced geocoding search and guarantees that
the visible candidates always belong to the most recent input.

Every call to set_query() bumps a generation counter and cancels the
pending task. A task only writes state while its generation is still
the current one, so a completion that arrives late (because the
transport ignored cancellation) is dropped instead of overwriting newer
results.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..config import SearchConfig, get_config
from ..domain.models import GeocodedItem, SearchResult, SearchState
from ..ports.geocoding import GeocoderPort

StateListener = Callable[[SearchState], None]
SelectHandler = Callable[[SearchResult], None]


@dataclass
class SearchQueryController:
    """Debounced, cancellable geocoding search with stale-result suppression.

    set_query() is the sole entry point and must be called from the event
    loop that owns the controller. Geocoder failures never raise to the
    caller; they become error_message.

    Attributes:
        geocoder: Geocoding provider used for searches
        config: Search configuration (debounce, minimum length, messages)
        on_select: Optional callback receiving the chosen candidate
    """

    geocoder: GeocoderPort
    config: SearchConfig = field(default_factory=lambda: get_config().search)
    on_select: Optional[SelectHandler] = None

    query_text: str = field(init=False, default="")
    candidates: tuple[SearchResult, ...] = field(init=False, default=())
    is_searching: bool = field(init=False, default=False)
    error_message: Optional[str] = field(init=False, default=None)

    _generation: int = field(init=False, default=0, repr=False)
    _task: Optional[asyncio.Task[None]] = field(init=False, default=None, repr=False)
    _listeners: List[StateListener] = field(default_factory=list, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> SearchState:
        """Snapshot of the observable state."""
        return SearchState(
            query_text=self.query_text,
            candidates=self.candidates,
            is_searching=self.is_searching,
            error_message=self.error_message,
        )

    @property
    def generation(self) -> int:
        """Token of the most recently issued query."""
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with a snapshot on every change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_query(self, text: str) -> None:
        """Record new query text and schedule a debounced search.

        Queries shorter than the minimum length clear the candidates
        without issuing a request. Identical text re-issues a request so
        the user can retry after a failure.
        """
        self.query_text = text
        self._generation += 1
        self._cancel_task()

        trimmed = text.strip()
        if len(trimmed) < self.config.min_query_length:
            self.candidates = ()
            self.error_message = None
            self.is_searching = False
            self._notify()
            return

        generation = self._generation
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._debounced_search(trimmed, generation))

    def select_candidate(self, candidate_id: str) -> Optional[SearchResult]:
        """Report the chosen candidate to the on_select callback.

        Returns:
            The selected candidate, or None if the id is not current.
        """
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                self._logger.info(
                    "Search candidate selected",
                    extra={"name": candidate.name},
                )
                if self.on_select is not None:
                    self.on_select(candidate)
                return candidate

        self._logger.debug(
            "Unknown candidate id",
            extra={"candidate_id": candidate_id},
        )
        return None

    def cancel(self) -> None:
        """Drop any pending or in-flight search, keeping the current text."""
        self._generation += 1
        self._cancel_task()
        if self.is_searching:
            self.is_searching = False
            self._notify()

    async def wait_until_settled(self) -> SearchState:
        """Wait until the current debounce/search task has finished."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self.state

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _debounced_search(self, query: str, generation: int) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        if not self._is_current(generation):
            return

        self.is_searching = True
        self.error_message = None
        self.candidates = ()
        self._notify()
        self._logger.debug(
            "Issuing geocoding search",
            extra={"query": query, "generation": generation},
        )

        try:
            items = await self.geocoder.search(query)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(generation):
                self._logger.debug(
                    "Discarding stale search failure",
                    extra={"query": query, "generation": generation},
                )
                return
            self._logger.warning(
                "Geocoding search failed",
                extra={"query": query, "error": str(e)},
            )
            self.error_message = getattr(e, "message", None) or str(e)
            self.candidates = ()
            self.is_searching = False
            self._notify()
            return

        if not self._is_current(generation):
            self._logger.debug(
                "Discarding stale search results",
                extra={"query": query, "generation": generation},
            )
            return

        self.candidates = self._to_candidates(items, query)
        if not self.candidates:
            self.error_message = self.config.empty_results_message
        self.is_searching = False
        self._logger.info(
            "Geocoding search completed",
            extra={"query": query, "results": len(self.candidates)},
        )
        self._notify()

    @staticmethod
    def _to_candidates(
        items: Sequence[GeocodedItem], query: str
    ) -> tuple[SearchResult, ...]:
        # Provider order is kept as-is: no sorting, no de-duplication.
        return tuple(
            SearchResult(
                id=uuid.uuid4().hex,
                name=item.name or query,
                location=item.location,
            )
            for item in items
        )

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._logger.exception("Search state listener failed")
