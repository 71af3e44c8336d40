"""
Search composer: the state machine behind the search controls.

The composer holds the ingredient chips, the diet / cuisine / servings
selections, the text-input buffer and the autocomplete suggestions. There is
no search button: every effective filter change immediately calls the
on_search callback with a snapshot of the filters.

Autocomplete is debounced (300 ms, trailing edge). Every autocomplete request
and every search dispatch carries a monotonically increasing sequence number;
a response is only applied while its number is still the latest one issued,
so a slow old response can never overwrite newer input.

Example:
    >>> composer = SearchComposer(suggest=provider.autocomplete_ingredients, on_search=print)
    >>> composer.add_ingredient("tomato")   # on_search(SearchFilters(ingredients=["tomato"]), 1)
"""

import logging
import threading
from typing import Any, Callable, List

from gourmet.models import CUISINE_OPTIONS, DIET_OPTIONS, SERVINGS_OPTIONS, SearchFilters

logger = logging.getLogger(__name__)

AUTOCOMPLETE_DELAY_SECONDS = 0.3


class Debouncer:
    """
    Trailing-edge debouncer.

    Each call cancels the pending one and schedules the function to run after
    `delay` seconds. A delay <= 0 runs the function synchronously, which suits
    a script that reruns top to bottom on every interaction (Streamlit).

    Args:
        delay: Quiet period in seconds
        timer_factory: Callable with threading.Timer's (interval, function, args) signature
    """

    def __init__(self, delay: float, timer_factory: Callable[..., Any] = threading.Timer) -> None:
        self.delay = delay
        self.timer_factory = timer_factory
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, fn: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        if self.delay <= 0:
            fn(*args)
            return
        self._pending = self.timer_factory(self.delay, self._fire, args=(fn, args))
        self._pending.start()

    def _fire(self, fn: Callable[..., Any], args: tuple) -> None:
        self._pending = None
        fn(*args)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


class SearchComposer:
    """
    Collects search filters and dispatches searches on every effective change.

    Args:
        suggest: Returns ingredient completions for a partial name
        on_search: Called with (filters snapshot, search sequence number)
        autocomplete_delay: Debounce delay for autocomplete in seconds
        timer_factory: Timer factory for the debouncer (tests inject a fake)
    """

    def __init__(
        self,
        suggest: Callable[[str], List[str]],
        on_search: Callable[[SearchFilters, int], None],
        autocomplete_delay: float = AUTOCOMPLETE_DELAY_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self.suggest = suggest
        self.on_search = on_search
        self._debouncer = Debouncer(autocomplete_delay, timer_factory)
        self._lock = threading.Lock()

        self.ingredients: List[str] = []
        self.diet = ""
        self.cuisine = ""
        self.servings = 0
        self.input_buffer = ""
        self.suggestions: List[str] = []

        self._autocomplete_seq = 0
        self._search_seq = 0

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def filters(self) -> SearchFilters:
        """Snapshot of the current filters (safe to keep after further changes)."""
        return SearchFilters(
            ingredients=list(self.ingredients),
            diet=self.diet,
            cuisine=self.cuisine,
            servings=self.servings,
        )

    @property
    def search_seq(self) -> int:
        """Sequence number of the latest search dispatch."""
        return self._search_seq

    @property
    def autocomplete_seq(self) -> int:
        """Sequence number of the latest autocomplete request."""
        return self._autocomplete_seq

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    def on_input_change(self, text: str) -> None:
        """
        Update the input buffer and (re)schedule autocomplete.

        Empty input clears the suggestions immediately and cancels any pending
        request; responses still in flight become stale.
        """
        with self._lock:
            self.input_buffer = text
            self._autocomplete_seq += 1
            seq = self._autocomplete_seq
            if not text.strip():
                self._debouncer.cancel()
                self.suggestions = []
                return

        self._debouncer.call(self._fetch_suggestions, text, seq)

    def _fetch_suggestions(self, text: str, seq: int) -> None:
        if seq != self._autocomplete_seq:
            return
        try:
            results = self.suggest(text)
        except Exception as e:
            logger.error("Error fetching suggestions for %r: %s", text, e)
            results = []
        self.apply_suggestions(seq, results)

    def apply_suggestions(self, seq: int, suggestions: List[str]) -> bool:
        """
        Apply an autocomplete response if it is still current.

        Returns:
            True if applied, False if the response was stale and discarded
        """
        with self._lock:
            if seq != self._autocomplete_seq:
                logger.debug("Discarding stale suggestions (seq=%d, latest=%d)", seq, self._autocomplete_seq)
                return False
            self.suggestions = list(suggestions)
            return True

    # ------------------------------------------------------------------
    # Filter changes
    # ------------------------------------------------------------------

    def add_ingredient(self, name: str) -> bool:
        """
        Add an ingredient chip and search.

        Blank names and exact duplicates are ignored without searching.

        Returns:
            True if the ingredient was added
        """
        name = (name or "").strip()
        if not name or name in self.ingredients:
            return False

        with self._lock:
            self.ingredients.append(name)
            self.input_buffer = ""
            self.suggestions = []
            self._autocomplete_seq += 1
            self._debouncer.cancel()

        self._dispatch_search()
        return True

    def remove_ingredient(self, name: str) -> bool:
        """Remove an ingredient chip and search. Unknown names are ignored."""
        if name not in self.ingredients:
            return False
        self.ingredients = [i for i in self.ingredients if i != name]
        self._dispatch_search()
        return True

    def set_diet(self, diet: str) -> None:
        """
        Select a diet ("" for any).

        Raises:
            ValueError: If diet is not one of DIET_OPTIONS
        """
        if diet not in DIET_OPTIONS:
            raise ValueError(f"Unsupported diet {diet!r}; expected one of {DIET_OPTIONS}")
        if diet != self.diet:
            self.diet = diet
            self._dispatch_search()

    def set_cuisine(self, cuisine: str) -> None:
        """
        Select a cuisine ("" for any).

        Raises:
            ValueError: If cuisine is not one of CUISINE_OPTIONS
        """
        if cuisine not in CUISINE_OPTIONS:
            raise ValueError(f"Unsupported cuisine {cuisine!r}; expected one of {CUISINE_OPTIONS}")
        if cuisine != self.cuisine:
            self.cuisine = cuisine
            self._dispatch_search()

    def set_servings(self, servings: int) -> None:
        """
        Select a servings count (0 for any).

        Raises:
            ValueError: If servings is not one of SERVINGS_OPTIONS
        """
        if servings not in SERVINGS_OPTIONS:
            raise ValueError(f"Unsupported servings {servings!r}; expected one of {SERVINGS_OPTIONS}")
        if servings != self.servings:
            self.servings = servings
            self._dispatch_search()

    def search_now(self) -> int:
        """Dispatch a search with the current filters (initial load) and return its sequence number."""
        return self._dispatch_search()

    # ------------------------------------------------------------------
    # Search dispatch
    # ------------------------------------------------------------------

    def _dispatch_search(self) -> int:
        self._search_seq += 1
        seq = self._search_seq
        logger.debug("Dispatching search seq=%d", seq)
        self.on_search(self.filters, seq)
        return seq

    def accept_result(self, seq: int) -> bool:
        """True if a search result with this sequence number is still the latest."""
        return seq == self._search_seq
