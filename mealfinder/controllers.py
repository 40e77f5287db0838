"""
Page controllers for the home, search and recipe detail pages.

Each controller is a small state machine:

    idle -> loading -> success | empty | error

driven by the page's addressable location (its query parameters). The
controllers call the recipe connector, never raise NetworkError to their
caller, and expose what the page needs to render: a state, a user-facing
message and the records to show.

Request ordering: every run takes a ticket from a per-controller sequence.
When a run finishes it only applies its result if its ticket is still the
latest one issued; results of superseded runs are discarded. In-flight
requests are never cancelled and nothing is retried.

Joins are partial-success: the home page's trending and featured sections
are independent of each other, and inside a section the records that did
load are shown with a partial-failure notice.
"""

import logging
import threading
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .connectors.base import BaseRecipeSource, NetworkError
from .models import RecipeDetail, RecipeSummary
from .search import SearchResults, aggregated_search
from .utils.parallel import run_all_settled, successful_values

logger = logging.getLogger(__name__)

HOME_RANDOM_COUNT = 6
FEATURED_PER_TERM = 2
FEATURED_PICKS = ("Chicken", "Beef", "Prawn", "Arrabiata", "Curry")
HOME_TAGS = ("chicken", "beef", "rice", "egg", "salmon", "pasta", "soup", "cake", "tofu", "potato")

SEARCH_PROMPT = "Type ingredient or recipe name above to search."
SEARCH_FAILED = "Failed to load results."
PARTIAL_NOTICE = "Some results could not be loaded."
DETAIL_NO_SELECTION = "No recipe selected. Try searching or click a recipe card."
DETAIL_NOT_FOUND = "Recipe not found."
DETAIL_FAILED = "Failed to load recipe."


class PageState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


def capitalize(text: str) -> str:
    """Upper-case the first character only ("pasta bake" -> "Pasta bake")."""
    return text[:1].upper() + text[1:]


class PageController:
    """
    Shared state and request sequencing for page controllers.

    Attributes:
        location: Query parameters of the page (e.g. {"q": "chicken"})
        state: Current PageState
        message: User-facing text for the current state ("" when none)
    """

    def __init__(self, connector: BaseRecipeSource, location: Optional[Dict[str, str]] = None) -> None:
        self.connector = connector
        self.location: Dict[str, str] = dict(location or {})
        self.state = PageState.IDLE
        self.message = ""
        self._sequence = 0
        self._lock = threading.Lock()

    def _next_ticket(self) -> int:
        with self._lock:
            self._sequence += 1
            return self._sequence

    def _is_latest(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._sequence

    def _set_state(self, state: PageState, message: str = "") -> None:
        logger.debug("%s: %s -> %s", type(self).__name__, self.state.value, state.value)
        self.state = state
        self.message = message


class HomeSection:
    """One independently loaded list of recipes on the home page."""

    def __init__(self, title: str, error_message: str) -> None:
        self.title = title
        self.error_message = error_message
        self.state = PageState.IDLE
        self.records: List[RecipeSummary] = []
        self.partial_failure = False

    @property
    def message(self) -> str:
        if self.state == PageState.ERROR:
            return self.error_message
        if self.state == PageState.EMPTY:
            return "Nothing to show right now."
        if self.partial_failure:
            return PARTIAL_NOTICE
        return ""

    def apply(self, records: List[RecipeSummary], failed: int, attempted: int) -> None:
        """
        Settle the section from a partial-success join.

        All attempts failed -> error; nothing returned -> empty; otherwise
        success, flagged partial when some attempts failed.
        """
        if attempted and failed == attempted:
            self.state = PageState.ERROR
            self.records = []
            self.partial_failure = False
        elif not records:
            self.state = PageState.EMPTY
            self.records = []
            self.partial_failure = failed > 0
        else:
            self.state = PageState.SUCCESS
            self.records = records
            self.partial_failure = failed > 0


class HomeController(PageController):
    """
    Home page: trending (random recipes), featured (popular searches) and tags.
    """

    def __init__(
        self,
        connector: BaseRecipeSource,
        location: Optional[Dict[str, str]] = None,
        random_count: int = HOME_RANDOM_COUNT,
        featured_per_term: int = FEATURED_PER_TERM,
        featured_picks: Sequence[str] = FEATURED_PICKS,
    ) -> None:
        super().__init__(connector, location)
        self.random_count = random_count
        self.featured_per_term = featured_per_term
        self.featured_picks = tuple(featured_picks)
        self.trending = HomeSection("Trending now", "Unable to load trending.")
        self.featured = HomeSection("Featured", "Unable to load featured.")

    @property
    def tags(self) -> List[Dict[str, str]]:
        """Quick-search tags as {"label", "query"} pairs."""
        return [{"label": capitalize(tag), "query": tag} for tag in HOME_TAGS]

    def load(self) -> None:
        ticket = self._next_ticket()
        self._set_state(PageState.LOADING)
        self.trending.state = PageState.LOADING
        self.featured.state = PageState.LOADING

        random_tasks = [self.connector.random for _ in range(self.random_count)]
        featured_tasks = [
            (lambda term=term: self.connector.search_by_name(term)[: self.featured_per_term])
            for term in self.featured_picks
        ]
        outcomes = run_all_settled(random_tasks + featured_tasks)
        random_outcomes = outcomes[: len(random_tasks)]
        featured_outcomes = outcomes[len(random_tasks):]

        if not self._is_latest(ticket):
            logger.info("HomeController: discarding stale load (ticket %d)", ticket)
            return

        trending_records = [r for r in successful_values(random_outcomes) if r is not None]
        self.trending.apply(
            trending_records,
            failed=sum(1 for o in random_outcomes if not o.ok),
            attempted=len(random_outcomes),
        )

        featured_records: List[RecipeSummary] = []
        for rows in successful_values(featured_outcomes):
            featured_records.extend(rows)
        self.featured.apply(
            featured_records,
            failed=sum(1 for o in featured_outcomes if not o.ok),
            attempted=len(featured_outcomes),
        )

        if self.trending.state == PageState.ERROR and self.featured.state == PageState.ERROR:
            self._set_state(PageState.ERROR, "Unable to load recipes.")
        else:
            self._set_state(PageState.SUCCESS)
        logger.info(
            "Home loaded: trending=%s (%d) featured=%s (%d)",
            self.trending.state.value, len(self.trending.records),
            self.featured.state.value, len(self.featured.records),
        )


class SearchController(PageController):
    """
    Search page: merged name + ingredient results for the "q" location param.
    """

    def __init__(self, connector: BaseRecipeSource, location: Optional[Dict[str, str]] = None) -> None:
        super().__init__(connector, location)
        self.results: List[RecipeSummary] = []
        self.meta = ""
        self.partial_failure = False
        self.search_results: Optional[SearchResults] = None

    @property
    def query(self) -> str:
        return (self.location.get("q") or "").strip()

    def submit(self, query: str) -> None:
        """Rewrite the location's query and re-run the search."""
        self.location["q"] = (query or "").strip()
        self.run()

    def run(self) -> None:
        query = self.query
        ticket = self._next_ticket()
        self.meta = ""
        self.partial_failure = False

        if not query:
            self.results = []
            self.search_results = None
            self._set_state(PageState.IDLE, SEARCH_PROMPT)
            return

        self._set_state(PageState.LOADING, "Searching...")
        search_results = aggregated_search(query, connector=self.connector)

        if not self._is_latest(ticket):
            logger.info("SearchController: discarding stale results for %r (ticket %d)", query, ticket)
            return

        self.search_results = search_results
        if search_results.all_failed:
            self.results = []
            self._set_state(PageState.ERROR, SEARCH_FAILED)
        elif not search_results.results:
            self.results = []
            self.meta = f'No results for "{query}"'
            self.partial_failure = search_results.partial_failure
            self._set_state(PageState.EMPTY, self.meta)
        else:
            self.results = search_results.results
            self.meta = f'{len(self.results)} result(s) for "{query}"'
            self.partial_failure = search_results.partial_failure
            self._set_state(PageState.SUCCESS, PARTIAL_NOTICE if self.partial_failure else "")


class DetailController(PageController):
    """
    Recipe detail page for the "id" location param.
    """

    def __init__(self, connector: BaseRecipeSource, location: Optional[Dict[str, str]] = None) -> None:
        super().__init__(connector, location)
        self.recipe: Optional[RecipeDetail] = None

    @property
    def recipe_id(self) -> str:
        return (self.location.get("id") or "").strip()

    def load(self) -> None:
        recipe_id = self.recipe_id
        ticket = self._next_ticket()

        if not recipe_id:
            self.recipe = None
            self._set_state(PageState.IDLE, DETAIL_NO_SELECTION)
            return

        self._set_state(PageState.LOADING, "Loading...")
        try:
            recipe = self.connector.lookup_by_id(recipe_id)
        except NetworkError as e:
            if self._is_latest(ticket):
                logger.error("Failed to load recipe %s: %s", recipe_id, e)
                self.recipe = None
                self._set_state(PageState.ERROR, DETAIL_FAILED)
            return

        if not self._is_latest(ticket):
            logger.info("DetailController: discarding stale recipe %s (ticket %d)", recipe_id, ticket)
            return

        self.recipe = recipe
        if recipe is None:
            self._set_state(PageState.EMPTY, DETAIL_NOT_FOUND)
        else:
            self._set_state(PageState.SUCCESS)
