"""
Aggregated recipe search across the name and ingredient endpoints.

This module provides the core search aggregation functionality that:
- Searches TheMealDB by name and by main ingredient in parallel
- Tracks a per-source status so one failing endpoint does not hide the other
- Merges both result sets into one ordered list, deduplicated by recipe id

Results keep API order: every by-name result first, then the by-ingredient
results that were not already present. No ranking is applied.

Search flow: search page -> SearchController.run() -> aggregated_search() -> connector.search_by_* -> merge_results()
"""

import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from mealfinder.models import RecipeSummary
from mealfinder.utils.parallel import run_all_settled

from .connectors.base import BaseRecipeSource
from .connectors.mealdb_connector import MealDBConnector

logger = logging.getLogger(__name__)

# Source identifiers used in sources_status, in merge order
SEARCH_SOURCES = ("name", "ingredient")


def merge_results(
    by_name: Sequence[RecipeSummary],
    by_ingredient: Sequence[RecipeSummary],
) -> List[RecipeSummary]:
    """
    Merge by-name and by-ingredient results for the same query.

    The by-name order is preserved, then by-ingredient entries are appended in
    their own order if their id has not been seen yet. Deduplication is by id
    only; when both sources return the same recipe the by-name record (which
    carries a category) wins.

    Examples:
        >>> a = [RecipeSummary(id="1", name="A"), RecipeSummary(id="2", name="B")]
        >>> b = [RecipeSummary(id="2", name="B"), RecipeSummary(id="3", name="C")]
        >>> [r.id for r in merge_results(a, b)]
        ['1', '2', '3']
    """
    merged: List[RecipeSummary] = []
    seen_ids = set()
    for recipe in list(by_name) + list(by_ingredient):
        if recipe.id in seen_ids:
            continue
        seen_ids.add(recipe.id)
        merged.append(recipe)
    return merged


class SearchResults(BaseModel):
    """Merged search results plus the status of each source endpoint."""
    query: str
    results: List[RecipeSummary] = Field(default_factory=list)
    sources_status: Dict[str, str] = Field(default_factory=dict, description="'ok' or 'error' per source")

    @property
    def all_failed(self) -> bool:
        return bool(self.sources_status) and all(s == "error" for s in self.sources_status.values())

    @property
    def partial_failure(self) -> bool:
        return any(s == "error" for s in self.sources_status.values()) and not self.all_failed


def aggregated_search(query: str, connector: Optional[BaseRecipeSource] = None) -> SearchResults:
    """
    Search by name and by ingredient in parallel and merge the results.

    Args:
        query: Search term (e.g., "chicken", "Arrabiata")
        connector: Recipe source to use (default: a new MealDBConnector)

    Returns:
        SearchResults with the merged list and sources_status, e.g.
        {"name": "ok", "ingredient": "error"}. Partial failures are handled
        gracefully: results from the source that succeeded are still returned.
        Callers check all_failed to tell "nothing matched" from "nothing worked".
    """
    logger.info("Search request: query=%r", query)
    connector = connector or MealDBConnector()

    outcomes = run_all_settled([
        lambda: connector.search_by_name(query),
        lambda: connector.search_by_ingredient(query),
    ])

    sources_status: Dict[str, str] = {}
    by_source: Dict[str, List[RecipeSummary]] = {}
    for source, outcome in zip(SEARCH_SOURCES, outcomes):
        if outcome.ok:
            sources_status[source] = "ok"
            by_source[source] = outcome.value or []
        else:
            logger.warning("Search source %s failed for query=%r: %s", source, query, outcome.error)
            sources_status[source] = "error"
            by_source[source] = []

    results = merge_results(by_source["name"], by_source["ingredient"])
    logger.info(
        "Search response: query=%r by_name=%d by_ingredient=%d merged=%d status=%s",
        query, len(by_source["name"]), len(by_source["ingredient"]), len(results), sources_status,
    )
    return SearchResults(query=query, results=results, sources_status=sources_status)
