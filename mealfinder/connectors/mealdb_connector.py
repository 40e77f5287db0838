"""
TheMealDB connector using the public JSON API.

This connector interfaces with TheMealDB's free v1 API to search for recipes
and normalize them into RecipeSummary / RecipeDetail records.

Endpoints used:
- search.php?s=<term>   search by name
- filter.php?i=<term>   search by main ingredient (id, name, thumbnail only)
- lookup.php?i=<id>     full recipe by id
- random.php            one random full recipe

Every endpoint answers with a {"meals": [...]} envelope where "meals" is null
when nothing matched. That is mapped to an empty result here; only transport
failures raise (NetworkError).

The base URL defaults to the public test key endpoint but can be overridden
via MEALDB_BASE_URL (e.g. a paid v2 key), and the request timeout via
MEALDB_TIMEOUT_SECONDS.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from mealfinder.models import RecipeDetail, RecipeSummary

from .base import BaseRecipeSource, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Note: Environment variables should be loaded by api.config module early in the application lifecycle.
# For tests, environment is typically patched before the connector is constructed.


class MealDBConnector(BaseRecipeSource):
    """
    Connector for TheMealDB recipe API.

    One instance can be shared across threads; each operation issues exactly
    one GET through a requests.Session.
    """
    source = "themealdb"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the connector.

        Args:
            base_url: API root (optional, reads MEALDB_BASE_URL or uses the public v1 endpoint)
            timeout: Per-request timeout in seconds (optional, reads MEALDB_TIMEOUT_SECONDS)
            session: requests.Session to use (optional, mainly for tests)
        """
        self.base_url = (base_url or os.getenv("MEALDB_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")

        if timeout is None:
            raw_timeout = os.getenv("MEALDB_TIMEOUT_SECONDS")
            try:
                timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
            except ValueError:
                logger.warning("Invalid MEALDB_TIMEOUT_SECONDS=%r, using %.0fs", raw_timeout, DEFAULT_TIMEOUT_SECONDS)
                timeout = DEFAULT_TIMEOUT_SECONDS
        self.timeout = timeout

        self.session = session or requests.Session()

    def _get_meals(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """
        GET an endpoint and return the raw "meals" list.

        Raises:
            NetworkError: On connection errors, timeouts, HTTP errors or a non-JSON body.
        """
        url = f"{self.base_url}/{endpoint}"
        logger.debug("TheMealDB GET %s params=%r", url, params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning("TheMealDB request to %s failed: %s", endpoint, e)
            raise NetworkError(f"Request to TheMealDB {endpoint} failed: {e}") from e
        except ValueError as e:
            logger.warning("TheMealDB %s returned a non-JSON body: %s", endpoint, e)
            raise NetworkError(f"TheMealDB {endpoint} returned invalid JSON") from e

        meals = data.get("meals") if isinstance(data, dict) else None
        if not isinstance(meals, list):
            # null/absent "meals" is how the API says "no results"
            return []
        return [meal for meal in meals if isinstance(meal, dict)]

    def _to_summaries(self, meals: List[Dict[str, Any]]) -> List[RecipeSummary]:
        summaries: List[RecipeSummary] = []
        for meal in meals:
            try:
                summaries.append(RecipeSummary.from_meal(meal))
            except ValueError as e:
                logger.warning("TheMealDB connector: skipping meal %s", e)
        return summaries

    def _first_detail(self, meals: List[Dict[str, Any]]) -> Optional[RecipeDetail]:
        for meal in meals:
            try:
                return RecipeDetail.from_meal(meal)
            except ValueError as e:
                logger.warning("TheMealDB connector: skipping meal %s", e)
        return None

    def search_by_name(self, query: str) -> List[RecipeSummary]:
        results = self._to_summaries(self._get_meals("search.php", {"s": query}))
        logger.debug("search_by_name(%r) -> %d results", query, len(results))
        return results

    def search_by_ingredient(self, query: str) -> List[RecipeSummary]:
        results = self._to_summaries(self._get_meals("filter.php", {"i": query}))
        logger.debug("search_by_ingredient(%r) -> %d results", query, len(results))
        return results

    def lookup_by_id(self, recipe_id: str) -> Optional[RecipeDetail]:
        detail = self._first_detail(self._get_meals("lookup.php", {"i": str(recipe_id)}))
        if detail is None:
            logger.info("lookup_by_id(%r): no recipe returned", recipe_id)
        return detail

    def random(self) -> Optional[RecipeDetail]:
        return self._first_detail(self._get_meals("random.php"))
