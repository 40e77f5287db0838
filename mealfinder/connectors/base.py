"""
Base connector abstract class for recipe API integrations.

This module defines the interface every recipe source must implement, so the
search pipeline and page controllers never depend on a specific API.

All connectors must:
- Implement the source attribute (e.g., "themealdb")
- Provide search_by_name and search_by_ingredient returning RecipeSummary lists
- Provide lookup_by_id and random returning an optional RecipeDetail
- Raise NetworkError for any transport failure, and return an empty result
  (not an error) when the remote service has no matches
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from mealfinder.models import RecipeDetail, RecipeSummary


class NetworkError(RuntimeError):
    """
    Exception raised when a recipe API call fails in transport.

    This covers:
    - DNS/connection failures and timeouts
    - Non-2xx HTTP responses
    - Response bodies that are not valid JSON
    """


class BaseRecipeSource(ABC):
    """
    Abstract base class for all recipe sources.

    Attributes:
        source: String identifier for the recipe API (e.g., "themealdb")
    """
    source: str

    @abstractmethod
    def search_by_name(self, query: str) -> List[RecipeSummary]:
        """
        Search recipes whose name matches the query.

        Returns:
            List of RecipeSummary objects in API order (may be empty).
        """

    @abstractmethod
    def search_by_ingredient(self, query: str) -> List[RecipeSummary]:
        """
        Search recipes that use the given main ingredient.

        Returns:
            List of RecipeSummary objects without category (may be empty).
        """

    @abstractmethod
    def lookup_by_id(self, recipe_id: str) -> Optional[RecipeDetail]:
        """
        Fetch the full record for one recipe.

        Returns:
            RecipeDetail, or None when the id is unknown.
        """

    @abstractmethod
    def random(self) -> Optional[RecipeDetail]:
        """
        Fetch one random recipe.

        Returns:
            RecipeDetail (None only if the API answers with no meal).
        """
