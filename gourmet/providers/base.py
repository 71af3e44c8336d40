"""
Base provider abstract class for recipe data integrations.

This module defines the abstract base class that every recipe data provider
must implement. It keeps the search orchestration and the backend independent
of the concrete provider API, so another recipe source can be added without
touching callers.

All providers must:
- Implement the provider attribute (e.g., "spoonacular")
- Return Recipe models (never raw dicts) from every search method
- Never raise transport or HTTP errors to callers; failures become [] or None
- Report the classification of the last call in last_status

last_status is kept per thread: the backend shares one provider across its
request threadpool, and each request reads the status of its own call.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from gourmet.models import Recipe

# Status values reported in last_status
STATUS_OK = "ok"
STATUS_UNAUTHORIZED = "unauthorized"
STATUS_QUOTA_EXCEEDED = "quota_exceeded"
STATUS_ERROR = "error"


class BaseRecipeProvider(ABC):
    """
    Abstract base class for all recipe providers.

    Attributes:
        provider: String identifier for the provider (e.g., "spoonacular")
        last_status: Classification of the most recent outbound call made by the current thread
    """
    provider: str

    def _status_slot(self) -> threading.local:
        slot = self.__dict__.get("_status")
        if slot is None:
            slot = self.__dict__.setdefault("_status", threading.local())
        return slot

    @property
    def last_status(self) -> str:
        return getattr(self._status_slot(), "value", STATUS_OK)

    @last_status.setter
    def last_status(self, value: str) -> None:
        self._status_slot().value = value

    @abstractmethod
    def search_by_filters(
        self,
        query: str,
        diet: Optional[str] = None,
        cuisine: Optional[str] = None,
        servings: int = 0,
    ) -> List[Recipe]:
        """
        Search recipes by free-text query and optional diet/cuisine/servings filters.

        Args:
            query: Free-text query (ingredients joined with commas)
            diet: Diet filter, empty or None for any
            cuisine: Cuisine filter, empty or None for any
            servings: Exact servings to match, 0 for any

        Returns:
            Up to 12 recipes, or [] on failure
        """

    @abstractmethod
    def search_by_ingredients(self, ingredients: List[str]) -> List[Recipe]:
        """Search recipes that use the given ingredients, fewest missing ingredients first."""

    @abstractmethod
    def get_details(self, recipe_id: int) -> Optional[Recipe]:
        """Fetch the full detail payload of a recipe, or None on failure."""

    @abstractmethod
    def get_random(self, tags: Optional[List[str]] = None, servings: Optional[int] = None) -> List[Recipe]:
        """Fetch a random set of recipes matching optional tags and servings."""

    @abstractmethod
    def autocomplete_ingredients(self, query: str, number: int = 5) -> List[str]:
        """Return ingredient name completions for a partial query."""
