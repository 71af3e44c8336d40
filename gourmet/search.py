"""
Search orchestration for recipe lookups.

This module turns a set of search filters into a displayable outcome:
- With every filter at its default, a random recipe set is drawn
- Otherwise the filters go to the provider's filtered search (ingredients comma-joined)
- Difficulty is recomputed on every returned recipe
- Recipes are grouped into easy / medium / hard buckets
- A user-facing message explains empty or failed results

Search flow: Streamlit -> GET /recipes/search -> run_search() -> provider.search_by_filters() -> Recipe -> grouped dict
"""

import logging
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from gourmet.difficulty import classify_difficulty, group_by_difficulty, with_difficulty
from gourmet.models import Recipe, SearchFilters
from gourmet.providers.base import BaseRecipeProvider, STATUS_ERROR, STATUS_OK
from gourmet.providers.spoonacular import SpoonacularProvider

logger = logging.getLogger(__name__)

MSG_NO_RANDOM_RESULTS = "No recipes found. Please check your API key or try again later."
MSG_NO_MATCHES = "No recipes found matching your criteria."
MSG_SEARCH_FAILED = "Failed to search recipes. Please try again later."

_PROVIDER: Optional[BaseRecipeProvider] = None


def _get_provider() -> BaseRecipeProvider:
    """
    Return the process-wide provider, creating it on first use.

    The provider owns the API key rotator, so one instance per process keeps
    the rotation cursor shared by every request.

    Raises:
        RuntimeError: If no Spoonacular API key is configured.
    """
    global _PROVIDER
    if _PROVIDER is None:
        _PROVIDER = SpoonacularProvider()
    return _PROVIDER


def reset_provider() -> None:
    """Forget the process-wide provider (useful for testing and after config changes)."""
    global _PROVIDER
    _PROVIDER = None


class SearchOutcome(BaseModel):
    """Result of one search request, ready for display."""
    recipes: List[Recipe] = Field(default_factory=list)
    groups: Dict[str, List[Recipe]] = Field(default_factory=dict)
    message: Optional[str] = Field(None, description="User-facing explanation when there is nothing to show")
    source: Literal["random", "search"] = "search"
    provider_status: str = STATUS_OK


def run_search(filters: SearchFilters, provider: Optional[BaseRecipeProvider] = None) -> SearchOutcome:
    """
    Run a search for the given filters.

    Args:
        filters: Ingredients, diet, cuisine and servings to search for
        provider: Recipe provider (defaults to the process-wide Spoonacular provider)

    Returns:
        SearchOutcome with:
        - recipes: Recipes in provider order, difficulty recomputed
        - groups: Recipes bucketed by difficulty (easy -> medium -> hard, empty buckets omitted)
        - message: None on success, otherwise one of:
            - "No recipes found. Please check your API key or try again later." (empty random set)
            - "No recipes found matching your criteria." (empty filtered search)
            - "Failed to search recipes. Please try again later." (unexpected failure)
        - source: "random" when every filter was at its default, else "search"
        - provider_status: Classification of the provider call ("ok", "unauthorized",
          "quota_exceeded" or "error")

    Examples:
        >>> outcome = run_search(SearchFilters(ingredients=["tomato"]))
        >>> outcome.source
        'search'
    """
    source = "random" if filters.is_default() else "search"
    logger.info("Search request: source=%s ingredients=%r diet=%r cuisine=%r servings=%d",
                source, filters.ingredients, filters.diet, filters.cuisine, filters.servings)

    try:
        provider = provider or _get_provider()
        if source == "random":
            recipes = provider.get_random()
        else:
            recipes = provider.search_by_filters(
                ",".join(filters.ingredients),
                diet=filters.diet or None,
                cuisine=filters.cuisine or None,
                servings=filters.servings,
            )
    except Exception as e:
        logger.error("Unexpected error during recipe search: %s", e, exc_info=True)
        return SearchOutcome(message=MSG_SEARCH_FAILED, source=source, provider_status=STATUS_ERROR)

    status = getattr(provider, "last_status", STATUS_OK)
    recipes = with_difficulty(recipes)

    if not recipes:
        message = MSG_NO_RANDOM_RESULTS if source == "random" else MSG_NO_MATCHES
        logger.info("Search returned no recipes (source=%s, provider_status=%s)", source, status)
        return SearchOutcome(message=message, source=source, provider_status=status)

    groups = group_by_difficulty(recipes)
    logger.info("Search returned %d recipes (%s)", len(recipes),
                ", ".join(f"{level}={len(members)}" for level, members in groups.items()))
    return SearchOutcome(recipes=recipes, groups=groups, source=source, provider_status=status)


def load_details(recipe_id: int, provider: Optional[BaseRecipeProvider] = None) -> Optional[Recipe]:
    """
    Fetch the full details of a recipe with its difficulty recomputed.

    Args:
        recipe_id: Provider recipe id
        provider: Recipe provider (defaults to the process-wide Spoonacular provider)

    Returns:
        Recipe, or None when the provider returned nothing
    """
    provider = provider or _get_provider()
    recipe = provider.get_details(recipe_id)
    if recipe is None:
        logger.warning("No details returned for recipe %s (provider_status=%s)",
                       recipe_id, getattr(provider, "last_status", STATUS_OK))
        return None
    return recipe.model_copy(update={"difficulty": classify_difficulty(recipe.ready_in_minutes)})
