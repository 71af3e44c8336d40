"""
Spoonacular provider using the public Spoonacular REST API.

This provider interfaces with Spoonacular's recipe endpoints to search recipes,
fetch recipe details, draw random recipe sets and complete ingredient names,
normalizing results into Recipe models.

The provider:
- Rotates between the configured API keys round-robin (one key per outbound call)
- Caps every result set at 12 recipes
- Classifies failures as unauthorized (401), quota exceeded (402) or generic errors,
  logs a one-line message and returns [] / None instead of raising
- Memoizes successful searches and detail lookups in the TTL response cache

Requires SPOONACULAR_API_KEY_1 (and optionally SPOONACULAR_API_KEY_2, or a comma
separated SPOONACULAR_API_KEYS) in .env or the environment.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from gourmet.models import Recipe, parse_recipes
from gourmet.utils import cache
from gourmet.utils.keys import ApiKeyRotator

from .base import (
    BaseRecipeProvider,
    STATUS_ERROR,
    STATUS_OK,
    STATUS_QUOTA_EXCEEDED,
    STATUS_UNAUTHORIZED,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.spoonacular.com"

# Result cap for every recipe listing call
RESULTS_PER_REQUEST = 12

# Ranking mode for findByIngredients: 1 = maximize used ingredients, 2 = minimize missing ones
RANKING_MINIMIZE_MISSING = 2

REQUEST_TIMEOUT_SECONDS = 10

# Note: Environment variables should be loaded by api.config early in the application lifecycle.
# For tests, api_keys are passed explicitly or the environment is patched before construction.


def load_api_keys_from_env() -> List[str]:
    """
    Collect Spoonacular API keys from the environment.

    Keys from SPOONACULAR_API_KEYS (comma separated) come first, followed by
    SPOONACULAR_API_KEY_1 and SPOONACULAR_API_KEY_2. Duplicates are kept out.

    Returns:
        List of key strings (may be empty)
    """
    keys: List[str] = []
    for key in os.getenv("SPOONACULAR_API_KEYS", "").split(","):
        if key.strip() and key.strip() not in keys:
            keys.append(key.strip())
    for name in ("SPOONACULAR_API_KEY_1", "SPOONACULAR_API_KEY_2"):
        value = (os.getenv(name) or "").strip()
        if value and value not in keys:
            keys.append(value)
    return keys


def classify_error(error: Exception) -> str:
    """
    Classify an outbound-call failure.

    Args:
        error: Exception raised while calling the provider

    Returns:
        "unauthorized" for HTTP 401, "quota_exceeded" for HTTP 402, "error" otherwise
    """
    response = getattr(error, "response", None)
    status_code = getattr(response, "status_code", None)
    if status_code == 401:
        return STATUS_UNAUTHORIZED
    if status_code == 402:
        return STATUS_QUOTA_EXCEEDED
    return STATUS_ERROR


def _error_detail(error: Exception) -> str:
    """Prefer the provider's JSON 'message' over the exception text."""
    response = getattr(error, "response", None)
    if response is not None:
        try:
            message = response.json().get("message")
            if message:
                return str(message)
        except Exception:
            pass
    return str(error)


class SpoonacularProvider(BaseRecipeProvider):
    """
    Recipe provider backed by the Spoonacular API.

    The instance owns its ApiKeyRotator, so the key cursor lives exactly as long
    as the provider does (the backend creates one provider per process).
    """
    provider = "spoonacular"

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        use_cache: bool = True,
    ) -> None:
        """
        Initialize the provider.

        Args:
            api_keys: API keys to rotate through (reads the environment if not provided)
            base_url: API base URL (reads SPOONACULAR_BASE_URL or defaults to https://api.spoonacular.com)
            session: Optional requests.Session to reuse connections
            timeout: Per-request timeout in seconds
            use_cache: Whether to memoize successful responses in the TTL cache

        Raises:
            RuntimeError: If no API key is configured.
        """
        self.rotator = ApiKeyRotator(api_keys if api_keys is not None else load_api_keys_from_env())
        self.base_url = (base_url or os.getenv("SPOONACULAR_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.use_cache = use_cache

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        Perform an authenticated GET and return the decoded JSON body.

        Every call consumes the next API key. Parameters whose value is None or
        an empty string are omitted from the query string.

        Raises:
            requests.exceptions.RequestException: On transport failure or non-2xx status
            ValueError: If the body is not valid JSON
        """
        query: Dict[str, Any] = {"apiKey": self.rotator.next_key()}
        query.update({k: v for k, v in params.items() if v is not None and v != ""})

        logger.debug("GET %s%s params=%s", self.base_url, path, sorted(k for k in query if k != "apiKey"))
        response = self.session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        self.last_status = STATUS_OK
        return payload

    def _handle_error(self, error: Exception, operation: str) -> None:
        """Record and log a classified one-line failure message."""
        status = classify_error(error)
        self.last_status = status
        if status == STATUS_UNAUTHORIZED:
            logger.error("Spoonacular API key is invalid or expired (%s). Check your SPOONACULAR_API_KEY_* settings.", operation)
        elif status == STATUS_QUOTA_EXCEEDED:
            logger.error("Spoonacular API quota exceeded (%s). Check your Spoonacular API usage.", operation)
        else:
            logger.error("Spoonacular API error during %s: %s", operation, _error_detail(error))

    @staticmethod
    def _servings_bounds(servings: Optional[int]) -> Dict[str, int]:
        # Symmetric bound: only recipes serving exactly this many people
        if servings and servings > 0:
            return {"minServings": servings, "maxServings": servings}
        return {}

    def _cache_key(self, endpoint: str, **params: Any):
        return cache.make_cache_key(endpoint, base_url=self.base_url, **params)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search_by_filters(
        self,
        query: str,
        diet: Optional[str] = None,
        cuisine: Optional[str] = None,
        servings: int = 0,
    ) -> List[Recipe]:
        """
        Search recipes with GET /recipes/complexSearch.

        Nutrition and recipe information are requested inline so results can be
        rendered as cards without a detail lookup.

        Args:
            query: Free-text query (ingredients joined with commas)
            diet: Diet filter (omitted when empty)
            cuisine: Cuisine filter (omitted when empty)
            servings: Exact servings to match; 0 means any

        Returns:
            Up to 12 Recipe models, or [] on any failure
        """
        key = self._cache_key("complexSearch", query=query, diet=diet, cuisine=cuisine, servings=servings)
        if self.use_cache:
            cached = cache.get_cached(key)
            if cached is not None:
                logger.debug("Cache hit for complexSearch query=%r", query)
                self.last_status = STATUS_OK
                return list(cached)

        params: Dict[str, Any] = {
            "query": query,
            "diet": diet,
            "cuisine": cuisine,
            "addRecipeInformation": "true",
            "addRecipeNutrition": "true",
            "number": RESULTS_PER_REQUEST,
        }
        params.update(self._servings_bounds(servings))

        try:
            payload = self._get("/recipes/complexSearch", params)
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, "complexSearch")
            return []

        results = payload.get("results") if isinstance(payload, dict) else None
        recipes = parse_recipes(results if isinstance(results, list) else [])
        logger.info("complexSearch query=%r diet=%r cuisine=%r servings=%d -> %d recipes",
                    query, diet, cuisine, servings or 0, len(recipes))

        if self.use_cache and recipes:
            cache.set_cached(key, recipes)
        return recipes

    def search_by_ingredients(self, ingredients: List[str]) -> List[Recipe]:
        """
        Search recipes with GET /recipes/findByIngredients.

        Results are ranked to minimize missing ingredients and pantry staples
        (water, salt, flour, ...) are ignored.

        Args:
            ingredients: Ingredient names

        Returns:
            Up to 12 Recipe models, or [] on any failure
        """
        key = self._cache_key("findByIngredients", ingredients=list(ingredients))
        if self.use_cache:
            cached = cache.get_cached(key)
            if cached is not None:
                self.last_status = STATUS_OK
                return list(cached)

        params = {
            "ingredients": ",".join(ingredients),
            "number": RESULTS_PER_REQUEST,
            "ranking": RANKING_MINIMIZE_MISSING,
            "ignorePantry": "true",
        }

        try:
            payload = self._get("/recipes/findByIngredients", params)
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, "findByIngredients")
            return []

        recipes = parse_recipes(payload if isinstance(payload, list) else [])
        logger.info("findByIngredients ingredients=%r -> %d recipes", ingredients, len(recipes))

        if self.use_cache and recipes:
            cache.set_cached(key, recipes)
        return recipes

    def get_details(self, recipe_id: int) -> Optional[Recipe]:
        """
        Fetch the full recipe with GET /recipes/{id}/information.

        Args:
            recipe_id: Provider recipe id

        Returns:
            Recipe including extended ingredients and analyzed instructions,
            or None on any failure
        """
        key = self._cache_key("information", recipe_id=recipe_id)
        if self.use_cache:
            cached = cache.get_cached(key)
            if cached is not None:
                self.last_status = STATUS_OK
                return cached

        try:
            payload = self._get(f"/recipes/{recipe_id}/information", {})
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, f"information id={recipe_id}")
            return None

        try:
            recipe = Recipe.model_validate(payload)
        except Exception as e:
            logger.error("Malformed detail payload for recipe %s: %s", recipe_id, e)
            self.last_status = STATUS_ERROR
            return None

        if self.use_cache:
            cache.set_cached(key, recipe)
        return recipe

    def get_random(self, tags: Optional[List[str]] = None, servings: Optional[int] = None) -> List[Recipe]:
        """
        Draw a random recipe set with GET /recipes/random.

        Random draws are never cached.

        Args:
            tags: Optional tags (diets, cuisines, meal types) the recipes must match
            servings: Optional exact servings bound

        Returns:
            Up to 12 Recipe models; [] on failure or when the payload has no recipes array
        """
        params: Dict[str, Any] = {
            "number": RESULTS_PER_REQUEST,
            "tags": ",".join(tags or []),
            "addRecipeInformation": "true",
            "addRecipeNutrition": "true",
        }
        params.update(self._servings_bounds(servings))

        try:
            payload = self._get("/recipes/random", params)
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, "random")
            return []

        items = payload.get("recipes") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            logger.warning("Random recipes payload has no 'recipes' array")
            return []

        recipes = parse_recipes(items)
        logger.info("random tags=%r servings=%r -> %d recipes", tags, servings, len(recipes))
        return recipes

    def autocomplete_ingredients(self, query: str, number: int = 5) -> List[str]:
        """
        Complete an ingredient name with GET /food/ingredients/autocomplete.

        Args:
            query: Partial ingredient name; empty input returns [] without a network call
            number: Maximum number of suggestions

        Returns:
            Ingredient names in provider order, or [] on failure
        """
        if not query or not query.strip():
            return []

        key = self._cache_key("autocomplete", query=query, number=number)
        if self.use_cache:
            cached = cache.get_cached(key)
            if cached is not None:
                self.last_status = STATUS_OK
                return list(cached)

        try:
            payload = self._get("/food/ingredients/autocomplete", {"query": query.strip(), "number": number})
        except (requests.exceptions.RequestException, ValueError) as e:
            self._handle_error(e, "ingredient autocomplete")
            return []

        names = [
            str(item["name"])
            for item in (payload if isinstance(payload, list) else [])
            if isinstance(item, dict) and item.get("name")
        ]

        if self.use_cache and names:
            cache.set_cached(key, names)
        return names
