"""
Backend API Client Module.

This module is the **single source of truth** for all backend API communication.
All HTTP calls to the FastAPI backend should go through functions in this module.

Key principles:
- Centralized error handling for network issues
- Consistent timeouts
- Graceful degradation when backend is unavailable

# NOTE: When adding new endpoints, follow this pattern:
    - Create a function that takes parameters needed for the endpoint
    - Use requests.get/post/put/delete with proper error handling
    - Return parsed JSON (dict) or None on error
    - Log errors via st.error or st.warning for user visibility
    - Never let exceptions bubble up to crash the Streamlit app
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import requests
import streamlit as st

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15


def get_backend_url() -> str:
    """
    Get the backend API base URL from environment variable or use default.

    Returns:
        Backend URL string with trailing slash removed. Defaults to http://localhost:8000 for local development.
    """
    url = os.getenv("BACKEND_URL", "http://localhost:8000")
    return url.rstrip("/")


def _auth_headers(id_token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {id_token}"} if id_token else {}


def _error_detail(response: Optional[requests.Response]) -> str:
    """Extract FastAPI's 'detail' from an error response, falling back to the raw text."""
    if response is None:
        return ""
    try:
        detail = response.json().get("detail")
        if isinstance(detail, str):
            return detail
    except ValueError:
        pass
    return response.text


@st.cache_data(ttl=60)  # Cache for 60 seconds to avoid hitting backend too frequently
def get_health_status() -> Optional[Dict[str, Any]]:
    """
    Check backend health status by calling /health endpoint.

    Returns:
        Dictionary with normalized status info:
        {
            "status": "ok",
            "raw": {...},  # Full response from /health endpoint
        }
        Or None if backend is unreachable.
    """
    try:
        response = requests.get(f"{get_backend_url()}/health", timeout=5)
        response.raise_for_status()
        data = response.json()
        if data.get("status") == "ok":
            return {"status": "ok", "raw": data}
        return None
    except requests.exceptions.RequestException:
        return None


# ----------------------------------------------------------------------
# Recipes
# ----------------------------------------------------------------------

def search_recipes(
    ingredients: List[str],
    diet: str = "",
    cuisine: str = "",
    servings: int = 0,
) -> Optional[Dict[str, Any]]:
    """
    Search recipes using the backend API.

    With every filter at its default the backend returns a random recipe set.

    Returns:
        Dictionary with results, groups, message, source and provider_status,
        or None on error.
    """
    params: Dict[str, Any] = {
        "ingredients": ",".join(ingredients),
        "diet": diet,
        "cuisine": cuisine,
        "servings": servings,
    }
    try:
        response = requests.get(
            f"{get_backend_url()}/recipes/search",
            params=params,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout:
        st.error("Request timed out. The backend may be slow or unreachable.")
        return None
    except requests.exceptions.ConnectionError:
        st.error("Could not connect to backend. Please check your connection and that the backend is running.")
        return None
    except requests.exceptions.HTTPError as e:
        logger.error("Recipe search failed: %s %s", e.response.status_code, _error_detail(e.response))
        st.error("Failed to search recipes. Please try again later.")
        return None
    except requests.exceptions.RequestException as e:
        st.error(f"An error occurred while searching: {str(e)}")
        return None


def get_recipe_details(recipe_id: int) -> Optional[Dict[str, Any]]:
    """
    Get full recipe details.

    Returns:
        Recipe dictionary (camelCase keys), or None if not found or on error.
    """
    try:
        response = requests.get(f"{get_backend_url()}/recipes/{recipe_id}", timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.HTTPError as e:
        if e.response is not None and e.response.status_code == 404:
            st.warning("Recipe details are not available right now.")
        else:
            st.error("Failed to fetch recipe details. Please try again later.")
        return None
    except requests.exceptions.RequestException as e:
        st.error(f"Could not load recipe details: {str(e)}")
        return None


def autocomplete_ingredients(query: str) -> List[str]:
    """
    Get ingredient name suggestions.

    Returns:
        Up to 5 suggestions, or [] on error (fails silently, suggestions are a nice-to-have)
    """
    if not query or not query.strip():
        return []
    try:
        response = requests.get(
            f"{get_backend_url()}/ingredients/autocomplete",
            params={"q": query},
            timeout=5,
        )
        response.raise_for_status()
        return list(response.json().get("suggestions", []))
    except requests.exceptions.RequestException as e:
        logger.debug("Autocomplete failed for %r: %s", query, e)
        return []


# ----------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------

def _post_credentials(path: str, email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    try:
        response = requests.post(
            f"{get_backend_url()}{path}",
            json={"email": email, "password": password},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json(), None
    except requests.exceptions.HTTPError as e:
        return None, _error_detail(e.response) or "Authentication failed. Please try again."
    except requests.exceptions.RequestException as e:
        logger.error("Auth request to %s failed: %s", path, e)
        return None, "Could not connect to backend. Please check that the backend is running."


def sign_in(email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Sign in with email and password.

    Returns:
        (user dict with uid, email, id_token and message, None) on success,
        (None, user-facing error message) on failure
    """
    return _post_credentials("/auth/signin", email, password)


def sign_up(email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Create an account. Same return shape as sign_in()."""
    return _post_credentials("/auth/signup", email, password)


def sign_out(id_token: Optional[str]) -> None:
    """Tell the backend the user signed out. Failures are ignored."""
    try:
        requests.post(f"{get_backend_url()}/auth/signout", headers=_auth_headers(id_token), timeout=5)
    except requests.exceptions.RequestException as e:
        logger.debug("Sign-out request failed: %s", e)


# ----------------------------------------------------------------------
# Saved recipes
# ----------------------------------------------------------------------

def list_saved_recipes(id_token: str) -> List[Dict[str, Any]]:
    """
    List the signed-in user's saved recipes.

    Returns:
        List of saved recipe dictionaries, or [] on error
    """
    try:
        response = requests.get(
            f"{get_backend_url()}/saved",
            headers=_auth_headers(id_token),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return list(response.json().get("recipes", []))
    except requests.exceptions.RequestException as e:
        logger.error("Could not load saved recipes: %s", e)
        return []


def is_recipe_saved(id_token: str, recipe_id: int) -> bool:
    """Check whether a recipe is saved. Any error reads as not saved."""
    try:
        response = requests.get(
            f"{get_backend_url()}/saved/{recipe_id}",
            headers=_auth_headers(id_token),
            timeout=5,
        )
        response.raise_for_status()
        return bool(response.json().get("saved"))
    except requests.exceptions.RequestException:
        return False


def save_recipe(id_token: str, recipe_id: int, data: Dict[str, Any]) -> bool:
    """Save a recipe. Returns True on success."""
    try:
        response = requests.put(
            f"{get_backend_url()}/saved/{recipe_id}",
            json=data,
            headers=_auth_headers(id_token),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return True
    except requests.exceptions.RequestException as e:
        logger.error("Could not save recipe %s: %s", recipe_id, e)
        return False


def unsave_recipe(id_token: str, recipe_id: int) -> bool:
    """Remove a saved recipe. Returns True on success."""
    try:
        response = requests.delete(
            f"{get_backend_url()}/saved/{recipe_id}",
            headers=_auth_headers(id_token),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return True
    except requests.exceptions.RequestException as e:
        logger.error("Could not remove saved recipe %s: %s", recipe_id, e)
        return False


class BackendSavedStore:
    """
    Bookmark store that talks to the backend on behalf of the signed-in user.

    Exposes the same save_recipe / unsave_recipe / is_saved methods as
    gourmet.saved.SavedRecipeStore so it can back a SaveToggle. The backend
    derives the user from the id token, so user_id arguments are only checked
    for presence.
    """

    def __init__(self, id_token: Optional[str]) -> None:
        self.id_token = id_token

    def save_recipe(self, user_id: str, recipe_id: int, data: Any) -> bool:
        if not (user_id and self.id_token):
            return False
        if hasattr(data, "model_dump"):
            data = data.model_dump(mode="json", by_alias=True)
        return save_recipe(self.id_token, recipe_id, data)

    def unsave_recipe(self, user_id: str, recipe_id: int) -> bool:
        if not (user_id and self.id_token):
            return False
        return unsave_recipe(self.id_token, recipe_id)

    def is_saved(self, user_id: str, recipe_id: int) -> bool:
        if not (user_id and self.id_token):
            return False
        return is_recipe_saved(self.id_token, recipe_id)
