"""
Page State Management Module.

This module wraps Streamlit's session_state to provide a clean API for the
state of the single Gourmet Guru page:
- The search composer (ingredient chips, diet/cuisine/servings, suggestions)
- The latest search response and the sequence number it belongs to
- The recipe shown in the detail dialog
- The theme and the "saved recipes" panel toggle
- The saved-recipes view-model of the signed-in user

# NOTE: The composer runs with autocomplete_delay=0. Streamlit reruns the
    script on every interaction, so debouncing happens in the browser (the
    text input only submits on Enter / blur); the composer's sequence numbers
    still guarantee that only the latest search response is displayed.
"""

from typing import Any, Dict, List, Optional

import streamlit as st

from gourmet.composer import SearchComposer
from gourmet.models import SavedRecipe, SearchFilters
from gourmet.viewmodels import SavedRecipesViewModel
from utils.api_client import autocomplete_ingredients, list_saved_recipes
from utils.session import get_id_token

COMPOSER_KEY = "composer"
SEARCH_REQUEST_KEY = "search_request"
SEARCH_RESULT_KEY = "search_result"
SELECTED_RECIPE_KEY = "selected_recipe_id"
THEME_KEY = "dark_mode"
SHOW_SAVED_KEY = "show_saved"
SAVED_VM_KEY = "saved_view_model"


def _queue_search(filters: SearchFilters, seq: int) -> None:
    st.session_state[SEARCH_REQUEST_KEY] = {"filters": filters, "seq": seq}


def get_composer() -> SearchComposer:
    """
    Get the page's search composer, creating it (and queuing the initial search) on first use.
    """
    if COMPOSER_KEY not in st.session_state:
        composer = SearchComposer(
            suggest=autocomplete_ingredients,
            on_search=_queue_search,
            autocomplete_delay=0,
        )
        st.session_state[COMPOSER_KEY] = composer
        composer.search_now()
    return st.session_state[COMPOSER_KEY]


def pop_search_request() -> Optional[Dict[str, Any]]:
    """Take the pending search request ({filters, seq}) if one was queued."""
    return st.session_state.pop(SEARCH_REQUEST_KEY, None)


def store_search_result(seq: int, result: Optional[Dict[str, Any]]) -> bool:
    """
    Store a search response if it still belongs to the latest dispatch.

    Returns:
        True if stored, False if a newer search superseded it
    """
    if not get_composer().accept_result(seq):
        return False
    st.session_state[SEARCH_RESULT_KEY] = result
    return True


def get_search_result() -> Optional[Dict[str, Any]]:
    return st.session_state.get(SEARCH_RESULT_KEY)


def select_recipe(recipe_id: Optional[int]) -> None:
    st.session_state[SELECTED_RECIPE_KEY] = recipe_id


def take_selected_recipe() -> Optional[int]:
    """
    Take the recipe chosen for the detail dialog, clearing the selection.

    The dialog is dismissed with X or Esc without any callback, so the id is
    consumed on the run that opens it.
    """
    return st.session_state.pop(SELECTED_RECIPE_KEY, None)


def is_dark_mode() -> bool:
    return bool(st.session_state.get(THEME_KEY, False))


def toggle_dark_mode() -> None:
    st.session_state[THEME_KEY] = not is_dark_mode()


def is_showing_saved() -> bool:
    return bool(st.session_state.get(SHOW_SAVED_KEY, False))


def toggle_show_saved() -> None:
    st.session_state[SHOW_SAVED_KEY] = not is_showing_saved()


def _load_saved(user_id: str) -> List[SavedRecipe]:
    return [SavedRecipe.model_validate(item) for item in list_saved_recipes(get_id_token())]


def get_saved_view_model() -> SavedRecipesViewModel:
    """Get the saved-recipes view-model of this browser session."""
    if SAVED_VM_KEY not in st.session_state:
        st.session_state[SAVED_VM_KEY] = SavedRecipesViewModel(loader=_load_saved)
    return st.session_state[SAVED_VM_KEY]
