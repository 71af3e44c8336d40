"""
View-model for the saved-recipes panel.

Keeps the saved list of the current user and reloads it only when the
signed-in identity changes (or on an explicit refresh, e.g. after a bookmark
was toggled elsewhere on the page).

loading is True only while the loader runs. A caller rendering synchronously
shows MSG_LOADING in a spinner around load() and reads status_message()
after it returns.
"""

import logging
from typing import Callable, List, Optional

from gourmet.models import SavedRecipe

logger = logging.getLogger(__name__)

MSG_LOGIN_REQUIRED = "Please log in to view your saved recipes"
MSG_LOADING = "Loading saved recipes..."
MSG_EMPTY = "You haven't saved any recipes yet"


class SavedRecipesViewModel:
    """
    Saved-recipes state for one signed-in user at a time.

    Args:
        loader: Returns the saved recipes of a uid (e.g. SavedRecipeStore.list_saved)
    """

    def __init__(self, loader: Callable[[str], List[SavedRecipe]]) -> None:
        self.loader = loader
        self.user_id: Optional[str] = None
        self.recipes: List[SavedRecipe] = []
        self.loading = False
        self._loaded = False

    @property
    def is_empty(self) -> bool:
        return not self.recipes

    def load(self, user_id: Optional[str]) -> List[SavedRecipe]:
        """
        Make the list match the given identity, loading only when it changed.

        Returns:
            The current saved list ([] when nobody is signed in)
        """
        if not user_id:
            self.user_id = None
            self.recipes = []
            self.loading = False
            self._loaded = False
            return self.recipes

        if user_id == self.user_id and self._loaded:
            return self.recipes

        self.user_id = user_id
        return self.refresh()

    def refresh(self) -> List[SavedRecipe]:
        """Reload the list for the current identity."""
        if not self.user_id:
            return self.recipes

        self.loading = True
        try:
            self.recipes = list(self.loader(self.user_id))
        except Exception as e:
            logger.error("Error loading saved recipes for user %s: %s", self.user_id, e, exc_info=True)
            self.recipes = []
        finally:
            self.loading = False
            self._loaded = True
        return self.recipes

    def status_message(self) -> Optional[str]:
        """
        Message to show instead of the grid, or None when there are recipes.
        """
        if not self.user_id:
            return MSG_LOGIN_REQUIRED
        if self.loading:
            return MSG_LOADING
        if self.is_empty:
            return MSG_EMPTY
        return None
