"""
Display helpers for recipe cards and the recipe detail view.

These functions turn Recipe models into plain view objects so the UI layer
(Streamlit) only renders strings and never re-derives labels itself.

SaveToggle implements the bookmark button of a card:
- Without a signed-in user it only warns; nothing is persisted
- With a user it saves or unsaves and flips its flag on success only
- A failed save/unsave leaves the flag unchanged and reports a generic error
"""

import logging
import math
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from gourmet.difficulty import classify_difficulty
from gourmet.models import Recipe, SavedRecipe

logger = logging.getLogger(__name__)

MSG_LOGIN_TO_SAVE = "Please log in to save recipes"
MSG_SAVED = "Recipe saved successfully"
MSG_REMOVED = "Recipe removed from saved recipes"
MSG_SAVE_FAILED = "Failed to save recipe"


def diet_label(diets: Optional[List[str]]) -> str:
    """
    Derive the diet badge of a recipe.

    Args:
        diets: Provider diet tags, or None when the provider did not say

    Returns:
        "Vegan", "Vegetarian", "Non-Veg", or "unknown" when diets is None

    Examples:
        >>> diet_label(["gluten free", "vegan"])
        'Vegan'
        >>> diet_label([])
        'Non-Veg'
        >>> diet_label(None)
        'unknown'
    """
    if diets is None:
        return "unknown"
    if "vegan" in diets:
        return "Vegan"
    if "vegetarian" in diets:
        return "Vegetarian"
    return "Non-Veg"


def round_health_score(score: Optional[float]) -> int:
    """Round a health score to the nearest integer, halves rounding up (72.5 -> 73)."""
    return int(math.floor((score or 0.0) + 0.5))


class RecipeCardView(BaseModel):
    """Strings and numbers shown on a recipe card."""
    id: int
    title: str
    image: Optional[str] = None
    minutes_label: str
    servings: int
    health_score: int
    difficulty_label: str
    diet_label: str


def card_view(recipe: Any) -> RecipeCardView:
    """
    Build the card view of a Recipe or SavedRecipe.

    Difficulty falls back to classify_difficulty() when the recipe has none.
    """
    difficulty = recipe.difficulty or classify_difficulty(recipe.ready_in_minutes)
    return RecipeCardView(
        id=recipe.id,
        title=recipe.title,
        image=recipe.image,
        minutes_label=f"{recipe.ready_in_minutes} min",
        servings=recipe.servings,
        health_score=round_health_score(recipe.health_score),
        difficulty_label=difficulty.capitalize(),
        diet_label=diet_label(recipe.diets),
    )


class StepView(BaseModel):
    """One instruction step; equipment/ingredient lines are None when empty."""
    number: int
    text: str
    equipment_line: Optional[str] = None
    ingredients_line: Optional[str] = None


class RecipeDetailView(BaseModel):
    """Everything the detail dialog renders."""
    title: str
    image: Optional[str] = None
    minutes_label: str
    servings: int
    difficulty_label: str
    ingredient_lines: List[str] = Field(default_factory=list)
    steps: List[StepView] = Field(default_factory=list)


def _names_line(prefix: str, items: Optional[list]) -> Optional[str]:
    names = [item.name for item in (items or []) if item.name]
    if not names:
        return None
    return f"{prefix}{', '.join(names)}"


def detail_view(recipe: Recipe) -> RecipeDetailView:
    """
    Build the detail view of a recipe.

    Only the first analyzed-instruction group is shown. Missing ingredient or
    instruction payloads render as empty lists.
    """
    difficulty = recipe.difficulty or classify_difficulty(recipe.ready_in_minutes)

    steps: List[StepView] = []
    if recipe.analyzed_instructions:
        for step in recipe.analyzed_instructions[0].steps:
            steps.append(StepView(
                number=step.number,
                text=step.step,
                equipment_line=_names_line("Equipment: ", step.equipment),
                ingredients_line=_names_line("Ingredients used: ", step.ingredients),
            ))

    return RecipeDetailView(
        title=recipe.title,
        image=recipe.image,
        minutes_label=f"{recipe.ready_in_minutes} min",
        servings=recipe.servings,
        difficulty_label=difficulty.capitalize(),
        ingredient_lines=[i.original for i in (recipe.extended_ingredients or []) if i.original],
        steps=steps,
    )


class SavedStore(Protocol):
    """Anything that can save, unsave and check bookmarks (see gourmet.saved.SavedRecipeStore)."""

    def save_recipe(self, user_id: str, recipe_id: int, data: Any) -> bool: ...

    def unsave_recipe(self, user_id: str, recipe_id: int) -> bool: ...

    def is_saved(self, user_id: str, recipe_id: int) -> bool: ...


# notify(level, message) with level in "success", "warning", "error"
Notify = Callable[[str, str], None]


class SaveToggle:
    """
    Bookmark state of one recipe card.

    Args:
        store: Bookmark store
        recipe: Recipe shown on the card
        user_id: Signed-in user's uid, or None
        notify: Callback that shows a toast
        initial: Known bookmark state; when None it is read from the store
            (always False without a user)
    """

    def __init__(
        self,
        store: SavedStore,
        recipe: Any,
        user_id: Optional[str],
        notify: Notify,
        initial: Optional[bool] = None,
    ) -> None:
        self.store = store
        self.recipe = recipe
        self.user_id = user_id
        self.notify = notify
        if not user_id:
            self.is_saved = False
        elif initial is None:
            self.is_saved = store.is_saved(user_id, recipe.id)
        else:
            self.is_saved = initial

    def toggle(self) -> bool:
        """
        Save or unsave the recipe.

        Returns:
            The flag after the attempt
        """
        if not self.user_id:
            self.notify("warning", MSG_LOGIN_TO_SAVE)
            return self.is_saved

        if self.is_saved:
            ok = self.store.unsave_recipe(self.user_id, self.recipe.id)
            success_message = MSG_REMOVED
        else:
            ok = self.store.save_recipe(self.user_id, self.recipe.id, SavedRecipe.from_recipe(self.recipe)
                                        if isinstance(self.recipe, Recipe) else self.recipe)
            success_message = MSG_SAVED

        if not ok:
            logger.warning("Bookmark toggle failed for recipe %s (user %s)", self.recipe.id, self.user_id)
            self.notify("error", MSG_SAVE_FAILED)
            return self.is_saved

        self.is_saved = not self.is_saved
        self.notify("success", success_message)
        return self.is_saved
