"""
Recipe cards, the difficulty-grouped grid and the detail dialog.

Labels (difficulty, diet, rounded health score, step lines) come from
gourmet.presentation; this module only lays them out.
"""

from typing import Any, Dict, List, Optional, Set

import streamlit as st

from gourmet.models import Recipe
from gourmet.presentation import SaveToggle, card_view, detail_view
from gourmet.viewmodels import MSG_LOADING
from ui.feedback import notify, show_error, working_spinner
from ui.styles import badge, card_title
from utils.api_client import BackendSavedStore, get_recipe_details
from utils.session import get_id_token, get_user_id
from utils.state import get_saved_view_model, select_recipe

GRID_COLUMNS = 4

PLACEHOLDER_IMAGE = "https://spoonacular.com/recipeImages/default.jpg"


def _saved_ids() -> Set[int]:
    view_model = get_saved_view_model()
    with working_spinner(MSG_LOADING):
        view_model.load(get_user_id())
    return {recipe.id for recipe in view_model.recipes}


def render_recipe_card(recipe: Any, key_prefix: str, saved_ids: Set[int]) -> None:
    """
    Render one recipe card with its bookmark and details buttons.

    Args:
        recipe: Recipe or SavedRecipe model
        key_prefix: Unique prefix for widget keys (the same recipe may appear twice on the page)
        saved_ids: Ids of the signed-in user's saved recipes
    """
    view = card_view(recipe)

    with st.container(border=True):
        st.image(view.image or PLACEHOLDER_IMAGE, use_container_width=True)
        st.markdown(card_title(view.title), unsafe_allow_html=True)
        st.markdown(
            f'<div class="gg-card-facts"><span>⏱ {view.minutes_label}</span>'
            f"<span>👥 {view.servings}</span></div>",
            unsafe_allow_html=True,
        )
        st.caption(f"❤️ Health Score: {view.health_score}")
        st.markdown(badge(view.difficulty_label) + badge(view.diet_label), unsafe_allow_html=True)

        col_details, col_save = st.columns([3, 1])
        with col_details:
            if st.button("View recipe", key=f"{key_prefix}_view_{view.id}", use_container_width=True):
                select_recipe(view.id)
                st.rerun()
        with col_save:
            is_saved = view.id in saved_ids
            if st.button("🔖" if is_saved else "➕", key=f"{key_prefix}_save_{view.id}",
                         help="Remove from saved recipes" if is_saved else "Save recipe"):
                toggle = SaveToggle(
                    BackendSavedStore(get_id_token()),
                    recipe,
                    get_user_id(),
                    notify,
                    initial=is_saved,
                )
                before = toggle.is_saved
                if toggle.toggle() != before:
                    get_saved_view_model().refresh()
                    st.rerun()


def render_recipe_grid(recipes: List[Any], key_prefix: str, saved_ids: Optional[Set[int]] = None) -> None:
    """Render recipes in rows of GRID_COLUMNS cards."""
    saved_ids = _saved_ids() if saved_ids is None else saved_ids
    for row_start in range(0, len(recipes), GRID_COLUMNS):
        columns = st.columns(GRID_COLUMNS, gap="medium")
        for column, recipe in zip(columns, recipes[row_start:row_start + GRID_COLUMNS]):
            with column:
                render_recipe_card(recipe, key_prefix, saved_ids)


def render_grouped_results(groups: Dict[str, List[Dict[str, Any]]]) -> None:
    """
    Render search results as one section per difficulty bucket.

    Args:
        groups: Backend "groups" payload (difficulty -> camelCase recipe dicts)
    """
    saved_ids = _saved_ids()
    for level, items in groups.items():
        recipes = [Recipe.model_validate(item) for item in items]
        st.markdown(f"## {level.capitalize()} recipes")
        render_recipe_grid(recipes, key_prefix=f"grid_{level}", saved_ids=saved_ids)


@st.dialog("Recipe details", width="large")
def show_recipe_dialog(recipe_id: int) -> None:
    """Fetch and show the full recipe in a modal dialog."""
    payload = get_recipe_details(recipe_id)
    if payload is None:
        show_error("Could not load this recipe.", hint="Please try again in a moment.")
        select_recipe(None)
        return

    view = detail_view(Recipe.model_validate(payload))

    st.markdown(f"## {view.title}")
    if view.image:
        st.image(view.image, use_container_width=True)

    col_time, col_servings, col_difficulty = st.columns(3)
    col_time.metric("Ready in", view.minutes_label)
    col_servings.metric("Servings", view.servings)
    col_difficulty.metric("Difficulty", view.difficulty_label)

    st.markdown("### Ingredients")
    for line in view.ingredient_lines:
        st.markdown(f"- {line}")

    st.markdown("### Instructions")
    for step in view.steps:
        st.markdown(f"**{step.number}.** {step.text}")
        if step.equipment_line:
            st.caption(step.equipment_line)
        if step.ingredients_line:
            st.caption(step.ingredients_line)

    if st.button("Close", key="close_recipe_dialog"):
        select_recipe(None)
        st.rerun()
