"""
Gourmet Guru - Streamlit Frontend Main Entry Point.

Single-page application: header (brand, theme toggle, saved-recipes toggle,
login/logout), search controls, results grouped by difficulty, a recipe
detail dialog and a login/sign-up dialog.

There is no search button: every change to the ingredient chips or the
diet/cuisine/servings selections runs a new search. With no filter set the
page shows a random recipe set.

Run with:
    streamlit run streamlit_app/app.py
"""

import sys
from pathlib import Path

# Ensure the streamlit_app directory is in the Python path
# This allows imports to work regardless of how the app is run
streamlit_app_dir = Path(__file__).parent
if str(streamlit_app_dir) not in sys.path:
    sys.path.insert(0, str(streamlit_app_dir))

# Add project root to path so we can import api.config and gourmet
project_root = streamlit_app_dir.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

import streamlit as st

from gourmet.models import CUISINE_OPTIONS, DIET_OPTIONS, SERVINGS_OPTIONS
from gourmet.search import MSG_SEARCH_FAILED
from gourmet.viewmodels import MSG_LOADING
from ui.cards import render_grouped_results, render_recipe_grid, show_recipe_dialog
from ui.feedback import notify, show_empty_state, show_error, working_spinner
from ui.layout import page_header, section
from ui.styles import load_global_styles
from utils import api_client
from utils.session import clear_current_user, get_current_user, get_id_token, get_user_id, set_current_user
from utils.state import (
    get_composer,
    get_saved_view_model,
    get_search_result,
    is_dark_mode,
    is_showing_saved,
    pop_search_request,
    store_search_result,
    take_selected_recipe,
    toggle_dark_mode,
    toggle_show_saved,
)

# Page configuration - must be called before any other Streamlit commands
st.set_page_config(
    page_title="Gourmet Guru",
    page_icon="👨‍🍳",
    layout="wide",
    initial_sidebar_state="collapsed",
)

load_global_styles(dark=is_dark_mode())

composer = get_composer()

INPUT_KEY = "ingredient_input"


# ----------------------------------------------------------------------
# Widget callbacks
# ----------------------------------------------------------------------

def _on_input_change() -> None:
    composer.on_input_change(st.session_state.get(INPUT_KEY, ""))


def _add_typed_ingredient() -> None:
    if composer.add_ingredient(st.session_state.get(INPUT_KEY, "")):
        st.session_state[INPUT_KEY] = ""


def _add_suggestion(name: str) -> None:
    if composer.add_ingredient(name):
        st.session_state[INPUT_KEY] = ""


def _on_diet_change() -> None:
    composer.set_diet(st.session_state["diet_select"])


def _on_cuisine_change() -> None:
    composer.set_cuisine(st.session_state["cuisine_select"])


def _on_servings_change() -> None:
    composer.set_servings(st.session_state["servings_select"])


def _logout() -> None:
    api_client.sign_out(get_id_token())
    clear_current_user()
    get_saved_view_model().load(None)
    if is_showing_saved():
        toggle_show_saved()


# ----------------------------------------------------------------------
# Dialogs
# ----------------------------------------------------------------------

@st.dialog("Welcome to Gourmet Guru")
def show_auth_dialog() -> None:
    """Login / sign-up form. Errors from the backend are shown as toasts."""
    login_tab, signup_tab = st.tabs(["Login", "Sign up"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email", key="login_email")
            password = st.text_input("Password", type="password", key="login_password")
            submitted = st.form_submit_button("Login", type="primary", use_container_width=True)
        if submitted:
            user, error = api_client.sign_in(email, password)
            if error:
                notify("error", error)
            else:
                set_current_user(user)
                notify("success", user.get("message", "Successfully logged in!"))
                st.rerun()

    with signup_tab:
        with st.form("signup_form"):
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            submitted = st.form_submit_button("Sign up", type="primary", use_container_width=True)
        if submitted:
            user, error = api_client.sign_up(email, password)
            if error:
                notify("error", error)
            else:
                set_current_user(user)
                notify("success", user.get("message", "Account created successfully!"))
                st.rerun()


# ----------------------------------------------------------------------
# Header
# ----------------------------------------------------------------------

def _header_controls() -> None:
    user = get_current_user()
    columns = st.columns([1, 1, 3] if user else [1, 2])

    with columns[0]:
        if st.button("☀️" if is_dark_mode() else "🌙", key="theme_toggle", help="Toggle dark mode"):
            toggle_dark_mode()
            st.rerun()

    if user:
        with columns[1]:
            if st.button("🔖", key="saved_toggle", help="Show saved recipes"):
                toggle_show_saved()
                st.rerun()
        with columns[2]:
            st.caption(user.get("email") or "")
            st.button("Logout", key="logout_button", on_click=_logout, type="primary")
    else:
        with columns[1]:
            if st.button("Login", key="login_button", type="primary", use_container_width=True):
                show_auth_dialog()


page_header("Gourmet Guru", subtitle="Find recipes by what's in your kitchen.", right=_header_controls)


# ----------------------------------------------------------------------
# Search controls
# ----------------------------------------------------------------------

if composer.ingredients:
    chip_columns = st.columns(min(len(composer.ingredients), 6))
    for index, ingredient in enumerate(composer.ingredients):
        with chip_columns[index % len(chip_columns)]:
            st.button(
                f"{ingredient} ✕",
                key=f"chip_{ingredient}",
                on_click=composer.remove_ingredient,
                args=(ingredient,),
            )

col_input, col_diet, col_cuisine, col_servings = st.columns([3, 1, 1, 1])

with col_input:
    st.text_input(
        "Ingredients",
        key=INPUT_KEY,
        placeholder="Type ingredients...",
        on_change=_on_input_change,
        label_visibility="collapsed",
    )
    if composer.suggestions:
        for suggestion in composer.suggestions:
            st.button(
                suggestion,
                key=f"suggestion_{suggestion}",
                on_click=_add_suggestion,
                args=(suggestion,),
                use_container_width=True,
            )
    if composer.input_buffer.strip():
        st.button("Add ingredient", key="add_ingredient", on_click=_add_typed_ingredient)

with col_diet:
    st.selectbox(
        "Diet",
        options=DIET_OPTIONS,
        index=DIET_OPTIONS.index(composer.diet),
        format_func=lambda d: d.capitalize() if d else "Any Diet",
        key="diet_select",
        on_change=_on_diet_change,
        label_visibility="collapsed",
    )

with col_cuisine:
    st.selectbox(
        "Cuisine",
        options=CUISINE_OPTIONS,
        index=CUISINE_OPTIONS.index(composer.cuisine),
        format_func=lambda c: c.capitalize() if c else "Any Cuisine",
        key="cuisine_select",
        on_change=_on_cuisine_change,
        label_visibility="collapsed",
    )

with col_servings:
    st.selectbox(
        "Servings",
        options=SERVINGS_OPTIONS,
        index=SERVINGS_OPTIONS.index(composer.servings),
        format_func=lambda s: f"{s} Servings" if s else "Any Servings",
        key="servings_select",
        on_change=_on_servings_change,
        label_visibility="collapsed",
    )


# ----------------------------------------------------------------------
# Run the latest queued search
# ----------------------------------------------------------------------

request = pop_search_request()
if request is not None:
    filters = request["filters"]
    with working_spinner("Finding recipes…"):
        result = api_client.search_recipes(
            filters.ingredients,
            diet=filters.diet,
            cuisine=filters.cuisine,
            servings=filters.servings,
        )
    store_search_result(request["seq"], result if result is not None else {"message": MSG_SEARCH_FAILED})


# ----------------------------------------------------------------------
# Results / saved recipes
# ----------------------------------------------------------------------

if is_showing_saved():
    section("Saved Recipes")

    view_model = get_saved_view_model()
    with working_spinner(MSG_LOADING):
        view_model.load(get_user_id())
    message = view_model.status_message()
    if message:
        show_empty_state(message, action_label="Back to search", on_action=toggle_show_saved, key="back_to_search")
    else:
        render_recipe_grid(
            view_model.recipes,
            key_prefix="saved",
            saved_ids={recipe.id for recipe in view_model.recipes},
        )
        st.button("Back to search", key="back_to_search", on_click=toggle_show_saved)
else:
    result = get_search_result() or {}
    if result.get("message") == MSG_SEARCH_FAILED:
        show_error(result["message"])
    elif result.get("message"):
        hint = "Try fewer ingredients or another diet, cuisine or servings." if result.get("source") == "search" else None
        show_empty_state(result["message"], subtitle=hint)
    elif result.get("groups"):
        render_grouped_results(result["groups"])

selected = take_selected_recipe()
if selected is not None:
    show_recipe_dialog(selected)


# ----------------------------------------------------------------------
# System status - compact
# ----------------------------------------------------------------------

st.divider()
with st.expander("System status", expanded=False):
    backend_status = api_client.get_health_status()
    if backend_status:
        raw_status = backend_status["raw"]
        st.markdown(f"**Backend:** 🟢 {raw_status.get('name', '')} {raw_status.get('version', '')}")
        for integration, configured in raw_status.get("integrations", {}).items():
            st.caption(f"{'✅' if configured else '⚠️'} {integration}")
        st.caption(f"Saved recipes storage: {raw_status.get('saved_storage', 'unknown')}")
    else:
        st.markdown("**Backend:** 🔴 unreachable")
