"""
FastAPI application for the Gourmet Guru API.

This module defines the REST API endpoints for the recipe discovery backend:
- GET /recipes/search: Search recipes by ingredients, diet, cuisine and servings
- GET /recipes/by-ingredients: Recipes that use the given ingredients
- GET /recipes/random: A random recipe set
- GET /recipes/{recipe_id}: Full recipe details
- GET /ingredients/autocomplete: Ingredient name completions
- POST /auth/signin, /auth/signup, /auth/signout: Email/password accounts
- GET /saved, GET/PUT/DELETE /saved/{recipe_id}: Bookmarks of the signed-in user

Bookmark endpoints require an "Authorization: Bearer <idToken>" header with the
id token returned by /auth/signin or /auth/signup.

Run the API with:
    uvicorn api.main:app --reload

Access API documentation at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

import logging
import time
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status
from pydantic import ValidationError

from api.config import FirebaseConfig, get_required_env_vars
from api.schemas import (
    AuthResponse,
    AutocompleteResponse,
    CredentialsRequest,
    RecipeListResponse,
    SavedListResponse,
    SavedStatusResponse,
    SaveRecipeRequest,
)
from gourmet.difficulty import group_by_difficulty, with_difficulty
from gourmet.firestore import FirestoreClient
from gourmet.identity import AuthError, FirebaseIdentity
from gourmet.models import Identity, Recipe, SearchFilters
from gourmet.providers.base import BaseRecipeProvider
from gourmet.search import MSG_NO_MATCHES, MSG_NO_RANDOM_RESULTS, _get_provider, load_details, run_search
from gourmet.saved import FirestoreBackend, MemoryBackend, SavedRecipeStore
from gourmet.utils.cache import get_cache_size

logger = logging.getLogger(__name__)

# Track app start time for uptime calculation
_APP_START_TIME = time.time()

APP_NAME = "Gourmet Guru API"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Backend API for discovering recipes by ingredients, diet, cuisine and servings"

app = FastAPI(
    title=APP_NAME,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    openapi_tags=[
        {"name": "recipes", "description": "Search recipes, draw random sets and fetch recipe details."},
        {"name": "auth", "description": "Email/password accounts backed by Firebase Authentication."},
        {"name": "saved", "description": "Bookmarks of the signed-in user. Requires a Bearer id token."},
        {"name": "health", "description": "Health check and monitoring endpoints."},
    ],
)


# ----------------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------------

def get_provider() -> BaseRecipeProvider:
    """
    Get the process-wide recipe provider.

    Raises:
        HTTPException 503: If no Spoonacular API key is configured
    """
    try:
        return _get_provider()
    except RuntimeError as e:
        logger.error("Recipe provider unavailable: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e


def get_identity_client() -> FirebaseIdentity:
    """
    Get a Firebase identity client.

    Raises:
        HTTPException 503: If Firebase is not configured
    """
    try:
        return FirebaseIdentity(api_key=FirebaseConfig.get_api_key())
    except RuntimeError as e:
        logger.error("Identity provider unavailable: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    identity: FirebaseIdentity = Depends(get_identity_client),
) -> Identity:
    """
    Resolve the signed-in user from the Authorization header.

    Raises:
        HTTPException 401: If the header is missing or the token is rejected
    """
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please log in to view your saved recipes",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return identity.lookup(token)
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_saved_store(user: Identity = Depends(get_current_user)) -> SavedRecipeStore:
    """
    Get the bookmark store acting as the signed-in user.

    Uses Firestore when FIREBASE_PROJECT_ID is set, otherwise the in-memory store.
    """
    project_id = FirebaseConfig.get_project_id()
    if project_id and user.id_token:
        return SavedRecipeStore(FirestoreBackend(FirestoreClient(project_id, user.id_token)))
    return SavedRecipeStore(MemoryBackend())


def _split_csv(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


# ----------------------------------------------------------------------
# Recipes
# ----------------------------------------------------------------------

@app.get(
    "/recipes/search",
    response_model=RecipeListResponse,
    tags=["recipes"],
    summary="Search recipes by filters",
    description="Search recipes by ingredients, diet, cuisine and servings. With every filter left at its "
                "default a random recipe set is returned instead. Results are grouped by difficulty.",
)
def search_recipes(
    ingredients: str = Query("", description="Comma-separated ingredient names (e.g. 'tomato,basil')"),
    diet: str = Query("", description="Diet: vegetarian, vegan, gluten free, ketogenic or paleo (empty = any)"),
    cuisine: str = Query("", description="Cuisine: italian, mexican, indian, chinese, japanese, thai or "
                                         "mediterranean (empty = any)"),
    servings: int = Query(0, description="Servings: 2, 4, 6, 8 or 10 (0 = any)"),
    provider: BaseRecipeProvider = Depends(get_provider),
) -> RecipeListResponse:
    """
    Search recipes.

    Raises:
        HTTPException 400: If diet, cuisine or servings is not one of the supported options

    Example:
        ```bash
        GET /recipes/search?ingredients=tomato,basil&diet=vegetarian&servings=2
        ```
    """
    try:
        filters = SearchFilters(
            ingredients=_split_csv(ingredients),
            diet=diet.strip().lower(),
            cuisine=cuisine.strip().lower(),
            servings=servings,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(err["msg"] for err in e.errors()),
        ) from e

    outcome = run_search(filters, provider)
    return RecipeListResponse(
        results=outcome.recipes,
        groups=outcome.groups,
        message=outcome.message,
        source=outcome.source,
        provider_status=outcome.provider_status,
    )


@app.get(
    "/recipes/by-ingredients",
    response_model=RecipeListResponse,
    tags=["recipes"],
    summary="Find recipes that use the given ingredients",
)
def recipes_by_ingredients(
    ingredients: str = Query(..., min_length=1, description="Comma-separated ingredient names"),
    provider: BaseRecipeProvider = Depends(get_provider),
) -> RecipeListResponse:
    """
    Find recipes by ingredients, fewest missing ingredients first.

    Raises:
        HTTPException 400: If no ingredient is given
    """
    names = _split_csv(ingredients)
    if not names:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one ingredient must be specified.",
        )

    recipes = with_difficulty(provider.search_by_ingredients(names))
    return RecipeListResponse(
        results=recipes,
        groups=group_by_difficulty(recipes),
        message=None if recipes else MSG_NO_MATCHES,
        source="search",
        provider_status=provider.last_status,
    )


@app.get(
    "/recipes/random",
    response_model=RecipeListResponse,
    tags=["recipes"],
    summary="Get a random recipe set",
)
def random_recipes(
    tags: str = Query("", description="Comma-separated tags (e.g. 'vegetarian,dessert')"),
    servings: int = Query(0, ge=0, description="Exact servings (0 = any)"),
    provider: BaseRecipeProvider = Depends(get_provider),
) -> RecipeListResponse:
    """Draw up to 12 random recipes, grouped by difficulty."""
    recipes = with_difficulty(provider.get_random(tags=_split_csv(tags), servings=servings or None))
    return RecipeListResponse(
        results=recipes,
        groups=group_by_difficulty(recipes),
        message=None if recipes else MSG_NO_RANDOM_RESULTS,
        source="random",
        provider_status=provider.last_status,
    )


@app.get(
    "/recipes/{recipe_id}",
    response_model=Recipe,
    tags=["recipes"],
    summary="Get recipe details",
)
def recipe_details(recipe_id: int, provider: BaseRecipeProvider = Depends(get_provider)) -> Recipe:
    """
    Get full recipe details, including ingredients and instructions.

    Raises:
        HTTPException 404: If the provider returned nothing for this id
    """
    recipe = load_details(recipe_id, provider)
    if recipe is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )
    return recipe


@app.get(
    "/ingredients/autocomplete",
    response_model=AutocompleteResponse,
    tags=["recipes"],
    summary="Complete an ingredient name",
)
def autocomplete_ingredients(
    q: str = Query("", description="Partial ingredient name"),
    number: int = Query(5, ge=1, le=25, description="Maximum number of suggestions"),
    provider: BaseRecipeProvider = Depends(get_provider),
) -> AutocompleteResponse:
    """Return up to `number` ingredient names starting with `q` (empty q returns none)."""
    return AutocompleteResponse(suggestions=provider.autocomplete_ingredients(q, number=number))


# ----------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------

@app.post("/auth/signin", response_model=AuthResponse, tags=["auth"], summary="Sign in with email and password")
def sign_in(
    credentials: CredentialsRequest,
    identity: FirebaseIdentity = Depends(get_identity_client),
) -> AuthResponse:
    """
    Sign in.

    Raises:
        HTTPException 401: If Firebase rejects the credentials (detail is the user-facing message)
    """
    try:
        user = identity.sign_in(credentials.email, credentials.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    return AuthResponse(**user.model_dump(), message="Successfully logged in!")


@app.post("/auth/signup", response_model=AuthResponse, tags=["auth"], summary="Create an account")
def sign_up(
    credentials: CredentialsRequest,
    identity: FirebaseIdentity = Depends(get_identity_client),
) -> AuthResponse:
    """
    Create an account and sign it in.

    Raises:
        HTTPException 400: If Firebase refuses the account (detail is the user-facing message)
    """
    try:
        user = identity.sign_up(credentials.email, credentials.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    return AuthResponse(**user.model_dump(), message="Account created successfully!")


@app.post("/auth/signout", tags=["auth"], summary="Sign out")
def sign_out(
    authorization: Optional[str] = Header(None),
    identity: FirebaseIdentity = Depends(get_identity_client),
):
    """
    Sign out. Always succeeds; the client is expected to drop its tokens.
    """
    token = _bearer_token(authorization)
    user = None
    if token:
        try:
            user = identity.lookup(token)
        except AuthError as e:
            logger.info("Sign-out with an unusable token: %s", e.code)
    identity.sign_out(user)
    return {"status": "ok"}


# ----------------------------------------------------------------------
# Saved recipes
# ----------------------------------------------------------------------

@app.get("/saved", response_model=SavedListResponse, tags=["saved"], summary="List saved recipes")
def list_saved(
    user: Identity = Depends(get_current_user),
    store: SavedRecipeStore = Depends(get_saved_store),
) -> SavedListResponse:
    """List the signed-in user's saved recipes ([] if storage is unavailable)."""
    recipes = store.list_saved(user.uid)
    return SavedListResponse(recipes=recipes, count=len(recipes))


@app.get("/saved/{recipe_id}", response_model=SavedStatusResponse, tags=["saved"], summary="Check a bookmark")
def get_saved_status(
    recipe_id: int,
    user: Identity = Depends(get_current_user),
    store: SavedRecipeStore = Depends(get_saved_store),
) -> SavedStatusResponse:
    """Check whether the signed-in user saved a recipe."""
    return SavedStatusResponse(recipe_id=recipe_id, saved=store.is_saved(user.uid, recipe_id))


@app.put("/saved/{recipe_id}", response_model=SavedStatusResponse, tags=["saved"], summary="Save a recipe")
def save_recipe(
    recipe_id: int,
    payload: SaveRecipeRequest,
    user: Identity = Depends(get_current_user),
    store: SavedRecipeStore = Depends(get_saved_store),
) -> SavedStatusResponse:
    """
    Save (upsert) a recipe for the signed-in user.

    Raises:
        HTTPException 500: If the bookmark could not be stored
    """
    if not store.save_recipe(user.uid, recipe_id, payload.model_dump(by_alias=True)):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save recipe")
    return SavedStatusResponse(recipe_id=recipe_id, saved=True)


@app.delete("/saved/{recipe_id}", response_model=SavedStatusResponse, tags=["saved"], summary="Remove a saved recipe")
def unsave_recipe(
    recipe_id: int,
    user: Identity = Depends(get_current_user),
    store: SavedRecipeStore = Depends(get_saved_store),
) -> SavedStatusResponse:
    """
    Remove a saved recipe of the signed-in user.

    Raises:
        HTTPException 500: If the bookmark could not be removed
    """
    if not store.unsave_recipe(user.uid, recipe_id):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save recipe")
    return SavedStatusResponse(recipe_id=recipe_id, saved=False)


# ----------------------------------------------------------------------
# Health
# ----------------------------------------------------------------------

@app.get("/health", tags=["health"])
def health():
    """
    Health check endpoint for monitoring and status checks.

    Returns:
        Dictionary with status, API metadata, uptime information and which
        integrations are configured. Always returns 200 OK if the endpoint is reachable.
    """
    uptime_seconds = int(time.time() - _APP_START_TIME)
    return {
        "status": "ok",
        "name": APP_NAME,
        "version": APP_VERSION,
        "uptime_seconds": uptime_seconds,
        "integrations": get_required_env_vars(),
        "saved_storage": "firestore" if FirebaseConfig.get_project_id() else "memory",
        "cache_entries": get_cache_size(),
    }


@app.get("/")
def root():
    """
    Root endpoint providing API information.

    Returns:
        Dictionary with API name and version
    """
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
        "docs": "/docs",
    }
