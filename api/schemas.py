"""
Pydantic schemas for FastAPI request and response models.

This module defines the Pydantic models used for API request validation and
response serialization. These schemas ensure type safety and automatic API
documentation generation.

The schemas include:
- RecipeListResponse: Flat and difficulty-grouped recipes plus status information
- CredentialsRequest / AuthResponse: Sign-in and sign-up payloads
- SaveRecipeRequest / SavedStatusResponse / SavedListResponse: Bookmark payloads

# NOTE: Recipe payloads are serialized with camelCase aliases (readyInMinutes,
    healthScore, ...) so the wire format matches the recipe provider's.
    The underlying models are defined in gourmet.models.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from gourmet.models import Recipe, SavedRecipe


class RecipeListResponse(BaseModel):
    """
    Response model for recipe search endpoints.

    Contains the recipes in provider order, the same recipes grouped by
    difficulty, and the information the frontend needs to explain empty results.
    """
    results: List[Recipe] = Field(default_factory=list, description="Recipes in provider order")
    groups: Dict[str, List[Recipe]] = Field(
        default_factory=dict,
        description="Recipes grouped by difficulty (easy -> medium -> hard, empty groups omitted)",
    )
    message: Optional[str] = Field(None, description="User-facing message when there is nothing to show")
    source: str = Field("search", description="'random' when no filter was set, else 'search'")
    provider_status: str = Field("ok", description="ok, unauthorized, quota_exceeded or error")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "results": [{"id": 716429, "title": "Pasta with Garlic", "readyInMinutes": 45,
                             "servings": 2, "healthScore": 19.0, "diets": [], "difficulty": "medium"}],
                "groups": {"medium": [{"id": 716429, "title": "Pasta with Garlic"}]},
                "message": None,
                "source": "search",
                "provider_status": "ok",
            }
        }
    )


class AutocompleteResponse(BaseModel):
    """Ingredient name completions."""
    suggestions: List[str] = Field(default_factory=list)


class CredentialsRequest(BaseModel):
    """Email/password payload for sign-in and sign-up."""
    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class AuthResponse(BaseModel):
    """
    Signed-in user returned by /auth/signin and /auth/signup.

    The frontend keeps id_token and sends it as a Bearer token on /saved requests.
    """
    uid: str
    email: Optional[str] = None
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    message: str = Field(..., description="Toast shown to the user")


class SaveRecipeRequest(BaseModel):
    """Recipe fields stored with a bookmark (camelCase accepted)."""
    title: str = ""
    image: Optional[str] = None
    ready_in_minutes: int = Field(0, alias="readyInMinutes")
    servings: int = 0
    health_score: float = Field(0.0, alias="healthScore")
    difficulty: Optional[str] = None
    diets: Optional[List[str]] = None

    model_config = ConfigDict(populate_by_name=True)


class SavedStatusResponse(BaseModel):
    """Bookmark state of a single recipe."""
    recipe_id: int
    saved: bool


class SavedListResponse(BaseModel):
    """All bookmarks of the signed-in user."""
    recipes: List[SavedRecipe] = Field(default_factory=list)
    count: int = 0
