"""
Recipe, saved-recipe and identity models for Gourmet Guru.

This module defines the canonical schemas used throughout the app. The recipe
provider, the Firestore documents and the backend API all speak the provider's
camelCase field names (readyInMinutes, healthScore, savedAt, ...), so every
model uses snake_case attributes with camelCase aliases and accepts either form
on input.

# NOTE: Recipe.difficulty is derived locally from ready_in_minutes. Whatever
    the upstream payload says about difficulty is ignored; use
    gourmet.difficulty.with_difficulty() after every load or detail fetch.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

Difficulty = Literal["easy", "medium", "hard"]

# Ordered display buckets (also the order of grouped results)
DIFFICULTY_LEVELS: List[str] = ["easy", "medium", "hard"]

# Fixed filter options offered by the search controls ("" / 0 mean "any")
DIET_OPTIONS: List[str] = ["", "vegetarian", "vegan", "gluten free", "ketogenic", "paleo"]
CUISINE_OPTIONS: List[str] = [
    "",
    "italian",
    "mexican",
    "indian",
    "chinese",
    "japanese",
    "thai",
    "mediterranean",
]
SERVINGS_OPTIONS: List[int] = [0, 2, 4, 6, 8, 10]


class CamelModel(BaseModel):
    """Base model that reads and writes the provider's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NamedItem(CamelModel):
    """Equipment or ingredient reference inside an instruction step."""
    name: str = ""


class InstructionStep(CamelModel):
    """A single numbered step of an analyzed instruction."""
    number: int = Field(..., ge=0, description="Step number as given by the provider")
    step: str = Field("", description="Step text")
    equipment: Optional[List[NamedItem]] = Field(None, description="Equipment used in this step")
    ingredients: Optional[List[NamedItem]] = Field(None, description="Ingredients used in this step")


class AnalyzedInstruction(CamelModel):
    """An instruction group (the provider may split long recipes into named parts)."""
    name: str = ""
    steps: List[InstructionStep] = Field(default_factory=list)


class ExtendedIngredient(CamelModel):
    """Ingredient line of a recipe detail payload."""
    original: str = Field("", description="Original ingredient line, e.g. '2 cups flour'")
    amount: Optional[float] = None
    unit: Optional[str] = None
    name: str = ""


class Recipe(CamelModel):
    """
    Recipe as returned by the recipe provider, re-shaped for local use.

    Search results carry the summary fields; detail lookups additionally carry
    extended_ingredients and analyzed_instructions.
    """
    # Core identifier (externally assigned, stable)
    id: int = Field(..., description="Provider recipe id")

    # Display
    title: str = Field("", description="Recipe title")
    image: Optional[str] = Field(None, description="Recipe image URL")

    # Facts
    ready_in_minutes: int = Field(0, ge=0, description="Total preparation time in minutes")
    servings: int = Field(0, ge=0, description="Number of servings")
    health_score: float = Field(0.0, ge=0, le=100, description="Provider health score (0-100)")
    price_per_serving: Optional[float] = Field(None, ge=0, description="Price per serving in US cents")

    # Classification (diets=None means the provider did not say, which is not the same as [])
    diets: Optional[List[str]] = Field(None, description="Diet tags, e.g. ['vegan']")
    cuisines: List[str] = Field(default_factory=list, description="Cuisine tags")

    # Derived locally
    difficulty: Optional[Difficulty] = Field(None, description="Derived from ready_in_minutes")

    # Detail payload
    extended_ingredients: Optional[List[ExtendedIngredient]] = None
    analyzed_instructions: Optional[List[AnalyzedInstruction]] = None

    @field_validator("ready_in_minutes", "servings", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        # findByIngredients results omit time and servings entirely
        return 0 if value is None else value

    @field_validator("health_score", mode="before")
    @classmethod
    def _clamp_health_score(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        return min(max(float(value), 0.0), 100.0)

    @field_validator("cuisines", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class SavedRecipe(CamelModel):
    """
    User-scoped bookmark of a recipe.

    Stored under users/{uid}/savedRecipes/{recipeId}; saved_at is stamped by the
    store at save time.
    """
    id: int
    title: str = ""
    image: Optional[str] = None
    ready_in_minutes: int = 0
    servings: int = 0
    health_score: float = 0.0
    difficulty: Optional[Difficulty] = None
    diets: Optional[List[str]] = None
    saved_at: Optional[str] = Field(None, description="ISO-8601 UTC timestamp set by the store")

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "SavedRecipe":
        """Build the saved subset of a recipe (saved_at is left for the store)."""
        return cls(
            id=recipe.id,
            title=recipe.title,
            image=recipe.image,
            ready_in_minutes=recipe.ready_in_minutes,
            servings=recipe.servings,
            health_score=recipe.health_score,
            difficulty=recipe.difficulty,
            diets=recipe.diets,
        )


class SearchFilters(BaseModel):
    """
    Filters of one search request.

    Ephemeral: built by the search composer (or from query parameters) for a
    single request and never persisted. "" and 0 mean "any".
    """
    ingredients: List[str] = Field(default_factory=list)
    diet: str = ""
    cuisine: str = ""
    servings: int = 0

    @field_validator("diet")
    @classmethod
    def _check_diet(cls, value: str) -> str:
        if value not in DIET_OPTIONS:
            raise ValueError(f"Unsupported diet {value!r}; expected one of {DIET_OPTIONS}")
        return value

    @field_validator("cuisine")
    @classmethod
    def _check_cuisine(cls, value: str) -> str:
        if value not in CUISINE_OPTIONS:
            raise ValueError(f"Unsupported cuisine {value!r}; expected one of {CUISINE_OPTIONS}")
        return value

    @field_validator("servings")
    @classmethod
    def _check_servings(cls, value: int) -> int:
        if value not in SERVINGS_OPTIONS:
            raise ValueError(f"Unsupported servings {value!r}; expected one of {SERVINGS_OPTIONS}")
        return value

    def is_default(self) -> bool:
        """True when no ingredient and no filter is set."""
        return not self.ingredients and not self.diet and not self.cuisine and self.servings == 0


class Identity(BaseModel):
    """Authenticated user as reported by the identity provider."""
    uid: str
    email: Optional[str] = None
    id_token: Optional[str] = Field(None, description="Bearer token for acting on behalf of the user")
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, description="Token lifetime in seconds")


def parse_recipes(items: List[Dict[str, Any]]) -> List[Recipe]:
    """
    Convert raw provider dicts to Recipe models, skipping malformed items.

    Args:
        items: Raw recipe dictionaries from the provider

    Returns:
        List of Recipe models in input order (invalid items dropped)
    """
    recipes: List[Recipe] = []
    for item in items or []:
        try:
            recipes.append(Recipe.model_validate(item))
        except Exception as e:
            logger.warning("Skipping malformed recipe payload: %s (item: %s)", e, str(item)[:200])
    return recipes
