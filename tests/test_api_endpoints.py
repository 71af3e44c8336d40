"""
Tests for the FastAPI endpoints.

The recipe provider, identity client and signed-in user are replaced through
app.dependency_overrides; bookmarks use the in-memory store.

These tests verify that:
- Search chooses between a random set and a filtered search and validates filters
- Empty results carry the user-facing message
- Auth errors are passed through as HTTP 401 / 400 with the Firebase message
- Bookmark endpoints require a Bearer token and are scoped to the user
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_current_user, get_identity_client, get_provider
from gourmet.identity import AuthError
from gourmet.models import Identity, Recipe
from gourmet.providers.base import BaseRecipeProvider
from gourmet.saved import clear_memory_store
from gourmet.search import MSG_NO_MATCHES, MSG_NO_RANDOM_RESULTS

client = TestClient(app)

USER = Identity(uid="user-1", email="cook@example.com")


def make_recipes(*minutes):
    return [Recipe(id=100 + i, title=f"Recipe {i}", ready_in_minutes=m) for i, m in enumerate(minutes)]


@pytest.fixture
def provider():
    provider = Mock(spec=BaseRecipeProvider)
    provider.last_status = "ok"
    app.dependency_overrides[get_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_provider, None)


@pytest.fixture
def identity():
    identity = Mock()
    app.dependency_overrides[get_identity_client] = lambda: identity
    yield identity
    app.dependency_overrides.pop(get_identity_client, None)


@pytest.fixture
def signed_in():
    clear_memory_store()
    app.dependency_overrides[get_current_user] = lambda: USER
    yield USER
    app.dependency_overrides.pop(get_current_user, None)
    clear_memory_store()


class TestRecipeSearch:
    """GET /recipes/search."""

    def test_no_filters_returns_random_set(self, provider):
        provider.get_random.return_value = make_recipes(10, 30, 60)

        resp = client.get("/recipes/search")

        assert resp.status_code == 200
        data = resp.json()
        assert data["source"] == "random"
        assert data["message"] is None
        assert list(data["groups"]) == ["easy", "medium", "hard"]
        assert data["results"][0]["readyInMinutes"] == 10
        assert data["results"][0]["difficulty"] == "easy"
        provider.search_by_filters.assert_not_called()

    def test_filters_are_forwarded(self, provider):
        provider.search_by_filters.return_value = make_recipes(15)

        resp = client.get("/recipes/search", params={
            "ingredients": "tomato, basil",
            "diet": "Vegan",
            "cuisine": "italian",
            "servings": 2,
        })

        assert resp.status_code == 200
        assert resp.json()["source"] == "search"
        provider.search_by_filters.assert_called_once_with(
            "tomato,basil", diet="vegan", cuisine="italian", servings=2
        )

    def test_empty_search_message(self, provider):
        provider.search_by_filters.return_value = []
        resp = client.get("/recipes/search", params={"ingredients": "dragonfruit"})
        assert resp.json()["message"] == MSG_NO_MATCHES
        assert resp.json()["results"] == []

    def test_empty_random_set_message(self, provider):
        provider.get_random.return_value = []
        provider.last_status = "quota_exceeded"

        data = client.get("/recipes/search").json()

        assert data["message"] == MSG_NO_RANDOM_RESULTS
        assert data["provider_status"] == "quota_exceeded"

    @pytest.mark.parametrize("params", [
        {"diet": "carnivore"},
        {"cuisine": "martian"},
        {"servings": 3},
    ])
    def test_unsupported_filters_are_rejected(self, provider, params):
        resp = client.get("/recipes/search", params=params)
        assert resp.status_code == 400
        provider.search_by_filters.assert_not_called()


class TestOtherRecipeEndpoints:
    """By-ingredients, random, details and autocomplete."""

    def test_by_ingredients(self, provider):
        provider.search_by_ingredients.return_value = make_recipes(0)

        resp = client.get("/recipes/by-ingredients", params={"ingredients": "tomato,onion"})

        assert resp.status_code == 200
        provider.search_by_ingredients.assert_called_once_with(["tomato", "onion"])

    def test_by_ingredients_requires_a_name(self, provider):
        assert client.get("/recipes/by-ingredients", params={"ingredients": " , "}).status_code == 400

    def test_random_with_tags(self, provider):
        provider.get_random.return_value = make_recipes(25)

        resp = client.get("/recipes/random", params={"tags": "vegetarian,dessert", "servings": 4})

        assert resp.status_code == 200
        assert resp.json()["source"] == "random"
        provider.get_random.assert_called_once_with(tags=["vegetarian", "dessert"], servings=4)

    def test_details(self, provider):
        provider.get_details.return_value = Recipe(id=42, title="Soup", ready_in_minutes=50)

        resp = client.get("/recipes/42")

        assert resp.status_code == 200
        assert resp.json()["difficulty"] == "hard"

    def test_details_not_found(self, provider):
        provider.get_details.return_value = None
        resp = client.get("/recipes/42")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Recipe 42 not found"

    def test_autocomplete(self, provider):
        provider.autocomplete_ingredients.return_value = ["tomato"]

        resp = client.get("/ingredients/autocomplete", params={"q": "tom"})

        assert resp.json() == {"suggestions": ["tomato"]}
        provider.autocomplete_ingredients.assert_called_once_with("tom", number=5)

    def test_autocomplete_number_validation(self, provider):
        assert client.get("/ingredients/autocomplete", params={"q": "tom", "number": 0}).status_code == 422


class TestAuth:
    """POST /auth/*."""

    def test_sign_in(self, identity):
        identity.sign_in.return_value = Identity(uid="user-1", email="cook@example.com", id_token="tok")

        resp = client.post("/auth/signin", json={"email": "cook@example.com", "password": "secret1"})

        assert resp.status_code == 200
        assert resp.json()["id_token"] == "tok"
        assert resp.json()["message"] == "Successfully logged in!"

    def test_sign_in_rejected(self, identity):
        identity.sign_in.side_effect = AuthError("Invalid email or password.", "INVALID_LOGIN_CREDENTIALS")

        resp = client.post("/auth/signin", json={"email": "cook@example.com", "password": "wrong"})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password."

    def test_sign_up_existing_email(self, identity):
        identity.sign_up.side_effect = AuthError("An account with this email already exists.", "EMAIL_EXISTS")

        resp = client.post("/auth/signup", json={"email": "cook@example.com", "password": "secret1"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "An account with this email already exists."

    def test_sign_out_always_succeeds(self, identity):
        identity.lookup.side_effect = AuthError("expired", "TOKEN_EXPIRED")

        resp = client.post("/auth/signout", headers={"Authorization": "Bearer stale"})

        assert resp.status_code == 200
        identity.sign_out.assert_called_once_with(None)


class TestSavedRecipes:
    """Bookmark endpoints."""

    def test_requires_bearer_token(self, identity):
        resp = client.get("/saved")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Please log in to view your saved recipes"

    def test_rejected_token(self, identity):
        identity.lookup.side_effect = AuthError("Your session has expired. Please log in again.", "TOKEN_EXPIRED")
        resp = client.get("/saved", headers={"Authorization": "Bearer stale"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Your session has expired. Please log in again."

    def test_save_list_and_remove(self, signed_in):
        payload = {"title": "Soup", "readyInMinutes": 35, "servings": 2, "healthScore": 40.0, "diets": ["vegan"]}

        assert client.put("/saved/42", json=payload).json() == {"recipe_id": 42, "saved": True}
        assert client.get("/saved/42").json()["saved"] is True

        listing = client.get("/saved").json()
        assert listing["count"] == 1
        assert listing["recipes"][0]["id"] == 42
        assert listing["recipes"][0]["difficulty"] == "medium"
        assert listing["recipes"][0]["savedAt"].endswith("Z")

        assert client.delete("/saved/42").json() == {"recipe_id": 42, "saved": False}
        assert client.get("/saved").json()["count"] == 0

    def test_invalid_bookmark_payload_fails(self, signed_in):
        resp = client.put("/saved/42", json={"title": "Soup", "difficulty": "trivial"})
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to save recipe"


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert set(data["integrations"]) == {"spoonacular_api_key", "firebase_api_key", "firebase_project_id"}
    assert data["saved_storage"] in ("firestore", "memory")


def test_root():
    assert client.get("/").json()["docs"] == "/docs"
