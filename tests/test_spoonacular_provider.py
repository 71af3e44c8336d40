"""
Tests for the Spoonacular provider using a mocked requests session.

These tests verify that:
- Every call consumes the next API key round-robin
- Request parameters match the provider contract (result cap, servings bounds, ranking)
- 401 / 402 / other failures are classified and converted to [] or None
- Malformed records are skipped
- Successful responses are cached, failures are not
"""

import os
import threading
from typing import Any, List
from unittest.mock import Mock, patch

import pytest
import requests

from gourmet.providers.spoonacular import SpoonacularProvider, classify_error
from gourmet.utils.cache import clear_cache


def make_response(payload: Any = None, status_code: int = 200) -> Mock:
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


def make_provider(responses: List[Mock], keys=None, use_cache: bool = False) -> SpoonacularProvider:
    session = Mock()
    session.get.side_effect = responses
    return SpoonacularProvider(
        api_keys=keys or ["key-1", "key-2"],
        base_url="https://api.example.test",
        session=session,
        use_cache=use_cache,
    )


RECIPE = {
    "id": 716429,
    "title": "Pasta with Garlic",
    "image": "https://img.example.test/716429.jpg",
    "readyInMinutes": 45,
    "servings": 2,
    "healthScore": 19.5,
    "diets": [],
}


@pytest.fixture(autouse=True)
def _clear_cache():
    clear_cache()
    yield
    clear_cache()


class TestInitialization:
    """Provider construction and configuration."""

    @patch.dict(os.environ, {"SPOONACULAR_API_KEY_1": "env-1", "SPOONACULAR_API_KEY_2": "env-2"}, clear=True)
    def test_reads_numbered_keys_from_env(self):
        """Keys come from SPOONACULAR_API_KEY_1/_2 when not passed explicitly."""
        provider = SpoonacularProvider(session=Mock())
        assert len(provider.rotator) == 2
        assert provider.base_url == "https://api.spoonacular.com"

    @patch.dict(os.environ, {"SPOONACULAR_API_KEYS": "a, b ,c"}, clear=True)
    def test_reads_comma_separated_keys(self):
        provider = SpoonacularProvider(session=Mock())
        assert len(provider.rotator) == 3

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_keys_raise_runtime_error(self):
        """No key at all is a configuration error."""
        with pytest.raises(RuntimeError):
            SpoonacularProvider(session=Mock())


class TestKeyRotation:
    """Each outbound call uses the next key."""

    def test_calls_alternate_between_keys(self):
        provider = make_provider([make_response({"results": [RECIPE]}) for _ in range(3)])

        provider.search_by_filters("tomato")
        provider.search_by_filters("basil")
        provider.search_by_filters("garlic")

        used = [call.kwargs["params"]["apiKey"] for call in provider.session.get.call_args_list]
        assert used == ["key-1", "key-2", "key-1"]

    def test_failed_calls_still_consume_a_key(self):
        provider = make_provider([make_response(status_code=500), make_response({"results": []})])

        provider.search_by_filters("tomato")
        provider.search_by_filters("tomato")

        used = [call.kwargs["params"]["apiKey"] for call in provider.session.get.call_args_list]
        assert used == ["key-1", "key-2"]


class TestSearchByFilters:
    """GET /recipes/complexSearch."""

    def test_parameters_and_results(self):
        provider = make_provider([make_response({"results": [RECIPE]})])

        recipes = provider.search_by_filters("tomato,basil", diet="vegan", cuisine="italian", servings=4)

        url = provider.session.get.call_args.args[0]
        params = provider.session.get.call_args.kwargs["params"]
        assert url == "https://api.example.test/recipes/complexSearch"
        assert params["query"] == "tomato,basil"
        assert params["diet"] == "vegan"
        assert params["cuisine"] == "italian"
        assert params["number"] == 12
        assert params["addRecipeInformation"] == "true"
        assert params["addRecipeNutrition"] == "true"
        assert params["minServings"] == 4
        assert params["maxServings"] == 4
        assert provider.session.get.call_args.kwargs["timeout"] == 10

        assert len(recipes) == 1
        assert recipes[0].id == 716429
        assert recipes[0].ready_in_minutes == 45
        assert provider.last_status == "ok"

    def test_empty_filters_and_zero_servings_are_omitted(self):
        """No servings bound when servings is 0; empty diet/cuisine are not sent."""
        provider = make_provider([make_response({"results": []})])

        provider.search_by_filters("tomato", diet=None, cuisine="", servings=0)

        params = provider.session.get.call_args.kwargs["params"]
        assert "minServings" not in params
        assert "maxServings" not in params
        assert "diet" not in params
        assert "cuisine" not in params

    def test_malformed_records_are_skipped(self):
        """Items failing validation are dropped, valid ones kept."""
        provider = make_provider([make_response({"results": [RECIPE, {"title": "no id"}, "junk"]})])

        recipes = provider.search_by_filters("tomato")

        assert [r.id for r in recipes] == [716429]

    def test_unauthorized_is_classified(self):
        """HTTP 401 -> [] and last_status unauthorized."""
        provider = make_provider([make_response({"message": "bad key"}, status_code=401)])

        assert provider.search_by_filters("tomato") == []
        assert provider.last_status == "unauthorized"

    def test_quota_exceeded_is_classified(self):
        """HTTP 402 -> [] and last_status quota_exceeded."""
        provider = make_provider([make_response({"message": "quota"}, status_code=402)])

        assert provider.search_by_filters("tomato") == []
        assert provider.last_status == "quota_exceeded"

    def test_transport_error_is_classified(self):
        """Timeouts and connection errors -> [] and last_status error."""
        provider = make_provider([requests.exceptions.Timeout("slow")])

        assert provider.search_by_filters("tomato") == []
        assert provider.last_status == "error"

    def test_status_resets_after_success(self):
        provider = make_provider([
            make_response(status_code=402),
            make_response({"results": [RECIPE]}),
        ])
        provider.search_by_filters("tomato")
        provider.search_by_filters("basil")
        assert provider.last_status == "ok"


class TestSearchByIngredients:
    """GET /recipes/findByIngredients."""

    def test_parameters(self):
        provider = make_provider([make_response([{"id": 1, "title": "Soup", "image": None}])])

        recipes = provider.search_by_ingredients(["tomato", "onion"])

        params = provider.session.get.call_args.kwargs["params"]
        assert provider.session.get.call_args.args[0].endswith("/recipes/findByIngredients")
        assert params["ingredients"] == "tomato,onion"
        assert params["number"] == 12
        assert params["ranking"] == 2
        assert params["ignorePantry"] == "true"
        # findByIngredients omits time and servings; they default to 0
        assert recipes[0].ready_in_minutes == 0
        assert recipes[0].servings == 0

    def test_error_returns_empty_list(self):
        provider = make_provider([make_response(status_code=500)])
        assert provider.search_by_ingredients(["tomato"]) == []
        assert provider.last_status == "error"


class TestGetDetails:
    """GET /recipes/{id}/information."""

    def test_returns_recipe_with_instructions(self):
        payload = dict(RECIPE, extendedIngredients=[{"original": "2 cloves garlic", "name": "garlic"}],
                       analyzedInstructions=[{"name": "", "steps": [{"number": 1, "step": "Boil."}]}])
        provider = make_provider([make_response(payload)])

        recipe = provider.get_details(716429)

        assert provider.session.get.call_args.args[0].endswith("/recipes/716429/information")
        assert recipe.extended_ingredients[0].original == "2 cloves garlic"
        assert recipe.analyzed_instructions[0].steps[0].step == "Boil."

    def test_not_found_returns_none(self):
        provider = make_provider([make_response(status_code=404)])
        assert provider.get_details(1) is None
        assert provider.last_status == "error"


class TestGetRandom:
    """GET /recipes/random."""

    def test_tags_are_joined_and_results_returned(self):
        provider = make_provider([make_response({"recipes": [RECIPE]})])

        recipes = provider.get_random(tags=["vegetarian", "dessert"], servings=2)

        params = provider.session.get.call_args.kwargs["params"]
        assert params["tags"] == "vegetarian,dessert"
        assert params["number"] == 12
        assert params["minServings"] == 2
        assert params["maxServings"] == 2
        assert len(recipes) == 1

    def test_missing_recipes_array_returns_empty_list(self):
        provider = make_provider([make_response({"unexpected": True})])
        assert provider.get_random() == []

    def test_random_is_never_cached(self):
        provider = make_provider([make_response({"recipes": [RECIPE]}) for _ in range(2)], use_cache=True)
        provider.get_random()
        provider.get_random()
        assert provider.session.get.call_count == 2


class TestAutocomplete:
    """GET /food/ingredients/autocomplete."""

    def test_returns_names(self):
        provider = make_provider([make_response([{"name": "tomato"}, {"name": "tomato paste"}])])

        names = provider.autocomplete_ingredients("tom")

        params = provider.session.get.call_args.kwargs["params"]
        assert params["query"] == "tom"
        assert params["number"] == 5
        assert names == ["tomato", "tomato paste"]

    def test_empty_query_makes_no_call(self):
        provider = make_provider([])
        assert provider.autocomplete_ingredients("") == []
        assert provider.autocomplete_ingredients("   ") == []
        provider.session.get.assert_not_called()


class TestCaching:
    """Successful non-empty responses are memoized."""

    def test_identical_search_hits_cache(self):
        provider = make_provider([make_response({"results": [RECIPE]})], use_cache=True)

        first = provider.search_by_filters("Tomato")
        second = provider.search_by_filters("tomato ")

        assert provider.session.get.call_count == 1
        assert [r.id for r in first] == [r.id for r in second]

    def test_empty_and_failed_results_are_not_cached(self):
        provider = make_provider([
            make_response({"results": []}),
            make_response(status_code=500),
            make_response({"results": [RECIPE]}),
        ], use_cache=True)

        provider.search_by_filters("tomato")
        provider.search_by_filters("tomato")
        provider.search_by_filters("tomato")

        assert provider.session.get.call_count == 3


class TestClassifyError:
    """Mapping exceptions to status values."""

    def test_classification(self):
        assert classify_error(requests.exceptions.HTTPError(response=Mock(status_code=401))) == "unauthorized"
        assert classify_error(requests.exceptions.HTTPError(response=Mock(status_code=402))) == "quota_exceeded"
        assert classify_error(requests.exceptions.HTTPError(response=Mock(status_code=503))) == "error"
        assert classify_error(requests.exceptions.ConnectionError()) == "error"


class TestSharedProvider:
    """One provider instance serving overlapping requests."""

    def test_each_thread_reads_its_own_status(self):
        """A success on one thread does not overwrite a 402 seen on another."""
        session = Mock()

        def fake_get(url, params=None, timeout=None):
            if params["query"] == "tomato":
                return make_response({"results": [RECIPE]})
            return make_response({"message": "quota"}, status_code=402)

        session.get.side_effect = fake_get
        provider = SpoonacularProvider(
            api_keys=["key-1", "key-2"],
            base_url="https://api.example.test",
            session=session,
            use_cache=False,
        )
        quota_hit = threading.Event()
        success_done = threading.Event()
        statuses = {}

        def succeeding_request():
            quota_hit.wait(timeout=5)
            provider.search_by_filters("tomato")
            statuses["ok_request"] = provider.last_status
            success_done.set()

        def quota_request():
            provider.search_by_filters("basil")
            quota_hit.set()
            success_done.wait(timeout=5)
            statuses["quota_request"] = provider.last_status

        threads = [threading.Thread(target=succeeding_request), threading.Thread(target=quota_request)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert statuses == {"ok_request": "ok", "quota_request": "quota_exceeded"}
        # the calling thread made no request of its own
        assert provider.last_status == "ok"
