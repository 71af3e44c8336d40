"""
Tests for difficulty classification and grouping.

Difficulty is derived from ready_in_minutes only:
<= 20 easy, <= 45 medium, otherwise hard.
"""

import pytest

from gourmet.difficulty import classify_difficulty, group_by_difficulty, with_difficulty
from gourmet.models import Recipe


def make_recipe(recipe_id: int, minutes: int, **extra) -> Recipe:
    return Recipe(id=recipe_id, title=f"Recipe {recipe_id}", ready_in_minutes=minutes, **extra)


class TestClassifyDifficulty:
    """Threshold behaviour of classify_difficulty."""

    @pytest.mark.parametrize("minutes,expected", [
        (0, "easy"),
        (20, "easy"),
        (21, "medium"),
        (45, "medium"),
        (46, "hard"),
        (240, "hard"),
    ])
    def test_thresholds(self, minutes, expected):
        """Boundaries are inclusive on the lower label."""
        assert classify_difficulty(minutes) == expected

    def test_none_and_negative_count_as_zero(self):
        """Missing or negative times are treated as 0 minutes."""
        assert classify_difficulty(None) == "easy"
        assert classify_difficulty(-5) == "easy"


class TestWithDifficulty:
    """with_difficulty recomputes the label instead of trusting input."""

    def test_overrides_upstream_difficulty(self):
        """A wrong upstream label is replaced."""
        recipe = make_recipe(1, 90, difficulty="easy")
        result = with_difficulty([recipe])
        assert result[0].difficulty == "hard"
        # Original is untouched
        assert recipe.difficulty == "easy"


class TestGroupByDifficulty:
    """Partitioning recipes into difficulty buckets."""

    def test_every_recipe_lands_in_exactly_one_bucket(self):
        """Total across buckets equals input length and each bucket matches the classifier."""
        recipes = [make_recipe(i, m) for i, m in enumerate([5, 30, 60, 20, 45, 46])]
        groups = group_by_difficulty(recipes)

        assert sum(len(members) for members in groups.values()) == len(recipes)
        for level, members in groups.items():
            assert all(classify_difficulty(r.ready_in_minutes) == level for r in members)

    def test_bucket_order_and_stable_members(self):
        """Buckets come easy -> medium -> hard and keep input order inside."""
        recipes = [make_recipe(1, 60), make_recipe(2, 10), make_recipe(3, 30), make_recipe(4, 15)]
        groups = group_by_difficulty(recipes)

        assert list(groups.keys()) == ["easy", "medium", "hard"]
        assert [r.id for r in groups["easy"]] == [2, 4]

    def test_empty_buckets_are_omitted(self):
        """Only non-empty buckets appear."""
        groups = group_by_difficulty([make_recipe(1, 10), make_recipe(2, 12)])
        assert list(groups.keys()) == ["easy"]

    def test_uses_own_minutes_not_stored_label(self):
        """Grouping ignores a stale difficulty attribute."""
        groups = group_by_difficulty([make_recipe(1, 100, difficulty="easy")])
        assert list(groups.keys()) == ["hard"]

    def test_empty_input(self):
        assert group_by_difficulty([]) == {}
