"""
Difficulty classification and grouping for recipes.

Difficulty is a coarse three-tier label derived purely from preparation time:
- easy:   ready in 20 minutes or less
- medium: ready in 21 to 45 minutes
- hard:   anything longer

The label is recomputed locally on every load and every detail fetch; it is
never trusted from upstream.
"""

from typing import Dict, Iterable, List, Optional, TypeVar

from gourmet.models import DIFFICULTY_LEVELS, Difficulty

EASY_MAX_MINUTES = 20
MEDIUM_MAX_MINUTES = 45

T = TypeVar("T")


def classify_difficulty(minutes: Optional[int]) -> Difficulty:
    """
    Classify a preparation time into a difficulty label.

    Args:
        minutes: Ready-in time in minutes (None or negative values count as 0)

    Returns:
        "easy", "medium" or "hard"

    Examples:
        >>> classify_difficulty(20)
        'easy'
        >>> classify_difficulty(21)
        'medium'
        >>> classify_difficulty(46)
        'hard'
    """
    minutes = max(minutes or 0, 0)
    if minutes <= EASY_MAX_MINUTES:
        return "easy"
    if minutes <= MEDIUM_MAX_MINUTES:
        return "medium"
    return "hard"


def with_difficulty(recipes: Iterable[T]) -> List[T]:
    """Return copies of the recipes with difficulty recomputed from ready_in_minutes."""
    return [
        recipe.model_copy(update={"difficulty": classify_difficulty(recipe.ready_in_minutes)})
        for recipe in recipes
    ]


def group_by_difficulty(recipes: Iterable[T]) -> Dict[str, List[T]]:
    """
    Partition recipes into difficulty buckets.

    Each recipe lands in exactly one bucket, chosen by classify_difficulty() on
    its own ready_in_minutes. Relative order inside a bucket is the input order.
    Buckets are returned in easy -> medium -> hard order and empty buckets are
    omitted entirely.

    Args:
        recipes: Recipe-like objects exposing ready_in_minutes

    Returns:
        Dictionary mapping difficulty label to the recipes in that bucket
    """
    buckets: Dict[str, List[T]] = {level: [] for level in DIFFICULTY_LEVELS}
    for recipe in recipes:
        buckets[classify_difficulty(recipe.ready_in_minutes)].append(recipe)
    return {level: members for level, members in buckets.items() if members}
