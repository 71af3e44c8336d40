"""
Saved-recipes store (user bookmarks).

Bookmarks live at users/{uid}/savedRecipes/{recipeId}. Unlike the identity
client, this store SWALLOWS failures: every backend error is logged and
converted to False / [] so a flaky connection never breaks the page. The UI
shows a generic "Failed to save recipe" message instead.

Two storage backends are supported:
- FirestoreBackend: Cloud Firestore over REST, authenticated as the user
- MemoryBackend: process-local dict, used when FIREBASE_PROJECT_ID is not set

Note: The in-memory backend is suitable for development only. Bookmarks are
lost on server restart.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from gourmet.difficulty import classify_difficulty
from gourmet.firestore import FirestoreClient
from gourmet.models import SavedRecipe

logger = logging.getLogger(__name__)

SAVED_COLLECTION = "savedRecipes"

# In-memory store: user_id -> {recipe document id -> document}
# Used as fallback when Firestore is not configured
SAVED_STORE: Dict[str, Dict[str, Dict[str, Any]]] = {}


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SavedBackend(ABC):
    """Storage operations for saved-recipe documents. Implementations may raise."""

    @abstractmethod
    def put(self, user_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    def delete(self, user_id: str, doc_id: str) -> None:
        """Delete a document (missing documents are not an error)."""

    @abstractmethod
    def exists(self, user_id: str, doc_id: str) -> bool:
        """Check whether a document exists."""

    @abstractmethod
    def list(self, user_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Return every (document id, data) pair of the user's collection."""


class MemoryBackend(SavedBackend):
    """Process-local backend over SAVED_STORE."""

    def put(self, user_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        SAVED_STORE.setdefault(user_id, {})[doc_id] = dict(data)

    def delete(self, user_id: str, doc_id: str) -> None:
        SAVED_STORE.get(user_id, {}).pop(doc_id, None)

    def exists(self, user_id: str, doc_id: str) -> bool:
        return doc_id in SAVED_STORE.get(user_id, {})

    def list(self, user_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [(doc_id, dict(data)) for doc_id, data in SAVED_STORE.get(user_id, {}).items()]


class FirestoreBackend(SavedBackend):
    """Cloud Firestore backend acting as the signed-in user."""

    def __init__(self, client: FirestoreClient) -> None:
        self.client = client

    @staticmethod
    def _collection(user_id: str) -> str:
        return f"users/{user_id}/{SAVED_COLLECTION}"

    def put(self, user_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.client.set_document(f"{self._collection(user_id)}/{doc_id}", data)

    def delete(self, user_id: str, doc_id: str) -> None:
        self.client.delete_document(f"{self._collection(user_id)}/{doc_id}")

    def exists(self, user_id: str, doc_id: str) -> bool:
        return self.client.get_document(f"{self._collection(user_id)}/{doc_id}") is not None

    def list(self, user_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        return self.client.list_documents(self._collection(user_id))


def clear_memory_store() -> None:
    """Clear all in-memory bookmarks (useful for testing)."""
    SAVED_STORE.clear()


class SavedRecipeStore:
    """
    User-scoped bookmark operations that never raise.

    Args:
        backend: Storage backend (defaults to MemoryBackend)
    """

    def __init__(self, backend: Optional[SavedBackend] = None) -> None:
        self.backend = backend or MemoryBackend()

    def save_recipe(self, user_id: str, recipe_id: int, data: Union[Dict[str, Any], BaseModel]) -> bool:
        """
        Save (upsert) a recipe for a user, stamping savedAt with the current UTC time.

        Args:
            user_id: Owner uid
            recipe_id: Recipe id (also the document id)
            data: Recipe fields to store (dict in camelCase, or a Recipe/SavedRecipe model)

        Returns:
            True on success, False on any failure
        """
        if not user_id:
            logger.warning("save_recipe called without a user; ignoring")
            return False

        try:
            if isinstance(data, BaseModel):
                data = data.model_dump(mode="json", by_alias=True)
            saved = SavedRecipe.model_validate({**data, "id": recipe_id})
            document = saved.model_dump(mode="json", by_alias=True)
            document["savedAt"] = utc_now_iso()
            self.backend.put(user_id, str(recipe_id), document)
        except Exception as e:
            logger.error("Error saving recipe %s for user %s: %s", recipe_id, user_id, e, exc_info=True)
            return False

        logger.info("Saved recipe %s for user %s", recipe_id, user_id)
        return True

    def unsave_recipe(self, user_id: str, recipe_id: int) -> bool:
        """Remove a saved recipe. Returns True on success, False on any failure."""
        if not user_id:
            return False
        try:
            self.backend.delete(user_id, str(recipe_id))
        except Exception as e:
            logger.error("Error removing saved recipe %s for user %s: %s", recipe_id, user_id, e, exc_info=True)
            return False

        logger.info("Removed saved recipe %s for user %s", recipe_id, user_id)
        return True

    def is_saved(self, user_id: str, recipe_id: int) -> bool:
        """Check whether a recipe is saved. Any failure reads as not saved."""
        if not user_id:
            return False
        try:
            return self.backend.exists(user_id, str(recipe_id))
        except Exception as e:
            logger.error("Error checking saved recipe %s for user %s: %s", recipe_id, user_id, e, exc_info=True)
            return False

    def list_saved(self, user_id: str) -> List[SavedRecipe]:
        """
        List a user's saved recipes.

        The document id is mapped back to the numeric recipe id and difficulty
        is recomputed from ready_in_minutes. Documents that cannot be parsed
        are skipped.

        Returns:
            Saved recipes in storage order, or [] on any failure
        """
        if not user_id:
            return []
        try:
            documents = self.backend.list(user_id)
        except Exception as e:
            logger.error("Error getting saved recipes for user %s: %s", user_id, e, exc_info=True)
            return []

        recipes: List[SavedRecipe] = []
        for doc_id, data in documents:
            try:
                recipe = SavedRecipe.model_validate({**data, "id": int(doc_id)})
            except Exception as e:
                logger.warning("Skipping malformed saved recipe %r for user %s: %s", doc_id, user_id, e)
                continue
            recipes.append(recipe.model_copy(update={"difficulty": classify_difficulty(recipe.ready_in_minutes)}))
        return recipes
