"""
Configuration management for Gourmet Guru.

This module centralizes environment variable loading from .env file at project root.
It should be imported early in both backend (api/main.py) and frontend (streamlit_app/app.py)
to ensure .env is loaded before any other code accesses environment variables.

In production, .env will not exist, but load_dotenv() is safe to call and will no-op.
Environment variables from the hosting platform will be used instead.

Environment Variables:
- SPOONACULAR_API_KEY_1: Required, primary Spoonacular API key
- SPOONACULAR_API_KEY_2: Optional, second key used in rotation
- SPOONACULAR_API_KEYS: Optional, comma-separated alternative to the numbered keys
- SPOONACULAR_BASE_URL: Optional, defaults to "https://api.spoonacular.com"
- FIREBASE_API_KEY: Required for sign-in/sign-up (Firebase web API key)
- FIREBASE_PROJECT_ID: Required for Firestore-backed saved recipes (in-memory fallback otherwise)
- BACKEND_URL: Optional, backend URL used by the Streamlit frontend (defaults to http://localhost:8000)
- LOG_LEVEL: Optional, root log level (defaults to INFO)
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from gourmet.providers.spoonacular import load_api_keys_from_env


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    This function locates the project root by going up from this file's location
    (api/config.py -> project root) and loads .env if it exists.

    Safe to call multiple times. Existing environment variables take precedence.
    """
    # Get project root: api/config.py -> api/ -> project root
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


def configure_logging() -> None:
    """
    Apply LOG_LEVEL to the root logger.

    Only configures handlers when none are installed yet, so uvicorn's and
    Streamlit's own logging setup is left alone.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(level)


# Load .env file and apply the log level on module import
load_env_file()
configure_logging()


class SpoonacularConfig:
    """Configuration for the Spoonacular recipe provider."""

    @staticmethod
    def get_api_keys() -> List[str]:
        """
        Get all configured Spoonacular API keys, in rotation order.

        Returns:
            List of key strings (empty if none is set)

        Note:
            This does not raise an error - the provider validates on construction.
        """
        return load_api_keys_from_env()


class FirebaseConfig:
    """Configuration for Firebase Authentication and Cloud Firestore."""

    @staticmethod
    def get_api_key() -> Optional[str]:
        """Get the Firebase web API key, or None if not set."""
        return os.getenv("FIREBASE_API_KEY")

    @staticmethod
    def get_project_id() -> Optional[str]:
        """Get the Firebase project id, or None if not set."""
        return os.getenv("FIREBASE_PROJECT_ID")


def get_required_env_vars() -> dict:
    """
    Get a dictionary of all required environment variables and their status.

    Returns:
        Dictionary with keys:
        - spoonacular_api_key: bool (True if at least one key is set)
        - firebase_api_key: bool (True if set)
        - firebase_project_id: bool (True if set)
    """
    return {
        "spoonacular_api_key": bool(SpoonacularConfig.get_api_keys()),
        "firebase_api_key": FirebaseConfig.get_api_key() is not None,
        "firebase_project_id": FirebaseConfig.get_project_id() is not None,
    }


def validate_required_config() -> None:
    """
    Validate that all required environment variables are set.

    Raises:
        RuntimeError: If any required configuration is missing

    Note:
        This is a convenience function. The provider and the identity client
        also validate their own configuration and raise RuntimeError if missing.
    """
    missing = []

    if not SpoonacularConfig.get_api_keys():
        missing.append("SPOONACULAR_API_KEY_1 (required for recipe search)")

    if not FirebaseConfig.get_api_key():
        missing.append("FIREBASE_API_KEY (required for login and saved recipes)")

    if not FirebaseConfig.get_project_id():
        missing.append("FIREBASE_PROJECT_ID (required for saved recipes in Firestore)")

    if missing:
        raise RuntimeError(
            "Missing required environment variables:\n" +
            "\n".join(f"  - {var}" for var in missing) +
            "\n\nPlease create a .env file at the project root with these variables."
        )
