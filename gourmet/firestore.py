"""
Minimal Cloud Firestore client over the public REST API.

Only the document operations the saved-recipes store needs are implemented:
upsert (PATCH without update mask), delete, get and list (with pagination).
Requests are authenticated with the signed-in user's Firebase id token, so
Firestore security rules apply exactly as they would for a browser client.

Firestore REST documents wrap every value in a typed envelope:

    {"fields": {"title": {"stringValue": "Soup"}, "servings": {"integerValue": "4"}}}

encode_fields() / decode_fields() convert between that format and plain dicts.

This client raises requests exceptions; callers decide how to handle them.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"

REQUEST_TIMEOUT_SECONDS = 10

# Firestore's maximum page size for list requests
LIST_PAGE_SIZE = 300


def encode_value(value: Any) -> Dict[str, Any]:
    """
    Encode a Python value as a Firestore typed value.

    Examples:
        >>> encode_value(4)
        {'integerValue': '4'}
        >>> encode_value(["vegan"])
        {'arrayValue': {'values': [{'stringValue': 'vegan'}]}}
    """
    # bool must be checked before int
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot encode value of type {type(value).__name__} for Firestore")


def decode_value(value: Dict[str, Any]) -> Any:
    """Decode a Firestore typed value into a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    logger.warning("Unsupported Firestore value type: %s", list(value))
    return None


def encode_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Encode a flat or nested dict as a Firestore 'fields' map."""
    return {key: encode_value(value) for key, value in data.items()}


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a Firestore 'fields' map into a plain dict."""
    return {key: decode_value(value) for key, value in (fields or {}).items()}


def document_id(document: Dict[str, Any]) -> str:
    """Return the last path segment of a document's resource name."""
    return document.get("name", "").rsplit("/", 1)[-1]


class FirestoreClient:
    """
    Document operations on one Firestore database, acting as one user.

    Paths are relative to the database's document root, e.g.
    "users/abc123/savedRecipes/716429".
    """

    def __init__(
        self,
        project_id: str,
        id_token: str,
        base_url: str = FIRESTORE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.project_id = project_id
        self.id_token = id_token
        self.root = f"{base_url.rstrip('/')}/projects/{project_id}/databases/(default)/documents"
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.id_token}"}

    def set_document(self, path: str, data: Dict[str, Any]) -> None:
        """Create or fully replace the document at path."""
        response = self.session.patch(
            f"{self.root}/{path}",
            json={"fields": encode_fields(data)},
            headers=self._headers,
            timeout=self.timeout,
        )
        response.raise_for_status()

    def delete_document(self, path: str) -> None:
        """Delete the document at path (deleting a missing document succeeds)."""
        response = self.session.delete(f"{self.root}/{path}", headers=self._headers, timeout=self.timeout)
        response.raise_for_status()

    def get_document(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Read the document at path.

        Returns:
            Decoded fields, or None if the document does not exist
        """
        response = self.session.get(f"{self.root}/{path}", headers=self._headers, timeout=self.timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return decode_fields(response.json().get("fields", {}))

    def list_documents(self, collection_path: str) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Read every document of a collection, following nextPageToken.

        Returns:
            List of (document id, decoded fields) tuples in Firestore order
        """
        documents: List[Tuple[str, Dict[str, Any]]] = []
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"pageSize": LIST_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token

            response = self.session.get(
                f"{self.root}/{collection_path}",
                params=params,
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()

            for document in payload.get("documents", []):
                documents.append((document_id(document), decode_fields(document.get("fields", {}))))

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        logger.debug("Listed %d documents from %s", len(documents), collection_path)
        return documents
