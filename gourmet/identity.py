"""
Firebase Authentication client using the public Identity Toolkit REST API.

Email/password accounts are delegated to Firebase Authentication. Unlike the
saved-recipes store, this client PROPAGATES failures: every rejected sign-in,
sign-up or token lookup raises AuthError with a human-readable message, which
the backend passes on to the user unchanged.

Requires FIREBASE_API_KEY in .env or the environment.

# NOTE: sign_out() is stateless. The REST API cannot revoke refresh tokens
    without admin credentials, so signing out means the client forgets its
    tokens; the id token itself expires on its own (1 hour).
"""

import logging
import os
from typing import Any, Dict, Optional

import requests

from gourmet.models import Identity

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

REQUEST_TIMEOUT_SECONDS = 10

# Firebase error codes -> messages shown to the user
AUTH_ERROR_MESSAGES: Dict[str, str] = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "EMAIL_NOT_FOUND": "No account found with this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "INVALID_EMAIL": "Please enter a valid email address.",
    "MISSING_EMAIL": "Please enter your email address.",
    "MISSING_PASSWORD": "Please enter your password.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
    "OPERATION_NOT_ALLOWED": "Email/password sign-in is not enabled for this project.",
    "INVALID_ID_TOKEN": "Your session has expired. Please log in again.",
    "TOKEN_EXPIRED": "Your session has expired. Please log in again.",
    "USER_NOT_FOUND": "Your session has expired. Please log in again.",
}

DEFAULT_AUTH_ERROR_MESSAGE = "Authentication failed. Please try again."


class AuthError(Exception):
    """
    Raised when Firebase Authentication rejects a request.

    Attributes:
        message: Human-readable message safe to show to the user
        code: Raw Firebase error code (e.g. "EMAIL_EXISTS"), or "NETWORK_ERROR"
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def message_for_code(code: str) -> str:
    """
    Map a Firebase error code to a user-facing message.

    Firebase sometimes appends detail to the code ("WEAK_PASSWORD : Password
    should be at least 6 characters"); only the part before " : " is used.
    """
    return AUTH_ERROR_MESSAGES.get(code.split(" : ")[0].strip(), DEFAULT_AUTH_ERROR_MESSAGE)


class FirebaseIdentity:
    """Email/password identity provider backed by Firebase Authentication."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the identity client.

        Args:
            api_key: Firebase web API key (reads FIREBASE_API_KEY if not provided)
            base_url: Identity Toolkit base URL
            session: Optional requests.Session to reuse connections
            timeout: Per-request timeout in seconds

        Raises:
            RuntimeError: If no Firebase API key is configured.
        """
        self.api_key = api_key or os.getenv("FIREBASE_API_KEY")
        if not self.api_key:
            raise RuntimeError(
                "Firebase is not configured. Add FIREBASE_API_KEY to your .env file at the project root."
            )
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST to an accounts:* endpoint and return the decoded body.

        Raises:
            AuthError: On any rejection or transport failure
        """
        url = f"{self.base_url}/accounts:{action}"
        try:
            response = self.session.post(url, params={"key": self.api_key}, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Firebase Auth %s request failed: %s", action, e)
            raise AuthError("Could not reach the authentication service. Please try again.", "NETWORK_ERROR") from e

        if response.status_code >= 400:
            code = "UNKNOWN"
            try:
                code = str(response.json().get("error", {}).get("message") or code)
            except ValueError:
                pass
            logger.warning("Firebase Auth %s rejected (HTTP %s): %s", action, response.status_code, code)
            raise AuthError(message_for_code(code), code.split(" : ")[0].strip())

        try:
            return response.json()
        except ValueError as e:
            logger.error("Firebase Auth %s returned a non-JSON body", action)
            raise AuthError(DEFAULT_AUTH_ERROR_MESSAGE, "INVALID_RESPONSE") from e

    @staticmethod
    def _identity_from_payload(payload: Dict[str, Any]) -> Identity:
        expires_in = payload.get("expiresIn")
        return Identity(
            uid=payload.get("localId", ""),
            email=payload.get("email"),
            id_token=payload.get("idToken"),
            refresh_token=payload.get("refreshToken"),
            expires_in=int(expires_in) if expires_in else None,
        )

    def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Returns:
            Identity with id and refresh tokens

        Raises:
            AuthError: If the credentials are rejected
        """
        payload = self._post("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        identity = self._identity_from_payload(payload)
        logger.info("User signed in: uid=%s", identity.uid)
        return identity

    def sign_up(self, email: str, password: str) -> Identity:
        """
        Create an account and sign it in.

        Raises:
            AuthError: If the account cannot be created (e.g. EMAIL_EXISTS, WEAK_PASSWORD)
        """
        payload = self._post("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        identity = self._identity_from_payload(payload)
        logger.info("Account created: uid=%s", identity.uid)
        return identity

    def sign_out(self, user: Optional[Identity]) -> None:
        """Forget the user client-side. Never raises."""
        if user is None:
            return
        logger.info("User signed out: uid=%s", user.uid)

    def lookup(self, id_token: str) -> Identity:
        """
        Resolve an id token to the user it belongs to.

        Raises:
            AuthError: If the token is missing, invalid or expired
        """
        if not id_token:
            raise AuthError(message_for_code("INVALID_ID_TOKEN"), "INVALID_ID_TOKEN")

        payload = self._post("lookup", {"idToken": id_token})
        users = payload.get("users") or []
        if not users:
            raise AuthError(message_for_code("USER_NOT_FOUND"), "USER_NOT_FOUND")
        return Identity(uid=users[0].get("localId", ""), email=users[0].get("email"), id_token=id_token)
