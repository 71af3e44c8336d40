"""
Tests for the Firebase Authentication client.
"""

import os
from unittest.mock import Mock, patch

import pytest
import requests

from gourmet.identity import AuthError, FirebaseIdentity, message_for_code
from gourmet.models import Identity


def make_response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def identity(session):
    return FirebaseIdentity(api_key="web-key", base_url="https://auth.example.test/v1", session=session)


SIGN_IN_PAYLOAD = {
    "localId": "uid-1",
    "email": "cook@example.com",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
    "expiresIn": "3600",
}


class TestConfiguration:

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_api_key_raises(self):
        with pytest.raises(RuntimeError):
            FirebaseIdentity()

    @patch.dict(os.environ, {"FIREBASE_API_KEY": "env-key"}, clear=True)
    def test_reads_api_key_from_env(self):
        assert FirebaseIdentity(session=Mock()).api_key == "env-key"


class TestSignInAndSignUp:
    """Credential flows."""

    def test_sign_in(self, identity, session):
        session.post.return_value = make_response(SIGN_IN_PAYLOAD)

        user = identity.sign_in("cook@example.com", "secret1")

        assert session.post.call_args.args[0] == "https://auth.example.test/v1/accounts:signInWithPassword"
        assert session.post.call_args.kwargs["params"] == {"key": "web-key"}
        assert session.post.call_args.kwargs["json"] == {
            "email": "cook@example.com",
            "password": "secret1",
            "returnSecureToken": True,
        }
        assert user.uid == "uid-1"
        assert user.id_token == "id-token"
        assert user.expires_in == 3600

    def test_sign_up(self, identity, session):
        session.post.return_value = make_response(SIGN_IN_PAYLOAD)
        user = identity.sign_up("cook@example.com", "secret1")
        assert session.post.call_args.args[0].endswith("accounts:signUp")
        assert user.email == "cook@example.com"

    def test_existing_email_is_reported(self, identity, session):
        session.post.return_value = make_response({"error": {"message": "EMAIL_EXISTS"}}, status_code=400)

        with pytest.raises(AuthError) as exc_info:
            identity.sign_up("cook@example.com", "secret1")

        assert exc_info.value.code == "EMAIL_EXISTS"
        assert exc_info.value.message == "An account with this email already exists."

    def test_weak_password_with_detail(self, identity, session):
        session.post.return_value = make_response(
            {"error": {"message": "WEAK_PASSWORD : Password should be at least 6 characters"}},
            status_code=400,
        )
        with pytest.raises(AuthError) as exc_info:
            identity.sign_up("cook@example.com", "123")
        assert exc_info.value.code == "WEAK_PASSWORD"

    def test_network_failure(self, identity, session):
        session.post.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(AuthError) as exc_info:
            identity.sign_in("cook@example.com", "secret1")
        assert exc_info.value.code == "NETWORK_ERROR"

    def test_sign_out_never_raises(self, identity, session):
        identity.sign_out(None)
        identity.sign_out(Identity(uid="uid-1"))
        session.post.assert_not_called()


class TestLookup:
    """Resolving id tokens."""

    def test_lookup(self, identity, session):
        session.post.return_value = make_response({"users": [{"localId": "uid-1", "email": "cook@example.com"}]})

        user = identity.lookup("id-token")

        assert session.post.call_args.kwargs["json"] == {"idToken": "id-token"}
        assert user.uid == "uid-1"
        assert user.id_token == "id-token"

    def test_empty_token(self, identity, session):
        with pytest.raises(AuthError):
            identity.lookup("")
        session.post.assert_not_called()

    def test_unknown_token(self, identity, session):
        session.post.return_value = make_response({"users": []})
        with pytest.raises(AuthError) as exc_info:
            identity.lookup("stale")
        assert exc_info.value.code == "USER_NOT_FOUND"


def test_unknown_code_uses_default_message():
    assert message_for_code("SOMETHING_NEW") == "Authentication failed. Please try again."
