"""Tests for the Firebase Authentication client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from hymnal.services.auth import (
    AuthClient,
    AuthError,
    NotSignedInError,
    describe_auth_error,
    map_rest_error,
)
from hymnal.services.remote import RemoteDatabaseError, RemoteTimeoutError


def make_response(json_data, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    return response


def error_response(message, status_code=400):
    return make_response({"error": {"code": status_code, "message": message}}, status_code)


SIGN_IN_RESPONSE = {
    "localId": "user-1",
    "email": "singer@example.com",
    "displayName": "Singer",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
}


@pytest.fixture
def client(fake_db):
    return AuthClient("api-key", fake_db, timeout=3)


class TestErrorMessages:
    @pytest.mark.parametrize(
        "code,message",
        [
            ("user-not-found", "No account found with this email address"),
            ("wrong-password", "Incorrect password. Please try again"),
            ("too-many-requests", "Too many failed attempts. Please wait a few minutes and try again"),
            ("network-request-failed", "Network error. Please check your internet connection"),
        ],
    )
    def test_known_codes(self, code, message):
        assert describe_auth_error(code) == message

    def test_unknown_code(self):
        assert describe_auth_error("quota-exceeded") == "Authentication failed (quota-exceeded). Please try again"

    def test_map_rest_error(self):
        assert map_rest_error("EMAIL_NOT_FOUND") == "user-not-found"
        assert map_rest_error("WEAK_PASSWORD : Password should be at least 6 characters") == "weak-password"
        assert map_rest_error("QUOTA_EXCEEDED") == "quota-exceeded"

    def test_auth_error_message(self):
        error = AuthError("invalid-email")

        assert error.code == "invalid-email"
        assert str(error) == "Please enter a valid email address"

    def test_not_signed_in_error(self):
        assert NotSignedInError().code == "not-authenticated"


class TestSignIn:
    def test_requires_api_key(self):
        with pytest.raises(AuthError) as exc_info:
            AuthClient("")

        assert exc_info.value.code == "firebase-not-configured"

    @patch("hymnal.services.auth.requests.post")
    def test_sign_in_returns_session_and_creates_user(self, mock_post, client, fake_db):
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        session = client.sign_in(" singer@example.com ", "secret1")

        assert session.uid == "user-1"
        assert session.id_token == "id-token"
        assert not session.is_anonymous
        assert mock_post.call_args.kwargs["params"] == {"key": "api-key"}
        assert mock_post.call_args.kwargs["json"]["email"] == "singer@example.com"

        user = fake_db.node("users/user-1")
        assert user["role"] == "user"
        assert user["favorites"] == {}
        assert "createdAt" in user
        assert fake_db.tokens == ["id-token"]

    @patch("hymnal.services.auth.requests.post")
    def test_existing_user_only_touches_last_sign_in(self, mock_post, client, fake_db):
        fake_db.data = {"users": {"user-1": {"role": "admin", "createdAt": "2020", "displayName": "Old"}}}
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        client.sign_in("singer@example.com", "secret1")

        user = fake_db.node("users/user-1")
        assert user["role"] == "admin"
        assert user["createdAt"] == "2020"
        assert user["displayName"] == "Old"
        assert "lastSignIn" in user

    @patch("hymnal.services.auth.requests.post")
    def test_wrong_password(self, mock_post, client):
        mock_post.return_value = error_response("INVALID_PASSWORD")

        with pytest.raises(AuthError) as exc_info:
            client.sign_in("singer@example.com", "nope")

        assert exc_info.value.code == "wrong-password"
        assert str(exc_info.value) == "Incorrect password. Please try again"

    @patch("hymnal.services.auth.requests.post")
    def test_network_failure(self, mock_post, client):
        mock_post.side_effect = requests.exceptions.ConnectionError("offline")

        with pytest.raises(AuthError) as exc_info:
            client.sign_in("singer@example.com", "secret1")

        assert exc_info.value.code == "network-request-failed"

    @patch("hymnal.services.auth.requests.post")
    def test_invalid_email_checked_locally(self, mock_post, client):
        with pytest.raises(AuthError) as exc_info:
            client.sign_in("not-an-email", "secret1")

        assert exc_info.value.code == "invalid-email"
        mock_post.assert_not_called()

    @patch("hymnal.services.auth.requests.post")
    def test_works_without_database(self, mock_post):
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        session = AuthClient("api-key").sign_in("singer@example.com", "secret1")

        assert session.email == "singer@example.com"

    @patch("hymnal.services.auth.requests.post")
    def test_user_document_failure_keeps_session(self, mock_post, client, fake_db):
        fake_db.fail_with = RemoteDatabaseError("permission denied", 403)
        mock_post.return_value = make_response(SIGN_IN_RESPONSE)

        session = client.sign_in("singer@example.com", "secret1")

        assert session.uid == "user-1"
        assert session.id_token == "id-token"

    @patch("hymnal.services.auth.requests.post")
    def test_unreachable_database_keeps_guest_session(self, mock_post, client, fake_db):
        fake_db.fail_with = RemoteTimeoutError("slow")
        mock_post.return_value = make_response({"localId": "guest-1", "idToken": "g", "refreshToken": "r"})

        session = client.sign_in_anonymously()

        assert session.uid == "guest-1"
        assert session.is_anonymous

    def test_ensure_user_document_raises_database_errors(self, client, fake_db, user_session):
        fake_db.fail_with = RemoteDatabaseError("permission denied", 403)

        with pytest.raises(RemoteDatabaseError):
            client.ensure_user_document(user_session)


class TestRegister:
    @patch("hymnal.services.auth.requests.post")
    def test_weak_password_checked_locally(self, mock_post, client):
        with pytest.raises(AuthError) as exc_info:
            client.register("new@example.com", "12345", "New")

        assert exc_info.value.code == "weak-password"
        mock_post.assert_not_called()

    @patch("hymnal.services.auth.requests.post")
    def test_empty_name(self, mock_post, client):
        with pytest.raises(AuthError) as exc_info:
            client.register("new@example.com", "123456", "  ")

        assert exc_info.value.code == "invalid-display-name"

    @patch("hymnal.services.auth.requests.post")
    def test_register_sets_display_name(self, mock_post, client, fake_db):
        mock_post.side_effect = [
            make_response({**SIGN_IN_RESPONSE, "displayName": ""}),
            make_response({"displayName": "New Singer"}),
        ]

        session = client.register("singer@example.com", "123456", "New Singer")

        assert session.display_name == "New Singer"
        assert "accounts:update" in mock_post.call_args_list[1].args[0]
        assert fake_db.node("users/user-1/displayName") == "New Singer"

    @patch("hymnal.services.auth.requests.post")
    def test_email_exists(self, mock_post, client):
        mock_post.return_value = error_response("EMAIL_EXISTS")

        with pytest.raises(AuthError) as exc_info:
            client.register("singer@example.com", "123456", "Singer")

        assert exc_info.value.code == "email-already-in-use"


class TestGuestAndReset:
    @patch("hymnal.services.auth.requests.post")
    def test_anonymous_session(self, mock_post, client, fake_db):
        mock_post.return_value = make_response({"localId": "guest-1", "idToken": "g-token", "refreshToken": "r"})

        session = client.sign_in_anonymously()

        assert session.is_anonymous
        assert session.display_name == "Guest User"
        assert fake_db.node("users/guest-1/displayName") == "Guest User"

    @patch("hymnal.services.auth.requests.post")
    def test_password_reset(self, mock_post, client):
        mock_post.return_value = make_response({"email": "singer@example.com"})

        client.send_password_reset("singer@example.com")

        payload = mock_post.call_args.kwargs["json"]
        assert payload == {"requestType": "PASSWORD_RESET", "email": "singer@example.com"}

    @patch("hymnal.services.auth.requests.post")
    def test_refresh_updates_tokens(self, mock_post, client, user_session):
        mock_post.return_value = make_response({"id_token": "new-id", "refresh_token": "new-refresh"})

        session = client.refresh(user_session)

        assert session.id_token == "new-id"
        assert session.refresh_token == "new-refresh"
        assert mock_post.call_args.kwargs["data"]["grant_type"] == "refresh_token"
