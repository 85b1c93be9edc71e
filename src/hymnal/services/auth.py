"""Firebase Authentication client for hymnal.

Talks to the Identity Toolkit REST API for e-mail/password and anonymous
sign-in, and keeps the users/{uid} document in the Realtime Database up to
date after each sign-in. Error codes are translated to fixed, user-facing
messages through AUTH_ERROR_MESSAGES.
"""

import re
from datetime import datetime
from typing import Any, Optional

import requests

from hymnal.core.logging_config import get_logger
from hymnal.db.models import Role, Session
from hymnal.services.remote import RealtimeDatabaseClient, RemoteDatabaseError

logger = get_logger(__name__)

IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{action}"
TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

MIN_PASSWORD_LENGTH = 6

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AUTH_ERROR_MESSAGES = {
    "user-not-found": "No account found with this email address",
    "wrong-password": "Incorrect password. Please try again",
    "invalid-email": "Please enter a valid email address",
    "user-disabled": "This account has been disabled. Contact support for help",
    "too-many-requests": "Too many failed attempts. Please wait a few minutes and try again",
    "email-already-in-use": "An account already exists with this email. Try signing in instead",
    "weak-password": "Password is too weak. Please use at least 6 characters",
    "network-request-failed": "Network error. Please check your internet connection",
    "invalid-credential": "Invalid email or password. Please check your credentials",
    "operation-not-allowed": "Email/password accounts are not enabled. Contact support",
    "invalid-display-name": "Please enter your name",
    "not-authenticated": "You need to sign in first",
    "firebase-not-configured": "Online features are not configured. Set firebase.api_key first",
}

# Identity Toolkit error strings -> app error codes
REST_ERROR_CODES = {
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_EMAIL": "invalid-email",
    "MISSING_EMAIL": "invalid-email",
    "USER_DISABLED": "user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "EMAIL_EXISTS": "email-already-in-use",
    "WEAK_PASSWORD": "weak-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "OPERATION_NOT_ALLOWED": "operation-not-allowed",
    "ADMIN_ONLY_OPERATION": "operation-not-allowed",
}


def describe_auth_error(code: str) -> str:
    """Get the user-facing message for an authentication error code.

    Args:
        code: App error code (e.g., "wrong-password")

    Returns:
        Human-readable message
    """
    return AUTH_ERROR_MESSAGES.get(code, f"Authentication failed ({code}). Please try again")


class AuthError(Exception):
    """Authentication failure with an error code."""

    def __init__(self, code: str, detail: Optional[str] = None):
        super().__init__(describe_auth_error(code))
        self.code = code
        self.detail = detail


class NotSignedInError(AuthError):
    """Operation requires a signed-in (non-guest) user."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__("not-authenticated", detail=detail)


def map_rest_error(message: str) -> str:
    """Map an Identity Toolkit error message to an app error code.

    Messages may carry a suffix ("WEAK_PASSWORD : Password should be...").
    """
    key = message.split(":")[0].strip().upper()
    return REST_ERROR_CODES.get(key, key.lower().replace("_", "-") or "unknown-error")


class AuthClient:
    """Client for Firebase Authentication.

    Attributes:
        api_key: Firebase Web API key
        db: Realtime Database client used for user documents (optional)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        db: Optional[RealtimeDatabaseClient] = None,
        timeout: float = 15,
    ):
        """Initialize the auth client.

        Args:
            api_key: Firebase Web API key
            db: Realtime Database client for users/{uid} documents
            timeout: Request timeout in seconds

        Raises:
            AuthError: If no API key is configured
        """
        if not api_key:
            raise AuthError("firebase-not-configured")
        self.api_key = api_key
        self.db = db
        self.timeout = timeout

    def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = requests.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AuthError("network-request-failed", detail=str(e))

        if response.status_code >= 400:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = f"HTTP_{response.status_code}"
            code = map_rest_error(message)
            logger.warning("Auth request failed: %s (%s)", message, code)
            raise AuthError(code, detail=message)

        return response.json()

    @staticmethod
    def validate_email(email: str) -> str:
        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise AuthError("invalid-email")
        return email

    def sign_in(self, email: str, password: str) -> Session:
        """Sign in with e-mail and password.

        Raises:
            AuthError: On invalid input or a rejected sign-in
        """
        email = self.validate_email(email)
        data = self._post(
            IDENTITY_URL.format(action="signInWithPassword"),
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = self._session_from_response(data)
        self._record_sign_in(session)
        logger.info("Signed in %s", session.email)
        return session

    def register(self, email: str, password: str, display_name: str) -> Session:
        """Create an account and its user document.

        Raises:
            AuthError: On invalid input or if the account can't be created
        """
        email = self.validate_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError("weak-password")
        display_name = (display_name or "").strip()
        if not display_name:
            raise AuthError("invalid-display-name")

        data = self._post(
            IDENTITY_URL.format(action="signUp"),
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = self._session_from_response(data)

        self._post(
            IDENTITY_URL.format(action="update"),
            {"idToken": session.id_token, "displayName": display_name, "returnSecureToken": True},
        )
        session.display_name = display_name

        self._record_sign_in(session, display_name)
        logger.info("Registered %s", session.email)
        return session

    def sign_in_anonymously(self) -> Session:
        """Create a guest session."""
        data = self._post(IDENTITY_URL.format(action="signUp"), {"returnSecureToken": True})
        session = self._session_from_response(data, anonymous=True)
        session.display_name = "Guest User"
        self._record_sign_in(session)
        logger.info("Signed in as guest %s", session.uid)
        return session

    def send_password_reset(self, email: str) -> None:
        email = self.validate_email(email)
        self._post(
            IDENTITY_URL.format(action="sendOobCode"),
            {"requestType": "PASSWORD_RESET", "email": email},
        )
        logger.info("Password reset requested for %s", email)

    def refresh(self, session: Session) -> Session:
        """Exchange the refresh token for a new ID token."""
        try:
            response = requests.post(
                TOKEN_URL,
                params={"key": self.api_key},
                data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AuthError("network-request-failed", detail=str(e))

        if response.status_code >= 400:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = f"HTTP_{response.status_code}"
            raise AuthError(map_rest_error(message), detail=message)

        data = response.json()
        session.id_token = data.get("id_token", session.id_token)
        session.refresh_token = data.get("refresh_token", session.refresh_token)
        return session

    def _record_sign_in(self, session: Session, display_name: Optional[str] = None) -> None:
        # The tokens are already issued; a failed users/{uid} write doesn't undo the sign-in
        try:
            self.ensure_user_document(session, display_name)
        except RemoteDatabaseError as e:
            logger.warning("Could not update user document for %s: %s", session.uid, e)

    def ensure_user_document(self, session: Session, display_name: Optional[str] = None) -> None:
        """Create users/{uid} for new users, or touch lastSignIn for existing ones.

        Args:
            session: Signed-in session
            display_name: Display name to store (optional)
        """
        if self.db is None:
            return

        db = self.db.with_token(session.id_token)
        path = f"users/{session.uid}"
        now = datetime.now().isoformat()

        existing = db.get(path)
        if existing is None:
            default_name = "Guest User" if session.is_anonymous else "Hymnal User"
            db.set(
                path,
                {
                    "uid": session.uid,
                    "displayName": display_name or session.display_name or default_name,
                    "email": session.email or ("anonymous@guest.com" if session.is_anonymous else ""),
                    "role": Role.USER.value,
                    "lastSignIn": now,
                    "createdAt": now,
                    "favorites": {},
                },
            )
            logger.info("Created user document for %s", session.uid)
        else:
            updates: dict[str, Any] = {"lastSignIn": now}
            if display_name:
                updates["displayName"] = display_name
            db.update(path, updates)

    @staticmethod
    def _session_from_response(data: dict[str, Any], anonymous: bool = False) -> Session:
        return Session(
            uid=data["localId"],
            email=data.get("email") or "",
            display_name=data.get("displayName") or "",
            id_token=data.get("idToken") or "",
            refresh_token=data.get("refreshToken") or "",
            is_anonymous=anonymous,
        )
