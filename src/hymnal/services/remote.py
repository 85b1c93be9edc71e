"""HTTP client for the Firebase Realtime Database REST API.

Every node is addressed as `<database_url>/<path>.json`; reads are GET,
writes are PUT (set), PATCH (update), POST (push) and DELETE. The signed-in
user's ID token is sent as the `auth` query parameter.
"""

from typing import Any, Optional

import requests

from hymnal.core.logging_config import get_logger

logger = get_logger(__name__)


class RemoteDatabaseError(Exception):
    """Error communicating with the Realtime Database."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteTimeoutError(RemoteDatabaseError):
    """The Realtime Database did not answer within the timeout."""


class RealtimeDatabaseClient:
    """Client for reading and writing Realtime Database nodes.

    Attributes:
        base_url: Database root URL (e.g., https://<project>.firebaseio.com)
        timeout: Default request timeout in seconds
        auth_token: Optional ID token sent with every request
    """

    def __init__(self, base_url: str, timeout: float = 15, auth_token: Optional[str] = None):
        """Initialize the database client.

        Args:
            base_url: Database root URL
            timeout: Request timeout in seconds
            auth_token: ID token of the signed-in user

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("Realtime Database URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth_token = auth_token
        self.session = requests.Session()

    def with_token(self, auth_token: Optional[str]) -> "RealtimeDatabaseClient":
        """Return a client for the same database authenticated as another user."""
        return RealtimeDatabaseClient(self.base_url, timeout=self.timeout, auth_token=auth_token)

    def url_for(self, path: str) -> str:
        """Build the REST URL for a node path.

        Args:
            path: Slash separated node path ("users/abc/favorites")

        Returns:
            Full URL ending in .json
        """
        clean = path.strip("/")
        if not clean:
            return f"{self.base_url}/.json"
        return f"{self.base_url}/{clean}.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self.auth_token} if self.auth_token else {}

    def _request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        url = self.url_for(path)
        logger.debug("%s %s", method, path)
        try:
            response = self.session.request(
                method,
                url,
                params=self._params(),
                json=payload,
                timeout=timeout if timeout is not None else self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise RemoteTimeoutError(f"Request to {path} timed out: {e}")
        except requests.exceptions.ConnectionError as e:
            raise RemoteDatabaseError(f"Cannot connect to {self.base_url}: {e}")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise RemoteDatabaseError(f"{method} {path} failed: {e}", status_code=status)
        except requests.exceptions.RequestException as e:
            raise RemoteDatabaseError(f"{method} {path} failed: {e}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteDatabaseError(f"Invalid JSON from {path}: {e}")

    def get(self, path: str, timeout: Optional[float] = None) -> Any:
        """Read a node; returns None when it doesn't exist."""
        return self._request("GET", path, timeout=timeout)

    def set(self, path: str, value: Any) -> Any:
        """Replace a node with `value`."""
        return self._request("PUT", path, payload=value)

    def update(self, path: str, values: dict[str, Any]) -> Any:
        """Merge `values` into a node. Keys may be nested paths; None deletes."""
        return self._request("PATCH", path, payload=values)

    def delete(self, path: str) -> None:
        """Remove a node."""
        self._request("DELETE", path)

    def push(self, path: str, value: Any) -> str:
        """Append a child with a generated key.

        Returns:
            The generated child key
        """
        result = self._request("POST", path, payload=value)
        if not isinstance(result, dict) or "name" not in result:
            raise RemoteDatabaseError(f"Push to {path} returned no key")
        return result["name"]

    def close(self) -> None:
        self.session.close()
