from abc import ABC, abstractmethod

from google.auth import exceptions as auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.logging.logger import Log


class BaseIdentityVerifier(ABC):
    @abstractmethod
    def verify(self, token: str) -> str | None:
        """Return the caller's user id, or None when the token is not valid."""
        raise NotImplementedError


class FirebaseIdentityVerifier(BaseIdentityVerifier):
    """Verifies Firebase ID tokens issued for ``project_id``."""

    def __init__(self, project_id: str) -> None:
        self._project_id = project_id
        self._request = google_requests.Request()

    def verify(self, token: str) -> str | None:
        try:
            claims = id_token.verify_firebase_token(
                token, self._request, audience=self._project_id or None
            )
        except (ValueError, auth_exceptions.GoogleAuthError) as exc:
            Log.warning(f"ID token verification failed: {exc}")
            return None
        if not claims:
            return None
        return claims.get("user_id") or claims.get("sub")


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
