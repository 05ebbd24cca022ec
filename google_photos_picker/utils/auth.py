"""Authentication utilities for Google Photos Picker API."""

import logging
import time
from typing import Callable, Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials as GoogleCredentials

from google_photos_picker.models import AuthError, Credentials, Token, TransportError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"

# Scope the refresh token must have been granted.
SCOPES = ["https://www.googleapis.com/auth/photospicker.mediaitems.readonly"]


def load_credentials(token_path: str) -> Credentials:
    """Load credentials from an authorized user token file.

    Args:
        token_path: Path to token.json file

    Returns:
        Credentials with the client and refresh token from the file

    Raises:
        AuthError: If the file is missing, unreadable or has no refresh token
    """
    try:
        creds = GoogleCredentials.from_authorized_user_file(token_path, SCOPES)
    except (OSError, ValueError, GoogleAuthError) as e:
        logger.error("Could not load credentials from %s: %s", token_path, e)
        raise AuthError("invalid_token_file", f"{token_path}: {e}") from e
    if not creds.refresh_token:
        raise AuthError("invalid_grant", f"No refresh token in {token_path}")
    return Credentials(
        client_id=creds.client_id,
        client_secret=creds.client_secret,
        refresh_token=creds.refresh_token,
    )


class TokenProvider:
    """Hands out access tokens for a set of credentials.

    The last token fetched is cached and reused while it has not expired.
    There is no safety margin: a token expiring one millisecond from now is
    still returned.
    """

    def __init__(
        self,
        credentials: Credentials,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        token: Optional[Token] = None,
    ):
        """Initialize the token provider.

        Args:
            credentials: Application and user credentials
            http: Session used for the token exchange
            clock: Returns the current time in epoch seconds
            token: Optionally a previously obtained access token
        """
        self.credentials = credentials
        self.http = http
        self.clock = clock
        self.token = token

    def get_token(self) -> Token:
        """Return a valid access token, refreshing it if needed."""
        if self.token is not None:
            if self.token.is_valid(self.clock()):
                return self.token
            logger.debug("Cached access token expired, refreshing")
            self.token = None

        self.token = self._exchange_refresh_token()
        return self.token

    def _exchange_refresh_token(self) -> Token:
        params = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "refresh_token": self.credentials.refresh_token,
            "grant_type": "refresh_token",
        }
        client = self.http if self.http is not None else requests
        try:
            response = client.post(TOKEN_URL, data=params)
        except requests.RequestException as e:
            raise TransportError(f"Token exchange failed: {e}") from e
        now = self.clock()

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Token endpoint returned non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from e

        access_token = data.get("access_token") or ""
        expires_in = int(data.get("expires_in") or 0)
        if not access_token or expires_in <= 0:
            error = AuthError(data.get("error", ""), data.get("error_description", ""))
            logger.error("Token exchange failed: %s", error)
            raise error

        logger.info("Obtained new access token valid for %d seconds", expires_in)
        return Token(
            access_token=access_token,
            expires_in=expires_in,
            expires_at=now + expires_in,
            scope=data.get("scope", ""),
            token_type=data.get("token_type", "Bearer"),
        )
