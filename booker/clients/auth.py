"""Client for the authentication endpoint."""

from __future__ import annotations

from booker.clients.base import ApiClient
from booker.constants import AUTH_PATH, TOKEN_COOKIE_NAME
from booker.exchange import HttpExchange
from booker.models import CredentialPayload


def cookie_header(token: str) -> str:
    """Render a token as the Cookie header value the API expects."""
    return f"{TOKEN_COOKIE_NAME}={token}"


def extract_token(exchange: HttpExchange) -> str | None:
    """Return the non-blank token of a successful login, else None."""
    if exchange.status_code != 200:
        return None

    token = exchange.get("token")
    if not isinstance(token, str) or not token.strip():
        return None

    return token


class AuthClient(ApiClient):
    """Client for POST /auth/login."""

    def create_token(self, credentials: CredentialPayload) -> HttpExchange:
        """Request a session token.

        Parameters
        ----------
        credentials : CredentialPayload
            Well-formed credential pair, or a raw body for missing/extra
            field tests

        Returns
        -------
        HttpExchange
            200 with a token, or 401 for rejected credentials
        """
        return self._request("POST", AUTH_PATH, payload=credentials)
