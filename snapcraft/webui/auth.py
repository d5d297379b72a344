"""Token authentication and session cookies for the web interface."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from http.cookies import Morsel, SimpleCookie

SESSION_COOKIE_MAX_AGE = 7 * 24 * 3600
_EPOCH_EXPIRES = "Thu, 01 Jan 1970 00:00:00 GMT"


class Auth:
    """Checks access tokens and builds the session cookie carrying them."""

    def __init__(self, token: str, cookie_name: str):
        self._token = token
        self.cookie_name = cookie_name

    def valid_token(self, token: str) -> bool:
        """True if token equals the configured one; an empty token is never valid."""
        if not self._token or not token:
            return False
        return hmac.compare_digest(self._token.encode(), token.encode())

    def authenticated(self, cookies: Mapping[str, str]) -> bool:
        """True if the request cookies carry a valid session token."""
        value = cookies.get(self.cookie_name)
        if value is None:
            return False
        return self.valid_token(value)

    def _cookie(self, value: str, secure: bool) -> Morsel:
        jar = SimpleCookie()
        jar[self.cookie_name] = value
        morsel = jar[self.cookie_name]
        morsel["path"] = "/"
        morsel["httponly"] = True
        morsel["samesite"] = "Lax"
        morsel["secure"] = secure
        return morsel

    def session_cookie(self, token: str, secure: bool) -> Morsel:
        """Cookie that stores token for a week."""
        morsel = self._cookie(token, secure)
        morsel["max-age"] = SESSION_COOKIE_MAX_AGE
        return morsel

    def clear_cookie(self, secure: bool) -> Morsel:
        """Cookie that removes the session from the browser."""
        morsel = self._cookie("", secure)
        morsel["max-age"] = 0
        morsel["expires"] = _EPOCH_EXPIRES
        return morsel

    def update_token(self, token: str) -> None:
        self._token = token


def validate_startup_token(token: str) -> None:
    """Raise ValueError if no token is configured for the web interface."""
    if not token.strip():
        raise ValueError(
            "webui.token is required when starting WebUI (set in config.yaml or SNAPCRAFT_WEBUI_TOKEN)"
        )