"""
Reddit OAuth utilities.

These helpers build the consent URL, exchange authorization codes and hand out
authenticated API clients for a stored credential.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from saved_explorer.clients.reddit import RedditClient
from saved_explorer.core.config import RedditSettings
from saved_explorer.core.errors import ExchangeError
from saved_explorer.models.reddit import AccessCredential

logger = logging.getLogger(__name__)


class RedditOAuthClient:
    """Build Reddit authorization URLs and exchange authorization codes."""

    AUTH_BASE_URL = "https://www.reddit.com/api/v1/authorize"
    TOKEN_URL = "https://www.reddit.com/api/v1/access_token"

    def __init__(
        self,
        settings: RedditSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def client_id(self) -> str:
        return self._settings.client_id

    @property
    def redirect_uri(self) -> str:
        return str(self._settings.redirect_uri)

    @property
    def scope(self) -> str:
        return " ".join(self._settings.scopes)

    @property
    def duration(self) -> str:
        return self._settings.duration

    def build_authorization_url(self, state: str) -> str:
        """Construct the Reddit OAuth consent URL."""
        params = {
            "client_id": self._settings.client_id,
            "response_type": "code",
            "state": state,
            "redirect_uri": self.redirect_uri,
            "duration": self.duration,
            "scope": self.scope,
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> AccessCredential:
        """Exchange an authorization code for an access credential."""
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        auth = (self._settings.client_id, self._settings.client_secret or "")

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.http_timeout,
                transport=self._transport,
                headers={"User-Agent": self._settings.user_agent},
            ) as client:
                response = await client.post(self.TOKEN_URL, data=payload, auth=auth)
        except httpx.HTTPError as exc:
            raise ExchangeError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise ExchangeError(response.text)

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise ExchangeError("Token endpoint returned a non-JSON body.") from exc
        # Reddit reports grant problems with a 200 and an "error" field.
        if "error" in token_payload:
            raise ExchangeError(str(token_payload["error"]))
        if not token_payload.get("access_token"):
            raise ExchangeError("Incomplete token payload returned from Reddit.")

        logger.info("Exchanged authorization code for Reddit credential")
        return AccessCredential(
            access_token=token_payload["access_token"],
            refresh_token=token_payload.get("refresh_token") or "",
        )

    def build_authenticated_client(self, credential: AccessCredential) -> RedditClient:
        """Create an API client bound to the supplied credential."""
        return RedditClient(
            credential,
            user_agent=self._settings.user_agent,
            timeout=self._settings.http_timeout,
            transport=self._transport,
        )


__all__ = ["RedditOAuthClient"]
