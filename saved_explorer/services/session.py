"""
Session credential lifecycle for the Reddit API.

The manager owns the login state machine, persists the OAuth nonce and access
credential through the key-value store, and hands out the authenticated client.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
import secrets
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from saved_explorer.clients.reddit import RedditClient
from saved_explorer.clients.reddit_auth import RedditOAuthClient
from saved_explorer.core.errors import (
    ExchangeError,
    NotAuthenticatedError,
    StateMismatchError,
    StorageError,
)
from saved_explorer.models.reddit import (
    AccessCredential,
    AuthState,
    AuthorizationRequest,
    Identity,
)
from saved_explorer.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

AUTH_STATE_KEY = "redditAuthState"
ACCESS_KEY = "redditAccess"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionCredentialManager:
    """Drive login, restore and invalidation of the Reddit session."""

    def __init__(
        self,
        store: Any,
        oauth_client: RedditOAuthClient,
        *,
        token_cipher: TokenCipherService | None = None,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._cipher = token_cipher
        self._guard = asyncio.Lock()
        self._client: Optional[RedditClient] = None
        self._identity: Optional[Identity] = None
        self._pending_nonce: Optional[str] = None
        self._state = SessionState.UNAUTHENTICATED

        # A nonce left behind by the authorize redirect means the callback is
        # still expected after a restart.
        auth_state = self._load_auth_state()
        if auth_state is not None:
            self._pending_nonce = auth_state.nonce
            self._state = SessionState.AUTHENTICATING

    @property
    def state(self) -> SessionState:
        return self._state

    async def restore(self) -> bool:
        """Reuse a persisted credential, skipping the interactive flow."""
        async with self._guard:
            if self._state is SessionState.AUTHENTICATED:
                return True

            try:
                stored = self._store.get(ACCESS_KEY)
            except StorageError:
                logger.warning("Credential store unavailable; staying unauthenticated", exc_info=True)
                return False
            if stored is None:
                return False

            credential = self._decode_credential(stored)
            if credential is None:
                logger.warning("Ignoring unreadable stored credential")
                return False

            if self._cipher is not None and not stored.get("encrypted"):
                self._persist_credential(credential, strict=False)

            await self._install_client(credential)
            if self._pending_nonce is not None:
                self._pending_nonce = None
                self._clear_key(AUTH_STATE_KEY)
            self._state = SessionState.AUTHENTICATED
            logger.info("Restored Reddit session from stored credential")
            return True

    async def begin_login(self) -> AuthorizationRequest:
        """Start an interactive login and return the consent parameters."""
        async with self._guard:
            nonce = secrets.token_urlsafe(24)
            self._store.set(AUTH_STATE_KEY, AuthState(nonce=nonce).model_dump())
            self._pending_nonce = nonce
            self._state = SessionState.AUTHENTICATING

            authorization_url = self._oauth.build_authorization_url(nonce)
            return AuthorizationRequest(
                client_id=self._oauth.client_id,
                redirect_uri=self._oauth.redirect_uri,
                state=nonce,
                scope=self._oauth.scope,
                duration=self._oauth.duration,
                authorization_url=authorization_url,
            )

    async def complete_login(self, returned_state: str, grant: str) -> None:
        """Validate the callback state and exchange the grant for a credential."""
        async with self._guard:
            if self._state is not SessionState.AUTHENTICATING:
                raise StateMismatchError("No login is in progress.")

            expected = self._pending_nonce
            self._pending_nonce = None
            self._clear_key(AUTH_STATE_KEY)

            if not expected or not hmac.compare_digest(
                returned_state.encode("utf-8"), expected.encode("utf-8")
            ):
                self._state = SessionState.UNAUTHENTICATED
                raise StateMismatchError("OAuth state does not match the issued nonce.")

            try:
                credential = await self._oauth.exchange_authorization_code(grant)
            except ExchangeError:
                self._state = SessionState.UNAUTHENTICATED
                raise

            try:
                self._persist_credential(credential, strict=True)
            except StorageError:
                self._state = SessionState.UNAUTHENTICATED
                raise

            await self._install_client(credential)
            self._state = SessionState.AUTHENTICATED
            logger.info("Reddit login completed")

    def current_client(self) -> RedditClient:
        if self._state is not SessionState.AUTHENTICATED or self._client is None:
            raise NotAuthenticatedError("No authenticated Reddit session.")
        return self._client

    async def current_identity(self) -> Identity:
        """Return the account behind the session, resolving it on first use."""
        client = self.current_client()
        if self._identity is None:
            self._identity = await client.get_me()
        return self._identity

    async def invalidate(self) -> None:
        """Drop the session and forget the stored credential."""
        async with self._guard:
            await self._close_client()
            self._clear_key(ACCESS_KEY)
            self._state = SessionState.UNAUTHENTICATED
            logger.info("Reddit session invalidated")

    async def aclose(self) -> None:
        await self._close_client()

    async def _install_client(self, credential: AccessCredential) -> None:
        await self._close_client()
        self._client = self._oauth.build_authenticated_client(credential)

    async def _close_client(self) -> None:
        client, self._client, self._identity = self._client, None, None
        if client is not None:
            await client.aclose()

    def _load_auth_state(self) -> Optional[AuthState]:
        try:
            stored = self._store.get(AUTH_STATE_KEY)
        except StorageError:
            logger.warning("Unable to read stored OAuth state", exc_info=True)
            return None
        if not isinstance(stored, dict):
            return None
        try:
            return AuthState.model_validate(stored)
        except ValidationError:
            return None

    def _decode_credential(self, stored: Any) -> Optional[AccessCredential]:
        if not isinstance(stored, dict):
            return None
        if stored.get("encrypted") and self._cipher is None:
            logger.warning("Stored credential is sealed but no encryption secret is configured")
            return None
        try:
            record = self._cipher.unseal(stored) if self._cipher else stored
            return AccessCredential.model_validate(record)
        except (ValueError, ValidationError):
            return None

    def _persist_credential(self, credential: AccessCredential, *, strict: bool) -> None:
        record = self._cipher.seal(credential) if self._cipher else credential.model_dump()
        try:
            self._store.set(ACCESS_KEY, record)
        except StorageError:
            if strict:
                raise
            logger.warning("Failed to re-seal stored credential", exc_info=True)

    def _clear_key(self, key: str) -> None:
        try:
            self._store.delete(key)
        except StorageError:
            logger.warning("Failed to clear %s from the store", key, exc_info=True)


__all__ = [
    "ACCESS_KEY",
    "AUTH_STATE_KEY",
    "SessionCredentialManager",
    "SessionState",
]
