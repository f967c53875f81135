"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from saved_explorer.clients import RedditOAuthClient, SQLiteKeyValueStore
from saved_explorer.core.config import get_settings
from saved_explorer.services import (
    ContentClient,
    SessionCredentialManager,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_kv_store() -> SQLiteKeyValueStore:
    """Provide the shared persistent key-value store."""
    settings = _settings()
    return SQLiteKeyValueStore(settings.storage.db_path)


@lru_cache()
def get_reddit_oauth_client() -> RedditOAuthClient:
    """Create a singleton Reddit OAuth client."""
    settings = _settings()
    return RedditOAuthClient(settings.reddit)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService | None:
    """Provide symmetric encryption for stored tokens when a secret is configured."""
    secret = _settings().storage.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_session_manager() -> SessionCredentialManager:
    """Provide the process-wide session credential manager."""
    return SessionCredentialManager(
        get_kv_store(),
        get_reddit_oauth_client(),
        token_cipher=get_token_cipher_service(),
    )


def get_content_client() -> ContentClient:
    """Build a content client bound to the shared session."""
    return ContentClient(get_session_manager())


__all__ = [
    "get_content_client",
    "get_kv_store",
    "get_reddit_oauth_client",
    "get_session_manager",
    "get_token_cipher_service",
]
