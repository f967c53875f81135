"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_content_client,
    get_kv_store,
    get_reddit_oauth_client,
    get_session_manager,
    get_token_cipher_service,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_content_client",
    "get_kv_store",
    "get_reddit_oauth_client",
    "get_session_manager",
    "get_token_cipher_service",
]
