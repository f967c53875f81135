"""Expose constructed client wrappers."""

from .kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore
from .reddit import RedditClient
from .reddit_auth import RedditOAuthClient

__all__ = [
    "InMemoryKeyValueStore",
    "RedditClient",
    "RedditOAuthClient",
    "SQLiteKeyValueStore",
]
