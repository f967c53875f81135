"""Service layer exports."""

from .bridge import MessageBridge
from .content import ContentClient
from .normalizer import normalize, normalize_page
from .session import SessionCredentialManager, SessionState
from .token_cipher import TokenCipherService

__all__ = [
    "ContentClient",
    "MessageBridge",
    "SessionCredentialManager",
    "SessionState",
    "TokenCipherService",
    "normalize",
    "normalize_page",
]
