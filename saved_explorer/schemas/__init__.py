"""Public schema exports."""

from .messages import (
    AuthorizationGrant,
    CacheValue,
    InboundMessage,
    InitializeSession,
    OutboundMessage,
    PageFailed,
    PageReady,
    RequestPage,
    SessionFailed,
    SessionReady,
)

__all__ = [
    "AuthorizationGrant",
    "CacheValue",
    "InboundMessage",
    "InitializeSession",
    "OutboundMessage",
    "PageFailed",
    "PageReady",
    "RequestPage",
    "SessionFailed",
    "SessionReady",
]
