"""
Messages exchanged between the UI and the message bridge.

Every message carries a ``type`` discriminator so it can travel as plain JSON
over the WebSocket.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from saved_explorer.models.reddit import SavedItem


class AuthorizationGrant(BaseModel):
    """Values Reddit appended to the redirect URI after consent."""

    code: str = Field(..., min_length=1, description="One-time authorization code.")
    state: str = Field(..., description="Opaque state echoed back by Reddit.")


class InitializeSession(BaseModel):
    """Start a session either from a fresh grant or from the stored credential."""

    type: Literal["initialize_session"] = "initialize_session"
    grant: Optional[AuthorizationGrant] = None
    restore: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> "InitializeSession":
        if (self.grant is not None) != self.restore:
            return self
        raise ValueError("Provide exactly one of 'grant' or 'restore'.")


class RequestPage(BaseModel):
    """Ask for the next page of saved items."""

    type: Literal["request_page"] = "request_page"
    cursor: Optional[str] = Field(
        None, description="The 'after' value of the previous page; omit for the first."
    )


class CacheValue(BaseModel):
    """Persist an arbitrary UI value in the key-value store."""

    type: Literal["cache"] = "cache"
    key: str = Field(..., min_length=1)
    value: Any = None


class SessionReady(BaseModel):
    type: Literal["session_ready"] = "session_ready"


class SessionFailed(BaseModel):
    type: Literal["session_failed"] = "session_failed"
    reason: str


class PageReady(BaseModel):
    type: Literal["page_ready"] = "page_ready"
    sequence: int
    items: list[SavedItem] = Field(default_factory=list)
    after: Optional[str] = None


class PageFailed(BaseModel):
    type: Literal["page_failed"] = "page_failed"
    sequence: int
    reason: str


InboundMessage = Annotated[
    Union[InitializeSession, RequestPage, CacheValue], Field(discriminator="type")
]
OutboundMessage = Union[SessionReady, SessionFailed, PageReady, PageFailed]


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
