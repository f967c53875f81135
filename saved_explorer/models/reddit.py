"""
Domain models for Reddit credentials, listings and normalized saved items.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_PAGE_SIZE = 100


class AuthState(BaseModel):
    """Anti-forgery nonce persisted between authorize and callback."""

    model_config = ConfigDict(frozen=True)

    nonce: str = Field(..., min_length=1)


class AccessCredential(BaseModel):
    """Tokens returned by Reddit's token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(
        "", description="Empty for temporary grants, which Reddit issues without one."
    )


class Identity(BaseModel):
    """The authenticated account as reported by ``/api/v1/me``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    id: Optional[str] = None


class AuthorizationRequest(BaseModel):
    """Parameters the UI needs to send the user to Reddit's consent screen."""

    client_id: str
    redirect_uri: str
    state: str
    scope: str
    duration: str
    response_type: str = "code"
    authorization_url: str


class PageRequest(BaseModel):
    """Pagination parameters for a single saved-listing call."""

    cursor: Optional[str] = None
    limit: int = MAX_PAGE_SIZE


def _nested_name(value: Any, attribute: str) -> Any:
    if isinstance(value, dict):
        return value.get(attribute)
    return value


class _RawItemBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    author: Optional[str] = None
    subreddit: Optional[str] = None
    created_utc: Optional[float] = None
    over_18: bool = False
    permalink: Optional[str] = None
    title: Optional[str] = None
    link_title: Optional[str] = None

    @field_validator("author", mode="before")
    @classmethod
    def _author_name(cls, value: Any) -> Any:
        return _nested_name(value, "name")

    @field_validator("subreddit", mode="before")
    @classmethod
    def _subreddit_name(cls, value: Any) -> Any:
        return _nested_name(value, "display_name")

    @field_validator("over_18", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> Any:
        return False if value is None else value


class RawPost(_RawItemBase):
    """A saved link or self post (listing kind ``t3``)."""

    kind: Literal["t3"] = "t3"
    thumbnail: Optional[str] = None


class RawComment(_RawItemBase):
    """A saved comment (listing kind ``t1``); carries its parent post's title."""

    kind: Literal["t1"] = "t1"
    body: Optional[str] = None


RawItem = Annotated[Union[RawPost, RawComment], Field(discriminator="kind")]


class SavedPage(BaseModel):
    """One page of raw items plus the cursor for the next page."""

    items: list[RawItem] = Field(default_factory=list)
    after: Optional[str] = None


class SavedItem(BaseModel):
    """Uniform record delivered to the UI, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    author: str
    created_utc: float
    name: str
    over18: bool
    permalink: str
    subreddit: str
    thumbnail: Optional[str] = None
    title: str
    kind: Literal["post", "comment"]


__all__ = [
    "AccessCredential",
    "AuthState",
    "AuthorizationRequest",
    "Identity",
    "MAX_PAGE_SIZE",
    "PageRequest",
    "RawComment",
    "RawItem",
    "RawPost",
    "SavedItem",
    "SavedPage",
]
