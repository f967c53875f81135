"""
Authenticated Reddit API client.

Wraps ``oauth.reddit.com`` calls and translates HTTP failures into the
transport error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from pydantic import TypeAdapter, ValidationError

from saved_explorer.core.errors import AuthRejectedError, TransportError
from saved_explorer.models.reddit import (
    AccessCredential,
    Identity,
    PageRequest,
    RawItem,
    SavedPage,
)

logger = logging.getLogger(__name__)

_RAW_ITEM_ADAPTER: TypeAdapter[RawItem] = TypeAdapter(RawItem)
_AUTH_REJECTED_STATUSES = {httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN}


class RedditClient:
    """Thin async client for the endpoints the explorer needs."""

    API_BASE_URL = "https://oauth.reddit.com"

    def __init__(
        self,
        credential: AccessCredential,
        *,
        user_agent: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=self.API_BASE_URL,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"bearer {credential.access_token}",
                "User-Agent": user_agent,
            },
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_json(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in _AUTH_REJECTED_STATUSES:
                raise AuthRejectedError(
                    f"Reddit rejected the access token ({exc.response.status_code}).",
                    cause=exc,
                ) from exc
            raise TransportError(
                f"Reddit returned HTTP {exc.response.status_code} for {path}.",
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {path} failed: {exc}", cause=exc) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Reddit returned a non-JSON body for {path}.", cause=exc) from exc

    async def get_me(self) -> Identity:
        """Resolve the account the credential belongs to."""
        payload = await self._get_json("/api/v1/me", params={"raw_json": 1})
        try:
            return Identity.model_validate(payload)
        except ValidationError as exc:
            raise TransportError("Unexpected /api/v1/me payload.", cause=exc) from exc

    async def fetch_saved_page(self, username: str, request: PageRequest) -> SavedPage:
        """Fetch one page of the user's saved listing in provider order."""
        params: Dict[str, Any] = {"limit": request.limit, "raw_json": 1}
        if request.cursor:
            params["after"] = request.cursor

        payload = await self._get_json(f"/user/{username}/saved", params=params)
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise TransportError("Unexpected saved listing payload.")

        listing = payload["data"]
        items = []
        for child in listing.get("children") or []:
            item = _parse_child(child)
            if item is not None:
                items.append(item)
        return SavedPage(items=items, after=listing.get("after"))


def _parse_child(child: Any) -> RawItem | None:
    if not isinstance(child, dict) or not isinstance(child.get("data"), dict):
        logger.warning("Skipping listing child without a data object")
        return None
    kind = child.get("kind")
    if kind not in ("t1", "t3"):
        logger.warning("Skipping saved item of unsupported kind %s", kind)
        return None
    try:
        return _RAW_ITEM_ADAPTER.validate_python({**child["data"], "kind": kind})
    except ValidationError as exc:
        logger.warning(
            "Skipping unparseable saved item %s: %s",
            child["data"].get("name"),
            exc.errors()[0].get("msg") if exc.errors() else exc,
        )
        return None


__all__ = ["RedditClient"]
