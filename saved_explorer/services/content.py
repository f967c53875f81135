"""Paginated access to the user's saved listing."""

from __future__ import annotations

import logging

from saved_explorer.models.reddit import MAX_PAGE_SIZE, Identity, PageRequest, SavedPage
from saved_explorer.services.session import SessionCredentialManager

logger = logging.getLogger(__name__)


class ContentClient:
    """Request one page of saved items at a time through the session's client."""

    def __init__(self, session: SessionCredentialManager) -> None:
        self._session = session

    async def fetch_page(self, identity: Identity, request: PageRequest) -> SavedPage:
        """
        Fetch a single page of raw saved items in provider order.

        ``request.limit`` is clamped to the provider maximum. Raises
        ``AuthRejectedError`` when the token is refused and ``TransportError``
        for any other failure.
        """
        limit = max(1, min(request.limit, MAX_PAGE_SIZE))
        if limit != request.limit:
            logger.debug("Clamped page limit %s to %s", request.limit, limit)

        client = self._session.current_client()
        page = await client.fetch_saved_page(
            identity.name, PageRequest(cursor=request.cursor, limit=limit)
        )
        logger.info(
            "Fetched %s saved items for %s (after=%s)",
            len(page.items),
            identity.name,
            page.after,
        )
        return page


__all__ = ["ContentClient"]
