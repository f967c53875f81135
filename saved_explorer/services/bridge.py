"""
Asynchronous boundary between the UI and the session/content pipeline.

Inbound intents are handled one at a time; page requests are numbered so that
a completion superseded by a newer request is discarded instead of delivered
out of order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from saved_explorer.core.errors import NotAuthenticatedError, SavedExplorerError, StorageError
from saved_explorer.models.reddit import MAX_PAGE_SIZE, PageRequest
from saved_explorer.schemas import (
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
from saved_explorer.services.content import ContentClient
from saved_explorer.services.normalizer import normalize_page
from saved_explorer.services.session import (
    ACCESS_KEY,
    AUTH_STATE_KEY,
    SessionCredentialManager,
)

logger = logging.getLogger(__name__)

Emitter = Callable[[OutboundMessage], Awaitable[None]]

_RESERVED_KEYS = frozenset({ACCESS_KEY, AUTH_STATE_KEY})


class MessageBridge:
    """Translate UI intents into session and page operations."""

    def __init__(
        self,
        session: SessionCredentialManager,
        content: ContentClient,
        emit: Emitter,
        *,
        store: Any,
        page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._session = session
        self._content = content
        self._emit = emit
        self._store = store
        self._page_size = page_size
        self._sequence = 0
        self._fetch_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    async def dispatch(self, message: InboundMessage) -> None:
        """Handle a single inbound message to completion."""
        match message:
            case InitializeSession():
                await self.initialize_session(message)
            case RequestPage():
                await self.request_page(message.cursor)
            case CacheValue():
                self.cache_value(message.key, message.value)
            case _:
                raise TypeError(f"Unsupported message {type(message).__name__}")

    async def run(self, messages: AsyncIterator[InboundMessage]) -> None:
        """
        Consume inbound messages until the iterator is exhausted.

        Page requests run as tasks so a newer request can supersede one that
        is still waiting for the fetch slot.
        """
        try:
            async for message in messages:
                if isinstance(message, RequestPage):
                    self._spawn(self.request_page(message.cursor))
                else:
                    await self.dispatch(message)
        finally:
            for task in list(self._tasks):
                task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)

    async def initialize_session(self, message: InitializeSession) -> None:
        try:
            if message.grant is not None:
                await self._session.complete_login(message.grant.state, message.grant.code)
            elif not await self._session.restore():
                raise NotAuthenticatedError("No stored credential to restore.")
        except SavedExplorerError as exc:
            logger.warning("Session initialization failed: %s", exc)
            await self._emit(SessionFailed(reason=exc.reason))
            return

        await self._emit(SessionReady())
        await self.request_page(None)

    async def request_page(self, cursor: Optional[str] = None) -> None:
        self._sequence += 1
        sequence = self._sequence

        async with self._fetch_lock:
            if sequence != self._sequence:
                logger.debug("Skipping superseded page request %s", sequence)
                return

            event: OutboundMessage
            try:
                identity = await self._session.current_identity()
                page = await self._content.fetch_page(
                    identity, PageRequest(cursor=cursor, limit=self._page_size)
                )
            except SavedExplorerError as exc:
                logger.warning("Page request %s failed: %s", sequence, exc.reason)
                event = PageFailed(sequence=sequence, reason=exc.reason)
            else:
                event = PageReady(
                    sequence=sequence,
                    items=normalize_page(page.items),
                    after=page.after,
                )

            if sequence != self._sequence:
                logger.info("Discarding stale result for page request %s", sequence)
                return
            await self._emit(event)

    def cache_value(self, key: str, value: Any) -> None:
        if key in _RESERVED_KEYS:
            logger.warning("Refusing to overwrite session-owned key %s", key)
            return
        try:
            self._store.set(key, value)
        except StorageError:
            logger.warning("Failed to cache value for %s", key, exc_info=True)

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_finished)

    def _task_finished(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Page request task crashed", exc_info=task.exception())


__all__ = ["Emitter", "MessageBridge"]
