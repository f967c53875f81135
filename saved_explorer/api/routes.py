"""
FastAPI routes for the saved explorer.

The WebSocket carries the UI's intents to the message bridge and streams the
resulting events back; the HTTP routes cover the OAuth redirect legs.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, AsyncIterator
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, WebSocket
from fastapi.responses import RedirectResponse
from pydantic import TypeAdapter, ValidationError
from starlette.websockets import WebSocketDisconnect

from saved_explorer.core.errors import StorageError
from saved_explorer.dependencies import (
    get_app_settings,
    get_content_client,
    get_kv_store,
    get_session_manager,
)
from saved_explorer.schemas import InboundMessage, OutboundMessage
from saved_explorer.services import MessageBridge
from saved_explorer.services.session import ACCESS_KEY, AUTH_STATE_KEY

router = APIRouter()
logger = logging.getLogger(__name__)

_INBOUND_ADAPTER: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/flags", status_code=HTTPStatus.OK)
async def bootstrap_flags(
    settings: Annotated[Any, Depends(get_app_settings)],
    store: Annotated[Any, Depends(get_kv_store)],
) -> dict:
    """Values the UI needs at startup to decide between restore and login."""
    try:
        auth_state = store.get(AUTH_STATE_KEY)
        has_access = store.get(ACCESS_KEY) is not None
    except StorageError:
        logger.warning("Store unavailable while building flags", exc_info=True)
        auth_state, has_access = None, False

    return {
        "publicPath": settings.public_path,
        "clientId": settings.reddit.client_id,
        "redirectUri": str(settings.reddit.redirect_uri),
        "redditAuthState": auth_state,
        "redditAccess": has_access,
    }


@router.get("/auth/reddit/authorize", status_code=HTTPStatus.OK)
async def start_reddit_oauth_flow(
    request: Request,
    session: Annotated[Any, Depends(get_session_manager)],
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Reddit consent screen.",
    ),
) -> Any:
    """Kick off the OAuth flow by issuing a nonce and authorization URL."""
    try:
        authorization = await session.begin_login()
    except StorageError as exc:
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail="Unable to persist OAuth state.",
        ) from exc

    if redirect or _wants_html(request):
        return RedirectResponse(
            url=authorization.authorization_url,
            status_code=HTTPStatus.TEMPORARY_REDIRECT,
        )
    return authorization.model_dump()


@router.get("/auth/reddit/callback", status_code=HTTPStatus.OK)
async def handle_reddit_oauth_callback(
    request: Request,
    settings: Annotated[Any, Depends(get_app_settings)],
    state: str | None = Query(default=None),
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
) -> Any:
    """Hand the returned grant to the UI, which completes login over the socket."""
    if error:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail=f"Reddit authorization failed: {error}",
        )
    if not state or not code:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Callback is missing 'state' or 'code'.",
        )

    if _wants_html(request):
        query = urlencode({"state": state, "code": code})
        return RedirectResponse(
            url=f"{settings.public_path}?{query}",
            status_code=HTTPStatus.TEMPORARY_REDIRECT,
        )
    return {"grant": {"state": state, "code": code}}


@router.websocket("/ws")
async def message_bridge_socket(
    websocket: WebSocket,
    settings: Annotated[Any, Depends(get_app_settings)],
    session: Annotated[Any, Depends(get_session_manager)],
    content: Annotated[Any, Depends(get_content_client)],
    store: Annotated[Any, Depends(get_kv_store)],
) -> None:
    """Run a message bridge for the lifetime of one UI connection."""
    await websocket.accept()

    async def emit(event: OutboundMessage) -> None:
        await websocket.send_json(event.model_dump(mode="json", by_alias=True))

    async def receive() -> AsyncIterator[InboundMessage]:
        while True:
            try:
                payload = await websocket.receive_json()
            except WebSocketDisconnect:
                return
            except ValueError:
                logger.warning("Ignoring non-JSON UI message")
                continue
            try:
                message = _INBOUND_ADAPTER.validate_python(payload)
            except ValidationError as exc:
                logger.warning("Ignoring invalid UI message (%s errors)", exc.error_count())
                continue
            yield message

    bridge = MessageBridge(
        session,
        content,
        emit,
        store=store,
        page_size=settings.reddit.page_size,
    )
    await bridge.run(receive())


__all__ = ["router"]
