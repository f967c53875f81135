from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest

from saved_explorer.clients import RedditOAuthClient
from saved_explorer.core.config import RedditSettings
from saved_explorer.core.errors import AuthRejectedError, ExchangeError, TransportError
from saved_explorer.models.reddit import AccessCredential, PageRequest, RawComment, RawPost


def _settings(**overrides) -> RedditSettings:
    values = {
        "client_id": "client",
        "redirect_uri": "https://example.com/callback",
        "scopes": "identity, history ,read",
    }
    values.update(overrides)
    return RedditSettings(**values)


def _listing(children: list[dict], after: str | None = None) -> dict:
    return {"kind": "Listing", "data": {"after": after, "children": children}}


def test_authorization_url_carries_state_scope_and_duration() -> None:
    client = RedditOAuthClient(_settings())
    url = client.build_authorization_url("nonce-1")

    assert url.startswith(RedditOAuthClient.AUTH_BASE_URL)
    query = parse_qs(url.split("?", 1)[1])
    assert query["state"] == ["nonce-1"]
    assert query["client_id"] == ["client"]
    assert query["scope"] == ["identity history read"]
    assert query["duration"] == ["permanent"]
    assert query["response_type"] == ["code"]


@pytest.mark.asyncio
async def test_exchange_posts_grant_with_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"access_token": "a", "refresh_token": "r", "token_type": "bearer"}
        )

    client = RedditOAuthClient(_settings(), transport=httpx.MockTransport(handler))
    credential = await client.exchange_authorization_code("code123")

    assert credential == AccessCredential(access_token="a", refresh_token="r")
    request = seen[0]
    assert str(request.url) == RedditOAuthClient.TOKEN_URL
    assert request.headers["authorization"].startswith("Basic ")
    form = parse_qs(request.content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["code123"]


@pytest.mark.asyncio
async def test_exchange_accepts_missing_refresh_token() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"access_token": "t"})
    )
    client = RedditOAuthClient(_settings(), transport=transport)

    credential = await client.exchange_authorization_code("code")

    assert credential.access_token == "t"
    assert credential.refresh_token == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, text="unauthorized"),
        httpx.Response(200, json={"error": "invalid_grant"}),
        httpx.Response(200, json={"token_type": "bearer"}),
        httpx.Response(200, text="<html>"),
    ],
)
async def test_exchange_rejections_raise_exchange_error(response: httpx.Response) -> None:
    client = RedditOAuthClient(
        _settings(), transport=httpx.MockTransport(lambda request: response)
    )
    with pytest.raises(ExchangeError):
        await client.exchange_authorization_code("code")


@pytest.mark.asyncio
async def test_exchange_network_failure_raises_exchange_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = RedditOAuthClient(_settings(), transport=httpx.MockTransport(handler))
    with pytest.raises(ExchangeError):
        await client.exchange_authorization_code("code")


@pytest.mark.asyncio
async def test_fetch_saved_page_parses_posts_and_comments_in_order() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=_listing(
                [
                    {
                        "kind": "t1",
                        "data": {
                            "name": "t1_c",
                            "author": "bob",
                            "subreddit": "python",
                            "link_title": "Parent",
                            "created_utc": 2.0,
                            "permalink": "/r/python/c",
                        },
                    },
                    {"kind": "t5", "data": {"name": "t5_sub"}},
                    {
                        "kind": "t3",
                        "data": {
                            "name": "t3_p",
                            "author": "alice",
                            "subreddit": "rust",
                            "title": "Post",
                            "created_utc": 1.0,
                            "over_18": True,
                            "thumbnail": "self",
                            "permalink": "/r/rust/p",
                        },
                    },
                ],
                after="t3_p",
            ),
        )

    oauth = RedditOAuthClient(_settings(), transport=httpx.MockTransport(handler))
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))
    page = await client.fetch_saved_page("alice", PageRequest(cursor="t3_prev", limit=25))
    await client.aclose()

    assert [type(item) for item in page.items] == [RawComment, RawPost]
    assert [item.name for item in page.items] == ["t1_c", "t3_p"]
    assert page.after == "t3_p"

    request = seen[0]
    assert request.url.path == "/user/alice/saved"
    assert request.url.params["limit"] == "25"
    assert request.url.params["after"] == "t3_prev"
    assert request.headers["authorization"] == "bearer tok"


@pytest.mark.asyncio
async def test_fetch_saved_page_omits_cursor_on_first_page() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_listing([]))

    oauth = RedditOAuthClient(_settings(), transport=httpx.MockTransport(handler))
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))
    page = await client.fetch_saved_page("alice", PageRequest())

    assert page.items == []
    assert "after" not in seen[0].url.params


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_token_raises_auth_rejected(status_code: int) -> None:
    oauth = RedditOAuthClient(
        _settings(),
        transport=httpx.MockTransport(lambda request: httpx.Response(status_code)),
    )
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))

    with pytest.raises(AuthRejectedError) as excinfo:
        await client.fetch_saved_page("alice", PageRequest())
    assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_server_error_raises_transport_error() -> None:
    oauth = RedditOAuthClient(
        _settings(),
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))

    with pytest.raises(TransportError) as excinfo:
        await client.fetch_saved_page("alice", PageRequest())
    assert not isinstance(excinfo.value, AuthRejectedError)


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    oauth = RedditOAuthClient(_settings(), transport=httpx.MockTransport(handler))
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))

    with pytest.raises(TransportError):
        await client.fetch_saved_page("alice", PageRequest())


@pytest.mark.asyncio
async def test_get_me_returns_identity() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, content=json.dumps({"name": "alice", "id": "x1"}))
    )
    oauth = RedditOAuthClient(_settings(), transport=transport)
    client = oauth.build_authenticated_client(AccessCredential(access_token="tok"))

    identity = await client.get_me()

    assert identity.name == "alice"
