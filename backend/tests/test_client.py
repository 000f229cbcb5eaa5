"""Client-side session context, API client and favorite toggle."""

from __future__ import annotations

import asyncio

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from app.client.api import ApiError, NewsroomClient
from app.client.favorite_state import FavoriteState, FavoriteToggle
from app.client.session import STORAGE_KEY, AuthContext, normalize_role

from conftest import PASSWORD


@pytest_asyncio.fixture
async def newsroom(api_app):
    async with NewsroomClient(
        base_url="http://test", transport=ASGITransport(app=api_app)
    ) as client:
        yield client


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Author", "author"),
        ({"type": "editor"}, "editor"),
        ({"name": "Admin"}, "admin"),
        ("superhero", "visitor"),
        (None, "visitor"),
    ],
)
def test_normalize_role(value, expected):
    assert normalize_role(value) == expected


def test_auth_context_save_load_clear():
    store: dict[str, str] = {}
    auth = AuthContext(store)

    auth.save("tok", {"id": 7, "username": "kim", "role": {"type": "Author"}})

    assert STORAGE_KEY in store
    assert auth.role == "author"
    assert auth.headers() == {"Authorization": "Bearer tok"}

    auth.clear()
    assert auth.user is None
    assert auth.headers() == {}
    assert not auth.is_authenticated


def test_corrupt_session_is_treated_as_logged_out(caplog):
    auth = AuthContext({STORAGE_KEY: "{not json"})

    assert auth.user is None
    assert auth.role is None
    assert not auth.is_authenticated
    assert "登录状态数据损坏" in caplog.text


async def test_register_fetch_and_favorite_through_the_client(newsroom, make_article):
    await make_article(slug="river-flood")

    user = await newsroom.register("kim", "kim@example.com", PASSWORD)
    assert newsroom.auth.user["id"] == user["id"]

    article = await newsroom.fetch_article("river-flood")
    assert article["views"] == 1
    assert article["isFavorite"] is False

    added = await newsroom.add_favorite(article["id"])
    favorites = await newsroom.list_favorites()
    assert [a["id"] for a in favorites] == [article["id"]]

    removed = await newsroom.remove_favorite(added["favoriteId"])
    assert removed == {"isFavorite": False, "favoriteId": added["favoriteId"]}
    assert await newsroom.list_favorites() == []


async def test_fetch_missing_article_raises_not_found(newsroom):
    with pytest.raises(ApiError) as excinfo:
        await newsroom.fetch_article("nowhere")
    assert excinfo.value.status == 404


async def test_login_failure_surfaces_server_message(newsroom, make_user):
    user, _ = await make_user()

    with pytest.raises(ApiError) as excinfo:
        await newsroom.login(user.email, "wrong-password")

    assert excinfo.value.status == 400
    assert str(excinfo.value) == "Invalid identifier or password"
    assert not newsroom.auth.is_authenticated


async def test_logout_clears_local_state(newsroom, make_user):
    user, _ = await make_user()
    await newsroom.login(user.username, PASSWORD)
    token = newsroom.auth.token

    await newsroom.logout()

    assert not newsroom.auth.is_authenticated
    stale = AuthContext()
    stale.save(token, {"id": user.id})
    with pytest.raises(ApiError) as excinfo:
        await newsroom._request("GET", "/api/users/me", headers=stale.headers())
    assert excinfo.value.status == 401


async def test_cover_image_urls_are_made_absolute(newsroom):
    article = {"id": 1, "coverImage": {"id": 2, "url": "/uploads/a.png"}}
    assert newsroom._absolute_media(article)["coverImage"]["url"] == "http://test/uploads/a.png"


async def test_toggle_adds_then_removes(newsroom, make_user, make_article):
    user, _ = await make_user()
    await newsroom.login(user.username, PASSWORD)
    article = await make_article()
    toggle = FavoriteToggle(newsroom, FavoriteState(article_id=article.id))

    state = await toggle.toggle()
    assert state.is_favorite is True
    assert state.favorite_id is not None
    assert state.busy is False

    state = await toggle.toggle()
    assert state.is_favorite is False
    assert state.favorite_id is None


async def test_toggle_failure_keeps_previous_state(newsroom, make_article):
    article = await make_article()
    toggle = FavoriteToggle(newsroom, FavoriteState(article_id=article.id))

    state = await toggle.toggle()

    assert state.is_favorite is False
    assert state.favorite_id is None
    assert state.error
    assert state.busy is False


def _gated_client(gate: asyncio.Event, calls: list) -> NewsroomClient:
    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        await gate.wait()
        return httpx.Response(200, json={"isFavorite": True, "favoriteId": 11})

    auth = AuthContext()
    auth.save("tok", {"id": 1})
    return NewsroomClient(base_url="http://test", auth=auth, transport=httpx.MockTransport(handler))


async def test_toggle_ignores_clicks_while_busy():
    gate = asyncio.Event()
    calls: list = []
    client = _gated_client(gate, calls)
    toggle = FavoriteToggle(client, FavoriteState(article_id=3))

    first = asyncio.create_task(toggle.toggle())
    await asyncio.sleep(0)
    assert toggle.state.busy is True
    await toggle.toggle()
    gate.set()
    state = await first
    await client.close()

    assert calls == ["POST"]
    assert (state.is_favorite, state.favorite_id, state.busy) == (True, 11, False)


async def test_unmounted_toggle_discards_late_result():
    gate = asyncio.Event()
    calls: list = []
    client = _gated_client(gate, calls)
    toggle = FavoriteToggle(client, FavoriteState(article_id=3))

    pending = asyncio.create_task(toggle.toggle())
    await asyncio.sleep(0)
    toggle.unmount()
    gate.set()
    state = await pending
    await client.close()

    assert state.is_favorite is False
    assert state.favorite_id is None


def test_favorite_state_from_article_payload():
    state = FavoriteState.from_article({"id": 5, "isFavorite": True, "favoriteId": 9})
    assert (state.article_id, state.is_favorite, state.favorite_id) == (5, True, 9)
    assert state.busy is False


async def test_toggle_without_favorite_id_fails_locally():
    calls: list = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={})

    client = NewsroomClient(base_url="http://test", transport=httpx.MockTransport(handler))
    toggle = FavoriteToggle(client, FavoriteState(article_id=3, is_favorite=True))

    state = await toggle.toggle()
    await client.close()

    assert calls == []
    assert state.error
    assert (state.is_favorite, state.favorite_id, state.busy) == (True, None, False)
