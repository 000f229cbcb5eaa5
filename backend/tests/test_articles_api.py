"""Article endpoints: listing, single reads, CRUD and permissions."""

from __future__ import annotations

from sqlalchemy import select, update

from app.models.article import Article
from app.models.audit import AuditEvent


async def test_create_article_computes_reading_time_and_slug(client, make_user, words):
    author, headers = await make_user("author")

    response = await client.post(
        "/api/articles",
        json={"data": {"title": "Budget Vote Tonight", "content": words(201), "excerpt": "x"}},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()["data"]
    assert body["slug"] == "budget-vote-tonight"
    assert body["readingTime"] == 2
    assert body["views"] == 0
    assert body["author"] == {"id": author.id, "username": author.username}
    assert body["isFavorite"] is False
    assert "favoriteId" in body and body["favoriteId"] is None


async def test_create_article_records_audit_event(client, session, make_user, words):
    editor, headers = await make_user("editor")

    response = await client.post(
        "/api/articles", json={"data": {"title": "Audit", "content": words(5)}}, headers=headers
    )

    result = await session.execute(
        select(AuditEvent).where(AuditEvent.event_type == "article_create")
    )
    [event] = result.scalars().all()
    assert event.actor_id == editor.id
    assert event.article_id == response.json()["data"]["id"]


async def test_create_article_rejects_anonymous_and_visitors(client, make_user):
    payload = {"data": {"title": "Nope", "content": "text"}}

    anonymous = await client.post("/api/articles", json=payload)
    assert anonymous.status_code == 401

    _, headers = await make_user("visitor")
    visitor = await client.post("/api/articles", json=payload, headers=headers)
    assert visitor.status_code == 403


async def test_duplicate_slug_conflicts(client, make_user):
    _, headers = await make_user("author")
    payload = {"data": {"title": "Same Title", "content": "text"}}

    first = await client.post("/api/articles", json=payload, headers=headers)
    second = await client.post("/api/articles", json=payload, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 409


async def test_update_recomputes_reading_time_even_for_unchanged_content(
    client, session, make_user, make_article, words
):
    author, headers = await make_user("author")
    content = words(199)
    article = await make_article(content=content, author=author)
    # Simulate a stale stored value; sending the same content must fix it.
    await session.execute(update(Article).where(Article.id == article.id).values(reading_time=42))
    await session.commit()

    response = await client.put(
        f"/api/articles/{article.id}", json={"data": {"content": content}}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["readingTime"] == 1


async def test_update_without_content_keeps_reading_time(
    client, make_user, make_article, words
):
    author, headers = await make_user("author")
    article = await make_article(content=words(450), author=author)

    response = await client.put(
        f"/api/articles/{article.id}", json={"data": {"title": "Renamed"}}, headers=headers
    )

    body = response.json()["data"]
    assert body["title"] == "Renamed"
    assert body["readingTime"] == 3


async def test_authors_cannot_edit_other_authors_articles(client, make_user, make_article):
    owner, _ = await make_user("author")
    _, other_headers = await make_user("author")
    _, editor_headers = await make_user("editor")
    article = await make_article(author=owner)

    denied = await client.put(
        f"/api/articles/{article.id}", json={"data": {"title": "Hijack"}}, headers=other_headers
    )
    allowed = await client.put(
        f"/api/articles/{article.id}", json={"data": {"title": "Edited"}}, headers=editor_headers
    )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["data"]["title"] == "Edited"


async def test_get_article_increments_views_by_one_per_read(client, make_article):
    article = await make_article()

    seen = []
    for _ in range(3):
        response = await client.get(f"/api/articles/{article.id}")
        assert response.status_code == 200
        seen.append(response.json()["data"]["views"])

    assert seen == [1, 2, 3]


async def test_get_missing_article_is_404(client):
    response = await client.get("/api/articles/424242")
    assert response.status_code == 404


async def test_slug_filter_is_a_single_read_and_counts_a_view(client, make_article):
    article = await make_article(slug="storm-warning")
    await make_article(slug="other-story")

    response = await client.get("/api/articles", params={"filters[slug]": "storm-warning"})

    assert response.status_code == 200
    items = response.json()["data"]
    assert [a["id"] for a in items] == [article.id]
    assert items[0]["views"] == 1


async def test_plain_listing_does_not_count_views(client, make_article):
    await make_article()
    await make_article()

    response = await client.get("/api/articles")

    body = response.json()
    assert body["meta"]["pagination"]["total"] == 2
    assert all(a["views"] == 0 for a in body["data"])
    assert all(a["isFavorite"] is False for a in body["data"])


async def test_listing_filters_by_category_and_featured(
    client, make_article, make_category
):
    sport = await make_category("Sport", "sport")
    await make_article(title="Match report", category=sport, is_featured=True)
    await make_article(title="Unrelated")

    by_category = await client.get("/api/articles", params={"category": "sport"})
    featured = await client.get("/api/articles", params={"featured": "true"})

    assert [a["title"] for a in by_category.json()["data"]] == ["Match report"]
    assert by_category.json()["data"][0]["category"]["slug"] == "sport"
    assert [a["title"] for a in featured.json()["data"]] == ["Match report"]


async def test_listing_paginates(client, make_article):
    for _ in range(5):
        await make_article()

    response = await client.get("/api/articles", params={"page": 2, "page_size": 2})

    pagination = response.json()["meta"]["pagination"]
    assert pagination == {"page": 2, "pageSize": 2, "pageCount": 3, "total": 5}
    assert len(response.json()["data"]) == 2


async def test_unknown_sort_is_bad_request(client):
    response = await client.get("/api/articles", params={"sort": "random"})
    assert response.status_code == 400


async def test_delete_article_removes_it(client, make_user, make_article):
    author, headers = await make_user("author")
    article = await make_article(author=author)

    response = await client.delete(f"/api/articles/{article.id}", headers=headers)

    assert response.status_code == 200
    assert (await client.get(f"/api/articles/{article.id}")).status_code == 404
