"""Tests for the owner-scoped /memos endpoints."""

import uuid

import pytest

from conftest import bearer


async def _create(client, headers, **overrides):
    payload = {"title": "UI設計メモ", "content": "メモ本文です", "category": None, "tags": ["ui", "#research"]}
    payload.update(overrides)
    res = await client.post("/memos", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


class TestAuthRequired:
    @pytest.mark.asyncio
    async def test_list_without_token(self, client):
        res = await client.get("/memos")
        assert res.status_code == 401
        assert res.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        res = await client.get("/memos", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_normalizes_payload(self, client, auth_headers, user):
        memo = await _create(client, auth_headers, title="  UI設計メモ ", category="  ")
        assert memo["title"] == "UI設計メモ"
        assert memo["category"] is None
        assert memo["tags"] == ["#ui", "#research"]
        assert memo["user_id"] == str(user.id)
        assert memo["updated_at"] is None

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client, auth_headers):
        res = await client.post("/memos", json={"title": "  ", "content": "x"}, headers=auth_headers)
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_cannot_create_for_someone_else(self, client, auth_headers, other_user):
        res = await client.post(
            "/memos",
            json={"title": "t", "content": "c", "user_id": str(other_user.id)},
            headers=auth_headers,
        )
        assert res.status_code == 403

    @pytest.mark.asyncio
    async def test_own_user_id_accepted(self, client, auth_headers, user):
        memo = await _create(client, auth_headers, user_id=str(user.id))
        assert memo["user_id"] == str(user.id)


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_list_filters(self, client, auth_headers):
        await _create(client, auth_headers, title="50% done", tags=["a", "b"], category="work")
        await _create(client, auth_headers, title="50000 things", tags=["a"])

        res = await client.get("/memos", params={"search": "50%"}, headers=auth_headers)
        assert [m["title"] for m in res.json()["memos"]] == ["50% done"]

        res = await client.get("/memos", params=[("tags", "#a"), ("tags", "#b")], headers=auth_headers)
        assert [m["title"] for m in res.json()["memos"]] == ["50% done"]

        res = await client.get("/memos", params={"category": "work"}, headers=auth_headers)
        assert res.json()["total_count"] == 1

        res = await client.get("/memos", headers=auth_headers)
        body = res.json()
        assert body["total_count"] == 2
        assert [m["title"] for m in body["memos"]] == ["50000 things", "50% done"]

    @pytest.mark.asyncio
    async def test_other_users_memos_invisible(self, client, auth_headers, other_headers):
        memo = await _create(client, auth_headers)
        res = await client.get("/memos", headers=other_headers)
        assert res.json()["memos"] == []

        res = await client.get(f"/memos/{memo['id']}", headers=other_headers)
        assert res.status_code == 404

        res = await client.get(f"/memos/{memo['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["content"] == "メモ本文です"

    @pytest.mark.asyncio
    async def test_missing_memo(self, client, auth_headers):
        res = await client.get(f"/memos/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 404
        assert res.json()["detail"] == "メモが見つかりません。"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_title_and_content(self, client, auth_headers):
        memo = await _create(client, auth_headers)
        res = await client.patch(
            f"/memos/{memo['id']}",
            json={"title": "   ", "content": "  新しい本文  "},
            headers=auth_headers,
        )
        assert res.status_code == 200
        body = res.json()
        assert body["title"] == "無題のメモ"
        assert body["content"] == "新しい本文"
        assert body["updated_at"] is not None
        assert body["tags"] == ["#ui", "#research"]

    @pytest.mark.asyncio
    async def test_category_and_tags_not_updatable(self, client, auth_headers):
        memo = await _create(client, auth_headers)
        res = await client.patch(f"/memos/{memo['id']}", json={"tags": ["#x"]}, headers=auth_headers)
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_update_other_users_memo(self, client, auth_headers, other_headers):
        memo = await _create(client, auth_headers)
        res = await client.patch(f"/memos/{memo['id']}", json={"title": "x"}, headers=other_headers)
        assert res.status_code == 404


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_own_memo(self, client, auth_headers, user):
        memo = await _create(client, auth_headers)
        res = await client.delete(f"/memos/{memo['id']}", params={"user_id": str(user.id)}, headers=auth_headers)
        assert res.status_code == 200
        assert res.json() == {"success": True}
        res = await client.get(f"/memos/{memo['id']}", headers=auth_headers)
        assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_user_id_filter_never_widens_scope(self, client, auth_headers, other_user):
        memo = await _create(client, bearer(other_user))
        res = await client.delete(
            f"/memos/{memo['id']}", params={"user_id": str(other_user.id)}, headers=auth_headers
        )
        assert res.status_code == 200
        assert res.json() == {"success": True}
        res = await client.get(f"/memos/{memo['id']}", headers=bearer(other_user))
        assert res.status_code == 200

    @pytest.mark.asyncio
    async def test_foreign_and_missing_rows_answer_like_success(self, client, auth_headers, other_user):
        memo = await _create(client, bearer(other_user))
        res = await client.delete(f"/memos/{memo['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json() == {"success": True}
        res = await client.get(f"/memos/{memo['id']}", headers=bearer(other_user))
        assert res.status_code == 200

        res = await client.delete(f"/memos/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json() == {"success": True}
