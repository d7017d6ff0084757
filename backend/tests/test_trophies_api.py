"""
Trophy API - Endpoint Tests
=============================

What:  End-to-end tests of the HTTP API over ASGITransport and a SQLite store.

What we test:
    ✅ Health probe
    ✅ Create → list round trip, camelCase wire format, fresh ids
    ✅ 400 for missing / blank name or imageUrl and for malformed bodies
    ✅ Newest-first ordering
    ✅ Delete once (200), twice (404), malformed id (400)
    ✅ Unmatched routes → 404 Route not found
    ✅ Store failures and unexpected errors → 500 with a generic message
    ✅ createdAt is the same UTC instant from POST and GET
"""

import uuid
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from app.exceptions import DatabaseError
from app.services.trophy_store import TrophyStore


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCreateTrophy:
    """POST /api/trophies"""

    @pytest.mark.asyncio
    async def test_create_returns_201_and_record(self, test_client, sample_trophy_body):
        response = await test_client.post("/api/trophies", json=sample_trophy_body)

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id", "name", "description", "imageUrl", "createdAt"}
        assert uuid.UUID(body["id"])
        assert body["name"] == sample_trophy_body["name"]
        assert body["description"] == sample_trophy_body["description"]
        assert body["imageUrl"] == sample_trophy_body["imageUrl"]
        assert body["createdAt"]

    @pytest.mark.asyncio
    async def test_create_then_list_includes_record(self, test_client, sample_trophy_body):
        created = (await test_client.post("/api/trophies", json=sample_trophy_body)).json()

        response = await test_client.get("/api/trophies")

        assert response.status_code == 200
        listed = response.json()
        assert len(listed) == 1
        assert listed[0]["id"] == created["id"]
        assert listed[0]["name"] == sample_trophy_body["name"]
        assert listed[0]["imageUrl"] == sample_trophy_body["imageUrl"]

    @pytest.mark.asyncio
    async def test_create_trims_fields(self, test_client, sample_trophy_body):
        body = dict(sample_trophy_body, name="  Padded  ", description="  text  ")
        response = await test_client.post("/api/trophies", json=body)
        assert response.json()["name"] == "Padded"
        assert response.json()["description"] == "text"

    @pytest.mark.asyncio
    async def test_image_url_stored_as_sent(self, test_client):
        image = "  data:image/png;base64,AAAA \n"
        created = (await test_client.post("/api/trophies", json={"name": "Cup", "imageUrl": image})).json()
        assert created["imageUrl"] == image

        listed = (await test_client.get("/api/trophies")).json()
        assert listed[0]["imageUrl"] == image

    @pytest.mark.asyncio
    async def test_create_without_description(self, test_client, sample_trophy_body):
        body = {"name": "Cup", "imageUrl": sample_trophy_body["imageUrl"]}
        response = await test_client.post("/api/trophies", json=body)
        assert response.status_code == 201
        assert response.json()["description"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["name", "imageUrl"])
    @pytest.mark.parametrize("value", [None, "", "   "])
    async def test_missing_required_field_is_400(self, test_client, sample_trophy_body, field, value):
        body = dict(sample_trophy_body)
        if value is None:
            del body[field]
        else:
            body[field] = value

        response = await test_client.post("/api/trophies", json=body)

        assert response.status_code == 400
        assert response.json() == {"message": "Name and imageUrl are required"}

    @pytest.mark.asyncio
    async def test_rejected_create_does_not_persist(self, test_client):
        await test_client.post("/api/trophies", json={"name": "No image"})
        response = await test_client.get("/api/trophies")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_empty_body_is_400(self, test_client):
        response = await test_client.post("/api/trophies")
        assert response.status_code == 400
        assert response.json() == {"message": "Name and imageUrl are required"}

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/api/trophies",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_wrong_field_type_is_400(self, test_client):
        response = await test_client.post("/api/trophies", json={"name": ["Cup"], "imageUrl": "AAAA"})
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid request body"}


class TestListTrophies:
    """GET /api/trophies"""

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, test_client):
        response = await test_client.get("/api/trophies")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, test_client, sample_trophy_body):
        for name in ["A", "B", "C"]:
            response = await test_client.post("/api/trophies", json=dict(sample_trophy_body, name=name))
            assert response.status_code == 201

        response = await test_client.get("/api/trophies")

        assert [t["name"] for t in response.json()] == ["C", "B", "A"]

    @pytest.mark.asyncio
    async def test_created_at_matches_create_response(self, test_client, sample_trophy_body):
        created = (await test_client.post("/api/trophies", json=sample_trophy_body)).json()
        listed = (await test_client.get("/api/trophies")).json()

        assert listed[0]["createdAt"] == created["createdAt"]
        assert datetime.fromisoformat(listed[0]["createdAt"].replace("Z", "+00:00")).utcoffset() is not None

    @pytest.mark.asyncio
    async def test_store_error_is_500(self, test_client):
        with patch.object(
            TrophyStore, "list_all", AsyncMock(side_effect=DatabaseError(context={"error": "boom"}))
        ):
            response = await test_client.get("/api/trophies")

        assert response.status_code == 500
        assert response.json() == {"message": "A database error occurred. Please try again later."}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, trophy_app):
        transport = ASGITransport(app=trophy_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with patch.object(TrophyStore, "list_all", AsyncMock(side_effect=RuntimeError("boom"))):
                response = await client.get("/api/trophies")

        assert response.status_code == 500
        assert response.json() == {"message": "Server Error"}
        # Error responses still pass back through the outer middleware
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-request-id"]


class TestDeleteTrophy:
    """DELETE /api/trophies/{id}"""

    @pytest.mark.asyncio
    async def test_delete_once_then_404(self, test_client, sample_trophy_body):
        created = (await test_client.post("/api/trophies", json=sample_trophy_body)).json()

        first = await test_client.delete(f"/api/trophies/{created['id']}")
        second = await test_client.delete(f"/api/trophies/{created['id']}")

        assert first.status_code == 200
        assert first.json() == {"message": "Deleted Trophy"}
        assert second.status_code == 404
        assert second.json() == {"message": "Trophy not found"}

    @pytest.mark.asyncio
    async def test_deleted_record_disappears_from_list(self, test_client, sample_trophy_body):
        created = (await test_client.post("/api/trophies", json=sample_trophy_body)).json()
        await test_client.delete(f"/api/trophies/{created['id']}")

        response = await test_client.get("/api/trophies")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, test_client):
        response = await test_client.delete(f"/api/trophies/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"message": "Trophy not found"}

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, test_client):
        response = await test_client.delete("/api/trophies/not-a-valid-id")
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid trophy id"}


class TestRouteNotFound:
    """Unmatched paths and methods."""

    @pytest.mark.asyncio
    async def test_get_on_delete_only_path(self, test_client):
        response = await test_client.get("/api/trophies/nonexistent-route")
        assert response.status_code == 404
        assert response.json() == {"message": "Route not found"}

    @pytest.mark.asyncio
    async def test_unknown_path(self, test_client):
        response = await test_client.get("/api/unknown")
        assert response.status_code == 404
        assert response.json() == {"message": "Route not found"}

    @pytest.mark.asyncio
    async def test_unsupported_method(self, test_client):
        response = await test_client.put("/api/trophies", json={})
        assert response.status_code == 404
        assert response.json() == {"message": "Route not found"}
