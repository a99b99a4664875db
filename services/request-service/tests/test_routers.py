"""
Tests for API routers.

Run the full application (lifespan included) against in-memory SQLite.
"""

import uuid
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from app.domain.exceptions import RequestStoreException


def _create(client, name, item="Desk", status=None, location=None):
    body = {"requestorName": name, "itemRequested": item}
    if status is not None:
        body["status"] = status
    if location is not None:
        body["location"] = {"type": "Point", "coordinates": location}
    response = client.put("/api/request", json=body)
    assert response.status_code == 201
    return response.json()


class TestRootAndHealth:
    """Test service endpoints"""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/api/v1/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["ready"] is True
        assert data["checks"]["database"] == "healthy"

    def test_not_ready(self, client):
        repository = AsyncMock()
        repository.ping.return_value = False
        client.app.state.repository = repository

        response = client.get("/api/v1/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    def test_metrics(self, client):
        client.get("/api/request")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "item_request_operations_total" in response.text

    def test_request_id_echoed(self, client):
        response = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestCreateEndpoint:
    """Test PUT /api/request"""

    def test_create(self, client, create_payload):
        response = client.put("/api/request", json=create_payload)

        assert response.status_code == 201
        data = response.json()
        uuid.UUID(data["id"])
        assert data["requestorName"] == "John Doe"
        assert data["itemRequested"] == "Desk"
        assert data["status"] == "approved"
        assert data["location"] == {"type": "Point", "coordinates": [-73.98, 40.75]}
        assert data["requestCreatedDate"] == data["lastEditedDate"]

    def test_create_defaults_to_pending(self, client):
        data = _create(client, "Jane Roe")
        assert data["status"] == "pending"
        assert "location" not in data

    def test_short_name_rejected(self, client):
        response = client.put(
            "/api/request", json={"requestorName": "Bo", "itemRequested": "Desk"}
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "invalid_input"
        assert detail["details"]["field"] == "requestorName"

    def test_missing_body(self, client):
        response = client.put("/api/request")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"

    def test_malformed_json(self, client):
        response = client.put(
            "/api/request",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "body"

    def test_invalid_location(self, client):
        response = client.put(
            "/api/request",
            json={
                "requestorName": "John Doe",
                "itemRequested": "Desk",
                "location": {"type": "Point", "coordinates": [1.0]},
            },
        )
        assert response.status_code == 400

    def test_unrepresentable_coordinate_rejected(self, client):
        response = client.put(
            "/api/request",
            content=(
                b'{"requestorName": "John Doe", "itemRequested": "Desk", '
                b'"location": {"type": "Point", "coordinates": [1' + b"0" * 400 + b', 0]}}'
            ),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"].startswith("location")

    def test_long_value_not_echoed_in_full(self, client):
        response = client.put(
            "/api/request", json={"requestorName": "John Doe", "itemRequested": "x" * 100_000}
        )
        assert response.status_code == 400
        assert len(response.json()["detail"]["details"]["value"]) <= 100


class TestListEndpoint:
    """Test GET /api/request"""

    @pytest.fixture
    def populated(self, client):
        created = []
        for i, status in enumerate(["pending", "approved", "approved", "rejected"] * 2):
            created.append(_create(client, f"Requestor {i}", status=status))
        return created

    def test_empty(self, client):
        response = client.get("/api/request")
        assert response.status_code == 200
        assert response.json() == []

    def test_paging(self, client, populated):
        page1 = client.get("/api/request").json()
        page2 = client.get("/api/request", params={"page": 2}).json()
        page3 = client.get("/api/request", params={"page": 3}).json()

        assert len(page1) == 5
        assert len(page2) == 3
        assert page3 == []
        ids = {r["id"] for r in page1 + page2}
        assert ids == {r["id"] for r in populated}

        dates = [datetime.fromisoformat(r["requestCreatedDate"]) for r in page1 + page2]
        assert dates == sorted(dates, reverse=True)

    def test_status_filter(self, client, populated):
        response = client.get("/api/request", params={"status": "approved"})
        data = response.json()
        assert len(data) == 4
        assert all(r["status"] == "approved" for r in data)

    def test_unknown_status_filter_ignored(self, client, populated):
        filtered = client.get("/api/request", params={"status": "archived"}).json()
        unfiltered = client.get("/api/request").json()
        assert filtered == unfiltered

    @pytest.mark.parametrize("page", ["0", "-3"])
    def test_page_below_one(self, client, page):
        response = client.get("/api/request", params={"page": page})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "invalid_input"
        assert detail["details"]["field"] == "page"

    def test_page_past_store_range_is_empty(self, client):
        response = client.get("/api/request", params={"page": str(10**19)})
        assert response.status_code == 200
        assert response.json() == []

    def test_non_integer_page(self, client):
        response = client.get("/api/request", params={"page": "two"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"

    def test_store_failure(self, client):
        service = AsyncMock()
        service.list_requests.side_effect = RequestStoreException("find", "db down")
        client.app.state.request_service = service

        response = client.get("/api/request")

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["error"] == "internal_server_error"
        assert "db down" not in detail["message"]


class TestEditEndpoint:
    """Test PATCH /api/request"""

    def test_edit(self, client):
        created = _create(client, "Jane Roe")

        response = client.patch(
            "/api/request", json={"id": created["id"], "status": "completed"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["status"] == "completed"
        assert data["requestCreatedDate"] == created["requestCreatedDate"]
        assert datetime.fromisoformat(data["lastEditedDate"]) >= datetime.fromisoformat(
            created["lastEditedDate"]
        )

    def test_edit_unknown_id(self, client):
        response = client.patch(
            "/api/request", json={"id": str(uuid.uuid4()), "status": "approved"}
        )

        assert response.status_code == 200
        assert response.json() is None
        assert client.get("/api/request").json() == []

    def test_edit_invalid_status(self, client):
        created = _create(client, "Jane Roe")

        response = client.patch("/api/request", json={"id": created["id"], "status": "done"})

        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "status"

    def test_edit_invalid_id(self, client):
        response = client.patch("/api/request", json={"id": "123", "status": "approved"})
        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "id"


class TestBatchEndpoints:
    """Test PATCH and DELETE /api/batch"""

    def test_batch_approve(self, client):
        a = _create(client, "Alice Smith")
        b = _create(client, "Bob Jones")

        response = client.patch(
            "/api/batch",
            json=[
                {"id": a["id"], "status": "approved"},
                {"id": b["id"], "status": "approved"},
                {"id": str(uuid.uuid4()), "status": "approved"},
            ],
        )

        assert response.status_code == 200
        assert response.json() == {
            "matchedCount": 2,
            "modifiedCount": 2,
            "upserts": 0,
            "errors": [],
        }
        listed = client.get("/api/request", params={"status": "approved"}).json()
        assert {r["id"] for r in listed} == {a["id"], b["id"]}

    def test_batch_approve_rejects_whole_batch(self, client):
        a = _create(client, "Alice Smith")

        response = client.patch(
            "/api/batch",
            json=[{"id": a["id"], "status": "approved"}, {"id": a["id"], "status": "nope"}],
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "edits[1].status"
        [stored] = client.get("/api/request").json()
        assert stored["status"] == "pending"

    @pytest.mark.parametrize("body", [[], {"id": "x"}])
    def test_batch_approve_requires_list(self, client, body):
        response = client.patch("/api/batch", json=body)
        assert response.status_code == 400

    def test_batch_delete(self, client):
        a = _create(client, "Alice Smith")
        b = _create(client, "Bob Jones")

        response = client.request(
            "DELETE", "/api/batch", json=[{"id": a["id"]}, {"id": str(uuid.uuid4())}]
        )

        assert response.status_code == 200
        data = response.json()
        assert data["matchedCount"] == 1
        assert data["modifiedCount"] == 1
        assert [r["id"] for r in client.get("/api/request").json()] == [b["id"]]

    def test_batch_delete_rejects_whole_batch(self, client):
        a = _create(client, "Alice Smith")

        response = client.request("DELETE", "/api/batch", json=[{"id": a["id"]}, {"id": ""}])

        assert response.status_code == 400
        assert len(client.get("/api/request").json()) == 1

    def test_batch_store_failure(self, client):
        service = AsyncMock()
        service.batch_delete.side_effect = RequestStoreException("bulk_write", "db down")
        client.app.state.batch_service = service

        response = client.request("DELETE", "/api/batch", json=[{"id": str(uuid.uuid4())}])

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "internal_server_error"


class TestHeatmapEndpoint:
    """Test GET /api/heatmap"""

    def test_heatmap(self, client):
        _create(client, "Alice Smith", location=[-73.98, 40.75])
        _create(client, "Bob Jones")
        _create(client, "Carol White", location=[2.35, 48.85])

        response = client.get("/api/heatmap")

        assert response.status_code == 200
        points = sorted(response.json(), key=lambda p: p["lat"])
        assert points == [{"lat": 40.75, "lng": -73.98}, {"lat": 48.85, "lng": 2.35}]

    def test_heatmap_empty(self, client):
        assert client.get("/api/heatmap").json() == []
