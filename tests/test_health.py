"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200, status ok and the store state."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data == {"status": "ok", "store": "connected", "connections": 0}


async def test_root_lists_endpoints(client: AsyncClient) -> None:
    """GET / returns the service banner with the main endpoints."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "active"
    assert data["endpoints"]["tasks"] == "/api/v1/tasks"
    assert data["endpoints"]["websocket"] == "/api/v1/ws"


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    """A safe client X-Request-ID is forwarded; an unsafe one is replaced."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = await client.get("/api/v1/health", headers={"X-Request-ID": "not a safe id!"})
    assert response.headers["X-Request-ID"] != "not a safe id!"
    assert len(response.headers["X-Request-ID"]) == 36
