"""Tests for API middleware and error handlers."""

from fastapi import FastAPI
from fastapi.testclient import TestClient


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_request_id_in_error_body(self, client: TestClient) -> None:
        """Error responses carry the request ID."""
        response = client.get("/api/auth/me", headers={"X-Request-ID": "req-1"})
        assert response.status_code == 401
        assert response.json()["request_id"] == "req-1"


class TestErrorHandling:
    """Tests for error responses."""

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_unhandled_exception(self, app: FastAPI, client: TestClient) -> None:
        @app.get("/boom")
        async def boom() -> None:
            raise RuntimeError("secret internals")

        response = client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert "secret internals" not in data["message"]
        assert data["request_id"] == response.headers["X-Request-ID"]

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/api/products",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
