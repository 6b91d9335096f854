"""Shared fixtures for API tests."""

import asyncio
from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_api.domain.entities import Role

PASSWORD = "s3cret!"


def bearer(token: str) -> dict[str, str]:
    """Get authentication headers for a token."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., dict]:
    """Register users through the API.

    Returns a function taking an email (and optional name) that returns the
    auth response body.
    """

    def _register(email: str, name: str = "Test User") -> dict:
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "name": name},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def owner(register_user: Callable[..., dict]) -> dict:
    """A registered regular user."""
    return register_user("owner@example.com", "Owner")


@pytest.fixture
def other(register_user: Callable[..., dict]) -> dict:
    """A second regular user."""
    return register_user("other@example.com", "Other")


@pytest.fixture
def admin(app: FastAPI, client: TestClient) -> dict:
    """An admin, created directly through the credential service."""
    result = asyncio.run(
        app.state.container.credentials.register(
            "admin@example.com", PASSWORD, "Admin", role=Role.ADMIN
        )
    )
    return {"user": result.user.to_public_dict(), "token": result.token}


@pytest.fixture
def auth_headers(owner: dict) -> dict[str, str]:
    """Get authentication headers of the owner."""
    return bearer(owner["token"])


@pytest.fixture
def create_product(client: TestClient, auth_headers: dict[str, str]) -> Callable[..., dict]:
    """Create products as the owner.

    Returns a function taking form overrides that returns the product body.
    """

    def _create(headers: dict[str, str] | None = None, **overrides: str) -> dict:
        data = {
            "name": "Desk Lamp",
            "description": "Warm light",
            "category": "Home",
            "price": "19.99",
        }
        data.update(overrides)
        response = client.post("/api/products", data=data, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
