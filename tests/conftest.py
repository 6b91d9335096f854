"""Shared fixtures for application tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_api.infrastructure.config import Settings
from catalog_api.main import create_app


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings for an app backed by the in-memory stores."""
    return Settings(
        store_backend="memory",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_bytes=1024,
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create a fresh application."""
    return create_app(test_settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Create test client without authentication."""
    with TestClient(app) as test_client:
        yield test_client
