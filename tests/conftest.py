"""
Shared fixtures for the API tests.

Every test gets a fresh app over its own in-memory SQLite database and a
temporary upload directory. Rate limiting and database logging are off unless
a test turns them on.

Run:  python -m pytest tests -v
"""
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from photofeed.core.config import Settings
from photofeed.main import create_app

JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
PASSWORD = "secret1"

# Content is never decoded; only the declared type and size matter
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + b"\x00" * 64 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        APP_ENV="test",
        DATABASE_URL="sqlite://",
        JWT_SECRET=JWT_SECRET,
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        RATE_LIMIT_REQUESTS=0,
        LOG_TO_DATABASE=False,
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def jpeg(name: str = "photo.jpg", size: Optional[int] = None):
    content = JPEG_BYTES if size is None else b"\xff" * size
    return (name, content, "image/jpeg")


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, name: str, email: Optional[str] = None, password: str = PASSWORD) -> Dict[str, Any]:
    """Sign up and sign in; returns id, token and auth headers"""
    email = email or f"{name.lower()}@mail.com"

    response = client.post("/user/signup", data={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text

    response = client.post("/user/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    data = response.json()["data"]

    return {
        "id": data["userId"],
        "name": name,
        "email": email,
        "token": data["token"],
        "headers": bearer(data["token"]),
    }


def create_post(client: TestClient, user: Dict[str, Any], description: Optional[str] = "hello") -> Dict[str, Any]:
    data = {"description": description} if description is not None else {}
    response = client.post("/post/create", headers=user["headers"], data=data, files={"image": jpeg()})
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def alice(client):
    return register(client, "Alice")


@pytest.fixture
def bob(client):
    return register(client, "Bob")
