"""
Tests for image upload validation and storage.
"""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from photofeed.main import create_app
from photofeed.services.upload_service import UploadPolicy
from tests.conftest import PNG_BYTES, jpeg, make_settings, register


class TestUploadPolicy:
    def test_post_policy(self, settings):
        policy = UploadPolicy.for_kind("posts", settings)
        assert policy.field == "image"
        assert policy.max_bytes == 5 * 1024 * 1024
        assert policy.too_large_message == "Image must be at most 5MB"

    def test_profile_policy(self, settings):
        policy = UploadPolicy.for_kind("profiles", settings)
        assert policy.field == "profilePic"
        assert policy.too_large_message == "Profile picture must be at most 2MB"

    def test_unknown_kind(self, settings):
        with pytest.raises(ValueError):
            UploadPolicy.for_kind("videos", settings)


class TestPostImageUpload:
    def test_stored_under_uploads_posts(self, client, settings):
        user = register(client, "Alice")
        response = client.post(
            "/post/create",
            headers=user["headers"],
            data={"description": "hello"},
            files={"image": jpeg("Beach.JPG")},
        )
        assert response.status_code == 201
        image = response.json()["data"]["image"]
        assert image.startswith("/uploads/posts/")
        assert image.endswith(".jpg")

        stored = Path(settings.UPLOAD_DIR) / "posts" / image.rsplit("/", 1)[1]
        assert stored.exists()

    def test_stored_file_is_served(self, client):
        user = register(client, "Alice")
        response = client.post("/post/create", headers=user["headers"], files={"image": ("a.png", PNG_BYTES, "image/png")})
        image = response.json()["data"]["image"]

        served = client.get(image)
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_rejects_non_image_type(self, client):
        user = register(client, "Alice")
        response = client.post(
            "/post/create",
            headers=user["headers"],
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"] == [{"field": "image", "message": "Only JPEG, PNG, and WEBP images are allowed"}]

    def test_rejects_oversized_image(self, client):
        user = register(client, "Alice")
        response = client.post(
            "/post/create",
            headers=user["headers"],
            files={"image": jpeg(size=5 * 1024 * 1024 + 1)},
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "image", "message": "Image must be at most 5MB"}]

    def test_limit_is_configurable(self, tmp_path):
        app = create_app(make_settings(tmp_path, POST_IMAGE_MAX_BYTES=1024))
        with TestClient(app) as small_client:
            user = register(small_client, "Alice")
            response = small_client.post("/post/create", headers=user["headers"], files={"image": jpeg(size=2048)})
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "image", "message": "Image must be at most 1KB"}]

    def test_extension_follows_content_type(self, client):
        user = register(client, "Alice")
        response = client.post(
            "/post/create",
            headers=user["headers"],
            files={"image": ("page.html", b"<script>alert(1)</script>", "image/jpeg")},
        )
        assert response.status_code == 201

        image = response.json()["data"]["image"]
        assert image.endswith(".jpg")
        assert client.get(image).headers["content-type"] == "image/jpeg"

    @pytest.mark.parametrize("filename, content_type, suffix", [
        ("photo.jpeg", "image/jpeg", ".jpeg"),
        ("photo", "image/png", ".png"),
        ("photo.png", "image/webp", ".webp"),
    ])
    def test_stored_suffix(self, client, filename, content_type, suffix):
        user = register(client, "Alice")
        response = client.post(
            "/post/create",
            headers=user["headers"],
            files={"image": (filename, PNG_BYTES, content_type)},
        )
        assert response.json()["data"]["image"].endswith(suffix)

    def test_rejection_is_logged(self, client, caplog):
        user = register(client, "Alice")
        with caplog.at_level("WARNING", logger="photofeed.services.upload_service"):
            client.post("/post/create", headers=user["headers"], files={"image": ("a.txt", b"x", "text/plain")})

        assert "Rejected posts upload on field image" in caplog.text

    def test_upload_needs_authentication_first(self, client, settings):
        response = client.post("/post/create", files={"image": jpeg()})
        assert response.status_code == 401
        assert not (Path(settings.UPLOAD_DIR) / "posts").exists()


class TestProfilePictureUpload:
    def test_signup_with_profile_picture(self, client):
        response = client.post(
            "/user/signup",
            data={"name": "Alice", "email": "alice@mail.com", "password": "secret1"},
            files={"profilePic": ("me.webp", b"RIFF0000WEBP", "image/webp")},
        )
        assert response.status_code == 201
        assert response.json()["data"]["profilePic"].startswith("/uploads/profiles/")

    def test_profile_picture_limit(self, client):
        response = client.post(
            "/user/signup",
            data={"name": "Alice", "email": "alice@mail.com", "password": "secret1"},
            files={"profilePic": jpeg(size=2 * 1024 * 1024 + 1)},
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "profilePic", "message": "Profile picture must be at most 2MB"}]
