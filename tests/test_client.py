"""
Tests for the HTTP client wrapper and the command line front end.
"""
import json

import httpx
import pytest

from photofeed.client import cli
from photofeed.client.api import ApiClient, ApiClientError, extract_error_message


def _client(handler, token=None):
    return ApiClient("http://api.test/", token=token, transport=httpx.MockTransport(handler))


class TestResponses:
    def test_envelope_is_unwrapped(self):
        def handler(request):
            return httpx.Response(200, json={
                "success": True,
                "message": "Posts fetched successfully",
                "data": [{"id": "1"}],
                "pagination": {"page": 1, "limit": 10, "totalPosts": 1, "totalPages": 1},
            })

        result = _client(handler, token="t").fetch_posts()
        assert result.data == [{"id": "1"}]
        assert result.message == "Posts fetched successfully"
        assert result.pagination["totalPosts"] == 1

    def test_default_message(self):
        result = _client(lambda request: httpx.Response(200, json={"data": {"ok": 1}})).fetch_post("p1")
        assert result.message == "Request completed"
        assert result.data == {"ok": 1}

    def test_plain_body(self):
        result = _client(lambda request: httpx.Response(200, text="pong")).request("GET", "ping")
        assert result.data == "pong"
        assert result.message == "Request completed"

    def test_error_with_field_errors(self):
        def handler(request):
            return httpx.Response(400, json={
                "success": False,
                "statusCode": 400,
                "message": "Validation failed",
                "errors": [{"field": "name", "message": "The name field is required."}],
            })

        with pytest.raises(ApiClientError) as exc:
            _client(handler).signup("", "a@mail.com", "secret1")

        assert exc.value.status_code == 400
        assert exc.value.message == "Validation failed"
        assert exc.value.field_errors == [{"field": "name", "message": "The name field is required."}]

    def test_error_message_fallbacks(self):
        assert extract_error_message({"message": "nope"}, "Bad Request", []) == "nope"
        assert extract_error_message("gateway down", "Bad Gateway", []) == "gateway down"
        assert extract_error_message({}, "Bad Request", [{"field": "a", "message": "x"}, {"field": "b", "message": "y"}]) == "x y"
        assert extract_error_message(None, "Not Found", []) == "Not Found"
        assert extract_error_message(None, "", []) == "Request failed"

    def test_error_with_empty_body_uses_status_text(self):
        with pytest.raises(ApiClientError) as exc:
            _client(lambda request: httpx.Response(503)).fetch_posts()
        assert exc.value.message == "Service Unavailable"


class TestRequests:
    def test_signin_stores_token_and_sends_it(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path == "/user/signin":
                return httpx.Response(200, json={"data": {"userId": "u1", "userName": "Alice", "token": "tok"}})
            return httpx.Response(200, json={"data": []})

        client = _client(handler)
        client.signin("alice@mail.com", "secret1")
        client.fetch_posts(search="  cat ")

        assert json.loads(seen[0].content) == {"email": "alice@mail.com", "password": "secret1"}
        assert "authorization" not in seen[0].headers
        assert seen[1].headers["authorization"] == "Bearer tok"
        assert seen[1].url.params["search"] == "cat"
        assert seen[1].url.params["page"] == "1"

    def test_create_post_uploads_file(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"data": {"id": "p1", "image": "/uploads/posts/x.jpg", "description": "hi"}})

        _client(handler, token="tok").create_post(image=("x.jpg", b"\xff\xd8", "image/jpeg"), description=" hi ")

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/post/create"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="image"; filename="x.jpg"' in request.content
        assert b"hi" in request.content

    def test_create_post_from_image_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"data": {}})

        _client(handler, token="tok").create_post(image_url="https://cdn.mail.com/a.png")
        assert json.loads(seen[0].content) == {"image": "https://cdn.mail.com/a.png"}

    @pytest.mark.parametrize("call, method, path", [
        (lambda c: c.delete_post("p1"), "DELETE", "/post/p1"),
        (lambda c: c.toggle_like("p1"), "POST", "/post/p1/like"),
        (lambda c: c.create_comment("p1", "hi"), "POST", "/post/p1/comments"),
        (lambda c: c.fetch_comments("p1"), "GET", "/post/p1/comments"),
        (lambda c: c.delete_comment("c1"), "DELETE", "/post/comments/c1"),
        (lambda c: c.fetch_profile("u1"), "GET", "/user/profile/u1"),
        (lambda c: c.edit_post("p1", description="new"), "PATCH", "/post/p1"),
        (lambda c: c.delete_account(), "DELETE", "/user/delete"),
    ])
    def test_routes(self, call, method, path):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": None})

        call(_client(handler, token="tok"))
        assert (seen[0].method, seen[0].url.path) == (method, path)

    def test_asset_url(self):
        client = _client(lambda request: httpx.Response(200))
        assert client.asset_url("/uploads/posts/a.jpg") == "http://api.test/uploads/posts/a.jpg"
        assert client.asset_url("uploads/a.jpg") == "http://api.test/uploads/a.jpg"
        assert client.asset_url("https://cdn.mail.com/a.jpg") == "https://cdn.mail.com/a.jpg"


class TestAgainstTheApp:
    def test_client_drives_the_real_api(self, client):
        api = ApiClient("http://testserver", transport=client._transport)

        api.signup("Alice", "alice@mail.com", "secret1")
        api.signin("alice@mail.com", "secret1")
        created = api.create_post(image=("a.jpg", b"\xff\xd8\xff", "image/jpeg"), description="hello")
        liked = api.toggle_like(created.data["id"])
        feed = api.fetch_posts()

        assert liked.data == {"liked": True, "likeCount": 1}
        assert feed.data[0]["description"] == "hello"
        assert feed.data[0]["likedByMe"] is True

        with pytest.raises(ApiClientError) as exc:
            api.create_comment(created.data["id"], "x" * 501)
        assert exc.value.field_errors[0]["field"] == "content"


class TestCli:
    def test_signin_saves_session(self, tmp_path, monkeypatch, capsys):
        session_file = tmp_path / "session.json"
        monkeypatch.setattr(cli, "SESSION_FILE", session_file)

        def handler(request):
            return httpx.Response(200, json={"message": "SignIn successful", "data": {"userId": "u1", "userName": "Alice", "token": "tok"}})

        monkeypatch.setattr(cli, "ApiClient", lambda base_url, token=None: _client(handler, token))

        assert cli.main(["signin", "alice@mail.com", "--password", "secret1"]) == 0
        assert json.loads(session_file.read_text())["token"] == "tok"
        assert "Signed in as Alice" in capsys.readouterr().out

    def test_field_errors_are_printed(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "load_session", lambda: {"token": "tok"})

        def handler(request):
            return httpx.Response(400, json={
                "message": "Validation failed",
                "errors": [{"field": "content", "message": "The content field is required."}],
            })

        monkeypatch.setattr(cli, "ApiClient", lambda base_url, token=None: _client(handler, token))

        assert cli.main(["comment", "p1", ""]) == 1
        err = capsys.readouterr().err
        assert "Error (400): Validation failed" in err
        assert "content: The content field is required." in err

    def test_session_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        cli.save_session({"token": "tok"}, path)
        assert cli.load_session(path) == {"token": "tok"}
        cli.clear_session(path)
        assert cli.load_session(path) == {}
