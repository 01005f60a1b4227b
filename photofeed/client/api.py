"""
HTTP client for the PhotoFeed API

Usage:
    from photofeed.client.api import ApiClient

    client = ApiClient("http://localhost:8000")
    client.signin("alice@example.com", "secret1")
    result = client.fetch_posts(search="sunset")
    for post in result.data:
        print(post["description"])
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import mimetypes

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# A path on disk, or (filename, content, content_type)
FileSource = Union[str, Path, Tuple[str, bytes, str]]


class ApiClientError(Exception):
    """Non-2xx response from the API"""

    def __init__(self, message: str, status_code: int, field_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field_errors = field_errors or []

    def __str__(self):
        return self.message


@dataclass
class ApiResult:
    data: Any = None
    message: str = "Request completed"
    pagination: Optional[Dict[str, int]] = field(default=None)


def parse_body(response: httpx.Response) -> Any:
    """JSON payload if the body parses, the raw text otherwise, None if empty"""
    text = response.text
    if not text:
        return None
    try:
        return response.json()
    except ValueError:
        return text


def extract_field_errors(payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict) or not isinstance(payload.get("errors"), list):
        return []

    errors = []
    for item in payload["errors"]:
        if not isinstance(item, dict):
            continue
        errors.append({
            "field": item.get("field") if isinstance(item.get("field"), str) else None,
            "message": item.get("message") if isinstance(item.get("message"), str) else None,
        })
    return errors


def extract_error_message(payload: Any, status_text: str, field_errors: List[Dict[str, Any]]) -> str:
    """Payload message, else text body, else joined field messages, else status text"""
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]

    if isinstance(payload, str):
        return payload

    messages = [item["message"] for item in field_errors if isinstance(item.get("message"), str)]
    if messages:
        return " ".join(messages)

    return status_text or "Request failed"


def _file_part(source: FileSource) -> Tuple[str, bytes, str]:
    if isinstance(source, tuple):
        return source

    path = Path(source)
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return path.name, path.read_bytes(), content_type


class ApiClient:
    """Thin synchronous wrapper over the REST endpoints"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.Client(base_url=self.base_url, transport=transport, timeout=timeout)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ============ Plumbing ============

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(self, method: str, path: str, **kwargs) -> ApiResult:
        """
        Send a request and unwrap the response envelope

        Raises:
            ApiClientError: response status is not 2xx
        """
        if not path.startswith("/"):
            path = f"/{path}"

        response = self._client.request(method, path, headers=self._headers(), **kwargs)
        payload = parse_body(response)

        if not response.is_success:
            field_errors = extract_field_errors(payload)
            message = extract_error_message(payload, response.reason_phrase, field_errors)
            logger.debug("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise ApiClientError(message, response.status_code, field_errors)

        if isinstance(payload, dict):
            message = payload.get("message")
            return ApiResult(
                data=payload.get("data"),
                message=message if isinstance(message, str) and message else "Request completed",
                pagination=payload.get("pagination"),
            )

        return ApiResult(data=payload)

    def asset_url(self, image_path: str) -> str:
        """Absolute URL for an image path returned by the API"""
        if image_path.startswith(("http://", "https://")):
            return image_path
        if image_path.startswith("/"):
            return f"{self.base_url}{image_path}"
        return f"{self.base_url}/{image_path}"

    # ============ Users ============

    def signup(self, name: str, email: str, password: str, profile_pic: Optional[FileSource] = None) -> ApiResult:
        data = {"name": name, "email": email, "password": password}
        files = {"profilePic": _file_part(profile_pic)} if profile_pic is not None else None
        return self.request("POST", "/user/signup", data=data, files=files)

    def signin(self, email: str, password: str) -> ApiResult:
        """Sign in and keep the returned token for later calls"""
        result = self.request("POST", "/user/signin", json={"email": email, "password": password})
        if isinstance(result.data, dict) and result.data.get("token"):
            self.token = result.data["token"]
        return result

    def fetch_profile(self, user_id: str) -> ApiResult:
        return self.request("GET", f"/user/profile/{user_id}")

    def delete_account(self) -> ApiResult:
        result = self.request("DELETE", "/user/delete")
        self.token = None
        return result

    # ============ Posts ============

    def fetch_posts(self, page: int = 1, limit: int = 10, search: str = "") -> ApiResult:
        params = {"page": page, "limit": limit}
        if search.strip():
            params["search"] = search.strip()
        return self.request("GET", "/post", params=params)

    def fetch_post(self, post_id: str) -> ApiResult:
        return self.request("GET", f"/post/{post_id}")

    def create_post(
        self,
        image: Optional[FileSource] = None,
        description: str = "",
        image_url: Optional[str] = None
    ) -> ApiResult:
        """Create a post from an image file, or from an image path/URL already hosted"""
        data = {}
        if description.strip():
            data["description"] = description.strip()

        if image is not None:
            return self.request("POST", "/post/create", data=data, files={"image": _file_part(image)})

        if image_url:
            data["image"] = image_url
        return self.request("POST", "/post/create", json=data)

    def edit_post(
        self,
        post_id: str,
        description: Optional[str] = None,
        image: Optional[FileSource] = None,
        image_url: Optional[str] = None
    ) -> ApiResult:
        data = {}
        if description is not None:
            data["description"] = description

        if image is not None:
            return self.request("PATCH", f"/post/{post_id}", data=data, files={"image": _file_part(image)})

        if image_url:
            data["image"] = image_url
        return self.request("PATCH", f"/post/{post_id}", json=data)

    def delete_post(self, post_id: str) -> ApiResult:
        return self.request("DELETE", f"/post/{post_id}")

    def toggle_like(self, post_id: str) -> ApiResult:
        return self.request("POST", f"/post/{post_id}/like")

    # ============ Comments ============

    def create_comment(self, post_id: str, content: str) -> ApiResult:
        return self.request("POST", f"/post/{post_id}/comments", json={"content": content})

    def fetch_comments(self, post_id: str, page: int = 1, limit: int = 50) -> ApiResult:
        return self.request("GET", f"/post/{post_id}/comments", params={"page": page, "limit": limit})

    def delete_comment(self, comment_id: str) -> ApiResult:
        return self.request("DELETE", f"/post/comments/{comment_id}")
