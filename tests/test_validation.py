"""
Tests for input models and error aggregation.
"""
import pytest

from photofeed.core.exceptions import BadRequest
from photofeed.core.validation import collect_field_errors, validate_input
from photofeed.schemas.comment import CommentCreate
from photofeed.schemas.post import PostCreate, PostEdit
from photofeed.schemas.user import UserSignin, UserSignup


def _errors(model, data):
    with pytest.raises(BadRequest) as exc:
        validate_input(model, data)
    assert exc.value.message == "Validation failed"
    return {item["field"]: item["message"] for item in exc.value.errors}


# ═══════════════════════════════════════════════════
# Signup / signin
# ═══════════════════════════════════════════════════

class TestSignupRules:
    def test_missing_name_and_password_gives_two_errors(self):
        errors = _errors(UserSignup, {"email": "alice@mail.com"})
        assert set(errors) == {"name", "password"}
        assert errors["name"] == "The name field is required."

    def test_none_counts_as_missing(self):
        errors = _errors(UserSignup, {"name": None, "email": "alice@mail.com", "password": "secret1"})
        assert errors == {"name": "The name field is required."}

    def test_name_is_trimmed_before_length_check(self):
        errors = _errors(UserSignup, {"name": "  al  ", "email": "alice@mail.com", "password": "secret1"})
        assert errors["name"] == "The name must be at least 3 characters."

    def test_password_length_bounds(self):
        short = _errors(UserSignup, {"name": "Alice", "email": "alice@mail.com", "password": "12345"})
        assert short["password"] == "The password must be at least 6 characters."
        long = _errors(UserSignup, {"name": "Alice", "email": "alice@mail.com", "password": "x" * 16})
        assert long["password"] == "The password may not be greater than 15 characters."

    def test_invalid_email(self):
        errors = _errors(UserSignup, {"name": "Alice", "email": "not-an-email", "password": "secret1"})
        assert errors["email"] == "The email format is invalid."

    def test_email_is_normalised(self):
        payload = validate_input(UserSignup, {"name": " Alice ", "email": "  Alice@Mail.COM ", "password": "secret1"})
        assert payload.name == "Alice"
        assert payload.email == "alice@mail.com"

    def test_non_string_name(self):
        errors = _errors(UserSignup, {"name": 12345, "email": "alice@mail.com", "password": "secret1"})
        assert errors["name"] == "The name must be a string."

    def test_signin_has_no_password_length_rule(self):
        payload = validate_input(UserSignin, {"email": "alice@mail.com", "password": "x"})
        assert payload.password == "x"

    def test_signin_requires_both_fields(self):
        errors = _errors(UserSignin, {})
        assert set(errors) == {"email", "password"}


# ═══════════════════════════════════════════════════
# Posts
# ═══════════════════════════════════════════════════

class TestPostRules:
    def test_create_requires_image(self):
        errors = _errors(PostCreate, {"description": "hello"})
        assert errors == {"image": "The image field is required."}

    def test_create_accepts_uploaded_file(self):
        payload = validate_input(PostCreate, {"file": "/uploads/posts/1-a.jpg", "description": " hi "})
        assert payload.image_path == "/uploads/posts/1-a.jpg"
        assert payload.description == "hi"

    def test_create_accepts_image_reference(self):
        payload = validate_input(PostCreate, {"image": "https://cdn.mail.com/a.png"})
        assert payload.image_path == "https://cdn.mail.com/a.png"
        assert payload.description is None

    def test_create_rejects_relative_reference(self):
        errors = _errors(PostCreate, {"image": "a.png"})
        assert "image" in errors

    def test_description_limit(self):
        errors = _errors(PostCreate, {"file": "/uploads/posts/1-a.jpg", "description": "x" * 501})
        assert errors["description"] == "The description may not be greater than 500 characters."

    def test_edit_needs_at_least_one_field(self):
        errors = _errors(PostEdit, {})
        assert errors == {"description": "Provide at least one field to update"}

    def test_edit_blank_description_counts_as_absent(self):
        errors = _errors(PostEdit, {"description": "   "})
        assert errors == {"description": "Provide at least one field to update"}

    def test_edit_with_description_only(self):
        payload = validate_input(PostEdit, {"description": "new"})
        assert payload.description == "new"
        assert payload.image_path is None

    def test_edit_invalid_image_is_reported_on_image(self):
        errors = _errors(PostEdit, {"image": "x" * 256})
        assert set(errors) == {"image"}


# ═══════════════════════════════════════════════════
# Comments
# ═══════════════════════════════════════════════════

class TestCommentRules:
    def test_content_required(self):
        errors = _errors(CommentCreate, {"content": "   "})
        assert errors == {"content": "The content field is required."}

    def test_content_limit(self):
        errors = _errors(CommentCreate, {"content": "x" * 501})
        assert errors["content"] == "The content may not be greater than 500 characters."

    def test_content_trimmed(self):
        assert validate_input(CommentCreate, {"content": "  nice  "}).content == "nice"


# ═══════════════════════════════════════════════════
# Error collection
# ═══════════════════════════════════════════════════

class TestCollectFieldErrors:
    def test_keeps_first_error_per_field(self):
        errors = collect_field_errors([
            {"loc": ("name",), "type": "missing", "msg": "Field required"},
            {"loc": ("name",), "type": "string_too_short", "msg": "short", "ctx": {"min_length": 3}},
            {"loc": ("email",), "type": "value_error", "msg": "bad email"},
        ])
        assert errors == [
            {"field": "name", "message": "The name field is required."},
            {"field": "email", "message": "bad email"},
        ]

    def test_strips_request_locations(self):
        errors = collect_field_errors(
            [{"loc": ("path", "postId"), "type": "uuid_parsing", "msg": "bad uuid"}],
            skip_locations=("path", "query"),
        )
        assert errors == [{"field": "postId", "message": "The postId must be a valid id."}]
