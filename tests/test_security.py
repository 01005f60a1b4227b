"""
Tests for password hashing, bearer tokens and Authorization header parsing.
"""
from datetime import timedelta

import jwt
import pytest

from photofeed.core.dependencies import parse_bearer_token
from photofeed.core.exceptions import (
    ExpiredToken,
    Internal,
    InvalidSignature,
    MalformedToken,
    Unauthorized,
)
from photofeed.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)

SECRET = "unit-test-secret-key-that-is-long-enough"
USER_ID = "0b7f1a52-5d0e-4c38-9a55-3f1f4e9d2c11"


# ═══════════════════════════════════════════════════
# Passwords
# ═══════════════════════════════════════════════════

class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("secret1", rounds=4)
        assert hashed != "secret1"
        assert hashed.startswith("$2")

    def test_correct_password_verifies(self):
        hashed = get_password_hash("secret1", rounds=4)
        assert verify_password("secret1", hashed) is True

    def test_wrong_password_fails(self):
        hashed = get_password_hash("secret1", rounds=4)
        assert verify_password("secret2", hashed) is False

    def test_unrecognised_hash_fails(self):
        assert verify_password("secret1", "not-a-hash") is False

    def test_explicit_rounds_are_used(self):
        hashed = get_password_hash("secret1", rounds=5)
        assert hashed.startswith("$2b$05$")
        assert verify_password("secret1", hashed) is True

    def test_default_rounds(self):
        assert get_password_hash("secret1").startswith("$2b$10$")


# ═══════════════════════════════════════════════════
# Tokens
# ═══════════════════════════════════════════════════

class TestTokens:
    def test_claims_survive_round_trip(self):
        token = create_access_token(USER_ID, "alice@mail.com", SECRET)
        claims = decode_token(token, SECRET)
        assert claims.user_id == USER_ID
        assert claims.email == "alice@mail.com"

    def test_default_expiry_is_seven_days(self):
        token = create_access_token(USER_ID, "alice@mail.com", SECRET)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired_token(self):
        token = create_access_token(USER_ID, "alice@mail.com", SECRET, expires_delta=timedelta(seconds=-10))
        with pytest.raises(ExpiredToken) as exc:
            decode_token(token, SECRET)
        assert exc.value.message == "Token has expired"

    def test_wrong_secret(self):
        token = create_access_token(USER_ID, "alice@mail.com", "another-secret-key-that-is-long-enough")
        with pytest.raises(InvalidSignature) as exc:
            decode_token(token, SECRET)
        assert exc.value.message == "Invalid token signature"

    def test_garbage_token(self):
        with pytest.raises(MalformedToken) as exc:
            decode_token("not.a.token", SECRET)
        assert exc.value.message == "Invalid token"

    def test_token_without_identity_claims(self):
        token = jwt.encode({"exp": 4102444800, "email": "alice@mail.com"}, SECRET, algorithm="HS256")
        with pytest.raises(MalformedToken) as exc:
            decode_token(token, SECRET)
        assert exc.value.message == "Invalid token payload"

    def test_token_without_expiry_is_rejected(self):
        token = jwt.encode({"id": USER_ID, "email": "alice@mail.com"}, SECRET, algorithm="HS256")
        with pytest.raises(MalformedToken):
            decode_token(token, SECRET)

    def test_missing_secret(self):
        with pytest.raises(Internal):
            create_access_token(USER_ID, "alice@mail.com", None)
        with pytest.raises(Internal):
            decode_token("anything", "")

    def test_all_token_failures_are_401(self):
        for error in (MalformedToken(), ExpiredToken(), InvalidSignature()):
            assert isinstance(error, Unauthorized)
            assert error.status_code == 401


# ═══════════════════════════════════════════════════
# Authorization header
# ═══════════════════════════════════════════════════

class TestBearerHeader:
    def test_extracts_token(self):
        assert parse_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert parse_bearer_token("bearer abc") == "abc"

    def test_missing_header(self):
        with pytest.raises(Unauthorized) as exc:
            parse_bearer_token(None)
        assert exc.value.message == "Authorization header is required"

    @pytest.mark.parametrize("header", ["abc", "Basic abc", "Bearer", "Bearer a b"])
    def test_malformed_header(self, header):
        with pytest.raises(Unauthorized) as exc:
            parse_bearer_token(header)
        assert exc.value.message == "Invalid authorization format. Use: Bearer <token>"
