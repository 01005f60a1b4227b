"""
Password hashing and bearer token helpers
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from photofeed.core.exceptions import ExpiredToken, Internal, InvalidSignature, MalformedToken

DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_TOKEN_TTL = timedelta(days=7)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=DEFAULT_BCRYPT_ROUNDS)


@dataclass(frozen=True)
class TokenClaims:
    """Identity embedded in a bearer token"""
    user_id: str
    email: str


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    if rounds is None:
        return pwd_context.hash(password)
    return pwd_context.using(bcrypt__rounds=rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognised hash
        return False


def create_access_token(
    user_id: str,
    email: str,
    secret: Optional[str],
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token

    Args:
        user_id: Account identifier, stored in the ``id`` claim
        email: Account email, stored in the ``email`` claim
        secret: Signing secret
        algorithm: JWT algorithm
        expires_delta: Validity window (defaults to 7 days)

    Returns:
        Encoded JWT string
    """
    if not secret:
        raise Internal("JWT secret is not configured")

    now = datetime.now(timezone.utc)
    payload = {
        "id": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + (expires_delta or DEFAULT_TOKEN_TTL),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: Optional[str], algorithm: str = "HS256") -> TokenClaims:
    """
    Verify a token and return its claims

    Raises:
        MalformedToken: token cannot be decoded or lacks the identity claims
        ExpiredToken: token is past its ``exp``
        InvalidSignature: token was not signed with ``secret``
        Internal: no secret configured
    """
    if not secret:
        raise Internal("JWT secret is not configured")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredToken()
    except jwt.InvalidSignatureError:
        raise InvalidSignature()
    except jwt.InvalidTokenError:
        raise MalformedToken()

    user_id = payload.get("id")
    email = payload.get("email")
    if isinstance(user_id, bool) or not isinstance(user_id, (str, int)) or not isinstance(email, str):
        raise MalformedToken("Invalid token payload")

    return TokenClaims(user_id=str(user_id), email=email)
