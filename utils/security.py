"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (access and refresh tokens use separate keys)
- JTI generation for token identifiers
"""
from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from flask import current_app

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenDecodeError(Exception):
    """Raised when a JWT is malformed, expired, wrongly signed or of the wrong type."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return ph.hash("not-a-real-password")


def burn_password_check(password: str) -> None:
    """Spend the same argon2 work as a real check, for lookups that found no user."""
    verify_password(password, _dummy_hash())


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def digest_token(token: str) -> str:
    """sha256 hex digest used to store bearer secrets we only need to match."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _secret_for(token_type: str) -> str:
    if token_type == REFRESH:
        return current_app.config["JWT_REFRESH_SECRET"]
    return current_app.config["JWT_SECRET"]


def _encode(claims: Dict[str, Any], token_type: str, lifetime) -> str:
    now = _now()
    payload = {
        "iss": current_app.config.get("JWT_ISSUER", "auth-gateway"),
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
        "type": token_type,
        **claims,
    }
    return jwt.encode(payload, _secret_for(token_type), algorithm=current_app.config["JWT_ALGORITHM"])


def create_access_token(user, jti: str | None = None) -> str:
    """Short-lived bearer token carrying the user's identity claims."""
    return _encode(
        {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "jti": jti or generate_jti(),
        },
        ACCESS,
        current_app.config["ACCESS_TOKEN_EXPIRES"],
    )


def create_refresh_token(user_id: str, jti: str | None = None) -> str:
    return _encode(
        {"sub": str(user_id), "jti": jti or generate_jti()},
        REFRESH,
        current_app.config["REFRESH_TOKEN_EXPIRES"],
    )


def decode_token(token: str, expected_type: str = ACCESS, verify_exp: bool = True) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenDecodeError on invalid signature/expired jwt.
    expected_type must be "access" or "refresh"; it also selects the verification key.
    """
    try:
        decoded = jwt.decode(
            token,
            _secret_for(expected_type),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "auth-gateway"),
            options={"verify_exp": verify_exp, "require": ["sub", "jti", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenDecodeError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenDecodeError(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise TokenDecodeError("Wrong token type")
    return decoded
