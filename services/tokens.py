"""
Token issuer: mints access/refresh pairs, persists them, rotates and revokes.

Tokens are identified server-side by their JWT IDs. A pair stays
cryptographically valid until it expires, so every acceptance path also
requires the stored row to be unrevoked; revocation is an UPDATE of the
revoked flag, never a delete.
"""
from __future__ import annotations

import logging

from flask import current_app

from models import storage
from models.auth_token import AuthToken
from models.base_model import utcnow
from services import users
from services.errors import (
    AuthenticationError,
    NotFoundError,
    INVALID_REFRESH_TOKEN,
    USER_NOT_FOUND_OR_INACTIVE,
)
from utils.security import (
    ACCESS,
    REFRESH,
    TokenDecodeError,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_jti,
)

logger = logging.getLogger(__name__)


def _mint(user) -> tuple[AuthToken, dict]:
    """Build (unsaved) pair row plus the response body for ``user``."""
    now = utcnow()
    access_jti, refresh_jti = generate_jti(), generate_jti()
    pair = AuthToken(
        user_id=user.id,
        access_jti=access_jti,
        refresh_jti=refresh_jti,
        access_expires_at=now + current_app.config["ACCESS_TOKEN_EXPIRES"],
        expires_at=now + current_app.config["REFRESH_TOKEN_EXPIRES"],
        revoked=False,
    )
    body = {
        "token": create_access_token(user, jti=access_jti),
        "refresh_token": create_refresh_token(user.id, jti=refresh_jti),
        "token_type": "bearer",
        "expires_in": int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
    }
    return pair, body


def issue_token_pair(user) -> dict:
    pair, body = _mint(user)
    storage.new(pair)
    storage.save()
    return body


def _live_pairs(session, *criteria):
    return session.query(AuthToken).filter(AuthToken.revoked.is_(False), *criteria)


def rotate(refresh_token: str) -> dict:
    """Exchange a refresh token for a new pair, revoking the presented one.

    The revoke is conditional on the row still being live and shares a
    transaction with the insert of the new pair.
    """
    try:
        claims = decode_token(refresh_token, expected_type=REFRESH)
    except TokenDecodeError as exc:
        logger.info("refresh rejected: %s", exc)
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    session = storage.get_session()
    now = utcnow()
    pair = (
        _live_pairs(session, AuthToken.refresh_jti == claims["jti"], AuthToken.expires_at > now)
        .first()
    )
    if pair is None:
        logger.warning("refresh token replay or unknown pair jti=%s", claims["jti"])
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    user = users.get_active_user(pair.user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND_OR_INACTIVE)

    claimed = _live_pairs(session, AuthToken.id == pair.id, AuthToken.expires_at > now).update(
        {AuthToken.revoked: True, AuthToken.revoked_at: now}, synchronize_session=False
    )
    if claimed != 1:
        storage.rollback()
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    new_pair, body = _mint(user)
    storage.new(new_pair)
    storage.save()
    logger.info("refresh token rotated user=%s", user.id)
    return body


def revoke_access_token(access_token: str) -> bool:
    """Revoke the pair an access token belongs to. Expired tokens may still be revoked.

    Returns False when the token is not ours or already revoked.
    """
    claims = decode_token(access_token, expected_type=ACCESS, verify_exp=False)
    session = storage.get_session()
    count = _live_pairs(session, AuthToken.access_jti == claims["jti"]).update(
        {AuthToken.revoked: True, AuthToken.revoked_at: utcnow()}, synchronize_session=False
    )
    storage.save()
    return count == 1


def revoke_all_for_user(user_id: str) -> int:
    """Flag every live pair of the user; the caller commits."""
    session = storage.get_session()
    count = _live_pairs(session, AuthToken.user_id == user_id).update(
        {AuthToken.revoked: True, AuthToken.revoked_at: utcnow()}, synchronize_session=False
    )
    return count


def authenticate_access_token(access_token: str):
    """Resolve a bearer access token to its active user or raise AuthenticationError."""
    try:
        claims = decode_token(access_token, expected_type=ACCESS)
    except TokenDecodeError as exc:
        raise AuthenticationError(str(exc))

    session = storage.get_session()
    live = _live_pairs(
        session,
        AuthToken.access_jti == claims["jti"],
        AuthToken.access_expires_at > utcnow(),
    ).first()
    if live is None:
        raise AuthenticationError("Token revogado ou expirado")

    user = users.get_active_user(claims["sub"])
    if user is None:
        raise AuthenticationError(USER_NOT_FOUND_OR_INACTIVE)
    return user, claims
