"""
Auth gateway: sequences the credential store, attempt ledger, MFA issuer,
token issuer and mailer for each endpoint.

Functions return the JSON body for the success case and raise
services.errors exceptions otherwise; the blueprint only maps HTTP.
"""
from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from services import attempts, mfa, password_reset, tokens, users
from services.errors import (
    AuthenticationError,
    InternalError,
    LockoutError,
    NotFoundError,
    ValidationError,
    ACCOUNT_DISABLED,
    ACCOUNT_LOCKED,
    INTERNAL,
    INVALID_CREDENTIALS,
    USER_NOT_FOUND,
)
from utils.mailer import NotificationError
from utils.security import TokenDecodeError, burn_password_check, verify_password

logger = logging.getLogger(__name__)

MFA_SENT = "Código de verificação enviado"
LOGGED_OUT = "Logout realizado com sucesso"


def login(username: str, password: str, ip_address: str | None = None) -> dict:
    """Check credentials and either return a token pair or start an MFA challenge."""
    if not username:
        raise ValidationError("Usuário ou e-mail é obrigatório")
    if not password:
        raise ValidationError("Senha é obrigatória")

    user = users.find_by_login(username)
    if user is None:
        burn_password_check(password)
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_active:
        logger.info("login refused for inactive account user=%s", user.id)
        raise AuthenticationError(ACCOUNT_DISABLED)

    if not verify_password(password, user.password_hash):
        attempts.record_failure(user.id, ip_address)
        raise AuthenticationError(INVALID_CREDENTIALS)

    if attempts.is_locked(user.id):
        raise LockoutError(ACCOUNT_LOCKED)

    if user.mfa_enabled:
        challenge = mfa.issue_code(user)
        ttl_minutes = int(current_app.config["MFA_CODE_TTL"].total_seconds() // 60)
        try:
            current_app.extensions["mailer"].send(
                user.email,
                "Código de Verificação",
                f"Seu código de verificação é: {challenge.code}. Válido por {ttl_minutes} minutos.",
            )
        except NotificationError as exc:
            raise InternalError(INTERNAL) from exc
        return {"requireMfa": True, "message": MFA_SENT, "mfa_token": challenge.id}

    body = tokens.issue_token_pair(user)
    attempts.record_success(user.id, ip_address)
    logger.info("login succeeded user=%s", user.id)
    return body


def verify_mfa(code: str, mfa_token: str | None = None) -> dict:
    if not code:
        raise ValidationError("Código de verificação é obrigatório")

    user_id = mfa.consume_code(code, challenge_id=mfa_token)
    user = users.get_user(user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    if not user.is_active:
        raise AuthenticationError(ACCOUNT_DISABLED)

    body = tokens.issue_token_pair(user)
    logger.info("MFA verified user=%s", user.id)
    return body


def refresh(refresh_token: str) -> dict:
    if not refresh_token:
        raise ValidationError("Refresh token não fornecido")
    return tokens.rotate(refresh_token)


def logout(access_token: str) -> dict:
    """Revoke the caller's pair. Always acknowledges: the client discards its tokens regardless."""
    try:
        revoked = tokens.revoke_access_token(access_token)
    except TokenDecodeError as exc:
        logger.info("logout with unusable token: %s", exc)
    except SQLAlchemyError:
        logger.exception("logout revocation failed")
        storage.rollback()
    else:
        if not revoked:
            logger.info("logout for unknown or already revoked token")
    return {"message": LOGGED_OUT}


def request_password_reset(email: str) -> dict:
    if not email:
        raise ValidationError("E-mail inválido")
    return password_reset.request_reset(email)


def reset_password(token: str, new_password: str) -> dict:
    return password_reset.reset_password(token, new_password)
