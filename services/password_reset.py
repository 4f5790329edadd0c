"""
Password reset: request (email a one-hour link) and completion (single use).
"""
from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

from flask import current_app

from models import storage
from models.base_model import utcnow
from models.password_reset_token import PasswordResetToken
from services import tokens, users
from services.errors import AuthenticationError, ValidationError, INVALID_RESET_TOKEN
from utils.mailer import NotificationError, redact_email
from utils.security import digest_token, hash_password

logger = logging.getLogger(__name__)

RESET_REQUESTED = "Se o e-mail estiver cadastrado, você receberá instruções para redefinir sua senha."
RESET_DONE = "Senha redefinida com sucesso"


def _reset_link(token: str) -> str:
    base = current_app.config["FRONTEND_URL"].rstrip("/")
    return f"{base}/reset-password?{urlencode({'token': token})}"


def request_reset(email: str) -> dict:
    """Create and email a reset token when ``email`` belongs to a user.

    The return value never depends on whether it does.
    """
    user = users.find_by_email(email)
    if user is None:
        logger.info("password reset requested for unknown email=%s", redact_email(email))
        return {"message": RESET_REQUESTED}

    token = secrets.token_urlsafe(32)
    row = PasswordResetToken(
        user_id=user.id,
        token_hash=digest_token(token),
        expires_at=utcnow() + current_app.config["PASSWORD_RESET_TTL"],
        used=False,
    )
    storage.new(row)
    storage.save()

    mailer = current_app.extensions["mailer"]
    try:
        mailer.send(
            user.email,
            "Redefinição de senha",
            f"Clique no link abaixo para redefinir sua senha: {_reset_link(token)}",
        )
    except NotificationError:
        # Response stays identical whether or not delivery worked
        logger.error("password reset email not delivered user=%s", user.id)
    else:
        logger.info("password reset issued user=%s", user.id)
    return {"message": RESET_REQUESTED}


def reset_password(token: str, new_password: str) -> dict:
    """Consume a reset token, set the new password and revoke the user's sessions."""
    min_length = current_app.config["PASSWORD_MIN_LENGTH"]
    if len(new_password) < min_length:
        raise ValidationError(f"A senha deve ter pelo menos {min_length} caracteres")

    session = storage.get_session()
    now = utcnow()
    live = session.query(PasswordResetToken).filter(
        PasswordResetToken.token_hash == digest_token(token),
        PasswordResetToken.used.is_(False),
        PasswordResetToken.expires_at > now,
    )
    row = live.first()
    if row is None:
        raise AuthenticationError(INVALID_RESET_TOKEN)

    user = users.get_active_user(row.user_id)
    if user is None:
        raise AuthenticationError(INVALID_RESET_TOKEN)

    claimed = live.filter(PasswordResetToken.id == row.id).update(
        {PasswordResetToken.used: True, PasswordResetToken.used_at: now}, synchronize_session=False
    )
    if claimed != 1:
        storage.rollback()
        raise AuthenticationError(INVALID_RESET_TOKEN)

    user.password_hash = hash_password(new_password)
    storage.new(user)
    revoked = tokens.revoke_all_for_user(user.id)
    storage.save()
    logger.info("password reset completed user=%s revoked_pairs=%d", user.id, revoked)
    return {"message": RESET_DONE}
