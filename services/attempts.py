"""
Attempt ledger and lockout.

Every password check appends a LoginAttempt row. An account is locked while
it has LOCKOUT_THRESHOLD or more failures inside the trailing LOCKOUT_WINDOW;
there is no unlock operation, the window simply moves past old failures.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from models import storage
from models.base_model import utcnow
from models.login_attempt import LoginAttempt

logger = logging.getLogger(__name__)


def record_attempt(user_id: str, success: bool, ip_address: str | None = None) -> LoginAttempt:
    attempt = LoginAttempt(user_id=user_id, success=success, ip_address=ip_address, attempted_at=utcnow())
    storage.new(attempt)
    storage.save()
    return attempt


def record_failure(user_id: str, ip_address: str | None = None) -> LoginAttempt:
    logger.info("failed password check user=%s ip=%s", user_id, ip_address)
    return record_attempt(user_id, False, ip_address)


def record_success(user_id: str, ip_address: str | None = None) -> LoginAttempt:
    return record_attempt(user_id, True, ip_address)


def failed_count(user_id: str, now: datetime | None = None) -> int:
    """Failed attempts for the user inside the trailing lockout window."""
    since = (now or utcnow()) - current_app.config["LOCKOUT_WINDOW"]
    session = storage.get_session()
    return (
        session.query(LoginAttempt)
        .filter(
            LoginAttempt.user_id == user_id,
            LoginAttempt.success.is_(False),
            LoginAttempt.attempted_at > since,
        )
        .count()
    )


def is_locked(user_id: str, now: datetime | None = None) -> bool:
    locked = failed_count(user_id, now) >= current_app.config["LOCKOUT_THRESHOLD"]
    if locked:
        logger.warning("login blocked by lockout user=%s", user_id)
    return locked
