"""
MFA code issuer.

Codes are six digits drawn uniformly from [100000, 999999]. Issuing a code
retires the user's earlier unused codes, so only one is ever actionable per
user, and skips values that are currently actionable for anyone else.
Redemption is a single conditional UPDATE; of two concurrent redemptions of
the same code exactly one sees rowcount 1.
"""
from __future__ import annotations

import logging
import secrets

from flask import current_app

from models import storage
from models.base_model import utcnow
from models.mfa_code import MfaCode
from services.errors import AuthenticationError, INVALID_MFA_CODE

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999
_MAX_DRAWS = 20


def generate_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def _actionable(session, now):
    return session.query(MfaCode).filter(MfaCode.used.is_(False), MfaCode.expires_at > now)


def issue_code(user) -> MfaCode:
    """Create and persist a fresh code for ``user``; returns the stored row."""
    session = storage.get_session()
    now = utcnow()

    # supersede
    session.query(MfaCode).filter(MfaCode.user_id == user.id, MfaCode.used.is_(False)).update(
        {MfaCode.used: True, MfaCode.used_at: now}, synchronize_session=False
    )

    code = generate_code()
    for _ in range(_MAX_DRAWS):
        if _actionable(session, now).filter(MfaCode.code == code).first() is None:
            break
        code = generate_code()
    else:
        # Verification still refuses ambiguous matches, so a collision here is only a usability cost
        logger.warning("could not draw a unique MFA code after %d tries", _MAX_DRAWS)

    row = MfaCode(
        user_id=user.id,
        code=code,
        expires_at=now + current_app.config["MFA_CODE_TTL"],
        used=False,
    )
    storage.new(row)
    storage.save()
    logger.info("MFA code issued user=%s challenge=%s", user.id, row.id)
    return row


def consume_code(code: str, challenge_id: str | None = None) -> str:
    """Redeem ``code`` and return the owning user id.

    With ``challenge_id`` the match is scoped to that challenge. Without it, the
    code must identify exactly one actionable row.
    """
    session = storage.get_session()
    now = utcnow()

    query = _actionable(session, now).filter(MfaCode.code == code)
    if challenge_id:
        query = query.filter(MfaCode.id == challenge_id)
    matches = query.limit(2).all()
    if len(matches) != 1:
        if len(matches) > 1:
            logger.warning("ambiguous MFA code presented without a challenge id")
        raise AuthenticationError(INVALID_MFA_CODE)

    row = matches[0]
    claimed = (
        session.query(MfaCode)
        .filter(MfaCode.id == row.id, MfaCode.used.is_(False), MfaCode.expires_at > now)
        .update({MfaCode.used: True, MfaCode.used_at: now}, synchronize_session=False)
    )
    storage.save()
    if claimed != 1:
        logger.warning("MFA code redeemed concurrently challenge=%s", row.id)
        raise AuthenticationError(INVALID_MFA_CODE)
    return row.user_id
