"""Credential store lookups. The auth flow reads users; it never creates them."""
from __future__ import annotations

from sqlalchemy import func, or_

from models import storage
from models.user import User


def find_by_login(identifier: str) -> User | None:
    """Match a login identifier against username or (case-insensitively) email."""
    session = storage.get_session()
    return (
        session.query(User)
        .filter(or_(User.username == identifier, User.email == identifier.lower()))
        .first()
    )


def find_by_email(email: str) -> User | None:
    session = storage.get_session()
    return session.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def get_user(user_id: str) -> User | None:
    return storage.get(User, user_id)


def get_active_user(user_id: str) -> User | None:
    user = get_user(user_id)
    if user is None or not user.is_active:
        return None
    return user
