"""
AuthToken model: one row per issued access/refresh pair so we can revoke and rotate them.
Fields:
- access_jti / refresh_jti - JWT IDs of the two tokens in the pair
- user_id (String(36)) - FK to users.id
- access_expires_at, expires_at (refresh expiry, end of the pair's life)
- revoked, revoked_at
Revocation flips the flag; rows are kept so the history survives.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from models.base_model import BaseModel, Base


class AuthToken(BaseModel, Base):
    __tablename__ = "auth_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    access_jti = Column(String(64), nullable=False, unique=True, index=True)
    refresh_jti = Column(String(64), nullable=False, unique=True, index=True)
    access_expires_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<AuthToken user={self.user_id} revoked={self.revoked}>"
