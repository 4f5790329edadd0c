"""
MfaCode model: one-time numeric codes sent by email after a correct password.
Fields:
- user_id (String(36)) - FK to users.id
- code (6 digits)
- expires_at, used, used_at
The row id doubles as the challenge handle returned to the client (mfa_token).
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from models.base_model import BaseModel, Base


class MfaCode(BaseModel, Base):
    __tablename__ = "mfa_codes"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    used_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_mfa_codes_lookup", "code", "used", "expires_at"),
    )

    def __repr__(self):
        return f"<MfaCode user={self.user_id} used={self.used}>"
