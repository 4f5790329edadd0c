"""
LoginAttempt model: append-only ledger of password checks.
Lockout is derived from failed rows inside a trailing window; rows are never
updated or deleted by the auth flow.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class LoginAttempt(BaseModel, Base):
    __tablename__ = "login_attempts"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    success = Column(Boolean, nullable=False, default=False)
    ip_address = Column(String(64), nullable=True)
    attempted_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="login_attempts")

    __table_args__ = (
        Index("ix_login_attempts_user_window", "user_id", "success", "attempted_at"),
    )

    def __repr__(self):
        return f"<LoginAttempt user={self.user_id} success={self.success}>"
