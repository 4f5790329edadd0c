from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from models.base_model import BaseModel, Base


class PasswordResetToken(BaseModel, Base):
    __tablename__ = "password_reset_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # sha256 of the emailed token; the raw value only ever exists in the link
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    used_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<PasswordResetToken user={self.user_id} used={self.used}>"
