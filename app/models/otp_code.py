"""One-time code model (register / reset password)"""

from sqlalchemy import Column, String, DateTime
from datetime import datetime
from app.core.database import Base


class OtpCode(Base):
    __tablename__ = "otp_codes"

    # ex: "register:alice@example.com", "reset:alice@example.com"
    key = Column(String, primary_key=True)
    code_hash = Column(String, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
