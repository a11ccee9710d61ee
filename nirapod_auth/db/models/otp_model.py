from sqlalchemy import Column, String, DateTime
from nirapod_auth.db.base import Base


class OtpCode(Base):
    __tablename__ = "otp_codes"

    # one active code per email, a new request overwrites the row
    email = Column(String(120), primary_key=True)
    code = Column(String(12), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
