from sqlalchemy import Column, String, Text, Boolean, DateTime, func
from nirapod_auth.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(120), unique=True, nullable=False, index=True)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    nid_front = Column(Text, nullable=False, doc="base64 encoded image")
    nid_back = Column(Text, nullable=False, doc="base64 encoded image")
    photo = Column(Text, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<User(email={self.email}, verified={self.is_verified})>"
