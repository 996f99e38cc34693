# storefront/models/session.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from storefront.database import Base


# Server-side login session referenced by the signed session cookie.
# Keeps a snapshot of the identity taken at login time.
class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)  # random, url-safe
    user_id = Column(Integer, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    # Naive UTC timestamps
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
