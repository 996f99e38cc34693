# storefront/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from storefront.database import Base


# Represents a user account with authentication details and admin flag
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lower-cased
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def role(self) -> str:
        return "admin" if self.is_admin else "customer"
