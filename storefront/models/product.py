# storefront/models/product.py
from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint, func
from storefront.database import Base


# Catalog item. Price is a non-negative decimal.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    category = Column(String(100), nullable=True, index=True)

    # Optional URL of the product picture
    image_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
