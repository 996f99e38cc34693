# storefront/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base


# A single cart line (product + quantity) owned by a user
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product")

    __table_args__ = (
        # One row per user/product; repeated adds accumulate quantity
        UniqueConstraint("user_id", "product_id", name="uq_cartitem_user_product"),
        CheckConstraint("quantity >= 1", name="ck_cartitem_quantity_positive"),
    )
