from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, JSON, String, func
from storefront.database import Base


# Audit row written by storefront.utils.audit. Survives deletion of the user.
class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (
        CheckConstraint("status IN ('SUCCESS', 'FAIL')", name="ck_logs_status"),
        Index("ix_logs_resource_action", "resource", "action"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action = Column(String(50), nullable=False)     # REGISTER, LOGIN, ORDER_PLACE, PRODUCT_DELETE...
    resource = Column(String(50), nullable=False)   # auth, orders, products
    status = Column(String(10), nullable=False)
    ip = Column(String(64), nullable=True)

    # Free-form details: email on auth events, ids and totals elsewhere
    meta = Column(JSON, nullable=True)
