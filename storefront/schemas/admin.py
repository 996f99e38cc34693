# storefront/schemas/admin.py
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel

from storefront.schemas.user import UserSummary


# Schema for top selling products
class TopProduct(BaseModel):
    product_id: int
    product_name: str
    total_quantity_sold: int

    class Config:
        from_attributes = True


class DashboardSummary(BaseModel):
    total_users: int
    total_products: int
    total_orders: int
    total_revenue: float
    top_products: List[TopProduct]


# Schema for paginated user list response
class PaginatedUsersResponse(BaseModel):
    items: List[UserSummary]
    total: int
    page: int
    page_size: int


# Order joined with the purchasing user
class AdminOrderOut(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    total_amount: float
    created_at: Optional[datetime] = None


class AdminOrdersPage(BaseModel):
    items: List[AdminOrderOut]
    total: int
    page: int
    page_size: int


class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    class Config:
        from_attributes = True


class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int
