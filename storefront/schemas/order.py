from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: float
    line_total: float


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    total_amount: float
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


# Returned by POST /orders
class OrderPlaced(BaseModel):
    message: str
    order_id: int
    total_amount: float
