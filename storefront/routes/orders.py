# storefront/routes/orders.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session, selectinload

from storefront.database import get_db
from storefront.errors import EmptyCart, NotFoundError
from storefront.models.order import Order
from storefront.schemas.order import OrderItemOut, OrderPlaced, OrderResponse, OrdersPage
from storefront.utils.audit import AuditStatus, audit
from storefront.utils.checkout import place_order
from storefront.utils.gate import current_user
from storefront.utils.sessions import Identity

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = [
        OrderItemOut(
            product_id=it.product_id,
            product_name=it.product_name,
            quantity=it.quantity,
            unit_price=it.price,
            line_total=it.price * it.quantity,
        )
        for it in order.items
    ]
    return OrderResponse(
        id=order.id,
        total_amount=order.total_amount,
        created_at=order.created_at,
        items=items,
    )


# Turn the caller's cart into an order
@router.post("", response_model=OrderPlaced, status_code=status.HTTP_201_CREATED)
def create_order(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    try:
        order = place_order(db, identity.user_id)
    except EmptyCart:
        audit(db, request, "ORDER_PLACE", "orders", user_id=identity.user_id,
              status=AuditStatus.FAIL, reason="Cart is empty")
        raise

    audit(db, request, "ORDER_PLACE", "orders", user_id=identity.user_id,
          order_id=order.id, total=str(order.total_amount))

    return OrderPlaced(message="Order placed successfully", order_id=order.id, total_amount=order.total_amount)


# List the caller's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    q = db.query(Order).filter(Order.user_id == identity.user_id)
    total = q.count()
    rows = (
        q.options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    order = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id, Order.user_id == identity.user_id)
        .first()
    )
    if not order:
        raise NotFoundError("Order not found")
    return _order_to_out(order)
