# storefront/utils/checkout.py
"""Order placement: turn a user's cart into an order in one transaction.

The cart is read joined against live product prices, the order and its
items are inserted with those prices as snapshots, and the cart rows are
deleted. All of it commits together or not at all.

Placements are serialized per user twice over: a process-local lock per
user id, and row locks on the cart (``SELECT ... FOR UPDATE``) for databases
that support them, which also covers several worker processes.
"""
import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, List, NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import EmptyCart, StoreFailure
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.product import Product

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class _UserLock:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


# Only users with a placement running or waiting have an entry
_locks_guard = threading.Lock()
_user_locks: Dict[int, _UserLock] = {}


class CartLine(NamedTuple):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal


@contextmanager
def user_lock(user_id: int):
    """Hold the placement lock of ``user_id``; the entry is dropped by its last holder."""
    with _locks_guard:
        entry = _user_locks.get(user_id)
        if entry is None:
            entry = _user_locks[user_id] = _UserLock()
        entry.holders += 1
    try:
        with entry.lock:
            yield
    finally:
        with _locks_guard:
            entry.holders -= 1
            if entry.holders == 0:
                del _user_locks[user_id]


def read_cart_lines(db: Session, user_id: int, for_update: bool = False) -> List[CartLine]:
    query = (
        db.query(CartItem.product_id, Product.name, CartItem.quantity, Product.price)
        .join(Product, Product.id == CartItem.product_id)
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.id)
    )
    if for_update:
        query = query.with_for_update(of=CartItem)
    return [
        CartLine(product_id=pid, product_name=name, quantity=qty, unit_price=Decimal(str(price)))
        for pid, name, qty, price in query.all()
    ]


def order_total(lines: List[CartLine]) -> Decimal:
    total = sum((line.unit_price * line.quantity for line in lines), Decimal("0"))
    return total.quantize(CENT)


def place_order(db: Session, user_id: int) -> Order:
    """Place an order from the user's cart.

    Raises ``EmptyCart`` without side effects when there is nothing to buy,
    and ``StoreFailure`` after a full rollback when any store operation fails.
    """
    with user_lock(user_id):
        try:
            # 1. Snapshot the cart with live prices, locking the cart rows
            lines = read_cart_lines(db, user_id, for_update=True)
            if not lines:
                db.rollback()
                raise EmptyCart()

            # 2. Order header and one item per cart line, priced from the snapshot
            order = Order(user_id=user_id, total_amount=order_total(lines))
            order.items = [
                OrderItem(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
                for line in lines
            ]
            db.add(order)
            db.flush()

            # 3. Clear the cart inside the same transaction
            db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)

            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Order placement failed for user %s, rolled back", user_id)
            raise StoreFailure("Could not place order") from exc

    logger.info("User %s placed order %s (%s lines, total %s)", user_id, order.id, len(lines), order.total_amount)
    return order
