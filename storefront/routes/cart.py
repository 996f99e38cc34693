# storefront/routes/cart.py
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.errors import NotFoundError
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.schemas.cart import CartAddItem, CartItemOut, CartOut, CartUpdateItem
from storefront.utils.checkout import order_total, read_cart_lines
from storefront.utils.gate import current_user
from storefront.utils.sessions import Identity

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_to_out(db: Session, user_id: int) -> CartOut:
    lines = read_cart_lines(db, user_id)
    items_out = [
        CartItemOut(
            product_id=line.product_id,
            name=line.product_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=(line.unit_price * line.quantity).quantize(Decimal("0.01")),
        )
        for line in lines
    ]
    return CartOut(items=items_out, total=order_total(lines))


def _ensure_product(db: Session, product_id: int) -> None:
    if not db.query(Product.id).filter(Product.id == product_id).first():
        raise NotFoundError("Product not found")


def _increment(db: Session, user_id: int, product_id: int, quantity: int) -> int:
    # Atomic in-place increment; returns the number of rows touched
    return db.query(CartItem).filter(
        CartItem.user_id == user_id, CartItem.product_id == product_id
    ).update({CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False)


def upsert_cart_item(db: Session, user_id: int, product_id: int, quantity: int) -> None:
    """Add ``quantity`` to the user's line for ``product_id``, creating it if missing."""
    if not _increment(db, user_id, product_id, quantity):
        db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
        try:
            db.commit()
            return
        except IntegrityError:
            # Someone inserted the same line concurrently, fall back to incrementing it
            db.rollback()
            _increment(db, user_id, product_id, quantity)
    db.commit()


@router.get("", response_model=CartOut)
def get_cart(db: Session = Depends(get_db), identity: Identity = Depends(current_user)):
    return _cart_to_out(db, identity.user_id)


@router.post("", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    _ensure_product(db, payload.product_id)
    upsert_cart_item(db, identity.user_id, payload.product_id, payload.quantity)
    return _cart_to_out(db, identity.user_id)


# Absolute overwrite of the quantity of an existing line
@router.put("", response_model=CartOut)
def update_cart_item(
    payload: CartUpdateItem,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    updated = db.query(CartItem).filter(
        CartItem.user_id == identity.user_id, CartItem.product_id == payload.product_id
    ).update({CartItem.quantity: payload.quantity}, synchronize_session=False)
    if not updated:
        db.rollback()
        raise NotFoundError("Cart item not found")
    db.commit()
    return _cart_to_out(db, identity.user_id)


@router.delete("/{product_id}", response_model=CartOut)
def delete_cart_item(
    product_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    deleted = db.query(CartItem).filter(
        CartItem.user_id == identity.user_id, CartItem.product_id == product_id
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise NotFoundError("Cart item not found")
    db.commit()
    return _cart_to_out(db, identity.user_id)
