# storefront/routes/wishlist.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.errors import NotFoundError
from storefront.models.product import Product
from storefront.models.wishlist import WishlistItem
from storefront.schemas.wishlist import WishlistAdd, WishlistItemOut, WishlistOut
from storefront.utils.gate import current_user
from storefront.utils.sessions import Identity

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


def _wishlist_to_out(db: Session, user_id: int) -> WishlistOut:
    rows = (
        db.query(WishlistItem)
        .options(joinedload(WishlistItem.product))
        .filter(WishlistItem.user_id == user_id)
        .order_by(WishlistItem.id)
        .all()
    )
    return WishlistOut(items=[
        WishlistItemOut(
            product_id=row.product_id,
            name=row.product.name,
            price=row.product.price,
            image_url=row.product.image_url,
            category=row.product.category,
        )
        for row in rows
    ])


@router.get("", response_model=WishlistOut)
def get_wishlist(db: Session = Depends(get_db), identity: Identity = Depends(current_user)):
    return _wishlist_to_out(db, identity.user_id)


# Adding an existing entry is a no-op answered with 200; a new entry gets 201
@router.post("", response_model=WishlistOut, status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    payload: WishlistAdd,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    if not db.query(Product.id).filter(Product.id == payload.product_id).first():
        raise NotFoundError("Product not found")

    exists = db.query(WishlistItem.id).filter(
        WishlistItem.user_id == identity.user_id, WishlistItem.product_id == payload.product_id
    ).first()
    if exists:
        response.status_code = status.HTTP_200_OK
    else:
        db.add(WishlistItem(user_id=identity.user_id, product_id=payload.product_id))
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request added the same product first
            db.rollback()
            response.status_code = status.HTTP_200_OK

    return _wishlist_to_out(db, identity.user_id)


@router.delete("/{product_id}", response_model=WishlistOut)
def remove_from_wishlist(
    product_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_user),
):
    deleted = db.query(WishlistItem).filter(
        WishlistItem.user_id == identity.user_id, WishlistItem.product_id == product_id
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise NotFoundError("Product not in wishlist")
    db.commit()
    return _wishlist_to_out(db, identity.user_id)
