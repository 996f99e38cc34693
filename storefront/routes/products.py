# storefront/routes/products.py
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.product import Product
from storefront.schemas import product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_category_re = re.compile(product_schemas.CATEGORY_PATTERN)


def _positive_int(raw: Optional[str], default: int) -> int:
    """Parse a query value, falling back to ``default`` when missing, non-numeric or < 1."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _page_params(page: Optional[str], limit: Optional[str]):
    page_no = _positive_int(page, DEFAULT_PAGE)
    page_size = min(_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)
    return page_no, page_size


def _paginate(query, page: int, limit: int) -> dict:
    total = query.count()
    items: List[Product] = query.order_by(Product.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    page_no, page_size = _page_params(page, limit)
    return _paginate(db.query(Product), page_no, page_size)


# Distinct non-empty categories
@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    rows = (
        db.query(Product.category)
        .distinct()
        .filter(Product.category.isnot(None), Product.category != "")
        .order_by(Product.category)
        .all()
    )
    return [row[0] for row in rows]


@router.get("/category/{category}", response_model=product_schemas.ProductListPage)
def list_products_by_category(
    category: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if not _category_re.fullmatch(category):
        raise ValidationError("Invalid category")

    page_no, page_size = _page_params(page, limit)
    return _paginate(db.query(Product).filter(Product.category == category), page_no, page_size)


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product
