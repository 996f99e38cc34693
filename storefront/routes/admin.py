# storefront/routes/admin.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.errors import NotFoundError
from storefront.models.log import Log
from storefront.models.order import Order, OrderItem
from storefront.models.product import Product
from storefront.models.users import User
from storefront.schemas import admin as admin_schemas
from storefront.schemas import product as product_schemas
from storefront.utils.audit import audit
from storefront.utils.gate import current_admin
from storefront.utils.sessions import Identity

router = APIRouter(prefix="/admin", tags=["Admin"])

TOP_PRODUCTS_LIMIT = 5


# === Dashboard ===

@router.get("/dashboard", response_model=admin_schemas.DashboardSummary)
def get_dashboard(
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    total_users = db.query(func.count(User.id)).scalar()
    total_products = db.query(func.count(Product.id)).scalar()
    total_orders = db.query(func.count(Order.id)).scalar()
    total_revenue = db.query(func.sum(Order.total_amount)).scalar() or 0

    # Best sellers by quantity; equal quantities go to the lowest product id
    quantity_sold = func.sum(OrderItem.quantity)
    top_products = (
        db.query(
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            quantity_sold.label("total_quantity_sold"),
        )
        .join(OrderItem, OrderItem.product_id == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(quantity_sold.desc(), Product.id.asc())
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )

    return admin_schemas.DashboardSummary(
        total_users=total_users,
        total_products=total_products,
        total_orders=total_orders,
        total_revenue=total_revenue,
        top_products=[
            admin_schemas.TopProduct(
                product_id=row.product_id,
                product_name=row.product_name,
                total_quantity_sold=int(row.total_quantity_sold or 0),
            )
            for row in top_products
        ],
    )


# === Users ===

@router.get("/users", response_model=admin_schemas.PaginatedUsersResponse)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by e-mail"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "name"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    query = db.query(User)

    if q:
        query = query.filter(User.email.ilike(f"%{q.lower()}%"))

    sort_map = {"id": User.id, "email": User.email, "name": User.name}
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": users, "total": total, "page": page, "page_size": page_size}


# === Orders ===

@router.get("/orders", response_model=admin_schemas.AdminOrdersPage)
def get_all_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    query = (
        db.query(Order, User.name, User.email)
        .outerjoin(User, User.id == Order.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    total = db.query(func.count(Order.id)).scalar()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()

    items = [
        admin_schemas.AdminOrderOut(
            id=order.id,
            user_id=order.user_id,
            user_name=name,
            user_email=email,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )
        for order, name, email in rows
    ]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# === Products ===

@router.post("/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    new_product = Product(**payload.to_columns())
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    audit(db, request, "PRODUCT_CREATE", "products", user_id=identity.user_id, product_id=new_product.id)
    return new_product


@router.put("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")

    for key, value in payload.to_columns().items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)

    audit(db, request, "PRODUCT_UPDATE", "products", user_id=identity.user_id, product_id=product.id)
    return product


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    # Cart and wishlist rows go with it; order items keep their snapshots
    deleted = db.query(Product).filter(Product.id == product_id).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise NotFoundError("Product not found")
    db.commit()

    audit(db, request, "PRODUCT_DELETE", "products", user_id=identity.user_id, product_id=product_id)
    return {"message": "Product deleted", "id": product_id}


# === Audit log ===

@router.get("/logs", response_model=admin_schemas.LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user id"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status_filter: Optional[str] = Query(None, alias="status", description="SUCCESS or FAIL"),
    date_from: Optional[datetime] = Query(None, description="From (ISO datetime)"),
    date_to: Optional[datetime] = Query(None, description="To (ISO datetime)"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(current_admin),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status_filter:
        query = query.filter(Log.status == status_filter.upper())
    if date_from:
        query = query.filter(Log.ts >= date_from)
    if date_to:
        query = query.filter(Log.ts <= date_to)

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": logs, "total": total, "page": page, "page_size": page_size}
