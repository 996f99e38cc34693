# storefront/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.database import get_db
from storefront.errors import AuthError, ConflictError, NotFoundError
from storefront.models.users import User
from storefront.schemas import user as schemas
from storefront.utils.audit import AuditStatus, audit
from storefront.utils.csrf import issue_csrf_token
from storefront.utils.gate import current_user
from storefront.utils.hashing import get_password_hash, verify_password
from storefront.utils.sessions import (
    Identity,
    clear_session_cookie,
    create_session,
    destroy_session,
    resolve_identity,
    set_session_cookie,
)

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)


def _is_admin_email(email: str) -> bool:
    domain = (settings.ADMIN_EMAIL_DOMAIN or "").strip().lower()
    if not domain:
        return False
    return email.rsplit("@", 1)[-1] == domain


@router.get("/csrf-token")
def csrf_token(response: Response):
    return {"csrfToken": issue_csrf_token(response)}


# Register a new user
@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Check for existing user, ignoring case
    db_user = db.query(User).filter(func.lower(User.email) == payload.email).first()
    if db_user:
        audit(db, request, "REGISTER", "auth", status=AuditStatus.FAIL,
              email=payload.email, reason="Email exists")
        raise ConflictError("Email already registered")

    new_user = User(
        name=payload.name,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        is_admin=_is_admin_email(payload.email),
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same address
        db.rollback()
        raise ConflictError("Email already registered")
    db.refresh(new_user)

    audit(db, request, "REGISTER", "auth", user_id=new_user.id, email=new_user.email)
    logger.info("Registered user %s", new_user.id)

    return {"message": "User registered successfully.", "user": new_user}


# Authenticate user and start a session
@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == payload.email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        audit(db, request, "LOGIN", "auth", user_id=(db_user.id if db_user else None),
              status=AuditStatus.FAIL, email=payload.email)
        raise AuthError("Invalid credentials")

    set_session_cookie(response, create_session(db, db_user))

    audit(db, request, "LOGIN", "auth", user_id=db_user.id, email=db_user.email)

    return {"message": "Login successful", "user": db_user}


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db),
           identity: Optional[Identity] = Depends(resolve_identity)):
    if identity is not None:
        destroy_session(db, identity.session_id)
        audit(db, request, "LOGOUT", "auth", user_id=identity.user_id)
    clear_session_cookie(response)
    return {"message": "Logged out successfully"}


# Current user's profile, read from the live user record
@router.get("/profile", response_model=schemas.ProfileResponse)
def profile(identity: Identity = Depends(current_user), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == identity.user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user
