# storefront/utils/sessions.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.database import get_db
from storefront.models.session import UserSession
from storefront.models.users import User

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    """Caller resolved from the session cookie. Handed to every handler that needs it."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    name: str
    email: str
    is_admin: bool
    session_id: str

    @property
    def role(self) -> str:
        return "admin" if self.is_admin else "customer"


def _utcnow() -> datetime:
    # Session timestamps are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _session_lifetime() -> timedelta:
    return timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES)


def _encode_session_token(session: UserSession) -> str:
    expire = datetime.now(timezone.utc) + _session_lifetime()
    payload = {"sid": session.id, "sub": str(session.user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode_session_id(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    """Delete every session past its expiry. The caller commits."""
    now = now or _utcnow()
    return (
        db.query(UserSession)
        .filter(UserSession.expires_at <= now)
        .delete(synchronize_session=False)
    )


def create_session(db: Session, user: User) -> str:
    """Persist a new session for ``user`` and return the signed cookie value.

    Expired sessions of all users are dropped in the same commit.
    """
    now = _utcnow()
    purged = purge_expired_sessions(db, now)
    if purged:
        logger.info("Purged %s expired sessions", purged)
    session = UserSession(
        id=secrets.token_urlsafe(32),
        user_id=user.id,
        name=user.name,
        email=user.email,
        is_admin=bool(user.is_admin),
        created_at=now,
        expires_at=now + _session_lifetime(),
    )
    db.add(session)
    db.commit()
    return _encode_session_token(session)


def destroy_session(db: Session, session_id: str) -> None:
    db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)
    db.commit()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


# Resolve the caller from the session cookie; None means anonymous
def resolve_identity(request: Request, db: Session = Depends(get_db)) -> Optional[Identity]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    session_id = _decode_session_id(token)
    if session_id is None:
        return None

    session = db.query(UserSession).filter(UserSession.id == session_id).first()
    if session is None:
        return None
    if session.expires_at <= _utcnow():
        logger.info("Session for user %s expired", session.user_id)
        db.delete(session)
        db.commit()
        return None

    return Identity(
        user_id=session.user_id,
        name=session.name,
        email=session.email,
        is_admin=session.is_admin,
        session_id=session.id,
    )
