# storefront/utils/gate.py
"""Access gate run before every handler.

Each request path is classified by its first segment into one of three
route classes, then checked against the resolved caller.
"""
import enum
from typing import Optional

from fastapi import Depends, Request

from storefront.errors import AuthError, ForbiddenError
from storefront.utils.sessions import Identity, resolve_identity


class RouteClass(str, enum.Enum):
    PUBLIC = "public"
    USER = "user"
    ADMIN = "admin"


class Decision(str, enum.Enum):
    ALLOW_ANONYMOUS = "allow-anonymous"
    ALLOW_AS_USER = "allow-as-user"
    DENY_UNAUTHENTICATED = "deny-unauthenticated"
    DENY_FORBIDDEN = "deny-forbidden"


# First path segment -> route class. Everything else is public.
PROTECTED_SEGMENTS = {
    "wishlist": RouteClass.USER,
    "cart": RouteClass.USER,
    "orders": RouteClass.USER,
    "profile": RouteClass.USER,
    "admin": RouteClass.ADMIN,
}


def classify_path(path: str) -> RouteClass:
    # Exact segment match: "/admin-fake" or "/cartography" stay public
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return RouteClass.PUBLIC
    return PROTECTED_SEGMENTS.get(segments[0], RouteClass.PUBLIC)


def decide(identity: Optional[Identity], route_class: RouteClass) -> Decision:
    if identity is None:
        if route_class is RouteClass.PUBLIC:
            return Decision.ALLOW_ANONYMOUS
        return Decision.DENY_UNAUTHENTICATED
    if route_class is RouteClass.ADMIN and not identity.is_admin:
        return Decision.DENY_FORBIDDEN
    return Decision.ALLOW_AS_USER


def gatekeeper(request: Request, identity: Optional[Identity] = Depends(resolve_identity)) -> Decision:
    decision = decide(identity, classify_path(request.url.path))
    if decision is Decision.DENY_UNAUTHENTICATED:
        raise AuthError()
    if decision is Decision.DENY_FORBIDDEN:
        raise ForbiddenError()
    return decision


# Handler dependencies: hand the resolved identity to the route explicitly
def current_user(identity: Optional[Identity] = Depends(resolve_identity)) -> Identity:
    if identity is None:
        raise AuthError()
    return identity


def current_admin(identity: Identity = Depends(current_user)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError()
    return identity
