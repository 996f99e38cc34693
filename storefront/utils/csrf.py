# storefront/utils/csrf.py
import secrets

from fastapi import Request, Response

from storefront.config import settings
from storefront.errors import CsrfError

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def issue_csrf_token(response: Response) -> str:
    token = secrets.token_urlsafe(32)
    response.set_cookie(
        key=settings.CSRF_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    return token


# Double-submit check: the header must echo the token stored in the cookie
def csrf_protect(request: Request) -> None:
    if not settings.CSRF_ENABLED or request.method in SAFE_METHODS:
        return

    expected = request.cookies.get(settings.CSRF_COOKIE_NAME)
    submitted = request.headers.get(settings.CSRF_HEADER_NAME)
    if not expected or not submitted:
        raise CsrfError("Missing CSRF token")
    if not secrets.compare_digest(expected.encode("utf-8"), submitted.encode("utf-8")):
        raise CsrfError()
