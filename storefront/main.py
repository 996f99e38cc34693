# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.config import settings
from storefront.database import init_db
from storefront.errors import register_exception_handlers
from storefront.utils.csrf import csrf_protect
from storefront.utils.gate import gatekeeper

# Routers
from storefront.routes.auth import router as auth_router
from storefront.routes.products import router as products_router
from storefront.routes.wishlist import router as wishlist_router
from storefront.routes.cart import router as cart_router
from storefront.routes.orders import router as orders_router
from storefront.routes.admin import router as admin_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Storefront API started (%s)", settings.ENVIRONMENT)
    yield


# The access gate and the CSRF check run before every route handler
app = FastAPI(
    title="Storefront API",
    version=__version__,
    lifespan=lifespan,
    dependencies=[Depends(gatekeeper), Depends(csrf_protect)],
)

register_exception_handlers(app)

# CORS Configuration: the frontend sends the session cookie, so credentials are allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", settings.CSRF_HEADER_NAME],
)

# Router registration
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(wishlist_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(admin_router)


@app.get("/")
def read_root():
    return {"message": "Backend is running."}
