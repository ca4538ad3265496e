import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.database import create_db_and_tables
from app.config import settings
from app.routes import (
    admin,
    admin_orders,
    admin_products,
    auth,
    chat,
    checkout,
    health,
    images,
    payments,
    products,
    profile,
)

from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title=f"{settings.store_name} API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------- ERROR RESPONSES --------

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.info(f"Rejected request to {request.url.path}: {field} {message}")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(admin_products.router, prefix="/admin/products", tags=["Admin Products"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(images.router, prefix="/images", tags=["Images"])
app.include_router(chat.router, prefix="/chat", tags=["Flower Expert Chat"])
app.include_router(admin.router, prefix="/admin", tags=["Admin Endpoints"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "auth_endpoints": [
            "/auth/register", "/auth/login", "/auth/logout", "/auth/session"
        ],
        "product_endpoints": [
            "/products", "/products/{product_id}"
        ],
        "admin_product_endpoints": [
            "/admin/products", "/admin/products/{product_id}"
        ],
        "checkout": [
            "/checkout/orders"
        ],
        "profile": [
            "/profile/me", "/profile/orders", "/profile/notifications",
            "/profile/notifications/{notification_id}/read"
        ],
        "admin_order_endpoints": [
            "/admin/orders", "/admin/orders/{order_id}",
            "/admin/orders/update-status", "/admin/orders/{order_id}/price"
        ],
        "payments": [
            "/payments/create-session", "/payments/webhook", "/payments/verify"
        ],
        "images": [
            "/images/generate", "/images/upload", "/images/references"
        ],
        "chat": [
            "/chat", "/chat/history/{session_id}", "/chat/custom-order"
        ],
        "admin_endpoints": [
            "/admin/images", "/admin/images/{image_id}/status",
            "/admin/training-data", "/admin/training-data/{entry_id}", "/admin/roles"
        ],
    }
