import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.config import settings
from marketplace.database import create_db_and_tables
from marketplace.errors import AppError
from marketplace.logging_config import setup_logging
from marketplace.routes import (
    admin,
    admin_orders,
    admin_payouts,
    admin_sellers,
    checkout,
    health,
    ratings,
    seller,
)
from marketplace.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield
    app.state.rate_limiter.clear()


app = FastAPI(title="Marketplace API", lifespan=lifespan)

# one limiter per process, shared by every request
app.state.rate_limiter = RateLimiter(
    max_attempts=settings.checkout_rate_limit_max_orders,
    window_seconds=settings.checkout_rate_limit_window_seconds,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "code": exc.code,
            "field": getattr(exc, "field", None),
        },
    )


app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(ratings.router, prefix="/ratings", tags=["Ratings"])
app.include_router(seller.router, prefix="/seller", tags=["Seller Dashboard"])
app.include_router(admin.router, prefix="/admin", tags=["Admin Endpoints"])
app.include_router(admin_orders.router, prefix="/admin", tags=["Admin Orders"])
app.include_router(admin_sellers.router, prefix="/admin", tags=["Admin Sellers"])
app.include_router(admin_payouts.router, prefix="/admin/payouts", tags=["Admin Payouts"])


@app.get("/")
def root():
    return {
        "checkout_endpoints": [
            "/checkout/summary", "/checkout/orders",
            "/checkout/orders/{order_id}", "/checkout/orders/{order_id}/receipt",
            "/checkout/my-orders"
        ],
        "seller_endpoints": [
            "/seller/register", "/seller/me", "/seller/orders",
            "/seller/orders/{seller_order_id}/status", "/seller/earnings", "/seller/payouts"
        ],
        "admin_endpoints": [
            "/admin/orders", "/admin/seller-orders/{seller_order_id}/status",
            "/admin/sellers", "/admin/sellers/{seller_id}/status",
            "/admin/payouts/pending", "/admin/payouts/{seller_id}/mark-paid",
            "/admin/payouts/history", "/admin/stats", "/admin/customers"
        ],
        "ratings": ["/ratings"],
    }
