from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bazarika.config import settings
from bazarika.database import create_db_and_tables
from bazarika.logging_config import configure_logging
from bazarika.middleware.request_context import RequestContextMiddleware
from bazarika.routes import (
    admin,
    admin_orders,
    cart,
    categories_admin,
    categories_public,
    checkout,
    coupons_admin,
    health,
    products_admin,
    products_public,
    review,
    user_orders,
    users,
    wishlist,
)

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Bazarika Store API", lifespan=lifespan)
app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(categories_public.router, prefix="/categories", tags=["Public Categories"])
app.include_router(products_public.router, prefix="/products", tags=["Public Products"])
app.include_router(review.router, prefix="/reviews", tags=["Reviews"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
app.include_router(wishlist.router, prefix="/wishlist", tags=["Wishlist"])
app.include_router(admin.router, prefix="/admin", tags=["Admin Dashboard"])
app.include_router(products_admin.router, prefix="/admin/products", tags=["Admin Products"])
app.include_router(categories_admin.router, prefix="/admin/categories", tags=["Admin Categories"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(coupons_admin.router, prefix="/admin/coupons", tags=["Admin Coupons"])


@app.get("/")
def root():
    return {
        "catalog": [
            "/categories", "/categories/{slug}",
            "/products", "/products/featured", "/products/{slug}"
        ],
        "cart": [
            "/cart", "/cart/items", "/cart/items/{item_id}", "/cart/apply-coupon"
        ],
        "checkout": [
            "/checkout/summary", "/checkout/place-order"
        ],
        "account": [
            "/users/me", "/users/me/addresses", "/orders", "/wishlist", "/reviews/products/{slug}"
        ],
        "admin": [
            "/admin/dashboard", "/admin/products", "/admin/categories",
            "/admin/orders", "/admin/coupons"
        ]
    }
