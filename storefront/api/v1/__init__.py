"""API v1 routes aggregation"""

from fastapi import APIRouter

from .products.router import router as products_router
from .categories.router import router as categories_router
from .reviews.router import router as reviews_router
from .cart.router import router as cart_router
from .wishlist.router import router as wishlist_router
from .orders.router import router as orders_router
from .payments.router import router as payments_router
from .settings.router import router as settings_router
from .customers.router import router as customers_router
from .uploads.router import router as uploads_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(products_router, prefix="/products", tags=["Products"])
api_router.include_router(categories_router, prefix="/categories", tags=["Categories"])
api_router.include_router(reviews_router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(cart_router, prefix="/cart", tags=["Cart"])
api_router.include_router(wishlist_router, prefix="/wishlist", tags=["Wishlist"])
api_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])
api_router.include_router(settings_router, prefix="/settings", tags=["Settings"])
api_router.include_router(customers_router, prefix="/customers", tags=["Customers"])
api_router.include_router(uploads_router, prefix="/uploads", tags=["Uploads"])

# Export router
router = api_router
