"""Main FastAPI application"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from storefront.core.config import settings
from storefront.core.events import lifespan
from storefront.core.exceptions import register_exception_handlers
from storefront.core.middleware import setup_middleware
from storefront.middleware.rate_limit import limiter, custom_rate_limit_handler

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Clothing storefront API: catalog, cart, orders and payments",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
    register_exception_handlers(app)

    setup_middleware(app, settings)

    from storefront.api.v1 import api_router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": settings.APP_VERSION}

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "docs": "/api/docs",
            "health": "/health"
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "storefront.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
