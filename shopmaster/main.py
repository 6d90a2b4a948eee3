"""
Main FastAPI application
"""
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.sessions import SessionMiddleware

from shopmaster import auth
from shopmaster.config import Settings, get_settings
from shopmaster.errors import register_exception_handlers
from shopmaster.routers import all_routers
from shopmaster.storage import StorageProvider
from shopmaster.utils.logger import setup_logging


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Storefront API: catalog, cart, wishlist, checkout, orders and admin back-office",
    )
    app.state.settings = settings
    app.state.storage_provider = StorageProvider(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie="shopmaster_session",
        max_age=settings.session_max_age,
        same_site="lax",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response

    register_exception_handlers(app)

    @app.on_event("startup")
    def startup_event():
        """Create database tables and seed demo data on startup"""
        app.state.storage_provider.initialize()

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.storage_provider.dispose()

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "storage": settings.storage_backend}

    app.include_router(auth.router)
    for router in all_routers:
        app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
