"""FastAPI application for the Shop Service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from libs.auth.middleware import add_bearer_auth_middleware
from libs.auth.tokens import TokenService
from libs.common.config import Settings, get_settings
from libs.common.error_handler import UTF8JSONResponse, add_exception_handlers
from libs.common.logging import configure_logging, get_logger
from libs.common.middleware import add_http_middleware
from libs.db.config import create_engine
from libs.db.gateway import Database
from services.shop_service.routers import (
    auth_router,
    categories_router,
    inventory_router,
    orders_router,
    products_router,
)

logger = get_logger(__name__)

LOGIN_PATH = "/api/auth/login"


def create_database(settings: Settings) -> Database:
    return Database(
        create_engine(settings), probe_query=settings.DB_POOL_CONNECTION_TEST_QUERY
    )


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """Create and configure the Shop Service FastAPI app.

    When ``database`` is omitted the gateway is created on startup and its
    pool disposed on shutdown.
    """
    settings = settings or get_settings()
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_database = app.state.database is None
        if owns_database:
            app.state.database = create_database(settings)
        try:
            if owns_database:
                await app.state.database.ping()
                logger.info("Database pool created")
            yield
        finally:
            if owns_database:
                await app.state.database.close()
                app.state.database = None
                logger.info("Database pool closed")

    app = FastAPI(
        title="Shop Service",
        version="0.1.0",
        description="E-commerce API - authentication, products, categories, inventory, orders and reviews.",
        default_response_class=UTF8JSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.token_service = TokenService.from_settings(settings)

    add_bearer_auth_middleware(app, prefix="/api/", public_paths={LOGIN_PATH})
    add_http_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        await app.state.database.ping()
        return {"status": "ok", "service": "shop"}

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(orders_router)
    app.include_router(inventory_router)

    return app


app = create_app()
