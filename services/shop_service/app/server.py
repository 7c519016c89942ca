"""Command-line entry point: ``shop-api [port]``."""

import sys
from typing import Optional, Sequence

import uvicorn
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from services.shop_service.app.main import create_app

logger = get_logger(__name__)

DEFAULT_PORT = 8080

ENDPOINTS = (
    "POST   /api/auth/login",
    "GET    /api/products",
    "GET    /api/products/{id}",
    "POST   /api/products",
    "PUT    /api/products/{id}",
    "DELETE /api/products/{id}",
    "GET    /api/categories",
    "GET    /api/categories/{id}",
    "POST   /api/orders",
    "GET    /api/orders",
)


def parse_port(argv: Sequence[str], default: int = DEFAULT_PORT) -> int:
    """Port from the first argument; invalid values fall back to ``default``."""
    if not argv:
        return default
    try:
        port = int(argv[0])
    except ValueError:
        port = -1
    if not 0 < port < 65536:
        logger.warning("Invalid port number: %s. Using default port %d", argv[0], default)
        return default
    return port


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()
    settings = get_settings()
    port = parse_port(argv, default=settings.SERVER_PORT)

    try:
        app = create_app(settings)
    except Exception:
        logger.exception("Failed to start Shop API server")
        return 1

    logger.info("Shop API server starting on http://%s:%d", settings.SERVER_HOST, port)
    for endpoint in ENDPOINTS:
        logger.info("  %s", endpoint)

    uvicorn.run(app, host=settings.SERVER_HOST, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
