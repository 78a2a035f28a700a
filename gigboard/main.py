import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gigboard.api.v1.router import v1_router
from gigboard.core.config import get_settings
from gigboard.core.errors import register_error_handlers
from gigboard.core.logging import configure_logging
from gigboard.core.middleware import RequestIdMiddleware

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.request_id_header],
    )
    # Middleware: Request ID (added last so it runs outermost)
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    register_error_handlers(app)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    logger.info("application configured", extra={"environment": settings.environment})
    return app


app = create_app()
