import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vision_metadata.api.error_handlers import (
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from vision_metadata.api.health import router as health_router
from vision_metadata.api.routes_skill import router as skill_router
from vision_metadata.config import settings
from vision_metadata.logging import configure_logging
from vision_metadata.middleware.request_id import RequestIdMiddleware
from vision_metadata.observability.metrics_route import router as metrics_router


def create_app() -> FastAPI:
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(skill_router)

    logger.info("App initialized")
    return app


app = create_app()
