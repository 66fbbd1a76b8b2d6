import logging

from fastapi import FastAPI

from library_shop_api.api.error_handlers import register_error_handlers
from library_shop_api.api.routes.books import router as books_router
from library_shop_api.config import settings
from library_shop_api.logging_config import configure_logging
from library_shop_api.middleware import RequestContextMiddleware

configure_logging(
    level=settings.log_level,
    output_format=settings.log_format,
    service_name=settings.log_service_name,
)
logger = logging.getLogger(__name__)
logger.info("Application bootstrapped", extra={"stage": settings.stage})

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
)
app.add_middleware(RequestContextMiddleware)
register_error_handlers(app)
app.include_router(books_router)
