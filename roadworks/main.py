from roadworks.core.config import get_settings
from roadworks.core.errors import RoadworksError, handle_roadworks_error
from roadworks.core.logging import configure_logging
from roadworks.core.middleware import RequestIdMiddleware
from roadworks.api.v1.router import v1_router

from fastapi import FastAPI


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )
    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # Domain errors -> HTTP
    app.add_exception_handler(RoadworksError, handle_roadworks_error)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


app = create_app()
