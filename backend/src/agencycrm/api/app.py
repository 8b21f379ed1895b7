"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agencycrm import __version__
from agencycrm.api.admin import create_admin_router
from agencycrm.api.auth import create_auth_router
from agencycrm.api.contacts import create_contacts_router
from agencycrm.api.deals import create_deals_router
from agencycrm.api.container import Services
from agencycrm.api.modules import create_modules_router
from agencycrm.api.staff import create_staff_router
from agencycrm.api.tasks import create_tasks_router
from agencycrm.auth.errors import AuthError
from agencycrm.config import Settings
from agencycrm.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Explicit settings; read from the environment when omitted.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize on startup, cleanup on shutdown."""
        configure_logging(settings.log_level)

        services = Services.build(settings)
        services.initialize()
        app.state.services = services
        logger.info("AgencyCRM API started (database: %s)", settings.database.url.split("://")[0])

        yield

        services.close()

    app = FastAPI(title="AgencyCRM API", version=__version__, lifespan=lifespan)

    # CORS for frontend dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(create_auth_router())
    app.include_router(create_modules_router())
    app.include_router(create_staff_router())
    app.include_router(create_contacts_router())
    app.include_router(create_deals_router())
    app.include_router(create_tasks_router())
    app.include_router(create_admin_router())

    @app.get("/healthz", tags=["health"])
    async def healthz(request: Request):
        services: Services = request.app.state.services
        if not services.db.ping():
            return JSONResponse(status_code=503, content={"status": "degraded"})
        return {"status": "ok"}

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request body", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


app = create_app()
