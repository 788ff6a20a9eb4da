"""ASGI application for the Nexus personal CRM."""

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from nexus_crm.api.v1 import router as api_v1_router
from nexus_crm.core.config import Settings, get_settings
from nexus_crm.core.db import engine
from nexus_crm.core.errors import ContactNotFoundError, PersistenceError
from nexus_crm.core.logging import configure_logging
from nexus_crm.models import Base
from nexus_crm.web import router as web_router

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "web" / "static"

ERROR_CODE_MAP: dict[int, str] = {
    401: "UNAUTHENTICATED",
    404: "RESOURCE_NOT_FOUND",
    422: "VALIDATION_ERROR",
}


def create_app() -> FastAPI:
    """Build the application: JSON API under ``/api/v1`` plus the HTML views."""
    settings = get_settings()
    configure_logging(settings)

    application = FastAPI(title="Nexus CRM", version=settings.version)
    _add_cors(application, settings)
    _register_error_handlers(application)

    application.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    application.include_router(web_router)
    application.include_router(api_v1_router, prefix="/api/v1")

    @application.on_event("startup")
    async def _create_tables() -> None:  # pragma: no cover - tests build their own schema
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    return application


def _add_cors(application: FastAPI, settings: Settings) -> None:
    if settings.cors_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def _register_error_handlers(application: FastAPI) -> None:
    application.add_exception_handler(HTTPException, _on_http_error)
    application.add_exception_handler(RequestValidationError, _on_validation_error)
    application.add_exception_handler(ContactNotFoundError, _on_contact_not_found)
    application.add_exception_handler(PersistenceError, _on_persistence_error)
    application.add_exception_handler(Exception, _on_unhandled_error)


async def _on_http_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    default_code = ERROR_CODE_MAP.get(exc.status_code, f"HTTP_{exc.status_code}")
    detail = exc.detail
    if isinstance(detail, dict):
        return _error_body(
            detail.get("code", default_code),
            str(detail.get("message") or detail),
            exc.status_code,
        )
    return _error_body(default_code, str(detail), exc.status_code)


async def _on_validation_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    logger.info("Request rejected by validation", extra={"errors": exc.errors()})
    return _error_body("VALIDATION_ERROR", "Validation error", 422)


async def _on_contact_not_found(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ContactNotFoundError)
    return _error_body("RESOURCE_NOT_FOUND", "Contact not found", 404)


async def _on_persistence_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, PersistenceError)
    return _error_body("PERSISTENCE_FAILURE", str(exc), 500)


async def _on_unhandled_error(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled application error", exc_info=exc)
    return _error_body("INTERNAL_SERVER_ERROR", "Internal server error", 500)


def _error_body(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


app = create_app()
