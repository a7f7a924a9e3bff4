"""Application entrypoint for the CRM ledger API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from crm_ledger.api.v1._errors import describe_validation_error, map_domain_error
from crm_ledger.api.v1.router import get_api_router
from crm_ledger.core.config import get_config
from crm_ledger.core.exceptions import LedgerException
from crm_ledger.core.startup import bootstrap
from crm_ledger.schemas.common import error_envelope

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    bootstrap()
    yield


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LedgerException)
    async def handle_ledger_exception(request: Request, exc: LedgerException) -> JSONResponse:
        code, detail = map_domain_error(exc)
        log = logger.error if code >= 500 else logger.info
        log(
            "api.request_failed",
            extra={
                "event": "api.request_failed",
                "path": request.url.path,
                "status_code": code,
                "error": exc.__class__.__name__,
                "detail": str(exc),
            },
        )
        return JSONResponse(status_code=code, content=error_envelope(detail))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = describe_validation_error(exc)
        logger.info(
            "api.request_invalid",
            extra={"event": "api.request_invalid", "path": request.url.path, "detail": detail},
        )
        return JSONResponse(status_code=400, content=error_envelope(detail, message="Invalid request"))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception(
            "api.database_error",
            extra={"event": "api.database_error", "path": request.url.path},
        )
        return JSONResponse(status_code=500, content=error_envelope("Database operation failed."))


def create_app() -> FastAPI:
    cfg = get_config()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION, lifespan=lifespan)
    app.include_router(get_api_router())
    register_exception_handlers(app)
    return app


# Expose ASGI app for `uvicorn crm_ledger.main:app`.
app = create_app()


if __name__ == "__main__":
    cfg = get_config()
    uvicorn.run("crm_ledger.main:app", host=cfg.API_HOST, port=cfg.API_PORT, reload=cfg.DEBUG)
