from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docverify.api.routes.documents import router as documents_router
from docverify.core.config import settings
from docverify.core.logger import configure_logging, get_logger
from docverify.services.ledger_service import DuplicateDocumentError

configure_logging()
logger = get_logger(component="FastAPI")


def create_app() -> FastAPI:
    app = FastAPI(title=settings.project_name, version="1.0.0")

    @app.exception_handler(DuplicateDocumentError)
    async def handle_duplicate_document(_: Request, exc: DuplicateDocumentError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"message": str(exc), "error_code": "DUPLICATE_DOCUMENT"})

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_payload(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request payload"
        logger.warning("Rejected invalid payload", errors=len(errors), message=message)
        return JSONResponse(status_code=400, content={"message": message, "error_code": "INVALID_PAYLOAD"})

    app.include_router(documents_router, prefix=settings.api_prefix)

    @app.get("/healthz", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
