from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from buildbooks.core.exceptions import LedgerError
from buildbooks.logger_config import logger


def _error_body(message, status_code, error, details=None):
    body = {
        "success": False,
        "message": message,
        "status_code": status_code,
        "error": error,
    }
    if details:
        body["details"] = details
    return body


def register_error_handlers(app: FastAPI):
    @app.exception_handler(LedgerError)
    async def handle_ledger_error(request: Request, exc: LedgerError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.status_code, exc.error_code, exc.details),
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.status_code, "ERR_HTTP"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                "Validation error",
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "ERR_VALIDATION",
                {"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "Internal Server Error",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "ERR_INTERNAL_SERVER",
            ),
        )


def jsonable_errors(exc: RequestValidationError):
    """Pydantic errors may carry exception objects in `ctx`; keep them printable."""
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return jsonable_encoder(errors)
