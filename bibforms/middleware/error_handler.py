"""Global error handling middleware"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging

from bibforms.config import get_settings
from bibforms.exceptions import BibformsError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns anything unhandled into a 500 JSON body"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")

            detail = "An unexpected error occurred"
            if get_settings().environment == "development":
                detail = str(exc)

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": detail
                }
            )


async def bibforms_error_handler(request: Request, exc: BibformsError) -> JSONResponse:
    """Domain errors raised by services become their mapped status"""
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def setup_error_handling(app: FastAPI):
    app.add_exception_handler(BibformsError, bibforms_error_handler)
    app.add_middleware(ErrorHandlerMiddleware)
