"""Translate domain and persistence errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from prompt_tools.core import messages
from prompt_tools.prompts.errors import ImportFormatError, NotFoundError, VersionConflictError

logger = logging.getLogger("prompt_tools.api.errors")


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    detail = messages.PROMPT_NOT_FOUND if exc.resource == "prompt" else messages.PROMPT_VERSION_NOT_FOUND
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": detail})


async def version_conflict_handler(request: Request, exc: VersionConflictError) -> JSONResponse:
    logger.warning("Version conflict: prompt=%s version=%s", exc.prompt_id, exc.version)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": messages.PROMPT_VERSION_CONFLICT},
    )


async def import_format_handler(request: Request, exc: ImportFormatError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": messages.IMPORT_INVALID_FORMAT, "errors": str(exc)},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": messages.ERROR_INTERNAL_SERVER},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(VersionConflictError, version_conflict_handler)
    app.add_exception_handler(ImportFormatError, import_format_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
