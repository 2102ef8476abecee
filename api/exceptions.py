"""Exception handlers for the project service.

These convert store and domain exceptions into the JSON error bodies the
client in client/_http.py understands: ``{"error", "detail", "type"}``.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from api.store import ProjectNotFoundError, UserNotFoundError
from models.errors import FileTreeFormatError

logger = logging.getLogger(__name__)


async def project_not_found_handler(request: Request, exc: ProjectNotFoundError):
    """Return 404 naming the missing project."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Project Not Found",
            "detail": str(exc),
            "type": "not_found",
            "details": {"project_id": exc.project_id},
        },
    )


async def user_not_found_handler(request: Request, exc: UserNotFoundError):
    """Return 404 listing every unknown user id."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "User Not Found",
            "detail": str(exc),
            "type": "not_found",
            "details": {"user_ids": exc.user_ids},
        },
    )


async def file_tree_format_handler(request: Request, exc: FileTreeFormatError):
    """Return 422 for a file tree that does not have the tree shape.

    Args:
        request: The incoming request that triggered the error.
        exc: The FileTreeFormatError, with the offending location if known.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Invalid File Tree",
            "detail": str(exc),
            "type": "validation_error",
            "details": {"location": exc.location},
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the traceback and hide it from the client."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
