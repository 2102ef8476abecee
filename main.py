"""Main entry point for the coderoom project service.

This module creates and configures the FastAPI app that stores projects,
their file trees and collaborators, and relays ``project-message`` events
between the workspaces open on the same project.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import initialize_services, shutdown_services
from api.exceptions import (
    file_tree_format_handler,
    generic_exception_handler,
    project_not_found_handler,
    user_not_found_handler,
)
from api.routes import channel as channel_routes
from api.routes import projects as project_routes
from api.routes import users as user_routes
from api.store import ProjectNotFoundError, UserNotFoundError
from models.errors import FileTreeFormatError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the in-memory store at startup and drop it at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    logger.info("Starting coderoom - initializing project store")
    initialize_services()

    yield

    logger.info("Shutting down coderoom")
    shutdown_services()


app = FastAPI(
    title="coderoom",
    description="Project, file tree and realtime channel service for collaborative workspaces",
    version="0.1.0",
    lifespan=lifespan,
)

# Specific exceptions before general ones
app.add_exception_handler(ProjectNotFoundError, project_not_found_handler)
app.add_exception_handler(UserNotFoundError, user_not_found_handler)
app.add_exception_handler(FileTreeFormatError, file_tree_format_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(project_routes.router)
app.include_router(user_routes.router)
app.include_router(channel_routes.router)


@app.get("/")
async def root():
    return {
        "message": "Welcome to the coderoom project service",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
