"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared ProjectStore and RelayHub.
"""

from typing import Annotated

from fastapi import Depends

from api.store import ProjectStore, RelayHub

# Shared instances, created when the app starts
_project_store: ProjectStore | None = None
_relay_hub: RelayHub | None = None


def get_project_store() -> ProjectStore:
    """Get the shared ProjectStore instance.

    Raises:
        RuntimeError: If the store hasn't been initialized yet.

    Example:
        @router.get("/some-endpoint")
        async def handler(store: ProjectStoreDep):
            return {"users": len(store.list_users())}
    """
    if _project_store is None:
        raise RuntimeError("ProjectStore not initialized. Call initialize_services() first.")
    return _project_store


def get_relay_hub() -> RelayHub:
    if _relay_hub is None:
        raise RuntimeError("RelayHub not initialized. Call initialize_services() first.")
    return _relay_hub


def initialize_services() -> ProjectStore:
    """Create the shared store and relay hub.

    Called once when the FastAPI app starts up.

    Returns:
        The newly created ProjectStore.
    """
    global _project_store, _relay_hub

    _project_store = ProjectStore()
    _relay_hub = RelayHub()
    return _project_store


def shutdown_services() -> None:
    global _project_store, _relay_hub

    if _project_store is not None:
        _project_store.clear()
    _project_store = None
    _relay_hub = None


ProjectStoreDep = Annotated[ProjectStore, Depends(get_project_store)]
RelayHubDep = Annotated[RelayHub, Depends(get_relay_hub)]
