"""
Shared dependencies for the application.

Services are built once by the application lifespan and stored on
``app.state``; routers receive them through these dependency functions.
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from .repositories.request_repository import IItemRequestRepository
    from .services.batch_service import BatchService
    from .services.heatmap_service import HeatmapService
    from .services.request_service import ItemRequestService


def _get_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise RuntimeError(f"{name} not initialized")
    return service


async def get_request_service(request: Request) -> "ItemRequestService":
    """Get the item request service for dependency injection."""
    return _get_state(request, "request_service")


async def get_batch_service(request: Request) -> "BatchService":
    """Get the batch service for dependency injection."""
    return _get_state(request, "batch_service")


async def get_heatmap_service(request: Request) -> "HeatmapService":
    """Get the heatmap service for dependency injection."""
    return _get_state(request, "heatmap_service")


async def get_repository(request: Request) -> "IItemRequestRepository":
    """Get the item request repository (used by readiness checks)."""
    return _get_state(request, "repository")
