"""
API routers for request service endpoints.
"""

from . import batch_router, health_router, heatmap_router, request_router

__all__ = ["request_router", "batch_router", "heatmap_router", "health_router"]
