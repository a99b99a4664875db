"""
Heatmap API router.
"""

import structlog
from fastapi import APIRouter, Depends

from ..dependencies import get_heatmap_service
from ..metrics import track_heatmap, track_operation
from ..services.heatmap_service import HeatmapService
from .common import internal_error

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["heatmap"])


@router.get("/heatmap", summary="Request locations as lat/lng points")
async def get_heatmap(service: HeatmapService = Depends(get_heatmap_service)):
    try:
        points = await service.heatmap()
    except Exception as e:
        track_operation("heatmap", "error")
        logger.error("Failed to build heatmap", error=str(e), exc_info=True)
        raise internal_error()

    track_operation("heatmap", "success")
    track_heatmap(len(points))
    return [point.to_dict() for point in points]
