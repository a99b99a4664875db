"""Heatmap projection of item request locations."""

import logging
from typing import List

from ..domain.entities import HeatmapPoint
from ..repositories.request_repository import FindQuery, IItemRequestRepository

logger = logging.getLogger(__name__)


class HeatmapService:
    """Read-only view of request locations for map rendering."""

    def __init__(self, repository: IItemRequestRepository):
        self.repository = repository

    async def heatmap(self) -> List[HeatmapPoint]:
        """
        Get the location of every item request that has one.

        Stored GeoJSON order is (lng, lat); points are returned as (lat, lng).
        """
        requests = await self.repository.find(FindQuery(has_location=True))
        points = [
            HeatmapPoint(lat=r.location.latitude, lng=r.location.longitude)
            for r in requests
            if r.location is not None
        ]
        logger.debug(f"Heatmap projection produced {len(points)} points")
        return points
