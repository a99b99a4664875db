"""
Domain entities for item requests.

Core business objects representing item requests, their lifecycle status,
and the results of bulk operations. These entities are framework-agnostic.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple


class RequestStatus(str, Enum):
    """Lifecycle status of an item request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


DEFAULT_STATUS = RequestStatus.PENDING


def utc_now() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class GeoLocation:
    """
    Value object for a GeoJSON point.

    Coordinates are stored in GeoJSON order: (longitude, latitude).
    """

    longitude: float
    latitude: float

    def __post_init__(self):
        try:
            finite = math.isfinite(self.longitude) and math.isfinite(self.latitude)
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError("Coordinates must be finite numbers")

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)

    def to_geojson(self) -> dict:
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}


@dataclass(frozen=True)
class CreateItemRequestDraft:
    """Validated, normalized input for creating an item request."""

    requestor_name: str
    item_requested: str
    status: RequestStatus = DEFAULT_STATUS
    location: Optional[GeoLocation] = None


@dataclass(frozen=True)
class StatusEdit:
    """Validated (id, status) pair for single and batch edits."""

    id: str
    status: RequestStatus


@dataclass
class ItemRequest:
    """
    Item request aggregate as stored.

    Only ``status`` and ``last_edited_date`` change after creation.
    """

    id: str
    requestor_name: str
    item_requested: str
    request_created_date: datetime
    last_edited_date: Optional[datetime]
    status: RequestStatus
    location: Optional[GeoLocation] = None

    def to_dict(self) -> dict:
        """Serialize to the camelCase wire shape."""
        data = {
            "id": self.id,
            "requestorName": self.requestor_name,
            "itemRequested": self.item_requested,
            "requestCreatedDate": self.request_created_date.isoformat(),
            "lastEditedDate": (
                self.last_edited_date.isoformat() if self.last_edited_date else None
            ),
            "status": self.status.value,
        }
        if self.location is not None:
            data["location"] = self.location.to_geojson()
        return data


@dataclass(frozen=True)
class HeatmapPoint:
    """Map-ready coordinate pair in (lat, lng) order."""

    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class WriteError:
    """Store-reported failure for a single operation inside a batch."""

    index: int
    id: str
    message: str

    def to_dict(self) -> dict:
        return {"index": self.index, "id": self.id, "message": self.message}


@dataclass
class BatchResult:
    """
    Outcome of a batch approve or delete.

    Ids that do not exist simply do not count towards ``matched_count``.
    """

    matched_count: int = 0
    modified_count: int = 0
    upserted_count: int = 0
    errors: List[WriteError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "matchedCount": self.matched_count,
            "modifiedCount": self.modified_count,
            "upserts": self.upserted_count,
            "errors": [error.to_dict() for error in self.errors],
        }
