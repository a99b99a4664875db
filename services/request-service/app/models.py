"""
Database models for the request service.

This module defines the SQLAlchemy ORM model backing the item request
collection.
"""

import uuid
from typing import Any

from sqlalchemy import Column, DateTime, Float, Index, String
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()

# Column sizes, matching the validator bounds
REQUESTOR_NAME_LENGTH = 30
ITEM_REQUESTED_LENGTH = 100
STATUS_LENGTH = 20


def generate_request_id() -> str:
    """Generate a new opaque record identifier."""
    return str(uuid.uuid4())


class ItemRequestRecord(Base):
    """
    Item request row.

    Attributes:
        id: Store-assigned UUID string, never reused
        requestor_name: Name of the person requesting the item
        item_requested: Description of the requested item
        request_created_date: Creation timestamp (naive UTC), immutable
        last_edited_date: Timestamp of the last accepted status edit
        status: Lifecycle status value
        location_lng: GeoJSON longitude, NULL when no location was supplied
        location_lat: GeoJSON latitude, NULL when no location was supplied
    """

    __tablename__ = "item_requests"

    id = Column(String(36), primary_key=True, default=generate_request_id)

    requestor_name = Column(String(REQUESTOR_NAME_LENGTH), nullable=False)
    item_requested = Column(String(ITEM_REQUESTED_LENGTH), nullable=False)

    request_created_date = Column(DateTime, nullable=False)
    last_edited_date = Column(DateTime, nullable=True)

    status = Column(String(STATUS_LENGTH), nullable=False, index=True)

    location_lng = Column(Float, nullable=True)
    location_lat = Column(Float, nullable=True)

    # Matches the list ordering: newest first, then requestor name
    __table_args__ = (
        Index("idx_created_requestor", "request_created_date", "requestor_name"),
        Index("idx_status_created", "status", "request_created_date"),
    )

    def has_location(self) -> bool:
        return self.location_lng is not None and self.location_lat is not None
