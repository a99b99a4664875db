"""
Item request repository interface (Abstract Base Class).

Defines the contract for item request persistence independent of the
underlying storage mechanism. This is the only layer aware of how
records are stored.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ..domain.entities import GeoLocation, ItemRequest, RequestStatus, WriteError


@dataclass(frozen=True)
class SortKey:
    """Single sort criterion on a stored field."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class FindQuery:
    """
    Filter, sort and window for ``find``.

    Attributes:
        status: Only return records with this status
        has_location: Only return records with (True) or without (False) a location
        sort: Sort keys applied in order
        skip: Number of matching records to skip
        limit: Maximum number of records to return, None for no limit
    """

    status: Optional[RequestStatus] = None
    has_location: Optional[bool] = None
    sort: Sequence[SortKey] = ()
    skip: int = 0
    limit: Optional[int] = None


@dataclass(frozen=True)
class NewItemRequest:
    """Record to insert; the store assigns the id."""

    requestor_name: str
    item_requested: str
    request_created_date: datetime
    last_edited_date: datetime
    status: RequestStatus
    location: Optional[GeoLocation] = None


@dataclass(frozen=True)
class StatusUpdate:
    """The only fields that may change after creation."""

    status: RequestStatus
    last_edited_date: datetime


@dataclass(frozen=True)
class UpdateStatusOperation:
    """Bulk operation: set status on the record matching ``id``."""

    id: str
    update: StatusUpdate


@dataclass(frozen=True)
class DeleteOperation:
    """Bulk operation: delete the record matching ``id``."""

    id: str


BulkOperation = Union[UpdateStatusOperation, DeleteOperation]


@dataclass
class BulkWriteResult:
    """Counts reported by the store after a bulk write."""

    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    upserted_count: int = 0
    write_errors: List[WriteError] = field(default_factory=list)


class IItemRequestRepository(ABC):
    """
    Abstract repository interface for item request operations.

    Implementations raise ``RequestStoreException`` when the store is
    unreachable or rejects a whole operation.
    """

    @abstractmethod
    async def find(self, query: FindQuery) -> List[ItemRequest]:
        """
        Find records matching a query.

        Args:
            query: Filter, sort keys, skip and limit

        Returns:
            Ordered list of matching records
        """
        pass

    @abstractmethod
    async def insert_one(self, record: NewItemRequest) -> ItemRequest:
        """
        Insert a new record.

        Args:
            record: Fields of the new record

        Returns:
            The stored record, including its assigned id
        """
        pass

    @abstractmethod
    async def find_one_and_update(
        self, request_id: str, update: StatusUpdate
    ) -> Optional[ItemRequest]:
        """
        Apply ``update`` to the record with ``request_id``.

        Returns:
            The record after the update, or None if no record matched
        """
        pass

    @abstractmethod
    async def bulk_write(self, operations: Sequence[BulkOperation]) -> BulkWriteResult:
        """
        Apply independent per-id operations in one round trip.

        A failure on one operation is reported in ``write_errors`` and
        does not prevent the others from being applied.

        Args:
            operations: Update or delete operations, applied in order

        Returns:
            Matched, modified and deleted counts plus per-item errors
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """
        Check store connectivity.

        Returns:
            True if the store answered, False otherwise
        """
        pass
