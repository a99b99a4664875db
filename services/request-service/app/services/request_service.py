"""
Business logic for single item requests.

Composes the validators and the repository to list, create and edit
item requests.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..domain.entities import ItemRequest, RequestStatus, utc_now
from ..domain.exceptions import InvalidPaginationException
from ..repositories.request_repository import (
    FindQuery,
    IItemRequestRepository,
    NewItemRequest,
    SortKey,
    StatusUpdate,
)
from ..validators import is_valid_status, validate_create, validate_edit

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5

# Largest OFFSET a 64-bit store can bind
MAX_STORE_OFFSET = 2**63 - 1

# Newest first; requestor name breaks ties so pages never overlap
LIST_SORT_ORDER = (
    SortKey("request_created_date", descending=True),
    SortKey("requestor_name"),
)


class ItemRequestService:
    """
    Item request lifecycle service.

    Status filters are lenient (unknown values mean "no filter") while page
    numbers are strict (anything below 1 is rejected).
    """

    def __init__(
        self,
        repository: IItemRequestRepository,
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize request service.

        Args:
            repository: Item request store
            page_size: Number of records per page
            clock: Returns the current timestamp
        """
        self.repository = repository
        self.page_size = page_size
        self.clock = clock

    async def list_requests(
        self, status_filter: Optional[str] = None, page: int = 1
    ) -> List[ItemRequest]:
        """
        Get one page of item requests, newest first.

        Args:
            status_filter: Status to filter by; ignored if unknown
            page: 1-based page number

        Returns:
            Up to ``page_size`` item requests, empty past the last page

        Raises:
            InvalidPaginationException: If page is less than 1
        """
        if page < 1:
            raise InvalidPaginationException(page, self.page_size)

        status = RequestStatus(status_filter) if is_valid_status(status_filter) else None
        if status_filter is not None and status is None:
            logger.info(f"Ignoring unknown status filter: {status_filter!r}")

        skip = (page - 1) * self.page_size
        if skip > MAX_STORE_OFFSET:
            return []

        query = FindQuery(
            status=status,
            sort=LIST_SORT_ORDER,
            skip=skip,
            limit=self.page_size,
        )
        return await self.repository.find(query)

    async def create_request(self, data: Any) -> ItemRequest:
        """
        Validate and store a new item request.

        Args:
            data: Decoded JSON body

        Returns:
            Stored item request including its assigned id

        Raises:
            InvalidInputException: If the body is invalid
            RequestStoreException: If the store rejects the insert
        """
        draft = validate_create(data)
        now = self.clock()

        created = await self.repository.insert_one(
            NewItemRequest(
                requestor_name=draft.requestor_name,
                item_requested=draft.item_requested,
                request_created_date=now,
                last_edited_date=now,
                status=draft.status,
                location=draft.location,
            )
        )
        logger.info(f"Created item request {created.id} with status {created.status.value}")
        return created

    async def edit_request(self, data: Any) -> Optional[ItemRequest]:
        """
        Change the status of one item request.

        Args:
            data: Decoded JSON body with ``id`` and ``status``

        Returns:
            Updated item request, or None if no request has that id

        Raises:
            InvalidInputException: If the body is invalid
            RequestStoreException: If the store rejects the update
        """
        edit = validate_edit(data)
        updated = await self.repository.find_one_and_update(
            edit.id, StatusUpdate(status=edit.status, last_edited_date=self.clock())
        )
        if updated is None:
            logger.info(f"Edit target not found: {edit.id}")
        return updated
