"""
Bulk administrative operations on item requests.

The whole batch is validated before the store is touched; the store then
applies each per-id operation independently.
"""

import logging
from datetime import datetime
from typing import Any, Callable

from ..domain.entities import BatchResult, utc_now
from ..repositories.request_repository import (
    DeleteOperation,
    IItemRequestRepository,
    StatusUpdate,
    UpdateStatusOperation,
)
from ..validators import validate_batch_delete, validate_batch_edit

logger = logging.getLogger(__name__)


class BatchService:
    """Batch status edits and batch deletes."""

    def __init__(self, repository: IItemRequestRepository, clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.clock = clock

    async def batch_approve(self, data: Any) -> BatchResult:
        """
        Set the status of many item requests in one bulk write.

        Unknown ids do not match and are not errors.

        Args:
            data: List of ``{"id": ..., "status": ...}`` objects

        Returns:
            Matched/modified counts and per-item write errors

        Raises:
            InvalidInputException: If the list is empty or any entry is malformed
            RequestStoreException: If the bulk write as a whole fails
        """
        edits = validate_batch_edit(data)
        now = self.clock()

        operations = [
            UpdateStatusOperation(
                id=edit.id, update=StatusUpdate(status=edit.status, last_edited_date=now)
            )
            for edit in edits
        ]
        result = await self.repository.bulk_write(operations)

        logger.info(
            f"Batch edit: {len(operations)} operations, "
            f"{result.matched_count} matched, {result.modified_count} modified, "
            f"{len(result.write_errors)} errors"
        )
        return BatchResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=result.upserted_count,
            errors=list(result.write_errors),
        )

    async def batch_delete(self, data: Any) -> BatchResult:
        """
        Delete many item requests in one bulk write.

        Args:
            data: List of ``{"id": ...}`` objects

        Returns:
            Counts where matched and modified both equal the number deleted

        Raises:
            InvalidInputException: If the list is empty or any entry is malformed
            RequestStoreException: If the bulk write as a whole fails
        """
        ids = validate_batch_delete(data)
        result = await self.repository.bulk_write([DeleteOperation(id=i) for i in ids])

        logger.info(
            f"Batch delete: {len(ids)} operations, {result.deleted_count} deleted, "
            f"{len(result.write_errors)} errors"
        )
        return BatchResult(
            matched_count=result.deleted_count,
            modified_count=result.deleted_count,
            upserted_count=result.upserted_count,
            errors=list(result.write_errors),
        )
