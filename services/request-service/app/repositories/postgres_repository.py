"""
SQL implementation of the item request repository.

Targets PostgreSQL in production; the same code runs against SQLite in tests.
Each call opens its own session, so the repository holds no per-request state.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..database import session_scope
from ..domain.entities import GeoLocation, ItemRequest, RequestStatus, WriteError
from ..domain.exceptions import RequestStoreException
from ..models import ItemRequestRecord, generate_request_id
from .request_repository import (
    BulkOperation,
    BulkWriteResult,
    DeleteOperation,
    FindQuery,
    IItemRequestRepository,
    NewItemRequest,
    SortKey,
    StatusUpdate,
    UpdateStatusOperation,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "request_created_date": ItemRequestRecord.request_created_date,
    "last_edited_date": ItemRequestRecord.last_edited_date,
    "requestor_name": ItemRequestRecord.requestor_name,
    "item_requested": ItemRequestRecord.item_requested,
    "status": ItemRequestRecord.status,
}


class PostgresItemRequestRepository(IItemRequestRepository):
    """SQLAlchemy-backed item request persistence."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize repository.

        Args:
            session_factory: Factory producing SQLAlchemy sessions
        """
        self.session_factory = session_factory

    async def find(self, query: FindQuery) -> List[ItemRequest]:
        """Find item requests matching ``query``."""
        try:
            with session_scope(self.session_factory) as db:
                q = db.query(ItemRequestRecord)

                if query.status is not None:
                    q = q.filter(ItemRequestRecord.status == query.status.value)

                if query.has_location is True:
                    q = q.filter(
                        ItemRequestRecord.location_lng.isnot(None),
                        ItemRequestRecord.location_lat.isnot(None),
                    )
                elif query.has_location is False:
                    q = q.filter(
                        or_(
                            ItemRequestRecord.location_lng.is_(None),
                            ItemRequestRecord.location_lat.is_(None),
                        )
                    )

                for key in query.sort:
                    column = self._sort_column(key)
                    q = q.order_by(column.desc() if key.descending else column.asc())

                if query.skip:
                    q = q.offset(query.skip)
                if query.limit is not None:
                    q = q.limit(query.limit)

                return [self._map_to_entity(row) for row in q.all()]

        except SQLAlchemyError as e:
            logger.error(f"Error finding item requests: {e}")
            raise RequestStoreException("find", str(e))

    async def insert_one(self, record: NewItemRequest) -> ItemRequest:
        """Insert a new item request and return it with its id."""
        with session_scope(self.session_factory) as db:
            try:
                row = ItemRequestRecord(
                    id=generate_request_id(),
                    requestor_name=record.requestor_name,
                    item_requested=record.item_requested,
                    request_created_date=record.request_created_date,
                    last_edited_date=record.last_edited_date,
                    status=record.status.value,
                    location_lng=record.location.longitude if record.location else None,
                    location_lat=record.location.latitude if record.location else None,
                )
                db.add(row)
                db.commit()
                return self._map_to_entity(row)

            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error inserting item request: {e}")
                raise RequestStoreException("insert", str(e))

    async def find_one_and_update(
        self, request_id: str, update: StatusUpdate
    ) -> Optional[ItemRequest]:
        """Update status fields of one item request."""
        with session_scope(self.session_factory) as db:
            try:
                matched, _ = self._apply_update(db, request_id, update)
                if not matched:
                    db.rollback()
                    return None

                db.commit()
                row = db.get(ItemRequestRecord, request_id)
                return self._map_to_entity(row) if row is not None else None

            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error updating item request {request_id}: {e}")
                raise RequestStoreException("update", str(e))

    async def bulk_write(self, operations: Sequence[BulkOperation]) -> BulkWriteResult:
        """
        Apply update/delete operations, each inside its own savepoint.

        A failing operation is rolled back to its savepoint and recorded;
        the remaining operations still run and commit together.
        """
        result = BulkWriteResult()

        with session_scope(self.session_factory) as db:
            try:
                for index, operation in enumerate(operations):
                    try:
                        with db.begin_nested():
                            self._apply_operation(db, operation, result)
                    except SQLAlchemyError as e:
                        logger.warning(
                            f"Bulk operation {index} on {operation.id} failed: {e}"
                        )
                        result.write_errors.append(
                            WriteError(index=index, id=operation.id, message=str(e))
                        )

                db.commit()

            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error executing bulk write: {e}")
                raise RequestStoreException("bulk_write", str(e))

        return result

    async def ping(self) -> bool:
        """Run a trivial query against the database."""
        try:
            with session_scope(self.session_factory) as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database connectivity check failed: {e}")
            return False

    def _apply_operation(
        self, db: Session, operation: BulkOperation, result: BulkWriteResult
    ) -> None:
        if isinstance(operation, UpdateStatusOperation):
            matched, modified = self._apply_update(db, operation.id, operation.update)
            result.matched_count += matched
            result.modified_count += modified
        elif isinstance(operation, DeleteOperation):
            deleted = (
                db.query(ItemRequestRecord)
                .filter(ItemRequestRecord.id == operation.id)
                .delete(synchronize_session=False)
            )
            result.deleted_count += deleted
        else:
            raise TypeError(f"Unsupported bulk operation: {operation!r}")

    def _apply_update(
        self, db: Session, request_id: str, update: StatusUpdate
    ) -> Tuple[int, int]:
        """
        Set status fields on one row.

        Returns:
            (matched, modified) where modified is 1 only if a value changed
        """
        row = (
            db.query(ItemRequestRecord)
            .filter(ItemRequestRecord.id == request_id)
            .with_for_update()
            .first()
        )
        if row is None:
            return 0, 0

        changed = (
            row.status != update.status.value
            or row.last_edited_date != update.last_edited_date
        )
        row.status = update.status.value
        row.last_edited_date = update.last_edited_date
        db.flush()
        return 1, int(changed)

    def _sort_column(self, key: SortKey):
        try:
            return SORTABLE_COLUMNS[key.field]
        except KeyError:
            raise ValueError(f"Unsupported sort field: {key.field}") from None

    def _map_to_entity(self, row: ItemRequestRecord) -> ItemRequest:
        """Map database model to domain entity."""
        location = None
        if row.has_location():
            location = GeoLocation(longitude=row.location_lng, latitude=row.location_lat)

        return ItemRequest(
            id=row.id,
            requestor_name=row.requestor_name,
            item_requested=row.item_requested,
            request_created_date=row.request_created_date,
            last_edited_date=row.last_edited_date,
            status=RequestStatus(row.status),
            location=location,
        )
