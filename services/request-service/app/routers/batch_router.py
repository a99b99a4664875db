"""
Batch API router.

Bulk status edits and bulk deletes over many item requests.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from ..dependencies import get_batch_service
from ..domain.exceptions import InvalidInputException
from ..metrics import track_batch, track_operation
from ..services.batch_service import BatchService
from .common import internal_error, invalid_input_error, read_json_body

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["batch"])


@router.patch("/batch", summary="Batch edit item request statuses")
async def batch_approve(
    request: Request,
    service: BatchService = Depends(get_batch_service),
):
    """
    Apply ``[{"id": ..., "status": ...}, ...]`` in one bulk write.

    Unknown ids are counted as unmatched, not reported as errors.
    """
    try:
        body = await read_json_body(request)
        result = await service.batch_approve(body)
        track_operation("batch_approve", "success")
        track_batch("batch_approve", result.matched_count, len(result.errors))
        return result.to_dict()

    except InvalidInputException as e:
        track_operation("batch_approve", "invalid")
        logger.info("Rejected batch edit", field=e.details.get("field"), reason=e.message)
        raise invalid_input_error(e)

    except Exception as e:
        track_operation("batch_approve", "error")
        logger.error("Batch edit failed", error=str(e), exc_info=True)
        raise internal_error()


@router.delete("/batch", summary="Batch delete item requests")
async def batch_delete(
    request: Request,
    service: BatchService = Depends(get_batch_service),
):
    """Delete ``[{"id": ...}, ...]`` in one bulk write."""
    try:
        body = await read_json_body(request)
        result = await service.batch_delete(body)
        track_operation("batch_delete", "success")
        track_batch("batch_delete", result.matched_count, len(result.errors))
        return result.to_dict()

    except InvalidInputException as e:
        track_operation("batch_delete", "invalid")
        logger.info("Rejected batch delete", field=e.details.get("field"), reason=e.message)
        raise invalid_input_error(e)

    except Exception as e:
        track_operation("batch_delete", "error")
        logger.error("Batch delete failed", error=str(e), exc_info=True)
        raise internal_error()
