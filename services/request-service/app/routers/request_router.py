"""
Item request API router.

List, create and edit single item requests.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from ..dependencies import get_request_service
from ..domain.exceptions import InvalidInputException
from ..metrics import track_operation
from ..services.request_service import ItemRequestService
from .common import internal_error, invalid_input_error, read_json_body

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["requests"])


@router.get(
    "/request",
    summary="List item requests",
    description="One page of item requests, newest first, optionally filtered by status",
)
async def list_item_requests(
    status_filter: Optional[str] = Query(None, alias="status", description="Status filter"),
    page: int = Query(1, description="1-based page number"),
    service: ItemRequestService = Depends(get_request_service),
):
    """
    List item requests.

    Unknown status values are ignored; a page below 1 is rejected.
    """
    try:
        items = await service.list_requests(status_filter, page)
        track_operation("list", "success")
        return [item.to_dict() for item in items]

    except InvalidInputException as e:
        track_operation("list", "invalid")
        logger.info("Rejected list request", page=page, reason=e.message)
        raise invalid_input_error(e)

    except Exception as e:
        track_operation("list", "error")
        logger.error("Failed to retrieve item requests", error=str(e), exc_info=True)
        raise internal_error()


@router.put(
    "/request",
    status_code=status.HTTP_201_CREATED,
    summary="Create item request",
)
async def create_item_request(
    request: Request,
    service: ItemRequestService = Depends(get_request_service),
):
    """Create an item request; status defaults to pending."""
    try:
        body = await read_json_body(request)
        created = await service.create_request(body)
        track_operation("create", "success")
        return created.to_dict()

    except InvalidInputException as e:
        track_operation("create", "invalid")
        logger.info("Rejected create request", field=e.details.get("field"), reason=e.message)
        raise invalid_input_error(e)

    except Exception as e:
        track_operation("create", "error")
        logger.error("Failed to create item request", error=str(e), exc_info=True)
        raise internal_error()


@router.patch(
    "/request",
    summary="Edit item request status",
    description="Returns the updated request, or null if the id does not exist",
)
async def edit_item_request(
    request: Request,
    service: ItemRequestService = Depends(get_request_service),
):
    """Change the status of one item request."""
    try:
        body = await read_json_body(request)
        updated = await service.edit_request(body)

    except InvalidInputException as e:
        track_operation("edit", "invalid")
        logger.info("Rejected edit request", field=e.details.get("field"), reason=e.message)
        raise invalid_input_error(e)

    except Exception as e:
        track_operation("edit", "error")
        logger.error("Failed to edit item request", error=str(e), exc_info=True)
        raise internal_error()

    if updated is None:
        track_operation("edit", "not_found")
        return JSONResponse(content=None, status_code=status.HTTP_200_OK)

    track_operation("edit", "success")
    return updated.to_dict()
