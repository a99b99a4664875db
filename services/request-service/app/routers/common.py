"""
Helpers shared by the API routers.

Invalid input maps to 400; every other failure maps to a generic 500.
"""

import json
from typing import Any

from fastapi import HTTPException, Request, status

from ..domain.exceptions import InvalidInputException


def invalid_input_error(exc: InvalidInputException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "error": "invalid_input",
            "message": exc.message,
            "details": exc.details,
        },
    )


def internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "details": {},
        },
    )


async def read_json_body(request: Request) -> Any:
    """
    Decode the request body as JSON.

    An empty body decodes to None so validators report it as missing.

    Raises:
        InvalidInputException: If the body is not valid JSON
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise InvalidInputException("body", raw[:100].decode(errors="replace"), "Malformed JSON") from e
