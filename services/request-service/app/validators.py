"""
Input validation for item request operations.

Untrusted request bodies are parsed into Pydantic models and then into
immutable domain values. Any failure raises ``InvalidInputException``
naming the offending field; nothing is ever partially validated.
"""

import math
import uuid
from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from .domain.entities import (
    DEFAULT_STATUS,
    CreateItemRequestDraft,
    GeoLocation,
    RequestStatus,
    StatusEdit,
)
from .domain.exceptions import InvalidInputException

# Length bounds, applied after trimming
REQUESTOR_NAME_MIN_LENGTH = 3
REQUESTOR_NAME_MAX_LENGTH = 30
ITEM_REQUESTED_MIN_LENGTH = 2
ITEM_REQUESTED_MAX_LENGTH = 100

GEOJSON_POINT_DIMENSIONS = 2

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_valid_string(value: Any, lower: Optional[int] = None, upper: Optional[int] = None) -> bool:
    """
    Check that a value is a non-blank string whose trimmed length is in bounds.

    Args:
        value: Value to check
        lower: Minimum trimmed length (inclusive)
        upper: Maximum trimmed length (inclusive)

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    if lower is not None and len(trimmed) < lower:
        return False
    if upper is not None and len(trimmed) > upper:
        return False
    return True


def is_valid_status(value: Any) -> bool:
    """Return True if ``value`` is one of the known status strings."""
    return isinstance(value, str) and value in RequestStatus.values()


def is_valid_request_id(value: Any) -> bool:
    """
    Validate the store's identifier format (canonical UUID string).

    Args:
        value: Identifier to validate

    Returns:
        True if valid identifier, False otherwise
    """
    if not isinstance(value, str) or not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _normalize_request_id(value: str) -> str:
    return str(uuid.UUID(value))


class GeoPointInput(BaseModel):
    """GeoJSON point as supplied by clients: ``{"type": "Point", "coordinates": [lng, lat]}``."""

    type: Literal["Point"]
    coordinates: List[float]

    @field_validator("coordinates", mode="before")
    @classmethod
    def validate_coordinates(cls, v: Any) -> List[float]:
        if not isinstance(v, (list, tuple)) or len(v) != GEOJSON_POINT_DIMENSIONS:
            raise ValueError("Must be GeoJSON Point [lng, lat]")
        coordinates = []
        for coordinate in v:
            # bool is an int subclass and must not pass as a coordinate
            if isinstance(coordinate, bool) or not isinstance(coordinate, (int, float)):
                raise ValueError("Coordinates must be numbers")
            try:
                coordinate = float(coordinate)
            except OverflowError:
                raise ValueError("Coordinates must be finite") from None
            if not math.isfinite(coordinate):
                raise ValueError("Coordinates must be finite")
            coordinates.append(coordinate)
        return coordinates

    def to_domain(self) -> GeoLocation:
        return GeoLocation(longitude=self.coordinates[0], latitude=self.coordinates[1])


class CreateItemRequestInput(BaseModel):
    """Request body for creating an item request."""

    model_config = ConfigDict(extra="ignore")

    requestorName: StrictStr
    itemRequested: StrictStr
    status: Optional[Any] = None
    location: Optional[GeoPointInput] = None

    @field_validator("requestorName")
    @classmethod
    def validate_requestor_name(cls, v: str) -> str:
        if not is_valid_string(v, REQUESTOR_NAME_MIN_LENGTH, REQUESTOR_NAME_MAX_LENGTH):
            raise ValueError(
                f"Must be {REQUESTOR_NAME_MIN_LENGTH}-{REQUESTOR_NAME_MAX_LENGTH} characters"
            )
        return v.strip()

    @field_validator("itemRequested")
    @classmethod
    def validate_item_requested(cls, v: str) -> str:
        if not is_valid_string(v, ITEM_REQUESTED_MIN_LENGTH, ITEM_REQUESTED_MAX_LENGTH):
            raise ValueError(
                f"Must be {ITEM_REQUESTED_MIN_LENGTH}-{ITEM_REQUESTED_MAX_LENGTH} characters"
            )
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Any) -> RequestStatus:
        # Missing, null and empty string all fall back to the default
        if v is None or v == "":
            return DEFAULT_STATUS
        if not is_valid_status(v):
            raise ValueError(f"Supplied status is invalid, expected one of {RequestStatus.values()}")
        return RequestStatus(v)

    def to_domain(self) -> CreateItemRequestDraft:
        return CreateItemRequestDraft(
            requestor_name=self.requestorName,
            item_requested=self.itemRequested,
            status=self.status if self.status is not None else DEFAULT_STATUS,
            location=self.location.to_domain() if self.location else None,
        )


class DeleteItemRequestInput(BaseModel):
    """Single entry of a batch delete body."""

    model_config = ConfigDict(extra="ignore")

    id: StrictStr

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not is_valid_request_id(v):
            raise ValueError("Invalid or missing request id")
        return _normalize_request_id(v)


class EditItemRequestInput(DeleteItemRequestInput):
    """Request body for a status edit, also used for each batch edit entry."""

    status: StrictStr

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if not is_valid_status(v):
            raise ValueError("Invalid or missing status value")
        return v

    def to_domain(self) -> StatusEdit:
        return StatusEdit(id=self.id, status=RequestStatus(self.status))


def _parse(model: Type[ModelT], data: Any, prefix: str = "") -> ModelT:
    """
    Parse raw input into ``model``, converting Pydantic errors.

    Only the first error is reported; the field path is prefixed with
    ``prefix`` so batch entries can be located.
    """
    if not isinstance(data, dict):
        raise InvalidInputException(prefix or "body", data, "Request body must be an object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        loc = ".".join(str(part) for part in error.get("loc", ())) or "body"
        field = f"{prefix}.{loc}" if prefix else loc
        value = error.get("input")
        raise InvalidInputException(field, value, error.get("msg", "invalid value")) from e


def _require_non_empty_list(data: Any, field: str) -> list:
    if not isinstance(data, list) or len(data) == 0:
        raise InvalidInputException(field, data, "Must be a non-empty array")
    return data


def validate_create(data: Any) -> CreateItemRequestDraft:
    """
    Validate a create body.

    Args:
        data: Decoded JSON body

    Returns:
        Normalized draft with trimmed strings and resolved status

    Raises:
        InvalidInputException: If any field is missing or malformed
    """
    if data is None:
        raise InvalidInputException("body", data, "Missing request body")
    return _parse(CreateItemRequestInput, data).to_domain()


def validate_edit(data: Any) -> StatusEdit:
    """
    Validate a single status edit body.

    Raises:
        InvalidInputException: If ``id`` or ``status`` is missing or malformed
    """
    return _parse(EditItemRequestInput, data).to_domain()


def validate_batch_edit(data: Any) -> List[StatusEdit]:
    """
    Validate every entry of a batch edit.

    One malformed entry rejects the whole batch.

    Raises:
        InvalidInputException: If the batch is empty or any entry is malformed
    """
    items = _require_non_empty_list(data, "edits")
    return [
        _parse(EditItemRequestInput, item, prefix=f"edits[{index}]").to_domain()
        for index, item in enumerate(items)
    ]


def validate_batch_delete(data: Any) -> List[str]:
    """
    Validate every entry of a batch delete.

    Raises:
        InvalidInputException: If the batch is empty or any entry lacks a valid id
    """
    items = _require_non_empty_list(data, "ids")
    return [
        _parse(DeleteItemRequestInput, item, prefix=f"ids[{index}]").id
        for index, item in enumerate(items)
    ]
