"""Shared field types and the response envelope."""

from decimal import Decimal
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, Field, PlainSerializer

# Decimals stay exact in Python and are emitted as JSON numbers
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

PLZ_PATTERN = r"^[0-9]{5}$"

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope used by every endpoint."""

    erfolg: bool = True
    nachricht: str
    daten: T | None = None


class FieldError(BaseModel):
    """Single validation problem of a request body."""

    feld: str
    nachricht: str


class ErrorResponse(BaseModel):
    """Failure envelope."""

    erfolg: bool = False
    nachricht: str
    fehlerCode: str | None = None
    fehler: list[FieldError] = Field(default_factory=list)
    details: Any = None
