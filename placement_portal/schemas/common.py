"""Response envelopes and field types shared by all routes."""

from datetime import UTC, datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel

T = TypeVar("T")


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


# Timestamps are stored as naive UTC; aware inputs are converted on the way in.
UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope."""

    success: bool = True
    data: T
    message: str | None = None
