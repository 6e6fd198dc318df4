"""Shared schema helpers: camelCase wire format and UTC datetimes."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def to_naive_utc(value: datetime) -> datetime:
    # la BD stocke des datetimes naïfs en UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (both accepted as input)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class StatusResponse(CamelModel):
    success: bool = True
    message: str
