"""
Shared base for all API schemas.

The public API speaks camelCase JSON (accountNumber, createdTimestamp, ...)
while Python code uses snake_case. The alias generator maps between the two;
populate_by_name lets services build responses with snake_case names.

Every timestamp is stored in UTC. SQLite returns them without tzinfo, so
response timestamps go through UTCDatetime, which renders a freshly created
value and the same value read back from the database identically.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
