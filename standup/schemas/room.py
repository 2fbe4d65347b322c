"""Room Pydantic schemas."""

from pydantic import Field

from standup.schemas.base import ApiModel, UtcDatetime


class RoomCreate(ApiModel):
    """Fields submitted when creating a room."""
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    passcode: str = Field(min_length=1, max_length=100)


class RoomAuth(ApiModel):
    passcode: str = Field(min_length=1)


class RoomOut(ApiModel):
    """Public room representation – never includes the passcode hash."""
    id: int
    name: str
    slug: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class RoomCounts(ApiModel):
    participants: int
    spin_history: int


class RoomDetailOut(RoomOut):
    count: RoomCounts
