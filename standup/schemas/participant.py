"""Participant Pydantic schemas."""

from pydantic import field_validator

from standup.schemas.base import ApiModel, UtcDatetime


class ParticipantCreate(ApiModel):
    name: str
    poker_enabled: bool = False

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > 100:
            raise ValueError("Name is too long")
        return v


class PokerEnabledUpdate(ApiModel):
    poker_enabled: bool


class ParticipantOut(ApiModel):
    id: int
    name: str
    is_present: bool
    poker_enabled: bool
    win_count: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ParticipantRef(ApiModel):
    id: int
    name: str


class WinnerOut(ApiModel):
    id: int
    name: str
    win_count: int


class SpinHistoryOut(ApiModel):
    id: int
    participant_id: int
    created_at: UtcDatetime
    participant: ParticipantRef


class SpinResultOut(ApiModel):
    winner: WinnerOut
    spin_history: SpinHistoryOut
