"""Planning poker Pydantic schemas."""

from typing import Optional

from pydantic import Field, field_validator

from standup.models.poker import RoundStatus
from standup.schemas.base import ApiModel, UtcDatetime
from standup.utils.poker_stats import ALL_VOTE_VALUES


class ClaimIn(ApiModel):
    participant_id: int
    session_id: str = Field(min_length=1, max_length=200)


class VoteIn(ApiModel):
    round_id: int
    participant_id: int
    session_id: str = Field(min_length=1, max_length=200)
    value: str

    @field_validator("value")
    @classmethod
    def value_in_deck(cls, v: str) -> str:
        if v not in ALL_VOTE_VALUES:
            raise ValueError("Invalid vote value")
        return v


class RevealIn(ApiModel):
    round_id: int


class RoundOut(ApiModel):
    id: int
    status: RoundStatus
    created_at: UtcDatetime


class PokerParticipantOut(ApiModel):
    id: int
    name: str
    poker_enabled: bool
    is_present: bool


class VoteSummaryOut(ApiModel):
    participant_id: int
    has_voted: bool
    # Stays None until the round is revealed.
    value: Optional[str] = None
