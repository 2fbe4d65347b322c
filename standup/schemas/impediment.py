"""Impediment Pydantic schemas."""

import datetime as dt
from typing import Optional

from standup.models.impediment import ImpedimentStatus
from standup.schemas.base import ApiModel, UtcDatetime


class ImpedimentUpsert(ApiModel):
    participant_id: int
    status: ImpedimentStatus
    description: Optional[str] = None
    # Defaults to today in the deployment timezone.
    date: Optional[dt.date] = None


class ImpedimentResolve(ApiModel):
    participant_id: int


class ImpedimentOut(ApiModel):
    id: int
    participant_id: int
    status: ImpedimentStatus
    description: Optional[str] = None
    date: UtcDatetime
    resolved_at: Optional[UtcDatetime] = None
    created_at: UtcDatetime
