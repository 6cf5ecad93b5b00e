"""DSNY collection schedule response schema."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class CollectionScheduleResponse(BaseModel):
    address: str
    zone: str
    schedules: dict[str, list[int]] = Field(default_factory=dict)
    combined_days: list[int] = Field(default_factory=list)
    next_pickup: date | None = None
    simulated: bool = False
