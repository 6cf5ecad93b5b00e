"""DSNY collection schedule endpoint for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Query

from app.schemas.schedules import CollectionScheduleResponse
from app.services.dsny_schedule_service import DSNYScheduleService

router = APIRouter(tags=["schedules"])


@router.get("/schedules/dsny", response_model=CollectionScheduleResponse)
def dsny_schedule(address: str = Query(min_length=3, max_length=500)) -> CollectionScheduleResponse:
    schedule = DSNYScheduleService().fetch_pickup_schedule(address)
    return CollectionScheduleResponse(**schedule.to_dict())
