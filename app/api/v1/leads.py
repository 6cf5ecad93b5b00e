"""Lead endpoints for API v1, including conversion to customer."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1._errors import http_error
from app.core.enums import ActivityType, EntityType
from app.core.exceptions import FieldOpsException
from app.database.db import get_db
from app.database.models import Lead
from app.schemas.conversion import ConversionResponse, ProposalConversionResponse
from app.schemas.leads import LeadCreateRequest, LeadResponse
from app.services.activity_service import ActivityService
from app.services.lead_conversion_service import LeadConversionService
from app.services.lead_service import LeadService

router = APIRouter(tags=["leads"])


@router.post("/leads", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
def create_lead(payload: LeadCreateRequest, db: Session = Depends(get_db)) -> Lead:
    lead = LeadService(db=db).create_lead(payload.to_record())
    ActivityService(db=db).log_activity(
        ActivityType.LEAD_CREATED,
        EntityType.LEAD,
        lead.id,
        f"Lead created for {lead.company_name or 'unnamed company'}",
    )
    return lead


@router.get("/leads/{lead_id}", response_model=LeadResponse)
def get_lead(lead_id: str, db: Session = Depends(get_db)) -> Lead:
    lead = LeadService(db=db).get_lead(lead_id)
    if lead is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return lead


@router.post("/leads/{lead_id}/convert", response_model=ConversionResponse)
def convert_lead(lead_id: str, db: Session = Depends(get_db)) -> ConversionResponse:
    service = LeadConversionService(db=db)
    try:
        outcome = service.convert_lead_to_customer(lead_id)
    except FieldOpsException as exc:
        raise http_error(exc) from exc
    return ConversionResponse.from_outcome(outcome)


@router.post(
    "/leads/{lead_id}/convert/proposals/{proposal_id}",
    response_model=ProposalConversionResponse,
)
def convert_lead_for_proposal(
    lead_id: str,
    proposal_id: str,
    db: Session = Depends(get_db),
) -> ProposalConversionResponse:
    service = LeadConversionService(db=db)
    try:
        outcome = service.convert_lead_for_proposal(lead_id, proposal_id)
    except FieldOpsException as exc:
        raise http_error(exc) from exc
    return ProposalConversionResponse(customer_id=outcome.customer_id, proposal_id=proposal_id)
