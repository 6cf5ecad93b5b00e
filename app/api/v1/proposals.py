"""Proposal endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1._errors import http_error
from app.core.enums import ActivityType, EntityType
from app.core.exceptions import FieldOpsException
from app.database.db import get_db
from app.database.models import Proposal
from app.schemas.proposals import ProposalCreateRequest, ProposalResponse
from app.services.activity_service import ActivityService
from app.services.proposal_service import ProposalService

router = APIRouter(tags=["proposals"])


@router.post("/proposals", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def create_proposal(payload: ProposalCreateRequest, db: Session = Depends(get_db)) -> Proposal:
    try:
        proposal = ProposalService(db=db).create_proposal(payload.model_dump())
    except FieldOpsException as exc:
        raise http_error(exc) from exc
    ActivityService(db=db).log_activity(
        ActivityType.PROPOSAL_CREATED,
        EntityType.PROPOSAL,
        proposal.id,
        f"Proposal created: {proposal.title or proposal.id}",
    )
    return proposal


@router.get("/proposals/{proposal_id}", response_model=ProposalResponse)
def get_proposal(proposal_id: str, db: Session = Depends(get_db)) -> Proposal:
    proposal = ProposalService(db=db).get_proposal(proposal_id)
    if proposal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proposal not found")
    return proposal
