"""Pydantic schema package for API contracts."""

from app.schemas.conversion import ConversionResponse, ItemOutcomeResponse, ProposalConversionResponse
from app.schemas.leads import LeadContact, LeadCreateRequest, LeadProject, LeadResponse
from app.schemas.proposals import ProposalCreateRequest, ProposalResponse
from app.schemas.schedules import CollectionScheduleResponse

__all__ = [
    "CollectionScheduleResponse",
    "ConversionResponse",
    "ItemOutcomeResponse",
    "LeadContact",
    "LeadCreateRequest",
    "LeadProject",
    "LeadResponse",
    "ProposalConversionResponse",
    "ProposalCreateRequest",
    "ProposalResponse",
]
