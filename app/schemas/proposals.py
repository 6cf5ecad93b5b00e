"""Proposal request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProposalCreateRequest(BaseModel):
    lead_id: str | None = Field(default=None, max_length=36)
    customer_id: str | None = Field(default=None, max_length=36)
    property_id: str | None = Field(default=None, max_length=64)
    project_address: str | None = Field(default=None, max_length=500)
    title: str | None = Field(default=None, max_length=255)
    total_amount: int | None = Field(default=None, ge=0)


class ProposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: str | None = None
    customer_id: str | None = None
    property_id: str | None = None
    project_address: str | None = None
    title: str | None = None
    status: str | None = None
    total_amount: int | None = None
    updated_at: datetime | None = None
