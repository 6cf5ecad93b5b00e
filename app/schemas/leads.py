"""Lead request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import LeadStage


class LeadContact(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    cell: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)


class LeadProject(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = Field(default=None, max_length=64)
    address: str = Field(default="", max_length=500)
    address_line_2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=120)
    state: str | None = Field(default=None, max_length=40)
    zip: str | None = Field(default=None, max_length=20)
    type: str | None = Field(default=None, max_length=120)
    unit_count: int | str | None = None
    notes: str | None = Field(default=None, max_length=5000)


class LeadCreateRequest(BaseModel):
    company_name: str | None = Field(default=None, max_length=255)
    company_address: str | None = Field(default=None, max_length=500)
    address: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    website: str | None = Field(default=None, max_length=500)
    contact_first_name: str | None = Field(default=None, max_length=120)
    contact_last_name: str | None = Field(default=None, max_length=120)
    city: str | None = Field(default=None, max_length=120)
    state: str | None = Field(default=None, max_length=40)
    zip_code: str | None = Field(default=None, max_length=20)
    contacts: list[LeadContact] = Field(default_factory=list)
    projects: list[LeadProject] = Field(default_factory=list)
    stage: str = Field(default=LeadStage.NEW.value)
    notes: str | None = Field(default=None, max_length=5000)

    @field_validator("stage")
    @classmethod
    def stage_is_known(cls, value: str) -> str:
        return LeadStage(value.strip().lower()).value

    def to_record(self) -> dict[str, Any]:
        payload = self.model_dump(exclude={"contacts", "projects"})
        payload["contacts"] = [contact.model_dump(exclude_none=True) for contact in self.contacts]
        payload["projects"] = [project.model_dump(exclude_none=True) for project in self.projects]
        return payload


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_name: str | None = None
    company_address: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    contacts: list[dict[str, Any]] = Field(default_factory=list)
    projects: list[dict[str, Any]] = Field(default_factory=list)
    stage: str
    converted_to_customer_id: str | None = None
    created_at: datetime | None = None
