"""Lead service for CRUD and stage updates."""

from __future__ import annotations

from typing import Any

from app.core.enums import LeadStage
from app.core.exceptions import ValidationError
from app.database.models import Lead
from app.services.base_service import BaseService


class LeadService(BaseService):
    """Service for lead CRUD and stage transitions."""

    def create_lead(self, data: dict[str, Any]) -> Lead:
        payload = dict(data)
        payload.setdefault("contacts", [])
        payload.setdefault("projects", [])
        payload.setdefault("stage", LeadStage.NEW.value)
        return self.save(Lead(**payload))

    def get_lead(self, lead_id: str) -> Lead | None:
        return self.db.query(Lead).filter(Lead.id == lead_id).first()

    def list_by_stage(self, stage: str) -> list[Lead]:
        return self.db.query(Lead).filter(Lead.stage == stage).all()

    def update_stage(self, lead_id: str, stage: str) -> Lead | None:
        lead = self.get_lead(lead_id)
        if lead is None:
            return None

        try:
            lead.stage = LeadStage(stage).value
        except ValueError as exc:
            raise ValidationError(f"Unknown lead stage: {stage}") from exc
        self.commit()
        self.db.refresh(lead)
        return lead

    def mark_won(self, lead_id: str, customer_id: str | None = None) -> Lead | None:
        """Drive the lead to `won`, optionally recording the converted customer."""
        lead = self.get_lead(lead_id)
        if lead is None:
            return None

        lead.stage = LeadStage.WON.value
        if customer_id is not None:
            lead.converted_to_customer_id = customer_id
        self.commit()
        self.db.refresh(lead)
        return lead
