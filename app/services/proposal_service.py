"""Proposal service for the lead/customer linking columns."""

from __future__ import annotations

from typing import Any

from app.core.exceptions import ValidationError
from app.database.models import Proposal
from app.services.base_service import BaseService


class ProposalService(BaseService):
    """Service for proposal CRUD and customer linking."""

    def create_proposal(self, data: dict[str, Any]) -> Proposal:
        if data.get("lead_id") and data.get("customer_id"):
            raise ValidationError("A proposal references either a lead or a customer, not both.")
        return self.save(Proposal(**dict(data)))

    def get_proposal(self, proposal_id: str) -> Proposal | None:
        return self.db.query(Proposal).filter(Proposal.id == proposal_id).first()

    def list_for_lead(self, lead_id: str) -> list[Proposal]:
        return self.db.query(Proposal).filter(Proposal.lead_id == lead_id).all()

    def list_for_customer(self, customer_id: str) -> list[Proposal]:
        return self.db.query(Proposal).filter(Proposal.customer_id == customer_id).all()

    def update_fields(self, proposal: Proposal, changes: dict[str, Any]) -> Proposal:
        for key, value in changes.items():
            setattr(proposal, key, value)
        self.commit()
        self.db.refresh(proposal)
        return proposal

    def set_customer(self, proposal_id: str, customer_id: str) -> Proposal | None:
        proposal = self.get_proposal(proposal_id)
        if proposal is None:
            return None
        return self.update_fields(proposal, {"customer_id": customer_id})
