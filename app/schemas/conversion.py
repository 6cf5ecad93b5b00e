"""Lead conversion response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.services.lead_conversion_service import ConversionOutcome, ItemOutcome


class ItemOutcomeResponse(BaseModel):
    key: str
    status: str
    entity_id: str | None = None
    error: str | None = None

    @classmethod
    def from_item(cls, item: ItemOutcome) -> "ItemOutcomeResponse":
        return cls(key=item.key, status=item.status.value, entity_id=item.entity_id, error=item.error)


class ConversionResponse(BaseModel):
    lead_id: str
    customer_id: str
    customer_created: bool
    lead_marked_won: bool
    lead_linked: bool
    succeeded_fully: bool
    properties: list[ItemOutcomeResponse] = Field(default_factory=list)
    proposals: list[ItemOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ConversionOutcome) -> "ConversionResponse":
        return cls(
            lead_id=outcome.lead_id,
            customer_id=outcome.customer_id,
            customer_created=outcome.customer_created,
            lead_marked_won=outcome.lead_marked_won,
            lead_linked=outcome.lead_linked,
            succeeded_fully=outcome.succeeded_fully,
            properties=[ItemOutcomeResponse.from_item(item) for item in outcome.properties],
            proposals=[ItemOutcomeResponse.from_item(item) for item in outcome.proposals],
        )


class ProposalConversionResponse(BaseModel):
    customer_id: str
    proposal_id: str
