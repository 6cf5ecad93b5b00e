"""Lead to customer conversion.

Converting a lead creates (or reuses) a customer, turns each of the lead's
embedded projects into a property, points the lead's proposals at the new
customer and property, and marks the lead won.

Every step commits on its own. Failing to load the lead or to insert the
customer aborts the call; a property insert or proposal update that fails
is rolled back, logged and reported in the returned ``ConversionOutcome``
while the remaining items are still processed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_config
from app.core.enums import ActivityType, EntityType, ExistingCustomerPolicy, ItemStatus
from app.core.exceptions import ConversionError, NotFoundError
from app.database.models import Customer, Lead, Property
from app.services.activity_service import ActivityService
from app.services.base_service import BaseService
from app.services.lead_service import LeadService
from app.services.property_reference import (
    ProjectLookup,
    candidate_references,
    compose_full_address,
    has_address,
)
from app.services.proposal_service import ProposalService

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class ItemOutcome:
    key: str
    status: ItemStatus
    entity_id: str | None = None
    error: str | None = None


@dataclass
class ConversionOutcome:
    """What a conversion actually managed to do."""

    lead_id: str
    customer_id: str
    customer_created: bool
    lead_marked_won: bool = False
    lead_linked: bool = False
    properties: list[ItemOutcome] = field(default_factory=list)
    proposals: list[ItemOutcome] = field(default_factory=list)

    @property
    def failed_items(self) -> list[ItemOutcome]:
        return [item for item in self.properties + self.proposals if item.status == ItemStatus.FAILED]

    @property
    def succeeded_fully(self) -> bool:
        return self.lead_marked_won and not self.failed_items


def parse_unit_count(value: Any) -> int | None:
    """Read a unit count the way a form field would: leading digits or nothing."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def _primary_contact(lead: Lead) -> Mapping[str, Any]:
    contacts = lead.contacts or []
    if contacts and isinstance(contacts[0], Mapping):
        return contacts[0]
    return {}


def build_customer(lead: Lead) -> Customer:
    """Merge the lead's primary contact over its flat contact fields."""
    contact = _primary_contact(lead)
    return Customer(
        company_name=lead.company_name or None,
        contact_first_name=contact.get("name") or lead.contact_first_name or "",
        contact_last_name=lead.contact_last_name or "",
        email=contact.get("email") or lead.email or None,
        phone=contact.get("phone") or lead.phone or None,
        billing_address=lead.company_address or lead.address or None,
        billing_city=lead.city or None,
        billing_state=lead.state or None,
        billing_zip_code=lead.zip_code or None,
        converted_from_lead_id=lead.id,
        is_active=True,
    )


def build_property(customer_id: str, project: Mapping[str, Any]) -> Property:
    return Property(
        customer_id=customer_id,
        name=project.get("type") or "Property",
        address=compose_full_address(project),
        property_type=project.get("type") or None,
        unit_count=parse_unit_count(project.get("unit_count")),
        notes=project.get("notes") or None,
        is_active=True,
    )


class LeadConversionService(BaseService):
    """Convert leads into customers, properties and relinked proposals."""

    def __init__(
        self,
        db: Session | None = None,
        policy: ExistingCustomerPolicy | str | None = None,
        actor: str | None = None,
    ) -> None:
        super().__init__(db)
        if policy is None:
            self.policy = get_config().existing_customer_policy
        else:
            self.policy = ExistingCustomerPolicy(policy)
        self.actor = actor
        self.leads = LeadService(db=self.db)
        self.proposals = ProposalService(db=self.db)
        self.activities = ActivityService(db=self.db)

    def find_existing_customer(self, lead: Lead) -> Customer | None:
        return (
            self.db.query(Customer)
            .filter(Customer.company_name == (lead.company_name or ""))
            .order_by(Customer.created_at.asc())
            .first()
        )

    def convert_lead_to_customer(self, lead_id: str) -> ConversionOutcome:
        lead = self.leads.get_lead(lead_id)
        if lead is None:
            logger.error(
                "lead_conversion.lead_not_found",
                extra={"event": "lead_conversion.lead_not_found", "lead_id": lead_id},
            )
            raise NotFoundError("Lead not found")

        existing = self.find_existing_customer(lead)
        if existing is not None:
            return self._convert_onto_existing(lead, existing.id)

        customer = self._create_customer(lead)
        outcome = ConversionOutcome(lead_id=lead.id, customer_id=customer.id, customer_created=True)
        self._materialize(lead, outcome)
        self._mark_lead_won(lead, outcome, link=True)
        self._log_completed(outcome)
        return outcome

    def convert_lead_for_proposal(self, lead_id: str, proposal_id: str) -> ConversionOutcome:
        """Convert the lead, then link the proposal that triggered it to the customer."""
        outcome = self.convert_lead_to_customer(lead_id)
        try:
            proposal = self.proposals.set_customer(proposal_id, outcome.customer_id)
        except SQLAlchemyError as exc:
            logger.exception(
                "lead_conversion.proposal_link_failed",
                extra={
                    "event": "lead_conversion.proposal_link_failed",
                    "lead_id": lead_id,
                    "proposal_id": proposal_id,
                },
            )
            raise ConversionError(f"Could not link proposal {proposal_id} to customer.") from exc

        if proposal is None:
            logger.warning(
                "lead_conversion.proposal_missing",
                extra={"event": "lead_conversion.proposal_missing", "proposal_id": proposal_id},
            )
        return outcome

    def _convert_onto_existing(self, lead: Lead, customer_id: str) -> ConversionOutcome:
        outcome = ConversionOutcome(lead_id=lead.id, customer_id=customer_id, customer_created=False)
        logger.info(
            "lead_conversion.existing_customer",
            extra={
                "event": "lead_conversion.existing_customer",
                "lead_id": lead.id,
                "customer_id": customer_id,
                "policy": self.policy.value,
            },
        )
        if self.policy == ExistingCustomerPolicy.FULL:
            self._materialize(lead, outcome)
        self._mark_lead_won(lead, outcome, link=self.policy != ExistingCustomerPolicy.STAGE_ONLY)
        self._log_completed(outcome)
        return outcome

    def _create_customer(self, lead: Lead) -> Customer:
        try:
            customer = self.save(build_customer(lead))
        except SQLAlchemyError as exc:
            logger.exception(
                "lead_conversion.customer_insert_failed",
                extra={"event": "lead_conversion.customer_insert_failed", "lead_id": lead.id},
            )
            raise ConversionError(f"Could not create customer for lead {lead.id}.") from exc

        self.activities.log_activity(
            ActivityType.CUSTOMER_CREATED,
            EntityType.CUSTOMER,
            customer.id,
            f"Customer created from lead {lead.company_name or lead.id}",
            metadata={"lead_id": lead.id},
            created_by=self.actor,
        )
        return customer

    def _materialize(self, lead: Lead, outcome: ConversionOutcome) -> None:
        address_to_property = self._create_properties(lead, outcome)
        lookup = ProjectLookup(lead.projects, address_to_property)
        self._relink_proposals(lead.id, lookup, outcome)

    def _create_properties(self, lead: Lead, outcome: ConversionOutcome) -> dict[str, str]:
        address_to_property: dict[str, str] = {}
        for index, project in enumerate(lead.projects or []):
            key = f"project-{index}"
            if not isinstance(project, Mapping) or not has_address(project):
                outcome.properties.append(ItemOutcome(key=key, status=ItemStatus.SKIPPED))
                continue

            try:
                prop = self.save(build_property(outcome.customer_id, project))
            except SQLAlchemyError as exc:
                logger.warning(
                    "lead_conversion.property_insert_failed",
                    extra={
                        "event": "lead_conversion.property_insert_failed",
                        "lead_id": lead.id,
                        "project": key,
                        "error": str(exc),
                    },
                )
                outcome.properties.append(ItemOutcome(key=key, status=ItemStatus.FAILED, error=str(exc)))
                continue

            address_to_property[project["address"]] = prop.id
            outcome.properties.append(ItemOutcome(key=key, status=ItemStatus.SUCCEEDED, entity_id=prop.id))
            self.activities.log_activity(
                ActivityType.PROPERTY_CREATED,
                EntityType.PROPERTY,
                prop.id,
                f"Property created at {prop.address}",
                metadata={"lead_id": lead.id, "customer_id": outcome.customer_id},
                created_by=self.actor,
            )
        return address_to_property

    def _relink_proposals(self, lead_id: str, lookup: ProjectLookup, outcome: ConversionOutcome) -> None:
        try:
            proposals = self.proposals.list_for_lead(lead_id)
        except SQLAlchemyError as exc:
            logger.error(
                "lead_conversion.proposal_fetch_failed",
                extra={"event": "lead_conversion.proposal_fetch_failed", "lead_id": lead_id, "error": str(exc)},
            )
            return

        for proposal in proposals:
            proposal_id = proposal.id
            changes: dict[str, Any] = {"customer_id": outcome.customer_id, "lead_id": None}
            refs = candidate_references(proposal.project_address, proposal.property_id)
            ref, property_id = lookup.resolve_first(refs)
            if property_id:
                changes["property_id"] = property_id

            try:
                self.proposals.update_fields(proposal, changes)
            except SQLAlchemyError as exc:
                logger.warning(
                    "lead_conversion.proposal_update_failed",
                    extra={
                        "event": "lead_conversion.proposal_update_failed",
                        "lead_id": lead_id,
                        "proposal_id": proposal_id,
                        "error": str(exc),
                    },
                )
                outcome.proposals.append(ItemOutcome(key=proposal_id, status=ItemStatus.FAILED, error=str(exc)))
                continue

            status = ItemStatus.SUCCEEDED if property_id else ItemStatus.UNMATCHED
            outcome.proposals.append(ItemOutcome(key=proposal_id, status=status, entity_id=property_id))
            self.activities.log_activity(
                ActivityType.PROPOSAL_UPDATED,
                EntityType.PROPOSAL,
                proposal_id,
                "Proposal moved from lead to customer",
                metadata={
                    "customer_id": outcome.customer_id,
                    "property_id": property_id,
                    "matched_by": type(ref).__name__ if ref is not None else None,
                },
                created_by=self.actor,
            )

    def _mark_lead_won(self, lead: Lead, outcome: ConversionOutcome, link: bool) -> None:
        lead_id = lead.id
        try:
            self.leads.mark_won(lead_id, customer_id=outcome.customer_id if link else None)
        except SQLAlchemyError as exc:
            logger.error(
                "lead_conversion.lead_update_failed",
                extra={"event": "lead_conversion.lead_update_failed", "lead_id": lead_id, "error": str(exc)},
            )
            return

        outcome.lead_marked_won = True
        outcome.lead_linked = link
        self.activities.log_activity(
            ActivityType.LEAD_CONVERTED,
            EntityType.LEAD,
            lead_id,
            "Lead converted to customer",
            metadata={"customer_id": outcome.customer_id, "customer_created": outcome.customer_created},
            created_by=self.actor,
        )

    def _log_completed(self, outcome: ConversionOutcome) -> None:
        logger.info(
            "lead_conversion.completed",
            extra={
                "event": "lead_conversion.completed",
                "lead_id": outcome.lead_id,
                "customer_id": outcome.customer_id,
                "customer_created": outcome.customer_created,
                "properties_created": sum(1 for item in outcome.properties if item.status == ItemStatus.SUCCEEDED),
                "proposals_relinked": len(outcome.proposals),
                "failed_items": len(outcome.failed_items),
            },
        )


def convert_lead_to_customer(
    lead_id: str,
    db: Session | None = None,
    policy: ExistingCustomerPolicy | str | None = None,
) -> str:
    """Convert a lead and return the customer id."""
    with LeadConversionService(db=db, policy=policy) as service:
        return service.convert_lead_to_customer(lead_id).customer_id


def convert_lead_for_proposal(
    lead_id: str,
    proposal_id: str,
    db: Session | None = None,
    policy: ExistingCustomerPolicy | str | None = None,
) -> str:
    """Convert a lead and link the given proposal to the resulting customer."""
    with LeadConversionService(db=db, policy=policy) as service:
        return service.convert_lead_for_proposal(lead_id, proposal_id).customer_id
