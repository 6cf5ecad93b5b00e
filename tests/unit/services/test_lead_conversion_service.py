from __future__ import annotations

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.enums import ExistingCustomerPolicy, ItemStatus, LeadStage
from app.core.exceptions import ConversionError, NotFoundError
from app.database.models import Customer, Lead, Property, Proposal
from app.services.activity_service import ActivityService
from app.services.lead_conversion_service import (
    LeadConversionService,
    convert_lead_for_proposal,
    convert_lead_to_customer,
    parse_unit_count,
)
from app.services.lead_service import LeadService
from app.services.proposal_service import ProposalService

PROJECTS = [
    {
        "id": "proj-a",
        "address": "12 Main St",
        "address_line_2": "Apt 4",
        "city": "Brooklyn",
        "state": "NY",
        "zip": "11201",
        "type": "Residential",
        "unit_count": "24",
        "notes": "Side entrance",
    },
    {
        "id": "proj-b",
        "address": "5 Elm St",
        "city": "",
        "state": "NY",
        "type": "Commercial",
    },
]


def _seed_lead(session, **overrides) -> Lead:
    data = {
        "company_name": "Acme Towers",
        "company_address": "1 Broadway",
        "phone": "212-555-0100",
        "email": "office@acme.test",
        "contact_first_name": "Flat",
        "contact_last_name": "Field",
        "city": "New York",
        "state": "NY",
        "zip_code": "10004",
        "contacts": [{"name": "Dana Reyes", "phone": "917-555-0111", "email": "dana@acme.test"}],
        "projects": [dict(project) for project in PROJECTS],
    }
    data.update(overrides)
    return LeadService(db=session).create_lead(data)


def _seed_proposal(session, **fields) -> Proposal:
    return ProposalService(db=session).create_proposal(fields)


def _property_at(session, customer_id: str, address: str) -> Property:
    return (
        session.query(Property)
        .filter(Property.customer_id == customer_id, Property.address == address)
        .one()
    )


def test_conversion_creates_customer_and_links_lead(db_session):
    lead = _seed_lead(db_session)

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    customers = db_session.query(Customer).filter(Customer.converted_from_lead_id == lead.id).all()
    assert len(customers) == 1
    assert customers[0].id == customer_id
    refreshed = db_session.get(Lead, lead.id)
    assert refreshed.stage == LeadStage.WON.value
    assert refreshed.converted_to_customer_id == customer_id


def test_primary_contact_overrides_flat_lead_fields(db_session):
    lead = _seed_lead(db_session)

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    customer = db_session.get(Customer, customer_id)
    assert customer.company_name == "Acme Towers"
    assert customer.contact_first_name == "Dana Reyes"
    assert customer.contact_last_name == "Field"
    assert customer.email == "dana@acme.test"
    assert customer.phone == "917-555-0111"
    assert customer.billing_address == "1 Broadway"
    assert customer.billing_city == "New York"
    assert customer.billing_zip_code == "10004"
    assert customer.is_active is True


def test_flat_fields_used_without_contacts(db_session):
    lead = _seed_lead(db_session, contacts=[], company_name="Solo LLC")

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    customer = db_session.get(Customer, customer_id)
    assert customer.contact_first_name == "Flat"
    assert customer.email == "office@acme.test"
    assert customer.phone == "212-555-0100"


def test_billing_address_falls_back_to_lead_street_address(db_session):
    lead = _seed_lead(db_session, company_name="Walkup Co", company_address=None, address="77 Bergen St")

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    assert db_session.get(Customer, customer_id).billing_address == "77 Bergen St"


def test_properties_created_with_composed_addresses(db_session):
    lead = _seed_lead(db_session)

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    first = _property_at(db_session, customer_id, "12 Main St, Apt 4, Brooklyn, NY, 11201")
    assert first.name == "Residential"
    assert first.unit_count == 24
    assert first.notes == "Side entrance"
    second = _property_at(db_session, customer_id, "5 Elm St, NY")
    assert second.property_type == "Commercial"
    assert second.unit_count is None


def test_project_without_address_is_skipped(db_session):
    projects = [{"address": "", "type": "Vacant lot"}, dict(PROJECTS[1])]
    lead = _seed_lead(db_session, projects=projects)

    with LeadConversionService(db=db_session) as service:
        outcome = service.convert_lead_to_customer(lead.id)

    assert db_session.query(Property).count() == 1
    assert [item.status for item in outcome.properties] == [ItemStatus.SKIPPED, ItemStatus.SUCCEEDED]
    assert outcome.succeeded_fully is True


def test_proposal_matched_by_project_address(db_session):
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, project_address="5 Elm St", property_id="project-0")

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    refreshed = db_session.get(Proposal, proposal.id)
    expected = _property_at(db_session, customer_id, "5 Elm St, NY")
    assert refreshed.property_id == expected.id
    assert refreshed.customer_id == customer_id
    assert refreshed.lead_id is None


def test_proposal_matched_by_legacy_project_index(db_session):
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="project-1")

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    refreshed = db_session.get(Proposal, proposal.id)
    assert refreshed.property_id == _property_at(db_session, customer_id, "5 Elm St, NY").id


def test_proposal_matched_by_bare_project_id(db_session):
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="proj-a")

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    refreshed = db_session.get(Proposal, proposal.id)
    expected = _property_at(db_session, customer_id, "12 Main St, Apt 4, Brooklyn, NY, 11201")
    assert refreshed.property_id == expected.id


def test_unmatched_proposal_keeps_property_id_but_moves_to_customer(db_session):
    lead = _seed_lead(db_session)
    foreign_property = "3f2b8c1e-4d5a-4b6c-8d7e-9f0a1b2c3d4e"
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id=foreign_property)

    with LeadConversionService(db=db_session) as service:
        outcome = service.convert_lead_to_customer(lead.id)

    refreshed = db_session.get(Proposal, proposal.id)
    assert refreshed.property_id == foreign_property
    assert refreshed.customer_id == outcome.customer_id
    assert refreshed.lead_id is None
    assert outcome.proposals[0].status == ItemStatus.UNMATCHED


def test_existing_customer_short_circuits_by_default(db_session):
    existing = Customer(company_name="Acme Towers", is_active=True)
    db_session.add(existing)
    db_session.commit()
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="project-0")

    customer_id = convert_lead_to_customer(lead.id, db=db_session, policy=ExistingCustomerPolicy.STAGE_ONLY)

    assert customer_id == existing.id
    assert db_session.query(Customer).count() == 1
    assert db_session.query(Property).count() == 0
    refreshed = db_session.get(Lead, lead.id)
    assert refreshed.stage == LeadStage.WON.value
    assert refreshed.converted_to_customer_id is None
    assert db_session.get(Proposal, proposal.id).lead_id == lead.id


def test_existing_customer_link_policy_records_back_reference(db_session):
    existing = Customer(company_name="Acme Towers", is_active=True)
    db_session.add(existing)
    db_session.commit()
    lead = _seed_lead(db_session)

    with LeadConversionService(db=db_session, policy="link") as service:
        outcome = service.convert_lead_to_customer(lead.id)

    assert outcome.customer_created is False
    assert outcome.lead_linked is True
    assert db_session.get(Lead, lead.id).converted_to_customer_id == existing.id
    assert db_session.query(Property).count() == 0


def test_existing_customer_full_policy_materializes_projects(db_session):
    existing = Customer(company_name="Acme Towers", is_active=True)
    db_session.add(existing)
    db_session.commit()
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="project-1")

    with LeadConversionService(db=db_session, policy=ExistingCustomerPolicy.FULL) as service:
        outcome = service.convert_lead_to_customer(lead.id)

    assert db_session.query(Customer).count() == 1
    assert db_session.query(Property).filter(Property.customer_id == existing.id).count() == 2
    refreshed = db_session.get(Proposal, proposal.id)
    assert refreshed.customer_id == existing.id
    assert refreshed.property_id == _property_at(db_session, existing.id, "5 Elm St, NY").id
    assert outcome.lead_linked is True


def test_missing_lead_raises_not_found(db_session):
    with pytest.raises(NotFoundError, match="Lead not found"):
        convert_lead_to_customer("does-not-exist", db=db_session)
    assert db_session.query(Customer).count() == 0


def test_customer_insert_failure_is_fatal(db_session):
    lead = _seed_lead(db_session)
    service = LeadConversionService(db=db_session)
    original_save = service.save

    def _failing_save(instance):
        if isinstance(instance, Customer):
            raise SQLAlchemyError("insert rejected")
        return original_save(instance)

    service.save = _failing_save

    with pytest.raises(ConversionError):
        service.convert_lead_to_customer(lead.id)
    assert db_session.get(Lead, lead.id).stage == LeadStage.NEW.value


def test_property_insert_failure_does_not_abort_conversion(db_session):
    lead = _seed_lead(db_session)
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="project-0")
    service = LeadConversionService(db=db_session)
    original_save = service.save

    def _failing_save(instance):
        if isinstance(instance, Property) and instance.property_type == "Residential":
            raise SQLAlchemyError("insert rejected")
        return original_save(instance)

    service.save = _failing_save

    outcome = service.convert_lead_to_customer(lead.id)

    assert [item.status for item in outcome.properties] == [ItemStatus.FAILED, ItemStatus.SUCCEEDED]
    assert outcome.succeeded_fully is False
    assert db_session.query(Property).count() == 1
    refreshed = db_session.get(Proposal, proposal.id)
    assert refreshed.customer_id == outcome.customer_id
    assert refreshed.property_id == "project-0"
    assert db_session.get(Lead, lead.id).stage == LeadStage.WON.value


def test_proposal_update_failure_does_not_block_others(db_session):
    lead = _seed_lead(db_session)
    broken = _seed_proposal(db_session, lead_id=lead.id, property_id="project-0")
    healthy = _seed_proposal(db_session, lead_id=lead.id, property_id="project-1")
    service = LeadConversionService(db=db_session)
    original_update = service.proposals.update_fields

    def _failing_update(proposal, changes):
        if proposal.id == broken.id:
            raise SQLAlchemyError("update rejected")
        return original_update(proposal, changes)

    service.proposals.update_fields = _failing_update

    outcome = service.convert_lead_to_customer(lead.id)

    statuses = {item.key: item.status for item in outcome.proposals}
    assert statuses[broken.id] == ItemStatus.FAILED
    assert statuses[healthy.id] == ItemStatus.SUCCEEDED
    assert db_session.get(Proposal, healthy.id).customer_id == outcome.customer_id
    assert db_session.get(Proposal, broken.id).lead_id == lead.id
    assert outcome.lead_marked_won is True


def test_convert_for_proposal_links_triggering_proposal(db_session):
    lead = _seed_lead(db_session)
    unrelated = _seed_proposal(db_session, title="Walk-in request")

    customer_id = convert_lead_for_proposal(lead.id, unrelated.id, db=db_session)

    refreshed = db_session.get(Proposal, unrelated.id)
    assert refreshed.customer_id == customer_id
    assert refreshed.property_id is None


def test_repeat_conversion_without_company_creates_duplicate_customers(db_session):
    lead = _seed_lead(db_session, company_name=None, projects=[])

    first = convert_lead_to_customer(lead.id, db=db_session)
    second = convert_lead_to_customer(lead.id, db=db_session)

    assert first != second
    assert db_session.query(Customer).filter(Customer.converted_from_lead_id == lead.id).count() == 2
    assert db_session.get(Lead, lead.id).converted_to_customer_id == second


def test_repeat_conversion_with_company_reuses_customer(db_session):
    lead = _seed_lead(db_session, projects=[])

    first = convert_lead_to_customer(lead.id, db=db_session, policy="stage_only")
    second = convert_lead_to_customer(lead.id, db=db_session, policy="stage_only")

    assert first == second
    assert db_session.query(Customer).count() == 1


def test_conversion_writes_activity_log(db_session):
    lead = _seed_lead(db_session)

    customer_id = convert_lead_to_customer(lead.id, db=db_session)

    activities = ActivityService(db=db_session)
    lead_events = [row.activity_type for row in activities.get_entity_activities("lead", lead.id)]
    customer_events = [row.activity_type for row in activities.get_entity_activities("customer", customer_id)]
    assert "lead_converted" in lead_events
    assert "customer_created" in customer_events


@pytest.mark.parametrize(
    ("value", "expected"),
    [("24", 24), ("12 units", 12), (8, 8), ("", None), ("many", None), (None, None)],
)
def test_parse_unit_count(value, expected):
    assert parse_unit_count(value) == expected


def test_non_mapping_project_entry_does_not_break_proposal_relink(db_session):
    lead = _seed_lead(db_session, projects=["junk", {"id": "p1", "address": "1 A St"}])
    proposal = _seed_proposal(db_session, lead_id=lead.id, property_id="p1")

    with LeadConversionService(db=db_session) as service:
        outcome = service.convert_lead_to_customer(lead.id)

    assert [item.status for item in outcome.properties] == [ItemStatus.SKIPPED, ItemStatus.SUCCEEDED]
    assert outcome.proposals[0].status == ItemStatus.SUCCEEDED
    assert db_session.get(Proposal, proposal.id).property_id == outcome.properties[1].entity_id
    assert db_session.get(Lead, lead.id).stage == LeadStage.WON.value
    assert db_session.query(Customer).count() == 1
