from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, JSON, String, Text

from .db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Lead(Base):
    __tablename__ = "leads"
    __table_args__ = (
        Index("idx_leads_stage", "stage"),
        Index("idx_leads_company_name", "company_name"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    company_name = Column(String)
    company_address = Column(String)
    address = Column(String)
    phone = Column(String)
    email = Column(String)
    website = Column(String)
    contact_first_name = Column(String)
    contact_last_name = Column(String)
    city = Column(String)
    state = Column(String)
    zip_code = Column(String)
    contacts = Column(JSON, default=list)
    projects = Column(JSON, default=list)
    stage = Column(String, default="new", nullable=False)
    source = Column(String, default="manual")
    notes = Column(Text)
    converted_to_customer_id = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index("idx_customers_company_name", "company_name"),
        Index("idx_customers_converted_from_lead", "converted_from_lead_id"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    company_name = Column(String)
    contact_first_name = Column(String, default="")
    contact_last_name = Column(String, default="")
    email = Column(String)
    phone = Column(String)
    billing_address = Column(String)
    billing_city = Column(String)
    billing_state = Column(String)
    billing_zip_code = Column(String)
    converted_from_lead_id = Column(String(36))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (Index("idx_properties_customer", "customer_id"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    customer_id = Column(String(36), nullable=False)
    name = Column(String, nullable=False, default="Property")
    address = Column(String, nullable=False)
    property_type = Column(String)
    unit_count = Column(Integer)
    notes = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Proposal(Base):
    __tablename__ = "proposals"
    __table_args__ = (
        Index("idx_proposals_lead", "lead_id"),
        Index("idx_proposals_customer", "customer_id"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    lead_id = Column(String(36))
    customer_id = Column(String(36))
    # Free text: a property id, a legacy "project-<index>" token or a lead project id.
    property_id = Column(String)
    project_address = Column(String)
    title = Column(String)
    status = Column(String, default="draft")
    total_amount = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ActivityLog(Base):
    __tablename__ = "activity_logs"
    __table_args__ = (Index("idx_activity_logs_entity", "entity_type", "entity_id"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    activity_type = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String(36), nullable=False)
    description = Column(Text, nullable=False)
    details = Column("metadata", JSON)
    created_by = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
