"""Enums for the field-services backend.

Values are the lowercase snake_case strings stored in the database and
exchanged with the browser clients.
"""

from enum import Enum


class LeadStage(Enum):
    """Stage of a lead in the sales pipeline."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL_SENT = "proposal_sent"
    WON = "won"
    LOST = "lost"


class EntityType(Enum):
    LEAD = "lead"
    CUSTOMER = "customer"
    PROPERTY = "property"
    PROPOSAL = "proposal"


class ActivityType(Enum):
    """Activity log event types."""

    PROPERTY_CREATED = "property_created"
    CUSTOMER_CREATED = "customer_created"
    LEAD_CREATED = "lead_created"
    LEAD_CONVERTED = "lead_converted"
    PROPOSAL_CREATED = "proposal_created"
    PROPOSAL_UPDATED = "proposal_updated"


class ExistingCustomerPolicy(Enum):
    """What conversion does when a customer with the lead's company name exists.

    STAGE_ONLY marks the lead won and nothing else. LINK also records the
    lead -> customer back-reference. FULL additionally creates properties and
    relinks proposals against the existing customer.
    """

    STAGE_ONLY = "stage_only"
    LINK = "link"
    FULL = "full"


class ItemStatus(Enum):
    """Per-item result of a best-effort conversion step."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    UNMATCHED = "unmatched"


class CollectionType(Enum):
    GARBAGE = "garbage"
    RECYCLING = "recycling"
    ORGANICS = "organics"
    BULK = "bulk"

