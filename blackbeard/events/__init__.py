from .types import SCHEMAS, EventSchema, EventType, get_schema
from .validators import (
    Record,
    validate_acquisition,
    validate_activation,
    validate_batch,
    validate_event,
    validate_referral,
    validate_retention,
    validate_revenue,
)

__all__ = [
    "SCHEMAS",
    "EventSchema",
    "EventType",
    "get_schema",
    "Record",
    "validate_acquisition",
    "validate_activation",
    "validate_batch",
    "validate_event",
    "validate_referral",
    "validate_retention",
    "validate_revenue",
]
