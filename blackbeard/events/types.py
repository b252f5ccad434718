"""
Event types understood by the Pirate Metrics API and their field schemas.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Tuple, Type, Union


NUMBER_TYPES: Tuple[Type, ...] = (int, float)
STRING_TYPES: Tuple[Type, ...] = (str,)


class EventType(str, Enum):
    """
    Event types, valued by the API endpoint they are posted to.
    """

    ACQUISITION = "acquisitions"
    ACTIVATION = "activations"
    RETENTION = "retentions"
    REFERRAL = "referrals"
    REVENUE = "revenues"

    @property
    def endpoint(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union[str, "EventType"]) -> "EventType":
        """
        Resolve an event type from its enum member, endpoint or singular name.

        Args:
            value: e.g. ``EventType.REVENUE``, ``"revenues"`` or ``"revenue"``.

        Raises:
            ValueError: If the name matches no event type.
        """
        if isinstance(value, cls):
            return value

        name = str(value).strip().lower()
        for member in cls:
            if name in (member.value, member.name.lower()):
                return member

        raise ValueError(f"Unknown event type: {value!r}")


class EventSchema(NamedTuple):
    required: Mapping[str, Tuple[Type, ...]]
    optional: Mapping[str, Tuple[Type, ...]]
    rejection_message: str


EMAIL_REQUIRED = "At least email is required."

SCHEMAS: Mapping[EventType, EventSchema] = MappingProxyType(
    {
        EventType.ACQUISITION: EventSchema(
            required={"email": STRING_TYPES},
            optional={"level": NUMBER_TYPES, "occurred_at": STRING_TYPES},
            rejection_message=EMAIL_REQUIRED,
        ),
        EventType.ACTIVATION: EventSchema(
            required={"email": STRING_TYPES},
            optional={"occurred_at": STRING_TYPES},
            rejection_message=EMAIL_REQUIRED,
        ),
        EventType.RETENTION: EventSchema(
            required={"email": STRING_TYPES},
            optional={"occurred_at": STRING_TYPES},
            rejection_message=EMAIL_REQUIRED,
        ),
        EventType.REFERRAL: EventSchema(
            required={"customer_email": STRING_TYPES, "referree_email": STRING_TYPES},
            optional={"occurred_at": STRING_TYPES},
            rejection_message="Customer and referree emails are required.",
        ),
        EventType.REVENUE: EventSchema(
            required={"email": STRING_TYPES, "amount_in_cents": NUMBER_TYPES},
            optional={"occurred_at": STRING_TYPES},
            rejection_message="Email and an amount in cents are required.",
        ),
    }
)


def get_schema(event_type: Union[str, EventType]) -> EventSchema:
    return SCHEMAS[EventType.parse(event_type)]
