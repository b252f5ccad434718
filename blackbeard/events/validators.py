"""
Per event type validation.

Validators are pure: they return a new, sanitized dict or ``None`` when a
required field is missing or has the wrong type. Optional fields with the
wrong type are dropped. Values are never coerced.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, Union

from .types import EventType, get_schema


Record = Dict[str, Any]


def matches_type(value: Any, accepted: Tuple[Type, ...]) -> bool:
    """
    Exact primitive type check, so ``True`` is not a number and ``"1"`` is not
    an int. NaN and infinities have no JSON form and are not numbers either.
    """
    if type(value) is float and not math.isfinite(value):
        return False

    return type(value) in accepted


def validate_event(
    event_type: Union[str, EventType], data: Any
) -> Optional[Record]:
    """
    Validate and sanitize a single event record.

    Args:
        event_type: The event type the record belongs to.
        data: The raw record.

    Returns:
        Optional[Record]: A sanitized copy of the record, or None if it was rejected.
    """
    schema = get_schema(event_type)

    if not isinstance(data, Mapping):
        return None

    for field, accepted in schema.required.items():
        if field not in data or not matches_type(data[field], accepted):
            return None

    record = dict(data)

    for field, accepted in schema.optional.items():
        if field in record and not matches_type(record[field], accepted):
            del record[field]

    return record


def validate_batch(
    event_type: Union[str, EventType], records: Iterable[Any]
) -> Tuple[Optional[List[Record]], Optional[int]]:
    """
    Validate records in order, stopping at the first rejected one.

    Returns:
        A ``(validated, None)`` pair when every record passed, otherwise
        ``(None, index)`` with the position of the first rejected record.
    """
    validated: List[Record] = []

    for index, data in enumerate(records):
        record = validate_event(event_type, data)
        if record is None:
            return None, index
        validated.append(record)

    return validated, None


def validate_acquisition(data: Mapping[str, Any]) -> Optional[Record]:
    return validate_event(EventType.ACQUISITION, data)


def validate_activation(data: Mapping[str, Any]) -> Optional[Record]:
    return validate_event(EventType.ACTIVATION, data)


def validate_retention(data: Mapping[str, Any]) -> Optional[Record]:
    return validate_event(EventType.RETENTION, data)


def validate_referral(data: Mapping[str, Any]) -> Optional[Record]:
    return validate_event(EventType.REFERRAL, data)


def validate_revenue(data: Mapping[str, Any]) -> Optional[Record]:
    return validate_event(EventType.REVENUE, data)
