# -*- coding: utf-8 -*-
"""Pirate Metrics client for Python."""

__author__ = """Blackbeard contributors"""

from blackbeard.client import PirateMetricsClient
from blackbeard.config import ClientSettings, load_settings
from blackbeard.events import (
    EventType,
    validate_acquisition,
    validate_activation,
    validate_event,
    validate_referral,
    validate_retention,
    validate_revenue,
)

__all__ = [
    "PirateMetricsClient",
    "ClientSettings",
    "load_settings",
    "EventType",
    "validate_acquisition",
    "validate_activation",
    "validate_event",
    "validate_referral",
    "validate_retention",
    "validate_revenue",
]
