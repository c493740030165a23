"""
Container environment resolution for the edge gateway.
"""

from .providers import ProviderSlot, SLOT_RULES, SlotRule, select_provider_slot
from .resolver import gateway_slot, normalized_gateway_url, resolve_environment

__all__ = [
    "ProviderSlot",
    "SLOT_RULES",
    "SlotRule",
    "gateway_slot",
    "normalized_gateway_url",
    "resolve_environment",
    "select_provider_slot",
]
