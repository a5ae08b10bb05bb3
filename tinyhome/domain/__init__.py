"""Domain layer: routing and payload rules (pure, no I/O)."""

from .instructions import (
    MessageAttributes,
    NamespaceQuota,
    ResourceQuantities,
    TinyHomeInstructions,
)
from .routing import CHANNEL_BY_FLAGS, Channel, delivery_text, parse_flag, resolve_channel
from .tenant import validate_instructions, validate_tenant_name

__all__ = [
    "CHANNEL_BY_FLAGS",
    "Channel",
    "MessageAttributes",
    "NamespaceQuota",
    "ResourceQuantities",
    "TinyHomeInstructions",
    "delivery_text",
    "parse_flag",
    "resolve_channel",
    "validate_instructions",
    "validate_tenant_name",
]
