"""Validate and publish tiny-home provisioning instructions.

Module layout by abstraction layer:
- domain: routing-attribute and tenant-name rules
- application: the publish use-case
- adapters: wire mapping, Kafka and console transports, subscription handler
"""

from .adapters import (
    build_attribute_map,
    handle_record,
    handle_records,
    parse_instructions_payload,
    parse_message_attributes,
    publish_instructions_record,
    publish_via_console,
    run_channel_worker_forever,
    serialize_instructions,
)
from .application import publish_tiny_home_instructions
from .domain import (
    Channel,
    MessageAttributes,
    NamespaceQuota,
    ResourceQuantities,
    TinyHomeInstructions,
    resolve_channel,
    validate_instructions,
    validate_tenant_name,
)
from .errors import (
    FieldTooLong,
    InvalidAttributeValue,
    InvalidCase,
    PublishFailed,
    TinyHomeError,
    UnknownChannelCombination,
    UnsupportedCharacter,
    ValidationError,
)

__all__ = [
    "Channel",
    "FieldTooLong",
    "InvalidAttributeValue",
    "InvalidCase",
    "MessageAttributes",
    "NamespaceQuota",
    "PublishFailed",
    "ResourceQuantities",
    "TinyHomeError",
    "TinyHomeInstructions",
    "UnknownChannelCombination",
    "UnsupportedCharacter",
    "ValidationError",
    "build_attribute_map",
    "handle_record",
    "handle_records",
    "parse_instructions_payload",
    "parse_message_attributes",
    "publish_instructions_record",
    "publish_tiny_home_instructions",
    "publish_via_console",
    "resolve_channel",
    "run_channel_worker_forever",
    "serialize_instructions",
    "validate_instructions",
    "validate_tenant_name",
]
