"""Adapter layer: wire mapping, transports and the subscription handler."""

from .console_transport import publish_via_console
from .consumer_handler import handle_record, handle_records
from .kafka_runtime import publish_instructions_record, run_channel_worker_forever
from .payload import (
    build_attribute_map,
    parse_instructions_payload,
    parse_message_attributes,
    serialize_instructions,
)

__all__ = [
    "build_attribute_map",
    "handle_record",
    "handle_records",
    "parse_instructions_payload",
    "parse_message_attributes",
    "publish_instructions_record",
    "publish_via_console",
    "run_channel_worker_forever",
    "serialize_instructions",
]
