"""Application orchestration for publishing tiny-home instructions.

Mental model refresher:
- Application layer coordinates the use-case across domain modules.
- Flow:
  attributes -> router -> tenant rules -> serialize -> injected publish fn
- Validation failures propagate unchanged and the transport is never called.
- The transport is injected so the same flow runs against Kafka or the
  console adapter.
"""

from __future__ import annotations

from ..adapters.payload import build_attribute_map, serialize_instructions
from ..domain.instructions import MessageAttributes, TinyHomeInstructions
from ..domain.routing import delivery_text, resolve_channel
from ..domain.tenant import validate_instructions
from ..types import PublishFn, PublishResult


def publish_tiny_home_instructions(
    instructions: TinyHomeInstructions,
    attributes: MessageAttributes,
    *,
    publish: PublishFn,
) -> PublishResult:
    """Validate, then hand the serialized instructions to `publish`.

    `publish` is called as `publish(data=bytes, attributes=dict[str, str])` and
    must return the transport's message id.
    """
    channel = resolve_channel(attributes)
    validate_instructions(instructions)

    data = serialize_instructions(instructions)
    attribute_map = build_attribute_map(instructions, attributes)
    message_id = publish(data=data, attributes=attribute_map)

    print(
        f"[PUBLISHED] tenant_name={instructions.tenant_name} "
        f"message_id={message_id} attributes={attribute_map}"
    )
    print(f"[ROUTE] {delivery_text(channel)}")

    return {
        "message_id": message_id,
        "channel": channel,
        "tenant_name": instructions.tenant_name,
        "attributes": attribute_map,
    }
