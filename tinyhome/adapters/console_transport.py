"""Console transport adapter for dry runs and local demos.

Mental model refresher:
- This is outbound adapter code, a stand-in for the Kafka producer.
- The publisher calls it through the same injected `publish` signature, so it
  does not know which transport is underneath.
"""

from __future__ import annotations

import uuid


def publish_via_console(*, data: bytes, attributes: dict[str, str]) -> str:
    message_id = f"console-{uuid.uuid4()}"
    print("[RECORD]")
    print(f"message_id={message_id}")
    print(f"attributes={attributes}")
    print(f"data={data.decode('utf-8')}")
    return message_id
