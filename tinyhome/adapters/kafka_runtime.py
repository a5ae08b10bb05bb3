"""Kafka transport adapters for publishing and consuming tiny-home instructions.

Mental model refresher:
- This module is transport glue to Kafka itself.
- Message attributes travel as record headers (UTF-8 values); the tenant name
  is the record key so one tenant's stages land on one partition.
- On the consuming side it maps Kafka records into the consumer-handler flow.
- Routing and payload rules still live in the domain layer.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
import os
from typing import Any, Iterable, Mapping

from ..errors import PublishFailed
from ..types import AttributeMap, DeliverFn
from .consumer_handler import handle_record, record_owner

DEFAULT_TOPIC = "tiny-home-api-0.0.1"


def publish_instructions_record(
    *,
    data: bytes,
    attributes: Mapping[str, str],
    topic: str | None = None,
) -> str:
    """Publish one serialized instructions record and return its message id.

    Blocks until the broker acknowledges the record. The id has the form
    `<topic>:<partition>:<offset>`.
    """
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata, KafkaError = (
        _import_kafka_python()
    )
    bootstrap_servers = _bootstrap_servers_from_env()
    topic_name = topic or _topic_from_env()
    send_timeout_seconds = float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))

    producer = None
    try:
        producer = KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
        )
        future = producer.send(
            topic_name,
            value=data,
            key=_record_key(attributes),
            headers=_encode_headers(attributes),
        )
        metadata = future.get(timeout=send_timeout_seconds)
        producer.flush(timeout=send_timeout_seconds)
    except KafkaError as exc:
        raise PublishFailed(f"Kafka publish to {topic_name} failed: {exc}") from exc
    finally:
        if producer is not None:
            producer.close()

    return _message_id(metadata.topic, metadata.partition, metadata.offset)


def run_channel_worker_forever(channel: str, deliver: DeliverFn | None = None) -> int:
    """Run the Kafka consumer loop for one channel subscription.

    Records for other channels are committed and skipped. Records that cannot
    be handled go to the DLQ topic and are committed once the DLQ write is
    acknowledged; otherwise the offset is left uncommitted.
    """
    KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata, _KafkaError = (
        _import_kafka_python()
    )
    bootstrap_servers = _bootstrap_servers_from_env()
    topic_name = _topic_from_env()
    dlq_enabled = _env_bool("KAFKA_DLQ_ENABLED", default=True)
    dlq_topic = os.getenv("KAFKA_TOPIC_TINY_HOME_INSTRUCTIONS_DLQ", f"{topic_name}.dlq")
    group_id = os.getenv("KAFKA_GROUP_ID", f"tiny-home-{channel}")
    auto_offset_reset = os.getenv("KAFKA_AUTO_OFFSET_RESET", "earliest")
    poll_timeout_ms = _poll_timeout_ms_from_env()
    max_records = int(os.getenv("KAFKA_MAX_RECORDS_PER_POLL", "50"))
    dlq_send_timeout_seconds = float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))
    deliver_fn = deliver or _print_delivery

    consumer = KafkaConsumer(
        topic_name,
        bootstrap_servers=bootstrap_servers,
        group_id=group_id,
        enable_auto_commit=False,
        auto_offset_reset=auto_offset_reset,
    )
    dlq_producer = (
        KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            value_serializer=_serialize_json_object,
            acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
        )
        if dlq_enabled
        else None
    )
    print(
        f"[WORKER START] topic={topic_name} channel={channel} group_id={group_id} "
        f"dlq_enabled={dlq_enabled} dlq_topic={dlq_topic}"
    )

    try:
        while True:
            batches = consumer.poll(timeout_ms=poll_timeout_ms, max_records=max_records)
            if not batches:
                continue

            for _topic_partition, records in batches.items():
                for message in records:
                    message_topic = message.topic
                    message_partition = int(message.partition)
                    message_offset = int(message.offset)

                    def commit_current_offset() -> None:
                        offsets = {
                            TopicPartition(message_topic, message_partition): _offset_and_metadata(
                                OffsetAndMetadata, message_offset + 1
                            )
                        }
                        consumer.commit(offsets=offsets)
                        print(
                            "[COMMIT] "
                            f"topic={message_topic} partition={message_partition} "
                            f"offset={message_offset}"
                        )

                    def publish_to_dlq(*, reason: str, source: Mapping[str, Any]) -> bool:
                        if dlq_producer is None:
                            return False

                        dlq_payload = _build_dlq_payload(
                            source_topic=message_topic,
                            source_partition=message_partition,
                            source_offset=message_offset,
                            source_headers=source.get("headers"),
                            source_payload=source.get("value"),
                            failure_reason=reason,
                        )
                        try:
                            future = dlq_producer.send(dlq_topic, value=dlq_payload)
                            metadata = future.get(timeout=dlq_send_timeout_seconds)
                        except Exception as exc:
                            print(
                                "[DLQ ERROR] "
                                f"source_topic={message_topic} source_partition={message_partition} "
                                f"source_offset={message_offset} reason={reason} error={exc}"
                            )
                            return False

                        print(
                            "[DLQ] "
                            f"source_topic={message_topic} source_partition={message_partition} "
                            f"source_offset={message_offset} dlq_topic={metadata.topic} "
                            f"dlq_partition={metadata.partition} dlq_offset={metadata.offset} "
                            f"reason={reason}"
                        )
                        return True

                    def reject_callback(_record: Mapping[str, Any], reason: str) -> None:
                        if publish_to_dlq(reason=reason, source=_record):
                            commit_current_offset()
                        else:
                            print(
                                f"[NO-COMMIT] topic={message_topic} partition={message_partition} "
                                f"offset={message_offset} reason={reason}"
                            )

                    headers = _decode_headers(message.headers)
                    try:
                        payload = _deserialize_json_object(message.value)
                    except Exception as exc:
                        reason = f"decode_failed: {exc}"
                        if record_owner({"headers": headers}) != channel:
                            commit_current_offset()
                            print(
                                f"[SKIP] topic={message_topic} partition={message_partition} "
                                f"offset={message_offset} reason={reason}"
                            )
                            continue
                        reject_callback({"headers": headers, "value": message.value}, reason)
                        continue

                    internal_record = {
                        "topic": message_topic,
                        "partition": message_partition,
                        "offset": message_offset,
                        "headers": headers,
                        "value": payload,
                    }

                    def commit_callback(_record: Mapping[str, Any]) -> None:
                        _ = _record
                        commit_current_offset()

                    result = handle_record(
                        internal_record,
                        channel=channel,
                        deliver=deliver_fn,
                        commit=commit_callback,
                        reject=reject_callback,
                    )
                    print(
                        f"[RESULT] topic={message_topic} partition={message_partition} "
                        f"offset={message_offset} status={result['status']} "
                        f"channel={result['channel']} error={result['error']}"
                    )
    except KeyboardInterrupt:
        print("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception as exc:
        print(f"[WORKER ERROR] {exc}")
        return 1
    finally:
        try:
            consumer.close()
        except Exception as exc:
            print(f"[WORKER ERROR] consumer close failed: {exc}")
        if dlq_producer is not None:
            try:
                dlq_producer.flush(timeout=dlq_send_timeout_seconds)
                dlq_producer.close()
            except Exception as exc:
                print(f"[WORKER ERROR] dlq producer close failed: {exc}")


def _import_kafka_python() -> tuple[Any, Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.errors import KafkaError
        from kafka.structs import OffsetAndMetadata
    except Exception as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata, KafkaError


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()


def _bootstrap_servers_from_env() -> list[str]:
    raw = _required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = [item.strip() for item in raw.split(",") if item.strip()]
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _topic_from_env() -> str:
    topic = os.getenv("KAFKA_TOPIC_TINY_HOME_INSTRUCTIONS", DEFAULT_TOPIC).strip()
    if not topic:
        raise RuntimeError("KAFKA_TOPIC_TINY_HOME_INSTRUCTIONS must not be empty")
    return topic


def _poll_timeout_ms_from_env() -> int:
    timeout_seconds = float(os.getenv("KAFKA_POLL_TIMEOUT_SECONDS", "1.0"))
    timeout_ms = int(timeout_seconds * 1000)
    if timeout_ms <= 0:
        raise RuntimeError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms


def _message_id(topic: str, partition: int, offset: int) -> str:
    return f"{topic}:{partition}:{offset}"


def _record_key(attributes: Mapping[str, str]) -> bytes | None:
    tenant_name = attributes.get("tenantName")
    return tenant_name.encode("utf-8") if tenant_name else None


def _encode_headers(attributes: Mapping[str, str]) -> list[tuple[str, bytes]]:
    return [(key, value.encode("utf-8")) for key, value in attributes.items()]


def _decode_headers(headers: Iterable[tuple[str, bytes | None]] | None) -> AttributeMap:
    decoded: AttributeMap = {}
    for key, value in headers or ():
        if value is None:
            decoded[key] = ""
        else:
            decoded[key] = value.decode("utf-8", errors="replace")
    return decoded


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)

    if isinstance(raw, bytes):
        text = raw.decode("utf-8")
    elif isinstance(raw, str):
        text = raw
    else:
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _build_dlq_payload(
    *,
    source_topic: str,
    source_partition: int,
    source_offset: int,
    source_headers: Any,
    source_payload: Any,
    failure_reason: str,
) -> dict[str, Any]:
    payload = {
        "event_type": f"{source_topic}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": failure_reason,
        "source": {
            "topic": source_topic,
            "partition": source_partition,
            "offset": source_offset,
        },
        "attributes": _to_json_compatible(source_headers or {}),
        "payload": _to_json_compatible(source_payload),
    }

    if isinstance(source_payload, Mapping):
        tenant_name = source_payload.get("tenantName")
        if isinstance(tenant_name, str) and tenant_name.strip():
            payload["tenant_name"] = tenant_name

    return payload


def _to_json_compatible(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json_compatible(item) for item in value]
    return repr(value)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")


def _print_delivery(*, instructions: Any, attributes: Any) -> None:
    """Default delivery hook: log the instructions the stage would act on."""
    print(
        f"[DELIVER] tenant_name={instructions.tenant_name} "
        f"environment={instructions.environment} "
        f"delivered_from={attributes.delivered_from}"
    )


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        try:
            return offset_and_metadata_type(offset, "", None)
        except TypeError:
            return offset_and_metadata_type(offset, "")
