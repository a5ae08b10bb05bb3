from __future__ import annotations

import unittest
from types import SimpleNamespace
from typing import Any
from unittest import mock

from tinyhome.adapters import kafka_runtime
from tinyhome.errors import PublishFailed


class FakeKafkaError(Exception):
    pass


class FakeFuture:
    def __init__(self, metadata: Any = None, error: Exception | None = None) -> None:
        self.metadata = metadata
        self.error = error

    def get(self, timeout: float) -> Any:
        if self.error is not None:
            raise self.error
        return self.metadata


class FakeProducer:
    instances: list["FakeProducer"] = []
    next_future: FakeFuture = FakeFuture()

    def __init__(self, **config: Any) -> None:
        self.config = config
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        FakeProducer.instances.append(self)

    def send(self, topic: str, **kwargs: Any) -> FakeFuture:
        self.sent.append({"topic": topic, **kwargs})
        return FakeProducer.next_future

    def flush(self, timeout: float) -> None:
        return None

    def close(self) -> None:
        self.closed = True


def fake_kafka_modules() -> tuple[Any, Any, Any, Any, Any]:
    return object, FakeProducer, object, object, FakeKafkaError


class PublishInstructionsRecordTests(unittest.TestCase):
    def setUp(self) -> None:
        FakeProducer.instances = []
        patcher = mock.patch.object(kafka_runtime, "_import_kafka_python", fake_kafka_modules)
        patcher.start()
        self.addCleanup(patcher.stop)

    @mock.patch.dict("os.environ", {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092"}, clear=True)
    def test_publishes_with_headers_and_returns_message_id(self) -> None:
        FakeProducer.next_future = FakeFuture(
            SimpleNamespace(topic="tiny-home-api-0.0.1", partition=2, offset=41)
        )

        message_id = kafka_runtime.publish_instructions_record(
            data=b'{"tenantName":"team-alpha"}',
            attributes={"groupsCreated": "false", "tenantName": "team-alpha"},
        )

        self.assertEqual(message_id, "tiny-home-api-0.0.1:2:41")
        producer = FakeProducer.instances[0]
        self.assertTrue(producer.closed)
        self.assertEqual(producer.config["bootstrap_servers"], ["localhost:9092"])
        sent = producer.sent[0]
        self.assertEqual(sent["topic"], "tiny-home-api-0.0.1")
        self.assertEqual(sent["value"], b'{"tenantName":"team-alpha"}')
        self.assertEqual(sent["key"], b"team-alpha")
        self.assertEqual(
            sent["headers"],
            [("groupsCreated", b"false"), ("tenantName", b"team-alpha")],
        )

    @mock.patch.dict(
        "os.environ",
        {
            "KAFKA_BOOTSTRAP_SERVERS": "localhost:9092",
            "KAFKA_TOPIC_TINY_HOME_INSTRUCTIONS": "tiny-home-api-0.0.2",
        },
        clear=True,
    )
    def test_topic_comes_from_env_unless_overridden(self) -> None:
        FakeProducer.next_future = FakeFuture(SimpleNamespace(topic="x", partition=0, offset=0))

        kafka_runtime.publish_instructions_record(data=b"{}", attributes={})
        kafka_runtime.publish_instructions_record(data=b"{}", attributes={}, topic="override")

        self.assertEqual(FakeProducer.instances[0].sent[0]["topic"], "tiny-home-api-0.0.2")
        self.assertEqual(FakeProducer.instances[1].sent[0]["topic"], "override")
        self.assertIsNone(FakeProducer.instances[0].sent[0]["key"])

    @mock.patch.dict("os.environ", {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092"}, clear=True)
    def test_kafka_errors_are_wrapped(self) -> None:
        FakeProducer.next_future = FakeFuture(error=FakeKafkaError("timed out"))

        with self.assertRaises(PublishFailed) as ctx:
            kafka_runtime.publish_instructions_record(data=b"{}", attributes={})

        self.assertIn("timed out", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, FakeKafkaError)
        self.assertTrue(FakeProducer.instances[0].closed)

    @mock.patch.dict("os.environ", {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092"}, clear=True)
    def test_producer_construction_errors_are_wrapped(self) -> None:
        class UnreachableProducer(FakeProducer):
            def __init__(self, **config: Any) -> None:
                raise FakeKafkaError("NoBrokersAvailable")

        def unreachable_kafka_modules() -> tuple[Any, Any, Any, Any, Any]:
            return object, UnreachableProducer, object, object, FakeKafkaError

        with mock.patch.object(kafka_runtime, "_import_kafka_python", unreachable_kafka_modules):
            with self.assertRaises(PublishFailed) as ctx:
                kafka_runtime.publish_instructions_record(data=b"{}", attributes={})

        self.assertIn("NoBrokersAvailable", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, FakeKafkaError)
        self.assertEqual(FakeProducer.instances, [])

    @mock.patch.dict("os.environ", {}, clear=True)
    def test_requires_bootstrap_servers(self) -> None:
        with self.assertRaises(RuntimeError):
            kafka_runtime.publish_instructions_record(data=b"{}", attributes={})


class KafkaRuntimeHelperTests(unittest.TestCase):
    def test_decode_headers_round_trips_encoded_attributes(self) -> None:
        attributes = {"deliveredFrom": "galaxy", "tenantName": "équipe"}
        encoded = kafka_runtime._encode_headers(attributes)

        self.assertEqual(kafka_runtime._decode_headers(encoded), attributes)

    def test_decode_headers_handles_missing_values(self) -> None:
        self.assertEqual(kafka_runtime._decode_headers(None), {})
        self.assertEqual(kafka_runtime._decode_headers([("fluxCreated", None)]), {"fluxCreated": ""})

    def test_deserialize_json_object_accepts_bytes(self) -> None:
        payload = kafka_runtime._deserialize_json_object(b'{"tenantName":"team-alpha"}')
        self.assertEqual(payload["tenantName"], "team-alpha")

    def test_deserialize_json_object_rejects_non_object_json(self) -> None:
        with self.assertRaises(ValueError):
            kafka_runtime._deserialize_json_object(b'["not","an","object"]')

    def test_bootstrap_servers_from_env_parses_csv(self) -> None:
        env = {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092, kafka:29092 "}
        with mock.patch.dict("os.environ", env, clear=True):
            servers = kafka_runtime._bootstrap_servers_from_env()
        self.assertEqual(servers, ["localhost:9092", "kafka:29092"])

    def test_topic_from_env_defaults(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            self.assertEqual(kafka_runtime._topic_from_env(), "tiny-home-api-0.0.1")

    def test_poll_timeout_must_be_positive(self) -> None:
        with mock.patch.dict("os.environ", {"KAFKA_POLL_TIMEOUT_SECONDS": "0"}, clear=True):
            with self.assertRaises(RuntimeError):
                kafka_runtime._poll_timeout_ms_from_env()

    def test_env_bool_rejects_unknown_values(self) -> None:
        with mock.patch.dict("os.environ", {"KAFKA_DLQ_ENABLED": "maybe"}, clear=True):
            with self.assertRaises(RuntimeError):
                kafka_runtime._env_bool("KAFKA_DLQ_ENABLED", default=True)

    def test_offset_and_metadata_falls_back_to_two_arg_signature(self) -> None:
        calls: list[tuple[int, str]] = []

        def factory(offset: int, metadata: str) -> tuple[int, str]:
            calls.append((offset, metadata))
            return (offset, metadata)

        built = kafka_runtime._offset_and_metadata(factory, 42)
        self.assertEqual(built, (42, ""))
        self.assertEqual(calls, [(42, "")])

    def test_build_dlq_payload_includes_source_metadata_and_tenant(self) -> None:
        dlq_payload = kafka_runtime._build_dlq_payload(
            source_topic="tiny-home-api-0.0.1",
            source_partition=0,
            source_offset=42,
            source_headers={"groupsCreated": "maybe"},
            source_payload={"tenantName": "team-alpha"},
            failure_reason="invalid_attributes: bad flag",
        )

        self.assertEqual(dlq_payload["event_type"], "tiny-home-api-0.0.1.dlq")
        self.assertEqual(dlq_payload["failure_reason"], "invalid_attributes: bad flag")
        self.assertEqual(dlq_payload["source"]["offset"], 42)
        self.assertEqual(dlq_payload["attributes"], {"groupsCreated": "maybe"})
        self.assertEqual(dlq_payload["tenant_name"], "team-alpha")
        self.assertIn("failed_at", dlq_payload)

    def test_build_dlq_payload_keeps_undecodable_bytes(self) -> None:
        dlq_payload = kafka_runtime._build_dlq_payload(
            source_topic="tiny-home-api-0.0.1",
            source_partition=0,
            source_offset=43,
            source_headers=None,
            source_payload=b"\xffnot-json",
            failure_reason="decode_failed",
        )

        self.assertEqual(dlq_payload["payload"], "\ufffdnot-json")
        self.assertEqual(dlq_payload["attributes"], {})
        self.assertNotIn("tenant_name", dlq_payload)


if __name__ == "__main__":
    unittest.main()
