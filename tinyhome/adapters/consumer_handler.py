"""Consumer-handler adapter functions (subscription filter without Kafka).

Mental model refresher:
- Each downstream stage subscribes to one channel of the shared topic.
- Real Kafka code calls this after polling a record.
- Flow:
  record headers -> router -> channel filter -> payload parse -> tenant rules
  -> deliver -> commit/no-commit decision
- Records addressed to another channel are committed and skipped, which is
  what a per-subscription attribute filter would do.
- Records no channel can route are rejected by the `createGroups` worker only;
  every other worker skips them.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..domain.instructions import MessageAttributes
from ..domain.routing import Channel, resolve_channel
from ..domain.tenant import validate_instructions
from ..types import DeliverFn, HandleResult
from .payload import parse_instructions_payload, parse_message_attributes

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]

# Records no channel can route are rejected by this subscription alone.
UNROUTABLE_OWNER = Channel.CREATE_GROUPS.value


def handle_record(
    record: Record,
    *,
    channel: str,
    deliver: DeliverFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> HandleResult:
    """Handle one incoming record for the `channel` subscription."""
    try:
        attributes = record_attributes(record)
        record_channel = resolve_channel(attributes)
    except ValueError as exc:
        error = f"invalid_attributes: {exc}"
        if channel != UNROUTABLE_OWNER:
            commit(record)
            return _result(record, "skipped", channel=None, should_commit=True, error=error)
        return _rejected(record, reject, error, channel=None)

    if record_channel != channel:
        commit(record)
        return _result(record, "skipped", channel=record_channel, should_commit=True)

    try:
        payload = record.get("value")
        if not isinstance(payload, Mapping):
            raise ValueError("record.value must be a dict payload")
        instructions = parse_instructions_payload(payload)
        validate_instructions(instructions)
    except ValueError as exc:
        return _rejected(record, reject, f"parse_failed: {exc}", channel=record_channel)

    try:
        deliver(instructions=instructions, attributes=attributes)
    except Exception as exc:
        return _rejected(record, reject, f"deliver_failed: {exc}", channel=record_channel)

    commit(record)
    return _result(record, "delivered_and_committed", channel=record_channel, should_commit=True)


def handle_records(
    records: Sequence[Record],
    *,
    channel: str,
    deliver: DeliverFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[HandleResult]:
    """Handle a batch of records sequentially using `handle_record`."""
    results: list[HandleResult] = []
    for record in records:
        result = handle_record(
            record,
            channel=channel,
            deliver=deliver,
            commit=commit,
            reject=reject,
        )
        results.append(result)
    return results


def record_owner(record: Record) -> str:
    """Return the channel responsible for `record`, even when it cannot be routed."""
    try:
        return resolve_channel(record_attributes(record))
    except ValueError:
        return UNROUTABLE_OWNER


def record_attributes(record: Record) -> MessageAttributes:
    headers = record.get("headers") or {}
    if not isinstance(headers, Mapping):
        raise ValueError("record.headers must be a dict of attributes")
    return parse_message_attributes(headers)


def _rejected(
    record: Record,
    reject: RejectFn | None,
    error: str,
    *,
    channel: str | None,
) -> HandleResult:
    if reject is not None:
        reject(record, error)
    return _result(record, "rejected", channel=channel, should_commit=False, error=error)


def _result(
    record: Record,
    status: str,
    *,
    channel: str | None,
    should_commit: bool,
    error: str | None = None,
) -> HandleResult:
    return {
        "status": status,
        "record_meta": _record_meta(record),
        "channel": channel,
        "should_commit": should_commit,
        "error": error,
    }


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
