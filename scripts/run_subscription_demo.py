#!/usr/bin/env python3
"""Run the channel subscription flow without Kafka."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tinyhome.adapters.consumer_handler import handle_records  # noqa: E402
from tinyhome.domain.routing import Channel  # noqa: E402


def main() -> int:
    records = sample_records()
    committed_offsets: list[int] = []
    rejected_offsets: list[tuple[int, str]] = []

    def commit(record: dict[str, Any]) -> None:
        offset = int(record.get("offset", -1))
        committed_offsets.append(offset)
        print(f"[COMMIT] offset={offset}")

    def reject(record: dict[str, Any], reason: str) -> None:
        offset = int(record.get("offset", -1))
        rejected_offsets.append((offset, reason))
        print(f"[NO-COMMIT] offset={offset} reason={reason}")

    def deliver(*, instructions: Any, attributes: Any) -> None:
        print(
            f"[DELIVER] tenant_name={instructions.tenant_name} "
            f"delivered_from={attributes.delivered_from}"
        )

    results = handle_records(
        records,
        channel=Channel.CREATE_TENANT.value,
        deliver=deliver,
        commit=commit,
        reject=reject,
    )

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"channel={result['channel']} error={result['error']}"
        )

    print("")
    print("[OFFSETS]")
    print(f"committed={committed_offsets}")
    print(f"rejected={rejected_offsets}")
    return 0


def make_headers(groups: str, workspace: str, tenant: str, flux: str) -> dict[str, str]:
    return {
        "groupsCreated": groups,
        "workspaceCreated": workspace,
        "tenantCreated": tenant,
        "fluxCreated": flux,
        "deliveredFrom": "galaxy",
    }


def sample_records() -> list[dict[str, Any]]:
    return [
        {
            "topic": "tiny-home-api-0.0.1",
            "partition": 0,
            "offset": 200,
            "headers": make_headers("true", "true", "false", "false"),
            "value": {"tenantName": "team-alpha", "environment": "dev"},
        },
        {
            "topic": "tiny-home-api-0.0.1",
            "partition": 0,
            "offset": 201,
            "headers": make_headers("true", "false", "false", "false"),
            "value": {"tenantName": "team-beta", "environment": "dev"},
        },
        {
            "topic": "tiny-home-api-0.0.1",
            "partition": 0,
            "offset": 202,
            "headers": make_headers("false", "true", "false", "false"),
            "value": {"tenantName": "team-gamma", "environment": "dev"},
        },
        {
            "topic": "tiny-home-api-0.0.1",
            "partition": 0,
            "offset": 203,
            "headers": make_headers("true", "true", "false", "false"),
            "value": {"tenantName": "Team_Delta", "environment": "dev"},
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
