#!/usr/bin/env python3
"""Publish one set of tiny-home instructions to Kafka (or the console)."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tinyhome.adapters.console_transport import publish_via_console  # noqa: E402
from tinyhome.adapters.kafka_runtime import publish_instructions_record  # noqa: E402
from tinyhome.adapters.payload import (  # noqa: E402
    parse_instructions_payload,
    parse_message_attributes,
)
from tinyhome.application.publish import publish_tiny_home_instructions  # noqa: E402
from tinyhome.errors import ValidationError  # noqa: E402


def main() -> int:
    _load_env_file(REPO_ROOT / ".env")
    args = parse_args()

    try:
        payload = load_payload(args.payload_file)
        if args.tenant_name is not None:
            payload["tenantName"] = args.tenant_name
        instructions = parse_instructions_payload(payload)
        attributes = parse_message_attributes(
            {
                "groupsCreated": args.groups_created,
                "workspaceCreated": args.workspace_created,
                "tenantCreated": args.tenant_created,
                "fluxCreated": args.flux_created,
                "deliveredFrom": args.delivered_from,
            }
        )
        result = publish_tiny_home_instructions(
            instructions,
            attributes,
            publish=publish_via_console if args.dry_run else _kafka_publisher(args.topic),
        )
    except ValidationError as exc:
        print(f"[REJECTED] {type(exc).__name__}: {exc}")
        return 2
    except ValueError as exc:
        print(f"[REJECTED] payload: {exc}")
        return 2
    except RuntimeError as exc:
        print(f"[PUBLISH FAILED] {type(exc).__name__}: {exc}")
        return 1

    print(f"message_id={result['message_id']}")
    print(f"channel={result['channel']}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Validate and publish tiny-home provisioning instructions."
    )
    parser.add_argument(
        "--payload-file",
        type=Path,
        default=None,
        help="Optional JSON instructions document. Default: built-in sample.",
    )
    parser.add_argument(
        "--tenant-name",
        default=None,
        help="Override tenantName from the payload.",
    )
    for flag in ("groups-created", "workspace-created", "tenant-created", "flux-created"):
        parser.add_argument(
            f"--{flag}",
            default="false",
            help=f"{flag} message attribute: true or false (default: false).",
        )
    parser.add_argument(
        "--delivered-from",
        default="manual",
        help="deliveredFrom message attribute: galaxy or manual (default: manual).",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_TINY_HOME_INSTRUCTIONS).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the record instead of publishing to Kafka.",
    )
    return parser.parse_args()


def load_payload(payload_file: Path | None) -> dict[str, Any]:
    if payload_file is None:
        return sample_payload()
    with payload_file.open("r", encoding="utf-8") as file_handle:
        payload = json.load(file_handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{payload_file} must contain a JSON object")
    return payload


def sample_payload() -> dict[str, Any]:
    return {
        "tenantName": "tiny-home-demo",
        "environment": "dev",
        "businessUnit": "platform",
        "tenantOwner": "owner@example.com",
        "tenantOwnerSecondary": "backup@example.com",
        "tenantCostCenter": "cc-1234",
        "domain": "example.com",
        "organization": "example-org",
        "breakglass": False,
        "breakglassWindow": "",
        "addlGkeTenantSaRoles": ["roles/logging.logWriter"],
        "addlGroupIamBindings": {"roles/roles.test": ["group:dev@example.com"]},
        "nsQuota": {
            "requests": {"cpu": "500m", "memory": "512Mi"},
            "limits": {"cpu": "1", "memory": "1Gi"},
        },
    }


def _kafka_publisher(topic: str | None):
    def publish(*, data: bytes, attributes: dict[str, str]) -> str:
        return publish_instructions_record(data=data, attributes=attributes, topic=topic)

    return publish


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


if __name__ == "__main__":
    sys.exit(main())
