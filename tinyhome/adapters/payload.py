"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (the camelCase JSON document and the
  flat attribute map) into the domain value objects, and back.
- It validates shape only. Routing and tenant-name rules live in `domain`.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..domain.instructions import (
    MessageAttributes,
    NamespaceQuota,
    ResourceQuantities,
    TinyHomeInstructions,
)
from ..types import AttributeMap, Payload


def parse_instructions_payload(payload: Payload) -> TinyHomeInstructions:
    """Map a camelCase instructions document onto `TinyHomeInstructions`."""
    ns_quota = _as_mapping(payload.get("nsQuota"), "nsQuota")

    return TinyHomeInstructions(
        tenant_name=_as_required_str(payload.get("tenantName"), "tenantName"),
        environment=_as_str(payload.get("environment")),
        business_unit=_as_str(payload.get("businessUnit")),
        tenant_owner=_as_str(payload.get("tenantOwner")),
        tenant_owner_secondary=_as_str(payload.get("tenantOwnerSecondary")),
        tenant_cost_center=_as_str(payload.get("tenantCostCenter")),
        domain=_as_str(payload.get("domain")),
        organization=_as_str(payload.get("organization")),
        breakglass=_as_bool(payload.get("breakglass"), "breakglass"),
        breakglass_window=_as_str(payload.get("breakglassWindow")),
        addl_gke_tenant_sa_roles=_as_str_tuple(
            payload.get("addlGkeTenantSaRoles"), "addlGkeTenantSaRoles"
        ),
        addl_group_iam_bindings={
            str(role): _as_str_tuple(members, f"addlGroupIamBindings.{role}")
            for role, members in _as_mapping(
                payload.get("addlGroupIamBindings"), "addlGroupIamBindings"
            ).items()
        },
        ns_quota=NamespaceQuota(
            requests=_parse_quantities(ns_quota.get("requests"), "nsQuota.requests"),
            limits=_parse_quantities(ns_quota.get("limits"), "nsQuota.limits"),
        ),
    )


def parse_message_attributes(raw: Mapping[str, Any]) -> MessageAttributes:
    """Read the wire attribute map; values are kept verbatim for the router."""
    return MessageAttributes(
        groups_created=_as_str(raw.get("groupsCreated")),
        workspace_created=_as_str(raw.get("workspaceCreated")),
        tenant_created=_as_str(raw.get("tenantCreated")),
        flux_created=_as_str(raw.get("fluxCreated")),
        delivered_from=_as_str(raw.get("deliveredFrom")),
    )


def build_attribute_map(
    instructions: TinyHomeInstructions,
    attributes: MessageAttributes,
) -> AttributeMap:
    """Flat string attributes published alongside the body."""
    return {
        "groupsCreated": attributes.groups_created,
        "workspaceCreated": attributes.workspace_created,
        "tenantCreated": attributes.tenant_created,
        "fluxCreated": attributes.flux_created,
        "deliveredFrom": attributes.delivered_from,
        "tenantName": instructions.tenant_name,
    }


def serialize_instructions(instructions: TinyHomeInstructions) -> bytes:
    return json.dumps(instructions.to_wire(), separators=(",", ":")).encode("utf-8")


def _parse_quantities(value: Any, field_name: str) -> ResourceQuantities:
    quantities = _as_mapping(value, field_name)
    return ResourceQuantities(
        cpu=_as_str(quantities.get("cpu")),
        memory=_as_str(quantities.get("memory")),
    )


def _as_required_str(value: Any, field_name: str) -> str:
    if value is None or value == "":
        raise ValueError(f"Missing required field: {field_name}")
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    # Unstripped: whitespace is left for the tenant-name rules to reject.
    return value


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_bool(value: Any, field_name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return value


def _as_str_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} must be a list of strings")
        items.append(item)
    return tuple(items)


def _as_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be an object")
    return value
