"""Value objects for one tiny-home publish request.

Mental model refresher:
- `MessageAttributes` carries the routing flags exactly as they travel on the
  wire ("true"/"false" strings). They are interpreted by `domain.routing`.
- `TinyHomeInstructions` is the provisioning descriptor that becomes the
  message body. Only `tenant_name` is checked here; the remaining fields are
  enforced downstream by the consumers' schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class MessageAttributes:
    groups_created: str
    workspace_created: str
    tenant_created: str
    flux_created: str
    delivered_from: str

    def flag_values(self) -> tuple[tuple[str, str], ...]:
        """Return `(field_name, raw_value)` pairs in escalation order."""
        return (
            ("GroupsCreated", self.groups_created),
            ("WorkspaceCreated", self.workspace_created),
            ("TenantCreated", self.tenant_created),
            ("FluxCreated", self.flux_created),
        )


@dataclass(frozen=True)
class ResourceQuantities:
    cpu: str = ""
    memory: str = ""

    def to_wire(self) -> dict[str, str]:
        return {"cpu": self.cpu, "memory": self.memory}


@dataclass(frozen=True)
class NamespaceQuota:
    requests: ResourceQuantities = field(default_factory=ResourceQuantities)
    limits: ResourceQuantities = field(default_factory=ResourceQuantities)

    def to_wire(self) -> dict[str, Any]:
        return {"requests": self.requests.to_wire(), "limits": self.limits.to_wire()}


@dataclass(frozen=True)
class TinyHomeInstructions:
    tenant_name: str
    environment: str = ""
    business_unit: str = ""
    tenant_owner: str = ""
    tenant_owner_secondary: str = ""
    tenant_cost_center: str = ""
    domain: str = ""
    organization: str = ""
    breakglass: bool = False
    breakglass_window: str = ""
    addl_gke_tenant_sa_roles: tuple[str, ...] = ()
    addl_group_iam_bindings: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    ns_quota: NamespaceQuota = field(default_factory=NamespaceQuota)

    def to_wire(self) -> dict[str, Any]:
        """Render the camelCase document consumers expect on the topic."""
        return {
            "tenantName": self.tenant_name,
            "environment": self.environment,
            "businessUnit": self.business_unit,
            "tenantOwner": self.tenant_owner,
            "tenantOwnerSecondary": self.tenant_owner_secondary,
            "tenantCostCenter": self.tenant_cost_center,
            "domain": self.domain,
            "organization": self.organization,
            "breakglass": self.breakglass,
            "breakglassWindow": self.breakglass_window,
            "addlGkeTenantSaRoles": list(self.addl_gke_tenant_sa_roles),
            "addlGroupIamBindings": {
                role: list(members) for role, members in self.addl_group_iam_bindings.items()
            },
            "nsQuota": self.ns_quota.to_wire(),
        }
