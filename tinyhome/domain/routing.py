"""Routing-attribute validation and channel selection.

Mental model refresher:
- The four flags describe how far provisioning has progressed for a tenant.
- Each downstream subscription assumes every earlier stage already ran, so
  only the five "on-prefix" combinations in `CHANNEL_BY_FLAGS` are routable.
- Anything else (e.g. TenantCreated=true while WorkspaceCreated=false) is
  rejected rather than guessed at.
"""

from __future__ import annotations

from enum import Enum

from ..errors import InvalidAttributeValue, UnknownChannelCombination
from .instructions import MessageAttributes

BOOL_VALUES = ("true", "false")
DELIVERY_SOURCES = ("galaxy", "manual")


class Channel(str, Enum):
    CREATE_GROUPS = "createGroups"
    CREATE_WORKSPACE = "createWorkspace"
    CREATE_TENANT = "createTenant"
    CREATE_FLUX = "createFlux"
    DELIVER_EMAIL = "deliverEmail"


# (GroupsCreated, WorkspaceCreated, TenantCreated, FluxCreated) -> channel
CHANNEL_BY_FLAGS: dict[tuple[bool, bool, bool, bool], Channel] = {
    (False, False, False, False): Channel.CREATE_GROUPS,
    (True, False, False, False): Channel.CREATE_WORKSPACE,
    (True, True, False, False): Channel.CREATE_TENANT,
    (True, True, True, False): Channel.CREATE_FLUX,
    (True, True, True, True): Channel.DELIVER_EMAIL,
}


def parse_flag(field_name: str, value: str) -> bool:
    """Convert one wire flag into a bool, rejecting anything but "true"/"false"."""
    if value not in BOOL_VALUES:
        raise InvalidAttributeValue(field_name, value, BOOL_VALUES)
    return value == "true"


def resolve_channel(attributes: MessageAttributes) -> str:
    """Validate `attributes` and return the name of the subscription it targets.

    Checks run fail-fast: flags in escalation order, then the delivery source,
    then the combination lookup.
    """
    flags = tuple(parse_flag(name, value) for name, value in attributes.flag_values())

    if attributes.delivered_from not in DELIVERY_SOURCES:
        raise InvalidAttributeValue("DeliveredFrom", attributes.delivered_from, DELIVERY_SOURCES)

    channel = CHANNEL_BY_FLAGS.get(flags)
    if channel is None:
        raise UnknownChannelCombination(flags)
    return channel.value


def delivery_text(channel: str) -> str:
    return f"message will be delivered to subscription: {channel}"
