"""Tenant-name rules for the provisioning payload.

Only cases not already enforced by the topic schema live here. Character
classes come from Unicode general categories so non-Latin input is judged the
same way regardless of locale.
"""

from __future__ import annotations

import unicodedata

from ..errors import FieldTooLong, InvalidCase, UnsupportedCharacter
from .instructions import TinyHomeInstructions

TENANT_NAME_FIELD = "tenantName"
TENANT_NAME_MAX_LENGTH = 20
SUPPORTED_SPECIAL_CHARACTERS = ("-",)


def validate_tenant_name(name: str) -> None:
    """Raise on the first rule `name` breaks; return None when it is valid."""
    if len(name) > TENANT_NAME_MAX_LENGTH:
        raise FieldTooLong(TENANT_NAME_FIELD, TENANT_NAME_MAX_LENGTH, len(name))

    for position, character in enumerate(name):
        category = unicodedata.category(character)
        is_letter = category.startswith("L")
        if is_letter and category != "Ll":
            raise InvalidCase(TENANT_NAME_FIELD, character, position)

        is_digit = category == "Nd"
        if not is_letter and not is_digit and character not in SUPPORTED_SPECIAL_CHARACTERS:
            raise UnsupportedCharacter(
                TENANT_NAME_FIELD, character, position, SUPPORTED_SPECIAL_CHARACTERS
            )


def validate_instructions(instructions: TinyHomeInstructions) -> None:
    validate_tenant_name(instructions.tenant_name)
