from __future__ import annotations

import unittest

from tinyhome.domain.instructions import TinyHomeInstructions
from tinyhome.domain.tenant import validate_instructions, validate_tenant_name
from tinyhome.errors import FieldTooLong, InvalidCase, UnsupportedCharacter


class TenantNameTests(unittest.TestCase):
    def test_lowercase_and_hyphen_is_valid(self) -> None:
        self.assertIsNone(validate_tenant_name("a-b-c"))

    def test_letters_and_digits_are_valid(self) -> None:
        self.assertIsNone(validate_tenant_name("tenant123"))

    def test_twenty_characters_is_valid(self) -> None:
        self.assertIsNone(validate_tenant_name("a" * 20))

    def test_empty_name_passes_character_rules(self) -> None:
        self.assertIsNone(validate_tenant_name(""))

    def test_twenty_one_characters_is_too_long(self) -> None:
        with self.assertRaises(FieldTooLong) as ctx:
            validate_tenant_name("a" * 21)
        self.assertEqual(ctx.exception.limit, 20)
        self.assertEqual(ctx.exception.length, 21)

    def test_length_is_checked_before_characters(self) -> None:
        with self.assertRaises(FieldTooLong):
            validate_tenant_name("A" * 21)

    def test_length_counts_code_points(self) -> None:
        self.assertIsNone(validate_tenant_name("é" * 20))

    def test_uppercase_is_invalid_case(self) -> None:
        with self.assertRaises(InvalidCase) as ctx:
            validate_tenant_name("Abc")
        self.assertEqual(ctx.exception.character, "A")
        self.assertEqual(ctx.exception.position, 0)

    def test_underscore_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedCharacter) as ctx:
            validate_tenant_name("ab_c")
        self.assertEqual(ctx.exception.character, "_")
        self.assertEqual(ctx.exception.position, 2)
        self.assertIn("'-'", str(ctx.exception))

    def test_whitespace_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedCharacter):
            validate_tenant_name("team alpha")

    def test_first_violation_wins(self) -> None:
        with self.assertRaises(UnsupportedCharacter):
            validate_tenant_name("a_B")
        with self.assertRaises(InvalidCase):
            validate_tenant_name("aB_")

    def test_non_latin_lowercase_is_valid(self) -> None:
        self.assertIsNone(validate_tenant_name("équipe-ß"))
        self.assertIsNone(validate_tenant_name("команда"))

    def test_non_latin_uppercase_is_invalid_case(self) -> None:
        with self.assertRaises(InvalidCase):
            validate_tenant_name("Équipe")
        with self.assertRaises(InvalidCase):
            validate_tenant_name("Команда")

    def test_uncased_letter_is_invalid_case(self) -> None:
        with self.assertRaises(InvalidCase):
            validate_tenant_name("チーム")

    def test_non_ascii_decimal_digits_are_valid(self) -> None:
        self.assertIsNone(validate_tenant_name("team-١٢٣"))

    def test_non_decimal_numerals_are_unsupported(self) -> None:
        with self.assertRaises(UnsupportedCharacter):
            validate_tenant_name("team²")

    def test_validation_is_idempotent(self) -> None:
        with self.assertRaises(InvalidCase):
            validate_tenant_name("Abc")
        with self.assertRaises(InvalidCase):
            validate_tenant_name("Abc")
        self.assertIsNone(validate_tenant_name("abc"))
        self.assertIsNone(validate_tenant_name("abc"))


class ValidateInstructionsTests(unittest.TestCase):
    def test_checks_tenant_name_only(self) -> None:
        instructions = TinyHomeInstructions(
            tenant_name="team-alpha",
            environment="NOT VALIDATED!",
        )
        self.assertIsNone(validate_instructions(instructions))

    def test_rejects_bad_tenant_name(self) -> None:
        with self.assertRaises(UnsupportedCharacter):
            validate_instructions(TinyHomeInstructions(tenant_name="team.alpha"))


if __name__ == "__main__":
    unittest.main()
