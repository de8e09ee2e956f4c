"""Unit tests for the result model."""
from __future__ import annotations

import dataclasses
import unittest

from winsentry.checks.types import (
    CATEGORY_DISPLAY_NAMES,
    CATEGORY_NAMES,
    Compliance,
    IndividualResult,
    Method,
    canonical_category,
)


class TestCompliance(unittest.TestCase):
    def test_external_spelling(self) -> None:
        self.assertEqual(Compliance.TRUE.value, "True")
        self.assertEqual(Compliance.FALSE.value, "False")
        self.assertEqual(Compliance.NOT_APPLICABLE.value, "N/A")

    def test_from_bool(self) -> None:
        self.assertIs(Compliance.from_bool(True), Compliance.TRUE)
        self.assertIs(Compliance.from_bool(False), Compliance.FALSE)


class TestCategories(unittest.TestCase):
    def test_fourteen_categories_with_display_names(self) -> None:
        self.assertEqual(len(CATEGORY_NAMES), 14)
        self.assertEqual(set(CATEGORY_NAMES), set(CATEGORY_DISPLAY_NAMES))

    def test_canonical_category_ignores_case(self) -> None:
        self.assertEqual(canonical_category("bitlockersettings"), "BitLockerSettings")
        self.assertEqual(canonical_category("  TLSSECURITY "), "TLSSecurity")

    def test_canonical_category_unknown(self) -> None:
        self.assertIsNone(canonical_category("Printers"))


class TestIndividualResult(unittest.TestCase):
    def setUp(self) -> None:
        self.result = IndividualResult(
            friendly_name="Enable Windows Firewall for Public profile",
            name="Enable Windows Firewall for Public profile",
            category="WindowsFirewall",
            compliant=Compliance.TRUE,
            value="true",
            method=Method.CIM,
        )

    def test_to_dict_uses_external_field_names(self) -> None:
        self.assertEqual(
            self.result.to_dict(),
            {
                "FriendlyName": "Enable Windows Firewall for Public profile",
                "Compliant": "True",
                "Value": "true",
                "Name": "Enable Windows Firewall for Public profile",
                "Category": "WindowsFirewall",
                "Method": "CIM",
            },
        )

    def test_rejects_loose_compliance_strings(self) -> None:
        with self.assertRaises(ValueError):
            dataclasses.replace(self.result, compliant="True")

    def test_rejects_unknown_category(self) -> None:
        with self.assertRaises(ValueError):
            dataclasses.replace(self.result, category="Printers")

    def test_is_frozen(self) -> None:
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.result.value = "false"  # type: ignore[misc]

    def test_not_applicable_rows_are_not_scored(self) -> None:
        informational = dataclasses.replace(self.result, compliant=Compliance.NOT_APPLICABLE)
        self.assertTrue(self.result.is_scored)
        self.assertFalse(informational.is_scored)

    def test_display_name(self) -> None:
        self.assertEqual(self.result.category_display_name, "Windows Firewall")

    def test_method_spelling(self) -> None:
        self.assertEqual(Method.SECURITY_POLICY.value, "Security Group Policy")
        self.assertEqual(Method("Registry Keys"), Method.REGISTRY)


if __name__ == "__main__":
    unittest.main()
