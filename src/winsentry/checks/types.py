"""Core types for compliance checks - no external dependencies."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Compliance(str, Enum):
    """Tri-state compliance of a single control."""

    TRUE = "True"
    FALSE = "False"
    NOT_APPLICABLE = "N/A"  # informational rows, never scored

    @classmethod
    def from_bool(cls, value: bool) -> "Compliance":
        return cls.TRUE if value else cls.FALSE


class Method(str, Enum):
    """Provenance of the observed value."""

    CIM = "CIM"
    MDM = "MDM"
    REGISTRY = "Registry Keys"
    GROUP_POLICY = "Group Policy"
    WINDOWS_API = "Windows API"
    CMDLET = "Cmdlet"
    DISM = "DISM"
    SECURITY_POLICY = "Security Group Policy"


# Fixed, closed set of categories in registration order
CATEGORY_NAMES: Tuple[str, ...] = (
    "AttackSurfaceReductionRules",
    "WindowsUpdateConfigurations",
    "NonAdminCommands",
    "EdgeBrowserConfigurations",
    "DeviceGuard",
    "BitLockerSettings",
    "MiscellaneousConfigurations",
    "WindowsNetworking",
    "LockScreen",
    "UserAccountControl",
    "OptionalWindowsFeatures",
    "TLSSecurity",
    "WindowsFirewall",
    "MicrosoftDefender",
)

# Category display names for human-readable output
CATEGORY_DISPLAY_NAMES: Dict[str, str] = {
    "AttackSurfaceReductionRules": "Attack Surface Reduction Rules",
    "WindowsUpdateConfigurations": "Windows Update Configurations",
    "NonAdminCommands": "Non-Admin Commands",
    "EdgeBrowserConfigurations": "Edge Browser Configurations",
    "DeviceGuard": "Device Guard",
    "BitLockerSettings": "BitLocker Settings",
    "MiscellaneousConfigurations": "Miscellaneous Configurations",
    "WindowsNetworking": "Windows Networking",
    "LockScreen": "Lock Screen",
    "UserAccountControl": "User Account Control",
    "OptionalWindowsFeatures": "Optional Windows Features",
    "TLSSecurity": "TLS Security",
    "WindowsFirewall": "Windows Firewall",
    "MicrosoftDefender": "Microsoft Defender",
}

_CATEGORY_LOOKUP: Dict[str, str] = {name.lower(): name for name in CATEGORY_NAMES}


def canonical_category(name: str) -> str | None:
    """Return the canonical spelling of a category identifier, or None if unknown."""
    return _CATEGORY_LOOKUP.get(name.strip().lower())


@dataclass(frozen=True, slots=True)
class IndividualResult:
    """One evaluated control."""

    friendly_name: str
    name: str
    category: str
    compliant: Compliance
    value: str
    method: Method

    def __post_init__(self) -> None:
        if not isinstance(self.compliant, Compliance):
            raise ValueError(f"Invalid compliance state: {self.compliant!r}")
        if self.category not in CATEGORY_DISPLAY_NAMES:
            raise ValueError(f"Unknown category: {self.category!r}")

    @property
    def category_display_name(self) -> str:
        """Get human-readable category name."""
        return CATEGORY_DISPLAY_NAMES[self.category]

    @property
    def is_scored(self) -> bool:
        return self.compliant is not Compliance.NOT_APPLICABLE

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the external field spelling used by the reporting layer."""
        return {
            "FriendlyName": self.friendly_name,
            "Compliant": self.compliant.value,
            "Value": self.value,
            "Name": self.name,
            "Category": self.category,
            "Method": self.method.value,
        }
