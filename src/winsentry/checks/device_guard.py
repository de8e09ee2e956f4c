"""Virtualization based security and Device Guard checks."""
from __future__ import annotations

from ..core.comparison import equals_any, mdm_value, mdm_value_matches
from .base import CategoryChecker
from .types import Method

# (MDM policy name, result name, friendly name)
_ENABLED_CONTROLS = (
    ("EnableVirtualizationBasedSecurity", "EnableVirtualizationBasedSecurity", "Enable Virtualization Based Security"),
    ("HypervisorEnforcedCodeIntegrity", "HypervisorEnforcedCodeIntegrity", "Hypervisor Enforced Code Integrity - UEFI Lock"),
    ("RequireUEFIMemoryAttributesTable", "HVCIMATRequired", "Require HVCI MAT (Memory Attribute Table)"),
    ("LsaCfgFlags", "LsaCfgFlags", "Credential Guard Configuration - UEFI Lock"),
    ("ConfigureSystemGuardLaunch", "ConfigureSystemGuardLaunch", "System Guard Launch"),
)

_PLATFORM_SECURITY_LEVELS = {
    "1": "VBS with Secure Boot",
    "3": "VBS with Secure Boot and direct memory access (DMA) Protection",
}


class DeviceGuardCheck(CategoryChecker):
    """Device Guard controls reported through the MDM policy results."""

    category = "DeviceGuard"
    description = "Checks VBS, HVCI, Credential Guard and System Guard policies."
    policy_origins = (Method.GROUP_POLICY,)

    def evaluate(self) -> None:
        results = self.require(self.snapshot.mdm_results, "mdm_results")

        policy, name, friendly_name = _ENABLED_CONTROLS[0]
        self._add_enabled(results, policy, name, friendly_name)

        platform = mdm_value(results, "RequirePlatformSecurityFeatures")
        compliant = equals_any(platform, _PLATFORM_SECURITY_LEVELS)
        level = _PLATFORM_SECURITY_LEVELS[platform] if compliant else "False"
        self.add("Require Platform Security Features", "RequirePlatformSecurityFeatures", compliant, level, Method.MDM)

        for policy, name, friendly_name in _ENABLED_CONTROLS[1:]:
            self._add_enabled(results, policy, name, friendly_name)

    def _add_enabled(self, results, policy: str, name: str, friendly_name: str) -> None:
        enabled = mdm_value_matches(results, policy, "1")
        self.add(friendly_name, name, enabled, str(enabled), Method.MDM)
