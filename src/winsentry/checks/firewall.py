"""Windows Defender Firewall checks."""
from __future__ import annotations

from typing import Mapping, Tuple

from ..core.baseline import MDM_FIREWALL_DOMAIN, MDM_FIREWALL_PRIVATE, MDM_FIREWALL_PUBLIC
from ..core.comparison import check_value
from .base import CategoryChecker
from .types import Method

MDNS_CONTROL = "mDNS UDP-In Firewall Rules are disabled"

_LOG_PATH = r"%systemroot%\system32\LogFiles\Firewall\{}firewall.log"

# (MDM key, control name, expected value); "{}" is replaced by the profile name
_PROFILE_CONTROLS: Tuple[Tuple[str, str, str], ...] = (
    ("EnableFirewall", "Enable Windows Firewall for {} profile", "true"),
    ("DisableInboundNotifications", "Display notifications for {} profile", "false"),
    ("LogMaxFileSize", "Configure Log file size for {} profile", "32767"),
    ("EnableLogDroppedPackets", "Log blocked connections for {} profile", "true"),
    ("LogFilePath", "Configure Log file path for {} profile", _LOG_PATH),
)

# (MDM key, row name, friendly name, expected value)
_DOMAIN_CONTROLS: Tuple[Tuple[str, str, str, str], ...] = (
    ("EnableFirewall", "Enable Windows Firewall for Domain profile", "Enable Windows Firewall for Domain profile", "true"),
    ("DefaultOutboundAction", "Set Default Outbound Action for Domain profile", "Set Default Outbound Action for Domain profile", "1"),
    ("DefaultInboundAction", "Set Default Inbound Action for Domain profile", "Set Default Inbound Action for Domain profile", "1"),
    ("Shielded", "Shielded", "Block all Domain profile connections", "true"),
    ("LogFilePath", "Configure Log file path for domain profile", "Configure Log file path for domain profile", _LOG_PATH.format("Domain")),
    ("LogMaxFileSize", "Configure Log file size for domain profile", "Configure Log file size for domain profile", "32767"),
    ("EnableLogDroppedPackets", "Log blocked connections for domain profile", "Log blocked connections for domain profile", "true"),
    ("EnableLogSuccessConnections", "Log successful connections for domain profile", "Log successful connections for domain profile", "true"),
)


class WindowsFirewallCheck(CategoryChecker):
    """Firewall profile settings reported through MDM and the mDNS rule group."""

    category = "WindowsFirewall"
    description = "Checks that all firewall profiles are enabled, logged and locked down."
    policy_origins = (Method.GROUP_POLICY,)

    def evaluate(self) -> None:
        disabled = not any(rule.enabled for rule in self.snapshot.mdns_firewall_rules)
        self.add(MDNS_CONTROL, MDNS_CONTROL, disabled, str(disabled), Method.CIM)

        for area, profile in ((MDM_FIREWALL_PUBLIC, "Public"), (MDM_FIREWALL_PRIVATE, "Private")):
            self._check_profile(self._profile(area), profile)

        domain = self._profile(MDM_FIREWALL_DOMAIN)
        for key, name, friendly_name, expected in _DOMAIN_CONTROLS:
            match = check_value(domain, key, expected)
            self.add(friendly_name, name, match.is_match, match.value, Method.CIM)

    def _profile(self, area: str) -> Mapping[str, str]:
        return self.require(self.snapshot.mdm_policies.get(area), f"mdm_policies[{area}]")

    def _check_profile(self, policy: Mapping[str, str], profile: str) -> None:
        for key, template, expected in _PROFILE_CONTROLS:
            control = template.format(profile)
            match = check_value(policy, key, expected.format(profile))
            self.add(control, control, match.is_match, match.value, Method.CIM)
