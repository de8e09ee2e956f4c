"""Categories driven mostly by the policy baseline tables.

Windows Update has three MDM controls of its own; the remaining
categories consist entirely of merged registry, group policy and
security policy rows.
"""
from __future__ import annotations

from typing import Mapping

from ..core.baseline import MDM_UPDATE
from ..core.comparison import check_value
from .base import CategoryChecker
from .types import Method

_UPDATE_CONTROLS = (
    (
        "AllowAutoWindowsUpdateDownloadOverMeteredNetwork",
        "Allow updates to be downloaded automatically over metered connections",
        "1",
    ),
    ("AllowAutoUpdate", "Automatically download updates and install them on maintenance day", "1"),
    ("AllowMUUpdateService", "Install updates for other Microsoft products", "1"),
)


class WindowsUpdateConfigurationsCheck(CategoryChecker):
    """Windows Update delivery settings."""

    category = "WindowsUpdateConfigurations"
    description = "Checks automatic update download and installation policies."
    policy_origins = (Method.GROUP_POLICY, Method.REGISTRY)

    def evaluate(self) -> None:
        policy: Mapping[str, str] = self.require(self.snapshot.mdm_policies.get(MDM_UPDATE), "mdm_policies[Update]")
        for key, friendly_name, expected in _UPDATE_CONTROLS:
            match = check_value(policy, key, expected)
            self.add(friendly_name, friendly_name, match.is_match, match.value, Method.CIM)


class NonAdminCommandsCheck(CategoryChecker):
    category = "NonAdminCommands"
    description = "Registry settings applicable to standard users."
    policy_origins = (Method.REGISTRY,)

    def evaluate(self) -> None:
        return None


class EdgeBrowserConfigurationsCheck(CategoryChecker):
    category = "EdgeBrowserConfigurations"
    description = "Microsoft Edge policy settings."
    policy_origins = (Method.REGISTRY,)

    def evaluate(self) -> None:
        return None


class LockScreenCheck(CategoryChecker):
    category = "LockScreen"
    description = "Lock screen and interactive logon settings."
    policy_origins = (Method.GROUP_POLICY,)
    merge_security_policies = True

    def evaluate(self) -> None:
        return None


class UserAccountControlCheck(CategoryChecker):
    category = "UserAccountControl"
    description = "User Account Control elevation settings."
    policy_origins = (Method.GROUP_POLICY,)
    merge_security_policies = True

    def evaluate(self) -> None:
        return None
