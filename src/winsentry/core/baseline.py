"""Baseline tables embedded in the engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

# Starting value of the expected-compliant-item counter
BASELINE_EXPECTED_ITEMS = 238

NOT_CONFIGURED_ACTION = "0"


@dataclass(frozen=True)
class AsrRule:
    """An attack surface reduction rule and the actions that satisfy it."""

    rule_id: str
    friendly_name: str
    allowed_actions: FrozenSet[str] = frozenset({"1"})


_BLOCK_OR_WARN = frozenset({"1", "6"})

ASR_RULES: Tuple[AsrRule, ...] = (
    AsrRule("26190899-1602-49e8-8b27-eb1d0a1ce869", "Block Office communication application from creating child processes"),
    AsrRule("d1e49aac-8f56-4280-b9ba-993a6d77406c", "Block process creations originating from PSExec and WMI commands"),
    AsrRule("b2b3f03d-6a65-4f7b-a9c7-1c7ef74a9ba4", "Block untrusted and unsigned processes that run from USB"),
    AsrRule("92e97fa1-2edf-4476-bdd6-9dd0b4dddc7b", "Block Win32 API calls from Office macros"),
    AsrRule("7674ba52-37eb-4a4f-a9a1-f0f9a1619a2c", "Block Adobe Reader from creating child processes"),
    AsrRule("3b576869-a4ec-4529-8536-b80a7769e899", "Block Office applications from creating executable content"),
    AsrRule("d4f940ab-401b-4efc-aadc-ad5f3c50688a", "Block all Office applications from creating child processes"),
    AsrRule("9e6c4e1f-7d60-472f-ba1a-a39ef669e4b2", "Block credential stealing from the Windows local security authority subsystem (lsass.exe)"),
    AsrRule("be9ba2d9-53ea-4cdc-84e5-9b1eeee46550", "Block executable content from email client and webmail"),
    # Warn is accepted for ease of use
    AsrRule(
        "01443614-cd74-433a-b99e-2ecdc07bfc25",
        "Block executable files from running unless they meet a prevalence; age or trusted list criterion",
        _BLOCK_OR_WARN,
    ),
    AsrRule("5beb7efe-fd9a-4556-801d-275e5ffc04cc", "Block execution of potentially obfuscated scripts"),
    AsrRule("e6db77e5-3df2-4cf1-b95a-636979351e5b", "Block persistence through WMI event subscription"),
    AsrRule("75668c1f-73b5-4cf0-bb93-3ecf5cb7cc84", "Block Office applications from injecting code into other processes"),
    AsrRule("56a863a9-875e-4185-98a7-b882c64b5ce5", "Block abuse of exploited vulnerable signed drivers"),
    AsrRule("c1db55ab-c21a-4637-bb3f-a12568109d35", "Use advanced protection against ransomware"),
    AsrRule("d3e037e1-3eb8-44c8-a917-57927947596d", "Block JavaScript or VBScript from launching downloaded executable content"),
    AsrRule("33ddedf1-c6e0-47cb-833e-de6133960387", "Block rebooting machine in Safe Mode"),
    # Preview rule, applied as Warn by the hardening baseline
    AsrRule(
        "c0033c00-d16d-4114-a5a0-dc9b3a7d2ceb",
        "Block use of copied or impersonated system tools",
        _BLOCK_OR_WARN,
    ),
    AsrRule("a8f5898e-1dc8-49a9-9878-85004b8a61e6", "Block Webshell creation for Servers"),
)

# Required TLS ECC curve order
ECC_CURVES: Tuple[str, ...] = ("nistP521", "curve25519", "NistP384", "NistP256")

TLS_CIPHER_SUITES = (
    "TLS_CHACHA20_POLY1305_SHA256,TLS_AES_256_GCM_SHA384,TLS_AES_128_GCM_SHA256,"
    "TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384,TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256,"
    "TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384,TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256,"
    "TLS_DHE_RSA_WITH_AES_256_GCM_SHA384,TLS_DHE_RSA_WITH_AES_128_GCM_SHA256"
)

DEFENDER_UPDATE_CHANNELS: Dict[int, str] = {
    0: "NotConfigured",
    2: "Beta",
    3: "Preview",
    4: "Staged",
    5: "Broad",
    6: "Delayed",
}

# MDM policy areas
MDM_UPDATE = "Update"
MDM_SYSTEM = "System"
MDM_FIREWALL_PUBLIC = "FirewallPublicProfile"
MDM_FIREWALL_PRIVATE = "FirewallPrivateProfile"
MDM_FIREWALL_DOMAIN = "FirewallDomainProfile"

# Registry locations read directly by checkers
FVE_POLICY_KEY = r"HKEY_LOCAL_MACHINE\Software\Policies\Microsoft\FVE"
POWER_KEY = r"HKEY_LOCAL_MACHINE\SYSTEM\CurrentControlSet\Control\Power"

HYPER_V_ADMINISTRATORS_SID = "S-1-5-32-578"

DRIVER_BLOCK_LIST_TASK = r"\MSFT Driver Block list update\MSFT Driver Block list update"

AUDIT_POLICY_CULTURE = "en-US"
