"""Pytest configuration and shared fixtures for compliance checker tests."""
from __future__ import annotations

import dataclasses
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from winsentry.checks import load_checks  # noqa: E402
from winsentry.core.baseline import (  # noqa: E402
    ASR_RULES,
    DRIVER_BLOCK_LIST_TASK,
    ECC_CURVES,
    FVE_POLICY_KEY,
    POWER_KEY,
    TLS_CIPHER_SUITES,
)
from winsentry.core.injection import DependencyContainer, reset_container  # noqa: E402
from winsentry.core.interfaces import (  # noqa: E402
    Baseline,
    BitLockerVolume,
    DefenderConfiguration,
    DefenderPreferences,
    FeatureStates,
    FirewallRule,
    LocalUser,
    MDMResult,
    NetConnectionProfile,
    PolicyBaselineRow,
    ProcessMitigationRow,
    SecurityPolicyBaselineRow,
    SystemSnapshot,
)

# Populate the registry once so clearing it in a test never loses a checker
load_checks()

# ==============================================================================
# Compliant system state
# ==============================================================================

POLICY_SYSTEM_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows\CurrentVersion\Policies\System"
EXPLORER_ADVANCED_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
EDGE_POLICY_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Edge"
DNS_CLIENT_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows NT\DNSClient"
WINDOWS_UPDATE_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\WindowsUpdate"
SANDBOX_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\Sandbox"

AUDITPOL_OUTPUT = (
    "Machine Name,Policy Target,Subcategory,Subcategory GUID,Inclusion Setting,Exclusion Setting\r\n"
    "WORKSTATION,System,Other Logon/Logoff Events,{0CCE921C-69AE-11D9-BED3-505054503030},"
    "Success and Failure,\r\n"
)


def _firewall_profile(profile: str) -> Dict[str, str]:
    return {
        "EnableFirewall": "true",
        "DisableInboundNotifications": "false",
        "LogMaxFileSize": "32767",
        "EnableLogDroppedPackets": "true",
        "LogFilePath": rf"%systemroot%\system32\LogFiles\Firewall\{profile}firewall.log",
    }


COMPLIANT_MDM_POLICIES: Dict[str, Dict[str, str]] = {
    "Update": {
        "AllowAutoWindowsUpdateDownloadOverMeteredNetwork": "1",
        "AllowAutoUpdate": "1",
        "AllowMUUpdateService": "1",
    },
    "System": {
        "AllowLocation": "0",
        "AllowTelemetry": "3",
        "ConfigureTelemetryOptInSettingsUx": "1",
    },
    "FirewallPublicProfile": _firewall_profile("Public"),
    "FirewallPrivateProfile": _firewall_profile("Private"),
    "FirewallDomainProfile": {
        "EnableFirewall": "true",
        "DefaultOutboundAction": "1",
        "DefaultInboundAction": "1",
        "Shielded": "true",
        "LogFilePath": r"%systemroot%\system32\LogFiles\Firewall\Domainfirewall.log",
        "LogMaxFileSize": "32767",
        "EnableLogDroppedPackets": "true",
        "EnableLogSuccessConnections": "true",
    },
}

COMPLIANT_MDM_RESULTS: Tuple[MDMResult, ...] = (
    MDMResult("EnableVirtualizationBasedSecurity", "1"),
    MDMResult("RequirePlatformSecurityFeatures", "3"),
    MDMResult("HypervisorEnforcedCodeIntegrity", "1"),
    MDMResult("RequireUEFIMemoryAttributesTable", "1"),
    MDMResult("LsaCfgFlags", "1"),
    MDMResult("ConfigureSystemGuardLaunch", "1"),
    MDMResult("TLSCipherSuites", TLS_CIPHER_SUITES),
)

COMPLIANT_PREFERENCES = DefenderPreferences(
    attack_surface_reduction_rules_ids=tuple(rule.rule_id.upper() for rule in ASR_RULES),
    attack_surface_reduction_rules_actions=tuple("1" for _ in ASR_RULES),
    platform_updates_channel=2,
    engine_updates_channel=2,
    controlled_folder_access_allowed_applications=(r"C:\Tools\backup.exe",),
    allow_switch_to_async_inspection=True,
    oobe_enable_rtp_and_sig_update=True,
    intel_tdt_enabled=True,
    enable_controlled_folder_access=1,
    disable_restore_point=False,
    performance_mode_status=0,
    enable_convert_warn_to_block=True,
    brute_force_protection_aggressiveness=2,
    brute_force_protection_max_block_time=0,
    brute_force_protection_configured_state=1,
    remote_encryption_protection_max_block_time=0,
    remote_encryption_protection_aggressiveness=2,
    remote_encryption_protection_configured_state=1,
    cloud_block_level=6,
    disable_email_scanning=False,
    submit_samples_consent=3,
    maps_reporting=2,
    enable_file_hash_computation=True,
    cloud_extended_timeout=50,
    pua_protection=1,
    disable_catchup_quick_scan=False,
    check_for_signatures_before_running_scan=True,
    enable_network_protection=1,
    signature_update_interval=3,
    metered_connection_updates=True,
    severe_threat_default_action=3,
    high_threat_default_action=3,
    moderate_threat_default_action=2,
    low_threat_default_action=2,
)

COMPLIANT_FEATURES = FeatureStates(
    powershell_v2="Disabled",
    powershell_v2_engine="Disabled",
    work_folders_client="Disabled",
    internet_printing_client="Disabled",
    windows_media_player="Not Present",
    mdag="Unknown",
    windows_sandbox="Enabled",
    hyper_v="Enabled",
    wmic="Not Present",
    ie_mode="Not Present",
    legacy_notepad="Not Present",
    legacy_wordpad="Not Present",
    powershell_ise="Not Present",
    steps_recorder="Not Present",
)

COMPLIANT_REGISTRY: Dict[str, Dict[str, str]] = {
    FVE_POLICY_KEY: {"DisableExternalDMAUnderLock": "0"},
    POWER_KEY: {"HiberFileType": "2"},
    POLICY_SYSTEM_KEY: {
        "InactivityTimeoutSecs": "120",
        "ConsentPromptBehaviorAdmin": "2",
        "DontDisplayLastUserName": "1",
    },
    EXPLORER_ADVANCED_KEY: {"HideFileExt": "0"},
    EDGE_POLICY_KEY: {"SmartScreenEnabled": "1", "SitePerProcess": "1"},
    DNS_CLIENT_KEY: {"EnableMulticast": "0"},
    WINDOWS_UPDATE_KEY: {"SetComplianceDeadline": "1"},
    SANDBOX_KEY: {"AllowClipboardRedirection": "0"},
}

COMPLIANT_SECURITY_POLICY: Dict[str, Dict[str, str]] = {
    "System Access": {"LockoutBadCount": "5", "EnableGuestAccount": "0"},
    "Registry Values": {
        r"MACHINE\Software\Microsoft\Windows\CurrentVersion\Policies\System\EnableLUA": "4,1",
    },
}

POLICY_ROWS: Tuple[PolicyBaselineRow, ...] = (
    PolicyBaselineRow("Group Policy", "LockScreen", POLICY_SYSTEM_KEY, "InactivityTimeoutSecs", "Machine inactivity limit", "120"),
    PolicyBaselineRow("Group Policy", "LockScreen", POLICY_SYSTEM_KEY, "DontDisplayLastUserName", "Don't display last signed-in", "1"),
    PolicyBaselineRow("Group Policy", "UserAccountControl", POLICY_SYSTEM_KEY, "ConsentPromptBehaviorAdmin", "Elevation prompt for administrators", "2"),
    PolicyBaselineRow("Registry Keys", "NonAdminCommands", EXPLORER_ADVANCED_KEY, "HideFileExt", "Show file extensions", "0"),
    PolicyBaselineRow("Registry Keys", "EdgeBrowserConfigurations", EDGE_POLICY_KEY, "SmartScreenEnabled", "Microsoft Defender SmartScreen", "1"),
    PolicyBaselineRow("Registry Keys", "EdgeBrowserConfigurations", EDGE_POLICY_KEY, "SitePerProcess", "Site isolation", "1"),
    PolicyBaselineRow("Group Policy", "WindowsNetworking", DNS_CLIENT_KEY, "EnableMulticast", "Turn off multicast name resolution", "0"),
    PolicyBaselineRow("Group Policy", "WindowsUpdateConfigurations", WINDOWS_UPDATE_KEY, "SetComplianceDeadline", "Specify deadlines for automatic updates", "1"),
    PolicyBaselineRow(
        "Group Policy",
        "MiscellaneousConfigurations",
        SANDBOX_KEY,
        "AllowClipboardRedirection",
        "Disable clipboard sharing with Windows Sandbox",
        "0",
        requires_feature="Containers-DisposableClientVM",
    ),
)

SECURITY_POLICY_ROWS: Tuple[SecurityPolicyBaselineRow, ...] = (
    SecurityPolicyBaselineRow("LockScreen", "System Access", "LockoutBadCount", "5", "Account lockout threshold"),
    SecurityPolicyBaselineRow(
        "UserAccountControl",
        "Registry Values",
        r"MACHINE\Software\Microsoft\Windows\CurrentVersion\Policies\System\EnableLUA",
        "4,1",
        "Run all administrators in Admin Approval Mode",
    ),
    SecurityPolicyBaselineRow("WindowsNetworking", "System Access", "EnableGuestAccount", "0", "Guest account status"),
)

MITIGATION_ROWS: Tuple[ProcessMitigationRow, ...] = (
    ProcessMitigationRow("lsass.exe", "DEP", "Enable"),
    ProcessMitigationRow("lsass.exe", "CFG", "Enable"),
    ProcessMitigationRow("LSASS.exe", "StrictHandle", "Enable"),
    ProcessMitigationRow("msedge.exe", "EnableExportAddressFilter", "Disable"),
    ProcessMitigationRow("winword.exe", "DEP", "Enable"),
)


def build_snapshot(**overrides: Any) -> SystemSnapshot:
    """A snapshot in which every bundled control is compliant."""
    snapshot = SystemSnapshot(
        mdm_policies=COMPLIANT_MDM_POLICIES,
        mdm_results=COMPLIANT_MDM_RESULTS,
        defender_preferences=COMPLIANT_PREFERENCES,
        defender_configuration=DefenderConfiguration(is_virtual_machine=False, smart_app_control_state="On"),
        registry=COMPLIANT_REGISTRY,
        kernel_dma_protection=True,
        os_volume=BitLockerVolume("C:", "OperationSystem", "Protected", ("TpmPin", "RecoveryPassword")),
        volumes=(BitLockerVolume("D:", "FixedDisk", "Protected", ("RecoveryPassword",)),),
        feature_states=COMPLIANT_FEATURES,
        available_features=frozenset({"Containers-DisposableClientVM", "Microsoft-Hyper-V-All"}),
        local_users=(LocalUser("operator", True, ("S-1-5-32-545", "S-1-5-32-578")),),
        culture_name="en-US",
        auditpol_output=AUDITPOL_OUTPUT,
        net_connection_profiles=(NetConnectionProfile("Ethernet", 0),),
        mdns_firewall_rules=(FirewallRule("mDNS (UDP-In)", False),),
        ecc_curves=ECC_CURVES,
        nx_value="3",
        force_relocate_images="ON",
        applied_mitigations={
            "lsass.exe": ("DEP", "CFG", "StrictHandle"),
            "winword.exe": ("DEP",),
        },
        scheduled_tasks={DRIVER_BLOCK_LIST_TASK: True},
        security_policy=COMPLIANT_SECURITY_POLICY,
    )
    return dataclasses.replace(snapshot, **overrides) if overrides else snapshot


def build_baseline(**overrides: Any) -> Baseline:
    baseline = Baseline(
        policy_rows=POLICY_ROWS,
        security_policy_rows=SECURITY_POLICY_ROWS,
        process_mitigations=MITIGATION_ROWS,
    )
    return dataclasses.replace(baseline, **overrides) if overrides else baseline


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def make_snapshot() -> Callable[..., SystemSnapshot]:
    """Factory fixture for compliant snapshots with selected fields replaced."""
    return build_snapshot


@pytest.fixture
def make_container() -> Callable[..., DependencyContainer]:
    """Factory fixture for containers over a compliant snapshot and baseline."""

    def _create(snapshot: SystemSnapshot | None = None, baseline: Baseline | None = None) -> DependencyContainer:
        return DependencyContainer(
            snapshot=snapshot if snapshot is not None else build_snapshot(),
            baseline=baseline if baseline is not None else build_baseline(),
        )

    return _create


@pytest.fixture
def compliant_container(make_container) -> DependencyContainer:
    return make_container()


@pytest.fixture
def clear_check_registry():
    """Clear the check registry before each test and restore it afterwards."""
    from winsentry.checks.base import CheckRegistry

    saved = dict(CheckRegistry._registry)
    CheckRegistry.clear()
    yield
    CheckRegistry.clear()
    CheckRegistry._registry.update(saved)


@pytest.fixture(autouse=True)
def reset_global_container():
    """Ensure no test leaks a process-wide container into another."""
    reset_container()
    yield
    reset_container()
