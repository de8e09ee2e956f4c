"""Typed snapshot records consumed by the compliance engine.

Architecture:
┌─────────────────────────────────────────────────────────────────┐
│                   SNAPSHOT PROVIDERS (external)                  │
│  - Query registry, CIM/WMI, MDM, DISM, BitLocker, auditpol ...   │
│  - Hand over already-parsed values                               │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                     EVALUATION LAYER (this package)              │
│  - Category checkers apply comparison policies                   │
│  - NO side effects (read-only)                                   │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                     REPORTING LAYER (external)                   │
│  - Renders the aggregate store                                   │
└─────────────────────────────────────────────────────────────────┘

Every provider output has an explicit record type here. A field set to
None means the provider did not populate it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Tuple, Union

# Values read off CIM objects arrive as text, numbers or booleans
CimValue = Union[str, int, bool, None]


# =============================================================================
# LIVE SNAPSHOTS
# =============================================================================


@dataclass(frozen=True)
class MDMResult:
    """One row of the MDM policy dump (policy name and its raw value)."""

    name: str
    value: str


@dataclass(frozen=True)
class DefenderPreferences:
    """Subset of MSFT_MpPreference used by the audit.

    ASR ids may arrive as strings or, on some builds, as a byte array.
    """

    attack_surface_reduction_rules_ids: Optional[Union[Sequence[str], bytes]] = None
    attack_surface_reduction_rules_actions: Optional[Union[Sequence[str], bytes]] = None
    platform_updates_channel: Optional[int] = None
    engine_updates_channel: Optional[int] = None
    controlled_folder_access_allowed_applications: Optional[Sequence[str]] = None
    allow_switch_to_async_inspection: Optional[bool] = None
    oobe_enable_rtp_and_sig_update: Optional[bool] = None
    intel_tdt_enabled: Optional[bool] = None
    enable_controlled_folder_access: CimValue = None
    disable_restore_point: Optional[bool] = None
    performance_mode_status: CimValue = None
    enable_convert_warn_to_block: Optional[bool] = None
    brute_force_protection_aggressiveness: CimValue = None
    brute_force_protection_max_block_time: CimValue = None
    brute_force_protection_configured_state: CimValue = None
    remote_encryption_protection_max_block_time: CimValue = None
    remote_encryption_protection_aggressiveness: CimValue = None
    remote_encryption_protection_configured_state: CimValue = None
    cloud_block_level: CimValue = None
    disable_email_scanning: Optional[bool] = None
    submit_samples_consent: CimValue = None
    maps_reporting: CimValue = None
    enable_file_hash_computation: Optional[bool] = None
    cloud_extended_timeout: CimValue = None
    pua_protection: CimValue = None
    disable_catchup_quick_scan: Optional[bool] = None
    check_for_signatures_before_running_scan: Optional[bool] = None
    enable_network_protection: CimValue = None
    signature_update_interval: CimValue = None
    metered_connection_updates: Optional[bool] = None
    severe_threat_default_action: CimValue = None
    high_threat_default_action: CimValue = None
    moderate_threat_default_action: CimValue = None
    low_threat_default_action: CimValue = None


@dataclass(frozen=True)
class DefenderConfiguration:
    """Subset of MSFT_MpComputerStatus / Defender configuration."""

    is_virtual_machine: bool = False
    smart_app_control_state: Optional[str] = None


@dataclass(frozen=True)
class BitLockerVolume:
    """A BitLocker volume descriptor."""

    mount_point: str
    volume_type: str  # OperationSystem, FixedDisk or Removable
    protection_status: str  # Protected, Unprotected or Unknown
    key_protectors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureStates:
    """DISM optional feature / capability summary."""

    powershell_v2: str = "Unknown"
    powershell_v2_engine: str = "Unknown"
    work_folders_client: str = "Unknown"
    internet_printing_client: str = "Unknown"
    windows_media_player: str = "Unknown"
    mdag: str = "Unknown"
    windows_sandbox: str = "Unknown"
    hyper_v: str = "Unknown"
    wmic: str = "Unknown"
    ie_mode: str = "Unknown"
    legacy_notepad: str = "Unknown"
    legacy_wordpad: str = "Unknown"
    powershell_ise: str = "Unknown"
    steps_recorder: str = "Unknown"


@dataclass(frozen=True)
class LocalUser:
    name: str
    enabled: bool
    group_sids: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class NetConnectionProfile:
    name: str
    network_category: Optional[int] = None  # 0 = Public, 1 = Private, 2 = Domain


@dataclass(frozen=True)
class FirewallRule:
    name: str
    enabled: bool


@dataclass(frozen=True)
class SystemSnapshot:
    """Everything the snapshot providers collected for one audit run."""

    mdm_policies: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    mdm_results: Optional[Tuple[MDMResult, ...]] = None
    defender_preferences: Optional[DefenderPreferences] = None
    defender_configuration: Optional[DefenderConfiguration] = None
    # key path -> value name -> value as text
    registry: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    kernel_dma_protection: Optional[bool] = None
    os_volume: Optional[BitLockerVolume] = None
    volumes: Tuple[BitLockerVolume, ...] = ()
    feature_states: Optional[FeatureStates] = None
    available_features: frozenset = frozenset()
    local_users: Optional[Tuple[LocalUser, ...]] = None
    culture_name: str = "en-US"
    auditpol_output: Optional[str] = None
    net_connection_profiles: Tuple[NetConnectionProfile, ...] = ()
    mdns_firewall_rules: Tuple[FirewallRule, ...] = ()
    ecc_curves: Optional[Tuple[str, ...]] = None
    nx_value: Optional[str] = None
    force_relocate_images: Optional[str] = None
    # program name -> mitigations applied to it, in export order
    applied_mitigations: Optional[Mapping[str, Tuple[str, ...]]] = None
    # task path + task name -> present and enabled
    scheduled_tasks: Mapping[str, bool] = field(default_factory=dict)
    # secedit export: section -> key -> value
    security_policy: Mapping[str, Mapping[str, str]] = field(default_factory=dict)


# =============================================================================
# BASELINE TABLES
# =============================================================================


@dataclass(frozen=True)
class PolicyBaselineRow:
    """One registry-backed row of the policy baseline CSV."""

    origin: str  # "Group Policy" or "Registry Keys"
    category: str
    key: str
    value_name: str
    friendly_name: str
    expected_value: str
    requires_feature: Optional[str] = None


@dataclass(frozen=True)
class SecurityPolicyBaselineRow:
    """One row of the security-policy (secedit INI) baseline CSV."""

    category: str
    section: str
    key: str
    expected_value: str
    friendly_name: str


@dataclass(frozen=True)
class ProcessMitigationRow:
    """One row of the process-mitigation target table."""

    program_name: str
    mitigation: str
    action: str


@dataclass(frozen=True)
class Baseline:
    """Externally supplied expected-value tables."""

    policy_rows: Tuple[PolicyBaselineRow, ...] = ()
    security_policy_rows: Tuple[SecurityPolicyBaselineRow, ...] = ()
    process_mitigations: Optional[Tuple[ProcessMitigationRow, ...]] = None
