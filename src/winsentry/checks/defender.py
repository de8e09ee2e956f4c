"""Microsoft Defender and exploit protection checks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple, Union

from ..core.baseline import DEFENDER_UPDATE_CHANNELS, DRIVER_BLOCK_LIST_TASK, MDM_SYSTEM
from ..core.comparison import check_value, diff_process_mitigations, equals_any, equals_ignore_case
from ..core.interfaces import DefenderPreferences
from ..utils.parsers import cim_to_bool, cim_to_text
from .base import CategoryChecker
from .types import Compliance, Method

logger = logging.getLogger(__name__)

NX_CONTROL = "Boot Configuration Data (BCD) No-eXecute (NX) Value"
ASLR_CONTROL = "Mandatory ASLR"
DRIVER_BLOCK_LIST_CONTROL = "Fast weekly Microsoft recommended driver block list update"
SMART_APP_CONTROL = "Smart App Control State"


@dataclass(frozen=True)
class FlagControl:
    """A boolean preference; inverted flags are compliant when False."""

    attribute: str
    name: str
    inverted: bool = False


@dataclass(frozen=True)
class ValueControl:
    """A preference compliant when it equals one of the accepted values."""

    attribute: str
    name: str
    accepted: FrozenSet[str]
    mask_mismatch: bool = False  # report "N/A" instead of the observed value


PreferenceControl = Union[FlagControl, ValueControl]

# Evaluated before the smart app control row
LEADING_PREFERENCES: Tuple[PreferenceControl, ...] = (
    FlagControl("allow_switch_to_async_inspection", "Allow Switch To Async Inspection"),
    FlagControl("oobe_enable_rtp_and_sig_update", "OOBE Enable Rtp And Sig Update"),
    FlagControl("intel_tdt_enabled", "Intel TDT Enabled"),
)

_BLOCK_TIME = frozenset({"0", "4294967295"})

PREFERENCES: Tuple[PreferenceControl, ...] = (
    ValueControl("enable_controlled_folder_access", "Controlled Folder Access", frozenset({"1"})),
    FlagControl("disable_restore_point", "Enable Restore Point scanning", inverted=True),
    ValueControl("performance_mode_status", "Performance Mode Status", frozenset({"0"})),
    FlagControl("enable_convert_warn_to_block", "Enable Convert Warn To Block"),
    ValueControl("brute_force_protection_aggressiveness", "BruteForce Protection Aggressiveness", frozenset({"1", "2"}), True),
    ValueControl("brute_force_protection_max_block_time", "BruteForce Protection Max Block Time", _BLOCK_TIME, True),
    ValueControl("brute_force_protection_configured_state", "BruteForce Protection Configured State", frozenset({"1"})),
    ValueControl("remote_encryption_protection_max_block_time", "Remote Encryption Protection Max Block Time", _BLOCK_TIME, True),
    ValueControl("remote_encryption_protection_aggressiveness", "Remote Encryption Protection Aggressiveness", frozenset({"1", "2"})),
    ValueControl("remote_encryption_protection_configured_state", "Remote Encryption Protection Configured State", frozenset({"1"})),
    ValueControl("cloud_block_level", "Cloud Block Level", frozenset({"6"})),
    FlagControl("disable_email_scanning", "Email Scanning", inverted=True),
    ValueControl("submit_samples_consent", "Send file samples when further analysis is required", frozenset({"3"})),
    ValueControl("maps_reporting", "Join Microsoft MAPS (aka SpyNet)", frozenset({"2"})),
    FlagControl("enable_file_hash_computation", "File Hash Computation"),
    ValueControl("cloud_extended_timeout", "Extended cloud check (Seconds)", frozenset({"50"})),
    ValueControl("pua_protection", "Detection for potentially unwanted applications", frozenset({"1"})),
    FlagControl("disable_catchup_quick_scan", "Catchup Quick Scan", inverted=True),
    FlagControl("check_for_signatures_before_running_scan", "Check For Signatures Before Running Scan"),
    ValueControl("enable_network_protection", "Enable Network Protection", frozenset({"1"})),
    ValueControl("signature_update_interval", "Interval to check for security intelligence updates", frozenset({"3"})),
    FlagControl("metered_connection_updates", "Allows Microsoft Defender Antivirus to update over a metered connection"),
    ValueControl("severe_threat_default_action", "Severe Threat level default action = Remove", frozenset({"3"})),
    ValueControl("high_threat_default_action", "High Threat level default action = Remove", frozenset({"3"})),
    ValueControl("moderate_threat_default_action", "Moderate Threat level default action = Quarantine", frozenset({"2"})),
    ValueControl("low_threat_default_action", "Low Threat level default action = Quarantine", frozenset({"2"})),
)

TELEMETRY_CONTROLS = (
    ("AllowTelemetry", "Optional Diagnostic Data Required for Smart App Control etc.", "3"),
    ("ConfigureTelemetryOptInSettingsUx", "Configure diagnostic data opt-in settings user interface", "1"),
)


def channel_name(channel: Optional[int]) -> str:
    """Resolve a Defender update channel number to its name."""
    if channel is None:
        return ""
    try:
        return DEFENDER_UPDATE_CHANNELS.get(int(channel), "")
    except (TypeError, ValueError):
        logger.debug("Unrecognised update channel %r", channel)
        return ""


class MicrosoftDefenderCheck(CategoryChecker):
    """Exploit protection, Defender preferences and diagnostic data."""

    category = "MicrosoftDefender"
    description = "Checks exploit protection, Defender antivirus preferences and telemetry."
    policy_origins = (Method.GROUP_POLICY,)

    def evaluate(self) -> None:
        self._check_nx()
        self._check_mandatory_aslr()
        self._check_process_mitigations()

        task_enabled = bool(self.snapshot.scheduled_tasks.get(DRIVER_BLOCK_LIST_TASK, False))
        self.add(DRIVER_BLOCK_LIST_CONTROL, DRIVER_BLOCK_LIST_CONTROL, task_enabled, str(task_enabled), Method.CIM)

        preferences = self.require(self.snapshot.defender_preferences, "defender_preferences")
        self._check_update_channels(preferences)
        self._check_preferences(preferences)

        system = self.require(self.snapshot.mdm_policies.get(MDM_SYSTEM), "mdm_policies[System]")
        for key, control, expected in TELEMETRY_CONTROLS:
            match = check_value(system, key, expected)
            self.add(control, control, match.is_match, match.value, Method.CIM)

    def _check_nx(self) -> None:
        nx_value = self.snapshot.nx_value
        if nx_value is None:
            logger.warning("No NX value retrieved from the boot configuration")
            self.add(NX_CONTROL, NX_CONTROL, Compliance.FALSE, "N/A", Method.CMDLET)
            return
        self.add(NX_CONTROL, NX_CONTROL, nx_value == "3", nx_value, Method.CMDLET)

    def _check_mandatory_aslr(self) -> None:
        relocate = self.snapshot.force_relocate_images
        if relocate is None:
            logger.warning("ForceRelocateImages is not available")
            self.add(ASLR_CONTROL, ASLR_CONTROL, Compliance.FALSE, "False", Method.CMDLET)
            return
        self.add(ASLR_CONTROL, ASLR_CONTROL, equals_ignore_case(relocate, "ON"), relocate, Method.CMDLET)

    def _check_process_mitigations(self) -> None:
        targets = self.require(self.container.baseline.process_mitigations, "process_mitigations")
        applied = self.snapshot.applied_mitigations
        if applied is None:
            logger.warning("No process mitigation policy exported; treating every program as unmitigated")

        for diff in diff_process_mitigations(targets, applied):
            # One scoreable item per program in the mitigation table
            self.adjust_expected(1)
            control = f"Process Mitigations for: {diff.program}"
            self.add(control, control, diff.compliant, diff.value, Method.CMDLET)

    def _check_update_channels(self, preferences: DefenderPreferences) -> None:
        platform = self.require(preferences.platform_updates_channel, "platform_updates_channel")
        for control, channel in (
            ("Microsoft Defender Platform Updates Channel", platform),
            ("Microsoft Defender Engine Updates Channel", preferences.engine_updates_channel),
        ):
            self.add(control, control, Compliance.NOT_APPLICABLE, channel_name(channel), Method.CIM)

        exclusions = ", ".join(preferences.controlled_folder_access_allowed_applications or ())
        control = "Controlled Folder Access Exclusions"
        self.add(control, control, Compliance.NOT_APPLICABLE, exclusions, Method.CIM)

    def _check_preferences(self, preferences: DefenderPreferences) -> None:
        for control in LEADING_PREFERENCES:
            self._add_preference(preferences, control)

        configuration = self.snapshot.defender_configuration
        state = cim_to_text(configuration.smart_app_control_state if configuration else None)
        self.add(SMART_APP_CONTROL, SMART_APP_CONTROL, equals_ignore_case(state, "on"), state, Method.CIM)

        for control in PREFERENCES:
            self._add_preference(preferences, control)

    def _add_preference(self, preferences: DefenderPreferences, control: PreferenceControl) -> None:
        raw = getattr(preferences, control.attribute)
        if isinstance(control, FlagControl):
            flag = cim_to_bool(raw)
            compliant = not flag if control.inverted else flag
            self.add(control.name, control.name, compliant, str(compliant), Method.CIM)
            return

        value = cim_to_text(raw)
        compliant = equals_any(value, control.accepted)
        if not compliant and control.mask_mismatch:
            value = "N/A"
        self.add(control.name, control.name, compliant, value, Method.CIM)
