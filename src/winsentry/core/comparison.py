"""Comparison policies shared by the category checkers.

Each policy is a pure function over snapshot values: it decides whether
a control is compliant and which raw value to report, but never builds
result rows or touches shared state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..checks.types import Compliance
from ..utils.parsers import cim_to_text, pick_first, to_string_list
from .baseline import NOT_CONFIGURED_ACTION, AsrRule
from .interfaces import BitLockerVolume, MDMResult, ProcessMitigationRow

logger = logging.getLogger(__name__)

NORMAL_SECURITY_LEVEL = "Normal Security Level"
ENHANCED_SECURITY_LEVEL = "Enhanced Security Level"

_FIXED_DRIVE_PROTECTORS = frozenset({"RecoveryPassword", "Password", "ExternalKey"})


def equals_ignore_case(observed: Optional[str], expected: str) -> bool:
    """Ordinal, case-insensitive string equality. None never matches."""
    if observed is None:
        return False
    return observed.casefold() == expected.casefold()


def equals_any(observed: Optional[str], allowed: Iterable[str]) -> bool:
    """True if the observed value matches any member of the allow-set."""
    return any(equals_ignore_case(observed, candidate) for candidate in allowed)


# =============================================================================
# Exact-match policy
# =============================================================================


@dataclass(frozen=True)
class ValueMatch:
    """Outcome of comparing one key of an observed dictionary."""

    is_match: bool
    value: str


def check_value(observed: Mapping[str, Any], key: str, expected: str) -> ValueMatch:
    """Compare observed[key] against the expected value.

    A missing key is a mismatch reported with the value "N/A".
    """
    if key not in observed or observed[key] is None:
        logger.debug("Key %s not present in observed policy", key)
        return ValueMatch(False, "N/A")
    value = cim_to_text(observed[key])
    return ValueMatch(equals_ignore_case(value, expected), value)


def mdm_value(results: Sequence[MDMResult], name: str) -> Optional[str]:
    """First value reported for an MDM policy name."""
    return pick_first(result.value for result in results if result.name == name)


def mdm_value_matches(results: Sequence[MDMResult], name: str, expected: str) -> bool:
    return equals_ignore_case(mdm_value(results, name), expected)


# =============================================================================
# Rule-table evaluation (attack surface reduction)
# =============================================================================


@dataclass(frozen=True)
class AsrEvaluation:
    rule: AsrRule
    action: str
    compliant: bool

    @property
    def rule_id(self) -> str:
        return self.rule.rule_id.lower()


def resolve_asr_action(rule_id: str, ids: Optional[Sequence[str]], actions: Optional[Sequence[str]]) -> str:
    """Find the configured action of a rule; not configured when absent."""
    if not ids:
        return NOT_CONFIGURED_ACTION
    wanted = rule_id.lower()
    index = next((i for i, candidate in enumerate(ids) if candidate == wanted), None)
    if index is None or actions is None:
        return NOT_CONFIGURED_ACTION
    if index >= len(actions):
        logger.warning("ASR rule %s has no paired action; treating as not configured", rule_id)
        return NOT_CONFIGURED_ACTION
    return actions[index]


def evaluate_asr_rules(
    rules: Iterable[AsrRule],
    ids: Any,
    actions: Any,
) -> List[AsrEvaluation]:
    """Evaluate every rule of the table against the configured id/action arrays."""
    id_list = to_string_list(ids)
    action_list = to_string_list(actions)
    if id_list is not None:
        id_list = [rule_id.lower() for rule_id in id_list]

    evaluations: List[AsrEvaluation] = []
    for rule in rules:
        action = resolve_asr_action(rule.rule_id, id_list, action_list)
        evaluations.append(
            AsrEvaluation(rule=rule, action=action, compliant=action in rule.allowed_actions)
        )
    return evaluations


# =============================================================================
# Disk-encryption classification
# =============================================================================


def classify_os_drive(volume: Optional[BitLockerVolume]) -> Tuple[Compliance, str]:
    """Classify the OS drive's BitLocker configuration.

    Returns:
        Compliance state and the security level (or "False")
    """
    if volume is None or volume.protection_status != "Protected":
        return Compliance.FALSE, "False"
    protectors = set(volume.key_protectors)
    if "RecoveryPassword" not in protectors:
        return Compliance.FALSE, "False"
    if "TpmPin" in protectors:
        return Compliance.TRUE, NORMAL_SECURITY_LEVEL
    if "TpmPinStartupKey" in protectors:
        return Compliance.TRUE, ENHANCED_SECURITY_LEVEL
    return Compliance.FALSE, "False"


def classify_fixed_drive(volume: BitLockerVolume) -> Tuple[Compliance, str]:
    """Classify a non-OS fixed drive.

    An "Unknown" protection status means the volume is encrypted and locked.
    """
    if volume.protection_status not in ("Protected", "Unknown"):
        return Compliance.FALSE, "Not encrypted"
    if _FIXED_DRIVE_PROTECTORS.intersection(volume.key_protectors):
        return Compliance.TRUE, "Encrypted"
    return Compliance.FALSE, "Not properly encrypted"


def non_os_fixed_drives(volumes: Iterable[BitLockerVolume]) -> List[BitLockerVolume]:
    """Fixed data drives ordered by mount point, each mount point once."""
    unique: Dict[str, BitLockerVolume] = {}
    for volume in volumes:
        if volume.volume_type != "FixedDisk":
            continue
        unique.setdefault(volume.mount_point.upper(), volume)
    return [unique[key] for key in sorted(unique)]


# =============================================================================
# Process-mitigation diffing
# =============================================================================


class MitigationOutcome(str, Enum):
    COMPLIANT = "compliant"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MitigationDiff:
    program: str
    outcome: MitigationOutcome
    target: Tuple[str, ...]
    applied: Tuple[str, ...]

    @property
    def compliant(self) -> bool:
        return self.outcome is MitigationOutcome.COMPLIANT

    @property
    def value(self) -> str:
        if self.outcome is MitigationOutcome.COMPLIANT:
            return ",".join(self.target)
        if self.outcome is MitigationOutcome.MISMATCH:
            return ",".join(self.applied)
        return "N/A"


def _dedupe_ci(items: Iterable[str]) -> Tuple[str, ...]:
    seen: Dict[str, str] = {}
    for item in items:
        seen.setdefault(item.casefold(), item)
    return tuple(seen.values())


def group_enabled_mitigations(rows: Iterable[ProcessMitigationRow]) -> Dict[str, Tuple[str, ...]]:
    """Group "Enable" rows by program name, case-insensitively, in first-seen order."""
    names: Dict[str, str] = {}
    grouped: Dict[str, List[str]] = {}
    for row in rows:
        if not row.action or row.action.casefold() != "enable":
            continue
        key = row.program_name.casefold()
        names.setdefault(key, row.program_name)
        grouped.setdefault(key, []).append(row.mitigation)
    return {names[key]: tuple(mitigations) for key, mitigations in grouped.items()}


def diff_process_mitigations(
    rows: Iterable[ProcessMitigationRow],
    applied: Optional[Mapping[str, Sequence[str]]],
) -> List[MitigationDiff]:
    """Compare target mitigations per program with what the system applies."""
    applied_ci: Dict[str, Tuple[str, ...]] = {}
    for program, mitigations in (applied or {}).items():
        applied_ci[program.casefold()] = _dedupe_ci(mitigations)

    diffs: List[MitigationDiff] = []
    for program, target in group_enabled_mitigations(rows).items():
        current = applied_ci.get(program.casefold())
        if current is None:
            logger.debug("Mitigations for %s were not found", program)
            diffs.append(MitigationDiff(program, MitigationOutcome.NOT_FOUND, target, ()))
            continue
        target_set = {item.casefold() for item in target}
        current_set = {item.casefold() for item in current}
        if target_set == current_set:
            logger.debug("Mitigations for %s are compliant", program)
            outcome = MitigationOutcome.COMPLIANT
        else:
            logger.debug(
                "Mitigations for %s were found but are not compliant (applied: %s, target: %s)",
                program,
                ",".join(current),
                ",".join(target),
            )
            outcome = MitigationOutcome.MISMATCH
        diffs.append(MitigationDiff(program, outcome, target, current))
    return diffs


# =============================================================================
# Ordered sequence comparison (TLS ECC curves)
# =============================================================================


def sequence_equals_ignore_case(observed: Optional[Sequence[str]], expected: Sequence[str]) -> bool:
    if observed is None or len(observed) != len(expected):
        return False
    return all(equals_ignore_case(a, b) for a, b in zip(observed, expected))
