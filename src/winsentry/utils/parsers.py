"""Parsers and helpers for interpreting provider output and baseline tables."""
from __future__ import annotations

import configparser
import csv
import io
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..checks.types import canonical_category
from ..core.interfaces import (
    PolicyBaselineRow,
    ProcessMitigationRow,
    SecurityPolicyBaselineRow,
)
from ..exceptions import BaselineError

logger = logging.getLogger(__name__)

BOOLEAN_TRUE = {"1", "true", "yes", "on", "enabled"}
BOOLEAN_FALSE = {"0", "false", "no", "off", "disabled", ""}


def cim_to_text(value: Any) -> str:
    """Render a CIM property the way the reporting layer displays it."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


def cim_to_bool(value: Any) -> bool:
    """Interpret a CIM boolean-style property. Missing counts as False."""

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    normalized = str(value).strip().lower()
    if normalized in BOOLEAN_TRUE:
        return True
    if normalized in BOOLEAN_FALSE:
        return False
    logger.debug("Unrecognised boolean value %r treated as False", value)
    return False


def to_string_list(value: Any) -> Optional[List[str]]:
    """Normalise an array property that may arrive as strings or raw bytes."""

    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return [str(b) for b in value]
    if isinstance(value, str):
        return [value]
    return [cim_to_text(item) for item in value]


def parse_auditpol_inclusion_setting(output: Optional[str]) -> Optional[str]:
    """Extract the "Inclusion Setting" column from `auditpol /get ... /r` output.

    Only the first data row is considered.
    """

    if output is None or not output.strip():
        return None
    reader = csv.reader(io.StringIO(output.strip()))
    try:
        headers = next(reader)
    except StopIteration:
        return None
    headers = [h.strip() for h in headers]
    if "Inclusion Setting" not in headers:
        return None
    index = headers.index("Inclusion Setting")
    for row in reader:
        if not row:
            continue
        if index < len(row):
            return row[index].strip()
        return None
    return None


def parse_security_policy_ini(text: str) -> Dict[str, Dict[str, str]]:
    """Parse a secedit /export INI document into section -> key -> value.

    Lines without "=" are skipped. Unparseable output yields an empty map.
    """

    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        allow_no_value=True,
        delimiters=("=",),
        comment_prefixes=(";",),
    )
    parser.optionxform = str  # preserve key casing
    try:
        parser.read_string(text.lstrip("\ufeff"))
    except configparser.Error as exc:
        logger.warning("Unable to parse security policy export: %s", exc)
        return {}
    return {
        section: {
            key.strip(): value.strip()
            for key, value in parser.items(section)
            if value is not None
        }
        for section in parser.sections()
    }


def _read_csv(text: str, required: Sequence[str]) -> List[Mapping[str, str]]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    headers = [h.strip() for h in reader.fieldnames or []]
    missing = [column for column in required if column not in headers]
    if missing:
        raise BaselineError("Baseline CSV is missing columns", {"missing": ",".join(missing)})
    rows: List[Mapping[str, str]] = []
    for raw in reader:
        rows.append({(k or "").strip(): (v or "").strip() for k, v in raw.items()})
    return rows


def _category(raw: str) -> str:
    category = canonical_category(raw)
    if category is None:
        raise BaselineError("Unknown category in baseline", {"category": raw})
    return category


def parse_policy_baseline_csv(text: str) -> Tuple[PolicyBaselineRow, ...]:
    """Parse the registry/group-policy baseline table."""

    rows = _read_csv(text, ("Origin", "Category", "Key", "Name", "FriendlyName", "Value"))
    return tuple(
        PolicyBaselineRow(
            origin=row["Origin"],
            category=_category(row["Category"]),
            key=row["Key"],
            value_name=row["Name"],
            friendly_name=row["FriendlyName"],
            expected_value=row["Value"],
            requires_feature=row.get("RequiresFeature") or None,
        )
        for row in rows
    )


def parse_security_policy_baseline_csv(text: str) -> Tuple[SecurityPolicyBaselineRow, ...]:
    """Parse the security-policy verification table."""

    rows = _read_csv(text, ("Category", "Section", "Path", "Value", "Name"))
    return tuple(
        SecurityPolicyBaselineRow(
            category=_category(row["Category"]),
            section=row["Section"],
            key=row["Path"],
            expected_value=row["Value"],
            friendly_name=row["Name"],
        )
        for row in rows
    )


def parse_process_mitigations_csv(text: str) -> Tuple[ProcessMitigationRow, ...]:
    """Parse the process-mitigation target table."""

    rows = _read_csv(text, ("ProgramName", "Mitigation", "Action"))
    return tuple(
        ProcessMitigationRow(
            program_name=row["ProgramName"],
            mitigation=row["Mitigation"],
            action=row["Action"],
        )
        for row in rows
        if row["ProgramName"]
    )


def pick_first(iterable: Iterable[Any]) -> Any | None:
    for item in iterable:
        return item
    return None
