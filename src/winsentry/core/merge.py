"""Conditional merge of externally sourced baseline rows into a category.

Usage:
    results = [...]  # the checker's own controls
    merge_policy_rows(results, container, "LockScreen", Method.GROUP_POLICY)
    merge_security_policy_rows(results, container, "LockScreen")
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from ..checks.types import Compliance, IndividualResult, Method
from .comparison import equals_ignore_case
from .injection import DependencyContainer
from .interfaces import PolicyBaselineRow, SecurityPolicyBaselineRow

logger = logging.getLogger(__name__)


def is_applicable(row: PolicyBaselineRow, container: DependencyContainer) -> bool:
    """A row naming a required feature applies only where that feature exists."""
    if not row.requires_feature:
        return True
    available = {feature.casefold() for feature in container.snapshot.available_features}
    return row.requires_feature.casefold() in available


def evaluate_policy_rows(
    container: DependencyContainer,
    category: str,
    origin: Method,
) -> List[IndividualResult]:
    """Evaluate the registry-backed baseline rows of one category and origin."""
    results: List[IndividualResult] = []
    for row in container.baseline.policy_rows:
        if row.category != category or not equals_ignore_case(row.origin, origin.value):
            continue
        if not is_applicable(row, container):
            logger.debug("Skipping %s: feature %s not available", row.value_name, row.requires_feature)
            continue
        observed = container.registry_value(row.key, row.value_name)
        if observed is None:
            compliant, value = Compliance.FALSE, "N/A"
        else:
            compliant = Compliance.from_bool(equals_ignore_case(observed, row.expected_value))
            value = observed
        results.append(
            IndividualResult(
                friendly_name=row.friendly_name,
                name=row.value_name,
                category=category,
                compliant=compliant,
                value=value,
                method=origin,
            )
        )
    return results


def evaluate_security_policy_rows(container: DependencyContainer, category: str) -> List[IndividualResult]:
    """Evaluate the security-policy export rows of one category."""
    results: List[IndividualResult] = []
    for row in container.baseline.security_policy_rows:
        if row.category != category:
            continue
        results.append(_evaluate_security_policy_row(container, row))
    return results


def _evaluate_security_policy_row(
    container: DependencyContainer, row: SecurityPolicyBaselineRow
) -> IndividualResult:
    observed = container.security_policy_value(row.section, row.key)
    if observed is None:
        compliant, value = Compliance.FALSE, "N/A"
    else:
        compliant = Compliance.from_bool(equals_ignore_case(observed, row.expected_value))
        value = observed
    return IndividualResult(
        friendly_name=row.friendly_name,
        name=row.key,
        category=row.category,
        compliant=compliant,
        value=value,
        method=Method.SECURITY_POLICY,
    )


def conditional_add(results: List[IndividualResult], result: IndividualResult) -> bool:
    """Append a row unless one with the same identity is already present.

    An existing non-compliant row is replaced in place by a compliant one.

    Returns:
        True if the list changed
    """
    for index, existing in enumerate(results):
        if existing.name != result.name or existing.friendly_name != result.friendly_name:
            continue
        if existing.compliant is not Compliance.TRUE and result.compliant is Compliance.TRUE:
            results[index] = result
            return True
        return False
    results.append(result)
    return True


def merge_rows(results: List[IndividualResult], rows: Iterable[IndividualResult]) -> int:
    added = 0
    for row in rows:
        if conditional_add(results, row):
            added += 1
    return added


def merge_policy_rows(
    results: List[IndividualResult],
    container: DependencyContainer,
    category: str,
    origin: Method,
) -> int:
    """Fold the category's rows of one origin into its result list."""
    changed = merge_rows(results, evaluate_policy_rows(container, category, origin))
    logger.debug("Merged %d %s rows into %s", changed, origin.value, category)
    return changed


def merge_security_policy_rows(
    results: List[IndividualResult],
    container: DependencyContainer,
    category: str,
) -> int:
    changed = merge_rows(results, evaluate_security_policy_rows(container, category))
    logger.debug("Merged %d security policy rows into %s", changed, category)
    return changed
