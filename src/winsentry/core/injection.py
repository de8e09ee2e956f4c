"""Dependency injection container for snapshot data.

Checkers never query the system themselves. The snapshot providers run
first, their output is frozen into a SystemSnapshot, and the container
hands it to every checker of the run. Tests inject their own snapshot.

Usage:
    # Production code
    container = DependencyContainer(snapshot=collected, baseline=baseline)
    orchestrator = ComplianceOrchestrator(container=container)

    # Test code
    set_container(DependencyContainer(snapshot=SystemSnapshot()))
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .interfaces import Baseline, SystemSnapshot

logger = logging.getLogger(__name__)

# Global container instance (singleton pattern)
_container: Optional["DependencyContainer"] = None


def _lookup_ci(mapping: Mapping[str, object], key: str) -> Optional[object]:
    """Case-insensitive mapping lookup, exact match first."""
    if key in mapping:
        return mapping[key]
    folded = key.casefold()
    for candidate, value in mapping.items():
        if candidate.casefold() == folded:
            return value
    return None


@dataclass
class DependencyContainer:
    """Container for all injectable dependencies.

    Attributes:
        snapshot: Live system state collected by the snapshot providers
        baseline: Expected-value tables for the run
    """

    snapshot: SystemSnapshot = field(default_factory=SystemSnapshot)
    baseline: Baseline = field(default_factory=Baseline)

    def registry_value(self, key: str, value_name: str) -> Optional[str]:
        """Look up a registry value in the snapshot.

        Registry paths and value names are case-insensitive on Windows.

        Returns:
            The value as text, or None if the key or value is absent
        """
        values = _lookup_ci(self.snapshot.registry, key.rstrip("\\"))
        if values is None:
            return None
        found = _lookup_ci(values, value_name)  # type: ignore[arg-type]
        return None if found is None else str(found)

    def security_policy_value(self, section: str, key: str) -> Optional[str]:
        """Look up a value in the parsed security-policy export."""
        values = _lookup_ci(self.snapshot.security_policy, section)
        if values is None:
            return None
        found = _lookup_ci(values, key)  # type: ignore[arg-type]
        return None if found is None else str(found).strip()


def get_container() -> DependencyContainer:
    """Get the global dependency container.

    Returns the singleton container instance, creating an empty one
    if none was set.
    """
    global _container
    if _container is None:
        logger.debug("No dependency container set; using an empty snapshot")
        _container = DependencyContainer()
    return _container


def set_container(container: DependencyContainer) -> None:
    """Set the global dependency container."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container to None."""
    global _container
    _container = None
