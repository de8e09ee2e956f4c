"""Core components of the compliance engine.

This module provides:
- Typed snapshot records handed over by the snapshot providers
- Dependency injection of the snapshot and baseline for a run
- Embedded baseline tables

The comparison policies, result merge, aggregate store and orchestrator
live in their own submodules.
"""

from .baseline import ASR_RULES, BASELINE_EXPECTED_ITEMS, AsrRule
from .injection import DependencyContainer, get_container, reset_container, set_container
from .interfaces import Baseline, SystemSnapshot

__all__ = [
    # Baseline
    "ASR_RULES",
    "BASELINE_EXPECTED_ITEMS",
    "AsrRule",
    # Dependency Injection
    "DependencyContainer",
    "get_container",
    "reset_container",
    "set_container",
    # Snapshots
    "Baseline",
    "SystemSnapshot",
]
