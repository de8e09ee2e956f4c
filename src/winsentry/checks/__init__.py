"""Category checker implementations for the compliance engine."""
from __future__ import annotations

from importlib import import_module
from types import MappingProxyType
from typing import Iterable, Mapping

from .base import CategoryChecker, CheckRegistry
from .types import CATEGORY_NAMES

_CHECK_MODULES: tuple[str, ...] = (
    "attack_surface",
    "policies",
    "device_guard",
    "bitlocker",
    "miscellaneous",
    "networking",
    "features",
    "tls",
    "firewall",
    "defender",
)


def load_checks() -> Iterable[type[CategoryChecker]]:
    """Import all checker modules to populate the registry."""

    for module_name in _CHECK_MODULES:
        import_module(f"{__name__}.{module_name}")
    return CheckRegistry.get_all()


def default_registry() -> Mapping[str, type[CategoryChecker]]:
    """Immutable category -> checker map of the bundled checkers, in category order."""

    load_checks()
    registered = CheckRegistry.snapshot()
    return MappingProxyType({name: registered[name] for name in CATEGORY_NAMES if name in registered})
