"""winsentry - Windows hardening compliance evaluation engine."""
from __future__ import annotations

__version__ = "1.0.0"

from .audit import configure_logging, run_compliance_audit
from .checks.types import CATEGORY_NAMES, Compliance, IndividualResult, Method

__all__ = [
    "__version__",
    "CATEGORY_NAMES",
    "Compliance",
    "IndividualResult",
    "Method",
    "configure_logging",
    "run_compliance_audit",
]
