"""Exception classes for winsentry.

All exceptions raised by the compliance engine inherit from WinsentryError
so the outer tool can catch them in one place.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from .core.orchestrator import AuditResult


class WinsentryError(Exception):
    """Base exception with context."""

    def __init__(self, msg: str, ctx: Optional[Dict[str, Any]] = None):
        super().__init__(msg)
        self.msg = msg
        self.ctx = ctx or {}

    def __str__(self) -> str:
        if self.ctx:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{self.msg} [{ctx_str}]"
        return self.msg


class MissingSnapshotError(WinsentryError):
    """Raised when a mandatory snapshot was never populated."""

    def __init__(self, category: str, snapshot_name: str):
        super().__init__(
            f"{snapshot_name} cannot be None",
            {"category": category, "snapshot": snapshot_name},
        )
        self.category = category
        self.snapshot_name = snapshot_name


class BaselineError(WinsentryError):
    """Raised when a baseline table is malformed."""


class CategoryExecutionError(WinsentryError):
    """Raised once every category has finished and at least one faulted.

    Attributes:
        failures: category identifier -> exception raised by its checker
        result: partial audit result holding the categories that completed
    """

    def __init__(self, failures: Mapping[str, BaseException], result: "AuditResult"):
        names = ", ".join(sorted(failures))
        super().__init__(
            f"{len(failures)} compliance categor{'y' if len(failures) == 1 else 'ies'} failed: {names}",
            {"completed": len(result.store)},
        )
        self.failures = dict(failures)
        self.result = result
