"""Programmatic entry point of the compliance engine."""
from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Iterable, Optional

from .core.injection import DependencyContainer
from .core.interfaces import Baseline, SystemSnapshot
from .core.orchestrator import AuditResult, CheckerRegistry, ComplianceOrchestrator, OrchestratorConfig

logger = logging.getLogger(__name__)


def _default_log_dir() -> Path:
    local_app_data = os.environ.get("LOCALAPPDATA")
    base = Path(local_app_data) if local_app_data else Path.home()
    return base / "winsentry" / "Logs"


def configure_logging(level: int = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """Configure logging for the application.

    Logs are written to %LOCALAPPDATA%\\winsentry\\Logs\\audit.log
    with automatic rotation at 5MB and 3 backup files retained.
    """
    log_dir = Path(log_dir) if log_dir is not None else _default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "audit.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Rotating file handler: 5MB max, keep 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(level=level, handlers=[file_handler, console_handler])


def run_compliance_audit(
    snapshot: SystemSnapshot,
    baseline: Baseline,
    categories: Iterable[str] = (),
    config: Optional[OrchestratorConfig] = None,
    registry: Optional[CheckerRegistry] = None,
) -> AuditResult:
    """Evaluate a collected snapshot against the baseline.

    Args:
        snapshot: System state handed over by the snapshot providers
        baseline: Externally supplied baseline tables
        categories: Category identifiers to run (all when empty)
        config: Run configuration
        registry: Category -> checker map (bundled checkers if None)

    Returns:
        The aggregate store and final expected-item count

    Raises:
        CategoryExecutionError: one or more categories faulted
    """
    container = DependencyContainer(snapshot=snapshot, baseline=baseline)
    orchestrator = ComplianceOrchestrator(registry=registry, container=container, config=config)
    return orchestrator.run_categories(categories)
