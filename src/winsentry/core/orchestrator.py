"""Parallel execution of the category checkers.

Every selected category runs as its own unit of work on a thread pool.
A unit evaluates its checker and commits the category to the aggregate
store in one step, so a category is either fully present or absent.
Counter adjustments are returned by each unit and summed only after all
units have finished.

Usage:
    orchestrator = ComplianceOrchestrator(container=container)
    result = orchestrator.run_categories(["BitLockerSettings", "TLSSecurity"])
    result.store.get("TLSSecurity")
"""
from __future__ import annotations

import concurrent.futures
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Type

from ..checks.base import CategoryChecker, CategoryReport
from ..exceptions import CategoryExecutionError
from .baseline import BASELINE_EXPECTED_ITEMS
from .injection import DependencyContainer, get_container
from .store import AggregateStore, ExpectedItemCounter

logger = logging.getLogger(__name__)

CheckerRegistry = Mapping[str, Type[CategoryChecker]]


def _default_workers() -> int:
    return min(8, os.cpu_count() or 4)


@dataclass
class OrchestratorConfig:
    """Configuration for a compliance run."""

    # Maximum parallel workers (capped at the number of selected categories)
    max_workers: int = field(default_factory=_default_workers)

    # Starting value of the expected-compliant-item counter
    expected_total: int = BASELINE_EXPECTED_ITEMS

    # Categories removed from every selection
    skip_categories: List[str] = field(default_factory=list)


@dataclass
class AuditResult:
    """The aggregate store and final counter value of one run."""

    store: AggregateStore
    expected_total: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "results": self.store.to_dict(),
            "expected_total": self.expected_total,
        }


class ComplianceOrchestrator:
    """Resolves, schedules and joins category checkers."""

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        container: Optional[DependencyContainer] = None,
        config: Optional[OrchestratorConfig] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Category -> checker map (bundled checkers if None)
            container: Dependency container (uses global if None)
            config: Run configuration
        """
        if registry is None:
            from ..checks import default_registry

            registry = default_registry()
        self.registry = registry
        self.container = container or get_container()
        self.config = config or OrchestratorConfig()
        self._lookup = {category.lower(): category for category in registry}

    def resolve(self, selected: Iterable[str] = ()) -> List[str]:
        """Resolve requested identifiers to registered categories.

        Matching is case-insensitive and unknown identifiers are dropped.
        An empty selection means every registered category.
        """
        if isinstance(selected, str):
            selected = (selected,)
        requested = [name for name in selected if name and name.strip()]
        if not requested:
            categories = list(self.registry)
        else:
            wanted = set()
            for name in requested:
                category = self._lookup.get(name.strip().lower())
                if category is None:
                    logger.debug("Ignoring unknown category %r", name)
                    continue
                wanted.add(category)
            categories = [category for category in self.registry if category in wanted]

        skipped = {name.strip().lower() for name in self.config.skip_categories}
        return [category for category in categories if category.lower() not in skipped]

    def run_categories(self, selected: Iterable[str] = ()) -> AuditResult:
        """Run the selected categories and wait for all of them.

        Raises:
            CategoryExecutionError: one or more categories faulted; the
                partial result of the others is attached
        """
        categories = self.resolve(selected)
        store = AggregateStore()
        counter = ExpectedItemCounter(self.config.expected_total)
        failures: Dict[str, BaseException] = {}

        if not categories:
            logger.info("No categories selected")
            return AuditResult(store=store, expected_total=counter.value)

        workers = max(1, min(self.config.max_workers, len(categories)))
        logger.info("Running %d compliance categories with %d workers", len(categories), workers)

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._run_unit, self.registry[category], store): category
                for category in categories
            }
            concurrent.futures.wait(futures)

        for future, category in futures.items():
            exc = future.exception()
            if exc is not None:
                logger.error(
                    "Category %s failed: %s - %s",
                    category,
                    type(exc).__name__,
                    exc,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )
                failures[category] = exc
                continue
            counter.adjust(future.result().expected_delta)

        result = AuditResult(store=store, expected_total=counter.value)
        if failures:
            raise CategoryExecutionError(failures, result)
        logger.info(
            "Compliance run finished: %d categories, %d expected items",
            len(store),
            result.expected_total,
        )
        return result

    def _run_unit(self, checker_cls: Type[CategoryChecker], store: AggregateStore) -> CategoryReport:
        start = time.perf_counter()
        report = checker_cls(self.container).check()
        store.add(report.category, report.results)
        logger.debug(
            "Category %s finished in %.1fms",
            report.category,
            (time.perf_counter() - start) * 1000,
        )
        return report
