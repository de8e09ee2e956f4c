"""Base classes and registry for the category checkers."""
from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from ..core.injection import DependencyContainer, get_container
from ..core.interfaces import SystemSnapshot
from ..core.merge import merge_policy_rows, merge_security_policy_rows
from ..exceptions import MissingSnapshotError
from .types import Compliance, IndividualResult, Method, canonical_category

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CheckRegistry:
    """Registry of category checkers, one per category."""

    _registry: ClassVar[Dict[str, Type["CategoryChecker"]]] = {}

    @classmethod
    def register(cls, check_cls: Type["CategoryChecker"]) -> None:
        if not check_cls.category:
            raise ValueError(f"Category checker {check_cls.__name__} must define a category")
        category = canonical_category(check_cls.category)
        if category is None:
            raise ValueError(f"Unknown category for {check_cls.__name__}: {check_cls.category}")
        if category in cls._registry:
            raise ValueError(f"Duplicate checker registered for category: {category}")
        cls._registry[category] = check_cls
        logger.debug("Registered category checker: %s", category)

    @classmethod
    def get_all(cls) -> Iterable[Type["CategoryChecker"]]:
        return cls._registry.values()

    @classmethod
    def snapshot(cls) -> Mapping[str, Type["CategoryChecker"]]:
        """Immutable copy of the registry, handed to the orchestrator."""
        return MappingProxyType(dict(cls._registry))

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


class CategoryCheckerMeta(abc.ABCMeta):
    """Metaclass that auto-registers concrete category checkers."""

    def __new__(mcls, name: str, bases: Tuple[type, ...], namespace: Dict[str, Any]):
        cls = super().__new__(mcls, name, bases, namespace)
        auto_register = namespace.get("auto_register", True)
        if auto_register and not inspect_is_abstract(cls):
            CheckRegistry.register(cls)
        return cls


def inspect_is_abstract(cls: Type["CategoryChecker"]) -> bool:
    """Helper to determine whether a class is abstract."""

    abstract_methods = getattr(cls, "__abstractmethods__", set())
    return bool(abstract_methods)


@dataclass(frozen=True)
class CategoryReport:
    """What one checker run hands back to the orchestrator."""

    category: str
    results: Tuple[IndividualResult, ...]
    expected_delta: int = 0


class CategoryChecker(metaclass=CategoryCheckerMeta):
    """Base class for the category checkers.

    Subclasses implement evaluate() and record controls with add(). The
    baseline merges named by policy_origins and merge_security_policies
    run afterwards, in that order.
    """

    auto_register: ClassVar[bool] = True
    category: ClassVar[str] = ""
    description: ClassVar[str] = ""
    policy_origins: ClassVar[Tuple[Method, ...]] = ()
    merge_security_policies: ClassVar[bool] = False

    def __init__(self, container: Optional[DependencyContainer] = None) -> None:
        self.container = container or get_container()
        self._results: List[IndividualResult] = []
        self._expected_delta = 0

    @property
    def snapshot(self) -> SystemSnapshot:
        return self.container.snapshot

    @abc.abstractmethod
    def evaluate(self) -> None:
        """Evaluate the category's built-in controls."""

    def add(
        self,
        friendly_name: str,
        name: str,
        compliant: Compliance | bool,
        value: Any,
        method: Method,
    ) -> IndividualResult:
        if isinstance(compliant, bool):
            compliant = Compliance.from_bool(compliant)
        result = IndividualResult(
            friendly_name=friendly_name,
            name=name,
            category=self.category,
            compliant=compliant,
            value="" if value is None else str(value),
            method=method,
        )
        logger.debug("%s: %s -> %s (%s)", self.category, name, compliant.value, result.value)
        self._results.append(result)
        return result

    def adjust_expected(self, delta: int) -> None:
        self._expected_delta += delta

    def require(self, value: Optional[T], snapshot_name: str) -> T:
        """Return a mandatory snapshot value or fail the whole category."""
        if value is None:
            raise MissingSnapshotError(self.category, snapshot_name)
        return value

    def check(self) -> CategoryReport:
        """Run the category and return its ordered results and counter delta."""
        logger.debug("Running category %s", self.category)
        self._results = []
        self._expected_delta = 0

        self.evaluate()
        for origin in self.policy_origins:
            merge_policy_rows(self._results, self.container, self.category, origin)
        if self.merge_security_policies:
            merge_security_policy_rows(self._results, self.container, self.category)

        logger.debug(
            "Category %s produced %d results (expected delta %+d)",
            self.category,
            len(self._results),
            self._expected_delta,
        )
        return CategoryReport(self.category, tuple(self._results), self._expected_delta)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(category={self.category!r})"
