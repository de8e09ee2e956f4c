"""Aggregate store and expected-item counter for one audit run."""
from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..checks.types import IndividualResult

logger = logging.getLogger(__name__)


class AggregateStore:
    """Category -> ordered results. Each category can be committed once.

    Checkers commit from worker threads, so insertion is serialised by a
    lock. A committed category is stored as a tuple and never replaced.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: Dict[str, Tuple[IndividualResult, ...]] = {}

    def add(self, category: str, results: Iterable[IndividualResult]) -> bool:
        """Commit a category's results.

        Returns:
            False if the category was already committed (nothing changes)
        """
        rows = tuple(results)
        with self._lock:
            if category in self._results:
                logger.warning("Category %s already committed; ignoring new results", category)
                return False
            self._results[category] = rows
        logger.debug("Committed %d results for %s", len(rows), category)
        return True

    def get(self, category: str) -> Optional[Tuple[IndividualResult, ...]]:
        with self._lock:
            return self._results.get(category)

    def __contains__(self, category: object) -> bool:
        with self._lock:
            return category in self._results

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def categories(self) -> List[str]:
        with self._lock:
            return list(self._results)

    def items(self) -> Iterator[Tuple[str, Tuple[IndividualResult, ...]]]:
        with self._lock:
            snapshot = list(self._results.items())
        return iter(snapshot)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        """Serialize with the external field spelling of each result."""
        return {category: [row.to_dict() for row in rows] for category, rows in self.items()}


class ExpectedItemCounter:
    """Thread-safe expected-compliant-item counter."""

    def __init__(self, initial: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def adjust(self, delta: int) -> int:
        with self._lock:
            self._value += delta
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
