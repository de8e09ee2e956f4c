"""Unit tests for the aggregate store and expected-item counter."""
from __future__ import annotations

import threading
import unittest

from winsentry.checks.types import CATEGORY_NAMES, Compliance, IndividualResult, Method
from winsentry.core.store import AggregateStore, ExpectedItemCounter


def _row(category: str, name: str = "control") -> IndividualResult:
    return IndividualResult(name, name, category, Compliance.TRUE, "1", Method.REGISTRY)


class TestAggregateStore(unittest.TestCase):
    def setUp(self) -> None:
        self.store = AggregateStore()

    def test_add_once_per_category(self) -> None:
        self.assertTrue(self.store.add("LockScreen", [_row("LockScreen", "first")]))
        self.assertFalse(self.store.add("LockScreen", [_row("LockScreen", "second")]))

        rows = self.store.get("LockScreen")
        self.assertEqual([row.name for row in rows], ["first"])

    def test_results_are_stored_immutably(self) -> None:
        rows = [_row("TLSSecurity")]
        self.store.add("TLSSecurity", rows)
        rows.append(_row("TLSSecurity", "late"))

        self.assertEqual(len(self.store.get("TLSSecurity")), 1)
        self.assertIsInstance(self.store.get("TLSSecurity"), tuple)

    def test_empty_result_list_is_still_committed(self) -> None:
        self.store.add("NonAdminCommands", [])
        self.assertIn("NonAdminCommands", self.store)
        self.assertEqual(self.store.get("NonAdminCommands"), ())

    def test_missing_category(self) -> None:
        self.assertIsNone(self.store.get("DeviceGuard"))
        self.assertNotIn("DeviceGuard", self.store)

    def test_concurrent_insertion_of_distinct_keys(self) -> None:
        barrier = threading.Barrier(len(CATEGORY_NAMES))

        def commit(category: str) -> None:
            barrier.wait()
            self.store.add(category, [_row(category)])

        threads = [threading.Thread(target=commit, args=(name,)) for name in CATEGORY_NAMES]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.store), len(CATEGORY_NAMES))
        self.assertEqual(set(self.store.categories()), set(CATEGORY_NAMES))

    def test_to_dict(self) -> None:
        self.store.add("LockScreen", [_row("LockScreen")])
        self.assertEqual(self.store.to_dict()["LockScreen"][0]["Compliant"], "True")


class TestExpectedItemCounter(unittest.TestCase):
    def test_adjust(self) -> None:
        counter = ExpectedItemCounter(238)
        counter.adjust(-1)
        counter.adjust(2)
        self.assertEqual(counter.value, 239)

    def test_concurrent_adjustments_are_not_lost(self) -> None:
        counter = ExpectedItemCounter(0)

        def bump() -> None:
            for _ in range(1000):
                counter.adjust(1)

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(counter.value, 8000)


if __name__ == "__main__":
    unittest.main()
