"""Tests for the payout table."""

import unittest
from decimal import Decimal

from keno.errors import ValidationError
from keno.services.payout_table import PayoutTable


class PayoutTableTest(unittest.TestCase):
    def setUp(self):
        self.table = PayoutTable.default()

    def test_default_entries(self):
        self.assertEqual(self.table.get_multiplier(3, 3), Decimal(50))
        self.assertEqual(self.table.get_multiplier(10, 10), Decimal(100000))

    def test_missing_pair_pays_zero(self):
        self.assertEqual(self.table.get_multiplier(1, 0), Decimal(0))
        self.assertEqual(PayoutTable().get_multiplier(5, 5), Decimal(0))

    def test_update_is_visible_to_next_lookup(self):
        entry = self.table.set_multiplier(3, 3, "62.5")
        self.assertEqual(entry.multiplier, Decimal("62.5"))
        self.assertEqual(self.table.get_multiplier(3, 3), Decimal("62.5"))

    def test_rejects_negative_and_non_numeric(self):
        for bad in (-1, "abc", float("nan"), float("inf"), True):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    self.table.set_multiplier(3, 3, bad)
        self.assertEqual(self.table.get_multiplier(3, 3), Decimal(50))

    def test_rejects_out_of_range_keys(self):
        with self.assertRaises(ValidationError):
            self.table.set_multiplier(11, 1, 1)
        with self.assertRaises(ValidationError):
            self.table.set_multiplier(3, 4, 1)

    def test_list_all_is_ordered_snapshot(self):
        entries = self.table.list_all()
        self.assertEqual((entries[0].spots, entries[0].matches), (1, 1))
        self.assertEqual([e.matches for e in self.table.entries_for(3)], [3, 2, 1])

        self.table.set_multiplier(1, 1, 4)
        self.assertEqual(entries[0].multiplier, Decimal(3))


if __name__ == "__main__":
    unittest.main()
