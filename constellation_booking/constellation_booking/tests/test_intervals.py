"""
Tests for scheduling/intervals.py

Half-open interval arithmetic and datetime normalization.
"""

import unittest
from datetime import date, datetime, time, timedelta

from constellation_booking.constellation_booking.scheduling.intervals import (
	contains,
	day_of_week,
	interval_subtract,
	merge_intervals,
	overlaps,
	to_naive_utc,
	to_time,
)


def dt(hour, minute=0):
	return datetime(2024, 6, 10, hour, minute)


class TestIntervals(unittest.TestCase):
	"""Tests for interval helpers."""

	def test_overlap_is_half_open(self):
		"""Back-to-back intervals do not overlap."""
		self.assertFalse(overlaps(dt(9), dt(10), dt(10), dt(11)))
		self.assertFalse(overlaps(dt(10), dt(11), dt(9), dt(10)))

	def test_overlap_partial_and_nested(self):
		self.assertTrue(overlaps(dt(9), dt(10), dt(9, 30), dt(10, 30)))
		self.assertTrue(overlaps(dt(9), dt(12), dt(10), dt(11)))
		self.assertTrue(overlaps(dt(10), dt(11), dt(10), dt(11)))

	def test_contains(self):
		self.assertTrue(contains(dt(9), dt(17), dt(9), dt(17)))
		self.assertTrue(contains(dt(9), dt(17), dt(16, 30), dt(17)))
		self.assertFalse(contains(dt(9), dt(17), dt(16, 45), dt(17, 15)))

	def test_day_of_week_starts_on_sunday(self):
		"""2024-06-09 is a Sunday, 2024-06-15 a Saturday."""
		self.assertEqual(day_of_week(date(2024, 6, 9)), 0)
		self.assertEqual(day_of_week(date(2024, 6, 10)), 1)
		self.assertEqual(day_of_week(datetime(2024, 6, 15, 23, 59)), 6)

	def test_to_time_accepts_frappe_formats(self):
		self.assertEqual(to_time(time(9, 30)), time(9, 30))
		self.assertEqual(to_time(timedelta(hours=17)), time(17, 0))
		self.assertEqual(to_time("08:15:00"), time(8, 15))

	def test_to_time_rejects_other_types(self):
		with self.assertRaises(ValueError):
			to_time(930)

	def test_to_naive_utc_converts_aware_values(self):
		self.assertEqual(to_naive_utc("2024-06-10T09:00:00Z"), dt(9))
		self.assertEqual(to_naive_utc("2024-06-10T11:00:00+02:00"), dt(9))

	def test_to_naive_utc_keeps_naive_values(self):
		self.assertEqual(to_naive_utc("2024-06-10 09:00:00"), dt(9))
		self.assertEqual(to_naive_utc(dt(9)), dt(9))

	def test_merge_intervals_joins_adjacent_and_overlapping(self):
		merged = merge_intervals([
			{"start": dt(13), "end": dt(15)},
			{"start": dt(9), "end": dt(10)},
			{"start": dt(10), "end": dt(12)},
			{"start": dt(14), "end": dt(16)},
		])

		self.assertEqual(merged, [
			{"start": dt(9), "end": dt(12)},
			{"start": dt(13), "end": dt(16)},
		])

	def test_merge_intervals_does_not_mutate_input(self):
		first = {"start": dt(9), "end": dt(10)}
		merge_intervals([first, {"start": dt(9, 30), "end": dt(11)}])
		self.assertEqual(first["end"], dt(10))

	def test_merge_intervals_empty(self):
		self.assertEqual(merge_intervals([]), [])

	def test_interval_subtract_splits(self):
		remaining = interval_subtract({"start": dt(9), "end": dt(17)}, {"start": dt(12), "end": dt(13)})
		self.assertEqual(remaining, [
			{"start": dt(9), "end": dt(12)},
			{"start": dt(13), "end": dt(17)},
		])

	def test_interval_subtract_edges(self):
		window = {"start": dt(9), "end": dt(17)}

		self.assertEqual(interval_subtract(window, {"start": dt(17), "end": dt(18)}), [window])
		self.assertEqual(interval_subtract(window, {"start": dt(8), "end": dt(18)}), [])
		self.assertEqual(
			interval_subtract(window, {"start": dt(9), "end": dt(10)}),
			[{"start": dt(10), "end": dt(17)}],
		)
