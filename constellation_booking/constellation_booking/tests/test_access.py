"""
Tests for scheduling/access.py

Tier ordering and subscription gating.
"""

import unittest
from datetime import date, datetime

import frappe

from constellation_booking.constellation_booking.scheduling.access import (
	ensure_access,
	has_access,
	is_subscription_active,
	tier_satisfies,
)
from constellation_booking.constellation_booking.scheduling.errors import InsufficientTierError

NOW = datetime(2024, 6, 10, 8, 0)


def subscription(tier, is_active=1, start_date=None, end_date=None):
	return frappe._dict(tier=tier, is_active=is_active, start_date=start_date, end_date=end_date)


class TestAccessPolicy(unittest.TestCase):
	"""Tests for tier gating."""

	def test_tier_order(self):
		self.assertTrue(tier_satisfies("premium", "growth"))
		self.assertTrue(tier_satisfies("growth", "growth"))
		self.assertFalse(tier_satisfies("self-guided", "growth"))
		self.assertFalse(tier_satisfies("gold", "self-guided"))

	def test_open_offering_needs_no_subscription(self):
		self.assertTrue(has_access(None, None, NOW))
		self.assertTrue(has_access(None, "", NOW))

	def test_growth_offering(self):
		"""self-guided is rejected; growth and premium are accepted."""
		self.assertFalse(has_access(subscription("self-guided"), "growth", NOW))
		self.assertTrue(has_access(subscription("growth"), "growth", NOW))
		self.assertTrue(has_access(subscription("premium"), "growth", NOW))

	def test_missing_or_inactive_subscription(self):
		self.assertFalse(has_access(None, "self-guided", NOW))
		self.assertFalse(has_access(subscription("premium", is_active=0), "self-guided", NOW))

	def test_subscription_date_range(self):
		self.assertTrue(is_subscription_active(
			subscription("growth", start_date=date(2024, 6, 1), end_date=date(2024, 6, 10)), NOW
		))
		self.assertFalse(is_subscription_active(subscription("growth", end_date=date(2024, 6, 9)), NOW))
		self.assertFalse(is_subscription_active(subscription("growth", start_date="2024-06-11"), NOW))

	def test_ensure_access_raises_insufficient_tier(self):
		with self.assertRaises(InsufficientTierError):
			ensure_access(subscription("self-guided"), "premium", NOW)

		with self.assertRaises(frappe.PermissionError):
			ensure_access(None, "growth", NOW)

		ensure_access(subscription("premium"), "premium", NOW)
