"""
Access Policy

Tier gating between a client's subscription and an offering's required tier.
Tiers are totally ordered: self-guided < growth < premium.
"""

from datetime import datetime
from typing import Any, Optional

import frappe
from frappe import _
from frappe.utils import get_datetime, getdate, now_datetime

from .errors import InsufficientTierError

TIER_ORDER = ("self-guided", "growth", "premium")


def tier_rank(tier: Optional[str]) -> int:
	"""Position of tier in TIER_ORDER, -1 when unknown or empty."""
	try:
		return TIER_ORDER.index(tier)
	except ValueError:
		return -1


def tier_satisfies(tier: Optional[str], required_tier: Optional[str]) -> bool:
	"""True if tier is at or above required_tier. An empty requirement is always met."""
	if not required_tier:
		return True
	rank = tier_rank(tier)
	return rank >= 0 and rank >= tier_rank(required_tier)


def is_subscription_active(subscription: Any, now: Optional[datetime] = None) -> bool:
	"""
	A subscription is active when flagged active and today falls within
	[start_date, end_date] (either bound may be empty).
	"""
	if not subscription or not subscription.get("is_active"):
		return False

	today = getdate(now or now_datetime())
	start_date = subscription.get("start_date")
	end_date = subscription.get("end_date")

	if start_date and getdate(get_datetime(start_date)) > today:
		return False
	if end_date and getdate(get_datetime(end_date)) < today:
		return False
	return True


def has_access(subscription: Any, required_tier: Optional[str], now: Optional[datetime] = None) -> bool:
	"""
	Whether a holder of subscription may book an offering requiring required_tier.

	Args:
		subscription: {tier, is_active, start_date, end_date} or None
		required_tier: tier name or None/"" for open offerings
		now: reference time for expiry checks

	Returns:
		bool
	"""
	if not required_tier:
		return True
	if not is_subscription_active(subscription, now):
		return False
	return tier_satisfies(subscription.get("tier"), required_tier)


def ensure_access(subscription: Any, required_tier: Optional[str], now: Optional[datetime] = None) -> None:
	"""Raise InsufficientTierError unless has_access holds."""
	if has_access(subscription, required_tier, now):
		return

	if not subscription:
		message = _("This service requires a {0} subscription.").format(required_tier)
	elif not is_subscription_active(subscription, now):
		message = _("Your subscription is not active. This service requires {0}.").format(required_tier)
	else:
		message = _("This service requires {0}; your current plan is {1}.").format(
			required_tier, subscription.get("tier")
		)
	frappe.throw(message, InsufficientTierError, title=_("Upgrade Required"))
