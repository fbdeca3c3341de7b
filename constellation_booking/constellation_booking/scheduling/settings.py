"""
Booking Settings

Site-level knobs read from site_config.json via frappe.conf.
"""

import frappe
from frappe.utils import cint
from typing import Dict, Tuple

DEFAULT_SLOT_INCREMENT_MINUTES = 30

# action -> (limit, seconds)
DEFAULT_RATE_LIMITS: Dict[str, Tuple[int, int]] = {
	"list_offerings": (60, 60),
	"get_available_slots": (30, 60),
	"create_appointment": (5, 60),
	"update_appointment": (20, 60),
	"cancel_appointment": (5, 60),
	"list_appointments": (30, 60),
	"manage_catalog": (30, 60),
	"manage_availability": (30, 60),
}


def get_slot_increment() -> int:
	"""Minutes between consecutive candidate slot starts."""
	increment = cint(frappe.conf.get("booking_slot_increment_minutes"))
	return increment if increment > 0 else DEFAULT_SLOT_INCREMENT_MINUTES


def enforce_availability() -> bool:
	"""
	Whether new bookings must fall inside an enabled availability window.

	Defaults to on; set booking_enforce_availability = 0 to accept any
	non-conflicting interval.
	"""
	value = frappe.conf.get("booking_enforce_availability")
	if value is None:
		return True
	return bool(cint(value))


def get_rate_limit(action: str) -> Tuple[int, int]:
	"""Return (limit, seconds) for an action, honoring booking_rate_limits overrides."""
	overrides = frappe.conf.get("booking_rate_limits") or {}
	override = overrides.get(action)
	if override:
		return cint(override[0]), cint(override[1])
	return DEFAULT_RATE_LIMITS.get(action, (30, 60))
