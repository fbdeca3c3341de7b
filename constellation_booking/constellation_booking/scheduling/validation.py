"""
Input normalization shared by the booking services.

All failures raise BookingValidationError.
"""

from datetime import datetime
from typing import Any, Optional

import frappe
import pytz
from frappe import _

from .errors import BookingValidationError
from .intervals import to_naive_utc


def validate_time_zone(time_zone: str) -> str:
	"""Accept any IANA timezone name pytz knows; return it unchanged."""
	time_zone = str(time_zone or "").strip()
	try:
		pytz.timezone(time_zone)
	except pytz.UnknownTimeZoneError:
		frappe.throw(_("Unknown timezone '{0}'").format(time_zone), BookingValidationError)
	return time_zone


def parse_datetime(value: Any, field_name: str = "datetime") -> datetime:
	"""Parse value into a naive reference-clock datetime."""
	if value in (None, ""):
		frappe.throw(_("{0} is required").format(field_name), BookingValidationError)

	try:
		parsed = to_naive_utc(value)
	except (ValueError, TypeError, OverflowError):
		parsed = None

	if parsed is None:
		frappe.throw(
			_("Invalid {0}. Use ISO-8601, e.g. 2024-06-10T09:00:00Z").format(field_name),
			BookingValidationError,
		)
	return parsed


def parse_int(value: Any, field_name: str, minimum: Optional[int] = None) -> int:
	"""Parse an integer field, enforcing an optional lower bound."""
	if isinstance(value, bool):
		value = None
	try:
		parsed = int(value)
	except (TypeError, ValueError):
		frappe.throw(_("{0} must be an integer").format(field_name), BookingValidationError)

	if minimum is not None and parsed < minimum:
		frappe.throw(_("{0} must be at least {1}").format(field_name, minimum), BookingValidationError)
	return parsed
