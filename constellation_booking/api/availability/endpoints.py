"""
Availability API Endpoints

A provider manages only their own windows; anyone may read a provider's
schedule.
"""

import frappe
from frappe import _
from typing import Dict, List, Any, Optional

from constellation_booking.constellation_booking.scheduling.availability import AvailabilityRegistry
from constellation_booking.constellation_booking.scheduling.errors import BOOKING_ERRORS
from constellation_booking.constellation_booking.scheduling.validation import parse_int

from constellation_booking.api.shared import (
	check_rate_limit,
	parse_flag,
	parse_patch,
	require_login,
	serialize_record,
	serialize_records,
	validate_docname,
)


@frappe.whitelist(methods=['POST'])
def set_availability(
	day_of_week: int,
	start_time: str,
	end_time: str,
	time_zone: Optional[str] = "UTC",
	is_available: Any = True,
) -> Dict[str, Any]:
	"""
	Add a weekly window for the session user.

	Args:
		day_of_week: 0 (Sunday) .. 6 (Saturday)
		start_time: "HH:MM" local start
		end_time: "HH:MM" local end, later than start_time
		time_zone: IANA timezone name
		is_available: whether the window is bookable

	Example:
		```javascript
		frappe.call({
			method: "constellation_booking.api.availability.set_availability",
			args: {day_of_week: 1, start_time: "09:00", end_time: "17:00", time_zone: "UTC"}
		});
		```
	"""
	check_rate_limit("manage_availability")
	provider = require_login()

	try:
		window = AvailabilityRegistry().set_window(
			provider,
			parse_int(day_of_week, "day_of_week"),
			start_time,
			end_time,
			time_zone=time_zone or "UTC",
			is_available=parse_flag(is_available),
			actor=provider,
		)
		return serialize_record(window)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in set_availability: {str(e)}", "API Error")
		frappe.throw(_("Could not save availability"))


@frappe.whitelist(allow_guest=True, methods=['GET'])
def list_availability(provider: Optional[str] = None) -> List[Dict[str, Any]]:
	"""Windows of provider (defaults to the session user), disabled ones included."""
	check_rate_limit("get_available_slots")

	if provider:
		provider = validate_docname(provider, "provider")
	else:
		provider = require_login()

	try:
		return serialize_records(AvailabilityRegistry().list_windows(provider))

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in list_availability: {str(e)}", "API Error")
		frappe.throw(_("Could not load availability"))


@frappe.whitelist(methods=['POST'])
def update_availability(window: str, changes: Any) -> Dict[str, Any]:
	"""
	Change an owned window.

	Args:
		window: Availability Window name
		changes: dict (or JSON string) with any of day_of_week, start_time,
			end_time, time_zone, is_available
	"""
	check_rate_limit("manage_availability")
	actor = require_login()

	window = validate_docname(window, "window")
	changes = parse_patch(changes, "changes")

	try:
		return serialize_record(AvailabilityRegistry().update_window(window, actor, **changes))

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in update_availability: {str(e)}", "API Error")
		frappe.throw(_("Could not update availability"))


@frappe.whitelist(methods=['POST'])
def remove_availability(window: str) -> Dict[str, Any]:
	check_rate_limit("manage_availability")
	actor = require_login()
	window = validate_docname(window, "window")

	try:
		AvailabilityRegistry().remove_window(window, actor)
		return {"success": True, "window": window}

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in remove_availability: {str(e)}", "API Error")
		frappe.throw(_("Could not remove availability"))
