"""
Appointment API Endpoints

Whitelisted functions for frontend/external use. Slot discovery is open
to guests; everything else acts as the session user:
- Rate limiting by IP address
- Honeypot validation on writes
- Input sanitization
"""

import frappe
from frappe import _
from frappe.utils import cint
from typing import Dict, List, Any, Optional

from constellation_booking.constellation_booking.scheduling.catalog import OfferingCatalog
from constellation_booking.constellation_booking.scheduling.errors import BOOKING_ERRORS, OfferingInactiveError
from constellation_booking.constellation_booking.scheduling.ledger import AppointmentLedger
from constellation_booking.constellation_booking.scheduling.slots import get_available_slot_intervals
from constellation_booking.constellation_booking.scheduling import views

from constellation_booking.api.shared import (
	check_honeypot,
	check_rate_limit,
	parse_flag,
	parse_patch,
	require_login,
	sanitize_string,
	serialize_record,
	serialize_records,
	validate_date_string,
	validate_docname,
)


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_available_slots(offering: str, date: str) -> Dict[str, Any]:
	"""
	Free start times for an offering's provider on one date.

	Args:
		offering: Booking Offering name
		date: target date (YYYY-MM-DD)

	Returns:
		dict: {
			"offering": "OFR-00001",
			"date": "2024-06-10",
			"duration_minutes": 30,
			"slots": [
				{"label": "09:00", "start": "2024-06-10T09:00:00", "end": "2024-06-10T09:30:00"},
				...
			]
		}

	Example:
		```javascript
		frappe.call({
			method: "constellation_booking.api.appointments.get_available_slots",
			args: {offering: "OFR-00001", date: "2024-06-10"},
			callback: function(r) {
				console.log(r.message.slots);
			}
		});
		```
	"""
	check_rate_limit("get_available_slots")

	offering = validate_docname(offering, "offering")
	date = validate_date_string(date, "date")

	try:
		record = OfferingCatalog().get_offering(offering)
		if not cint(record.is_active):
			frappe.throw(_("{0} is no longer available for booking").format(record.title), OfferingInactiveError)

		slots = get_available_slot_intervals(record.provider, date, record.duration_minutes)

		return {
			"offering": offering,
			"date": date,
			"duration_minutes": record.duration_minutes,
			"slots": serialize_records(slots),
		}

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_available_slots: {str(e)}", "API Error")
		frappe.throw(_("Could not load available slots"))


@frappe.whitelist(methods=['POST'])
def create_appointment(
	offering: str,
	start_time: str,
	end_time: Optional[str] = None,
	time_zone: Optional[str] = "UTC",
	notes: Optional[str] = None,
	honeypot: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Book an offering for the session user.

	Protected by honeypot field.

	Args:
		offering: Booking Offering name
		start_time: ISO-8601 start ("2024-06-10T10:00:00" or with offset)
		end_time: optional; must equal start_time + offering duration
		time_zone: client's IANA timezone, stored as given
		notes: free text for the provider
		honeypot: bot trap field, must be empty

	Returns:
		dict: the scheduled appointment

	Raises:
		SlotConflictError (409), OutsideAvailabilityError (409),
		BookingLimitReachedError (409), InsufficientTierError (402),
		OfferingInactiveError (410), OfferingNotFoundError (404)
	"""
	check_honeypot(honeypot)
	check_rate_limit("create_appointment")
	client = require_login()

	offering = validate_docname(offering, "offering")
	notes = sanitize_string(notes, 2000)

	try:
		appointment = AppointmentLedger().create_appointment(
			offering,
			client,
			start_time,
			end_time=end_time,
			time_zone=time_zone or "UTC",
			notes=notes,
		)
		return serialize_record(appointment)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in create_appointment: {str(e)}", "API Error")
		frappe.throw(_("Could not create appointment"))


@frappe.whitelist(methods=['GET'])
def get_appointment(appointment: str) -> Dict[str, Any]:
	"""Appointment detail; only its client or provider may read it."""
	check_rate_limit("list_appointments")
	actor = require_login()
	appointment = validate_docname(appointment, "appointment")

	try:
		return serialize_record(AppointmentLedger().get_appointment(appointment, actor))

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_appointment: {str(e)}", "API Error")
		frappe.throw(_("Could not load appointment"))


@frappe.whitelist(methods=['GET'])
def list_appointments(
	as_provider: Any = False,
	status: Optional[str] = None,
	upcoming: Any = False,
	past: Any = False,
) -> List[Dict[str, Any]]:
	"""
	Appointments of the session user.

	Args:
		as_provider: list appointments the user provides instead of books
		status: keep only this status
		upcoming: scheduled/confirmed appointments that have not started, soonest first
		past: finished, completed or cancelled appointments, most recent first
	"""
	check_rate_limit("list_appointments")
	user = require_login()

	try:
		appointments = views.list_appointments(
			user,
			as_provider=parse_flag(as_provider),
			status=sanitize_string(status, 20),
			upcoming=parse_flag(upcoming),
			past=parse_flag(past),
		)
		return serialize_records(appointments)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in list_appointments: {str(e)}", "API Error")
		frappe.throw(_("Could not load appointments"))


@frappe.whitelist(methods=['POST'])
def update_appointment(appointment: str, patch: Any) -> Dict[str, Any]:
	"""
	Patch an appointment as client or provider.

	Clients may change notes and cancel; providers may change status,
	notes and meeting_link. Fields outside the caller's role are ignored.
	"""
	check_rate_limit("update_appointment")
	actor = require_login()

	appointment = validate_docname(appointment, "appointment")
	patch = parse_patch(patch)

	try:
		return serialize_record(AppointmentLedger().update_appointment(appointment, actor, patch))

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in update_appointment: {str(e)}", "API Error")
		frappe.throw(_("Could not update appointment"))


@frappe.whitelist(methods=['POST'])
def cancel_appointment(appointment: str, honeypot: Optional[str] = None) -> Dict[str, Any]:
	"""
	Cancel a scheduled appointment and free its slot.

	Returns:
		dict: {"success": True, "appointment": {...}}
	"""
	check_honeypot(honeypot)
	check_rate_limit("cancel_appointment")
	actor = require_login()
	appointment = validate_docname(appointment, "appointment")

	try:
		cancelled = AppointmentLedger().cancel_appointment(appointment, actor)
		return {
			"success": True,
			"appointment": serialize_record(cancelled),
		}

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in cancel_appointment: {str(e)}", "API Error")
		frappe.throw(_("Could not cancel appointment"))
