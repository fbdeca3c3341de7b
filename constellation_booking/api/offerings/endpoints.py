"""
Offering API Endpoints

Catalog reads are open to guests; creating, editing and deleting an
offering requires a session and ownership.
"""

import frappe
from frappe import _
from typing import Dict, List, Any, Optional

from constellation_booking.constellation_booking.scheduling.catalog import EDITABLE_FIELDS, OfferingCatalog
from constellation_booking.constellation_booking.scheduling.errors import BOOKING_ERRORS

from constellation_booking.api.shared import (
	check_rate_limit,
	optional_docname,
	parse_flag,
	parse_patch,
	require_login,
	sanitize_string,
	serialize_record,
	serialize_records,
	validate_docname,
)


@frappe.whitelist(methods=['POST'])
def create_offering(
	title: str,
	duration_minutes: int,
	description: Optional[str] = None,
	price: Optional[float] = None,
	currency: Optional[str] = None,
	category: Optional[str] = None,
	required_tier: Optional[str] = None,
	max_bookings_per_day: Optional[int] = None,
) -> Dict[str, Any]:
	"""
	Create an offering owned by the session user.

	Example:
		```javascript
		frappe.call({
			method: "constellation_booking.api.offerings.create_offering",
			args: {title: "Consult", duration_minutes: 30, required_tier: "growth"}
		});
		```
	"""
	check_rate_limit("manage_catalog")
	provider = require_login()

	fields = {
		"description": sanitize_string(description, max_length=2000),
		"price": price,
		"currency": sanitize_string(currency, max_length=3),
		"category": sanitize_string(category, max_length=140),
		"required_tier": required_tier,
		"max_bookings_per_day": max_bookings_per_day,
	}

	try:
		offering = OfferingCatalog().create_offering(
			provider,
			sanitize_string(title, max_length=140),
			duration_minutes,
			**{k: v for k, v in fields.items() if v not in (None, "")},
		)
		return serialize_record(offering)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in create_offering: {str(e)}", "API Error")
		frappe.throw(_("Could not create offering"))


@frappe.whitelist(allow_guest=True, methods=['GET'])
def list_offerings(
	provider: Optional[str] = None,
	category: Optional[str] = None,
	tier: Optional[str] = None,
	include_inactive: Any = False,
) -> List[Dict[str, Any]]:
	"""
	Active offerings, optionally filtered by provider, category or tier.

	include_inactive is honoured only for the provider's own listing.
	"""
	check_rate_limit("list_offerings")

	provider = optional_docname(provider, "provider")
	category = sanitize_string(category, max_length=140)

	show_inactive = parse_flag(include_inactive) and provider is not None and provider == frappe.session.user

	try:
		offerings = OfferingCatalog().list_offerings(
			provider=provider,
			category=category,
			tier=tier or None,
			include_inactive=show_inactive,
		)
		return serialize_records(offerings)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in list_offerings: {str(e)}", "API Error")
		frappe.throw(_("Could not load offerings"))


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_offering(offering: str) -> Dict[str, Any]:
	check_rate_limit("list_offerings")
	offering = validate_docname(offering, "offering")

	try:
		return serialize_record(OfferingCatalog().get_offering(offering))

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_offering: {str(e)}", "API Error")
		frappe.throw(_("Could not load offering"))


@frappe.whitelist(methods=['POST'])
def update_offering(offering: str, changes: Any) -> Dict[str, Any]:
	"""
	Edit an owned offering.

	Args:
		offering: Offering name
		changes: dict (or JSON string) of editable fields; others are ignored
	"""
	check_rate_limit("manage_catalog")
	actor = require_login()

	offering = validate_docname(offering, "offering")
	changes = parse_patch(changes, "changes")

	try:
		updated = OfferingCatalog().update_offering(
			offering, actor, **{k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
		)
		return serialize_record(updated)

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in update_offering: {str(e)}", "API Error")
		frappe.throw(_("Could not update offering"))


@frappe.whitelist(methods=['POST'])
def delete_offering(offering: str) -> Dict[str, Any]:
	"""
	Delete an owned offering with no live appointments.

	Offerings referenced by any non-cancelled appointment raise
	OfferingHasBookingsError; deactivate them with update_offering instead.
	"""
	check_rate_limit("manage_catalog")
	actor = require_login()
	offering = validate_docname(offering, "offering")

	try:
		OfferingCatalog().delete_offering(offering, actor)
		return {"success": True, "offering": offering}

	except BOOKING_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in delete_offering: {str(e)}", "API Error")
		frappe.throw(_("Could not delete offering"))
