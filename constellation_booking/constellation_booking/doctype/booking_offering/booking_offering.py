# Copyright (c) 2026, Constellation Booking contributors
# For license information, please see license.txt

"""
Booking Offering DocType

A bookable service published by a provider.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from constellation_booking.constellation_booking.scheduling.catalog import validate_offering_values

VALIDATED_FIELDS = ("title", "duration_minutes", "price", "required_tier", "max_bookings_per_day", "is_active")


class BookingOffering(Document):
	def validate(self) -> None:
		if not self.provider:
			frappe.throw(_("Provider is required"))

		if not self.is_new() and self.has_value_changed("provider"):
			frappe.throw(_("Provider cannot be changed"))

		values = validate_offering_values({field: self.get(field) for field in VALIDATED_FIELDS})
		self.update(values)
