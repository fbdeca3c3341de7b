# Copyright (c) 2026, Constellation Booking contributors
# For license information, please see license.txt

"""
Availability Window DocType

One weekly recurring stretch of provider availability.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from constellation_booking.constellation_booking.scheduling.availability import AvailabilityRegistry


class AvailabilityWindow(Document):
	"""
	Validations (shared with AvailabilityRegistry):
	- day_of_week 0 (Sunday) .. 6 (Saturday)
	- start_time < end_time
	- no overlap with the provider's other enabled windows that day
	"""

	def validate(self) -> None:
		if not self.provider:
			frappe.throw(_("Provider is required"))

		values = AvailabilityRegistry().validate_window(
			{
				"provider": self.provider,
				"day_of_week": self.day_of_week,
				"start_time": self.start_time,
				"end_time": self.end_time,
				"time_zone": self.time_zone,
				"is_available": self.is_available,
			},
			exclude=None if self.is_new() else self.name,
		)
		self.day_of_week = values["day_of_week"]
		self.start_time = values["start_time"]
		self.end_time = values["end_time"]
		self.time_zone = values["time_zone"]
