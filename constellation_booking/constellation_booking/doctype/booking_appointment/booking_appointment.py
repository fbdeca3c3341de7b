# Copyright (c) 2026, Constellation Booking contributors
# For license information, please see license.txt

"""
Booking Appointment DocType

A client's reservation of a provider's offering. Created through the
ledger; the controller re-checks the record-level invariants so edits made
from Desk cannot break them either.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from constellation_booking.constellation_booking.scheduling.errors import (
	BookingValidationError,
	SlotConflictError,
)
from constellation_booking.constellation_booking.scheduling.ledger import (
	CANCELLED,
	SCHEDULED,
	STATUSES,
	validate_transition,
)
from constellation_booking.constellation_booking.scheduling.repositories import (
	OFFERING_DOCTYPE,
	FrappeAppointmentRepository,
)

IMMUTABLE_FIELDS = ("service", "client", "provider", "start_time", "end_time", "created_at")


class BookingAppointment(Document):
	"""
	Validations:
	- service, client, start/end required; start < end
	- provider copied from the offering on insert, immutable afterwards
	- new appointments start as scheduled
	- status changes follow the ledger state machine
	- non-cancelled appointments of a provider never overlap
	"""

	def validate(self) -> None:
		self._validate_required_fields()
		self._validate_datetime_consistency()
		self._validate_status()
		self._validate_immutable_fields()
		self._validate_no_overlap()

	def _validate_required_fields(self) -> None:
		if not self.service:
			frappe.throw(_("Service is required"), BookingValidationError)
		if not self.client:
			frappe.throw(_("Client is required"), BookingValidationError)

		if self.is_new() and not self.provider:
			self.provider = frappe.db.get_value(OFFERING_DOCTYPE, self.service, "provider")

	def _validate_datetime_consistency(self) -> None:
		"""start_time < end_time."""
		if not self.start_time or not self.end_time:
			frappe.throw(_("Start Time and End Time are required"), BookingValidationError)

		if get_datetime(self.start_time) >= get_datetime(self.end_time):
			frappe.throw(_("Start Time must be earlier than End Time"), BookingValidationError)

	def _validate_status(self) -> None:
		if self.status not in STATUSES:
			frappe.throw(_("Unknown status '{0}'").format(self.status), BookingValidationError)

		if self.is_new():
			if self.status != SCHEDULED:
				frappe.throw(_("New appointments must be scheduled"), BookingValidationError)
			return

		before = self.get_doc_before_save()
		if before and before.status != self.status:
			validate_transition(before.status, self.status)

	def _validate_immutable_fields(self) -> None:
		if self.is_new():
			return

		before = self.get_doc_before_save()
		if not before:
			return

		for field in IMMUTABLE_FIELDS:
			old, new = before.get(field), self.get(field)
			if field in ("start_time", "end_time", "created_at") and old and new:
				old, new = get_datetime(old), get_datetime(new)
			if old != new:
				frappe.throw(_("{0} cannot be changed after booking").format(self.meta.get_label(field)))

	def _validate_no_overlap(self) -> None:
		if self.status == CANCELLED:
			return

		conflicts = FrappeAppointmentRepository().find_overlapping(
			self.provider,
			get_datetime(self.start_time),
			get_datetime(self.end_time),
			exclude=None if self.is_new() else self.name,
		)
		if conflicts:
			frappe.throw(
				_("Overlaps appointment {0}").format(", ".join(c.name for c in conflicts)),
				SlotConflictError,
			)
