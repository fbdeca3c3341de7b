"""
Booking Errors

Typed failures raised by the booking core. Each one subclasses the Frappe
exception whose HTTP status fits it, so whitelisted endpoints surface them
without extra mapping.
"""

import frappe


class BookingValidationError(frappe.ValidationError):
	"""Malformed input: missing fields, wrong types or formats."""


class NotFoundError(frappe.DoesNotExistError):
	"""Offering, appointment or availability window does not exist."""


class OfferingNotFoundError(NotFoundError):
	pass


class ForbiddenError(frappe.PermissionError):
	"""Caller is not the owner (or a party) for the requested action."""


class InvalidWindowError(frappe.ValidationError):
	"""Availability window with start >= end, bad weekday, or overlapping another window."""


class OfferingInactiveError(frappe.ValidationError):
	http_status_code = 410


class InsufficientTierError(frappe.PermissionError):
	"""Client subscription missing, inactive, or below the offering's required tier."""

	http_status_code = 402


class SlotConflictError(frappe.ValidationError):
	"""Candidate interval overlaps a non-cancelled appointment of the provider."""

	http_status_code = 409


class OutsideAvailabilityError(SlotConflictError):
	"""Candidate interval is not covered by an enabled availability window."""


class BookingLimitReachedError(SlotConflictError):
	"""Offering already holds max_bookings_per_day bookings on that date."""


class InvalidStateTransitionError(frappe.ValidationError):
	http_status_code = 409


class OfferingHasBookingsError(frappe.ValidationError):
	http_status_code = 409


# Errors a caller is expected to surface as-is instead of logging.
BOOKING_ERRORS = (
	BookingValidationError,
	NotFoundError,
	ForbiddenError,
	InvalidWindowError,
	OfferingInactiveError,
	InsufficientTierError,
	SlotConflictError,
	InvalidStateTransitionError,
	OfferingHasBookingsError,
)
