"""
Appointments API Domain

Booking, slot discovery and each party's appointment management.
"""

from constellation_booking.api.appointments.endpoints import (
	# Slots
	get_available_slots,
	# CRUD
	create_appointment,
	get_appointment,
	update_appointment,
	cancel_appointment,
	# User's appointments
	list_appointments,
)

__all__ = [
	"get_available_slots",
	"create_appointment",
	"get_appointment",
	"update_appointment",
	"cancel_appointment",
	"list_appointments",
]
