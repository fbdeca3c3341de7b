"""
Availability API Domain

Weekly availability windows managed by each provider.
"""

from constellation_booking.api.availability.endpoints import (
	set_availability,
	list_availability,
	update_availability,
	remove_availability,
)

__all__ = [
	"set_availability",
	"list_availability",
	"update_availability",
	"remove_availability",
]
