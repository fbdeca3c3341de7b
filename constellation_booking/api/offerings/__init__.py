"""
Offerings API Domain

Provider-managed catalog of bookable services.
"""

from constellation_booking.api.offerings.endpoints import (
	create_offering,
	list_offerings,
	get_offering,
	update_offering,
	delete_offering,
)

__all__ = [
	"create_offering",
	"list_offerings",
	"get_offering",
	"update_offering",
	"delete_offering",
]
