"""
Offering Catalog

Provider-owned bookable services. Only the owning provider may change or
delete an offering. Deactivation is a soft delete: existing appointments
keep pointing at the offering, it just stops being bookable.
"""

from typing import Any, Dict, List, Optional

import frappe
from frappe import _
from frappe.utils import cint, flt

from .access import TIER_ORDER, tier_satisfies
from .errors import (
	BookingValidationError,
	ForbiddenError,
	NotFoundError,
	OfferingHasBookingsError,
)
from .repositories import (
	AppointmentRepository,
	FrappeAppointmentRepository,
	FrappeOfferingRepository,
	OfferingRepository,
)
from .validation import parse_int

EDITABLE_FIELDS = (
	"title",
	"description",
	"duration_minutes",
	"price",
	"currency",
	"category",
	"required_tier",
	"max_bookings_per_day",
	"is_active",
)

DEFAULTS = {
	"description": "",
	"price": None,
	"currency": "USD",
	"category": "general",
	"required_tier": None,
	"max_bookings_per_day": 10,
	"is_active": 1,
}


def validate_offering_values(values: Dict[str, Any]) -> Dict[str, Any]:
	"""
	Normalize offering fields in place and return them.

	Rules:
	- title required
	- duration_minutes > 0
	- price >= 0 or empty
	- max_bookings_per_day >= 1
	- required_tier empty or one of TIER_ORDER
	"""
	if "title" in values:
		values["title"] = (values.get("title") or "").strip()
		if not values["title"]:
			frappe.throw(_("Title is required"), BookingValidationError)

	if "duration_minutes" in values:
		values["duration_minutes"] = parse_int(values["duration_minutes"], "duration_minutes", minimum=1)

	if "max_bookings_per_day" in values:
		values["max_bookings_per_day"] = parse_int(values["max_bookings_per_day"], "max_bookings_per_day", minimum=1)

	if "price" in values and values["price"] not in (None, ""):
		try:
			price = float(values["price"])
		except (TypeError, ValueError):
			frappe.throw(_("price must be a number"), BookingValidationError)
		if price < 0:
			frappe.throw(_("price cannot be negative"), BookingValidationError)
		values["price"] = flt(price, 2)
	elif "price" in values:
		values["price"] = None

	if "required_tier" in values:
		tier = values.get("required_tier") or None
		if tier is not None and tier not in TIER_ORDER:
			frappe.throw(
				_("required_tier must be one of: {0}").format(", ".join(TIER_ORDER)),
				BookingValidationError,
			)
		values["required_tier"] = tier

	if "is_active" in values:
		values["is_active"] = 1 if cint(values["is_active"]) else 0

	return values


class OfferingCatalog:
	def __init__(
		self,
		offerings: Optional[OfferingRepository] = None,
		appointments: Optional[AppointmentRepository] = None,
	):
		self.offerings = offerings or FrappeOfferingRepository()
		self.appointments = appointments or FrappeAppointmentRepository()

	def create_offering(self, provider: str, title: str, duration_minutes: int, **fields: Any) -> frappe._dict:
		if not provider:
			frappe.throw(_("provider is required"), BookingValidationError)

		values = dict(DEFAULTS)
		values.update({k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
		values.update({"provider": provider, "title": title, "duration_minutes": duration_minutes})

		offering = self.offerings.insert(validate_offering_values(values))
		frappe.logger("constellation_booking").info(f"Offering {offering.name} created by {provider}")
		return offering

	def get_offering(self, name: str) -> frappe._dict:
		offering = self.offerings.get(name)
		if not offering:
			frappe.throw(_("Offering {0} not found").format(name), NotFoundError)
		return offering

	def list_offerings(
		self,
		provider: Optional[str] = None,
		category: Optional[str] = None,
		tier: Optional[str] = None,
		include_inactive: bool = False,
	) -> List[frappe._dict]:
		"""
		Offerings filtered by provider and/or category.

		tier keeps only offerings a holder of that tier can book (open
		offerings plus those whose required tier it satisfies).
		"""
		filters = {}
		if provider:
			filters["provider"] = provider
		if category:
			filters["category"] = category
		if not include_inactive:
			filters["is_active"] = 1

		offerings = self.offerings.list(**filters)
		if tier:
			offerings = [o for o in offerings if tier_satisfies(tier, o.required_tier)]
		return offerings

	def update_offering(self, name: str, actor: str, **changes: Any) -> frappe._dict:
		"""Owner-only edit. provider cannot change; unknown fields are ignored."""
		self._get_owned(name, actor)

		updates = validate_offering_values({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
		if not updates:
			return self.get_offering(name)
		return self.offerings.update(name, updates)

	def deactivate_offering(self, name: str, actor: str) -> frappe._dict:
		return self.update_offering(name, actor, is_active=0)

	def delete_offering(self, name: str, actor: str) -> None:
		"""
		Owner-only hard delete.

		Refused with OfferingHasBookingsError while any non-cancelled
		appointment references the offering; deactivate it instead.
		"""
		self._get_owned(name, actor)

		live = [a for a in self.appointments.list(service=name) if a.status != "cancelled"]
		if live:
			frappe.throw(
				_("Offering {0} has {1} active appointment(s). Deactivate it instead.").format(name, len(live)),
				OfferingHasBookingsError,
			)

		self.offerings.delete(name)
		frappe.logger("constellation_booking").info(f"Offering {name} deleted by {actor}")

	def _get_owned(self, name: str, actor: str) -> frappe._dict:
		offering = self.get_offering(name)
		if offering.provider != actor:
			frappe.throw(_("Only the provider can manage this offering"), ForbiddenError)
		return offering
