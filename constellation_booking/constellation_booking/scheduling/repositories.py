"""
Booking Repositories

Storage interfaces consumed by the booking services, plus the Frappe
implementations used in production. Services receive repositories by
injection; records travel as frappe._dict so callers can use attribute
access the same way they would on frappe.get_all results.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import frappe

APPOINTMENT_DOCTYPE = "Booking Appointment"
OFFERING_DOCTYPE = "Booking Offering"
WINDOW_DOCTYPE = "Availability Window"
SUBSCRIPTION_DOCTYPE = "Member Subscription"

APPOINTMENT_FIELDS = [
	"name",
	"service",
	"client",
	"provider",
	"start_time",
	"end_time",
	"time_zone",
	"status",
	"notes",
	"meeting_link",
	"created_at",
	"updated_at",
	"reminder_sent",
	"feedback_provided",
]

OFFERING_FIELDS = [
	"name",
	"provider",
	"title",
	"description",
	"duration_minutes",
	"price",
	"currency",
	"category",
	"required_tier",
	"max_bookings_per_day",
	"is_active",
]

WINDOW_FIELDS = [
	"name",
	"provider",
	"day_of_week",
	"start_time",
	"end_time",
	"time_zone",
	"is_available",
]


class AppointmentRepository(ABC):
	"""Persistence for appointments; never deletes."""

	@abstractmethod
	def get(self, name: str) -> Optional[frappe._dict]:
		pass

	@abstractmethod
	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def list(self, **filters: Any) -> List[frappe._dict]:
		"""Appointments matching equality filters, ordered by start_time."""
		pass

	@abstractmethod
	def find_overlapping(
		self,
		provider: str,
		start_time: datetime,
		end_time: datetime,
		exclude: Optional[str] = None,
	) -> List[frappe._dict]:
		"""Non-cancelled appointments of provider overlapping [start_time, end_time)."""
		pass

	@abstractmethod
	def count_active_for_service_on(self, service: str, day_start: datetime, day_end: datetime) -> int:
		"""Non-cancelled appointments of service starting within [day_start, day_end)."""
		pass

	@contextmanager
	def lock_provider(self, provider: str) -> Iterator[None]:
		"""Serialize check-then-insert for one provider. No-op unless overridden."""
		yield


class OfferingRepository(ABC):
	@abstractmethod
	def get(self, name: str) -> Optional[frappe._dict]:
		pass

	@abstractmethod
	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def delete(self, name: str) -> None:
		pass

	@abstractmethod
	def list(self, **filters: Any) -> List[frappe._dict]:
		pass


class AvailabilityRepository(ABC):
	@abstractmethod
	def get(self, name: str) -> Optional[frappe._dict]:
		pass

	@abstractmethod
	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		pass

	@abstractmethod
	def delete(self, name: str) -> None:
		pass

	@abstractmethod
	def list(self, provider: str, day_of_week: Optional[int] = None) -> List[frappe._dict]:
		"""Windows of provider ordered by day_of_week then start_time."""
		pass


class SubscriptionDirectory(ABC):
	"""Billing collaborator: who holds which tier."""

	@abstractmethod
	def get_active_subscription(self, user: str) -> Optional[frappe._dict]:
		"""Return {tier, is_active, start_date, end_date} or None."""
		pass


# ===== FRAPPE IMPLEMENTATIONS =====


class FrappeAppointmentRepository(AppointmentRepository):
	def get(self, name: str) -> Optional[frappe._dict]:
		return frappe.db.get_value(APPOINTMENT_DOCTYPE, name, APPOINTMENT_FIELDS, as_dict=True)

	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		doc = frappe.get_doc({"doctype": APPOINTMENT_DOCTYPE, **values})
		doc.insert(ignore_permissions=True)
		return self.get(doc.name)

	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		# Through the document so the controller's transition guard runs.
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, name)
		doc.update(changes)
		doc.save(ignore_permissions=True)
		return self.get(name)

	def list(self, **filters: Any) -> List[frappe._dict]:
		return frappe.get_all(
			APPOINTMENT_DOCTYPE,
			filters=filters,
			fields=APPOINTMENT_FIELDS,
			order_by="start_time asc",
		)

	def find_overlapping(
		self,
		provider: str,
		start_time: datetime,
		end_time: datetime,
		exclude: Optional[str] = None,
	) -> List[frappe._dict]:
		# Overlap: start < end_time AND end > start_time
		filters = [
			["provider", "=", provider],
			["status", "!=", "cancelled"],
			["start_time", "<", end_time],
			["end_time", ">", start_time],
		]
		if exclude:
			filters.append(["name", "!=", exclude])

		return frappe.get_all(
			APPOINTMENT_DOCTYPE,
			filters=filters,
			fields=APPOINTMENT_FIELDS,
			order_by="start_time asc",
		)

	def count_active_for_service_on(self, service: str, day_start: datetime, day_end: datetime) -> int:
		return frappe.db.count(
			APPOINTMENT_DOCTYPE,
			filters=[
				["service", "=", service],
				["status", "!=", "cancelled"],
				["start_time", ">=", day_start],
				["start_time", "<", day_end],
			],
		)

	@contextmanager
	def lock_provider(self, provider: str) -> Iterator[None]:
		# Row lock on the provider's User record; held until the request's
		# transaction commits or rolls back.
		frappe.db.get_value("User", provider, "name", for_update=True)
		yield


class FrappeOfferingRepository(OfferingRepository):
	def get(self, name: str) -> Optional[frappe._dict]:
		return frappe.db.get_value(OFFERING_DOCTYPE, name, OFFERING_FIELDS, as_dict=True)

	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		doc = frappe.get_doc({"doctype": OFFERING_DOCTYPE, **values})
		doc.insert(ignore_permissions=True)
		return self.get(doc.name)

	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		doc = frappe.get_doc(OFFERING_DOCTYPE, name)
		doc.update(changes)
		doc.save(ignore_permissions=True)
		return self.get(name)

	def delete(self, name: str) -> None:
		# force: cancelled appointments may still link here
		frappe.delete_doc(OFFERING_DOCTYPE, name, ignore_permissions=True, force=True)

	def list(self, **filters: Any) -> List[frappe._dict]:
		return frappe.get_all(
			OFFERING_DOCTYPE,
			filters=filters,
			fields=OFFERING_FIELDS,
			order_by="title asc",
		)


class FrappeAvailabilityRepository(AvailabilityRepository):
	def get(self, name: str) -> Optional[frappe._dict]:
		return frappe.db.get_value(WINDOW_DOCTYPE, name, WINDOW_FIELDS, as_dict=True)

	def insert(self, values: Dict[str, Any]) -> frappe._dict:
		doc = frappe.get_doc({"doctype": WINDOW_DOCTYPE, **values})
		doc.insert(ignore_permissions=True)
		return self.get(doc.name)

	def update(self, name: str, changes: Dict[str, Any]) -> frappe._dict:
		doc = frappe.get_doc(WINDOW_DOCTYPE, name)
		doc.update(changes)
		doc.save(ignore_permissions=True)
		return self.get(name)

	def delete(self, name: str) -> None:
		frappe.delete_doc(WINDOW_DOCTYPE, name, ignore_permissions=True)

	def list(self, provider: str, day_of_week: Optional[int] = None) -> List[frappe._dict]:
		filters = {"provider": provider}
		if day_of_week is not None:
			filters["day_of_week"] = day_of_week

		return frappe.get_all(
			WINDOW_DOCTYPE,
			filters=filters,
			fields=WINDOW_FIELDS,
			order_by="day_of_week asc, start_time asc",
		)


class FrappeSubscriptionDirectory(SubscriptionDirectory):
	"""
	Subscription lookup.

	Apps that own billing can register `booking_subscription_resolver` in
	their hooks; the first one registered wins. Otherwise the user's most
	recent Member Subscription is used.
	"""

	def get_active_subscription(self, user: str) -> Optional[frappe._dict]:
		for hook_path in frappe.get_hooks("booking_subscription_resolver"):
			subscription = frappe.get_attr(hook_path)(user)
			return frappe._dict(subscription) if subscription else None

		rows = frappe.get_all(
			SUBSCRIPTION_DOCTYPE,
			filters={"user": user},
			fields=["tier", "is_active", "start_date", "end_date"],
			order_by="start_date desc",
			limit=1,
		)
		return rows[0] if rows else None
