"""
Appointment Ledger

State machine and conflict detection for appointments:

	scheduled -> confirmed -> completed
	scheduled -> cancelled
	scheduled / confirmed -> no-show

scheduled is the only initial state; completed, cancelled and no-show are
terminal. Appointments are never deleted, only transitioned.

Invariant: for one provider, non-cancelled appointments are pairwise
non-overlapping [start, end) intervals. Check-then-insert runs under the
repository's provider lock (database row lock, taken first) and a
per-provider in-process lock so two concurrent requests for the same slot cannot
both pass the overlap check.
"""

import threading
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import frappe
from frappe import _
from frappe.utils import cint, now_datetime

from .access import ensure_access
from .availability import AvailabilityRegistry
from .errors import (
	BookingLimitReachedError,
	BookingValidationError,
	ForbiddenError,
	InvalidStateTransitionError,
	NotFoundError,
	OfferingInactiveError,
	OfferingNotFoundError,
	OutsideAvailabilityError,
	SlotConflictError,
)
from .repositories import (
	AppointmentRepository,
	FrappeAppointmentRepository,
	FrappeOfferingRepository,
	FrappeSubscriptionDirectory,
	OfferingRepository,
	SubscriptionDirectory,
)
from . import settings
from .validation import parse_datetime, validate_time_zone

SCHEDULED = "scheduled"
CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"
NO_SHOW = "no-show"

STATUSES = (SCHEDULED, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW)
ACTIVE_STATUSES = (SCHEDULED, CONFIRMED)

TRANSITIONS = {
	SCHEDULED: (CONFIRMED, CANCELLED, NO_SHOW),
	CONFIRMED: (COMPLETED, NO_SHOW),
	COMPLETED: (),
	CANCELLED: (),
	NO_SHOW: (),
}

CLIENT_FIELDS = ("notes", "status")
PROVIDER_FIELDS = ("status", "notes", "meeting_link")


def is_terminal(status: str) -> bool:
	return not TRANSITIONS.get(status)


def validate_transition(current: str, target: str) -> None:
	"""Raise InvalidStateTransitionError unless current -> target is allowed."""
	if target not in STATUSES:
		frappe.throw(_("Unknown status '{0}'").format(target), BookingValidationError)

	if target not in TRANSITIONS.get(current, ()):
		frappe.throw(
			_("Cannot change an appointment from {0} to {1}").format(current, target),
			InvalidStateTransitionError,
		)


class ProviderLocks:
	"""Lazily created threading.Lock per provider id."""

	def __init__(self):
		self._guard = threading.Lock()
		self._locks = defaultdict(threading.Lock)

	def get(self, provider: str) -> threading.Lock:
		with self._guard:
			return self._locks[provider]


_provider_locks = ProviderLocks()


class AppointmentLedger:
	"""
	Creates, transitions and queries appointments.

	Collaborators are injected; defaults are the Frappe-backed repositories.
	clock returns the current reference time.
	"""

	def __init__(
		self,
		appointments: Optional[AppointmentRepository] = None,
		offerings: Optional[OfferingRepository] = None,
		availability: Optional[AvailabilityRegistry] = None,
		subscriptions: Optional[SubscriptionDirectory] = None,
		clock: Callable[[], datetime] = now_datetime,
		locks: Optional[ProviderLocks] = None,
	):
		self.appointments = appointments or FrappeAppointmentRepository()
		self.offerings = offerings or FrappeOfferingRepository()
		self.availability = availability or AvailabilityRegistry()
		self.subscriptions = subscriptions or FrappeSubscriptionDirectory()
		self.clock = clock
		self.locks = locks or _provider_locks

	# ===== CREATE =====

	def create_appointment(
		self,
		service: str,
		client: str,
		start_time: Any,
		end_time: Any = None,
		time_zone: str = "UTC",
		notes: Optional[str] = None,
	) -> frappe._dict:
		"""
		Book service for client starting at start_time.

		Preconditions, checked in order:
			1. offering exists                  -> OfferingNotFoundError
			2. offering is active               -> OfferingInactiveError
			3. client tier meets required tier  -> InsufficientTierError
			4. no overlap with provider's non-cancelled appointments -> SlotConflictError
			5. inside an enabled availability window -> OutsideAvailabilityError
			6. offering's daily cap not reached -> BookingLimitReachedError

		end_time is optional; when given it must equal start_time plus the
		offering duration.

		Returns:
			frappe._dict: the new appointment, status "scheduled"
		"""
		if not client:
			frappe.throw(_("client is required"), BookingValidationError)
		if not service:
			frappe.throw(_("service is required"), BookingValidationError)

		start = parse_datetime(start_time, "start_time")
		requested_end = parse_datetime(end_time, "end_time") if end_time not in (None, "") else None
		time_zone = validate_time_zone(time_zone or "UTC")

		if requested_end is not None and requested_end <= start:
			frappe.throw(_("end_time must be later than start_time"), BookingValidationError)

		# 1-2. Offering
		offering = self.offerings.get(service)
		if not offering:
			frappe.throw(_("Offering {0} not found").format(service), OfferingNotFoundError)
		if not cint(offering.is_active):
			frappe.throw(_("{0} is no longer available for booking").format(offering.title), OfferingInactiveError)

		end = start + timedelta(minutes=cint(offering.duration_minutes))
		if requested_end is not None and requested_end != end:
			frappe.throw(
				_("end_time must be start_time plus {0} minutes").format(offering.duration_minutes),
				BookingValidationError,
			)

		# 3. Tier
		if offering.required_tier:
			ensure_access(self.subscriptions.get_active_subscription(client), offering.required_tier, self.clock())

		provider = offering.provider

		# Row lock (held until commit) is always taken before the in-process lock.
		with self.appointments.lock_provider(provider), self.locks.get(provider):
			# 4. Conflicts
			conflicts = self.appointments.find_overlapping(provider, start, end)
			if conflicts:
				frappe.throw(
					_("This time overlaps an existing appointment. Please choose another time."),
					SlotConflictError,
				)

			# 5. Availability
			if settings.enforce_availability() and not self.availability.covers(provider, start, end):
				frappe.throw(
					_("{0}-{1} is outside the provider's availability").format(
						start.strftime("%H:%M"), end.strftime("%H:%M")
					),
					OutsideAvailabilityError,
				)

			# 6. Daily cap
			day_start = datetime.combine(start.date(), datetime.min.time())
			booked = self.appointments.count_active_for_service_on(service, day_start, day_start + timedelta(days=1))
			if booked >= cint(offering.max_bookings_per_day):
				frappe.throw(
					_("{0} is fully booked on {1}").format(offering.title, start.strftime("%Y-%m-%d")),
					BookingLimitReachedError,
				)

			now = self.clock()
			appointment = self.appointments.insert({
				"service": service,
				"client": client,
				"provider": provider,
				"start_time": start,
				"end_time": end,
				"time_zone": time_zone,
				"status": SCHEDULED,
				"notes": notes or None,
				"meeting_link": None,
				"created_at": now,
				"updated_at": now,
				"reminder_sent": 0,
				"feedback_provided": 0,
			})

		frappe.logger("constellation_booking").info(
			f"Appointment {appointment.name} scheduled: {service} for {client} "
			f"with {provider} at {start.isoformat()}"
		)
		return appointment

	# ===== MUTATIONS =====

	def update_appointment(self, name: str, actor: str, patch: Dict[str, Any]) -> frappe._dict:
		"""
		Apply the part of patch that actor's role may change.

		- client: notes; status only to "cancelled"
		- provider: status (any allowed transition), notes, meeting_link

		Anything else in the patch is dropped without error. Returns the
		record unchanged (updated_at untouched) when nothing applies.
		"""
		appointment = self.get_appointment(name, actor)
		is_provider = actor == appointment.provider
		allowed = PROVIDER_FIELDS if is_provider else CLIENT_FIELDS

		changes = {}
		for field in allowed:
			if field not in (patch or {}):
				continue
			value = patch[field]

			if field == "status":
				if value == appointment.status:
					continue
				if not is_provider and value != CANCELLED:
					continue
				validate_transition(appointment.status, value)
			elif value == appointment.get(field):
				continue

			changes[field] = value

		if not changes:
			return appointment

		changes["updated_at"] = self.clock()
		updated = self.appointments.update(name, changes)

		if "status" in changes:
			frappe.logger("constellation_booking").info(
				f"Appointment {name}: {appointment.status} -> {changes['status']} by {actor}"
			)
		return updated

	def cancel_appointment(self, name: str, actor: str) -> frappe._dict:
		"""
		Cancel a scheduled appointment, freeing its interval.

		Only scheduled appointments can be cancelled here; anything else
		raises InvalidStateTransitionError.
		"""
		appointment = self.get_appointment(name, actor)

		if appointment.status != SCHEDULED:
			frappe.throw(
				_("Only scheduled appointments can be cancelled (current status: {0})").format(appointment.status),
				InvalidStateTransitionError,
			)

		updated = self.appointments.update(name, {"status": CANCELLED, "updated_at": self.clock()})
		frappe.logger("constellation_booking").info(f"Appointment {name} cancelled by {actor}")
		return updated

	def mark_reminder_sent(self, name: str) -> frappe._dict:
		self.get_appointment(name)
		return self.appointments.update(name, {"reminder_sent": 1, "updated_at": self.clock()})

	def mark_feedback_provided(self, name: str) -> frappe._dict:
		self.get_appointment(name)
		return self.appointments.update(name, {"feedback_provided": 1, "updated_at": self.clock()})

	# ===== QUERIES =====

	def get_appointment(self, name: str, actor: Optional[str] = None) -> frappe._dict:
		"""Fetch one appointment; when actor is given it must be the client or provider."""
		appointment = self.appointments.get(name)
		if not appointment:
			frappe.throw(_("Appointment {0} not found").format(name), NotFoundError)

		if actor is not None and actor not in (appointment.client, appointment.provider):
			frappe.throw(_("You are not a party to this appointment"), ForbiddenError)
		return appointment

	def get_by_client(self, client: str) -> List[frappe._dict]:
		return self.appointments.list(client=client)

	def get_by_provider(self, provider: str) -> List[frappe._dict]:
		return self.appointments.list(provider=provider)
