"""
Query Views

Read projections over the ledger used by the booking UI:
upcoming, past, and the filtered listing behind the API.
"""

from datetime import datetime
from typing import List, Optional

import frappe
from frappe.utils import get_datetime, now_datetime

from .ledger import ACTIVE_STATUSES, CANCELLED, COMPLETED, AppointmentLedger
from .slots import get_available_slot_intervals, get_available_slots  # noqa: F401


def _for_user(ledger: AppointmentLedger, user: str, as_provider: bool) -> List[frappe._dict]:
	return ledger.get_by_provider(user) if as_provider else ledger.get_by_client(user)


def is_upcoming(appointment, now: datetime) -> bool:
	return appointment.status in ACTIVE_STATUSES and get_datetime(appointment.start_time) > now


def is_past(appointment, now: datetime) -> bool:
	return appointment.status in (COMPLETED, CANCELLED) or get_datetime(appointment.end_time) < now


def get_upcoming(
	user: str,
	as_provider: bool = False,
	now: Optional[datetime] = None,
	ledger: Optional[AppointmentLedger] = None,
) -> List[frappe._dict]:
	"""Scheduled or confirmed appointments starting after now, soonest first."""
	ledger = ledger or AppointmentLedger()
	now = now or now_datetime()

	upcoming = [a for a in _for_user(ledger, user, as_provider) if is_upcoming(a, now)]
	upcoming.sort(key=lambda a: get_datetime(a.start_time))
	return upcoming


def get_past(
	user: str,
	as_provider: bool = False,
	now: Optional[datetime] = None,
	ledger: Optional[AppointmentLedger] = None,
) -> List[frappe._dict]:
	"""Completed or cancelled appointments, plus anything that already ended; most recent first."""
	ledger = ledger or AppointmentLedger()
	now = now or now_datetime()

	past = [a for a in _for_user(ledger, user, as_provider) if is_past(a, now)]
	past.sort(key=lambda a: get_datetime(a.start_time), reverse=True)
	return past


def list_appointments(
	user: str,
	as_provider: bool = False,
	status: Optional[str] = None,
	upcoming: bool = False,
	past: bool = False,
	now: Optional[datetime] = None,
	ledger: Optional[AppointmentLedger] = None,
) -> List[frappe._dict]:
	"""
	Appointments where user is client (or provider), optionally narrowed.

	upcoming and past select the matching view; status further filters
	the result.
	"""
	ledger = ledger or AppointmentLedger()

	if upcoming:
		appointments = get_upcoming(user, as_provider, now, ledger)
	elif past:
		appointments = get_past(user, as_provider, now, ledger)
	else:
		appointments = _for_user(ledger, user, as_provider)

	if status:
		appointments = [a for a in appointments if a.status == status]
	return appointments
