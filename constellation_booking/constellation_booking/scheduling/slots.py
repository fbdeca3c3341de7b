"""
Slot Generation Service

Generates bookable start times for one provider and date, considering:
- Enabled availability windows for that weekday
- Existing non-cancelled appointments
- The current time (past starts are dropped)
"""

import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from frappe.utils import getdate, now_datetime

from . import settings
from .availability import AvailabilityRegistry
from .intervals import overlaps
from .repositories import AppointmentRepository, FrappeAppointmentRepository


def get_available_slot_intervals(
	provider: str,
	target_date: Union[date, str],
	duration_minutes: int,
	now: Optional[datetime] = None,
	availability: Optional[AvailabilityRegistry] = None,
	appointments: Optional[AppointmentRepository] = None,
) -> List[Dict[str, Any]]:
	"""
	Free slots of duration_minutes for provider on target_date.

	Returns:
		list[dict]: [
			{"label": "09:30", "start": datetime, "end": datetime},
			...
		]

	Algorithm:
		1. Enabled windows for the weekday (merged)
		2. Candidate starts on the day grid (every slot increment from
		   midnight) inside each window, keeping those whose
		   start + duration fits the window
		3. Drop candidates overlapping a non-cancelled appointment
		4. Drop candidates starting before now
	"""
	if isinstance(target_date, str):
		target_date = getdate(target_date)

	availability = availability or AvailabilityRegistry()
	appointments = appointments or FrappeAppointmentRepository()
	now = now or now_datetime()

	duration = timedelta(minutes=int(duration_minutes))
	step = timedelta(minutes=settings.get_slot_increment())

	windows = availability.windows_for_day(provider, target_date)
	if not windows or duration <= timedelta(0):
		return []

	day_start = datetime.combine(target_date, datetime.min.time())
	booked = appointments.find_overlapping(provider, day_start, day_start + timedelta(days=1))

	slots = []
	for window in windows:
		# first grid point at or after the window start
		slot_start = day_start + step * math.ceil((window["start"] - day_start) / step)

		while slot_start + duration <= window["end"]:
			slot_end = slot_start + duration

			if slot_start >= now and not any(
				overlaps(slot_start, slot_end, a.start_time, a.end_time) for a in booked
			):
				slots.append({
					"label": slot_start.strftime("%H:%M"),
					"start": slot_start,
					"end": slot_end,
				})

			slot_start += step

	return slots


def get_available_slots(
	provider: str,
	target_date: Union[date, str],
	duration_minutes: int,
	now: Optional[datetime] = None,
	availability: Optional[AvailabilityRegistry] = None,
	appointments: Optional[AppointmentRepository] = None,
) -> List[str]:
	"""Start-time labels ("HH:MM") of the free slots, ascending."""
	return [
		slot["label"]
		for slot in get_available_slot_intervals(
			provider, target_date, duration_minutes, now=now,
			availability=availability, appointments=appointments,
		)
	]
