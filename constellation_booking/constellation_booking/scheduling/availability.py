"""
Availability Registry

Weekly recurring availability windows per provider:
- One window = day of week + local start/end time + timezone + enabled flag
- Several windows per day are allowed, but enabled ones must not overlap
- Windows are a template; actual bookability is resolved at slot
  generation and booking time
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union

import frappe
from frappe import _
from frappe.utils import cint, getdate

from .errors import ForbiddenError, InvalidWindowError, NotFoundError
from .intervals import Interval, day_of_week, merge_intervals, overlaps, to_time
from .repositories import AvailabilityRepository, FrappeAvailabilityRepository
from .validation import validate_time_zone

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class AvailabilityRegistry:
	"""
	Provider-owned weekly availability.

	Validations on insert/update:
	- day_of_week in 0..6 (Sunday first)
	- start_time < end_time
	- No overlap with another enabled window of the same provider and day
	"""

	def __init__(self, repository: Optional[AvailabilityRepository] = None):
		self.repository = repository or FrappeAvailabilityRepository()

	def set_window(
		self,
		provider: str,
		day: int,
		start_time: Union[time, str],
		end_time: Union[time, str],
		time_zone: str = "UTC",
		is_available: bool = True,
		actor: Optional[str] = None,
	) -> frappe._dict:
		"""Create a window for provider. actor, when given, must be the provider."""
		if actor is not None and actor != provider:
			frappe.throw(_("You can only manage your own availability"), ForbiddenError)

		values = {
			"provider": provider,
			"day_of_week": day,
			"start_time": start_time,
			"end_time": end_time,
			"time_zone": time_zone,
			"is_available": 1 if is_available else 0,
		}
		values = self.validate_window(values)
		window = self.repository.insert(values)

		frappe.logger("constellation_booking").info(
			f"Availability window {window.name} set for {provider}: "
			f"{WEEKDAY_NAMES[values['day_of_week']]} {values['start_time']}-{values['end_time']}"
		)
		return window

	def update_window(self, name: str, actor: str, **changes: Any) -> frappe._dict:
		"""Change times, timezone or the enabled flag of an owned window."""
		window = self._get_owned(name, actor)

		allowed = {k: v for k, v in changes.items() if k in ("day_of_week", "start_time", "end_time", "time_zone", "is_available")}
		if "is_available" in allowed:
			allowed["is_available"] = 1 if cint(allowed["is_available"]) else 0

		merged = {**window, **allowed}
		merged = self.validate_window(merged, exclude=name)
		return self.repository.update(name, {k: merged[k] for k in allowed})

	def list_windows(self, provider: str) -> List[frappe._dict]:
		"""All windows of provider, disabled ones included."""
		return self.repository.list(provider)

	def remove_window(self, name: str, actor: str) -> None:
		"""Delete an owned window. Fails with NotFoundError if absent or owned by someone else."""
		self._get_owned(name, actor)
		self.repository.delete(name)

	def windows_for_day(self, provider: str, target_date: Union[date, str]) -> List[Interval]:
		"""
		Enabled windows of provider on target_date as datetime intervals.

		Returns:
			list[dict]: merged [{"start": datetime, "end": datetime}, ...]
		"""
		if isinstance(target_date, str):
			target_date = getdate(target_date)

		intervals = []
		for window in self.repository.list(provider, day_of_week(target_date)):
			if not cint(window.is_available):
				continue
			intervals.append({
				"start": datetime.combine(target_date, to_time(window.start_time)),
				"end": datetime.combine(target_date, to_time(window.end_time)),
			})

		return merge_intervals(intervals)

	def covers(self, provider: str, start_time: datetime, end_time: datetime) -> bool:
		"""True if [start_time, end_time) lies inside one enabled window of that day."""
		if start_time.date() != end_time.date():
			return False
		for window in self.windows_for_day(provider, start_time.date()):
			if window["start"] <= start_time and end_time <= window["end"]:
				return True
		return False

	def validate_window(self, values: Dict[str, Any], exclude: Optional[str] = None) -> Dict[str, Any]:
		"""
		Normalize and validate window values; raise InvalidWindowError on bad data.

		Returns:
			dict: values with day_of_week as int and times as "HH:MM:SS"
		"""
		values = dict(values)

		try:
			day = int(values.get("day_of_week"))
		except (TypeError, ValueError):
			day = -1
		if day < 0 or day > 6:
			frappe.throw(_("Day of week must be between 0 (Sunday) and 6 (Saturday)"), InvalidWindowError)

		if values.get("start_time") in (None, "") or values.get("end_time") in (None, ""):
			frappe.throw(_("Start Time and End Time are required"), InvalidWindowError)

		try:
			start = to_time(values["start_time"])
			end = to_time(values["end_time"])
		except (ValueError, frappe.ValidationError):
			frappe.throw(_("Invalid time format. Use HH:MM"), InvalidWindowError)

		if start >= end:
			frappe.throw(
				_("Start Time ({0}) must be earlier than End Time ({1})").format(
					start.strftime("%H:%M"), end.strftime("%H:%M")
				),
				InvalidWindowError,
			)

		values["day_of_week"] = day
		values["time_zone"] = validate_time_zone(values.get("time_zone") or "UTC")

		if cint(values.get("is_available", 1)):
			self._check_no_overlap(values["provider"], day, start, end, exclude)

		values["start_time"] = start.strftime("%H:%M:%S")
		values["end_time"] = end.strftime("%H:%M:%S")

		return values

	def _check_no_overlap(self, provider: str, day: int, start: time, end: time, exclude: Optional[str]) -> None:
		for other in self.repository.list(provider, day):
			if other.name == exclude or not cint(other.is_available):
				continue
			other_start = to_time(other.start_time)
			other_end = to_time(other.end_time)
			if overlaps(start, end, other_start, other_end):
				frappe.throw(
					_("{0}: {1}-{2} overlaps existing window {3}-{4}").format(
						WEEKDAY_NAMES[day],
						start.strftime("%H:%M"),
						end.strftime("%H:%M"),
						other_start.strftime("%H:%M"),
						other_end.strftime("%H:%M"),
					),
					InvalidWindowError,
				)

	def _get_owned(self, name: str, actor: str) -> frappe._dict:
		window = self.repository.get(name)
		if not window or window.provider != actor:
			frappe.throw(_("Availability window {0} not found").format(name), NotFoundError)
		return window
