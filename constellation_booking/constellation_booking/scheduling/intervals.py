"""
Interval Utilities

Half-open [start, end) interval arithmetic shared by slot generation,
conflict detection and availability validation.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Union

import pytz
from frappe.utils import get_datetime, get_time

Interval = Dict[str, datetime]


def overlaps(a_start, a_end, b_start, b_end) -> bool:
	"""
	True if [a_start, a_end) and [b_start, b_end) share any instant.

	Touching intervals (a_end == b_start) do not overlap, so back-to-back
	bookings are allowed.
	"""
	return a_start < b_end and b_start < a_end


def contains(outer_start, outer_end, start, end) -> bool:
	"""True if [start, end) lies entirely inside [outer_start, outer_end)."""
	return outer_start <= start and end <= outer_end


def day_of_week(target_date: Union[date, datetime]) -> int:
	"""Weekday number with Sunday = 0 ... Saturday = 6."""
	return (target_date.weekday() + 1) % 7


def to_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Convert the formats Frappe hands back for Time fields to datetime.time.

	Args:
		time_value: time, timedelta (since midnight) or "HH:MM[:SS]" string

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		return get_time(time_value)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def to_naive_utc(value: Union[datetime, str]) -> datetime:
	"""
	Parse a datetime and normalize it to a naive value.

	Aware values (e.g. ISO strings ending in Z) are converted to UTC first;
	naive values are taken as already being in the reference clock.
	"""
	value = get_datetime(value)
	if value.tzinfo is not None:
		value = value.astimezone(pytz.UTC).replace(tzinfo=None)
	return value


def merge_intervals(intervals: List[Interval]) -> List[Interval]:
	"""
	Merge overlapping or adjacent intervals.

	Args:
		intervals: list of {"start": datetime, "end": datetime}

	Returns:
		list: merged intervals sorted by start
	"""
	if not intervals:
		return []

	ordered = sorted(({"start": i["start"], "end": i["end"]} for i in intervals), key=lambda x: x["start"])
	merged = [ordered[0]]

	for current in ordered[1:]:
		last_merged = merged[-1]
		if current["start"] <= last_merged["end"]:
			if current["end"] > last_merged["end"]:
				last_merged["end"] = current["end"]
		else:
			merged.append(current)

	return merged


def interval_subtract(interval: Interval, block: Interval) -> List[Interval]:
	"""
	Remove block from interval.

	Returns:
		list: 0, 1 or 2 remaining intervals
	"""
	if not overlaps(interval["start"], interval["end"], block["start"], block["end"]):
		return [interval]

	remaining = []
	if block["start"] > interval["start"]:
		remaining.append({"start": interval["start"], "end": block["start"]})
	if block["end"] < interval["end"]:
		remaining.append({"start": block["end"], "end": interval["end"]})
	return remaining
