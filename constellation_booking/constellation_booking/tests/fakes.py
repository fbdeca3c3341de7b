"""
In-memory repositories for service-level tests.

They implement the same interfaces as the Frappe repositories so the
booking rules can be exercised without touching the database.
"""

import threading
import time as _time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from itertools import count

import frappe

from constellation_booking.constellation_booking.scheduling.availability import AvailabilityRegistry
from constellation_booking.constellation_booking.scheduling.catalog import OfferingCatalog
from constellation_booking.constellation_booking.scheduling.intervals import overlaps
from constellation_booking.constellation_booking.scheduling.ledger import AppointmentLedger, ProviderLocks
from constellation_booking.constellation_booking.scheduling.repositories import (
	AppointmentRepository,
	AvailabilityRepository,
	OfferingRepository,
	SubscriptionDirectory,
)


class _MemoryStore:
	def __init__(self, prefix):
		self.prefix = prefix
		self.rows = {}
		self._counter = count(1)
		self._guard = threading.Lock()

	def get(self, name):
		row = self.rows.get(name)
		return frappe._dict(row) if row else None

	def insert(self, values):
		with self._guard:
			name = f"{self.prefix}-{next(self._counter):05d}"
			self.rows[name] = frappe._dict(values, name=name)
		return self.get(name)

	def update(self, name, changes):
		self.rows[name].update(changes)
		return self.get(name)

	def delete(self, name):
		self.rows.pop(name, None)

	def filter(self, **filters):
		return [
			frappe._dict(row)
			for row in self.rows.values()
			if all(row.get(field) == value for field, value in filters.items())
		]


class FakeAppointmentRepository(AppointmentRepository):
	"""
	latency (seconds) is slept between the overlap read and the caller's
	insert, widening the race window for concurrency tests.
	"""

	def __init__(self, latency=0):
		self.store = _MemoryStore("APT")
		self.latency = latency
		self._locks = defaultdict(threading.Lock)

	def get(self, name):
		return self.store.get(name)

	def insert(self, values):
		return self.store.insert(values)

	def update(self, name, changes):
		return self.store.update(name, changes)

	def list(self, **filters):
		return sorted(self.store.filter(**filters), key=lambda a: a.start_time)

	def find_overlapping(self, provider, start_time, end_time, exclude=None):
		found = [
			a for a in self.store.filter(provider=provider)
			if a.status != "cancelled"
			and a.name != exclude
			and overlaps(a.start_time, a.end_time, start_time, end_time)
		]
		if self.latency:
			_time.sleep(self.latency)
		return sorted(found, key=lambda a: a.start_time)

	def count_active_for_service_on(self, service, day_start, day_end):
		return len([
			a for a in self.store.filter(service=service)
			if a.status != "cancelled" and day_start <= a.start_time < day_end
		])

	@contextmanager
	def lock_provider(self, provider):
		with self._locks[provider]:
			yield


class FakeOfferingRepository(OfferingRepository):
	def __init__(self):
		self.store = _MemoryStore("OFR")

	def get(self, name):
		return self.store.get(name)

	def insert(self, values):
		return self.store.insert(values)

	def update(self, name, changes):
		return self.store.update(name, changes)

	def delete(self, name):
		self.store.delete(name)

	def list(self, **filters):
		return sorted(self.store.filter(**filters), key=lambda o: o.title)


class FakeAvailabilityRepository(AvailabilityRepository):
	def __init__(self):
		self.store = _MemoryStore("AW")

	def get(self, name):
		return self.store.get(name)

	def insert(self, values):
		return self.store.insert(values)

	def update(self, name, changes):
		return self.store.update(name, changes)

	def delete(self, name):
		self.store.delete(name)

	def list(self, provider, day_of_week=None):
		filters = {"provider": provider}
		if day_of_week is not None:
			filters["day_of_week"] = day_of_week
		return sorted(self.store.filter(**filters), key=lambda w: (w.day_of_week, w.start_time))


class FakeSubscriptionDirectory(SubscriptionDirectory):
	def __init__(self, subscriptions=None):
		self.subscriptions = dict(subscriptions or {})

	def subscribe(self, user, tier, is_active=1, start_date=None, end_date=None):
		self.subscriptions[user] = frappe._dict(
			tier=tier, is_active=is_active, start_date=start_date, end_date=end_date
		)

	def get_active_subscription(self, user):
		return self.subscriptions.get(user)


class FixedClock:
	"""Callable clock that tests can move forward."""

	def __init__(self, now: datetime):
		self.now = now

	def __call__(self) -> datetime:
		return self.now


class BookingWorld:
	"""Wires fakes into the real services with a fixed clock."""

	def __init__(self, now: datetime, latency=0):
		self.clock = FixedClock(now)
		self.appointments = FakeAppointmentRepository(latency=latency)
		self.offerings = FakeOfferingRepository()
		self.windows = FakeAvailabilityRepository()
		self.subscriptions = FakeSubscriptionDirectory()

		self.availability = AvailabilityRegistry(self.windows)
		self.catalog = OfferingCatalog(self.offerings, self.appointments)
		self.ledger = AppointmentLedger(
			appointments=self.appointments,
			offerings=self.offerings,
			availability=self.availability,
			subscriptions=self.subscriptions,
			clock=self.clock,
			locks=ProviderLocks(),
		)
