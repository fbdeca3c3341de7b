"""
Tests for the whitelisted booking endpoints

Runs against the test site: offerings, availability and appointments
as the logged-in provider and clients.
"""

import unittest
from datetime import timedelta

import frappe
from frappe.utils import getdate

from constellation_booking.api.appointments import (
	cancel_appointment,
	create_appointment,
	get_appointment,
	get_available_slots,
	list_appointments,
	update_appointment,
)
from constellation_booking.api.availability import (
	list_availability,
	remove_availability,
	set_availability,
	update_availability,
)
from constellation_booking.api.offerings import (
	create_offering,
	delete_offering,
	get_offering,
	list_offerings,
	update_offering,
)
from constellation_booking.constellation_booking.scheduling.errors import (
	BookingValidationError,
	ForbiddenError,
	InsufficientTierError,
	InvalidStateTransitionError,
	OfferingHasBookingsError,
	OfferingInactiveError,
	SlotConflictError,
)

PROVIDER = "api-provider@example.com"
ALICE = "api-alice@example.com"
BOB = "api-bob@example.com"


def ensure_user(email):
	if not frappe.db.exists("User", email):
		frappe.get_doc({
			"doctype": "User",
			"email": email,
			"first_name": email.split("@")[0],
			"send_welcome_email": 0,
		}).insert(ignore_permissions=True)
	return email


def next_monday():
	"""A Monday at least a week ahead, so no slot is in the past."""
	today = getdate()
	return today + timedelta(days=7 + (7 - today.weekday()) % 7)


class TestAppointmentAPI(unittest.TestCase):
	"""Tests for API endpoints."""

	def setUp(self):
		"""Provider with Monday 09:00-17:00 availability and an open Consult."""
		for user in (PROVIDER, ALICE, BOB):
			ensure_user(user)
		frappe.cache.delete_keys("rate_limit:constellation_booking:")

		self.monday = next_monday()
		self.day = self.monday.strftime("%Y-%m-%d")

		frappe.set_user(PROVIDER)
		self.window = set_availability(1, "09:00", "17:00", "UTC")
		self.consult = create_offering("Consult", 30, category="coaching")

	def tearDown(self):
		"""Clean up after tests."""
		frappe.set_user("Administrator")
		frappe.db.rollback()

	def at(self, hhmm):
		return f"{self.day}T{hhmm}:00Z"

	def test_create_offering_response(self):
		self.assertEqual(self.consult["provider"], PROVIDER)
		self.assertEqual(self.consult["duration_minutes"], 30)
		self.assertEqual(self.consult["category"], "coaching")
		self.assertEqual(self.consult["is_active"], 1)

	def test_guest_reads_catalog_and_slots(self):
		frappe.set_user("Guest")

		offerings = list_offerings(provider=PROVIDER)
		self.assertIn(self.consult["name"], [o["name"] for o in offerings])
		self.assertEqual(get_offering(self.consult["name"])["title"], "Consult")

		result = get_available_slots(self.consult["name"], self.day)
		self.assertEqual(result["slots"][0]["label"], "09:00")
		self.assertEqual(result["slots"][0]["start"], f"{self.day}T09:00:00")
		self.assertEqual(len(result["slots"]), 16)

	def test_guest_cannot_book(self):
		frappe.set_user("Guest")

		with self.assertRaises(frappe.AuthenticationError):
			create_appointment(self.consult["name"], self.at("09:00"))

	def test_honeypot_rejects_bots(self):
		frappe.set_user(ALICE)

		with self.assertRaises(frappe.ValidationError):
			create_appointment(self.consult["name"], self.at("09:00"), honeypot="http://spam.example.com")

	def test_book_conflict_cancel_rebook(self):
		frappe.set_user(ALICE)
		first = create_appointment(self.consult["name"], self.at("09:00"), end_time=self.at("09:30"))
		self.assertEqual(first["status"], "scheduled")
		self.assertEqual(first["provider"], PROVIDER)
		self.assertEqual(first["start_time"], f"{self.day}T09:00:00")

		frappe.set_user(BOB)
		with self.assertRaises(SlotConflictError):
			create_appointment(self.consult["name"], self.at("09:15"), end_time=self.at("09:45"))

		frappe.set_user(ALICE)
		cancelled = cancel_appointment(first["name"])
		self.assertTrue(cancelled["success"])
		self.assertEqual(cancelled["appointment"]["status"], "cancelled")

		with self.assertRaises(InvalidStateTransitionError):
			cancel_appointment(first["name"])

		frappe.set_user(BOB)
		second = create_appointment(self.consult["name"], self.at("09:15"), end_time=self.at("09:45"))
		self.assertEqual(second["status"], "scheduled")

	def test_booked_slot_disappears(self):
		frappe.set_user(ALICE)
		create_appointment(self.consult["name"], self.at("10:00"))

		labels = [s["label"] for s in get_available_slots(self.consult["name"], self.day)["slots"]]
		self.assertNotIn("10:00", labels)
		self.assertIn("09:30", labels)
		self.assertIn("10:30", labels)

	def test_tier_gated_offering(self):
		frappe.set_user(PROVIDER)
		premium = create_offering("Deep Dive", 60, required_tier="premium")

		frappe.set_user("Administrator")
		frappe.get_doc({
			"doctype": "Member Subscription",
			"user": ALICE,
			"tier": "growth",
			"is_active": 1,
			"start_date": getdate() - timedelta(days=30),
		}).insert(ignore_permissions=True)

		frappe.set_user(ALICE)
		with self.assertRaises(InsufficientTierError):
			create_appointment(premium["name"], self.at("11:00"))

	def test_party_access(self):
		frappe.set_user(ALICE)
		booked = create_appointment(self.consult["name"], self.at("11:00"), notes="Intro call")

		self.assertEqual(get_appointment(booked["name"])["notes"], "Intro call")

		frappe.set_user(BOB)
		with self.assertRaises(ForbiddenError):
			get_appointment(booked["name"])

		frappe.set_user(PROVIDER)
		provided = list_appointments(as_provider=1, upcoming=1)
		self.assertEqual([a["name"] for a in provided], [booked["name"]])

	def test_update_appointment_roles(self):
		frappe.set_user(ALICE)
		booked = create_appointment(self.consult["name"], self.at("11:00"))

		patched = update_appointment(booked["name"], '{"notes": "Running late", "meeting_link": "https://x.example.com"}')
		self.assertEqual(patched["notes"], "Running late")
		self.assertFalse(patched["meeting_link"])

		frappe.set_user(PROVIDER)
		confirmed = update_appointment(booked["name"], {"status": "confirmed", "meeting_link": "https://meet.example.com/r1"})
		self.assertEqual(confirmed["status"], "confirmed")
		self.assertEqual(confirmed["meeting_link"], "https://meet.example.com/r1")

		with self.assertRaises(BookingValidationError):
			update_appointment(booked["name"], "[1, 2]")
		with self.assertRaises(BookingValidationError):
			update_appointment(booked["name"], "{not json")

	def test_delete_offering_with_bookings(self):
		frappe.set_user(ALICE)
		create_appointment(self.consult["name"], self.at("12:00"))

		frappe.set_user(PROVIDER)
		with self.assertRaises(OfferingHasBookingsError):
			delete_offering(self.consult["name"])

		retired = update_offering(self.consult["name"], {"is_active": 0})
		self.assertEqual(retired["is_active"], 0)

	def test_manage_availability(self):
		windows = list_availability()
		self.assertEqual(windows[0]["start_time"], "09:00:00")

		updated = update_availability(self.window["name"], {"end_time": "12:00"})
		self.assertEqual(updated["end_time"], "12:00:00")

		frappe.set_user(ALICE)
		self.assertEqual(len(list_availability(provider=PROVIDER)), 1)
		with self.assertRaises(frappe.DoesNotExistError):
			remove_availability(self.window["name"])

		frappe.set_user(PROVIDER)
		self.assertTrue(remove_availability(self.window["name"])["success"])
		self.assertEqual(get_available_slots(self.consult["name"], self.day)["slots"], [])

	def test_inactive_offering_has_no_slots(self):
		update_offering(self.consult["name"], {"is_active": 0})

		frappe.set_user("Guest")
		with self.assertRaises(OfferingInactiveError):
			get_available_slots(self.consult["name"], self.day)
