# Copyright (c) 2026, Constellation Booking contributors
# For license information, please see license.txt

"""
Member Subscription DocType

Default source for subscription tiers when no billing app registers a
booking_subscription_resolver hook.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import getdate

from constellation_booking.constellation_booking.scheduling.access import TIER_ORDER


class MemberSubscription(Document):
	def validate(self) -> None:
		if self.tier not in TIER_ORDER:
			frappe.throw(_("Tier must be one of: {0}").format(", ".join(TIER_ORDER)))

		if self.start_date and self.end_date and getdate(self.start_date) > getdate(self.end_date):
			frappe.throw(_("Start Date must be on or before End Date"))
