app_name = "constellation_booking"
app_title = "Constellation Booking"
app_publisher = "Constellation Booking contributors"
app_description = "Provider availability, tier-gated offerings and conflict-free appointment booking"
app_email = "dev@constellation-booking.org"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Subscription Lookup
# -------------------
# Apps that own billing can tell the booking core which tier a user holds.
# The resolver receives the user name and returns None or a dict with
# tier, is_active, start_date and end_date. Without a resolver the user's
# latest Member Subscription is used.

# booking_subscription_resolver = [
# 	"billing_app.subscriptions.get_booking_subscription"
# ]

# Document Events
# ---------------
# Hook on document methods and events

# doc_events = {
# 	"Booking Appointment": {
# 		"on_update": "method",
# 	}
# }

# Testing
# -------

# before_tests = "constellation_booking.install.before_tests"

# User Data Protection
# --------------------

user_data_fields = [
	{
		"doctype": "Booking Appointment",
		"filter_by": "client",
		"redact_fields": ["notes"],
		"partial": 1,
	},
	{
		"doctype": "Member Subscription",
		"filter_by": "user",
		"partial": 1,
	},
]

# Automatically update python controller files with type annotations for this app.
# export_python_type_annotations = True
