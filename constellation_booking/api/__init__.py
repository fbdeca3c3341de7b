"""
Constellation Booking API

Whitelisted endpoints grouped by domain.

Structure:
    api/
    ├── __init__.py              # This file
    ├── offerings/               # Provider catalog
    ├── availability/            # Weekly availability windows
    ├── appointments/            # Slots, booking and appointment management
    ├── shared/                  # Shared utilities
    │   ├── __init__.py          # Re-exports security + validators + serializers
    │   ├── validators.py        # Request parameter validators
    │   └── serializers.py       # JSON-ready records
    └── security.py              # Rate limiting, session, sanitization

Usage:
    frappe.call("constellation_booking.api.appointments.create_appointment", ...)
"""

from . import appointments
from . import availability
from . import offerings
from . import shared

__all__ = [
    "appointments",
    "availability",
    "offerings",
    "shared",
]
