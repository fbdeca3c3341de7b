"""
Booking Services Module

Core business logic for appointment booking:
- Interval arithmetic (intervals.py)
- Tier gating (access.py)
- Weekly availability (availability.py)
- Offering catalog (catalog.py)
- Appointment state machine and conflicts (ledger.py)
- Slot generation (slots.py) and read views (views.py)
- Storage interfaces and Frappe implementations (repositories.py)
"""
