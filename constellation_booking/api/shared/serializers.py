"""
Response serializers.

Booking records leave the API as plain dicts with ISO-8601 datetimes and
"HH:MM:SS" times.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List

from constellation_booking.constellation_booking.scheduling.intervals import to_time


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (time, timedelta)):
        return to_time(value).strftime("%H:%M:%S")
    return value


def serialize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _serialize_value(value) for key, value in dict(record).items()}


def serialize_records(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_record(record) for record in records]
