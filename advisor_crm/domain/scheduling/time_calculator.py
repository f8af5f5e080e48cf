"""Time parsing and calculations for appointment slots"""

from ...shared.validators import HHMM_PATTERN

# Bookable half-hour slots, 09:00 through 17:30
TIME_SLOTS = [f"{hour:02d}:{minute:02d}" for hour in range(9, 18) for minute in (0, 30)]

APPOINTMENT_TYPES = {
    "consultation": {"label": "Consultation", "duration": 30},
    "meeting": {"label": "Business Meeting", "duration": 60},
    "demo": {"label": "Product Demo", "duration": 45},
    "follow-up": {"label": "Follow-up", "duration": 30},
    "strategy": {"label": "Strategy Session", "duration": 90},
}


def to_minutes(value: str) -> int:
    """'HH:MM' -> minutes since midnight"""
    if not value or not HHMM_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """
    Minutes since midnight -> 'HH:MM'.

    Values past midnight are not wrapped: 1455 renders as '24:15'.
    """
    if total < 0:
        raise ValueError("Minutes must not be negative")
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(start: str, minutes: int) -> str:
    return from_minutes(to_minutes(start) + minutes)


def duration_for(appointment_type: str) -> int:
    try:
        return APPOINTMENT_TYPES[appointment_type]["duration"]
    except KeyError:
        raise ValueError(f"Unknown appointment type '{appointment_type}'") from None


def calculate_end_time(start_time: str, appointment_type: str) -> str:
    """End time for an appointment of the given type, e.g. 09:45 + consultation -> 10:15"""
    return add_minutes(start_time, duration_for(appointment_type))


def appointment_type_options() -> list[dict]:
    return [
        {"value": value, "label": info["label"], "duration": info["duration"]}
        for value, info in APPOINTMENT_TYPES.items()
    ]
