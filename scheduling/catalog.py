"""
Appointment time slots (KST-friendly).

``value`` is what gets stored on a request; ``label`` is for display.
"""
import re

APPOINTMENT_TIME_SLOTS = (
    ("09:00-10:00", "9:00 AM – 10:00 AM"),
    ("10:00-11:00", "10:00 AM – 11:00 AM"),
    ("11:00-12:00", "11:00 AM – 12:00 PM"),
    ("14:00-15:00", "2:00 PM – 3:00 PM"),
    ("15:00-16:00", "3:00 PM – 4:00 PM"),
    ("16:00-17:00", "4:00 PM – 5:00 PM"),
    ("17:00-18:00", "5:00 PM – 6:00 PM"),
)

SLOT_VALUES = tuple(value for value, _ in APPOINTMENT_TIME_SLOTS)
_LABELS = dict(APPOINTMENT_TIME_SLOTS)

DEFAULT_START = "09:00"
DEFAULT_DURATION_MINUTES = 60
MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 120

_SLOT_RE = re.compile(r"^(\d{2}):(\d{2})-(\d{2}):(\d{2})$")


def is_valid_slot(value) -> bool:
    return isinstance(value, str) and value in _LABELS


def slot_label(value) -> str:
    return _LABELS.get(value, value)


def slot_order(value) -> int:
    """Catalog position, unknown values sort last."""
    try:
        return SLOT_VALUES.index(value)
    except ValueError:
        return len(SLOT_VALUES)


def _parse(value):
    if not isinstance(value, str):
        return None
    return _SLOT_RE.match(value.strip())


def slot_start(value) -> str:
    match = _parse(value)
    if not match:
        return DEFAULT_START
    return f"{match.group(1)}:{match.group(2)}"


def slot_duration(value) -> int:
    """
    Minutes between the slot's start and end, clamped to [15, 120].
    Never raises: a malformed value (or an empty span) gives the 60 minute default.
    """
    match = _parse(value)
    if not match:
        return DEFAULT_DURATION_MINUTES
    start_h, start_m, end_h, end_m = (int(g) for g in match.groups())
    minutes = (end_h * 60 + end_m) - (start_h * 60 + start_m)
    if minutes == 0:
        minutes = DEFAULT_DURATION_MINUTES
    return max(MIN_DURATION_MINUTES, min(MAX_DURATION_MINUTES, minutes))


def slot_start_time(appointment_date, value) -> str:
    # Local wall-clock time; the provider gets the timezone separately
    return f"{appointment_date.isoformat()}T{slot_start(value)}:00"
