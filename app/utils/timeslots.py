import re
from typing import List, Optional, Tuple

SEPARATOR = " - "

FIRST_SLOT = 7 * 60
LAST_SLOT = 21 * 60
SLOT_MINUTES = 30


class TimeRangeError(ValueError):
    """Raised when a picked start/end pair cannot form a valid range."""


def _parse_hhmm(value: str) -> Optional[Tuple[int, int]]:
    value = (value or "").strip()
    if ":" not in value:
        return None
    h, m = value.split(":", 1)
    # ASCII digits only
    if not (re.fullmatch(r"\d{1,2}", h, re.ASCII) and re.fullmatch(r"\d{2}", m, re.ASCII)):
        return None
    hour, minute = int(h), int(m)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def split_time_range(value: str | None) -> Optional[Tuple[str, str]]:
    """
    "9:00 - 10:30" -> ("09:00", "10:30")
    Returns None for anything that is not two HH:MM values around " - ".
    """
    if not value or SEPARATOR not in value:
        return None
    start, end = value.split(SEPARATOR, 1)
    a = _parse_hhmm(start)
    b = _parse_hhmm(end)
    if a is None or b is None:
        return None
    return f"{a[0]:02d}:{a[1]:02d}", f"{b[0]:02d}:{b[1]:02d}"


def start_of(value: str | None) -> str:
    """Text before " - ", used as the sort key for time ranges."""
    return (value or "").split(SEPARATOR, 1)[0].strip()


def to_12h(value: str) -> str:
    """
    "13:00" -> "01:00 PM", "00:15" -> "12:15 AM"
    """
    hm = _parse_hhmm(value)
    if hm is None:
        raise ValueError(f"invalid time: {value!r}")
    hour, minute = hm
    period = "PM" if hour >= 12 else "AM"
    display = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display:02d}:{minute:02d} {period}"


def format_time_range(value: str | None) -> str:
    """
    24h stored range -> 12h display range.
    "09:00 - 10:30" -> "09:00 AM - 10:30 AM"
    Malformed values come back unchanged.
    """
    if not value:
        return ""
    parts = split_time_range(value)
    if parts is None:
        return value
    return SEPARATOR.join(to_12h(p) for p in parts)


def time_slots() -> List[str]:
    """Half-hour choices 07:00 .. 21:00 inclusive."""
    out = []
    for minutes in range(FIRST_SLOT, LAST_SLOT + 1, SLOT_MINUTES):
        out.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
    return out


def end_time_choices(start: str | None) -> List[str]:
    slots = time_slots()
    if not start:
        return slots
    return [s for s in slots if s > start]


def build_time_range(start: str, end: str) -> str:
    """
    Join two picked slots into the stored "HH:MM - HH:MM" form.
    Raises TimeRangeError with a message meant for the editor.
    """
    slots = time_slots()
    if not start or not end:
        raise TimeRangeError("Please select both a start time and an end time")
    if start not in slots or end not in slots:
        raise TimeRangeError("Please pick times from the list")
    if end <= start:
        raise TimeRangeError("End time must be later than start time")
    return f"{start}{SEPARATOR}{end}"
