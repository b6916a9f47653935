import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from app.utils.timeslots import TimeRangeError, build_time_range, end_time_choices, split_time_range, time_slots

REQUIRED_LABELS = {
    "course_code": "Course Code",
    "title": "Descriptive Title",
    "units": "Units",
    "days": "Days",
    "room": "Room",
    "instructor": "Instructor",
}


class FormError(ValueError):
    """A message to show next to the course form before anything is sent."""


def validate_units(value: str) -> int:
    value = (value or "").strip()
    if not re.fullmatch(r"\d{1,2}", value, re.ASCII):
        raise FormError("Units must be a number between 1 and 99")
    units = int(value)
    if not 1 <= units <= 99:
        raise FormError("Units must be a number between 1 and 99")
    return units


@dataclass
class CourseForm:
    """State of the add/edit course dialog."""

    course_code: str = ""
    title: str = ""
    units: str = ""
    days: str = ""
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    instructor: str = ""
    course_id: Optional[str] = None

    @classmethod
    def from_course(cls, course: Mapping[str, Any]) -> "CourseForm":
        start, end = split_time_range(course.get("time")) or ("", "")
        return cls(
            course_code=course.get("courseCode", ""),
            title=course.get("title", ""),
            units=str(course.get("units", "")),
            days=course.get("days", ""),
            start_time=start,
            end_time=end,
            room=course.get("room", ""),
            instructor=course.get("instructor", ""),
            course_id=course.get("id"),
        )

    @property
    def is_edit(self) -> bool:
        return self.course_id is not None

    def start_choices(self) -> List[str]:
        return time_slots()

    def end_choices(self) -> List[str]:
        return end_time_choices(self.start_time)

    def pick_start(self, value: str) -> None:
        self.start_time = value
        # an end time that no longer fits is dropped, not moved
        if self.end_time and self.end_time <= value:
            self.end_time = ""

    def pick_end(self, value: str) -> None:
        if self.start_time and value <= self.start_time:
            raise TimeRangeError("End time must be later than start time")
        self.end_time = value

    def to_draft(self) -> Dict[str, Any]:
        """
        Build the JSON body for POST/PUT.
        Raises FormError / TimeRangeError instead of sending a bad draft.
        """
        for attr, label in REQUIRED_LABELS.items():
            if not str(getattr(self, attr)).strip():
                raise FormError(f"{label} is required")
        units = validate_units(self.units)
        time = build_time_range(self.start_time, self.end_time)
        return {
            "courseCode": self.course_code.strip(),
            "title": self.title.strip(),
            "units": units,
            "days": self.days.strip(),
            "time": time,
            "room": self.room.strip(),
            "instructor": self.instructor.strip(),
        }
