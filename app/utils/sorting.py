from dataclasses import dataclass
from typing import Any, Iterable, List, Literal, Mapping

from app.utils.timeslots import start_of

SortKey = Literal["courseCode", "title", "units", "days", "time", "room", "instructor"]
SortDirection = Literal["asc", "desc"]

SORT_KEYS = ("courseCode", "title", "units", "days", "time", "room", "instructor")


@dataclass(frozen=True)
class SortConfig:
    key: SortKey = "time"
    direction: SortDirection = "asc"

    def select(self, key: str) -> "SortConfig":
        """
        Same key while ascending -> descending, anything else -> ascending.
        """
        if key not in SORT_KEYS:
            raise ValueError(f"unknown sort key: {key}")
        if self.key == key and self.direction == "asc":
            return SortConfig(key=key, direction="desc")
        return SortConfig(key=key, direction="asc")

    def to_dict(self) -> dict:
        return {"key": self.key, "direction": self.direction}

    @classmethod
    def from_dict(cls, data: Any) -> "SortConfig":
        if not isinstance(data, dict):
            return cls()
        key = data.get("key")
        direction = data.get("direction")
        if key not in SORT_KEYS or direction not in ("asc", "desc"):
            return cls()
        return cls(key=key, direction=direction)


def _sort_value(course: Mapping[str, Any], key: str) -> str:
    if key == "time":
        return start_of(course.get("time"))
    value = course.get(key)
    if value is None:
        return ""
    return str(value).lower()


def sort_courses(courses: Iterable[Mapping[str, Any]], config: SortConfig) -> List[Mapping[str, Any]]:
    """Returns a new list; the input order is left alone."""
    return sorted(
        courses,
        key=lambda c: _sort_value(c, config.key),
        reverse=config.direction == "desc",
    )
