# app/utils/conflict.py
from typing import Optional

from sqlalchemy.orm import Session

from app.models.course import Course

COURSE_CODE_EXISTS = "Course Code already exists"
TITLE_EXISTS = "Descriptive Title already exists"
SCHEDULE_COURSE_CODE_EXISTS = "Schedule conflict: Course Code already exists"
SCHEDULE_TITLE_EXISTS = "Schedule conflict: Descriptive Title already exists"


def find_conflict(
    db: Session,
    owner_email: str,
    course_code: str,
    title: str,
    days: str,
    time: str,
    exclude_id: Optional[str] = None,
) -> Optional[str]:
    """
    Checks the owner's other courses in a fixed order and returns the message
    of the first rule that matches, or None.

    1. same course code
    2. same title
    3. same course code + days + time
    4. same title + days + time

    3 and 4 can never fire while 1 and 2 hold globally per owner. They stay
    so that per-timeslot uniqueness can replace 1/2 without touching callers.
    """
    checks = [
        (COURSE_CODE_EXISTS, [Course.course_code == course_code]),
        (TITLE_EXISTS, [Course.title == title]),
        (
            SCHEDULE_COURSE_CODE_EXISTS,
            [Course.course_code == course_code, Course.days == days, Course.time == time],
        ),
        (
            SCHEDULE_TITLE_EXISTS,
            [Course.title == title, Course.days == days, Course.time == time],
        ),
    ]

    for message, conditions in checks:
        q = db.query(Course.id).filter(Course.owner_email == owner_email, *conditions)
        if exclude_id is not None:
            q = q.filter(Course.id != exclude_id)
        if q.first() is not None:
            return message
    return None


def message_for_integrity_error(exc: Exception) -> str:
    """
    Map a unique-constraint violation from the store to the pre-flight message.
    Constraint names differ per backend, so match on both name and columns.
    """
    text = str(getattr(exc, "orig", exc))
    if "uq_courses_owner_title" in text or "courses.title" in text:
        return TITLE_EXISTS
    return COURSE_CODE_EXISTS
