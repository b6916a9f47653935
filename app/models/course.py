import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, Index, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base


def new_course_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(32), primary_key=True, default=new_course_id)

    course_code = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    units = Column(Integer, nullable=False)
    days = Column(String(20), nullable=False)
    # "HH:MM - HH:MM", 24h
    time = Column(String(13), nullable=False)
    room = Column(String(100), nullable=False)
    instructor = Column(String(255), nullable=False)

    owner_email = Column(String(320), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_email", "course_code", name="uq_courses_owner_course_code"),
        UniqueConstraint("owner_email", "title", name="uq_courses_owner_title"),
        Index("ix_courses_owner_days_time", "owner_email", "days", "time"),
        Index("ix_courses_owner_created_at", "owner_email", "created_at"),
    )
