# app/routers/courses.py
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.course import Course
from app.schemas.course import CourseDraft, CourseOut, MessageOut
from app.utils.auth import Identity, get_current_user
from app.utils.cache import CourseListCache
from app.utils.conflict import find_conflict, message_for_integrity_error
from app.utils.errors import validation_message

import logging
logger = logging.getLogger("app.courses")


router = APIRouter(prefix="/api/courses", tags=["Courses"])

list_cache = CourseListCache(ttl_seconds=settings.COURSE_LIST_CACHE_TTL)


def _serialize(course: Course) -> dict:
    return CourseOut.model_validate(course).model_dump(by_alias=True, mode="json")


def _get_owned_course(db: Session, course_id: str, user: Identity) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.owner_email != user.email:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return course


def _check_conflict(db: Session, user: Identity, body: CourseDraft, exclude_id: str | None = None):
    message = find_conflict(
        db,
        owner_email=user.email,
        course_code=body.course_code,
        title=body.title,
        days=body.days,
        time=body.time,
        exclude_id=exclude_id,
    )
    if message:
        raise HTTPException(status_code=400, detail=message)


def _commit(db: Session, user: Identity):
    """Unique constraints are the final word when two writes race past the checks."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        message = message_for_integrity_error(e)
        logger.info("Rejected write for %s by constraint: %s", user.email, message)
        raise HTTPException(status_code=400, detail=message)
    list_cache.invalidate(user.email)


# 列出我的課程（最新的在前）
@router.get("", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db), user: Identity = Depends(get_current_user)):
    cached = list_cache.get(user.email)
    if cached is not None:
        return cached
    # taken before the query; a write committed meanwhile keeps this result out of the cache
    generation = list_cache.generation(user.email)

    rows = (
        db.query(Course)
        .filter(Course.owner_email == user.email)
        .order_by(Course.created_at.desc(), Course.id.desc())
        .all()
    )
    items = [_serialize(c) for c in rows]
    list_cache.set(user.email, items, generation)
    return items


@router.post("", response_model=CourseOut, status_code=201)
def create_course(
    body: CourseDraft,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    _check_conflict(db, user, body)

    course = Course(
        course_code=body.course_code,
        title=body.title,
        units=body.units,
        days=body.days,
        time=body.time,
        room=body.room,
        instructor=body.instructor,
        owner_email=user.email,
    )
    db.add(course)
    _commit(db, user)
    db.refresh(course)
    logger.info("Course %s created by %s", course.id, user.email)
    return _serialize(course)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    # ownership first, then the draft itself
    course = _get_owned_course(db, course_id, user)
    try:
        body = CourseDraft.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_message(e.errors()))
    _check_conflict(db, user, body, exclude_id=course.id)

    data = body.model_dump()
    for k, v in data.items():
        setattr(course, k, v)
    # owner never changes
    course.owner_email = user.email

    _commit(db, user)
    db.refresh(course)
    logger.info("Course %s updated by %s", course.id, user.email)
    return _serialize(course)


@router.delete("/{course_id}", response_model=MessageOut)
def delete_course(
    course_id: str,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    course = _get_owned_course(db, course_id, user)

    db.delete(course)
    db.commit()
    list_cache.invalidate(user.email)
    logger.info("Course %s deleted by %s", course_id, user.email)
    return {"message": "Course deleted successfully"}
