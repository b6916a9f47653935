from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.utils.timeslots import split_time_range


class CourseDraft(BaseModel):
    """Course payload sent by the client. Owner, id and timestamp are assigned server side."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    course_code: str = Field(alias="courseCode", min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=255)
    units: int = Field(ge=1, le=99)
    days: str = Field(min_length=1, max_length=20)
    time: str = Field(min_length=1, max_length=13)
    room: str = Field(min_length=1, max_length=100)
    instructor: str = Field(min_length=1, max_length=255)

    @field_validator("time")
    @classmethod
    def check_time_range(cls, v: str) -> str:
        parts = split_time_range(v)
        if parts is None:
            raise ValueError("Time must look like HH:MM - HH:MM")
        start, end = parts
        if end <= start:
            raise ValueError("End time must be later than start time")
        return f"{start} - {end}"


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_code: str = Field(
        validation_alias=AliasChoices("course_code", "courseCode"), serialization_alias="courseCode"
    )
    title: str
    units: int
    days: str
    time: str
    room: str
    instructor: str
    owner_email: str = Field(
        validation_alias=AliasChoices("owner_email", "ownerEmail"), serialization_alias="ownerEmail"
    )
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )


class MessageOut(BaseModel):
    message: str
