from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.application import parse_moment
from app.schemas.course import CourseOut


class EmailTemplateIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)
    course_id: str = Field(min_length=1)
    invitation_date: Optional[datetime] = None

    @field_validator("subject", "course_id", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("invitation_date", mode="before")
    @classmethod
    def parse_invitation_date(cls, v):
        return parse_moment(v)


class EmailTemplateOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    subject: str
    body: str
    course_id: str
    invitation_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    course: Optional[CourseOut] = None
