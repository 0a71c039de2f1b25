from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CourseCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class CourseUpdate(CourseCreate):
    pass


class CourseOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CourseRef(BaseModel):
    id: str
    name: str
