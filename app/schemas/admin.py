from typing import Optional
from pydantic import BaseModel

from app.core.errors import FieldError


class LoginIn(BaseModel):
    email: str
    password: str


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ActionResult(BaseModel):
    success: bool
    message: str
    errors: Optional[list[FieldErrorOut]] = None

    @classmethod
    def failed(cls, message: str, errors: list[FieldError] | None = None) -> "ActionResult":
        return cls(
            success=False,
            message=message,
            errors=[FieldErrorOut(field=e.field, message=e.message) for e in errors] if errors else None,
        )
