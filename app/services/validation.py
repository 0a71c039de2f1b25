"""Validation of public application submissions.

``validate_application`` never raises for bad input: it returns a
``ValidationResult`` holding either the normalised form or the list of
field errors to show next to the offending inputs.
"""
from __future__ import annotations
import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import FieldError, field_errors_from_pydantic
from app.models.application import EducationBackground, ReferralSource
from app.schemas.application import ApplicationCreate, FIELD_MESSAGES, blank_to_none

TRUE_STRINGS = ("true", "1", "yes", "on", "t", "y")


@dataclass
class ValidationResult:
    value: ApplicationCreate | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _raw(values: Mapping[str, Any], name: str):
    return values.get(to_camel(name), values.get(name))


def _flag(values: Mapping[str, Any], name: str) -> bool:
    v = _raw(values, name)
    if isinstance(v, str):
        return v.strip().lower() in TRUE_STRINGS
    return v is True or v == 1


def _present(values: Mapping[str, Any], name: str) -> bool:
    return blank_to_none(_raw(values, name)) is not None


def _member(enum_cls: type[enum.Enum], v):
    try:
        return enum_cls(v)
    except ValueError:
        return None


def conditional_errors(values: Mapping[str, Any]) -> list[FieldError]:
    """Requirements that depend on the value of a sibling field.

    Checked on the submitted values, so they are reported alongside field
    errors from the same submission.
    """
    errors: list[FieldError] = []
    if _flag(values, "refugee_status") and not _present(values, "refugee_id"):
        errors.append(FieldError("refugeeId", "Refugee ID is required for refugees."))
    if _flag(values, "has_disability") and not _present(values, "disability_type"):
        errors.append(FieldError("disabilityType", FIELD_MESSAGES["disabilityType"]))
    education = _member(EducationBackground, _raw(values, "education_background"))
    if education is not None and education.is_university_level and not _present(values, "university"):
        errors.append(FieldError("university", "University is required for university-level education."))
    source = _member(ReferralSource, _raw(values, "how_did_you_know"))
    if source is not None and source.needs_specification and not _present(values, "how_did_you_know_specification"):
        errors.append(FieldError(
            "howDidYouKnowSpecification",
            "Please specify how you heard about us.",
        ))
    return errors


def validate_application(candidate: Any) -> ValidationResult:
    if not isinstance(candidate, dict):
        return ValidationResult(errors=[FieldError("__root__", "Expected a JSON object")])
    form = None
    errors: list[FieldError] = []
    try:
        form = ApplicationCreate.model_validate(candidate)
    except ValidationError as e:
        errors = field_errors_from_pydantic(e, FIELD_MESSAGES)
    reported = {e.field for e in errors}
    errors.extend(e for e in conditional_errors(candidate) if e.field not in reported)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=form)
