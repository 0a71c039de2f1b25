from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Union
from pydantic import (
    AnyUrl, BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from app.models.application import (
    ApplicationStatus, Gender, DisabilityType, Occupation, EducationBackground,
    EnglishProficiency, EnglishSkill, ReferralSource,
)
from app.schemas.course import CourseOut

_url = TypeAdapter(AnyUrl)

# Messages shown next to the offending input on the public form
FIELD_MESSAGES = {
    "fullName": "Full name must be at least 2 characters.",
    "email": "Please enter a valid email address.",
    "dateOfBirth": "Date of birth is required.",
    "gender": "Please select a gender.",
    "phone": "Phone number must be exactly 10 digits.",
    "nationality": "Nationality is required.",
    "nationalId": "National ID must be exactly 16 digits",
    "disabilityType": "Please select a disability type.",
    "province": "province is required.",
    "district": "district is required.",
    "sector": "sector is required.",
    "cell": "cell is required.",
    "village": "village is required.",
    "emergencyContactName": "Emergency contact name is required.",
    "emergencyContactRelation": "Relationship is required.",
    "emergencyContactPhone": "Emergency contact phone is required.",
    "currentOccupation": "Please select your current occupation.",
    "educationBackground": "Please select your education background.",
    "academicBackground": "Academic background is required.",
    "englishProficiency": "Please select your English proficiency.",
    "englishSkillConfidence": "Please select your most confident English skill.",
    "canPayRegistrationFee": "Please indicate if you can pay the registration fee.",
    "linkedInProfile": "Please enter a valid LinkedIn URL.",
    "githubProfile": "Please enter a valid GitHub URL.",
    "howDidYouKnow": "Please select how you heard about us.",
    "motivation": "Motivation must be at least 50 characters.",
    "courseId": "Please select a course.",
}


def blank_to_none(v):
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


def _as_utc(value: datetime) -> datetime:
    """Naive UTC, the convention of every DateTime column."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _parse_timestamp(v: str) -> datetime:
    v = v.strip()
    if v[-1:] in ("Z", "z"):
        v = v[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise ValueError("must be an ISO 8601 date or timestamp")


def parse_day(v):
    """Accepts plain dates as well as the ISO timestamps browsers send.

    Timestamps carrying an offset are converted to UTC before the date is
    taken.
    """
    v = blank_to_none(v)
    if isinstance(v, str) and len(v.strip()) > 10:
        v = _parse_timestamp(v)
    if isinstance(v, datetime):
        return _as_utc(v).date()
    return v


def parse_moment(v):
    v = blank_to_none(v)
    if isinstance(v, str):
        v = _parse_timestamp(v)
    if isinstance(v, datetime):
        return _as_utc(v)
    return v


@dataclass(frozen=True)
class RefugeeIdentity:
    refugee_id: str


@dataclass(frozen=True)
class CitizenIdentity:
    national_id: str | None


@dataclass(frozen=True)
class Disability:
    type: DisabilityType
    details: str | None


Identity = Union[RefugeeIdentity, CitizenIdentity]


class ApplicationCreate(BaseModel):
    """Public application form, as submitted by the applicant."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    full_name: str = Field(min_length=2)
    email: EmailStr
    date_of_birth: date
    gender: Gender
    phone: str = Field(min_length=10, max_length=10)
    nationality: str = Field(min_length=2)
    refugee_status: bool = False
    refugee_id: Optional[str] = None
    national_id: Optional[str] = Field(None, pattern=r"^\d{16}$")

    has_disability: bool = False
    disability_type: Optional[DisabilityType] = None
    disability_details: Optional[str] = None

    province: str = Field(min_length=2)
    district: str = Field(min_length=2)
    sector: str = Field(min_length=2)
    cell: str = Field(min_length=2)
    village: str = Field(min_length=2)
    emergency_contact_name: str = Field(min_length=2)
    emergency_contact_relation: str = Field(min_length=2)
    emergency_contact_phone: str = Field(min_length=10)

    has_young_child: bool = False
    has_childcare_support: Optional[bool] = None
    has_laptop: bool = False

    current_occupation: Occupation
    education_background: EducationBackground
    university: Optional[str] = None
    academic_background: str = Field(min_length=2)
    english_proficiency: EnglishProficiency
    english_skill_confidence: EnglishSkill
    can_pay_registration_fee: bool

    linkedin_profile: Optional[str] = Field(None, alias="linkedInProfile")
    github_profile: Optional[str] = None

    how_did_you_know: ReferralSource
    how_did_you_know_specification: Optional[str] = None
    motivation: str = Field(min_length=50)
    additional_feedback: Optional[str] = None

    course_id: str = Field(min_length=1)

    @field_validator(
        "refugee_id", "national_id", "disability_type", "disability_details",
        "has_childcare_support", "university", "linkedin_profile", "github_profile",
        "how_did_you_know_specification", "additional_feedback",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def parse_birth_date(cls, v):
        return parse_day(v)

    @field_validator("linkedin_profile", "github_profile")
    @classmethod
    def well_formed_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            _url.validate_python(v)
        except ValidationError:
            raise ValueError("must be a valid URL")
        return v

    @property
    def identity(self) -> Identity:
        if self.refugee_status:
            return RefugeeIdentity(refugee_id=self.refugee_id or "")
        return CitizenIdentity(national_id=self.national_id)

    @property
    def disability(self) -> Disability | None:
        if not self.has_disability or self.disability_type is None:
            return None
        return Disability(type=self.disability_type, details=self.disability_details)

    def to_record(self) -> dict:
        """Column values for a new ``Application`` row."""
        data = self.model_dump(by_alias=False)
        identity = self.identity
        data["refugee_id"] = identity.refugee_id if isinstance(identity, RefugeeIdentity) else None
        data["national_id"] = identity.national_id if isinstance(identity, CitizenIdentity) else None
        disability = self.disability
        data["disability_type"] = disability.type if disability else None
        data["disability_details"] = disability.details if disability else None
        data["has_childcare_support"] = self.has_childcare_support if self.has_young_child else None
        if not self.how_did_you_know.needs_specification:
            data["how_did_you_know_specification"] = None
        return data


class ModifiedEmail(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    subject: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = Field(None, min_length=1)

    @field_validator("subject", "body", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class ReviewUpdate(BaseModel):
    """Fields an administrator may change on an application."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: ApplicationStatus
    reviewer_comments: Optional[str] = None
    interview_date: Optional[datetime] = None
    decision_date: Optional[datetime] = None
    technical_interview_marks: Optional[float] = Field(None, ge=0, le=100)

    @field_validator("reviewer_comments", "technical_interview_marks", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)

    @field_validator("interview_date", "decision_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_moment(v)


class ReviewRequest(ReviewUpdate):
    send_email: bool = False
    selected_email_id: Optional[str] = None
    modified_email: Optional[ModifiedEmail] = None

    @field_validator("selected_email_id", mode="before")
    @classmethod
    def blank_email_id(cls, v):
        return blank_to_none(v)


class ApplicationOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    full_name: str
    email: str
    date_of_birth: date
    gender: Gender
    phone: str
    nationality: str
    refugee_status: bool
    refugee_id: Optional[str] = None
    national_id: Optional[str] = None
    has_disability: bool
    disability_type: Optional[DisabilityType] = None
    disability_details: Optional[str] = None
    province: str
    district: str
    sector: str
    cell: str
    village: str
    emergency_contact_name: str
    emergency_contact_relation: str
    emergency_contact_phone: str
    has_young_child: bool
    has_childcare_support: Optional[bool] = None
    has_laptop: bool
    current_occupation: Occupation
    education_background: EducationBackground
    university: Optional[str] = None
    academic_background: str
    english_proficiency: EnglishProficiency
    english_skill_confidence: EnglishSkill
    can_pay_registration_fee: bool
    linkedin_profile: Optional[str] = Field(None, alias="linkedInProfile")
    github_profile: Optional[str] = None
    how_did_you_know: ReferralSource
    how_did_you_know_specification: Optional[str] = None
    motivation: str
    additional_feedback: Optional[str] = None
    course_id: str
    status: ApplicationStatus
    reviewer_comments: Optional[str] = None
    interview_date: Optional[datetime] = None
    decision_date: Optional[datetime] = None
    technical_interview_marks: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    course: Optional[CourseOut] = None
