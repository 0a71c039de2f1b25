from __future__ import annotations
import enum
from datetime import date, datetime
from sqlalchemy import (
    String, Text, Date, DateTime, Boolean, Enum, ForeignKey
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base
from app.models.course import new_id


class ApplicationStatus(str, enum.Enum):
    UNDER_REVIEW = "UNDER_REVIEW"
    TECHNICAL_INTERVIEW_SCHEDULED = "TECHNICAL_INTERVIEW_SCHEDULED"
    TECHNICAL_INTERVIEWED = "TECHNICAL_INTERVIEWED"
    COMMON_INTERVIEW_SCHEDULED = "COMMON_INTERVIEW_SCHEDULED"
    COMMON_INTERVIEWED = "COMMON_INTERVIEWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WAITLISTED = "WAITLISTED"
    WITHDRAWN = "WITHDRAWN"
    NEEDS_FOLLOW_UP = "NEEDS_FOLLOW_UP"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class DisabilityType(str, enum.Enum):
    PHYSICAL_IMPAIRMENT = "PHYSICAL_IMPAIRMENT"
    VISUAL_IMPAIRMENT = "VISUAL_IMPAIRMENT"
    HEARING_IMPAIRMENT = "HEARING_IMPAIRMENT"
    MENTAL_IMPAIRMENT = "MENTAL_IMPAIRMENT"
    SHORT_STATURE = "SHORT_STATURE"
    ALBINISM = "ALBINISM"
    DEAF_BLIND = "DEAF_BLIND"
    AUTISM = "AUTISM"
    MULTIPLE_DISABILITIES = "MULTIPLE_DISABILITIES"


class Occupation(str, enum.Enum):
    EMPLOYED = "EMPLOYED"
    ATTENDING_UNIVERSITY_NOT_EMPLOYED = "ATTENDING_UNIVERSITY_NOT_EMPLOYED"
    EMPLOYED_ATTENDING_UNIVERSITY = "EMPLOYED_ATTENDING_UNIVERSITY"
    ATTENDING_ADVANCED_TRAINING_AND_UNIVERSITY = "ATTENDING_ADVANCED_TRAINING_AND_UNIVERSITY"
    NOT_EMPLOYED_NOT_IN_SCHOOL_NOT_IN_ANY_TRAINING = "NOT_EMPLOYED_NOT_IN_SCHOOL_NOT_IN_ANY_TRAINING"
    INTERNSHIP = "INTERNSHIP"


class EducationBackground(str, enum.Enum):
    HIGH_SCHOOL = "HIGH_SCHOOL"
    TECHNICAL_SCHOOL = "TECHNICAL_SCHOOL"
    YEAR_1_UNIVERSITY = "YEAR_1_UNIVERSITY"
    YEAR_2_UNIVERSITY = "YEAR_2_UNIVERSITY"
    YEAR_3_UNIVERSITY = "YEAR_3_UNIVERSITY"
    YEAR_4_UNIVERSITY = "YEAR_4_UNIVERSITY"
    FINAL_YEAR_UNIVERSITY = "FINAL_YEAR_UNIVERSITY"
    BACHELORS = "BACHELORS"
    MASTERS = "MASTERS"
    PHD = "PHD"
    OTHER = "OTHER"

    @property
    def is_university_level(self) -> bool:
        return self in UNIVERSITY_LEVELS


UNIVERSITY_LEVELS = frozenset({
    EducationBackground.YEAR_1_UNIVERSITY,
    EducationBackground.YEAR_2_UNIVERSITY,
    EducationBackground.YEAR_3_UNIVERSITY,
    EducationBackground.YEAR_4_UNIVERSITY,
    EducationBackground.FINAL_YEAR_UNIVERSITY,
    EducationBackground.BACHELORS,
    EducationBackground.MASTERS,
    EducationBackground.PHD,
})


class EnglishProficiency(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    FLUENT = "FLUENT"
    NATIVE = "NATIVE"


class EnglishSkill(str, enum.Enum):
    READING = "READING"
    WRITING = "WRITING"
    SPEAKING = "SPEAKING"
    LISTENING = "LISTENING"


class ReferralSource(str, enum.Enum):
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    FRIENDS = "FRIENDS"
    ALUMNI = "ALUMNI"
    WEBSITE = "WEBSITE"
    SCHOOL = "SCHOOL"
    NEWSPAPER = "NEWSPAPER"
    RADIO = "RADIO"
    TV = "TV"
    EVENT = "EVENT"
    OTHER = "OTHER"

    @property
    def needs_specification(self) -> bool:
        return self in SPECIFIED_SOURCES


SPECIFIED_SOURCES = frozenset({
    ReferralSource.FRIENDS,
    ReferralSource.ALUMNI,
    ReferralSource.SCHOOL,
    ReferralSource.SOCIAL_MEDIA,
    ReferralSource.EVENT,
    ReferralSource.OTHER,
})


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    return Enum(enum_cls, name=name, native_enum=False, length=64)


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    full_name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    date_of_birth: Mapped[date] = mapped_column(Date)
    gender: Mapped[Gender] = mapped_column(_enum_column(Gender, "gender_enum"))
    phone: Mapped[str] = mapped_column(String(32))
    nationality: Mapped[str] = mapped_column(String(128))
    refugee_status: Mapped[bool] = mapped_column(Boolean, default=False)
    refugee_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    national_id: Mapped[str | None] = mapped_column(String(16), nullable=True)

    has_disability: Mapped[bool] = mapped_column(Boolean, default=False)
    disability_type: Mapped[DisabilityType | None] = mapped_column(
        _enum_column(DisabilityType, "disability_type_enum"), nullable=True
    )
    disability_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    province: Mapped[str] = mapped_column(String(128))
    district: Mapped[str] = mapped_column(String(128))
    sector: Mapped[str] = mapped_column(String(128))
    cell: Mapped[str] = mapped_column(String(128))
    village: Mapped[str] = mapped_column(String(128))

    emergency_contact_name: Mapped[str] = mapped_column(String(255))
    emergency_contact_relation: Mapped[str] = mapped_column(String(128))
    emergency_contact_phone: Mapped[str] = mapped_column(String(32))

    has_young_child: Mapped[bool] = mapped_column(Boolean, default=False)
    has_childcare_support: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    has_laptop: Mapped[bool] = mapped_column(Boolean, default=False)

    current_occupation: Mapped[Occupation] = mapped_column(_enum_column(Occupation, "occupation_enum"))
    education_background: Mapped[EducationBackground] = mapped_column(
        _enum_column(EducationBackground, "education_background_enum")
    )
    university: Mapped[str | None] = mapped_column(String(255), nullable=True)
    academic_background: Mapped[str] = mapped_column(Text)
    english_proficiency: Mapped[EnglishProficiency] = mapped_column(
        _enum_column(EnglishProficiency, "english_proficiency_enum")
    )
    english_skill_confidence: Mapped[EnglishSkill] = mapped_column(
        _enum_column(EnglishSkill, "english_skill_enum")
    )
    can_pay_registration_fee: Mapped[bool] = mapped_column(Boolean)

    linkedin_profile: Mapped[str | None] = mapped_column(String(500), nullable=True)
    github_profile: Mapped[str | None] = mapped_column(String(500), nullable=True)

    how_did_you_know: Mapped[ReferralSource] = mapped_column(_enum_column(ReferralSource, "referral_source_enum"))
    how_did_you_know_specification: Mapped[str | None] = mapped_column(String(500), nullable=True)
    motivation: Mapped[str] = mapped_column(Text)
    additional_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="RESTRICT"), index=True)

    # review fields, written only by administrators
    status: Mapped[ApplicationStatus] = mapped_column(
        _enum_column(ApplicationStatus, "application_status_enum"),
        default=ApplicationStatus.UNDER_REVIEW,
        index=True,
    )
    reviewer_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    interview_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    decision_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    technical_interview_marks: Mapped[float | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course = relationship("Course", back_populates="applications")
