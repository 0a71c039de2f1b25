import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.core.errors import (
    CourseNotFound, CourseHasApplications, CourseHasEmailTemplates, FieldError, ValidationFailed,
)
from app.models.application import Application
from app.models.course import Course
from app.models.email_template import EmailTemplate
from app.schemas.course import CourseCreate, CourseUpdate, CourseOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])


def _get_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if not course:
        raise CourseNotFound()
    return course


@router.get("", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)):
    return db.scalars(select(Course).order_by(Course.name.asc())).all()


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
def create_course(payload: CourseCreate, db: Session = Depends(get_db)):
    if not payload.name:
        raise ValidationFailed([FieldError("name", "Course name is required")])
    course = Course(name=payload.name, description=payload.description)
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Course %s created: %s", course.id, course.name)
    return course


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: str, db: Session = Depends(get_db)):
    return _get_course(db, course_id)


@router.patch("/{course_id}", response_model=CourseOut, dependencies=[Depends(require_admin)])
def update_course(course_id: str, payload: CourseUpdate, db: Session = Depends(get_db)):
    course = _get_course(db, course_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not changes["name"]:
        raise ValidationFailed([FieldError("name", "Course name is required")])
    for k, v in changes.items():
        setattr(course, k, v)
    db.commit()
    db.refresh(course)
    return course


@router.delete("/{course_id}", dependencies=[Depends(require_admin)])
def delete_course(course_id: str, db: Session = Depends(get_db)):
    course = _get_course(db, course_id)
    # An application inserted between this count and the delete is caught
    # by the RESTRICT foreign key below.
    count = db.scalar(
        select(func.count()).select_from(Application).where(Application.course_id == course_id)
    ) or 0
    if count > 0:
        raise CourseHasApplications()
    if db.scalar(select(EmailTemplate.id).where(EmailTemplate.course_id == course_id).limit(1)):
        raise CourseHasEmailTemplates()
    db.delete(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise CourseHasApplications()
    logger.info("Course %s deleted", course_id)
    return {"success": True, "message": "Course deleted successfully"}
