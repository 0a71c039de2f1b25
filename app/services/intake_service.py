import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ValidationFailed, DuplicateEmail, SelectedCourseMissing
from app.models.application import Application, ApplicationStatus
from app.models.course import Course
from app.services.validation import validate_application

logger = logging.getLogger(__name__)


def submit_application(db: Session, payload) -> Application:
    result = validate_application(payload)
    if not result.ok:
        raise ValidationFailed(result.errors)
    form = result.value

    # pre-check only, the unique index on applications.email is authoritative
    existing = db.scalar(select(Application.id).where(Application.email == form.email))
    if existing:
        raise DuplicateEmail()

    course = db.get(Course, form.course_id)
    if not course:
        raise SelectedCourseMissing()

    app = Application(**form.to_record(), status=ApplicationStatus.UNDER_REVIEW)
    db.add(app)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.scalar(select(Application.id).where(Application.email == form.email)):
            raise DuplicateEmail()
        if not db.get(Course, form.course_id):
            raise SelectedCourseMissing()
        raise

    logger.info("Application %s submitted for course %s", app.id, course.name)
    return app
