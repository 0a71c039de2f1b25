import argparse
import logging

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.session import Database
from app.models.application import Application
from app.models.course import Course
from app.models.email_template import EmailTemplate
from app.services.email_templates import sanitize_html

logger = logging.getLogger("app.seed")

COURSES = [
    ("Software Engineering", "Full-stack web development bootcamp."),
    ("Data Analysis", "Spreadsheets, SQL and dashboards for beginners."),
    ("Digital Marketing", None),
]

TEMPLATES = [
    (
        "Software Engineering",
        "Invitation to the technical interview",
        "<p>Dear applicant,</p><p>You have been invited to a technical interview. "
        "We will contact you with the exact time.</p>",
    ),
    (
        "Software Engineering",
        "Your application outcome",
        "<p>Dear applicant,</p><p>Thank you for applying. The review of your application is complete.</p>",
    ),
]


def ensure(db: Session) -> None:
    existing = {c.name: c for c in db.scalars(select(Course)).all()}
    for name, description in COURSES:
        if name not in existing:
            course = Course(name=name, description=description)
            db.add(course)
            existing[name] = course
    db.flush()

    subjects = set(db.scalars(select(EmailTemplate.subject)).all())
    for course_name, subject, body in TEMPLATES:
        if subject in subjects:
            continue
        db.add(EmailTemplate(
            subject=subject,
            body=sanitize_html(body),
            course_id=existing[course_name].id,
        ))


def clear(db: Session) -> None:
    """Removes every application, template and course."""
    apps = db.execute(delete(Application)).rowcount
    emails = db.execute(delete(EmailTemplate)).rowcount
    courses = db.execute(delete(Course)).rowcount
    logger.info("Deleted %s applications, %s email templates, %s courses", apps, emails, courses)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed or clear the applicant portal database")
    parser.add_argument("--clear", action="store_true", help="delete all data instead of seeding")
    args = parser.parse_args(argv)

    setup_logging()
    database = Database(settings.DATABASE_URL).open()
    try:
        database.create_all()
        with database.session() as db:
            if args.clear:
                clear(db)
            else:
                ensure(db)
            db.commit()
    finally:
        database.close()
    logger.info("[seed] done.")


if __name__ == "__main__":
    main()
