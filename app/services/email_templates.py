import logging
import bleach
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.errors import EmailTemplateNotFound, SelectedCourseMissing
from app.models.course import Course
from app.models.email_template import EmailTemplate
from app.schemas.email_template import EmailTemplateIn

logger = logging.getLogger(__name__)

# what the admin rich-text editor can produce
ALLOWED_TAGS = [
    "p", "br", "hr", "strong", "b", "em", "i", "u", "s", "a", "span",
    "ul", "ol", "li", "blockquote", "code", "pre",
    "h1", "h2", "h3", "h4",
]
ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


def sanitize_html(html: str) -> str:
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def list_email_templates(db: Session) -> list[EmailTemplate]:
    stmt = (
        select(EmailTemplate)
        .options(joinedload(EmailTemplate.course))
        .order_by(EmailTemplate.created_at.desc())
    )
    return list(db.scalars(stmt).all())


def get_email_template(db: Session, email_id: str) -> EmailTemplate:
    tpl = db.get(EmailTemplate, email_id)
    if not tpl:
        raise EmailTemplateNotFound("Email not found")
    return tpl


def _apply(tpl: EmailTemplate, data: EmailTemplateIn, db: Session) -> None:
    if not db.get(Course, data.course_id):
        raise SelectedCourseMissing()
    tpl.subject = data.subject
    tpl.body = sanitize_html(data.body)
    tpl.course_id = data.course_id
    tpl.invitation_date = data.invitation_date


def create_email_template(db: Session, data: EmailTemplateIn) -> EmailTemplate:
    tpl = EmailTemplate()
    _apply(tpl, data, db)
    db.add(tpl)
    db.commit()
    db.refresh(tpl)
    logger.info("Email template %s created for course %s", tpl.id, tpl.course_id)
    return tpl


def update_email_template(db: Session, email_id: str, data: EmailTemplateIn) -> EmailTemplate:
    tpl = get_email_template(db, email_id)
    _apply(tpl, data, db)
    db.commit()
    db.refresh(tpl)
    return tpl


def delete_email_template(db: Session, email_id: str) -> None:
    tpl = get_email_template(db, email_id)
    db.delete(tpl)
    db.commit()
    logger.info("Email template %s deleted", email_id)
