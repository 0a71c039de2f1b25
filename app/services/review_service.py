"""Administrative review of applications.

Any status may be set from any other status; the enumerated order is the
usual progression, not a constraint. Persisting the review and notifying
the applicant are separate steps: a failed notification leaves the
committed review in place and is reported to the caller.
"""
from __future__ import annotations
import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.errors import (
    ApplicationNotFound, EmailTemplateNotFound, FieldError, ValidationFailed,
    field_errors_from_pydantic,
)
from app.models.application import Application
from app.models.email_template import EmailTemplate
from app.schemas.application import ReviewRequest, ReviewUpdate, ModifiedEmail
from app.services.mailer import Notifier

logger = logging.getLogger(__name__)

REVIEW_FIELDS = (
    "status",
    "reviewer_comments",
    "interview_date",
    "decision_date",
    "technical_interview_marks",
)


def parse_review(payload: Any, schema: type[ReviewUpdate] = ReviewRequest) -> ReviewUpdate:
    if isinstance(payload, schema):
        request = payload
    else:
        try:
            request = schema.model_validate(payload)
        except ValidationError as e:
            raise ValidationFailed(field_errors_from_pydantic(e), message="Validation failed")
    if isinstance(request, ReviewRequest) and request.send_email and not request.selected_email_id:
        raise ValidationFailed(
            [FieldError("selectedEmailId", "Select an email to send")],
            message="Validation failed",
        )
    return request


def review_changes(update: ReviewUpdate) -> dict[str, Any]:
    """Column values an update writes.

    A REST update writes only the fields present in the request; an explicit
    null or blank clears one. The admin review form always sends the whole
    form: blank dates clear the stored dates, blank comments and marks keep
    the stored values.
    """
    if isinstance(update, ReviewRequest):
        changes = {
            "status": update.status,
            "interview_date": update.interview_date,
            "decision_date": update.decision_date,
        }
        if update.reviewer_comments is not None:
            changes["reviewer_comments"] = update.reviewer_comments
        if update.technical_interview_marks is not None:
            changes["technical_interview_marks"] = update.technical_interview_marks
        return changes
    return update.model_dump(include=set(REVIEW_FIELDS), exclude_unset=True)


def compose_notification(template: EmailTemplate, modified: ModifiedEmail | None) -> tuple[str, str]:
    """Subject and HTML body to send; overrides replace the template field by field."""
    subject = template.subject
    body = template.body
    if modified is not None:
        subject = modified.subject or subject
        body = modified.body or body
    return subject, body


class ReviewWorkflow:
    def __init__(self, db: Session, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    def apply(self, application_id: str, update: ReviewUpdate) -> Application:
        app = self.db.get(Application, application_id)
        if not app:
            raise ApplicationNotFound()
        previous = app.status
        for name, value in review_changes(update).items():
            setattr(app, name, value)
        self.db.commit()
        self.db.refresh(app)
        logger.info(
            "Application %s reviewed: %s -> %s",
            app.id, getattr(previous, "value", previous), app.status.value,
        )
        return app

    def notify(self, app: Application, request: ReviewRequest) -> None:
        template = self.db.get(EmailTemplate, request.selected_email_id)
        if not template:
            logger.warning(
                "Application %s updated but email template %s does not exist",
                app.id, request.selected_email_id,
            )
            raise EmailTemplateNotFound()
        subject, html = compose_notification(template, request.modified_email)
        self.notifier.send(app.email, subject, html)

    def review(self, application_id: str, payload: Any) -> Application:
        request = parse_review(payload)
        app = self.apply(application_id, request)
        if request.send_email:
            self.notify(app, request)
        return app
