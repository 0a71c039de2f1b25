import pytest

from app.core.errors import ApplicationNotFound, EmailTemplateNotFound, ValidationFailed
from app.models.application import Application, ApplicationStatus
from app.schemas.application import ModifiedEmail
from app.services.intake_service import submit_application
from app.services.review_service import ReviewWorkflow, compose_notification, parse_review


@pytest.fixture
def application(database, payload):
    with database.session() as s:
        return submit_application(s, payload)


def stored(database, application_id):
    with database.session() as s:
        return s.get(Application, application_id)


def review_url(application):
    return f"/api/admin/applications/{application.id}/review"


@pytest.mark.parametrize("target", list(ApplicationStatus))
def test_any_status_can_be_set(database, notifier, application, target):
    with database.session() as s:
        workflow = ReviewWorkflow(s, notifier)
        workflow.review(application.id, {"status": "ACCEPTED"})
        app = workflow.review(application.id, {"status": target.value})
    assert app.status is target
    assert stored(database, application.id).status is target
    assert notifier.sent == []


@pytest.mark.parametrize("marks", [101, -1])
def test_marks_out_of_range_are_rejected(database, notifier, application, marks):
    with database.session() as s:
        with pytest.raises(ValidationFailed) as exc:
            ReviewWorkflow(s, notifier).review(
                application.id, {"status": "TECHNICAL_INTERVIEWED", "technicalInterviewMarks": marks},
            )
    assert exc.value.errors[0].field == "technicalInterviewMarks"
    assert stored(database, application.id).status is ApplicationStatus.UNDER_REVIEW


def test_review_fields_are_persisted(database, notifier, application):
    with database.session() as s:
        ReviewWorkflow(s, notifier).review(application.id, {
            "status": "TECHNICAL_INTERVIEW_SCHEDULED",
            "reviewerComments": "Strong motivation",
            "interviewDate": "2026-11-03T09:30:00.000Z",
            "technicalInterviewMarks": "",
        })
    app = stored(database, application.id)
    assert app.reviewer_comments == "Strong motivation"
    assert app.interview_date.isoformat() == "2026-11-03T09:30:00"
    assert app.technical_interview_marks is None


def test_unknown_application(database, notifier):
    with database.session() as s:
        with pytest.raises(ApplicationNotFound):
            ReviewWorkflow(s, notifier).review("missing", {"status": "ACCEPTED"})


def test_accept_with_template_sends_unmodified_template(admin_client, database, notifier, application, template):
    r = admin_client.post(review_url(application), json={
        "status": "ACCEPTED",
        "sendEmail": True,
        "selectedEmailId": template.id,
    })
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "message": "Application updated successfully"}
    assert notifier.sent == [{
        "to": "jane.uwase@mail.com",
        "subject": "Interview invitation",
        "html": "<p>You are invited to the technical interview.</p>",
    }]
    assert stored(database, application.id).status is ApplicationStatus.ACCEPTED


def test_modified_email_overrides_field_by_field(admin_client, notifier, application, template):
    r = admin_client.post(review_url(application), json={
        "status": "REJECTED",
        "sendEmail": True,
        "selectedEmailId": template.id,
        "modifiedEmail": {"subject": "About your application", "body": ""},
    })
    assert r.status_code == 200, r.text
    assert notifier.sent[0]["subject"] == "About your application"
    assert notifier.sent[0]["html"] == template.body


def test_compose_notification_without_override(template):
    assert compose_notification(template, None) == (template.subject, template.body)
    assert compose_notification(template, ModifiedEmail(body="<p>Hi</p>")) == (template.subject, "<p>Hi</p>")


def test_send_email_requires_template_choice(admin_client, database, notifier, application):
    r = admin_client.post(review_url(application), json={"status": "ACCEPTED", "sendEmail": True})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "selectedEmailId", "message": "Select an email to send"}]
    assert stored(database, application.id).status is ApplicationStatus.UNDER_REVIEW
    assert notifier.sent == []


def test_missing_template_keeps_committed_status(admin_client, database, notifier, application):
    r = admin_client.post(review_url(application), json={
        "status": "WAITLISTED",
        "sendEmail": True,
        "selectedEmailId": "gone",
    })
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Selected email not found"}
    assert stored(database, application.id).status is ApplicationStatus.WAITLISTED
    assert notifier.sent == []


def test_notifier_failure_is_reported(admin_client, database, notifier, application, template):
    notifier.fail = True
    r = admin_client.post(review_url(application), json={
        "status": "ACCEPTED",
        "sendEmail": True,
        "selectedEmailId": template.id,
    })
    assert r.status_code == 502
    assert r.json()["success"] is False
    assert stored(database, application.id).status is ApplicationStatus.ACCEPTED


def test_workflow_notify_raises_for_missing_template(database, notifier, application):
    with database.session() as s:
        workflow = ReviewWorkflow(s, notifier)
        request = parse_review({"status": "ACCEPTED", "sendEmail": True, "selectedEmailId": "gone"})
        app = workflow.apply(application.id, request)
        with pytest.raises(EmailTemplateNotFound):
            workflow.notify(app, request)


def test_invalid_status_on_review_endpoint(admin_client, application):
    r = admin_client.post(review_url(application), json={"status": "HIRED"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "status"


def test_review_endpoint_requires_admin(client, application):
    r = client.post(review_url(application), json={"status": "ACCEPTED"})
    assert r.status_code == 401


def test_patch_updates_review_fields_without_email(admin_client, notifier, application, template):
    r = admin_client.patch(f"/api/applications/{application.id}", json={
        "status": "COMMON_INTERVIEW_SCHEDULED",
        "decisionDate": "2026-12-01",
        "sendEmail": True,
        "selectedEmailId": template.id,
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "COMMON_INTERVIEW_SCHEDULED"
    assert body["decisionDate"].startswith("2026-12-01")
    assert notifier.sent == []


def test_patch_rejects_out_of_range_marks(admin_client, application):
    r = admin_client.patch(f"/api/applications/{application.id}", json={
        "status": "TECHNICAL_INTERVIEWED",
        "technicalInterviewMarks": 101,
    })
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"


def test_status_only_patch_keeps_review_data(admin_client, application):
    url = f"/api/applications/{application.id}"
    r = admin_client.patch(url, json={
        "status": "TECHNICAL_INTERVIEWED",
        "reviewerComments": "Strong",
        "technicalInterviewMarks": 80,
        "interviewDate": "2026-11-03",
    })
    assert r.status_code == 200, r.text

    body = admin_client.patch(url, json={"status": "ACCEPTED"}).json()
    assert body["status"] == "ACCEPTED"
    assert body["reviewerComments"] == "Strong"
    assert body["technicalInterviewMarks"] == 80
    assert body["interviewDate"].startswith("2026-11-03")


def test_patch_with_null_clears_field(admin_client, application):
    url = f"/api/applications/{application.id}"
    admin_client.patch(url, json={"status": "TECHNICAL_INTERVIEWED", "reviewerComments": "Strong", "technicalInterviewMarks": 80})

    body = admin_client.patch(url, json={"status": "TECHNICAL_INTERVIEWED", "reviewerComments": None, "technicalInterviewMarks": ""}).json()
    assert body["reviewerComments"] is None
    assert body["technicalInterviewMarks"] is None


def test_review_form_keeps_comments_and_marks_but_clears_dates(admin_client, database, application):
    admin_client.post(review_url(application), json={
        "status": "TECHNICAL_INTERVIEWED",
        "reviewerComments": "Strong",
        "technicalInterviewMarks": 75,
        "interviewDate": "2026-11-03",
    })
    r = admin_client.post(review_url(application), json={
        "status": "ACCEPTED",
        "reviewerComments": "",
        "technicalInterviewMarks": "",
        "interviewDate": "",
    })
    assert r.status_code == 200, r.text
    app = stored(database, application.id)
    assert app.status is ApplicationStatus.ACCEPTED
    assert app.reviewer_comments == "Strong"
    assert app.technical_interview_marks == 75
    assert app.interview_date is None


def test_offset_timestamps_are_stored_in_utc(admin_client, database, application):
    r = admin_client.patch(f"/api/applications/{application.id}", json={
        "status": "TECHNICAL_INTERVIEW_SCHEDULED",
        "interviewDate": "2026-11-03T09:30:00+02:00",
        "decisionDate": "2026-11-10T09:30:00.000Z",
    })
    assert r.status_code == 200, r.text
    app = stored(database, application.id)
    assert app.interview_date.isoformat() == "2026-11-03T07:30:00"
    assert app.decision_date.isoformat() == "2026-11-10T09:30:00"


def test_malformed_timestamp_is_rejected(admin_client, application):
    r = admin_client.patch(f"/api/applications/{application.id}", json={
        "status": "ACCEPTED",
        "interviewDate": "next tuesday",
    })
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "interviewDate"
