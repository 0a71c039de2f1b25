from types import SimpleNamespace

import pytest

from conftest import make_payload

from app.models.application import Application, ApplicationStatus
from app.services.intake_service import submit_application
from app.services.statistics import compute_statistics


def fake(status, course_id, course_name):
    return SimpleNamespace(status=status, course=SimpleNamespace(id=course_id, name=course_name))


def test_counts_partition_the_collection():
    apps = [
        fake(ApplicationStatus.UNDER_REVIEW, "c1", "Software Engineering"),
        fake(ApplicationStatus.UNDER_REVIEW, "c1", "Software Engineering"),
        fake(ApplicationStatus.ACCEPTED, "c1", "Software Engineering"),
        fake(ApplicationStatus.ACCEPTED, "c2", "Data Analysis"),
        fake(ApplicationStatus.REJECTED, "c2", "Data Analysis"),
    ]
    stats = compute_statistics(apps).to_dict()

    assert stats["totalApplicants"] == 5
    assert sum(stats["applicantsByStatus"].values()) == 5
    assert sum(stats["applicantsByCourse"].values()) == 5
    assert sum(stats["applicantsByStatusAndCourse"].values()) == 5
    assert stats["applicantsByStatus"] == {"UNDER_REVIEW": 2, "ACCEPTED": 2, "REJECTED": 1}
    assert stats["applicantsByCourse"] == {"Software Engineering": 3, "Data Analysis": 2}
    assert stats["applicantsByStatusAndCourse"] == {
        "UNDER_REVIEW__Software Engineering": 2,
        "ACCEPTED__Software Engineering": 1,
        "ACCEPTED__Data Analysis": 1,
        "REJECTED__Data Analysis": 1,
    }
    assert stats["courses"] == [
        {"id": "c1", "name": "Software Engineering"},
        {"id": "c2", "name": "Data Analysis"},
    ]


def test_empty_collection():
    stats = compute_statistics([]).to_dict()
    assert stats["totalApplicants"] == 0
    assert stats["applicantsByStatus"] == {}
    assert stats["courses"] == []


@pytest.fixture
def applications(database, course, other_course):
    rows = [
        ("alice@mail.com", "Alice Mukamana", course, ApplicationStatus.UNDER_REVIEW),
        ("bob@mail.com", "Bob Habimana", course, ApplicationStatus.ACCEPTED),
        ("carol@mail.com", "Carol Ingabire", other_course, ApplicationStatus.ACCEPTED),
    ]
    with database.session() as s:
        for email, name, c, status in rows:
            app = submit_application(s, make_payload(c.id, email=email, fullName=name))
            app.status = status
        s.commit()


def test_fetch_applications_bundle(admin_client, applications):
    r = admin_client.get("/api/admin/applications")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert len(body["applications"]) == 3
    stats = body["statistics"]
    assert stats["totalApplicants"] == 3
    assert stats["applicantsByStatusAndCourse"] == {
        "UNDER_REVIEW__Software Engineering": 1,
        "ACCEPTED__Software Engineering": 1,
        "ACCEPTED__Data Analysis": 1,
    }
    assert {c["name"] for c in stats["courses"]} == {"Software Engineering", "Data Analysis"}


def test_filters_narrow_list_but_not_statistics(admin_client, applications, other_course):
    body = admin_client.get("/api/admin/applications", params={"status": "ACCEPTED"}).json()
    assert {a["email"] for a in body["applications"]} == {"bob@mail.com", "carol@mail.com"}
    assert body["statistics"]["totalApplicants"] == 3

    body = admin_client.get("/api/admin/applications", params={"courseId": other_course.id}).json()
    assert [a["email"] for a in body["applications"]] == ["carol@mail.com"]

    body = admin_client.get("/api/admin/applications", params={"q": "HABIM"}).json()
    assert [a["fullName"] for a in body["applications"]] == ["Bob Habimana"]

    body = admin_client.get("/api/admin/applications", params={"status": "ALL", "courseId": "ALL"}).json()
    assert len(body["applications"]) == 3


def test_unknown_status_filter(admin_client, applications):
    r = admin_client.get("/api/admin/applications", params={"status": "HIRED"})
    assert r.status_code == 400
    assert r.json()["message"] == "Unknown status: HIRED"


def test_fetch_requires_admin(client, applications):
    assert client.get("/api/admin/applications").status_code == 401


def test_statistics_match_rows(database, applications):
    with database.session() as s:
        rows = s.query(Application).all()
        stats = compute_statistics(rows)
    assert stats.total_applicants == len(rows)
    assert stats.by_status_and_course[("ACCEPTED", "Data Analysis")] == 1
