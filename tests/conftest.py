import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.errors import NotificationFailed
from app.core.security import hash_password
from app.db.session import Database
from app.main import create_app
from app.models.course import Course
from app.models.email_template import EmailTemplate

ADMIN_EMAIL = "admin@portal.org"
ADMIN_PASSWORD = "s3cret-pass"


class FakeNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise NotificationFailed()
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def database():
    db = Database("sqlite://").open()
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture(autouse=True)
def admin_account(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", hash_password(ADMIN_PASSWORD))


@pytest.fixture
def client(database, notifier):
    app = create_app(database=database, notifier=notifier)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    r = client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return client


@pytest.fixture
def course(database):
    with database.session() as s:
        c = Course(name="Software Engineering", description="Bootcamp")
        s.add(c)
        s.commit()
        s.refresh(c)
        return c


@pytest.fixture
def other_course(database):
    with database.session() as s:
        c = Course(name="Data Analysis")
        s.add(c)
        s.commit()
        s.refresh(c)
        return c


@pytest.fixture
def template(database, course):
    with database.session() as s:
        t = EmailTemplate(
            subject="Interview invitation",
            body="<p>You are invited to the technical interview.</p>",
            course_id=course.id,
        )
        s.add(t)
        s.commit()
        s.refresh(t)
        return t


def make_payload(course_id, **overrides):
    payload = {
        "fullName": "Jane Uwase",
        "email": "jane.uwase@mail.com",
        "dateOfBirth": "2000-01-15",
        "gender": "FEMALE",
        "phone": "0781234567",
        "nationality": "Rwandan",
        "refugeeStatus": False,
        "nationalId": "1200080012345678",
        "hasDisability": False,
        "province": "Kigali",
        "district": "Gasabo",
        "sector": "Remera",
        "cell": "Rukiri",
        "village": "Amajyambere",
        "emergencyContactName": "Eric Mugisha",
        "emergencyContactRelation": "Brother",
        "emergencyContactPhone": "0787654321",
        "hasYoungChild": False,
        "hasLaptop": True,
        "currentOccupation": "EMPLOYED",
        "educationBackground": "HIGH_SCHOOL",
        "academicBackground": "Mathematics and physics",
        "englishProficiency": "INTERMEDIATE",
        "englishSkillConfidence": "READING",
        "canPayRegistrationFee": True,
        "linkedInProfile": "",
        "githubProfile": "https://github.com/janeuwase",
        "howDidYouKnow": "WEBSITE",
        "motivation": "I want to become a software engineer and build tools for farmers in my district.",
        "courseId": course_id,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload(course):
    return make_payload(course.id)
