import io
from datetime import datetime

from openpyxl import load_workbook

from conftest import make_payload

from app.services.export import COLUMNS, export_filename


def read_sheet(content):
    wb = load_workbook(io.BytesIO(content))
    ws = wb["Applications"]
    return [list(row) for row in ws.iter_rows(values_only=True)]


def test_export_filename():
    assert export_filename("ACCEPTED", now=datetime(2026, 10, 19, 8, 5, 3)) == "applications-ACCEPTED-20261019_080503.xlsx"


def test_export_requires_admin(client):
    assert client.get("/api/admin/applications/export").status_code == 401


def test_export_empty_collection_has_headers(admin_client):
    r = admin_client.get("/api/admin/applications/export")
    assert r.status_code == 200
    rows = read_sheet(r.content)
    assert rows == [[header for header, _ in COLUMNS]]


def test_export_filtered_by_status(admin_client, course):
    admin_client.post("/api/applications", json=make_payload(course.id))
    other = admin_client.post(
        "/api/applications",
        json=make_payload(course.id, email="eric@mail.com", fullName="Eric Nshuti"),
    ).json()
    admin_client.post(f"/api/admin/applications/{other['id']}/review", json={"status": "ACCEPTED"})

    r = admin_client.get("/api/admin/applications/export", params={"status": "ACCEPTED"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert 'filename="applications-ACCEPTED-' in r.headers["content-disposition"]

    header, *rows = read_sheet(r.content)
    assert len(rows) == 1
    record = dict(zip(header, rows[0]))
    assert record["Full Name"] == "Eric Nshuti"
    assert record["Status"] == "ACCEPTED"
    assert record["Course Name"] == "Software Engineering"
    assert record["Has Laptop"] == "Yes"
    assert record["Refugee Status"] == "No"


def test_export_rejects_unknown_status(admin_client):
    r = admin_client.get("/api/admin/applications/export", params={"status": "HIRED"})
    assert r.status_code == 400
