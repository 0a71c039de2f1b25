import io
from datetime import datetime
from collections.abc import Iterable

import pandas as pd
from openpyxl.styles import Alignment

from app.models.application import Application

LONG_TEXT_COLUMNS = ("Motivation", "Additional Feedback", "Reviewer Comments", "Disability Details")
MAX_COLUMN_WIDTH = 50


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _plain(value):
    return value.value if hasattr(value, "value") else value


COLUMNS = [
    ("Full Name", lambda a: a.full_name),
    ("Email", lambda a: a.email),
    ("Date of Birth", lambda a: a.date_of_birth),
    ("Gender", lambda a: _plain(a.gender)),
    ("Phone", lambda a: a.phone),
    ("Province", lambda a: a.province),
    ("District", lambda a: a.district),
    ("Sector", lambda a: a.sector),
    ("Cell", lambda a: a.cell),
    ("Village", lambda a: a.village),
    ("Nationality", lambda a: a.nationality),
    ("Refugee Status", lambda a: _yes_no(a.refugee_status)),
    ("Refugee ID", lambda a: a.refugee_id),
    ("National ID", lambda a: a.national_id),
    ("Has Disability", lambda a: _yes_no(a.has_disability)),
    ("Disability Type", lambda a: _plain(a.disability_type)),
    ("Disability Details", lambda a: a.disability_details),
    ("Emergency Contact Name", lambda a: a.emergency_contact_name),
    ("Emergency Contact Relation", lambda a: a.emergency_contact_relation),
    ("Emergency Contact Phone", lambda a: a.emergency_contact_phone),
    ("Has Young Child", lambda a: _yes_no(a.has_young_child)),
    ("Has Childcare Support", lambda a: _yes_no(a.has_childcare_support)),
    ("Has Laptop", lambda a: _yes_no(a.has_laptop)),
    ("Current Occupation", lambda a: _plain(a.current_occupation)),
    ("Education Background", lambda a: _plain(a.education_background)),
    ("University", lambda a: a.university),
    ("Academic Background", lambda a: a.academic_background),
    ("English Proficiency", lambda a: _plain(a.english_proficiency)),
    ("English Skill Confidence", lambda a: _plain(a.english_skill_confidence)),
    ("Can Pay Registration Fee", lambda a: _yes_no(a.can_pay_registration_fee)),
    ("LinkedIn Profile", lambda a: a.linkedin_profile),
    ("GitHub Profile", lambda a: a.github_profile),
    ("How Did You Know", lambda a: _plain(a.how_did_you_know)),
    ("How Did You Know Specification", lambda a: a.how_did_you_know_specification),
    ("Motivation", lambda a: a.motivation),
    ("Additional Feedback", lambda a: a.additional_feedback),
    ("Status", lambda a: a.status.label),
    ("Reviewer Comments", lambda a: a.reviewer_comments),
    ("Interview Date", lambda a: a.interview_date),
    ("Decision Date", lambda a: a.decision_date),
    ("Technical Interview Marks", lambda a: a.technical_interview_marks),
    ("Course Name", lambda a: a.course.name if a.course else None),
]


def applications_frame(applications: Iterable[Application]) -> pd.DataFrame:
    rows = [[getter(app) for _, getter in COLUMNS] for app in applications]
    return pd.DataFrame(rows, columns=[header for header, _ in COLUMNS])


def export_filename(status_filter: str, now: datetime | None = None) -> str:
    now = now or datetime.utcnow()
    return f"applications-{status_filter}-{now.strftime('%Y%m%d_%H%M%S')}.xlsx"


def export_applications_xlsx(applications: Iterable[Application]) -> bytes:
    df = applications_frame(applications)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Applications", index=False)
        sheet = writer.sheets["Applications"]
        wrap = Alignment(wrap_text=True, vertical="top")
        for idx, column in enumerate(df.columns, start=1):
            values = [len(str(v)) for v in df[column] if pd.notna(v)]
            letter = sheet.cell(row=1, column=idx).column_letter
            sheet.column_dimensions[letter].width = min(max([len(column), *values]) + 2, MAX_COLUMN_WIDTH)
            if column in LONG_TEXT_COLUMNS:
                for cell in sheet[letter][1:]:
                    cell.alignment = wrap
    return buf.getvalue()
