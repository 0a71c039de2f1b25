"""Dashboard statistics over the application collection."""
from __future__ import annotations
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from app.models.application import Application

STATUS_COURSE_SEPARATOR = "__"


@dataclass
class ApplicationStatistics:
    total_applicants: int = 0
    by_status: Counter = field(default_factory=Counter)
    by_course: Counter = field(default_factory=Counter)
    by_status_and_course: Counter = field(default_factory=Counter)
    courses: dict[str, str] = field(default_factory=dict)

    def add(self, status: str, course_id: str, course_name: str) -> None:
        self.total_applicants += 1
        self.by_status[status] += 1
        self.by_course[course_name] += 1
        self.by_status_and_course[(status, course_name)] += 1
        self.courses.setdefault(course_id, course_name)

    def to_dict(self) -> dict:
        """Shape consumed by the admin dashboard.

        Status/course pairs are flattened to ``"{status}__{courseName}"``.
        """
        return {
            "totalApplicants": self.total_applicants,
            "applicantsByStatus": dict(self.by_status),
            "applicantsByCourse": dict(self.by_course),
            "applicantsByStatusAndCourse": {
                f"{status}{STATUS_COURSE_SEPARATOR}{course}": count
                for (status, course), count in self.by_status_and_course.items()
            },
            "courses": [{"id": cid, "name": name} for cid, name in self.courses.items()],
        }


def compute_statistics(applications: Iterable[Application]) -> ApplicationStatistics:
    stats = ApplicationStatistics()
    for app in applications:
        status = app.status.value if hasattr(app.status, "value") else str(app.status)
        stats.add(status, app.course.id, app.course.name)
    return stats
