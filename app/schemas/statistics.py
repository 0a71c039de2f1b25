from pydantic import BaseModel

from app.schemas.application import ApplicationOut
from app.schemas.course import CourseRef


class StatisticsOut(BaseModel):
    totalApplicants: int
    applicantsByStatus: dict[str, int]
    applicantsByCourse: dict[str, int]
    applicantsByStatusAndCourse: dict[str, int]
    courses: list[CourseRef]


class ApplicationsBundleOut(BaseModel):
    success: bool = True
    applications: list[ApplicationOut]
    statistics: StatisticsOut

