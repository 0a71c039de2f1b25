import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select, or_, func
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.deps import get_db, get_review_workflow, require_admin
from app.core.errors import PortalError, ValidationFailed, NotAuthenticated
from app.core.security import authenticate_admin, create_admin_session
from app.models.application import Application, ApplicationStatus
from app.schemas.admin import ActionResult, LoginIn
from app.schemas.application import ApplicationOut
from app.schemas.email_template import EmailTemplateIn, EmailTemplateOut
from app.schemas.statistics import ApplicationsBundleOut
from app.services import email_templates
from app.services.export import export_applications_xlsx, export_filename
from app.services.review_service import ReviewWorkflow
from app.services.statistics import compute_statistics

logger = logging.getLogger(__name__)

ALL = "ALL"

router = APIRouter(prefix="/api/admin", tags=["admin"])

protected = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/login", response_model=ActionResult)
def login(payload: LoginIn, response: Response):
    if not authenticate_admin(payload.email, payload.password):
        logger.warning("Failed admin login for %s", payload.email)
        raise NotAuthenticated("Invalid credentials")
    token = create_admin_session(payload.email.strip().lower())
    response.set_cookie(
        settings.ADMIN_COOKIE_NAME,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRES_MIN * 60,
    )
    return ActionResult(success=True, message="Logged in")


@router.post("/logout", response_model=ActionResult)
def logout(response: Response):
    response.delete_cookie(settings.ADMIN_COOKIE_NAME)
    return ActionResult(success=True, message="Logged out")


def _filtered_applications(db: Session, q: str | None, status_filter: str | None, course_id: str | None):
    stmt = select(Application).options(joinedload(Application.course))
    if q:
        needle = f"%{q.strip().lower()}%"
        stmt = stmt.where(or_(
            func.lower(Application.full_name).like(needle),
            func.lower(Application.email).like(needle),
        ))
    if status_filter and status_filter != ALL:
        stmt = stmt.where(Application.status == ApplicationStatus(status_filter))
    if course_id and course_id != ALL:
        stmt = stmt.where(Application.course_id == course_id)
    return db.scalars(stmt.order_by(Application.created_at.desc())).all()


@protected.get("/applications", response_model=ApplicationsBundleOut)
def fetch_applications(
    db: Session = Depends(get_db),
    q: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    course_id: Optional[str] = Query(None, alias="courseId"),
):
    """Applications for the admin list plus dashboard statistics.

    Statistics always cover the whole collection; the filters only narrow
    the returned list.
    """
    if status_filter and status_filter != ALL and status_filter not in ApplicationStatus.__members__:
        raise ValidationFailed([], message=f"Unknown status: {status_filter}")
    everything = db.scalars(select(Application).options(joinedload(Application.course))).all()
    stats = compute_statistics(everything)
    apps = _filtered_applications(db, q, status_filter, course_id)
    return {
        "success": True,
        "applications": [ApplicationOut.model_validate(a) for a in apps],
        "statistics": stats.to_dict(),
    }


@protected.get("/applications/export")
def export_applications(
    db: Session = Depends(get_db),
    status_filter: str = Query(ALL, alias="status"),
    course_id: Optional[str] = Query(None, alias="courseId"),
):
    if status_filter != ALL and status_filter not in ApplicationStatus.__members__:
        raise ValidationFailed([], message=f"Unknown status: {status_filter}")
    apps = _filtered_applications(db, None, status_filter, course_id)
    content = export_applications_xlsx(apps)
    filename = export_filename(status_filter)
    logger.info("Exported %d applications (%s)", len(apps), status_filter)
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@protected.post("/applications/{application_id}/review", response_model=ActionResult)
def review_application(
    application_id: str,
    payload: Any = Body(...),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
):
    try:
        workflow.review(application_id, payload)
    except ValidationFailed as e:
        return JSONResponse(
            status_code=e.status_code,
            content=ActionResult.failed(e.message, e.errors).model_dump(exclude_none=True),
        )
    except PortalError as e:
        return JSONResponse(status_code=e.status_code, content=ActionResult.failed(e.message).model_dump(exclude_none=True))
    except Exception:
        logger.exception("Error updating application %s", application_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ActionResult.failed("Failed to update application").model_dump(exclude_none=True),
        )
    return ActionResult(success=True, message="Application updated successfully")


@protected.get("/emails", response_model=list[EmailTemplateOut])
def get_emails(db: Session = Depends(get_db)):
    return email_templates.list_email_templates(db)


@protected.post("/emails", response_model=EmailTemplateOut, status_code=status.HTTP_201_CREATED)
def create_email(payload: EmailTemplateIn, db: Session = Depends(get_db)):
    return email_templates.create_email_template(db, payload)


@protected.get("/emails/{email_id}", response_model=EmailTemplateOut)
def get_email(email_id: str, db: Session = Depends(get_db)):
    return email_templates.get_email_template(db, email_id)


@protected.put("/emails/{email_id}", response_model=EmailTemplateOut)
def update_email(email_id: str, payload: EmailTemplateIn, db: Session = Depends(get_db)):
    return email_templates.update_email_template(db, email_id, payload)


@protected.delete("/emails/{email_id}", response_model=ActionResult)
def delete_email(email_id: str, db: Session = Depends(get_db)):
    email_templates.delete_email_template(db, email_id)
    return ActionResult(success=True, message="Email deleted successfully")


router.include_router(protected)
