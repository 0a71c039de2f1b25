import logging
from typing import Any
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.deps import get_db, get_review_workflow, require_admin
from app.core.errors import ApplicationNotFound
from app.models.application import Application
from app.schemas.application import ApplicationOut, ReviewUpdate
from app.services.intake_service import submit_application
from app.services.review_service import ReviewWorkflow, parse_review

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _get_application(db: Session, application_id: str) -> Application:
    app = db.scalar(
        select(Application)
        .options(joinedload(Application.course))
        .where(Application.id == application_id)
    )
    if not app:
        raise ApplicationNotFound()
    return app


@router.get("", response_model=list[ApplicationOut], dependencies=[Depends(require_admin)])
def list_applications(db: Session = Depends(get_db)):
    stmt = (
        select(Application)
        .options(joinedload(Application.course))
        .order_by(Application.created_at.desc())
    )
    return db.scalars(stmt).all()


@router.post("", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
def create_application(payload: Any = Body(...), db: Session = Depends(get_db)):
    """Public application form submission."""
    return submit_application(db, payload)


@router.get("/{application_id}", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def get_application(application_id: str, db: Session = Depends(get_db)):
    return _get_application(db, application_id)


@router.patch("/{application_id}", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def update_application(
    application_id: str,
    payload: Any = Body(...),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
):
    """Review fields only; no notification is sent from this endpoint."""
    update = parse_review(payload, schema=ReviewUpdate)
    return workflow.apply(application_id, update)


@router.delete("/{application_id}", dependencies=[Depends(require_admin)])
def delete_application(application_id: str, db: Session = Depends(get_db)):
    app = db.get(Application, application_id)
    if not app:
        raise ApplicationNotFound()
    db.delete(app)
    db.commit()
    logger.info("Application %s deleted", application_id)
    return {"success": True, "message": "Application deleted successfully"}
