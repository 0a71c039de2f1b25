import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotAuthenticated
from app.core.security import decode_admin_session
from app.services.mailer import Notifier
from app.services.review_service import ReviewWorkflow

bearer = HTTPBearer(auto_error=False)

def get_db(request: Request):
    db = request.app.state.db.new_session()
    try:
        yield db
    finally:
        db.close()

def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier

def get_review_workflow(db: Session = Depends(get_db),
                        notifier: Notifier = Depends(get_notifier)) -> ReviewWorkflow:
    return ReviewWorkflow(db, notifier)

def require_admin(request: Request,
                  creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    token = request.cookies.get(settings.ADMIN_COOKIE_NAME)
    if not token and creds:
        token = creds.credentials
    if not token:
        raise NotAuthenticated()
    try:
        payload = decode_admin_session(token)
    except jwt.PyJWTError:
        raise NotAuthenticated("Invalid or expired admin session")
    return payload["sub"]
