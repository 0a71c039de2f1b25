from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.deps import get_db

router = APIRouter(prefix="/ping", tags=["health"])

@router.get("")
def ping(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return "pong"
