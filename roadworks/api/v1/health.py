from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from roadworks.core.errors import StorageUnavailable
from roadworks.db.session import get_db

router = APIRouter()


@router.get("/health")
def health(request: Request, db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except DBAPIError as e:
        raise StorageUnavailable("Database unreachable.") from e
    return {
        "status": "ok",
        "database": "ok",
        "request_id": getattr(request.state, "request_id", None),
    }
