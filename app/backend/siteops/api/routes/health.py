"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from siteops.db.dependencies import get_db_session

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db_session)) -> dict[str, str]:
    """Liveness plus a round trip to the reporting database."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reporting database is unreachable.",
        ) from exc
    return {"status": "ok", "database": "ok"}
