"""
Auth Gate — Every /api route depends on this before touching the record store.
"""
import logging
from datetime import datetime, timedelta

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from payless.config import get_settings
from payless.database import get_db
from payless.models.session import OperatorSession

logger = logging.getLogger(__name__)


def session_is_active(session: OperatorSession, now: datetime | None = None) -> bool:
    now = now or datetime.utcnow()
    if session.revoked:
        return False
    if session.expires_at is not None:
        return session.expires_at > now
    if session.created_at is None:
        return False
    ttl = timedelta(minutes=get_settings().SESSION_EXPIRY_MINUTES)
    return session.created_at + ttl > now


def require_operator(
    session_id: str | None = Header(None, alias="session-id"),
    db: Session = Depends(get_db),
) -> OperatorSession:
    """FastAPI dependency: the caller's active operator session, else 401."""
    if not session_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    session = db.query(OperatorSession).filter(OperatorSession.id == session_id).first()
    if session is None or not session_is_active(session):
        logger.warning("Rejected request with invalid session")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session
