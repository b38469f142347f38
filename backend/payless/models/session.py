"""
Operator Session Model — Backing rows for the authentication gate.
Sessions are issued by the login service; this API only checks them.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean

from payless.database import Base


class OperatorSession(Base):
    __tablename__ = "operator_sessions"

    id = Column(String(36), primary_key=True, index=True)
    operator_id = Column(String(64), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=True)
    revoked = Column(Boolean, default=False)
