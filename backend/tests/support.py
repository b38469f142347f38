"""Shared fixtures: an in-memory store and row factories."""
from datetime import datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import payless.models  # noqa: F401  (registers tables on Base.metadata)
from payless.database import Base
from payless.models import MobilePayment, OperatorSession, TokenHistory

VALID_LUKU = "12345678901234567890"
VALID_PASSCODE = "6003 6831 4771 8012 5054"


def make_sessionmaker():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def add_payment(db, **fields) -> MobilePayment:
    values = {
        "transaction_id": "TXN1",
        "msisdn": "255712345678",
        "customer_reference_id": "0202300058122",
        "payment_method": "M-PESA",
        "payment_status": "NOT SUCCESFUL",
        "amount": 5000,
        "transaction_date": "2024-01-15",
        "meter_type": "DOMESTIC",
    }
    values.update(fields)
    payment = MobilePayment(**values)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def add_token(db, **fields) -> TokenHistory:
    values = {"txn_id": "TXN1", "luku": None, "passcode": None, "units": None}
    values.update(fields)
    token = TokenHistory(**values)
    db.add(token)
    db.commit()
    db.refresh(token)
    return token


def add_operator_session(db, session_id="op-session", expired=False, revoked=False) -> OperatorSession:
    now = datetime.utcnow()
    session = OperatorSession(
        id=session_id,
        operator_id="operator@example.com",
        created_at=now,
        expires_at=now - timedelta(minutes=1) if expired else now + timedelta(hours=1),
        revoked=revoked,
    )
    db.add(session)
    db.commit()
    return session
