"""
FastAPI dependencies for services built per request or once per process.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from payless.database import get_db
from payless.services.notification_service import SMSService
from payless.services.payment_query_service import PaymentQueryService
from payless.services.record_store import RecordStore
from payless.services.refund_service import RefundService


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_payment_query_service(store: RecordStore = Depends(get_record_store)) -> PaymentQueryService:
    return PaymentQueryService(store)


def get_refund_service(store: RecordStore = Depends(get_record_store)) -> RefundService:
    return RefundService(store)


def get_sms_service(request: Request) -> SMSService:
    """The process-wide SMS client created at startup (see main.on_startup)."""
    return request.app.state.sms_service
