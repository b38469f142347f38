"""
Payment Routes — Payment listing, detail and token resend.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from payless.config import get_settings
from payless.dependencies import get_payment_query_service, get_sms_service
from payless.models.session import OperatorSession
from payless.schemas.schemas import PaymentListResponse, PaymentView, SMSSendResponse, TokenMessageResponse
from payless.services.notification_service import SMSService
from payless.services.payment_query_service import PaymentFilter, PaymentQueryService
from payless.services.reconciliation import ReconciliationEngine
from payless.utils.auth import require_operator
from payless.utils.rate_limiter import rate_limit
from payless.utils.validators import clean_phone_number, validate_phone_number

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/payment", tags=["Payment"])


@router.get("", response_model=PaymentListResponse)
def list_payments(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: str = Query(""),
    status: str = Query(""),
    payment_method: str = Query("", alias="paymentMethod"),
    start_date: str = Query("", alias="startDate"),
    end_date: str = Query("", alias="endDate"),
    classify: bool = Query(False),
    operator: OperatorSession = Depends(require_operator),
    service: PaymentQueryService = Depends(get_payment_query_service),
):
    """List payments newest first, each with its token (if any) attached."""
    flt = PaymentFilter(
        search=search.strip(),
        status=status.strip(),
        payment_method=payment_method.strip(),
        start_date=start_date.strip(),
        end_date=end_date.strip(),
    )
    try:
        result = service.list_payments(flt, page=page, page_size=limit, include_status=classify)
    except SQLAlchemyError:
        logger.exception("Error fetching payments", extra={"operator_id": operator.operator_id})
        raise HTTPException(status_code=500, detail="Failed to fetch payments")

    return {"payments": result.items, "pagination": result.pagination()}


def _load_payment_and_token(service: PaymentQueryService, payment_id: int):
    try:
        payment = service.store.get_payment(payment_id)
        token = service.token_for_payment(payment) if payment is not None else None
    except SQLAlchemyError:
        logger.exception("Error fetching payment", extra={"payment_id": payment_id})
        raise HTTPException(status_code=500, detail="Failed to fetch payment")
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment, token


@router.get("/{payment_id}", response_model=PaymentView)
def get_payment(
    payment_id: int,
    operator: OperatorSession = Depends(require_operator),
    service: PaymentQueryService = Depends(get_payment_query_service),
):
    """One payment with its token and derived reconciliation status."""
    try:
        view = service.get_payment(payment_id)
    except SQLAlchemyError:
        logger.exception("Error fetching payment", extra={"payment_id": payment_id})
        raise HTTPException(status_code=500, detail="Failed to fetch payment")
    if view is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return view


@router.get("/{payment_id}/token-message", response_model=TokenMessageResponse)
def preview_token_message(
    payment_id: int,
    operator: OperatorSession = Depends(require_operator),
    service: PaymentQueryService = Depends(get_payment_query_service),
):
    """Preview the SMS body that a resend would deliver."""
    payment, token = _load_payment_and_token(service, payment_id)
    message = ReconciliationEngine.build_token_message(payment, token)
    if not message:
        raise HTTPException(status_code=400, detail="No token found for this payment")
    return TokenMessageResponse(payment_id=payment.id, phone_number=payment.msisdn, message=message)


@router.post("/{payment_id}/resend-token", response_model=SMSSendResponse)
async def resend_token(
    payment_id: int,
    operator: OperatorSession = Depends(require_operator),
    service: PaymentQueryService = Depends(get_payment_query_service),
    sms: SMSService = Depends(get_sms_service),
    _throttle: bool = Depends(rate_limit(
        requests=settings.SMS_RATE_LIMIT_REQUESTS, window=settings.SMS_RATE_LIMIT_WINDOW,
    )),
):
    """Re-send the customer's token SMS to the payment's msisdn."""
    payment, token = await run_in_threadpool(_load_payment_and_token, service, payment_id)

    message = ReconciliationEngine.build_token_message(payment, token)
    if not message:
        raise HTTPException(status_code=400, detail="No token found for this payment")
    if not validate_phone_number(payment.msisdn):
        raise HTTPException(status_code=400, detail="Invalid phone number format")

    result = await sms.send_sms(clean_phone_number(payment.msisdn), message=message)
    if not result["success"]:
        logger.error(
            "Token resend failed",
            extra={"payment_id": payment_id, "operator_id": operator.operator_id, "error": result.get("message")},
        )
        raise HTTPException(status_code=500, detail=result.get("message") or "Failed to send SMS")

    logger.info("Token resent", extra={"payment_id": payment_id, "operator_id": operator.operator_id})
    return SMSSendResponse(success=True, message="SMS sent successfully", data=result.get("data"))
