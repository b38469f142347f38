from fastapi import APIRouter, Depends, HTTPException
import logging

from payless.config import get_settings
from payless.dependencies import get_sms_service
from payless.models.session import OperatorSession
from payless.schemas.schemas import SMSSendRequest, SMSSendResponse
from payless.services.notification_service import SMSService
from payless.utils.auth import require_operator
from payless.utils.rate_limiter import rate_limit
from payless.utils.validators import clean_phone_number, validate_phone_number

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/sms", tags=["Notifications"])


@router.post("/send", response_model=SMSSendResponse)
async def send_sms_notification(
    payload: SMSSendRequest,
    operator: OperatorSession = Depends(require_operator),
    sms: SMSService = Depends(get_sms_service),
    _throttle: bool = Depends(rate_limit(
        requests=settings.SMS_RATE_LIMIT_REQUESTS, window=settings.SMS_RATE_LIMIT_WINDOW,
    )),
):
    """
    Sends (or re-sends) an SMS to a subscriber.
    """
    if not payload.phoneNumber or not payload.message:
        raise HTTPException(status_code=400, detail="Phone number and message are required")
    if not validate_phone_number(payload.phoneNumber):
        raise HTTPException(status_code=400, detail="Invalid phone number format")

    result = await sms.send_sms(clean_phone_number(payload.phoneNumber), message=payload.message)
    if not result["success"]:
        logger.error(
            "SMS send failed",
            extra={"operator_id": operator.operator_id, "error": result.get("message")},
        )
        raise HTTPException(status_code=500, detail=result.get("message") or "Failed to send SMS")

    return SMSSendResponse(success=True, message="SMS sent successfully", data=result.get("data"))
