from payless.models.payment import MobilePayment
from payless.models.token import TokenHistory
from payless.models.session import OperatorSession
from payless.models.enums import PaymentStatus, PaymentMethod, MeterType, ReconciliationStatus

__all__ = [
    "MobilePayment", "TokenHistory", "OperatorSession",
    "PaymentStatus", "PaymentMethod", "MeterType", "ReconciliationStatus",
]
