from payless.services.reconciliation import ReconciliationEngine
from payless.services.record_store import RecordStore
from payless.services.payment_query_service import PaymentQueryService
from payless.services.refund_service import RefundService
from payless.services.notification_service import SMSService

__all__ = ["ReconciliationEngine", "RecordStore", "PaymentQueryService", "RefundService", "SMSService"]
