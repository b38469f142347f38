from payless.routes.payment import router as payment_router
from payless.routes.refund import router as refund_router
from payless.routes.notification import router as notification_router

__all__ = ["payment_router", "refund_router", "notification_router"]
