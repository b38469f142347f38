"""
Payment Query Service — Paginated, filtered payment listing with token data attached.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import or_

from payless.config import get_settings
from payless.models.payment import MobilePayment
from payless.services.reconciliation import ReconciliationEngine
from payless.services.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class PaymentFilter:
    search: str = ""
    status: str = ""
    payment_method: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass
class PaymentPage:
    items: List[Dict] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        # 0 when there are no rows at all
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    def pagination(self) -> Dict:
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "limit": self.page_size,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }


def normalize_paging(page, page_size) -> tuple[int, int]:
    """Coerce raw page / page-size input; anything unusable falls back to defaults."""
    settings = get_settings()
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = settings.DEFAULT_PAGE_SIZE
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = settings.DEFAULT_PAGE_SIZE
    return page, min(page_size, settings.MAX_PAGE_SIZE)


def payment_view(payment: MobilePayment, token=None, include_status: bool = False) -> Dict:
    """Merge a payment row with its optional token into a plain dict."""
    view = {
        "id": payment.id,
        "transaction_id": payment.transaction_id,
        "msisdn": payment.msisdn,
        "customer_reference_id": payment.customer_reference_id,
        "payment_method": payment.payment_method,
        "payment_status": payment.payment_status,
        "payment_status_description": payment.payment_status_description,
        "amount": payment.amount,
        "transaction_date": payment.transaction_date,
        "meter_type": payment.meter_type,
        "token": None,
    }
    if token is not None:
        view["token"] = {"luku": token.luku, "passcode": token.passcode, "units": token.units}
    if include_status:
        view["reconciliation_status"] = ReconciliationEngine.classify(payment, token).value
    return view


class PaymentQueryService:
    """Builds bounded payment queries and bulk-joins token history."""

    def __init__(self, store: RecordStore):
        self.store = store

    @staticmethod
    def build_criteria(flt: PaymentFilter) -> List:
        criteria = []
        if flt.search:
            criteria.append(or_(
                MobilePayment.customer_reference_id.contains(flt.search, autoescape=True),
                MobilePayment.msisdn.contains(flt.search, autoescape=True),
                MobilePayment.transaction_id.contains(flt.search, autoescape=True),
            ))
        if flt.status:
            criteria.append(MobilePayment.payment_status == flt.status)
        if flt.payment_method:
            criteria.append(MobilePayment.payment_method == flt.payment_method)
        if flt.start_date:
            criteria.append(MobilePayment.transaction_date >= flt.start_date)
        if flt.end_date:
            criteria.append(MobilePayment.transaction_date <= flt.end_date)
        return criteria

    def list_payments(
        self,
        flt: Optional[PaymentFilter] = None,
        page=1,
        page_size=None,
        include_status: bool = False,
    ) -> PaymentPage:
        flt = flt or PaymentFilter()
        page, page_size = normalize_paging(page, page_size)
        criteria = self.build_criteria(flt)

        total_count = self.store.count_payments(criteria)
        payments = self.store.find_payments(
            criteria,
            order_by=MobilePayment.id.desc(),
            skip=(page - 1) * page_size,
            take=page_size,
        )

        # One lookup for the whole page, never one per row
        tokens = self.store.find_tokens_for(ReconciliationEngine.join_keys(payments))
        token_index = ReconciliationEngine.index_tokens(tokens)

        items = [
            payment_view(p, ReconciliationEngine.token_for(p, token_index), include_status)
            for p in payments
        ]
        logger.info(
            "Listed payments",
            extra={"count": len(items), "payment_method": flt.payment_method or None},
        )
        return PaymentPage(items=items, total_count=total_count, page=page, page_size=page_size)

    def get_payment(self, payment_id: int) -> Optional[Dict]:
        payment = self.store.get_payment(payment_id)
        if payment is None:
            return None
        token = self.token_for_payment(payment)
        return payment_view(payment, token, include_status=True)

    def token_for_payment(self, payment: MobilePayment):
        tokens = self.store.find_tokens_for(ReconciliationEngine.join_keys([payment]))
        return ReconciliationEngine.token_for(payment, ReconciliationEngine.index_tokens(tokens))
