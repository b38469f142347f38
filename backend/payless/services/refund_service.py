"""
Refund Service — Builds refund-eligible transaction lists.

Two entry points share one rule (ReconciliationEngine.is_refund_eligible):
- by date range: stored NOT SUCCESFUL payments of one method within dates
- by uploaded batch: transaction IDs from a provider statement
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import not_

from payless.config import get_settings
from payless.exceptions import InvalidInputError
from payless.models.enums import PaymentStatus, ReconciliationStatus
from payless.models.payment import MobilePayment
from payless.services.reconciliation import ReconciliationEngine
from payless.services.record_store import RecordStore, chunked

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    unsuccessful: List[Dict] = field(default_factory=list)
    successful: List[Dict] = field(default_factory=list)
    not_found: List[Dict] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.unsuccessful) + len(self.successful) + len(self.not_found)

    def as_dict(self) -> Dict:
        return {
            "unsuccessful": self.unsuccessful,
            "successful": self.successful,
            "notFound": self.not_found,
            "total": self.total,
        }


def parse_day(value, field_name: str) -> date:
    """Reduce a date or ISO datetime string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise InvalidInputError(f"{field_name} is required")
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise InvalidInputError(f"{field_name} must be a date in YYYY-MM-DD format")


def normalize_transaction_ids(transaction_ids: Iterable) -> List[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen: Dict[str, None] = {}
    for raw in transaction_ids:
        if raw is None:
            continue
        txn = str(raw).strip()
        if txn:
            seen.setdefault(txn, None)
    return list(seen)


def refund_row(transaction_id, msisdn, status: str, amount) -> Dict:
    return {
        "TRANSACTION_ID": transaction_id,
        "MSISDN": msisdn,
        "STATUS": status,
        "AMOUNT": amount,
    }


class RefundService:
    """Refund candidate extraction over the record store."""

    def __init__(self, store: RecordStore):
        self.store = store

    @staticmethod
    def date_range(start_date, end_date) -> Tuple[str, str]:
        """Day bounds as the YYYY-MM-DD strings stored in transaction_date."""
        start = parse_day(start_date, "startDate")
        end = parse_day(end_date, "endDate")
        if start > end:
            raise InvalidInputError("startDate must not be after endDate")
        return start.isoformat(), end.isoformat()

    def by_date_range(self, start_date, end_date, payment_method: str) -> List[Dict]:
        if not payment_method:
            raise InvalidInputError("paymentMethod is required")
        start, end = self.date_range(start_date, end_date)
        settings = get_settings()

        payments = self.store.find_payments(
            [
                MobilePayment.payment_method == payment_method,
                MobilePayment.payment_status == PaymentStatus.NOT_SUCCESSFUL.value,
                MobilePayment.transaction_id.isnot(None),
                MobilePayment.transaction_id != "",
                not_(MobilePayment.transaction_id.startswith(settings.REFUND_EXCLUDED_PREFIX)),
                MobilePayment.transaction_date >= start,
                MobilePayment.transaction_date <= end,
            ],
            order_by=MobilePayment.id.asc(),
        )

        tokens = self.store.find_tokens_for(ReconciliationEngine.join_keys(payments))
        token_index = ReconciliationEngine.index_tokens(tokens)

        rows = [
            refund_row(
                p.transaction_id or "N/A",
                p.msisdn or "",
                p.payment_status or ReconciliationStatus.PENDING.value,
                p.amount or 0,
            )
            for p in payments
            if ReconciliationEngine.is_refund_eligible(p, ReconciliationEngine.token_for(p, token_index))
        ]
        logger.info(
            "Refund candidates by date range",
            extra={"payment_method": payment_method, "count": len(rows)},
        )
        return rows

    def reconcile_batch(self, transaction_ids, payment_method: str) -> BatchResult:
        if not transaction_ids:
            raise InvalidInputError("Transaction IDs are required")
        if not payment_method:
            raise InvalidInputError("Payment method is required")
        requested = normalize_transaction_ids(transaction_ids)
        if not requested:
            raise InvalidInputError("Transaction IDs are required")

        payments: List[MobilePayment] = []
        for chunk in chunked(requested):
            payments.extend(self.store.find_payments(
                [
                    MobilePayment.transaction_id.in_(chunk),
                    MobilePayment.transaction_id != "",
                    MobilePayment.payment_method == payment_method,
                ],
                order_by=MobilePayment.id.asc(),
            ))
        payments.sort(key=lambda p: p.id)

        tokens = self.store.find_tokens_for(ReconciliationEngine.join_keys(payments))
        with_valid_token = ReconciliationEngine.valid_token_txn_ids(tokens)

        result = BatchResult()
        for payment in payments:
            proven = payment.transaction_id in with_valid_token
            if payment.payment_status == PaymentStatus.NOT_SUCCESSFUL.value and not proven:
                result.unsuccessful.append(refund_row(
                    payment.transaction_id, payment.msisdn,
                    ReconciliationStatus.NOT_SUCCESSFUL.value, payment.amount,
                ))
            else:
                result.successful.append(refund_row(
                    payment.transaction_id, payment.msisdn,
                    ReconciliationStatus.SUCCESSFUL.value, payment.amount,
                ))

        found = {p.transaction_id for p in payments}
        result.not_found = [
            refund_row(txn, "", ReconciliationStatus.NOT_FOUND.value, "")
            for txn in requested
            if txn not in found
        ]

        logger.info(
            "Reconciled refund batch",
            extra={"payment_method": payment_method, "count": result.total},
        )
        return result
