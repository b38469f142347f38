"""
Record Store — Read-only query surface over payments and token history.
Criteria are SQLAlchemy boolean expressions built by the calling service.
"""
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import and_
from sqlalchemy.orm import Session

from payless.models.payment import MobilePayment
from payless.models.token import TokenHistory

IN_CLAUSE_CHUNK = 500


class RecordStore:
    """Thin wrapper so services never issue ad-hoc queries of their own."""

    def __init__(self, db: Session):
        self.db = db

    def find_payments(
        self,
        criteria: Sequence = (),
        order_by=None,
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> List[MobilePayment]:
        query = self.db.query(MobilePayment)
        if criteria:
            query = query.filter(and_(*criteria))
        if order_by is not None:
            query = query.order_by(order_by)
        if skip:
            query = query.offset(skip)
        if take is not None:
            query = query.limit(take)
        return query.all()

    def count_payments(self, criteria: Sequence = ()) -> int:
        query = self.db.query(MobilePayment)
        if criteria:
            query = query.filter(and_(*criteria))
        return query.count()

    def get_payment(self, payment_id: int) -> Optional[MobilePayment]:
        return self.db.query(MobilePayment).filter(MobilePayment.id == payment_id).first()

    def find_tokens(self, criteria: Sequence = ()) -> List[TokenHistory]:
        query = self.db.query(TokenHistory)
        if criteria:
            query = query.filter(and_(*criteria))
        return query.order_by(TokenHistory.id.asc()).all()

    def find_tokens_for(self, transaction_ids: Iterable[str]) -> List[TokenHistory]:
        """Bulk token lookup by transaction ID; blanks are never used as keys."""
        keys = sorted({t for t in transaction_ids if t})
        tokens: List[TokenHistory] = []
        for chunk in chunked(keys):
            tokens.extend(self.find_tokens([TokenHistory.txn_id.in_(chunk)]))
        return tokens


def chunked(values: Sequence, size: int = IN_CLAUSE_CHUNK) -> Iterable[Sequence]:
    """Split an IN-list so large uploads stay under driver parameter limits."""
    for start in range(0, len(values), size):
        yield values[start:start + size]
