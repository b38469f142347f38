"""
Reconciliation Engine — Derives a trustworthy status for a payment.

The stored ``payment_status`` and the token side-channel can disagree.
A token record carrying a valid luku or passcode is proof of a successful
vend and always beats the stored status.
"""
from typing import Dict, Iterable, List, Optional, Set

from payless.config import get_settings
from payless.models.enums import MeterType, PaymentStatus, ReconciliationStatus
from payless.utils.validators import format_token, is_valid_token


def _join_key(transaction_id: Optional[str]) -> Optional[str]:
    """Transaction IDs usable for token correlation; '' and None never join."""
    if transaction_id is None or transaction_id == "":
        return None
    return transaction_id


def _format_amount(amount) -> str:
    try:
        return f"{float(amount):.2f}"
    except (TypeError, ValueError):
        return str(amount)


class ReconciliationEngine:
    """Token-proof aware classification of payments."""

    @staticmethod
    def has_valid_token(token) -> bool:
        if token is None:
            return False
        return is_valid_token(getattr(token, "luku", None)) or is_valid_token(
            getattr(token, "passcode", None)
        )

    @staticmethod
    def join_keys(payments: Iterable) -> List[str]:
        """Distinct, non-empty transaction IDs of ``payments`` in first-seen order."""
        seen: Dict[str, None] = {}
        for payment in payments:
            key = _join_key(getattr(payment, "transaction_id", None))
            if key is not None:
                seen.setdefault(key, None)
        return list(seen)

    @staticmethod
    def index_tokens(tokens: Iterable) -> Dict[str, object]:
        """Map txn_id -> token, keeping at most one token per transaction.

        A token with a valid luku/passcode replaces an earlier invalid one;
        otherwise the first token seen for a transaction is kept.
        """
        index: Dict[str, object] = {}
        for token in tokens:
            key = _join_key(getattr(token, "txn_id", None))
            if key is None:
                continue
            current = index.get(key)
            if current is None:
                index[key] = token
            elif not ReconciliationEngine.has_valid_token(current) and ReconciliationEngine.has_valid_token(token):
                index[key] = token
        return index

    @staticmethod
    def valid_token_txn_ids(tokens: Iterable) -> Set[str]:
        """Transaction IDs that have at least one token with a valid value."""
        return {
            token.txn_id
            for token in tokens
            if _join_key(getattr(token, "txn_id", None)) is not None
            and ReconciliationEngine.has_valid_token(token)
        }

    @staticmethod
    def token_for(payment, token_index: Dict[str, object]):
        key = _join_key(getattr(payment, "transaction_id", None))
        if key is None:
            return None
        return token_index.get(key)

    @staticmethod
    def classify(payment, token=None) -> ReconciliationStatus:
        """Classify a payment given its correlated token (or None).

        Order of precedence: valid token, stored SUCCESFUL, stored
        NOT SUCCESFUL, anything else is PENDING.
        """
        if _join_key(getattr(payment, "transaction_id", None)) is None:
            token = None
        if ReconciliationEngine.has_valid_token(token):
            return ReconciliationStatus.SUCCESSFUL

        status = getattr(payment, "payment_status", None)
        if status == PaymentStatus.SUCCESSFUL.value:
            return ReconciliationStatus.SUCCESSFUL
        if status == PaymentStatus.NOT_SUCCESSFUL.value:
            return ReconciliationStatus.NOT_SUCCESSFUL
        return ReconciliationStatus.PENDING

    @staticmethod
    def is_refund_eligible(payment, token=None) -> bool:
        """Refunds trust only token proof: a stored NOT SUCCESFUL without a valid token."""
        if getattr(payment, "payment_status", None) != PaymentStatus.NOT_SUCCESSFUL.value:
            return False
        if _join_key(getattr(payment, "transaction_id", None)) is None:
            return True
        return not ReconciliationEngine.has_valid_token(token)

    @staticmethod
    def build_token_message(payment, token) -> str:
        """Build the customer SMS for a vended token.

        Domestic meters get the two-step LUKU + PASSCODE message; every other
        meter type gets a single passcode message. Missing fields are left out.
        Returns "" when the token carries nothing to send.
        """
        if token is None:
            return ""
        luku = format_token(getattr(token, "luku", None))
        passcode = format_token(getattr(token, "passcode", None))
        units = (getattr(token, "units", None) or "").strip()
        if not (luku or passcode or units):
            return ""

        reference = getattr(payment, "customer_reference_id", None)
        receipt = getattr(payment, "transaction_id", None)
        amount = getattr(payment, "amount", None)
        contacts = get_settings().SUPPORT_CONTACTS

        if getattr(payment, "meter_type", None) == MeterType.DOMESTIC.value:
            sections = []
            if luku:
                sections.append(f"MUHIMU SANA ANZA KUWEKA LUKU: \n{luku}")
            if passcode:
                sections.append(f"MALIZIA KUWEKA PASSCODE: \n{passcode}")
            details = []
            if reference:
                details.append(f"Mita # {reference}")
            if receipt:
                details.append(f"Risiti: {receipt}")
            if amount is not None:
                details.append(f"Kiasi: {_format_amount(amount)}")
            if units:
                details.append(f"Units: {units}")
            if details:
                sections.append(" \n".join(details))
            sections.append(f"**Piga Bure {' na '.join(contacts)}**")
            return " \n\n".join(sections)

        lines = []
        if passcode:
            lines.append(f"Token: {passcode}")
        if reference:
            lines.append(f"Meter # {reference}")
        if receipt:
            lines.append(f"Receipt: {receipt}")
        if amount is not None:
            lines.append(f"Amount: {_format_amount(amount)}")
        if units:
            lines.append(f"Units: {units}")
        body = " \n".join(lines)
        footer = f"**Contact Us {' or '.join(contacts)} **"
        return f"{body} \n\n{footer}" if body else footer
