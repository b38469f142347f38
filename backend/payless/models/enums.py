"""
Enumerations shared by models, services and schemas.

Stored values are kept byte-identical to what the payment gateway writes
into ``tbl_mobile_payments`` (including its spelling of "SUCCESFUL").
"""
from enum import Enum


class PaymentStatus(str, Enum):
    SUCCESSFUL = "SUCCESFUL"
    NOT_SUCCESSFUL = "NOT SUCCESFUL"


class PaymentMethod(str, Enum):
    MPESA = "M-PESA"
    TIGO_PESA = "TIGO-PESA"
    AIRTEL_MONEY = "AIRTEL-MONEY"
    SELCOM = "SELCOM"


class MeterType(str, Enum):
    DOMESTIC = "DOMESTIC"


class ReconciliationStatus(str, Enum):
    """Derived status of a payment after token proof is taken into account."""

    SUCCESSFUL = "SUCCESSFUL"
    NOT_SUCCESSFUL = "NOT SUCCESSFUL"
    NOT_FOUND = "NOT FOUND"
    PENDING = "PENDING"
