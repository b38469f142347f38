"""
Mobile Payment Model — Payments written by the mobile-money gateway integration.
Maps to the existing 'tbl_mobile_payments' table; this service only reads it.
"""
from sqlalchemy import Column, String, Integer, Float

from payless.database import Base


class MobilePayment(Base):
    __tablename__ = "tbl_mobile_payments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    transaction_id = Column(String(64), index=True)      # join key to token_history_data.txn_id
    msisdn = Column(String(20))
    customer_reference_id = Column(String(64))           # meter / account number

    payment_method = Column(String(16))                  # M-PESA | TIGO-PESA | AIRTEL-MONEY | SELCOM
    payment_status = Column(String(32))                  # SUCCESFUL | NOT SUCCESFUL | NULL
    payment_status_description = Column(String(256))

    amount = Column(Float)
    transaction_date = Column(String(10), index=True)    # YYYY-MM-DD stored as text
    meter_type = Column(String(16))                      # DOMESTIC | ...
