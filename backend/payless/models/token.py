"""
Token History Model — Utility tokens produced by the external vending process.
Correlated to payments by value (txn_id == transaction_id), not by foreign key.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime

from payless.database import Base


class TokenHistory(Base):
    __tablename__ = "token_history_data"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    txn_id = Column(String(64), index=True)

    luku = Column(String(64))       # domestic meters
    passcode = Column(String(64))   # general / postpaid meters
    units = Column(String(32))      # e.g. "8.5kWh"

    created_at = Column(DateTime, default=datetime.utcnow)
