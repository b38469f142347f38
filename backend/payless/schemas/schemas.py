"""
Pydantic Schemas — Request & Response models for API validation.
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


# ──────────────── Payments ────────────────

class TokenView(BaseModel):
    luku: Optional[str] = None
    passcode: Optional[str] = None
    units: Optional[str] = None


class PaymentView(BaseModel):
    id: int
    transaction_id: Optional[str] = None
    msisdn: Optional[str] = None
    customer_reference_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    payment_status_description: Optional[str] = None
    amount: Optional[float] = None
    transaction_date: Optional[str] = None
    meter_type: Optional[str] = None
    token: Optional[TokenView] = None
    reconciliation_status: Optional[str] = None


class PaginationMeta(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    limit: int
    hasNextPage: bool
    hasPreviousPage: bool


class PaymentListResponse(BaseModel):
    payments: List[PaymentView]
    pagination: PaginationMeta


class TokenMessageResponse(BaseModel):
    payment_id: int
    phone_number: Optional[str] = None
    message: str


# ──────────────── Refunds ────────────────

class RefundRow(BaseModel):
    transaction_id: Optional[str] = Field(None, alias="TRANSACTION_ID")
    msisdn: Optional[str] = Field(None, alias="MSISDN")
    status: str = Field(..., alias="STATUS")
    amount: Optional[Union[int, float, str]] = Field(None, alias="AMOUNT")

    class Config:
        populate_by_name = True


class RefundListResponse(BaseModel):
    payments: List[RefundRow]
    count: int


class RefundUploadRequest(BaseModel):
    transactionIds: Optional[List[Any]] = Field(None, description="Provider transaction IDs from the uploaded statement")
    paymentMethod: Optional[str] = Field(None, description="M-PESA | TIGO-PESA | AIRTEL-MONEY | SELCOM")


class RefundUploadResponse(BaseModel):
    unsuccessful: List[RefundRow]
    successful: List[RefundRow]
    notFound: List[RefundRow]
    total: int


# ──────────────── SMS ────────────────

class SMSSendRequest(BaseModel):
    phoneNumber: Optional[str] = None
    message: Optional[str] = None


class SMSSendResponse(BaseModel):
    success: bool
    message: str = ""
    data: Optional[Dict[str, Any]] = None


# ──────────────── Generic ────────────────

class HealthResponse(BaseModel):
    status: str
    database: str
    sms: str
    version: str
    uptime_seconds: float
