"""
Refund Routes — Refund candidate lists and exports.
Handles: date-range extraction, batch reconciliation (JSON or uploaded statement).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from payless.config import get_settings
from payless.dependencies import get_refund_service
from payless.exceptions import InvalidInputError, UpstreamError
from payless.models.session import OperatorSession
from payless.schemas.schemas import RefundListResponse, RefundUploadRequest, RefundUploadResponse
from payless.services.refund_service import RefundService
from payless.services.tabular import extract_transaction_ids, parse_table, serialize_rows, serialize_sheets
from payless.utils.auth import require_operator

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/refund", tags=["Refund"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _date_range_rows(service: RefundService, start_date, end_date, payment_method, operator):
    if not start_date or not end_date or not payment_method:
        raise HTTPException(status_code=400, detail="Missing required parameters")
    try:
        return service.by_date_range(start_date, end_date, payment_method)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error fetching refund data", extra={"operator_id": operator.operator_id})
        raise HTTPException(status_code=500, detail="Failed to fetch refund data")


@router.get("", response_model=RefundListResponse)
def get_refund_candidates(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    operator: OperatorSession = Depends(require_operator),
    service: RefundService = Depends(get_refund_service),
):
    """Unsuccessful payments of one method between two dates, minus those with a valid token."""
    rows = _date_range_rows(service, start_date, end_date, payment_method, operator)
    return {"payments": rows, "count": len(rows)}


@router.get("/export")
def export_refund_candidates(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    operator: OperatorSession = Depends(require_operator),
    service: RefundService = Depends(get_refund_service),
):
    """Same rows as GET /api/refund, as an xlsx workbook."""
    rows = _date_range_rows(service, start_date, end_date, payment_method, operator)
    if not rows:
        raise HTTPException(status_code=404, detail="No data to download")
    filename = f"refunds_{payment_method}_{start_date}_{end_date}.xlsx"
    return _xlsx_response(serialize_rows(rows, "Refunds"), filename)


def _reconcile(service: RefundService, transaction_ids, payment_method, operator):
    try:
        return service.reconcile_batch(transaction_ids, payment_method)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Refund upload error", extra={"operator_id": operator.operator_id})
        raise HTTPException(status_code=500, detail="Failed to process uploaded data")


@router.post("/upload", response_model=RefundUploadResponse)
def reconcile_uploaded_ids(
    payload: RefundUploadRequest,
    operator: OperatorSession = Depends(require_operator),
    service: RefundService = Depends(get_refund_service),
):
    """Partition provider transaction IDs into unsuccessful / successful / not found."""
    result = _reconcile(service, payload.transactionIds, payload.paymentMethod, operator)
    return result.as_dict()


@router.post("/upload/file")
async def reconcile_uploaded_file(
    payment_method: str = Form("", alias="paymentMethod"),
    download: bool = Query(False),
    file: UploadFile = File(...),
    operator: OperatorSession = Depends(require_operator),
    service: RefundService = Depends(get_refund_service),
):
    """Upload a provider statement; the ID column depends on the payment method."""
    if not payment_method:
        raise HTTPException(status_code=400, detail="Payment method is required")

    contents = await file.read()
    if len(contents) > settings.REFUND_UPLOAD_MAX_BYTES:
        raise HTTPException(status_code=400, detail="Uploaded file is too large")

    try:
        rows = await run_in_threadpool(parse_table, contents, file.filename or "")
        transaction_ids = extract_transaction_ids(rows, payment_method)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail=f"Failed to process uploaded data: {e}")

    result = await run_in_threadpool(_reconcile, service, transaction_ids, payment_method, operator)

    if download:
        content = await run_in_threadpool(serialize_sheets, {
            "Unsuccessful": result.unsuccessful,
            "Successful": result.successful,
            "Not Found": result.not_found,
        })
        return _xlsx_response(content, f"refund_reconciliation_{payment_method}.xlsx")
    return RefundUploadResponse(**result.as_dict())
