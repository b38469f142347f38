"""
Tabular Files — Reads provider statements (xlsx / xls / csv) and writes xlsx exports.
"""
import io
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from payless.config import get_settings
from payless.exceptions import InvalidInputError, UpstreamError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".csv")
_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}


def _clean_cell(value) -> str:
    text = "" if value is None else str(value).strip()
    # Numeric IDs read back from Excel as floats ("12345.0")
    if re.fullmatch(r"\d+\.0+", text):
        text = text.split(".", 1)[0]
    return text


def parse_table(content: bytes, filename: str) -> List[Dict[str, str]]:
    """Parse the first sheet of an uploaded file into rows of {column: text}."""
    if not content:
        raise InvalidInputError("Empty file uploaded")
    suffix = Path(filename or "").suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InvalidInputError(
            f"Unsupported file type '{suffix or filename}'. Use one of: {', '.join(SUPPORTED_SUFFIXES)}"
        )

    try:
        if suffix == ".csv":
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(
                io.BytesIO(content), engine=_ENGINES[suffix], dtype=str, keep_default_na=False,
            )
    except Exception as e:
        logger.exception("Failed to parse uploaded file", extra={"error": str(e)})
        raise UpstreamError(f"Could not read {filename}") from e

    df.columns = [str(c).strip() for c in df.columns]
    rows = [
        {col: _clean_cell(val) for col, val in record.items()}
        for record in df.to_dict(orient="records")
    ]
    logger.info("Parsed uploaded file", extra={"count": len(rows)})
    return rows


def upload_column_for(payment_method: str) -> str:
    columns = get_settings().REFUND_UPLOAD_COLUMNS
    column = columns.get(payment_method)
    if not column:
        raise InvalidInputError(f"No upload column configured for payment method {payment_method}")
    return column


def extract_transaction_ids(rows: List[Dict[str, str]], payment_method: str) -> List[str]:
    """Pull the provider's transaction-ID column out of parsed rows.

    Header matching ignores case and surrounding whitespace. Blank cells are skipped.
    """
    wanted = upload_column_for(payment_method)
    if not rows:
        raise InvalidInputError("Uploaded file has no data rows")

    column: Optional[str] = None
    for name in rows[0].keys():
        if name.strip().upper() == wanted.upper():
            column = name
            break
    if column is None:
        raise InvalidInputError(f"Column {wanted} not found in uploaded file")

    ids = [row[column] for row in rows if row.get(column)]
    if not ids:
        raise InvalidInputError(f"Column {wanted} has no transaction IDs")
    return ids


def serialize_sheets(sheets: Dict[str, List[Dict]]) -> bytes:
    """Write one worksheet per entry; empty sheets keep a header-less placeholder."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name[:31], index=False)
    buffer.seek(0)
    return buffer.getvalue()


def serialize_rows(rows: List[Dict], sheet_name: str) -> bytes:
    return serialize_sheets({sheet_name: rows})
