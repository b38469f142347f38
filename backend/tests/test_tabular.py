import io
import unittest

from openpyxl import Workbook, load_workbook

from payless.exceptions import InvalidInputError, UpstreamError
from payless.services.tabular import (
    extract_transaction_ids,
    parse_table,
    serialize_sheets,
    upload_column_for,
)


def xlsx_bytes(header, *rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(header)
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestParseTable(unittest.TestCase):

    def test_csv_rows_as_text(self):
        content = b"ORDERID,AMOUNT\nTX-1,1000\n,2000\n"
        rows = parse_table(content, "statement.csv")
        self.assertEqual(rows, [{"ORDERID": "TX-1", "AMOUNT": "1000"}, {"ORDERID": "", "AMOUNT": "2000"}])

    def test_xlsx_numeric_ids_keep_no_decimal_suffix(self):
        content = xlsx_bytes([" SALES_ORDER_NUMBER ", "AMOUNT"], [123456789, 500.5], ["AB12", 100])
        rows = parse_table(content, "airtel.XLSX")
        self.assertEqual(rows[0]["SALES_ORDER_NUMBER"], "123456789")
        self.assertEqual(rows[1]["SALES_ORDER_NUMBER"], "AB12")

    def test_empty_file(self):
        with self.assertRaises(InvalidInputError):
            parse_table(b"", "statement.csv")

    def test_unsupported_extension(self):
        with self.assertRaises(InvalidInputError):
            parse_table(b"data", "statement.pdf")

    def test_corrupt_workbook(self):
        with self.assertRaises(UpstreamError):
            parse_table(b"not a zip archive", "statement.xlsx")


class TestExtractTransactionIds(unittest.TestCase):

    def test_column_depends_on_payment_method(self):
        self.assertEqual(upload_column_for("TIGO-PESA"), "ORDERID")
        self.assertEqual(upload_column_for("AIRTEL-MONEY"), "SALES_ORDER_NUMBER")

    def test_unmapped_method(self):
        with self.assertRaises(InvalidInputError):
            upload_column_for("SELCOM")

    def test_header_match_ignores_case(self):
        rows = [{"OrderId": "A"}, {"OrderId": ""}, {"OrderId": "B"}]
        self.assertEqual(extract_transaction_ids(rows, "TIGO-PESA"), ["A", "B"])

    def test_missing_column(self):
        with self.assertRaises(InvalidInputError) as ctx:
            extract_transaction_ids([{"REFERENCE": "A"}], "TIGO-PESA")
        self.assertIn("ORDERID", str(ctx.exception))

    def test_no_rows_or_no_values(self):
        with self.assertRaises(InvalidInputError):
            extract_transaction_ids([], "TIGO-PESA")
        with self.assertRaises(InvalidInputError):
            extract_transaction_ids([{"ORDERID": ""}], "TIGO-PESA")


class TestSerialize(unittest.TestCase):

    def test_one_sheet_per_partition(self):
        content = serialize_sheets({
            "Unsuccessful": [{"TRANSACTION_ID": "A", "MSISDN": "255700000001", "STATUS": "NOT SUCCESSFUL", "AMOUNT": 10}],
            "Not Found": [],
        })
        wb = load_workbook(io.BytesIO(content))
        self.assertEqual(wb.sheetnames, ["Unsuccessful", "Not Found"])
        ws = wb["Unsuccessful"]
        self.assertEqual([c.value for c in ws[1]], ["TRANSACTION_ID", "MSISDN", "STATUS", "AMOUNT"])
        self.assertEqual(ws["A2"].value, "A")


if __name__ == "__main__":
    unittest.main()
