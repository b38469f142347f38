import unittest
from unittest.mock import patch

from payless.services.payment_query_service import (
    PaymentFilter,
    PaymentPage,
    PaymentQueryService,
    normalize_paging,
)
from payless.services.record_store import RecordStore

from tests.support import VALID_LUKU, add_payment, add_token, make_sessionmaker


class TestPagination(unittest.TestCase):

    def test_page_math(self):
        self.assertEqual(PaymentPage(total_count=25, page=1, page_size=10).total_pages, 3)
        last = PaymentPage(total_count=25, page=3, page_size=10)
        self.assertFalse(last.has_next_page)
        self.assertTrue(last.has_previous_page)

    def test_empty_result_has_zero_pages(self):
        empty = PaymentPage(total_count=0, page=1, page_size=10)
        self.assertEqual(empty.total_pages, 0)
        self.assertFalse(empty.has_next_page)
        self.assertFalse(empty.has_previous_page)

    def test_pagination_payload(self):
        meta = PaymentPage(total_count=11, page=1, page_size=10).pagination()
        self.assertEqual(meta, {
            "currentPage": 1, "totalPages": 2, "totalCount": 11, "limit": 10,
            "hasNextPage": True, "hasPreviousPage": False,
        })

    def test_invalid_paging_falls_back_to_defaults(self):
        self.assertEqual(normalize_paging(None, None), (1, 10))
        self.assertEqual(normalize_paging("abc", "-5"), (1, 10))
        self.assertEqual(normalize_paging("0", "0"), (1, 10))
        self.assertEqual(normalize_paging("2", "25"), (2, 25))

    def test_page_size_is_capped(self):
        self.assertEqual(normalize_paging(1, 10_000), (1, 100))


class TestPaymentQueryService(unittest.TestCase):

    def setUp(self):
        self.db = make_sessionmaker()()
        self.service = PaymentQueryService(RecordStore(self.db))

    def tearDown(self):
        self.db.close()

    def test_newest_first(self):
        for i in range(3):
            add_payment(self.db, transaction_id=f"TXN{i}")
        result = self.service.list_payments()
        self.assertEqual([p["transaction_id"] for p in result.items], ["TXN2", "TXN1", "TXN0"])
        self.assertEqual(result.total_count, 3)

    def test_second_page(self):
        for i in range(25):
            add_payment(self.db, transaction_id=f"TXN{i:02d}")
        result = self.service.list_payments(page=3, page_size=10)
        self.assertEqual(len(result.items), 5)
        self.assertEqual(result.items[0]["transaction_id"], "TXN04")
        self.assertEqual(result.total_pages, 3)
        self.assertFalse(result.has_next_page)

    def test_search_matches_reference_msisdn_or_transaction(self):
        add_payment(self.db, transaction_id="AAA111", msisdn="255700000001", customer_reference_id="M-1")
        add_payment(self.db, transaction_id="BBB222", msisdn="255700000002", customer_reference_id="M-2")
        add_payment(self.db, transaction_id="CCC333", msisdn="255799999999", customer_reference_id="X-9")

        self.assertEqual(self.service.list_payments(PaymentFilter(search="BBB")).total_count, 1)
        self.assertEqual(self.service.list_payments(PaymentFilter(search="25570000")).total_count, 2)
        self.assertEqual(self.service.list_payments(PaymentFilter(search="X-9")).total_count, 1)

    def test_search_treats_like_wildcards_literally(self):
        add_payment(self.db, transaction_id="AAA111", msisdn="255700000001", customer_reference_id="M1")
        add_payment(self.db, transaction_id="BBB222", msisdn="255700000002", customer_reference_id="M2")

        self.assertEqual(self.service.list_payments(PaymentFilter(search="%")).total_count, 0)
        self.assertEqual(self.service.list_payments(PaymentFilter(search="_")).total_count, 0)

        add_payment(self.db, transaction_id="CCC_333", customer_reference_id="M3")
        result = self.service.list_payments(PaymentFilter(search="_"))
        self.assertEqual([p["transaction_id"] for p in result.items], ["CCC_333"])

    def test_status_and_method_filters(self):
        add_payment(self.db, transaction_id="A", payment_status="SUCCESFUL", payment_method="M-PESA")
        add_payment(self.db, transaction_id="B", payment_status="NOT SUCCESFUL", payment_method="M-PESA")
        add_payment(self.db, transaction_id="C", payment_status="NOT SUCCESFUL", payment_method="TIGO-PESA")

        result = self.service.list_payments(PaymentFilter(status="NOT SUCCESFUL", payment_method="M-PESA"))
        self.assertEqual([p["transaction_id"] for p in result.items], ["B"])

    def test_date_filters(self):
        add_payment(self.db, transaction_id="A", transaction_date="2024-01-01")
        add_payment(self.db, transaction_id="B", transaction_date="2024-02-01")
        result = self.service.list_payments(PaymentFilter(start_date="2024-01-15", end_date="2024-02-28"))
        self.assertEqual([p["transaction_id"] for p in result.items], ["B"])

    def test_tokens_attached_by_transaction_id(self):
        add_payment(self.db, transaction_id="TXN1")
        add_payment(self.db, transaction_id="TXN2")
        add_token(self.db, txn_id="TXN1", luku=VALID_LUKU, units="8.5kWh")

        items = {p["transaction_id"]: p for p in self.service.list_payments().items}
        self.assertEqual(items["TXN1"]["token"], {"luku": VALID_LUKU, "passcode": None, "units": "8.5kWh"})
        self.assertIsNone(items["TXN2"]["token"])
        self.assertNotIn("reconciliation_status", items["TXN1"])

    def test_blank_transaction_ids_never_joined(self):
        add_payment(self.db, transaction_id="")
        add_payment(self.db, transaction_id=None)
        add_token(self.db, txn_id="", luku=VALID_LUKU)

        for item in self.service.list_payments().items:
            self.assertIsNone(item["token"])

    def test_single_bulk_token_lookup_per_page(self):
        for i in range(10):
            add_payment(self.db, transaction_id=f"TXN{i}")
        with patch.object(self.service.store, "find_tokens", wraps=self.service.store.find_tokens) as find_tokens:
            self.service.list_payments(page_size=10)
        self.assertEqual(find_tokens.call_count, 1)

    def test_classify_option_adds_status(self):
        add_payment(self.db, transaction_id="TXN1", payment_status="NOT SUCCESFUL")
        add_token(self.db, txn_id="TXN1", luku=VALID_LUKU)
        item = self.service.list_payments(include_status=True).items[0]
        self.assertEqual(item["reconciliation_status"], "SUCCESSFUL")

    def test_get_payment(self):
        payment = add_payment(self.db, transaction_id="TXN1", payment_status=None)
        view = self.service.get_payment(payment.id)
        self.assertEqual(view["reconciliation_status"], "PENDING")
        self.assertIsNone(self.service.get_payment(9999))


if __name__ == "__main__":
    unittest.main()
