import unittest
from unittest.mock import patch

from payless.config import get_settings
from payless.utils.validators import (
    format_token,
    is_all_zeros,
    is_valid_token,
    validate_phone_number,
)


class TestIsValidToken(unittest.TestCase):

    def test_twenty_digits(self):
        self.assertTrue(is_valid_token("12345678901234567890"))

    def test_internal_and_padding_whitespace_ignored(self):
        self.assertTrue(is_valid_token("1234 5678 9012 3456 7890"))
        self.assertTrue(is_valid_token("  1234\t5678 9012\n3456 7890  "))

    def test_wrong_digit_count(self):
        self.assertFalse(is_valid_token("123"))
        self.assertFalse(is_valid_token("1234567890123456789"))
        self.assertFalse(is_valid_token("123456789012345678901"))

    def test_non_digits_rejected(self):
        self.assertFalse(is_valid_token("1234567890123456789A"))
        self.assertFalse(is_valid_token("1234-5678-9012-3456-7890"))

    def test_empty_and_none(self):
        self.assertFalse(is_valid_token(None))
        self.assertFalse(is_valid_token(""))
        self.assertFalse(is_valid_token("   "))

    def test_non_string_is_not_a_token(self):
        self.assertFalse(is_valid_token(12345678901234567890))

    def test_all_zero_token_accepted_by_default(self):
        self.assertTrue(is_valid_token("0" * 20))

    def test_all_zero_token_rejected_when_toggled(self):
        self.assertFalse(is_valid_token("0000 0000 0000 0000 0000", reject_all_zeros=True))
        self.assertTrue(is_valid_token("12345678901234567890", reject_all_zeros=True))

    def test_all_zero_toggle_read_from_settings(self):
        with patch.object(get_settings(), "REJECT_ALL_ZERO_TOKENS", True):
            self.assertFalse(is_valid_token("0" * 20))


class TestTokenHelpers(unittest.TestCase):

    def test_is_all_zeros(self):
        self.assertTrue(is_all_zeros("0000 0000"))
        self.assertTrue(is_all_zeros(""))
        self.assertFalse(is_all_zeros("0001"))

    def test_format_token_groups_by_four(self):
        self.assertEqual(format_token("60036831477180125054"), "6003 6831 4771 8012 5054")

    def test_format_token_leaves_invalid_values(self):
        self.assertEqual(format_token(" ABC "), "ABC")
        self.assertEqual(format_token(None), "")


class TestValidatePhoneNumber(unittest.TestCase):

    def test_accepted_shapes(self):
        self.assertTrue(validate_phone_number("+255712345678"))
        self.assertTrue(validate_phone_number("255712345678"))
        self.assertTrue(validate_phone_number("0712345678"))
        self.assertTrue(validate_phone_number("0712 345 678"))

    def test_rejected_shapes(self):
        self.assertFalse(validate_phone_number(""))
        self.assertFalse(validate_phone_number(None))
        self.assertFalse(validate_phone_number("712345678"))
        self.assertFalse(validate_phone_number("+254712345678"))
        self.assertFalse(validate_phone_number("07123456789"))
        self.assertFalse(validate_phone_number("07123x5678"))


if __name__ == "__main__":
    unittest.main()
