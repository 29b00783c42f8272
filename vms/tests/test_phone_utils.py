"""
Tests for phone number normalization.
"""

from django.test import TestCase, override_settings

from vms.utils.phone_utils import (
    normalize_phone_number, strip_phone_input, is_lookup_ready,
    is_valid_local_number, format_phone_number_for_display
)


class TestNormalizePhoneNumber(TestCase):

    def test_ten_digit_number_is_unchanged(self):
        self.assertEqual(normalize_phone_number("0808123456"), "0808123456")

    def test_nine_digit_number_gets_leading_zero(self):
        self.assertEqual(normalize_phone_number("808123456"), "0808123456")

    def test_formatting_characters_are_stripped(self):
        self.assertEqual(normalize_phone_number("0808 123 456"), "0808123456")
        self.assertEqual(normalize_phone_number("(0808) 123-456"), "0808123456")
        self.assertEqual(normalize_phone_number("808.123.456"), "0808123456")

    def test_extra_digits_are_truncated(self):
        self.assertEqual(normalize_phone_number("080812345699"), "0808123456")
        self.assertEqual(len(normalize_phone_number("1234567890123")), 10)

    def test_short_input_is_not_padded(self):
        self.assertEqual(normalize_phone_number("80812"), "80812")

    def test_ten_digits_without_zero_are_kept(self):
        self.assertEqual(normalize_phone_number("8081234567"), "8081234567")

    def test_empty_input(self):
        self.assertEqual(normalize_phone_number(""), "")
        self.assertEqual(normalize_phone_number(None), "")
        self.assertEqual(normalize_phone_number("abc"), "")

    def test_idempotent(self):
        for raw in ["0808123456", "808123456", "80812", "+243 808 123 456", "12-34", "9999999999999"]:
            once = normalize_phone_number(raw)
            self.assertEqual(normalize_phone_number(once), once, raw)

    def test_leading_zero_can_be_disabled(self):
        self.assertEqual(normalize_phone_number("808123456", leading_zero=False), "808123456")

    @override_settings(VMS_PHONE_LEADING_ZERO=False)
    def test_leading_zero_follows_setting(self):
        self.assertEqual(normalize_phone_number("808123456"), "808123456")


class TestPhoneHelpers(TestCase):

    def test_strip_phone_input(self):
        self.assertEqual(strip_phone_input("+243 (808) 12"), "24380812")

    def test_is_lookup_ready(self):
        self.assertFalse(is_lookup_ready("08081234"))
        self.assertTrue(is_lookup_ready("808123456"))
        self.assertTrue(is_lookup_ready("0808123456"))

    def test_is_valid_local_number(self):
        self.assertTrue(is_valid_local_number("0808123456"))
        self.assertTrue(is_valid_local_number("808 123 456"))
        self.assertFalse(is_valid_local_number("8081234567"))
        self.assertFalse(is_valid_local_number("0808123"))
        self.assertTrue(is_valid_local_number("8081234567", leading_zero=False))

    def test_format_for_display(self):
        self.assertEqual(format_phone_number_for_display("0808123456"), "0808 123 456")
        self.assertEqual(format_phone_number_for_display("080812"), "0808 12")
        self.assertEqual(format_phone_number_for_display("808123456"), "808 123 456")
        self.assertEqual(format_phone_number_for_display(""), "")
