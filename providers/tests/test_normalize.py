from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from providers.normalize import PRICE_MAX, first_positive_price, to_decimal, to_int


class ToDecimalTests(SimpleTestCase):
    def test_comma_and_rounding(self):
        self.assertEqual(to_decimal("12,5"), Decimal("12.50"))
        self.assertEqual(to_decimal(" 0.125 "), Decimal("0.13"))
        self.assertEqual(to_decimal(7), Decimal("7.00"))

    def test_junk_is_none(self):
        for value in (None, True, "", "  ", "abc", "NaN", "null", "inf", "-Infinity", "1,2,3"):
            self.assertIsNone(to_decimal(value), value)

    def test_exponent_too_large_to_quantize(self):
        self.assertIsNone(to_decimal("1e30"))
        self.assertIsNone(to_decimal("-1E+40"))

    def test_amounts_must_fit_a_price_column(self):
        self.assertEqual(to_decimal("9999999999.99"), PRICE_MAX)
        self.assertIsNone(to_decimal("10000000000"))
        self.assertIsNone(to_decimal("12345678901"))
        self.assertIsNone(to_decimal("-10000000000"))
        # rounds up past the limit
        self.assertIsNone(to_decimal("9999999999.995"))


class FirstPositivePriceTests(SimpleTestCase):
    def test_skips_zero_negative_and_junk(self):
        self.assertEqual(
            first_positive_price(None, "0", "-3", "1e30", "x", "4,20", "5"), Decimal("4.20")
        )

    def test_nothing_usable(self):
        self.assertIsNone(first_positive_price("0", "", None))


class ToIntTests(SimpleTestCase):
    def test_values(self):
        self.assertEqual(to_int("7"), 7)
        self.assertEqual(to_int("3,9"), 3)
        self.assertEqual(to_int("x", default=-1), -1)
        self.assertEqual(to_int(None), 0)
