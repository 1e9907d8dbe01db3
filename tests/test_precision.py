"""
Tests for veil_core.precision — token unit conversions.
"""

import unittest

from veil_core.errors import InvalidAmountError
from veil_core.precision import (
    BALANCE_SCALE,
    TOKEN_DECIMALS,
    WEI_PER_TOKEN,
    format_amount,
    from_balance_units,
    parse_amount,
    to_balance_units,
)


class TestConstants(unittest.TestCase):

    def test_decimals(self):
        self.assertEqual(TOKEN_DECIMALS, 18)
        self.assertEqual(WEI_PER_TOKEN, 10**18)

    def test_scale(self):
        self.assertEqual(BALANCE_SCALE, 10**9)


class TestBalanceUnits(unittest.TestCase):

    def test_to_units(self):
        self.assertEqual(to_balance_units(5 * BALANCE_SCALE), 5)

    def test_one_token(self):
        self.assertEqual(to_balance_units(WEI_PER_TOKEN), 10**9)

    def test_dust_rejected(self):
        with self.assertRaises(InvalidAmountError):
            to_balance_units(BALANCE_SCALE + 1)

    def test_negative_rejected(self):
        with self.assertRaises(InvalidAmountError):
            to_balance_units(-BALANCE_SCALE)
        with self.assertRaises(InvalidAmountError):
            from_balance_units(-1)

    def test_roundtrip(self):
        for units in (0, 1, 4294967296):
            self.assertEqual(to_balance_units(from_balance_units(units)), units)

    def test_custom_scale(self):
        self.assertEqual(to_balance_units(300, scale=100), 3)
        self.assertEqual(from_balance_units(3, scale=100), 300)


class TestParseAmount(unittest.TestCase):

    def test_whole(self):
        self.assertEqual(parse_amount("2"), 2 * WEI_PER_TOKEN)

    def test_fraction(self):
        self.assertEqual(parse_amount("1.5"), 1_500_000_000_000_000_000)

    def test_smallest_unit(self):
        self.assertEqual(parse_amount("0.000000000000000001"), 1)

    def test_whitespace(self):
        self.assertEqual(parse_amount("  0.25 "), WEI_PER_TOKEN // 4)

    def test_too_many_decimals(self):
        with self.assertRaises(InvalidAmountError):
            parse_amount("0.0000000000000000001")

    def test_negative(self):
        with self.assertRaises(InvalidAmountError):
            parse_amount("-1")

    def test_garbage(self):
        with self.assertRaises(InvalidAmountError):
            parse_amount("abc")

    def test_non_finite(self):
        for text in ("inf", "NaN"):
            with self.assertRaises(InvalidAmountError):
                parse_amount(text)


class TestFormatAmount(unittest.TestCase):

    def test_format(self):
        self.assertEqual(format_amount(1_500_000_000_000_000_000), "1.5000 STRK")

    def test_truncates(self):
        self.assertEqual(format_amount(123_456_789_000_000_000), "0.1234 STRK")

    def test_currency_and_places(self):
        self.assertEqual(format_amount(WEI_PER_TOKEN, currency="ETH", places=2), "1.00 ETH")


if __name__ == "__main__":
    unittest.main()
