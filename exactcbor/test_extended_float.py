"""
Unit tests for ExtendedFloat and the ieee helpers
"""

import math
import struct
import unittest

from exactcbor import ExtendedDecimal, ExtendedFloat, PrecisionContext, Rounding, TrapError
from exactcbor import ieee


F = PrecisionContext


class ExtendedFloatTests(unittest.TestCase):

    def assertSame(self, b1, b2):
        self.assertTrue(b1.equals(b2), "{} is not the same as {}".format(repr(b1), repr(b2)))


class ExtendedFloatBasicTests(ExtendedFloatTests):

    def test_from_double(self):
        b = ExtendedFloat.from_double(0.375)
        self.assertEqual(3, b.mantissa)
        self.assertEqual(-3, b.exponent)
        b = ExtendedFloat.from_double(-6.0)
        self.assertEqual(-3, b.mantissa)
        self.assertEqual(1, b.exponent)
        self.assertSame(ExtendedFloat(1, -1074), ExtendedFloat.from_double(5e-324))
        self.assertTrue(ExtendedFloat.from_double(-0.0).is_negative())
        self.assertTrue(ExtendedFloat.from_double(math.inf).is_positive_infinity())
        self.assertTrue(ExtendedFloat.from_double(math.nan).is_quiet_nan())

    def test_constructor(self):
        self.assertSame(ExtendedFloat.from_double(0.375), ExtendedFloat(0.375))
        self.assertSame(ExtendedFloat(3, -3), ExtendedFloat.create(3, -3))
        self.assertEqual(ExtendedFloat(3, -3), ExtendedFloat(ExtendedDecimal('0.375')))

    def test_double_round_trip(self):
        for x in (0.1, -1e300, 5e-324, 1.7976931348623157e308, 2.2250738585072014e-308, -0.0, math.inf, -math.inf):
            self.assertEqual(struct.pack('>d', x), struct.pack('>d', ExtendedFloat.from_double(x).to_double()))

    def test_nan_payload_round_trip(self):
        for bits in (0x7FF8000000000000, 0xFFF8000000000001, 0x7FF0000000000001, 0x7FF4000000000000):
            x = ieee.DOUBLE.from_bits(bits)
            b = ExtendedFloat.from_double(x)
            self.assertTrue(b.is_nan())
            self.assertEqual(bits, ieee.DOUBLE.to_bits(b.to_double()))

    def test_signaling_nan(self):
        b = ExtendedFloat.from_double(ieee.DOUBLE.from_bits(0x7FF0000000000001))
        self.assertTrue(b.is_signaling_nan())
        self.assertEqual(1, b.unsigned_mantissa)

    def test_from_single(self):
        b = ExtendedFloat.from_single(0.1)
        self.assertEqual(13421773, b.mantissa)
        self.assertEqual(-27, b.exponent)
        self.assertEqual(0.10000000149011612, b.to_single())
        self.assertEqual(0.10000000149011612, b.to_double())

    def test_to_double_rounds(self):
        self.assertEqual(1.0, ExtendedFloat((1 << 53) + 1, -53).to_double())
        self.assertEqual(1.0 + 2 ** -51, ExtendedFloat((1 << 53) + 3, -53).to_double())
        self.assertEqual(math.inf, ExtendedFloat(1, 1024).to_double())
        self.assertEqual(-math.inf, ExtendedFloat(-1, 5000).to_double())
        self.assertEqual(5e-324, ExtendedFloat(3, -1076).to_double())
        self.assertEqual(0.0, ExtendedFloat(1, -1076).to_double())

    def test_to_single_rounds(self):
        self.assertEqual(1.0, ExtendedFloat((1 << 24) + 1, -24).to_single())
        self.assertEqual(math.inf, ExtendedFloat(1, 128).to_single())
        self.assertEqual(2 ** -149, ExtendedFloat(1, -149).to_single())

    def test_strings(self):
        self.assertEqual('0.375', ExtendedFloat(3, -3).to_string())
        self.assertEqual('120', ExtendedFloat(15, 3).to_string())
        self.assertEqual('120', ExtendedFloat(15, 3).to_plain_string())
        self.assertEqual('120', ExtendedFloat(15, 3).to_engineering_string())
        self.assertEqual("ExtendedFloat('0.375')", repr(ExtendedFloat(3, -3)))

    def test_from_string(self):
        self.assertSame(ExtendedFloat(3, -3), ExtendedFloat.from_string('0.375'))
        self.assertEqual(0.1, ExtendedFloat.from_string('0.1').to_double())
        self.assertEqual(0.1, ExtendedFloat.from_string('0.1', F.BINARY64).to_double())


class ExtendedFloatConversionTests(ExtendedFloatTests):

    def test_exact_from_decimal(self):
        self.assertSame(ExtendedFloat(3, -3), ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.375')))
        self.assertSame(ExtendedFloat(125, 3), ExtendedFloat.from_extended_decimal(ExtendedDecimal('1E+3')))
        self.assertTrue(ExtendedFloat.from_extended_decimal(ExtendedDecimal('-0')).is_negative())

    def test_inexact_default(self):
        b = ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.1'))
        self.assertEqual(ExtendedFloat.from_double(0.1), b)

    def test_unlimited_context_is_exact_or_invalid(self):
        self.assertSame(ExtendedFloat(3, -3), ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.375'), F.UNLIMITED))
        with self.assertRaises(TrapError) as cm:
            ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.1'), F.UNLIMITED)
        self.assertEqual(F.FLAG_INVALID, cm.exception.error)

    def test_binary32_context(self):
        b = ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.1'), F.BINARY32)
        self.assertEqual(0.10000000149011612, b.to_double())

    def test_directed_rounding(self):
        up = ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.1'), F.BINARY64.with_rounding(Rounding.UP))
        down = ExtendedFloat.from_extended_decimal(ExtendedDecimal('0.1'), F.BINARY64.with_rounding(Rounding.DOWN))
        self.assertEqual(0.1, up.to_double())
        self.assertEqual(math.nextafter(0.1, 0), down.to_double())
        self.assertLess(down, ExtendedDecimal('0.1'))
        self.assertGreater(up, ExtendedDecimal('0.1'))

    def test_extreme_exponents(self):
        ctx = F.BINARY64.with_blank_flags()
        self.assertTrue(ExtendedFloat.from_extended_decimal(ExtendedDecimal('1E+999999999'), ctx).is_positive_infinity())
        self.assertTrue(ctx.flags & F.FLAG_OVERFLOW)
        ctx = F.BINARY64.with_blank_flags()
        tiny = ExtendedFloat.from_extended_decimal(ExtendedDecimal('-1E-999999999'), ctx)
        self.assertTrue(tiny.is_zero())
        self.assertTrue(tiny.is_negative())
        self.assertTrue(ctx.flags & F.FLAG_UNDERFLOW)

    def test_to_extended_decimal_exact(self):
        self.assertEqual('0.1000000000000000055511151231257827021181583404541015625',
                         ExtendedFloat.from_double(0.1).to_extended_decimal().to_string())
        self.assertTrue(ExtendedFloat.NEGATIVE_INFINITY.to_extended_decimal().is_negative_infinity())


class ExtendedFloatArithmeticTests(ExtendedFloatTests):

    def test_add(self):
        self.assertSame(ExtendedFloat(7, -2), ExtendedFloat(3, -2).add(ExtendedFloat(1, 0)))
        self.assertEqual(ExtendedFloat.from_double(0.1 + 0.2),
                         ExtendedFloat.from_double(0.1).add(ExtendedFloat.from_double(0.2), F.BINARY64))

    def test_multiply_and_divide(self):
        self.assertEqual(ExtendedFloat(3, -4), ExtendedFloat(3, -2).divide(4))
        self.assertEqual(ExtendedFloat.from_double(1 / 3), ExtendedFloat(1).divide(3, F.BINARY64))
        with self.assertRaises(TrapError):
            ExtendedFloat(1).divide(3)
        self.assertEqual(ExtendedFloat(9, -4), ExtendedFloat(3, -2).multiply(ExtendedFloat(3, -2)))

    def test_square_root(self):
        self.assertEqual(math.sqrt(2), ExtendedFloat(2).square_root(F.BINARY64).to_double())
        self.assertEqual(ExtendedFloat(3), ExtendedFloat(9).square_root(F.BINARY64))

    def test_power(self):
        self.assertEqual(ExtendedFloat(1, -10), ExtendedFloat(2).power(-10))
        self.assertEqual(ExtendedFloat(27, -6), ExtendedFloat(3, -2).power(3))

    def test_transcendentals_round_like_doubles(self):
        self.assertEqual(math.pi, ExtendedFloat.pi(F.BINARY64).to_double())
        self.assertEqual(math.sqrt(2), ExtendedFloat(2).power(ExtendedFloat(1, -1), F.BINARY64).to_double())
        self.assertEqual(ExtendedFloat(3), ExtendedFloat(1000).log10(F.BINARY64))
        self.assertEqual(ExtendedFloat(27), ExtendedFloat(9).power(ExtendedFloat(3, -1), F.BINARY64))
        self.assertEqual(math.log(2), ExtendedFloat(2).log(F.BINARY64).to_double())

    def test_precision_is_bits(self):
        self.assertSame(ExtendedFloat(3, 1), ExtendedFloat(5).plus(F(2, Rounding.UP)))
        self.assertSame(ExtendedFloat(2, 1), ExtendedFloat(5).plus(F(2, Rounding.HALF_EVEN)))
        self.assertSame(ExtendedFloat(2, 1), ExtendedFloat(5).plus(F(2, Rounding.DOWN)))

    def test_operators(self):
        a = ExtendedFloat(3, -1)
        self.assertEqual(ExtendedFloat(3), a + a)
        self.assertEqual(2.5, a + 1)
        self.assertEqual(ExtendedFloat(9, -2), a * a)
        self.assertEqual(ExtendedFloat(-3, -1), -a)

    def test_mixed_radix_operators(self):
        total = ExtendedFloat(1, -1) + ExtendedDecimal('0.1')
        self.assertIsInstance(total, ExtendedDecimal)
        self.assertEqual(ExtendedDecimal('0.6'), total)

    def test_hash_matches_float(self):
        self.assertEqual(hash(0.375), hash(ExtendedFloat(3, -3)))
        self.assertEqual(hash(ExtendedDecimal('0.375')), hash(ExtendedFloat(3, -3)))


class IeeeTests(unittest.TestCase):

    def test_half(self):
        self.assertEqual(0x3C00, ieee.HALF.to_bits(1.0))
        self.assertEqual(65504.0, ieee.HALF.from_bits(0x7BFF))
        self.assertEqual(2 ** -24, ieee.HALF.from_bits(0x0001))
        self.assertTrue(ieee.fits_half(0.5))
        self.assertFalse(ieee.fits_half(0.1))
        self.assertFalse(ieee.fits_half(1e10))

    def test_fits_single(self):
        self.assertTrue(ieee.fits_single(0.5))
        self.assertFalse(ieee.fits_single(0.1))
        self.assertTrue(ieee.fits_single(math.nan))
        self.assertTrue(ieee.fits_single(math.inf))
        self.assertFalse(ieee.fits_single(1e300))

    def test_decompose(self):
        self.assertEqual(ieee.Decomposition(False, ieee.INFINITY, 0, 0), ieee.decompose_double(math.inf))
        self.assertEqual(ieee.Decomposition(True, None, 0, 0), ieee.decompose_double(-0.0))
        self.assertEqual(ieee.Decomposition(False, ieee.SIGNALING_NAN, 1, 0), ieee.DOUBLE.decompose_bits(0x7FF0000000000001))
        self.assertEqual(ieee.Decomposition(False, None, 1, -149), ieee.SINGLE.decompose_bits(1))

    def test_compose_nan(self):
        self.assertEqual(0xFFF8000000000005, ieee.DOUBLE.compose_nan(True, 5, False))
        self.assertEqual(0x7FC00000, ieee.SINGLE.compose_nan(False, 0, False))
        self.assertEqual(0x7E00, ieee.HALF.compose_nan(False, 0, False))

    def test_shortest_single_repr(self):
        self.assertEqual('0.1', ieee.shortest_single_repr(ieee.round_to_single(0.1)))
        self.assertEqual('1.0', ieee.shortest_single_repr(1.0))
        self.assertEqual('-inf', ieee.shortest_single_repr(-math.inf))


if __name__ == '__main__':
    import unittest
    unittest.main()
