"""
Unit tests for ExtendedRational
"""

import fractions
import math
import pickle
import unittest

from exactcbor import ExtendedDecimal, ExtendedFloat, ExtendedRational, TrapError
from exactcbor.errors import ArithmeticRangeError
from exactcbor.rational import only_factors


R = ExtendedRational


class ExtendedRationalTests(unittest.TestCase):

    def test_construct(self):
        r = R(1, -3)
        self.assertEqual(-1, r.numerator)
        self.assertEqual(1, r.unsigned_numerator)
        self.assertEqual(3, r.denominator)
        self.assertTrue(r.is_negative())
        self.assertEqual(-1, r.sign)
        self.assertEqual(0, R(0, -5).sign)
        self.assertEqual(R.ZERO, R())

    def test_not_reduced(self):
        r = R(2, 4)
        self.assertEqual('2/4', str(r))
        self.assertEqual(R(1, 2), r)
        self.assertFalse(R(1, 2).equals(r))
        self.assertTrue(R(2, 4).equals(r))
        self.assertEqual(hash(R(1, 2)), hash(r))
        self.assertEqual(hash(0.5), hash(r))

    def test_construct_errors(self):
        with self.assertRaises(R.ConstructorValueError):
            R(1, 0)
        with self.assertRaises(R.ConstructorTypeError):
            R(1.5)
        with self.assertRaises(TypeError):
            R(None)

    def test_str_repr(self):
        self.assertEqual('-1/3', str(R(-1, 3)))
        self.assertEqual('ExtendedRational(-1, 3)', repr(R(-1, 3)))
        self.assertEqual('-Infinity', str(R.NEGATIVE_INFINITY))
        self.assertEqual('ExtendedRational.NAN', repr(R.NAN))
        self.assertEqual(2 + 5001, len(str(R(1, 10 ** 5000))))

    def test_from_python(self):
        self.assertEqual(R(3, 4), R.from_fraction(fractions.Fraction(6, 8)))
        self.assertEqual(R(1, 10), R.from_fraction(fractions.Fraction('0.1')))
        self.assertEqual(R(3602879701896397, 36028797018963968), R.from_double(0.1))
        self.assertTrue(R.from_double(-0.0).is_negative())
        self.assertTrue(R.from_double(math.inf).is_positive_infinity())
        self.assertTrue(R.from_double(math.nan).is_quiet_nan())
        self.assertEqual(R(13421773, 2 ** 27), R.from_single(0.1))
        self.assertEqual(R(7), R.from_int(7))

    def test_from_extended(self):
        self.assertEqual(R(5, 4), R.from_extended_decimal(ExtendedDecimal('1.25')))
        self.assertEqual(R(1500), R.from_extended_decimal(ExtendedDecimal('1.5E+3')))
        self.assertEqual(R(3, 8), R.from_extended_float(ExtendedFloat(3, -3)))
        self.assertTrue(R.from_extended_decimal(ExtendedDecimal('-sNaN')).is_signaling_nan())

    def test_compare(self):
        self.assertEqual(-1, R(1, 3).compare_to(R(1, 2)))
        self.assertEqual(1, R(-1, 3).compare_to(R(-1, 2)))
        self.assertEqual(0, R(0).compare_to(R.NEGATIVE_ZERO))
        self.assertEqual(-1, R(1, 3).compare_to_decimal(ExtendedDecimal('0.3334')))
        self.assertEqual(1, R(1, 3).compare_to_decimal(ExtendedDecimal('0.3333')))
        self.assertEqual(0, R(3, 8).compare_to_binary(ExtendedFloat(3, -3)))
        self.assertEqual(1, R.NAN.compare_to(R.POSITIVE_INFINITY))
        self.assertEqual(0, R.NAN.compare_to(R.NAN))
        self.assertLess(R(1, 3), 0.34)
        self.assertGreater(R(1, 3), fractions.Fraction(1, 4))
        self.assertEqual(R(1, 2), ExtendedDecimal('0.5'))

    def test_arithmetic(self):
        self.assertEqual(R(5, 6), R(1, 2).add(R(1, 3)))
        self.assertEqual(R(1, 6), R(1, 2).subtract(R(1, 3)))
        self.assertEqual(R(1, 6), R(1, 2).multiply(R(1, 3)))
        self.assertEqual(R(3, 2), R(1, 2).divide(R(1, 3)))
        self.assertEqual(R(1, 6), R(1, 2).remainder(R(1, 3)))
        self.assertEqual(R(-1, 6), R(-1, 2).remainder(R(1, 3)))
        self.assertEqual(R(1, 2), R(1, 3).add(ExtendedDecimal('0.5')).subtract(R(1, 3)))
        self.assertEqual(R(7, 2), R(1, 2).add(3))

    def test_special_arithmetic(self):
        self.assertTrue(R(1).divide(0).is_positive_infinity())
        self.assertTrue(R(-1).divide(0).is_negative_infinity())
        self.assertTrue(R(0).divide(0).is_nan())
        self.assertTrue(R.POSITIVE_INFINITY.add(R.NEGATIVE_INFINITY).is_nan())
        self.assertTrue(R.POSITIVE_INFINITY.multiply(0).is_nan())
        self.assertTrue(R(1).remainder(0).is_nan())
        self.assertEqual(R(1, 2), R(1, 2).remainder(R.POSITIVE_INFINITY))
        self.assertTrue(R.NAN.add(1).is_nan())
        with self.assertRaises(TrapError):
            R.SIGNALING_NAN.add(1)

    def test_negative_zero(self):
        self.assertTrue(R.NEGATIVE_ZERO.add(R.NEGATIVE_ZERO).is_negative())
        self.assertFalse(R.NEGATIVE_ZERO.add(R.ZERO).is_negative())
        self.assertTrue(R(0).negate().is_negative())

    def test_operators(self):
        third = R(1, 3)
        self.assertEqual(R(2, 3), third + third)
        self.assertEqual(R(4, 3), 1 + third)
        self.assertEqual(R(2, 3), 1 - third)
        self.assertEqual(R(1, 9), third * third)
        self.assertEqual(R(3), 1 / third)
        self.assertEqual(R(-1, 3), -third)
        self.assertEqual(third, abs(-third))
        self.assertEqual(R(1, 3), R(4, 3) % 1)

    def test_to_extended_decimal(self):
        self.assertEqual('0.25', R(1, 4).to_extended_decimal().to_string())
        self.assertEqual('0.3333333333333333333333333333333333', R(1, 3).to_extended_decimal().to_string())
        self.assertEqual('0.5', R(3, 6).to_extended_decimal().to_string())
        self.assertTrue(R.NEGATIVE_INFINITY.to_extended_decimal().is_negative_infinity())

    def test_to_extended_float(self):
        self.assertTrue(ExtendedFloat(3, -3).equals(R(3, 8).to_extended_float()))
        self.assertEqual(ExtendedFloat.from_double(1 / 3), R(1, 3).to_extended_float())

    def test_to_python(self):
        self.assertEqual(1 / 3, R(1, 3).to_double())
        self.assertEqual(1 / 3, float(R(1, 3)))
        self.assertEqual(fractions.Fraction(1, 2), R(2, 4).to_fraction())
        self.assertEqual(-2, R(-7, 3).to_big_integer())
        self.assertEqual(-2, int(R(-7, 3)))
        self.assertEqual(3, R(6, 2).to_big_integer_exact())
        with self.assertRaises(ArithmeticRangeError):
            R(7, 2).to_big_integer_exact()
        with self.assertRaises(ArithmeticRangeError):
            R.NAN.to_fraction()

    def test_pickle(self):
        r = R(-2, 4)
        self.assertTrue(r.equals(pickle.loads(pickle.dumps(r))))

    def test_only_factors(self):
        self.assertTrue(only_factors(1024, (2,)))
        self.assertTrue(only_factors(1000, (2, 5)))
        self.assertFalse(only_factors(30, (2, 5)))


if __name__ == '__main__':
    import unittest
    unittest.main()
