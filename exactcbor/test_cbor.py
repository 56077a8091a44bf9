"""
Unit tests for CBORObject:  construction, accessors, containers, order, arithmetic, diagnostic text
"""

import decimal
import fractions
import math
import unittest

from exactcbor import (
    CBORError,
    CBORObject,
    CBORType,
    ExtendedDecimal,
    ExtendedFloat,
    ExtendedRational,
    InvalidOperationError,
)
from exactcbor import cbor
from exactcbor.errors import ArithmeticRangeError


def c(x):
    return CBORObject.from_object(x)


class CBORObjectTests(unittest.TestCase):

    def assertKind(self, kind, item):
        self.assertEqual(kind, item.kind, "{!r} is {}, not {}".format(item, item.kind, kind))

    def assertOrdered(self, *items):
        """Each item is strictly less than the next, in the canonical order."""
        for lesser, greater in zip(items, items[1:]):
            self.assertEqual(-1, lesser.compare_to(greater), "{} < {}".format(lesser, greater))
            self.assertEqual(1, greater.compare_to(lesser), "{} > {}".format(greater, lesser))
            self.assertLess(lesser, greater)


class CBORConstructionTests(CBORObjectTests):

    def test_from_python(self):
        self.assertIs(CBORObject.NULL, c(None))
        self.assertIs(CBORObject.TRUE, c(True))
        self.assertIs(CBORObject.FALSE, c(False))
        self.assertKind(cbor.INTEGER, c(-(1 << 63)))
        self.assertKind(cbor.BIG_INTEGER, c(1 << 63))
        self.assertKind(cbor.DOUBLE, c(1.5))
        self.assertKind(cbor.TEXT, c('x'))
        self.assertKind(cbor.BYTES, c(bytearray(b'\x01')))
        self.assertKind(cbor.ARRAY, c((1, 2)))
        self.assertKind(cbor.MAP, c({'a': 1}))
        self.assertKind(cbor.DECIMAL, c(decimal.Decimal('1.10')))
        self.assertKind(cbor.RATIONAL, c(fractions.Fraction(1, 3)))
        self.assertKind(cbor.BINARY, c(ExtendedFloat(3, -1)))
        item = c(ExtendedDecimal('1'))
        self.assertIs(item, c(item))

    def test_from_python_errors(self):
        with self.assertRaises(CBORObject.ConstructorTypeError):
            c({1, 2})
        with self.assertRaises(CBORObject.ConstructorTypeError):
            c(object())
        with self.assertRaises(CBORObject.InvalidTextError):
            c('\ud800')

    def test_cbor_type(self):
        self.assertEqual(CBORType.NUMBER, c(ExtendedRational(1, 3)).cbor_type)
        self.assertEqual(CBORType.BOOLEAN, c(True).cbor_type)
        self.assertEqual(CBORType.SIMPLE_VALUE, CBORObject.UNDEFINED.cbor_type)
        self.assertEqual(CBORType.SIMPLE_VALUE, c(None).cbor_type)
        self.assertEqual(CBORType.BYTE_STRING, c(b'').cbor_type)
        self.assertEqual(CBORType.TEXT_STRING, c('').cbor_type)
        self.assertEqual(CBORType.ARRAY, CBORObject.new_array().cbor_type)
        self.assertEqual(CBORType.MAP, CBORObject.new_map().cbor_type)

    def test_simple_values(self):
        self.assertIs(CBORObject.FALSE, CBORObject.from_simple_value(20))
        self.assertIs(CBORObject.UNDEFINED, CBORObject.from_simple_value(23))
        self.assertEqual(32, CBORObject.from_simple_value(32).simple_value)
        self.assertEqual(255, CBORObject.from_simple_value(255).simple_value)
        self.assertEqual(-1, c(0).simple_value)
        for bad in (24, 31, 256, -1):
            with self.assertRaises(CBORObject.SimpleValueRangeError):
                CBORObject.from_simple_value(bad)
        with self.assertRaises(CBORObject.ConstructorTypeError):
            CBORObject.from_simple_value(True)
        with self.assertRaises(TypeError):
            CBORObject.from_simple_value(None)

    def test_from_single(self):
        item = CBORObject.from_single(0.1)
        self.assertKind(cbor.SINGLE, item)
        self.assertEqual(0.10000000149011612, item.as_double())
        self.assertTrue(item.can_fit_in_single())


class CBORTagTests(CBORObjectTests):

    def test_tags_outermost_first(self):
        item = CBORObject.from_object_and_tag(CBORObject.from_object_and_tag('x', 2000), 1000)
        self.assertEqual([1000, 2000], item.get_tags())
        self.assertEqual(1000, item.outermost_tag)
        self.assertEqual(2000, item.innermost_tag)
        self.assertTrue(item.has_tag(2000))
        self.assertFalse(item.has_tag(1))
        self.assertEqual('1000(2000("x"))', str(item))
        self.assertEqual([2000], item.untag_one().get_tags())
        self.assertFalse(item.untag().is_tagged())
        self.assertEqual(-1, c('x').outermost_tag)

    def test_tags_do_not_affect_equality(self):
        self.assertEqual(c('x'), CBORObject.from_object_and_tag('x', 32))
        self.assertEqual(hash(c('x')), hash(CBORObject.from_object_and_tag('x', 32)))

    def test_tag_range(self):
        CBORObject.from_object_and_tag(0, (1 << 64) - 1)
        with self.assertRaises(CBORObject.TagRangeError):
            CBORObject.from_object_and_tag(0, 1 << 64)
        with self.assertRaises(CBORObject.TagRangeError):
            CBORObject.from_object_and_tag(0, -1)
        with self.assertRaises(CBORObject.TagRangeError):
            CBORObject.from_object_and_tag(0, '1')
        with self.assertRaises(TypeError):
            CBORObject.from_object_and_tag(0, None)

    def test_number_tags(self):
        item = CBORObject.from_object_and_tag(b'\x01\x00', 2)
        self.assertKind(cbor.INTEGER, item)
        self.assertEqual(256, item.as_big_integer())
        self.assertFalse(item.is_tagged())
        self.assertEqual(-257, CBORObject.from_object_and_tag(b'\x01\x00', 3).as_big_integer())
        self.assertKind(cbor.BIG_INTEGER, CBORObject.from_object_and_tag(b'\x01' + b'\x00' * 8, 2))
        self.assertEqual(0, CBORObject.from_object_and_tag(b'', 2).as_big_integer())
        decimal_item = CBORObject.from_object_and_tag([-2, 12345], 4)
        self.assertEqual('123.45', str(decimal_item))
        binary_item = CBORObject.from_object_and_tag([-1, 3], 5)
        self.assertEqual(ExtendedFloat(3, -1), binary_item.as_extended_float())
        rational_item = CBORObject.from_object_and_tag([-2, 4], 30)
        self.assertEqual('-2/4', str(rational_item))
        big_exponent = CBORObject.from_object_and_tag([1 << 70, 1], 264)
        self.assertEqual(1 << 70, big_exponent.as_extended_decimal().exponent)

    def test_malformed_number_tags(self):
        for content, tag in (
            ('01', 2),
            ([1, 2], 3),
            ([1], 4),
            ([1, 2, 3], 5),
            ([1.5, 2], 4),
            ([1, 0], 30),
            ([1, -1], 30),
            ([1 << 64, 1], 4),
            ([-(1 << 64) - 1, 1], 5),
        ):
            with self.assertRaises(CBORError, msg="{}({})".format(tag, content)):
                CBORObject.from_object_and_tag(content, tag)

    def test_exponent_limits_of_tag_4(self):
        self.assertEqual(-(1 << 64), CBORObject.from_object_and_tag([-(1 << 64), 1], 4).as_extended_decimal().exponent)


class CBORNumberTests(CBORObjectTests):

    def test_queries(self):
        self.assertTrue(c(1).is_number())
        self.assertFalse(c('1').is_number())
        self.assertTrue(c(math.inf).is_positive_infinity())
        self.assertTrue(c(-math.inf).is_negative_infinity())
        self.assertTrue(c(ExtendedDecimal.NAN).is_nan())
        self.assertFalse(c(ExtendedDecimal.NAN).is_finite())
        self.assertTrue(c(-0.0).is_zero())
        self.assertTrue(c(ExtendedDecimal('2.00')).is_integral())
        self.assertFalse(c(ExtendedRational(1, 2)).is_integral())
        self.assertFalse(c('x').is_nan())

    def test_sign(self):
        self.assertEqual(-1, c(-0.5).sign)
        self.assertEqual(0, c(-0.0).sign)
        self.assertEqual(1, c(ExtendedRational(1, 3)).sign)
        with self.assertRaises(InvalidOperationError):
            c(math.nan).sign
        with self.assertRaises(InvalidOperationError):
            c('x').sign

    def test_fits(self):
        self.assertTrue(c((1 << 31) - 1).can_fit_in_int32())
        self.assertFalse(c(1 << 31).can_fit_in_int32())
        self.assertTrue(c(1 << 31).can_fit_in_int64())
        self.assertFalse(c(1 << 63).can_fit_in_int64())
        self.assertFalse(c(2.5).can_fit_in_int32())
        self.assertTrue(c(2.5).can_truncated_int_fit_in_int32())
        self.assertTrue(c(ExtendedDecimal('2147483647.9')).can_truncated_int_fit_in_int32())
        self.assertFalse(c(ExtendedDecimal('2147483648')).can_truncated_int_fit_in_int32())
        self.assertFalse(c(math.inf).can_truncated_int_fit_in_int64())
        self.assertTrue(c(ExtendedDecimal('0.5')).can_fit_in_double())
        self.assertFalse(c(ExtendedDecimal('0.1')).can_fit_in_double())
        self.assertFalse(c(0.1).can_fit_in_single())
        self.assertTrue(c(math.nan).can_fit_in_single())
        self.assertTrue(c((1 << 53) + 2).can_fit_in_double())
        self.assertFalse(c((1 << 53) + 1).can_fit_in_double())

    def test_as_integers(self):
        self.assertEqual(255, c(255.9).as_byte())
        self.assertEqual(-2, c(ExtendedRational(-7, 3)).as_int16())
        self.assertEqual(-(1 << 63), c(-(1 << 63)).as_int64())
        with self.assertRaises(ArithmeticRangeError):
            c(256).as_byte()
        with self.assertRaises(ArithmeticRangeError):
            c(1 << 31).as_int32()
        with self.assertRaises(ArithmeticRangeError):
            c(2.147483648E9).as_int32()
        self.assertEqual(2147483647, c(2.147483647E9).as_int32())
        with self.assertRaises(ArithmeticRangeError):
            c(math.nan).as_int32()
        with self.assertRaises(ArithmeticRangeError):
            c(-math.inf).as_big_integer()
        self.assertEqual(10 ** 40, c(ExtendedDecimal('1E+40')).as_big_integer())

    def test_as_floats(self):
        self.assertEqual(0.1, c(ExtendedDecimal('0.1')).as_double())
        self.assertEqual(1 / 3, c(ExtendedRational(1, 3)).as_double())
        self.assertEqual(float(1 << 64), c(1 << 64).as_double())
        self.assertEqual(0.10000000149011612, c(0.1).as_single())
        self.assertEqual(math.inf, c(ExtendedDecimal('1E+400')).as_double())

    def test_as_extended(self):
        self.assertEqual('0.1000000000000000055511151231257827021181583404541015625', c(0.1).as_extended_decimal().to_string())
        self.assertEqual('0.3333333333333333333333333333333333', c(ExtendedRational(1, 3)).as_extended_decimal().to_string())
        self.assertTrue(ExtendedFloat(1, -1).equals(c(0.5).as_extended_float()))
        self.assertEqual(ExtendedFloat.from_double(0.1), c(ExtendedDecimal('0.1')).as_extended_float())
        self.assertEqual(ExtendedRational(1, 2), c(0.5).as_extended_rational())
        self.assertEqual(ExtendedRational(5, 4), c(ExtendedDecimal('1.25')).as_extended_rational())
        self.assertEqual(ExtendedRational(7), c(7).as_extended_rational())

    def test_not_a_number(self):
        for method in ('as_double', 'as_big_integer', 'as_extended_decimal', 'as_int32'):
            with self.assertRaises(InvalidOperationError, msg=method):
                getattr(c('7'), method)()


class CBORAccessorTests(CBORObjectTests):

    def test_as_boolean(self):
        self.assertFalse(CBORObject.FALSE.as_boolean())
        self.assertFalse(CBORObject.NULL.as_boolean())
        self.assertFalse(CBORObject.UNDEFINED.as_boolean())
        self.assertTrue(c(0).as_boolean())
        self.assertTrue(c('').as_boolean())
        self.assertTrue(CBORObject.from_simple_value(99).as_boolean())
        self.assertTrue(bool(c(0)))

    def test_strings(self):
        self.assertEqual('abc', c('abc').as_string())
        self.assertEqual(b'abc', c(b'abc').get_byte_string())
        with self.assertRaises(InvalidOperationError):
            c(b'abc').as_string()
        with self.assertRaises(InvalidOperationError):
            c('abc').get_byte_string()

    def test_value(self):
        self.assertEqual('abc', c('abc').value)
        self.assertEqual(ExtendedDecimal('1.5'), c(ExtendedDecimal('1.5')).value)


class CBORContainerTests(CBORObjectTests):

    def test_array(self):
        array = CBORObject.new_array().add(1).add('two').add(CBORObject.NULL)
        self.assertEqual(3, array.count)
        self.assertEqual(3, len(array))
        self.assertEqual(c('two'), array[1])
        self.assertEqual(c('two'), array[c(1)])
        self.assertIs(CBORObject.NULL, array[2])
        array[0] = 5
        self.assertEqual(c(5), array[0])
        self.assertEqual([c(5), c('two'), CBORObject.NULL], list(array))
        self.assertIn('two', array)
        self.assertTrue(array.remove('two'))
        self.assertFalse(array.remove('two'))
        self.assertEqual(2, array.count)
        self.assertIsNone(array.get(99))

    def test_array_errors(self):
        array = c([1])
        with self.assertRaises(TypeError):
            array.add(None)
        with self.assertRaises(InvalidOperationError):
            array.add(1, 2)
        with self.assertRaises(IndexError):
            array[5]

    def test_map(self):
        m = CBORObject.new_map().add('b', 2).add('a', 1)
        self.assertEqual([c('b'), c('a')], m.keys())
        self.assertEqual([c(2), c(1)], m.values())
        self.assertEqual([(c('b'), c(2)), (c('a'), c(1))], m.items())
        self.assertEqual(c(1), m['a'])
        self.assertTrue(m.contains_key('a'))
        self.assertFalse(m.contains_key('z'))
        self.assertIsNone(m.get('z'))
        self.assertEqual(c(0), m.get('z', c(0)))
        m.set('a', 10)
        self.assertEqual(c(10), m['a'])
        m['c'] = [1, 2]
        self.assertEqual(c([1, 2]), m['c'])
        self.assertTrue(m.remove('b'))
        self.assertFalse(m.remove('b'))
        self.assertEqual(2, m.count)

    def test_map_keys_by_value(self):
        m = c({1.0: 'one'})
        self.assertEqual(c('one'), m[1])
        self.assertEqual(c('one'), m[ExtendedDecimal('1.00')])
        self.assertEqual(c('one'), m[ExtendedRational(2, 2)])

    def test_map_errors(self):
        m = c({'a': 1})
        with self.assertRaises(KeyError):
            m.add('a', 2)
        with self.assertRaises(KeyError):
            m['z']
        with self.assertRaises(TypeError):
            m.add('b', None)
        with self.assertRaises(TypeError):
            m[None]
        with self.assertRaises(InvalidOperationError):
            m.add('b')

    def test_not_a_container(self):
        with self.assertRaises(InvalidOperationError):
            c(1).count
        with self.assertRaises(InvalidOperationError):
            c('abc').add('d')
        with self.assertRaises(InvalidOperationError):
            c([1]).keys()


class CBOROrderTests(CBORObjectTests):

    def test_ranks(self):
        self.assertOrdered(
            CBORObject.UNDEFINED,
            CBORObject.NULL,
            CBORObject.FALSE,
            CBORObject.TRUE,
            CBORObject.from_simple_value(0),
            CBORObject.from_simple_value(255),
            c(-math.inf),
            c(-1 << 100),
            c(0),
            c(math.inf),
            c(math.nan),
            c(b''),
            c(''),
            c([]),
            c({}),
        )

    def test_numbers_by_value(self):
        self.assertOrdered(c(ExtendedRational(1, 3)), c(ExtendedDecimal('0.3334')), c(0.5), c(1))
        self.assertEqual(c(1), c(1.0))
        self.assertEqual(c(1), c(ExtendedDecimal('1.000')))
        self.assertEqual(c(math.nan), c(ExtendedDecimal.NAN))
        self.assertEqual(c(0.0), c(-0.0))

    def test_byte_strings_by_length_first(self):
        self.assertOrdered(c(b'\xff'), c(b'\x00\x00'), c(b'\x00\x01'))

    def test_text(self):
        self.assertOrdered(c('A'), c('a'), c('aa'), c('b'), c('\U0001F600'))

    def test_arrays(self):
        self.assertOrdered(c([]), c([1]), c([1, 0]), c([1, 2]), c([2]))

    def test_maps(self):
        self.assertOrdered(c({'z': 1}), c({'a': 1, 'b': 1}), c({'a': 1, 'c': 0}), c({'a': 2, 'c': 0}))
        self.assertEqual(c({'a': 1, 'b': 2}), c({'b': 2, 'a': 1}))
        self.assertEqual(hash(c({'a': 1, 'b': 2})), hash(c({'b': 2.0, 'a': 1})))

    def test_compare_to_python(self):
        self.assertEqual(0, c(2).compare_to(2.0))
        self.assertEqual(1, c(2).compare_to(None))
        self.assertNotEqual(c(2), 2)

    def test_sorted(self):
        items = [c('b'), c(2), CBORObject.NULL, c(b'x'), c(1)]
        self.assertEqual([CBORObject.NULL, c(1), c(2), c(b'x'), c('b')], sorted(items))


class CBORArithmeticTests(CBORObjectTests):

    def test_integers(self):
        self.assertEqual(c(5), CBORObject.addition(2, 3))
        self.assertKind(cbor.BIG_INTEGER, CBORObject.addition(cbor.INT64_MAX, 1))
        self.assertEqual(c(-1), CBORObject.subtract(2, 3))
        self.assertEqual(c(1 << 128), CBORObject.multiply(1 << 64, 1 << 64))
        self.assertEqual(c(-3), CBORObject.divide(-9, 3))
        self.assertKind(cbor.INTEGER, CBORObject.divide(-9, 3))
        self.assertEqual(c(-1), CBORObject.remainder(-7, 3))

    def test_division_is_exact(self):
        third = CBORObject.divide(1, 3)
        self.assertKind(cbor.RATIONAL, third)
        self.assertEqual(c(ExtendedRational(1, 3)), third)
        self.assertEqual(c(0.25), CBORObject.divide(1, 4))
        tenth = CBORObject.divide(ExtendedDecimal('1'), 10)
        self.assertKind(cbor.DECIMAL, tenth)
        self.assertEqual('0.1', str(tenth))
        self.assertKind(cbor.RATIONAL, CBORObject.divide(ExtendedDecimal('1'), 3))

    def test_division_by_zero(self):
        self.assertTrue(CBORObject.divide(1, 0).is_positive_infinity())
        self.assertTrue(CBORObject.divide(-1, 0).is_negative_infinity())
        self.assertTrue(CBORObject.divide(0, 0).is_nan())
        self.assertTrue(CBORObject.divide(ExtendedRational(1, 2), 0).is_positive_infinity())

    def test_mixed_kinds(self):
        total = CBORObject.addition(ExtendedDecimal('1.5'), 1)
        self.assertKind(cbor.DECIMAL, total)
        self.assertEqual('2.5', str(total))
        total = CBORObject.addition(0.1, ExtendedDecimal('0.1'))
        self.assertKind(cbor.DECIMAL, total)
        self.assertEqual('0.2000000000000000055511151231257827021181583404541015625', str(total))
        total = CBORObject.addition(0.5, 0.25)
        self.assertKind(cbor.BINARY, total)
        self.assertEqual(c(0.75), total)
        total = CBORObject.addition(ExtendedRational(1, 3), 1)
        self.assertKind(cbor.RATIONAL, total)
        self.assertEqual(c(ExtendedRational(4, 3)), total)

    def test_nan(self):
        self.assertTrue(CBORObject.addition(math.nan, 1).is_nan())
        self.assertTrue(CBORObject.multiply(ExtendedDecimal.SIGNALING_NAN, 1).is_nan())

    def test_errors(self):
        with self.assertRaises(TypeError):
            CBORObject.addition(None, 1)
        with self.assertRaises(InvalidOperationError):
            CBORObject.addition('1', 1)

    def test_operators(self):
        self.assertEqual(c(3), c(1) + 2)
        self.assertEqual(c(1), 3 - c(2))
        self.assertEqual(c(ExtendedRational(1, 3)), 1 / c(3))
        self.assertEqual(c(6), c(2) * c(3))
        self.assertEqual(c(1), c(7) % 3)

    def test_unary(self):
        self.assertKind(cbor.BIG_INTEGER, -c(cbor.INT64_MIN))
        self.assertEqual(c(1 << 63), -c(cbor.INT64_MIN))
        self.assertKind(cbor.SINGLE, -CBORObject.from_single(1.5))
        self.assertEqual(c(ExtendedDecimal('1.5')), abs(c(ExtendedDecimal('-1.5'))))
        self.assertTrue(c(0.0).negate().value == 0.0)
        self.assertEqual(-1.0, math.copysign(1.0, c(0.0).negate().value))
        with self.assertRaises(InvalidOperationError):
            -c('x')


class CBORDiagnosticTests(CBORObjectTests):

    def test_scalars(self):
        self.assertEqual('false', str(CBORObject.FALSE))
        self.assertEqual('undefined', str(CBORObject.UNDEFINED))
        self.assertEqual('simple(99)', str(CBORObject.from_simple_value(99)))
        self.assertEqual('-18446744073709551617', str(c(-(1 << 64) - 1)))
        self.assertEqual('2.0', str(c(2.0)))
        self.assertEqual('1E+16', str(c(1e16)))
        self.assertEqual('0.1', str(CBORObject.from_single(0.1)))
        self.assertEqual('-Infinity', str(c(-math.inf)))
        self.assertEqual('NaN', str(c(math.nan)))
        self.assertEqual('-5E-7', str(c(ExtendedDecimal('-5E-7'))))
        self.assertEqual('1/3', str(c(ExtendedRational(1, 3))))
        self.assertEqual("h'00ff'", str(c(b'\x00\xff')))
        self.assertEqual('"a\\"b\\n"', str(c('a"b\n')))

    def test_containers(self):
        self.assertEqual('[1, 2.5, "three", h\'04\']', str(c([1, 2.5, 'three', b'\x04'])))
        self.assertEqual('{"a": [], 1: {}}', str(c({'a': [], 1: {}})))
        self.assertEqual('CBORObject([])', repr(c([])))

    def test_tagged(self):
        self.assertEqual('37(-5E-7)', str(CBORObject.from_object_and_tag(ExtendedDecimal('-5E-7'), 37)))


if __name__ == '__main__':
    import unittest
    unittest.main()
