"""
Unit tests for JSON text to and from CBORObject
"""

import math
import unittest

from exactcbor import CBORError, CBORObject, ExtendedDecimal, ExtendedRational
from exactcbor import cbor
from exactcbor import json_encode


def c(x):
    return CBORObject.from_object(x)


class JsonTests(unittest.TestCase):

    def assertParses(self, expected, text):
        item = CBORObject.from_json_string(text)
        self.assertEqual(c(expected), item)
        return item

    def assertRejected(self, text, **kwargs):
        with self.assertRaises(CBORError, msg=repr(text)):
            CBORObject.from_json_string(text, **kwargs)

    def assertJson(self, expected, x):
        self.assertEqual(expected, c(x).to_json_string())


class FromJsonTests(JsonTests):

    def test_scalars(self):
        self.assertIs(CBORObject.TRUE, CBORObject.from_json_string('true'))
        self.assertIs(CBORObject.NULL, CBORObject.from_json_string(' null '))
        self.assertParses('x', '"x"')
        self.assertParses(-12, '-12')

    def test_containers(self):
        item = self.assertParses({'a': [1, 2, {}], 'b': []}, ' {"a" : [1, 2, {}], "b": [ ]}\n')
        self.assertEqual([c('a'), c('b')], item.keys())

    def test_numbers_are_exact(self):
        item = self.assertParses(ExtendedDecimal('2.50'), '2.50')
        self.assertEqual(cbor.DECIMAL, item.kind)
        self.assertEqual('2.50', str(item))
        self.assertEqual('0.1', str(CBORObject.from_json_string('0.1')))
        self.assertEqual('1.5E+3', str(CBORObject.from_json_string('1.5e3')))
        self.assertEqual('1E+400', str(CBORObject.from_json_string('1E400')))
        self.assertEqual('-0.0', str(CBORObject.from_json_string('-0.0')))

    def test_integers(self):
        self.assertEqual(cbor.INTEGER, CBORObject.from_json_string('9223372036854775807').kind)
        self.assertEqual(cbor.BIG_INTEGER, CBORObject.from_json_string('9223372036854775808').kind)
        digits = '7' * 5000
        self.assertEqual(int('7') * (10 ** 5000 - 1) // 9, CBORObject.from_json_string(digits).as_big_integer())

    def test_negative_zero_integer(self):
        item = CBORObject.from_json_string('-0')
        self.assertEqual(cbor.INTEGER, item.kind)
        self.assertEqual(0, item.value)

    def test_strings(self):
        self.assertParses('a"b\\/\b\f\n\r\t', r'"a\"b\\\/\b\f\n\r\t"')
        self.assertParses('\x00é', r'"\u0000é"')
        self.assertParses('\U0001F600', r'"\ud83d\ude00"')
        self.assertParses('\U0001F600', '"\U0001F600"')

    def test_max_depth(self):
        CBORObject.from_json_string('[[[]]]', max_depth=2)
        self.assertRejected('[[[[]]]]', max_depth=2)
        self.assertRejected('{"a": {"b": {"c": 1}}}', max_depth=2)
        CBORObject.from_json_string('[' * 150 + ']' * 150)
        self.assertRejected('[' * 300 + ']' * 300)
        self.assertRejected('[' * 100000 + ']' * 100000)

    def test_not_text(self):
        with self.assertRaises(TypeError):
            CBORObject.from_json_string(b'1')
        with self.assertRaises(TypeError):
            CBORObject.from_json_string(None)


class StrictJsonTests(JsonTests):

    def test_empty(self):
        self.assertRejected('')
        self.assertRejected(' \n\t')

    def test_byte_order_mark(self):
        self.assertRejected('\ufeff1')

    def test_extra_text(self):
        self.assertRejected('1 2')
        self.assertRejected('{} x')
        self.assertRejected('[1],')

    def test_bad_numbers(self):
        for text in ('01', '-01', '1.', '.5', '+1', '1e', '1e+', '0x10', '- 1', '1.5e3.2'):
            self.assertRejected(text)

    def test_no_constants(self):
        for text in ('NaN', '-Infinity', 'Infinity', '[1, NaN]'):
            self.assertRejected(text)

    def test_bad_literals(self):
        for text in ('True', 'nul', 'undefined', "'x'", '[1,]', '{"a":1,}', '{a:1}', '{"a"}', '[1 2]'):
            self.assertRejected(text)

    def test_bad_strings(self):
        self.assertRejected('"abc')
        self.assertRejected('"\x01"')
        self.assertRejected('"a\nb"')
        self.assertRejected(r'"\x41"')
        self.assertRejected(r'"\u12"')
        self.assertRejected(r'"\ud800"')
        self.assertRejected(r'"\ude00\ud83d"')
        self.assertRejected(r'{"\udc00": 1}')

    def test_duplicate_keys(self):
        self.assertRejected('{"a": 1, "a": 2}')
        self.assertRejected('{"a": 1, "\\u0061": 2}')
        self.assertRejected('[{"x": {"a": 1, "a": 1}}]')


class ToJsonTests(JsonTests):

    def test_scalars(self):
        self.assertJson('true', True)
        self.assertJson('null', None)
        self.assertJson('null', CBORObject.UNDEFINED)
        self.assertJson('null', CBORObject.from_simple_value(99))
        self.assertJson('-18446744073709551617', -(1 << 64) - 1)

    def test_floats(self):
        self.assertJson('2.5', 2.5)
        self.assertJson('1E+16', 1e16)
        self.assertJson('-0.0', -0.0)
        self.assertJson('0.1', CBORObject.from_single(0.1))
        self.assertJson('null', math.nan)
        self.assertJson('null', -math.inf)

    def test_exact_numbers(self):
        self.assertJson('1.50', ExtendedDecimal('1.50'))
        self.assertJson('1E+3', ExtendedDecimal('1E+3'))
        self.assertJson('null', ExtendedDecimal.NAN)
        self.assertJson('0.25', ExtendedRational(1, 4))
        self.assertJson('0.3333333333333333333333333333333333', ExtendedRational(1, 3))
        self.assertJson('null', ExtendedRational.POSITIVE_INFINITY)

    def test_text(self):
        self.assertJson('"a\\"b\\\\c"', 'a"b\\c')
        self.assertJson('"\\u0000\\u001B\\b"', '\x00\x1b\b')
        self.assertJson('"é \x7f\U0001F600"', 'é \x7f\U0001F600')

    def test_byte_strings(self):
        self.assertJson('"AAEC_w"', b'\x00\x01\x02\xff')
        self.assertJson('""', b'')
        self.assertJson('"AAEC/w=="', CBORObject.from_object_and_tag(b'\x00\x01\x02\xff', json_encode.TAG_BASE64))
        self.assertJson('"000102FF"', CBORObject.from_object_and_tag(b'\x00\x01\x02\xff', json_encode.TAG_BASE16))
        self.assertJson('"AAEC_w"', CBORObject.from_object_and_tag(b'\x00\x01\x02\xff', json_encode.TAG_BASE64URL))
        self.assertJson('"AAEC_w"', CBORObject.from_object_and_tag(b'\x00\x01\x02\xff', 99))

    def test_containers(self):
        self.assertJson('{"a":[1,2.5,null,"_w"]}', {'a': [1, 2.5, None, b'\xff']})
        self.assertJson('[]', [])
        self.assertJson('{}', {})
        self.assertJson('[[],{"b":{}}]', [[], {'b': {}}])

    def test_non_text_keys(self):
        self.assertJson('{"1":"x"}', {1: 'x'})
        self.assertJson('{"[1,2]":true}', {(1, 2): True})
        self.assertJson('{"null":0}', {None: 0})
        self.assertJson('{"\\"_w\\"":0}', {b'\xff': 0})

    def test_tags_ignored(self):
        self.assertJson('"2013-03-21T20:04:00Z"', CBORObject.from_object_and_tag('2013-03-21T20:04:00Z', 0))

    def test_round_trip(self):
        text = '{"name":"café","price":19.99,"tags":["a","b"],"count":1000000000000000000000,"ok":false,"none":null}'
        self.assertEqual(text, CBORObject.from_json_string(text).to_json_string())


if __name__ == '__main__':
    import unittest
    unittest.main()
