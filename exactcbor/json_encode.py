"""
JSON text of a CBORObject.

    CBORObject.from_object({'a': [1, 2.5, None, b'\\xFF']}).to_json_string() == '{"a":[1,2.5,null,"_w"]}'
"""

import base64
import binascii
import json
import re

from . import cbor
from . import ieee


JSON_SEPARATORS_NO_SPACES = (',', ':')
JSON_NULL = json.dumps(None)
JSON_TRUE = json.dumps(True)
JSON_FALSE = json.dumps(False)

TAG_BASE64URL = 21
TAG_BASE64 = 22
TAG_BASE16 = 23

_ESCAPES = {
    '"': '\\"',
    '\\': '\\\\',
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}
_NEEDS_ESCAPE = re.compile(r'["\\\x00-\x1F]')


def _escape(match):
    c = match.group(0)
    return _ESCAPES.get(c, '\\u{:04X}'.format(ord(c)))


def quote_text(s):
    """JSON string literal, e.g. quote_text('a"b\\x01') == '"a\\\\"b\\\\u0001"'"""
    return '"' + _NEEDS_ESCAPE.sub(_escape, s) + '"'


assert '"a\\"b"' == quote_text('a"b')
assert '"\\u001F\\n"' == quote_text('\x1F\n')
assert '"é"' == quote_text('é')


def byte_string_text(data, tags=()):
    """
    Bytes as JSON text per the encoding hint tag, if any, outermost first.

        no hint   base64url, no padding
        tag 21    base64url, no padding
        tag 22    base64, padded
        tag 23    base16, upper case
    """
    for tag in tags:
        if tag == TAG_BASE64:
            return base64.b64encode(data).decode('ascii')
        if tag == TAG_BASE16:
            return binascii.hexlify(data).decode('ascii').upper()
        if tag == TAG_BASE64URL:
            break
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


assert '_w' == byte_string_text(b'\xFF')
assert '/w==' == byte_string_text(b'\xFF', (22,))
assert 'FF' == byte_string_text(b'\xFF', (23,))


def number_text(item):
    """JSON number, or null when it has no finite value."""
    if not item.is_finite():
        return JSON_NULL
    kind = item.kind
    value = item.value
    if kind in (cbor.INTEGER, cbor.BIG_INTEGER):
        return cbor.signed_digits(value)
    if kind == cbor.SINGLE:
        return cbor.float_diagnostic(value, ieee.shortest_single_repr)
    if kind == cbor.DOUBLE:
        return cbor.float_diagnostic(value)
    if kind == cbor.RATIONAL:
        value = value.to_extended_decimal()
    return value.to_string()


def to_json_string(item):
    parts = []
    _append_json(item, parts)
    return ''.join(parts)


def _append_json(item, parts):
    kind = item.kind
    if kind == cbor.SIMPLE:
        if item.is_true():
            parts.append(JSON_TRUE)
        elif item.is_false():
            parts.append(JSON_FALSE)
        else:
            parts.append(JSON_NULL)
            # NOTE:  undefined and the other simple values have no JSON form either.
    elif kind in cbor.NUMBER_KINDS:
        parts.append(number_text(item))
    elif kind == cbor.BYTES:
        parts.append('"' + byte_string_text(item.value, item.get_tags()) + '"')
    elif kind == cbor.TEXT:
        parts.append(quote_text(item.value))
    elif kind == cbor.ARRAY:
        parts.append('[')
        for index, element in enumerate(item.value):
            if index > 0:
                parts.append(JSON_SEPARATORS_NO_SPACES[0])
            _append_json(element, parts)
        parts.append(']')
    else:
        parts.append('{')
        for index, (key, value) in enumerate(item.value.items()):
            if index > 0:
                parts.append(JSON_SEPARATORS_NO_SPACES[0])
            if key.kind == cbor.TEXT:
                parts.append(quote_text(key.value))
            else:
                parts.append(quote_text(to_json_string(key)))
            parts.append(JSON_SEPARATORS_NO_SPACES[1])
            _append_json(value, parts)
        parts.append('}')
