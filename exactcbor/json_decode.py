"""
Strict JSON text (RFC 8259) to CBORObject.

    CBORObject.from_json_string('{"a": [1, 2.50]}')   # 2.50 is ExtendedDecimal('2.50'), exactly

The standard json scanner does the parsing.  Its hooks and a pass over the result
reject what it would otherwise let through.
"""

import json
import logging

from .errors import CBORError
from .extended_decimal import ExtendedDecimal
from .radix import digits_to_int, type_name
from . import cbor
from . import codec


logger = logging.getLogger(__name__)

_BYTE_ORDER_MARK = '\ufeff'


def rejected(message):
    logger.debug("Rejected JSON:  %s", message)
    return CBORError(message)


class _Pairs(list):
    """Key value pairs of a JSON object, in order, duplicates and all."""


def _parse_int(text):
    if text.startswith('-'):
        return -digits_to_int(text[1:])
    return digits_to_int(text)


def _parse_constant(name):
    raise rejected("{} is not JSON".format(name))


def _joined_surrogates(s):
    """Pair up surrogate halves, escaped or literal.  CBORError for a lone half."""
    try:
        s.encode('utf-8')
    except UnicodeEncodeError:
        try:
            return s.encode('utf-16-le', 'surrogatepass').decode('utf-16-le')
        except UnicodeDecodeError:
            raise rejected("Lone surrogate in {}".format(repr(s[:100])))
    return s


assert '\U0001F600' == _joined_surrogates('\ud83d\ude00')
assert 'abc' == _joined_surrogates('abc')


_DECODER = json.JSONDecoder(
    parse_float=ExtendedDecimal.from_string,
    parse_int=_parse_int,
    parse_constant=_parse_constant,
    object_pairs_hook=_Pairs,
    strict=True,
    # NOTE:  strict=True rejects bare control characters inside strings.
)


def from_json_string(text, max_depth=None):
    if text is None:
        raise TypeError("from_json_string() needs a str, not None")
    if not isinstance(text, str):
        raise TypeError("from_json_string() needs a str, not a " + type_name(text))
    if text.startswith(_BYTE_ORDER_MARK):
        raise rejected("JSON text starts with a byte order mark")
    if text.strip(' \t\n\r') == '':
        raise rejected("No JSON text")
    try:
        parsed = _DECODER.decode(text)
    except json.JSONDecodeError as e:
        raise rejected(str(e))
    except RecursionError:
        raise rejected("JSON nested too deeply")
    except CBORError:
        raise
    except ValueError as e:
        raise rejected(str(e))
        # NOTE:  e.g. a number ExtendedDecimal.from_string() cannot take.
    if max_depth is None:
        max_depth = codec.Decoder.MAX_DEPTH_DEFAULT
    return _converted(parsed, 0, max_depth)


def _converted(x, depth, max_depth):
    if depth > max_depth:
        raise rejected("JSON nested deeper than {}".format(max_depth))
    if isinstance(x, str):
        return cbor.CBORObject(cbor.TEXT, _joined_surrogates(x))
    if isinstance(x, _Pairs):
        entries = {}
        for key, value in x:
            key_object = cbor.CBORObject(cbor.TEXT, _joined_surrogates(key))
            if key_object in entries:
                raise rejected("Duplicate JSON key " + repr(key[:100]))
            entries[key_object] = _converted(value, depth + 1, max_depth)
        return cbor.CBORObject(cbor.MAP, entries)
    if isinstance(x, list):
        return cbor.CBORObject(cbor.ARRAY, [_converted(element, depth + 1, max_depth) for element in x])
    return cbor.CBORObject.from_object(x)
    # NOTE:  None, bool, int and ExtendedDecimal are all that's left.
