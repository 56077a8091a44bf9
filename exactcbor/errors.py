"""
Exception kinds shared by the numeric engine, the codec and the JSON bridge.

Each one subclasses a built-in exception, so a caller can catch either the
specific kind or the built-in it refines:

    FormatError            ValueError      malformed text or bytes
    CBORError              FormatError     malformed CBOR bytes or JSON text
    InvalidOperationError  TypeError       the operation does not apply to this kind of value
    ArithmeticRangeError   OverflowError   a value does not fit the requested numeric type

Argument errors particular to one class are nested in that class,
e.g. CBORObject.TagRangeError.  TrapError lives in context.py with the flags it reports.
"""


class FormatError(ValueError):
    """e.g. ExtendedDecimal.from_string('1.2.3') or ExtendedDecimal.from_string('')"""


class CBORError(FormatError):
    """e.g. CBORObject.decode_from_bytes(b'\\x7F\\x61\\x20\\xC0\\x61\\x20\\xFF') or from_json_string('[1,]')"""


class InvalidOperationError(TypeError):
    """e.g. CBORObject.new_array().as_double() or CBORObject.TRUE.add(1)"""


class ArithmeticRangeError(OverflowError):
    """e.g. CBORObject.from_object(9999).as_byte() or ExtendedDecimal.POSITIVE_INFINITY.to_big_integer()"""
