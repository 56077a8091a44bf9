"""
CBORObject is one item of CBOR data (RFC 8949), with any tags it carries.

    x = CBORObject.decode_from_bytes(b'\\xC4\\x82\\x21\\x19\\x6A\\xB3')
    assert x.as_extended_decimal() == ExtendedDecimal.from_string('273.15')
    assert x.encode_to_bytes() == b'\\xC4\\x82\\x21\\x19\\x6A\\xB3'

Every number kind CBOR carries compares and hashes by exact value,
so CBORObject.from_object(1.5) == CBORObject.from_object(ExtendedDecimal('1.5')).
Arrays and maps are the only mutable kinds.
"""

import binascii
import decimal
import fractions
import math

from .context import PrecisionContext, TrapError
from .errors import ArithmeticRangeError, CBORError, InvalidOperationError
from .extended_decimal import ExtendedDecimal
from .extended_float import ExtendedFloat
from .radix import int_to_digits, type_name
from .rational import ExtendedRational
from . import codec
from . import ieee
from . import json_decode
from . import json_encode
from . import numeric


class CBORType(object):
    """What kind of data a CBORObject holds, e.g. CBORObject.from_object(1.5).cbor_type == CBORType.NUMBER"""
    NUMBER       = 'NUMBER'
    BOOLEAN      = 'BOOLEAN'
    SIMPLE_VALUE = 'SIMPLE_VALUE'   # including null and undefined
    BYTE_STRING  = 'BYTE_STRING'
    TEXT_STRING  = 'TEXT_STRING'
    ARRAY        = 'ARRAY'
    MAP          = 'MAP'


# Internal kinds.  Each names what _value holds.
SIMPLE = 'simple'            # int code, 20..23 being false, true, null, undefined
INTEGER = 'integer'          # int fitting 64-bit two's complement
BIG_INTEGER = 'big_integer'  # any other int
SINGLE = 'single'            # float, exactly a binary32 value
DOUBLE = 'double'            # float
DECIMAL = 'decimal'          # ExtendedDecimal
BINARY = 'binary'            # ExtendedFloat
RATIONAL = 'rational'        # ExtendedRational
BYTES = 'bytes'              # bytes
TEXT = 'text'                # str
ARRAY = 'array'              # list of CBORObject
MAP = 'map'                  # dict of CBORObject to CBORObject, in insertion order

NUMBER_KINDS = frozenset((INTEGER, BIG_INTEGER, SINGLE, DOUBLE, DECIMAL, BINARY, RATIONAL))
BINARY_KINDS = frozenset((INTEGER, BIG_INTEGER, SINGLE, DOUBLE, BINARY))

SIMPLE_FALSE = 20
SIMPLE_TRUE = 21
SIMPLE_NULL = 22
SIMPLE_UNDEFINED = 23

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_LIMIT = 1 << 64
TAG_LIMIT = 1 << 64

# Order of kinds in the canonical comparator.
_RANK_UNDEFINED = 0
_RANK_NULL = 1
_RANK_FALSE = 2
_RANK_TRUE = 3
_RANK_SIMPLE = 4
_RANK_NUMBER = 5
_RANK_BYTES = 6
_RANK_TEXT = 7
_RANK_ARRAY = 8
_RANK_MAP = 9

_SIMPLE_RANKS = {
    SIMPLE_UNDEFINED: _RANK_UNDEFINED,
    SIMPLE_NULL: _RANK_NULL,
    SIMPLE_FALSE: _RANK_FALSE,
    SIMPLE_TRUE: _RANK_TRUE,
}
_KIND_RANKS = {
    BYTES: _RANK_BYTES,
    TEXT: _RANK_TEXT,
    ARRAY: _RANK_ARRAY,
    MAP: _RANK_MAP,
}


def integer_kind(n):
    return INTEGER if INT64_MIN <= n <= INT64_MAX else BIG_INTEGER


assert INTEGER == integer_kind(-(1 << 63))
assert BIG_INTEGER == integer_kind(1 << 63)


def is_valid_simple_value(n):
    return 0 <= n <= 255 and not 24 <= n <= 31


assert is_valid_simple_value(23)
assert not is_valid_simple_value(24)
assert is_valid_simple_value(32)


def signed_digits(n):
    return ('-' if n < 0 else '') + int_to_digits(abs(n))


def float_diagnostic(x, shortest_repr=repr):
    """Diagnostic text of a double (or a binary32 with shortest_repr=ieee.shortest_single_repr)."""
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return '-Infinity' if x < 0 else 'Infinity'
    return ExtendedDecimal.from_string(shortest_repr(x)).to_string()


assert '1E+16' == float_diagnostic(1e16)
assert '0.1' == float_diagnostic(0.1)
assert '-0.0' == float_diagnostic(-0.0)


class CBORObject(object):
    """
    A CBOR data item:  a number, string, array, map, boolean, null, undefined or other simple value.

    Make one with from_object() or decode_from_bytes(), not the constructor.
    """
    __slots__ = ('_kind', '_value', '_tags')

    FALSE = None
    TRUE = None
    NULL = None
    UNDEFINED = None
    NAN = None
    POSITIVE_INFINITY = None
    NEGATIVE_INFINITY = None

    def __init__(self, kind, value, tags=()):
        self._kind = kind
        self._value = value
        self._tags = tags

    class ConstructorTypeError(TypeError):
        """e.g. CBORObject.from_object(object()) or CBORObject.from_object({1, 2})"""

    class TagRangeError(ValueError):
        """e.g. CBORObject.from_object_and_tag(0, -1) or CBORObject.from_object_and_tag(0, 2**64)"""

    class SimpleValueRangeError(ValueError):
        """e.g. CBORObject.from_simple_value(24) or CBORObject.from_simple_value(256)"""

    class InvalidTextError(ValueError):
        """e.g. CBORObject.from_object('\\ud800') since a lone surrogate has no UTF-8 encoding"""

    @classmethod
    def internal_setup(cls):
        """Initialize the singletons after the class is otherwise defined."""
        cls.FALSE = cls(SIMPLE, SIMPLE_FALSE)
        cls.TRUE = cls(SIMPLE, SIMPLE_TRUE)
        cls.NULL = cls(SIMPLE, SIMPLE_NULL)
        cls.UNDEFINED = cls(SIMPLE, SIMPLE_UNDEFINED)
        cls.NAN = cls(DOUBLE, math.nan)
        cls.POSITIVE_INFINITY = cls(DOUBLE, math.inf)
        cls.NEGATIVE_INFINITY = cls(DOUBLE, -math.inf)

    # Construction
    # ------------
    @classmethod
    def from_object(cls, x):
        """
        CBORObject equivalent of a Python value.

            None                        null
            bool                        true or false
            int                         integer, any size
            float                       double
            str                         text string
            bytes, bytearray            byte string
            list, tuple                 array (elements converted too)
            dict                        map (keys and values converted too)
            decimal.Decimal             ExtendedDecimal
            fractions.Fraction          ExtendedRational
            ExtendedDecimal, ExtendedFloat, ExtendedRational
            CBORObject                  itself
        """
        if x is None:
            return cls.NULL
        if isinstance(x, CBORObject):
            return x
        if isinstance(x, bool):
            return cls.TRUE if x else cls.FALSE
        if isinstance(x, int):
            return cls(integer_kind(x), int(x))
        if isinstance(x, float):
            return cls(DOUBLE, x)
        if isinstance(x, str):
            return cls.from_text(x)
        if isinstance(x, (bytes, bytearray)):
            return cls(BYTES, bytes(x))
        if isinstance(x, (list, tuple)):
            return cls(ARRAY, [cls.from_object(element) for element in x])
        if isinstance(x, dict):
            return cls(MAP, {cls.from_object(key): cls.from_object(value) for key, value in x.items()})
        if isinstance(x, ExtendedDecimal):
            return cls(DECIMAL, x)
        if isinstance(x, ExtendedFloat):
            return cls(BINARY, x)
        if isinstance(x, ExtendedRational):
            return cls(RATIONAL, x)
        if isinstance(x, decimal.Decimal):
            return cls(DECIMAL, ExtendedDecimal.from_python_decimal(x))
        if isinstance(x, fractions.Fraction):
            return cls(RATIONAL, ExtendedRational.from_fraction(x))
        raise cls.ConstructorTypeError("CBORObject.from_object({}) is not supported".format(type_name(x)))

    @classmethod
    def from_text(cls, text):
        try:
            text.encode('utf-8')
        except UnicodeEncodeError as e:
            raise cls.InvalidTextError("Text has no UTF-8 encoding:  " + str(e))
        return cls(TEXT, text)

    @classmethod
    def from_single(cls, x):
        """A binary32 number, rounded from the float if need be."""
        if x is None:
            raise TypeError("from_single() needs a float, not None")
        return cls(SINGLE, ieee.round_to_single(float(x)))

    @classmethod
    def from_simple_value(cls, n):
        if n is None:
            raise TypeError("from_simple_value() needs an int, not None")
        if not isinstance(n, int) or isinstance(n, bool):
            raise cls.ConstructorTypeError("from_simple_value() needs an int, not a " + type_name(n))
        if not is_valid_simple_value(n):
            raise cls.SimpleValueRangeError("Simple value {} is not 0-23 or 32-255".format(n))
        if n in _SIMPLE_RANKS:
            return {
                SIMPLE_FALSE: cls.FALSE,
                SIMPLE_TRUE: cls.TRUE,
                SIMPLE_NULL: cls.NULL,
                SIMPLE_UNDEFINED: cls.UNDEFINED,
            }[n]
        return cls(SIMPLE, n)

    @classmethod
    def from_object_and_tag(cls, x, tag):
        """
        Tag a value, e.g. CBORObject.from_object_and_tag('2013-03-21T20:04:00Z', 0)

        Tags 2, 3, 4, 5, 30, 264 and 265 make numbers, exactly as decoding does,
        so CBORObject.from_object_and_tag(b'\\x01\\x00', 2) is the integer 256.
        """
        if tag is None:
            raise TypeError("from_object_and_tag() needs a tag, not None")
        if not isinstance(tag, int) or isinstance(tag, bool):
            raise cls.TagRangeError("A tag is an int, not a " + type_name(tag))
        if not 0 <= tag < TAG_LIMIT:
            raise cls.TagRangeError("Tag {} is not 0 to 2**64-1".format(tag))
        return cls.tagged(tag, cls.from_object(x))

    @classmethod
    def tagged(cls, tag, item):
        """The item with one more tag outside.  Number tags are interpreted, CBORError when malformed."""
        number = interpret_number_tag(tag, item)
        if number is not None:
            return number
        return cls(item._kind, item._value, (tag,) + item._tags)

    @classmethod
    def new_array(cls):
        return cls(ARRAY, [])

    @classmethod
    def new_map(cls):
        return cls(MAP, {})

    # Codec
    # -----
    @classmethod
    def decode_from_bytes(cls, data, max_depth=None, allow_duplicate_keys=False):
        """Exactly one CBOR item.  CBORError for anything malformed, including bytes left over."""
        if data is None:
            raise TypeError("decode_from_bytes() needs bytes, not None")
        decoder = codec.Decoder(
            codec.BytesSource(data),
            max_depth=max_depth,
            allow_duplicate_keys=allow_duplicate_keys,
        )
        return decoder.decode_only_item()

    @classmethod
    def read(cls, stream, max_depth=None, allow_duplicate_keys=False):
        """The next CBOR item from a binary file-like object.  Reads no further than its end."""
        if stream is None:
            raise TypeError("read() needs a stream, not None")
        decoder = codec.Decoder(
            codec.StreamSource(stream),
            max_depth=max_depth,
            allow_duplicate_keys=allow_duplicate_keys,
        )
        return decoder.decode_item()

    def encode_to_bytes(self, use_indefinite_strings=False):
        return codec.Encoder(use_indefinite_strings=use_indefinite_strings).encode(self)

    def write_to(self, stream, use_indefinite_strings=False):
        codec.Encoder(use_indefinite_strings=use_indefinite_strings).write(self, stream)

    @classmethod
    def write(cls, value, stream):
        """Encode any value from_object() accepts."""
        if stream is None:
            raise TypeError("write() needs a stream, not None")
        cls.from_object(value).write_to(stream)

    @classmethod
    def from_json_string(cls, text, max_depth=None):
        return json_decode.from_json_string(text, max_depth=max_depth)

    def to_json_string(self):
        return json_encode.to_json_string(self)

    # Kind
    # ----
    @property
    def cbor_type(self):
        if self._kind in NUMBER_KINDS:
            return CBORType.NUMBER
        if self._kind == SIMPLE:
            if self._value in (SIMPLE_FALSE, SIMPLE_TRUE):
                return CBORType.BOOLEAN
            return CBORType.SIMPLE_VALUE
        return {
            BYTES: CBORType.BYTE_STRING,
            TEXT: CBORType.TEXT_STRING,
            ARRAY: CBORType.ARRAY,
            MAP: CBORType.MAP,
        }[self._kind]

    @property
    def kind(self):
        """Internal representation, e.g. 'single' or 'big_integer'.  Mostly for tests and the codec."""
        return self._kind

    @property
    def value(self):
        """The Python value held:  int, float, str, bytes, list, dict, or one of the Extended numbers."""
        return self._value

    def is_number(self):
        return self._kind in NUMBER_KINDS

    def is_true(self):
        return self._kind == SIMPLE and self._value == SIMPLE_TRUE

    def is_false(self):
        return self._kind == SIMPLE and self._value == SIMPLE_FALSE

    def is_null(self):
        return self._kind == SIMPLE and self._value == SIMPLE_NULL

    def is_undefined(self):
        return self._kind == SIMPLE and self._value == SIMPLE_UNDEFINED

    @property
    def simple_value(self):
        """0 to 255 for simple values, including false, true, null and undefined, otherwise -1."""
        return self._value if self._kind == SIMPLE else -1

    # Tags
    # ----
    def is_tagged(self):
        return len(self._tags) > 0

    def get_tags(self):
        """Tags outermost first."""
        return list(self._tags)

    def has_tag(self, tag):
        if tag is None:
            raise TypeError("has_tag() needs a tag, not None")
        return tag in self._tags

    @property
    def outermost_tag(self):
        return self._tags[0] if self._tags else -1

    @property
    def innermost_tag(self):
        return self._tags[-1] if self._tags else -1

    def untag(self):
        """The same item with no tags."""
        if not self._tags:
            return self
        return CBORObject(self._kind, self._value)

    def untag_one(self):
        """The same item without its outermost tag."""
        if not self._tags:
            return self
        return CBORObject(self._kind, self._value, self._tags[1:])

    # Numbers
    # -------
    def _number(self):
        if self._kind not in NUMBER_KINDS:
            raise InvalidOperationError("Not a number:  " + self._describe())
        return self._value

    def _describe(self):
        text = str(self)
        return text if len(text) <= 40 else text[:37] + '...'

    def _extended(self):
        """The number as an ExtendedDecimal, ExtendedFloat or ExtendedRational, exactly."""
        value = self._number()
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedDecimal.create(value)
        if self._kind in (SINGLE, DOUBLE):
            return ExtendedFloat.from_double(value)
        return value

    def _exact_parts(self):
        return numeric.exact_parts(self._number())

    def is_finite(self):
        return self.is_number() and self._extended().is_finite()

    def is_infinity(self):
        return self.is_number() and self._extended().is_infinity()

    def is_positive_infinity(self):
        return self.is_number() and self._extended().is_positive_infinity()

    def is_negative_infinity(self):
        return self.is_number() and self._extended().is_negative_infinity()

    def is_nan(self):
        return self.is_number() and self._extended().is_nan()

    def is_zero(self):
        return self.is_number() and self._extended().is_zero()

    def is_integral(self):
        return self.is_number() and self._extended().is_integral()

    @property
    def sign(self):
        """-1, 0 or 1.  InvalidOperationError for NaN and for things that are not numbers."""
        number = self._extended()
        if number.is_nan():
            raise InvalidOperationError("NaN has no sign")
        return number.sign

    def _compare_value(self, other):
        return numeric.compare_exact(self._number(), other)

    def _truncation_in_range(self, low, high):
        """Is the number finite, with its integer part between low and high?"""
        number = self._extended()
        if not number.is_finite():
            return False
        return numeric.compare_exact(number, low - 1) > 0 and numeric.compare_exact(number, high + 1) < 0

    def _fits_integer(self, low, high):
        return self.is_number() and self.is_integral() and self._truncation_in_range(low, high)

    def can_fit_in_int32(self):
        return self._fits_integer(-(1 << 31), (1 << 31) - 1)

    def can_fit_in_int64(self):
        return self._fits_integer(INT64_MIN, INT64_MAX)

    def can_truncated_int_fit_in_int32(self):
        return self.is_number() and self._truncation_in_range(-(1 << 31), (1 << 31) - 1)

    def can_truncated_int_fit_in_int64(self):
        return self.is_number() and self._truncation_in_range(INT64_MIN, INT64_MAX)

    def can_fit_in_double(self):
        """Is the value exactly a double?  NaN and infinities are."""
        if not self.is_number():
            return False
        if self.is_nan():
            return True
        return self._compare_value(self.as_double()) == 0

    def can_fit_in_single(self):
        if not self.is_number():
            return False
        if self.is_nan():
            return True
        return self._compare_value(self.as_single()) == 0

    def as_big_integer(self):
        """The integer part, truncated toward zero.  ArithmeticRangeError for infinity and NaN."""
        number = self._extended()
        if not number.is_finite():
            raise ArithmeticRangeError("{} has no integer value".format(self._describe()))
        return number.to_big_integer()

    def _as_integer_in(self, low, high, name):
        number = self._extended()
        if not self._truncation_in_range(low, high):
            raise ArithmeticRangeError("{} does not fit {}".format(self._describe(), name))
        return number.to_big_integer()

    def as_byte(self):
        return self._as_integer_in(0, 255, 'a byte')

    def as_int16(self):
        return self._as_integer_in(-(1 << 15), (1 << 15) - 1, 'an int16')

    def as_int32(self):
        return self._as_integer_in(-(1 << 31), (1 << 31) - 1, 'an int32')

    def as_int64(self):
        return self._as_integer_in(INT64_MIN, INT64_MAX, 'an int64')

    def as_double(self):
        """Nearest double, ties to even."""
        value = self._number()
        if self._kind in (SINGLE, DOUBLE):
            return value
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedFloat.create(value).to_double()
        return value.to_double()

    def as_single(self):
        """Nearest binary32 (as the float of equal value), ties to even."""
        value = self._number()
        if self._kind in (SINGLE, DOUBLE):
            return ieee.round_to_single(value)
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedFloat.create(value).to_single()
        return value.to_single()

    def as_extended_decimal(self):
        """Exact, except a rational with no finite decimal expansion is rounded to 34 digits."""
        value = self._number()
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedDecimal.create(value)
        if self._kind in (SINGLE, DOUBLE):
            return ExtendedDecimal.from_double(value)
        if self._kind == DECIMAL:
            return value
        if self._kind == BINARY:
            return ExtendedDecimal.from_extended_float(value)
        return value.to_extended_decimal()

    def as_extended_float(self):
        """Exact when the value is a binary fraction, else rounded to 53 bits."""
        value = self._number()
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedFloat.create(value)
        if self._kind in (SINGLE, DOUBLE):
            return ExtendedFloat.from_double(value)
        if self._kind == BINARY:
            return value
        return value.to_extended_float()

    def as_extended_rational(self):
        value = self._number()
        if self._kind in (INTEGER, BIG_INTEGER):
            return ExtendedRational.from_int(value)
        if self._kind in (SINGLE, DOUBLE):
            return ExtendedRational.from_double(value)
        if self._kind == RATIONAL:
            return value
        return ExtendedRational._from_radix_number(value)

    # Other accessors
    # ---------------
    def as_boolean(self):
        """False for false, null and undefined.  True for anything else."""
        return not (self._kind == SIMPLE and self._value in (SIMPLE_FALSE, SIMPLE_NULL, SIMPLE_UNDEFINED))

    def as_string(self):
        if self._kind != TEXT:
            raise InvalidOperationError("Not a text string:  " + self._describe())
        return self._value

    def get_byte_string(self):
        if self._kind != BYTES:
            raise InvalidOperationError("Not a byte string:  " + self._describe())
        return self._value

    # Containers
    # ----------
    def _container(self, *kinds):
        if self._kind not in kinds:
            raise InvalidOperationError("Not {}:  {}".format(
                ' or '.join('an ' + kind if kind == ARRAY else 'a ' + kind for kind in kinds),
                self._describe(),
            ))
        return self._value

    @staticmethod
    def _required(x, what):
        if x is None:
            raise TypeError("{} is required, not None.  Use CBORObject.NULL for null.".format(what))
        return CBORObject.from_object(x)

    @property
    def count(self):
        """Number of elements of an array, or entries of a map."""
        return len(self._container(ARRAY, MAP))

    def __len__(self):
        return self.count

    def __getitem__(self, key):
        if self._kind == ARRAY:
            if not isinstance(key, int):
                key = self._required(key, "An index").as_int32()
            return self._value[key]
        items = self._container(ARRAY, MAP)
        return items[self._required(key, "A key")]

    def __setitem__(self, key, value):
        value = self._required(value, "A value")
        if self._kind == ARRAY:
            if not isinstance(key, int):
                key = self._required(key, "An index").as_int32()
            self._value[key] = value
        else:
            self._container(ARRAY, MAP)[self._required(key, "A key")] = value

    def get(self, key, default=None):
        """Map value for the key, or default.  Array element at the index, or default."""
        try:
            return self[key]
        except (KeyError, IndexError):
            return default

    def add(self, *args):
        """
        add(value) appends to an array.
        add(key, value) inserts into a map, KeyError if the key is already there.
        """
        if self._kind == ARRAY:
            if len(args) != 1:
                raise InvalidOperationError("Add one value to an array, not {}".format(len(args)))
            self._value.append(self._required(args[0], "A value"))
        elif self._kind == MAP:
            if len(args) != 2:
                raise InvalidOperationError("Add a key and a value to a map")
            key = self._required(args[0], "A key")
            value = self._required(args[1], "A value")
            if key in self._value:
                raise KeyError("Key already in map:  " + key._describe())
            self._value[key] = value
        else:
            self._container(ARRAY, MAP)
        return self

    def set(self, key, value):
        """Insert or replace a map entry, or replace an array element."""
        self[key] = value
        return self

    def remove(self, item_or_key):
        """Remove an array element (the first equal one) or a map key.  False if it was not there."""
        target = self._required(item_or_key, "An item or key")
        items = self._container(ARRAY, MAP)
        if self._kind == MAP:
            if target in items:
                del items[target]
                return True
            return False
        for index, element in enumerate(items):
            if element == target:
                del items[index]
                return True
        return False

    def contains_key(self, key):
        return self._required(key, "A key") in self._container(MAP)

    def __contains__(self, item_or_key):
        return CBORObject.from_object(item_or_key) in self._container(ARRAY, MAP)

    def keys(self):
        return list(self._container(MAP).keys())

    def values(self):
        """Map values, or array elements."""
        items = self._container(ARRAY, MAP)
        if self._kind == MAP:
            return list(items.values())
        return list(items)

    def items(self):
        return list(self._container(MAP).items())

    def __iter__(self):
        """Array elements, or map keys."""
        return iter(list(self._container(ARRAY, MAP)))

    def __bool__(self):
        return self.as_boolean()

    # Canonical order
    # ---------------
    def _rank(self):
        if self._kind == SIMPLE:
            return _SIMPLE_RANKS.get(self._value, _RANK_SIMPLE)
        if self._kind in NUMBER_KINDS:
            return _RANK_NUMBER
        return _KIND_RANKS[self._kind]

    def compare_to(self, other):
        """
        -1, 0 or 1 in the canonical total order.  Tags make no difference.

        undefined < null < false < true < other simple values < numbers < byte strings < text strings < arrays < maps

        Numbers by exact value with NaN last, byte strings by length then bytes,
        text by code points, arrays element by element then length,
        maps by count, then sorted keys, then the values under those keys.
        """
        if other is None:
            return 1
        return compare(self, CBORObject.from_object(other))

    def __eq__(self, other):
        if not isinstance(other, CBORObject):
            return NotImplemented
        return compare(self, other) == 0

    def __ne__(self, other):
        eq_result = self.__eq__(other)
        if eq_result is NotImplemented:
            return NotImplemented
        return not eq_result

    def _compared(self, other):
        if not isinstance(other, CBORObject):
            return None
        return compare(self, other)

    def __lt__(self, other):
        c = self._compared(other)
        return NotImplemented if c is None else c < 0

    def __le__(self, other):
        c = self._compared(other)
        return NotImplemented if c is None else c <= 0

    def __gt__(self, other):
        c = self._compared(other)
        return NotImplemented if c is None else c > 0

    def __ge__(self, other):
        c = self._compared(other)
        return NotImplemented if c is None else c >= 0

    def __hash__(self):
        kind = self._kind
        if kind in NUMBER_KINDS:
            return numeric.hash_exact(self._value)
        if kind == ARRAY:
            return hash((ARRAY, tuple(hash(element) for element in self._value)))
        if kind == MAP:
            return hash((MAP, frozenset((hash(key), hash(value)) for key, value in self._value.items())))
        return hash((kind, self._value))

    # Arithmetic
    # ----------
    # NOTE:  Exact.  Rational if either side is rational, integer if both are integers,
    #        ExtendedFloat if both are binary, otherwise ExtendedDecimal.
    #        A quotient with no finite expansion becomes a rational.

    @classmethod
    def _operands(cls, a, b):
        if a is None or b is None:
            raise TypeError("Arithmetic needs two numbers, not None")
        a = cls.from_object(a)
        b = cls.from_object(b)
        a._number()
        b._number()
        return a, b

    @classmethod
    def _arithmetic(cls, a, b, operation):
        a, b = cls._operands(a, b)
        if a.is_nan() or b.is_nan():
            return cls.NAN
        kinds = {a._kind, b._kind}
        if RATIONAL in kinds:
            return cls.from_object(getattr(a.as_extended_rational(), operation)(b.as_extended_rational()))
        if kinds <= {INTEGER, BIG_INTEGER}:
            integer = integer_arithmetic(a._value, b._value, operation)
            if integer is not None:
                return cls.from_object(integer)
        if kinds <= BINARY_KINDS:
            x, y = a.as_extended_float(), b.as_extended_float()
        else:
            x, y = a.as_extended_decimal(), b.as_extended_decimal()
        try:
            result = getattr(x, operation)(y)
        except TrapError as e:
            if operation != 'divide' or e.error != PrecisionContext.FLAG_INVALID:
                raise
            result = a.as_extended_rational().divide(b.as_extended_rational())
        return cls.from_object(result)

    @classmethod
    def addition(cls, a, b):
        return cls._arithmetic(a, b, 'add')

    @classmethod
    def subtract(cls, a, b):
        return cls._arithmetic(a, b, 'subtract')

    @classmethod
    def multiply(cls, a, b):
        return cls._arithmetic(a, b, 'multiply')

    @classmethod
    def divide(cls, a, b):
        """Exact quotient.  x/0 is a signed infinity, 0/0 is NaN."""
        return cls._arithmetic(a, b, 'divide')

    @classmethod
    def remainder(cls, a, b):
        """a - b * trunc(a / b)"""
        return cls._arithmetic(a, b, 'remainder')

    def _unary(self, operation):
        value = self._number()
        if self._kind in (INTEGER, BIG_INTEGER):
            return CBORObject.from_object(operation(value))
        if self._kind in (SINGLE, DOUBLE):
            return CBORObject(self._kind, operation(value))
        if self.is_nan():
            return CBORObject.NAN
        return CBORObject.from_object(operation(value))

    def negate(self):
        return self._unary(lambda x: -x)

    def abs(self):
        return self._unary(abs)

    def _operator(self, operation, other, reflected):
        try:
            other = CBORObject.from_object(other)
        except CBORObject.ConstructorTypeError:
            return NotImplemented
        if reflected:
            return self._arithmetic(other, self, operation)
        return self._arithmetic(self, other, operation)

    def __pos__(self): return self
    def __neg__(self): return self.negate()
    def __abs__(self): return self.abs()

    def __add__(self, other): return self._operator('add', other, False)
    def __radd__(self, other): return self._operator('add', other, True)
    def __sub__(self, other): return self._operator('subtract', other, False)
    def __rsub__(self, other): return self._operator('subtract', other, True)
    def __mul__(self, other): return self._operator('multiply', other, False)
    def __rmul__(self, other): return self._operator('multiply', other, True)
    def __truediv__(self, other): return self._operator('divide', other, False)
    def __rtruediv__(self, other): return self._operator('divide', other, True)
    def __mod__(self, other): return self._operator('remainder', other, False)
    def __rmod__(self, other): return self._operator('remainder', other, True)

    # Text
    # ----
    def _diagnostic_body(self):
        kind = self._kind
        value = self._value
        if kind == SIMPLE:
            return {
                SIMPLE_FALSE: 'false',
                SIMPLE_TRUE: 'true',
                SIMPLE_NULL: 'null',
                SIMPLE_UNDEFINED: 'undefined',
            }.get(value, 'simple({})'.format(value))
        if kind in (INTEGER, BIG_INTEGER):
            return signed_digits(value)
        if kind == SINGLE:
            return float_diagnostic(value, ieee.shortest_single_repr)
        if kind == DOUBLE:
            return float_diagnostic(value)
        if kind in (DECIMAL, BINARY):
            return value.to_string()
        if kind == RATIONAL:
            return str(value)
        if kind == BYTES:
            return "h'" + binascii.hexlify(value).decode('ascii') + "'"
        if kind == TEXT:
            return json_encode.quote_text(value)
        if kind == ARRAY:
            return '[' + ', '.join(str(element) for element in value) + ']'
        return '{' + ', '.join(str(k) + ': ' + str(v) for k, v in value.items()) + '}'

    def __str__(self):
        """
        Diagnostic notation, e.g. [1, 2.5, "three", h'04', 37(-5E-7)]

        NOTE:  Not the same as to_json_string().
        """
        prefix = ''.join(str(tag) + '(' for tag in self._tags)
        return prefix + self._diagnostic_body() + ')' * len(self._tags)

    def __repr__(self):
        return "CBORObject({})".format(str(self))


CBORObject.internal_setup()


def compare(a, b):
    """Canonical order of two CBORObjects, -1, 0 or 1.  See CBORObject.compare_to()."""
    a_rank = a._rank()
    b_rank = b._rank()
    if a_rank != b_rank:
        return 1 if a_rank > b_rank else -1
    if a_rank == _RANK_NUMBER:
        return numeric.compare_exact(a._value, b._value)
    if a_rank == _RANK_BYTES:
        a_key = (len(a._value), a._value)
        b_key = (len(b._value), b._value)
        return (a_key > b_key) - (a_key < b_key)
    if a_rank == _RANK_ARRAY:
        for a_element, b_element in zip(a._value, b._value):
            c = compare(a_element, b_element)
            if c != 0:
                return c
        return (len(a._value) > len(b._value)) - (len(a._value) < len(b._value))
    if a_rank == _RANK_MAP:
        return _compare_maps(a._value, b._value)
    return (a._value > b._value) - (a._value < b._value)


def _compare_maps(a, b):
    if len(a) != len(b):
        return 1 if len(a) > len(b) else -1
    a_keys = sorted(a.keys())
    b_keys = sorted(b.keys())
    for a_key, b_key in zip(a_keys, b_keys):
        c = compare(a_key, b_key)
        if c != 0:
            return c
    for a_key, b_key in zip(a_keys, b_keys):
        c = compare(a[a_key], b[b_key])
        if c != 0:
            return c
    return 0


def integer_arithmetic(a, b, operation):
    """Exact integer result, or None when it is not an integer (or b is zero)."""
    if operation == 'add':
        return a + b
    if operation == 'subtract':
        return a - b
    if operation == 'multiply':
        return a * b
    if b == 0:
        return None
    if operation == 'divide':
        quotient, remainder = divmod(a, b)
        return quotient if remainder == 0 else None
    magnitude = abs(a) % abs(b)
    return -magnitude if a < 0 else magnitude


assert 2 == integer_arithmetic(-7, -3, 'add') + 12
assert -1 == integer_arithmetic(-7, 3, 'remainder')
assert integer_arithmetic(7, 2, 'divide') is None


DECIMAL_TAGS = (4, 264)
BINARY_TAGS = (5, 265)
BIGNUM_TAGS = (2, 3)
RATIONAL_TAG = 30


def _is_plain_integer(item):
    return item._kind in (INTEGER, BIG_INTEGER) and not item._tags


def interpret_number_tag(tag, item):
    """
    The number a tag makes of its content, or None for other tags.

        2, 3        bignum from a byte string
        4, 264      decimal fraction [exponent, mantissa]
        5, 265      bigfloat [exponent, mantissa]
        30          rational [numerator, denominator]

    Tags 4 and 5 need an exponent that CBOR can hold without a bignum.
    CBORError if the content does not fit the tag.
    """
    if tag in BIGNUM_TAGS:
        if item._kind != BYTES or item._tags:
            raise CBORError("Tag {} needs a byte string, not {}".format(tag, item._describe()))
        n = int.from_bytes(item._value, 'big')
        if tag == 3:
            n = -1 - n
        return CBORObject(integer_kind(n), n)
    if tag in DECIMAL_TAGS or tag in BINARY_TAGS or tag == RATIONAL_TAG:
        if item._kind != ARRAY or item._tags or len(item._value) != 2:
            raise CBORError("Tag {} needs a two element array, not {}".format(tag, item._describe()))
        first, second = item._value
        if not _is_plain_integer(first) or not _is_plain_integer(second):
            raise CBORError("Tag {} needs two integers, not {}".format(tag, item._describe()))
        if tag == RATIONAL_TAG:
            if second._value <= 0:
                raise CBORError("Rational denominator {} is not positive".format(second._value))
            return CBORObject(RATIONAL, ExtendedRational(first._value, second._value))
        exponent, mantissa = first._value, second._value
        if tag in (4, 5) and not -UINT64_LIMIT <= exponent < UINT64_LIMIT:
            raise CBORError("Tag {} exponent {} needs tag {}".format(tag, exponent, tag + 260))
        if tag in DECIMAL_TAGS:
            return CBORObject(DECIMAL, ExtendedDecimal.create(mantissa, exponent))
        return CBORObject(BINARY, ExtendedFloat.create(mantissa, exponent))
    return None
