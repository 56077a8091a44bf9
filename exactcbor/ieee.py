"""
Bit level help with IEEE 754 binary16, binary32 and binary64 values.

Python floats are binary64.  A binary16 or binary32 value is carried as the float of equal value.
"""

import collections
import math
import struct


QUIET_NAN = 'NaN'
SIGNALING_NAN = 'sNaN'
INFINITY = 'Infinity'

Decomposition = collections.namedtuple('Decomposition', 'negative special mantissa exponent')
Decomposition.__doc__ = """
    value = (-1)**negative * mantissa * 2**exponent, mantissa odd (or zero)

    special - None for finite values, else INFINITY, QUIET_NAN or SIGNALING_NAN (mantissa is then the NaN payload)
"""


class Format(object):
    """One of the interchange formats:  HALF, SINGLE, DOUBLE"""
    def __init__(self, name, exponent_bits, fraction_bits, struct_float, struct_int):
        self.name = name
        self.exponent_bits = exponent_bits
        self.fraction_bits = fraction_bits
        self.struct_float = struct_float
        self.struct_int = struct_int
        self.size = struct.calcsize(struct_int)
        self.bias = (1 << (exponent_bits - 1)) - 1

    def __repr__(self):
        return "ieee." + self.name

    def to_bits(self, x):
        """Bit pattern of a float.  OverflowError if it is too big for a HALF or SINGLE."""
        return struct.unpack(self.struct_int, struct.pack(self.struct_float, x))[0]

    def from_bits(self, bits):
        return struct.unpack(self.struct_float, struct.pack(self.struct_int, bits))[0]

    def decompose_bits(self, bits):
        fraction_bits = self.fraction_bits
        negative = bool(bits >> (self.exponent_bits + fraction_bits))
        biased = (bits >> fraction_bits) & ((1 << self.exponent_bits) - 1)
        fraction = bits & ((1 << fraction_bits) - 1)
        if biased == (1 << self.exponent_bits) - 1:
            if fraction == 0:
                return Decomposition(negative, INFINITY, 0, 0)
            quiet_bit = 1 << (fraction_bits - 1)
            special = QUIET_NAN if fraction & quiet_bit else SIGNALING_NAN
            return Decomposition(negative, special, fraction & ~quiet_bit, 0)
        if biased == 0:
            mantissa = fraction
            exponent = 1 - self.bias - fraction_bits
        else:
            mantissa = fraction | (1 << fraction_bits)
            exponent = biased - self.bias - fraction_bits
        if mantissa == 0:
            return Decomposition(negative, None, 0, 0)
        trailing_zeros = (mantissa & -mantissa).bit_length() - 1
        return Decomposition(negative, None, mantissa >> trailing_zeros, exponent + trailing_zeros)

    def compose_nan(self, negative, payload, signaling):
        """Bit pattern of a NaN, payload cut to fit, e.g. DOUBLE.compose_nan(False, 1, True) is 0x7FF0000000000001"""
        fraction_bits = self.fraction_bits
        payload &= (1 << (fraction_bits - 1)) - 1
        if signaling:
            payload = payload or 1
        else:
            payload |= 1 << (fraction_bits - 1)
        sign = 1 << (self.exponent_bits + fraction_bits) if negative else 0
        return sign | (((1 << self.exponent_bits) - 1) << fraction_bits) | payload


HALF = Format('HALF', 5, 10, '>e', '>H')
SINGLE = Format('SINGLE', 8, 23, '>f', '>I')
DOUBLE = Format('DOUBLE', 11, 52, '>d', '>Q')

assert 0x3C00 == HALF.to_bits(1.0)
assert 0x3F800000 == SINGLE.to_bits(1.0)
assert 0x7FF0000000000001 == DOUBLE.compose_nan(False, 0, True)
assert 0x7FF8000000000000 == DOUBLE.compose_nan(False, 0, False)
assert Decomposition(True, None, 3, -1) == DOUBLE.decompose_bits(DOUBLE.to_bits(-1.5))
assert Decomposition(False, None, 1, -1074) == DOUBLE.decompose_bits(1)


def decompose_double(x):
    return DOUBLE.decompose_bits(DOUBLE.to_bits(x))


def round_to_single(x):
    """The binary32 value nearest a float, ties to even, as a float.  Infinity if it overflows."""
    try:
        return SINGLE.from_bits(SINGLE.to_bits(x))
    except OverflowError:
        return math.copysign(math.inf, x)


assert 0.10000000149011612 == round_to_single(0.1)
assert math.inf == round_to_single(1e300)


def fits_single(x):
    """Is the float exactly a binary32 value?  NaN and infinities fit."""
    return math.isnan(x) or round_to_single(x) == x


def fits_half(x):
    if math.isnan(x) or math.isinf(x):
        return True
    try:
        return HALF.from_bits(HALF.to_bits(x)) == x
    except OverflowError:
        return False


def shortest_single_repr(x):
    """Fewest decimal digits that read back as the same binary32, in repr() form, e.g. '0.1' not '0.10000000149011612'"""
    if math.isnan(x) or math.isinf(x) or x == 0:
        return repr(x)
    for digits in range(1, 10):
        text = '{:.{}e}'.format(x, digits - 1)
        if round_to_single(float(text)) == x:
            return repr(float(text))
    return repr(x)


assert '0.1' == shortest_single_repr(round_to_single(0.1))
assert '16777216.0' == shortest_single_repr(16777216.0)
assert '3.4028235e+38' == shortest_single_repr(round_to_single(3.4028234663852886e+38))
