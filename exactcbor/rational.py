"""
ExtendedRational is an exact fraction numerator / denominator, plus the same specials as the other numbers.

It is what CBOR tag 30 carries, and what CBORObject arithmetic falls back on
when a quotient has no finite decimal or binary expansion.
Fractions are kept as given, not reduced:  ExtendedRational(2, 4) renders as 2/4 yet equals 1/2.
"""

import fractions
import math

from .context import PrecisionContext, Rounding, TrapError
from .errors import ArithmeticRangeError
from .extended_decimal import ExtendedDecimal
from .extended_float import ExtendedFloat
from .radix import int_to_digits, type_name
from . import ieee
from . import numeric


INFINITY = 'Infinity'
QUIET_NAN = 'NaN'
SIGNALING_NAN = 'sNaN'


def only_factors(n, primes):
    """Is n a product of these primes only?  e.g. only_factors(40, (2, 5)) is True"""
    for prime in primes:
        while n % prime == 0:
            n //= prime
    return n == 1


assert only_factors(40, (2, 5))
assert not only_factors(6, (2, 5))
assert only_factors(1, (2,))


class ExtendedRational(object):
    """
    ExtendedRational(numerator, denominator=1) where the denominator is a nonzero int.

    The sign is folded into the value, so ExtendedRational(1, -3) is -1/3.
    """
    __slots__ = ('_negative', '_special', '_numerator', '_denominator')

    ZERO = None
    NEGATIVE_ZERO = None
    ONE = None
    TEN = None
    NAN = None
    SIGNALING_NAN = None
    POSITIVE_INFINITY = None
    NEGATIVE_INFINITY = None

    DECIMAL_DEFAULT = PrecisionContext(34, Rounding.HALF_EVEN)
    BINARY_DEFAULT = PrecisionContext(53, Rounding.HALF_EVEN)

    def __init__(self, numerator=0, denominator=1):
        if numerator is None or denominator is None:
            raise TypeError("numerator and denominator are required")
        if not isinstance(numerator, int) or not isinstance(denominator, int):
            raise self.ConstructorTypeError("ExtendedRational({}, {}) needs ints".format(
                type_name(numerator),
                type_name(denominator),
            ))
        if denominator == 0:
            raise self.ConstructorValueError("ExtendedRational denominator is zero")
        self._negative = (numerator < 0) != (denominator < 0) and numerator != 0
        self._special = None
        self._numerator = abs(int(numerator))
        self._denominator = abs(int(denominator))

    class ConstructorTypeError(TypeError):
        """e.g. ExtendedRational(1.5) or ExtendedRational('1/2')"""

    class ConstructorValueError(ValueError):
        """e.g. ExtendedRational(1, 0)"""

    @classmethod
    def internal_setup(cls):
        cls.ZERO = cls._new(False, None, 0, 1)
        cls.NEGATIVE_ZERO = cls._new(True, None, 0, 1)
        cls.ONE = cls._new(False, None, 1, 1)
        cls.TEN = cls._new(False, None, 10, 1)
        cls.NAN = cls._new(False, QUIET_NAN, 0, 1)
        cls.SIGNALING_NAN = cls._new(False, SIGNALING_NAN, 0, 1)
        cls.POSITIVE_INFINITY = cls._new(False, INFINITY, 0, 1)
        cls.NEGATIVE_INFINITY = cls._new(True, INFINITY, 0, 1)

    @classmethod
    def _new(cls, negative, special, numerator, denominator):
        rational = object.__new__(cls)
        rational._negative = negative
        rational._special = special
        rational._numerator = numerator
        rational._denominator = denominator
        return rational

    @classmethod
    def _infinity(cls, negative):
        return cls.NEGATIVE_INFINITY if negative else cls.POSITIVE_INFINITY

    def __getstate__(self):
        return self._negative, self._special, self._numerator, self._denominator

    def __setstate__(self, state):
        self._negative, self._special, self._numerator, self._denominator = state

    # Conversions in
    # --------------
    @classmethod
    def create(cls, numerator, denominator):
        return cls(numerator, denominator)

    @classmethod
    def from_int(cls, value):
        if value is None:
            raise TypeError("value is required")
        return cls(value, 1)

    @classmethod
    def from_fraction(cls, fraction):
        return cls(fraction.numerator, fraction.denominator)

    @classmethod
    def _from_parts(cls, negative, special, mantissa, exponent, radix):
        """Exact value of a decomposed number."""
        if special is not None:
            if special == INFINITY:
                return cls._infinity(negative)
            return cls._new(negative, special, 0, 1)
        if exponent >= 0:
            return cls._new(negative, None, mantissa * radix ** exponent, 1)
        return cls._new(negative, None, mantissa, radix ** -exponent)

    @classmethod
    def _from_radix_number(cls, number):
        if number is None:
            raise TypeError("A number is required, not None")
        if number.is_infinity():
            special = INFINITY
        elif number.is_signaling_nan():
            special = SIGNALING_NAN
        elif number.is_nan():
            special = QUIET_NAN
        else:
            special = None
        return cls._from_parts(number.is_negative(), special, number.unsigned_mantissa, number.exponent, number.RADIX)

    @classmethod
    def from_extended_decimal(cls, d):
        return cls._from_radix_number(d)

    @classmethod
    def from_extended_float(cls, binary):
        return cls._from_radix_number(binary)

    @classmethod
    def from_double(cls, x):
        if x is None:
            raise TypeError("from_double() needs a float, not None")
        parts = ieee.decompose_double(float(x))
        return cls._from_parts(parts.negative, parts.special, parts.mantissa, parts.exponent, 2)

    @classmethod
    def from_single(cls, x):
        if x is None:
            raise TypeError("from_single() needs a float, not None")
        return cls.from_extended_float(ExtendedFloat.from_single(x))

    # Queries
    # -------
    def is_nan(self):
        return self._special in (QUIET_NAN, SIGNALING_NAN)

    def is_quiet_nan(self):
        return self._special == QUIET_NAN

    def is_signaling_nan(self):
        return self._special == SIGNALING_NAN

    def is_infinity(self):
        return self._special == INFINITY

    def is_positive_infinity(self):
        return self.is_infinity() and not self._negative

    def is_negative_infinity(self):
        return self.is_infinity() and self._negative

    def is_finite(self):
        return self._special is None

    def is_negative(self):
        return self._negative

    def is_zero(self):
        return self._special is None and self._numerator == 0

    def is_integral(self):
        return self.is_finite() and self._numerator % self._denominator == 0

    @property
    def sign(self):
        if self.is_zero():
            return 0
        return -1 if self._negative else 1

    @property
    def numerator(self):
        return -self._numerator if self._negative else self._numerator

    @property
    def unsigned_numerator(self):
        return self._numerator

    @property
    def denominator(self):
        return self._denominator

    def _exact_parts(self):
        if self.is_nan():
            return numeric.ExactParts(numeric.NAN, self._negative, 0, 0, 0, 1)
        if self.is_infinity():
            return numeric.ExactParts(numeric.INFINITY, self._negative, 0, 0, 0, 1)
        return numeric.ExactParts(None, self._negative, self._numerator, 0, 0, self._denominator)

    # Comparison
    # ----------
    def compare_to(self, other):
        """-1, 0 or 1.  -Infinity < finite < +Infinity < NaN"""
        if other is None:
            return 1
        if isinstance(other, ExtendedRational) and self.is_finite() and other.is_finite():
            c = (self.sign > other.sign) - (self.sign < other.sign)
            if c != 0 or self.sign == 0:
                return c
            mine = self._numerator * other._denominator
            theirs = other._numerator * self._denominator
            return self.sign * ((mine > theirs) - (mine < theirs))
        return numeric.compare_exact(self, other)

    def compare_to_decimal(self, d):
        return numeric.compare_exact(self, d)

    def compare_to_binary(self, binary):
        return numeric.compare_exact(self, binary)

    def equals(self, other):
        """Same representation, e.g. 1/2 equals 1/2 but not 2/4"""
        return isinstance(other, ExtendedRational) and self.__getstate__() == other.__getstate__()

    def __eq__(self, other):
        try:
            return numeric.compare_exact(self, other) == 0
        except TypeError:
            return NotImplemented

    def __ne__(self, other):
        eq_result = self.__eq__(other)
        if eq_result is NotImplemented:
            return NotImplemented
        return not eq_result

    def _compared(self, other):
        try:
            return numeric.compare_exact(self, other)
        except TypeError:
            return None

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
        return numeric.hash_exact(self)

    def __bool__(self):
        return not self.is_zero()

    # Arithmetic
    # ----------
    # NOTE:  Exact, so no contexts.  A signaling NaN operand raises TrapError.
    def _coerce(self, other):
        if other is None:
            raise TypeError("An ExtendedRational operand is required, not None")
        if isinstance(other, ExtendedRational):
            return other
        if isinstance(other, int):
            return self.from_int(other)
        if isinstance(other, float):
            return self.from_double(other)
        if isinstance(other, fractions.Fraction):
            return self.from_fraction(other)
        if isinstance(other, (ExtendedDecimal, ExtendedFloat)):
            return self._from_radix_number(other)
        raise TypeError("Cannot make an ExtendedRational from a " + type_name(other))

    def _nan_operands(self, other):
        """NaN result for NaN operands, or None."""
        for operand in (self, other):
            if operand is not None and operand.is_signaling_nan():
                raise TrapError(PrecisionContext.FLAG_INVALID, None, self.NAN, "Signaling NaN operand")
        if self.is_nan() or (other is not None and other.is_nan()):
            return self.NAN
        return None

    def add(self, other):
        return self._add(self._coerce(other), False)

    def subtract(self, other):
        return self._add(self._coerce(other), True)

    def _add(self, other, negate_other):
        nan = self._nan_operands(other)
        if nan is not None:
            return nan
        other_negative = other._negative != negate_other
        if self.is_infinity():
            if other.is_infinity() and self._negative != other_negative:
                return self.NAN
            return self
        if other.is_infinity():
            return self._infinity(other_negative)
        mine = self._numerator * other._denominator
        theirs = other._numerator * self._denominator
        total = (-mine if self._negative else mine) + (-theirs if other_negative else theirs)
        denominator = self._denominator * other._denominator
        if total == 0:
            return self._new(self._negative and other_negative, None, 0, denominator)
        return self._new(total < 0, None, abs(total), denominator)

    def multiply(self, other):
        other = self._coerce(other)
        nan = self._nan_operands(other)
        if nan is not None:
            return nan
        negative = self._negative != other._negative
        if self.is_infinity() or other.is_infinity():
            if self.is_zero() or other.is_zero():
                return self.NAN
            return self._infinity(negative)
        return self._new(negative, None, self._numerator * other._numerator, self._denominator * other._denominator)

    def divide(self, other):
        """Exact quotient.  x/0 is a signed infinity, 0/0 and Infinity/Infinity are NaN."""
        other = self._coerce(other)
        nan = self._nan_operands(other)
        if nan is not None:
            return nan
        negative = self._negative != other._negative
        if self.is_infinity():
            return self.NAN if other.is_infinity() else self._infinity(negative)
        if other.is_infinity():
            return self._new(negative, None, 0, 1)
        if other._numerator == 0:
            return self.NAN if self._numerator == 0 else self._infinity(negative)
        return self._new(negative, None, self._numerator * other._denominator, self._denominator * other._numerator)

    def remainder(self, other):
        """self - other * trunc(self / other), with the sign of self."""
        other = self._coerce(other)
        nan = self._nan_operands(other)
        if nan is not None:
            return nan
        if self.is_infinity() or other.is_zero():
            return self.NAN
        if other.is_infinity():
            return self
        mine = self._numerator * other._denominator
        theirs = other._numerator * self._denominator
        return self._new(self._negative, None, mine % theirs, self._denominator * other._denominator)

    def negate(self):
        if self.is_nan():
            return self
        return self._new(not self._negative, self._special, self._numerator, self._denominator)

    def abs(self):
        if not self._negative or self.is_nan():
            return self
        return self._new(False, self._special, self._numerator, self._denominator)

    def _binary_op(self, method, other, reflected):
        try:
            other = self._coerce(other)
        except TypeError:
            return NotImplemented
        if reflected:
            return method(other, self)
        return method(self, other)

    def __pos__(self): return self
    def __neg__(self): return self.negate()
    def __abs__(self): return self.abs()

    def __add__(self, other): return self._binary_op(ExtendedRational.add, other, False)
    def __radd__(self, other): return self._binary_op(ExtendedRational.add, other, True)
    def __sub__(self, other): return self._binary_op(ExtendedRational.subtract, other, False)
    def __rsub__(self, other): return self._binary_op(ExtendedRational.subtract, other, True)
    def __mul__(self, other): return self._binary_op(ExtendedRational.multiply, other, False)
    def __rmul__(self, other): return self._binary_op(ExtendedRational.multiply, other, True)
    def __truediv__(self, other): return self._binary_op(ExtendedRational.divide, other, False)
    def __rtruediv__(self, other): return self._binary_op(ExtendedRational.divide, other, True)
    def __mod__(self, other): return self._binary_op(ExtendedRational.remainder, other, False)
    def __rmod__(self, other): return self._binary_op(ExtendedRational.remainder, other, True)

    # Conversions out
    # ---------------
    def _to_radix_number(self, cls, context, default_context, primes):
        if self.is_nan():
            return cls.create_nan(0, signaling=self.is_signaling_nan(), negative=self._negative)
        if self.is_infinity():
            return cls.NEGATIVE_INFINITY if self._negative else cls.POSITIVE_INFINITY
        numerator = cls._finite(self._negative, self._numerator, 0)
        denominator = cls._finite(False, self._denominator, 0)
        if context is None:
            reduced = self._denominator // math.gcd(self._numerator, self._denominator)
            if not only_factors(reduced, primes):
                context = default_context
        return numerator.divide(denominator, context)

    def to_extended_decimal(self, context=None):
        """Exact when the decimal expansion terminates, else rounded to 34 digits, or to the context."""
        return self._to_radix_number(ExtendedDecimal, context, self.DECIMAL_DEFAULT, (2, 5))

    def to_extended_float(self, context=None):
        """Exact when the denominator is a power of two, else rounded to 53 bits, or to the context."""
        return self._to_radix_number(ExtendedFloat, context, self.BINARY_DEFAULT, (2,))

    def to_double(self):
        return self.to_extended_float(PrecisionContext.BINARY64).to_double()

    def to_single(self):
        return self.to_extended_float(PrecisionContext.BINARY32).to_single()

    def to_fraction(self):
        """Reduced fractions.Fraction of the same value.  ArithmeticRangeError for infinity and NaN."""
        if not self.is_finite():
            raise ArithmeticRangeError("{} has no Fraction value".format(self))
        return fractions.Fraction(self.numerator, self._denominator)

    def to_big_integer(self):
        """Truncate toward zero.  ArithmeticRangeError for infinity and NaN."""
        if not self.is_finite():
            raise ArithmeticRangeError("{} has no integer value".format(self))
        magnitude = self._numerator // self._denominator
        return -magnitude if self._negative else magnitude

    def to_big_integer_exact(self):
        if not self.is_integral():
            raise ArithmeticRangeError("{} is not an integer".format(self))
        return self.to_big_integer()

    def __int__(self):
        return self.to_big_integer()

    def __float__(self):
        return self.to_double()

    def __str__(self):
        sign = '-' if self._negative else ''
        if self._special is not None:
            return sign + self._special
        return sign + int_to_digits(self._numerator) + "/" + int_to_digits(self._denominator)

    def __repr__(self):
        if self._special is not None:
            return "ExtendedRational.{}".format({
                INFINITY: 'NEGATIVE_INFINITY' if self._negative else 'POSITIVE_INFINITY',
                QUIET_NAN: 'NAN',
                SIGNALING_NAN: 'SIGNALING_NAN',
            }[self._special])
        return "ExtendedRational({}, {})".format(self.numerator, self._denominator)


ExtendedRational.internal_setup()
