"""
RadixNumber is the arithmetic engine shared by ExtendedDecimal (radix 10) and ExtendedFloat (radix 2).

    value = (-1)**negative * mantissa * RADIX**exponent

The mantissa is never negative.  The sign is a separate flag, so -0 is representable.
Besides finite numbers there are +Infinity, -Infinity, quiet NaN and signaling NaN.
A NaN may carry a diagnostic payload in its mantissa.

Every arithmetic method takes an optional PrecisionContext.  Without one the arithmetic is exact.
A signaling NaN operand always raises TrapError.  Other invalid operations (Infinity - Infinity)
return NaN and record FLAG_INVALID, raising only if the context traps it.
"""

import math

from .context import PrecisionContext, Rounding, TrapError, add_flags, trappable, trigger_traps
from .errors import ArithmeticRangeError, InvalidOperationError
from . import fixed_point
from . import numeric


_NEGATIVE = 0x01
_INFINITY = 0x02
_QUIET_NAN = 0x04
_SIGNALING_NAN = 0x08
_NAN = _QUIET_NAN | _SIGNALING_NAN
_SPECIAL = _INFINITY | _NAN

_LONG_DIGITS = 4000   # int() and str() refuse more than sys.int_info.default_max_str_digits


def digit_count(n, radix=10):
    """Number of base-radix digits in a non-negative integer.  Zero has one digit."""
    if radix == 2:
        return max(n.bit_length(), 1)
    if n < 10:
        return 1
    count = (n.bit_length() - 1) * 30102 // 100000 + 1   # never more than the true count
    power = 10 ** count
    while n >= power:
        count += 1
        power *= 10
    return count


assert 1 == digit_count(0)
assert 1 == digit_count(9)
assert 2 == digit_count(10)
assert 100 == digit_count(10**100 - 1)
assert 101 == digit_count(10**100)
assert 4 == digit_count(8, 2)


def int_to_digits(n):
    """Decimal digits of a non-negative integer of any size."""
    if n.bit_length() <= 13000:
        return str(n)
    half = digit_count(n) // 2
    high, low = divmod(n, 10 ** half)
    return int_to_digits(high) + int_to_digits(low).zfill(half)


assert '0' == int_to_digits(0)
assert '1' + '0' * 5000 == int_to_digits(10**5000)


def digits_to_int(digits):
    """Integer value of a string of ASCII decimal digits of any length."""
    if len(digits) <= _LONG_DIGITS:
        return int(digits)
    half = len(digits) // 2
    return digits_to_int(digits[:-half]) * 10 ** half + digits_to_int(digits[-half:])


assert 10**5000 == digits_to_int('1' + '0' * 5000)
assert 42 == digits_to_int('0042')


def rounds_away(kept, half_comparison, negative, rounding, radix):
    """
    Should the kept digits be incremented, when something nonzero was discarded?

    half_comparison - how the discarded part compares with half a unit of the last kept digit:
                      -1 below half, 0 exactly half, +1 above half
    """
    if rounding == Rounding.UP:
        return True
    if rounding == Rounding.DOWN or rounding == Rounding.UNNECESSARY:
        return False
    if rounding == Rounding.CEILING:
        return not negative
    if rounding == Rounding.FLOOR:
        return negative
    if rounding == Rounding.HALF_UP:
        return half_comparison >= 0
    if rounding == Rounding.HALF_DOWN:
        return half_comparison > 0
    if rounding == Rounding.HALF_EVEN:
        return half_comparison > 0 or (half_comparison == 0 and kept % 2 == 1)
    if rounding == Rounding.ZERO_FIVE_UP:
        last_digit = kept % radix
        return last_digit == 0 or (radix == 10 and last_digit == 5)
    raise ValueError("Unknown rounding {!r}".format(rounding))


assert True is rounds_away(12, 0, False, Rounding.HALF_UP, 10)
assert False is rounds_away(12, 0, False, Rounding.HALF_EVEN, 10)
assert True is rounds_away(13, 0, False, Rounding.HALF_EVEN, 10)
assert True is rounds_away(15, -1, False, Rounding.ZERO_FIVE_UP, 10)


def divide_rounded(numerator, denominator, negative, rounding, radix):
    """Quotient of non-negative integers, rounded to an integer.  Returns (quotient, inexact)."""
    quotient, remainder = divmod(numerator, denominator)
    if remainder == 0:
        return quotient, False
    twice = 2 * remainder
    half_comparison = (twice > denominator) - (twice < denominator)
    if rounds_away(quotient, half_comparison, negative, rounding, radix):
        quotient += 1
    return quotient, True


assert (2, True) == divide_rounded(5, 2, False, Rounding.HALF_EVEN, 10)
assert (3, True) == divide_rounded(5, 2, False, Rounding.HALF_UP, 10)


def shift_right_rounded(mantissa, shift, negative, rounding, radix):
    """Drop the last shift digits of a mantissa, rounding.  Returns (mantissa, inexact)."""
    if shift <= 0 or mantissa == 0:
        return mantissa, False
    if shift > digit_count(mantissa, radix):
        # NOTE:  Every digit goes, and together they are less than half a unit.
        #        Avoids computing radix**shift for enormous shifts.
        return (1 if rounds_away(0, -1, negative, rounding, radix) else 0), True
    return divide_rounded(mantissa, radix ** shift, negative, rounding, radix)


assert (12, True) == shift_right_rounded(1250, 2, False, Rounding.HALF_EVEN, 10)
assert (14, True) == shift_right_rounded(1350, 2, False, Rounding.HALF_EVEN, 10)
assert (12, False) == shift_right_rounded(1200, 2, False, Rounding.HALF_EVEN, 10)
assert (1, True) == shift_right_rounded(7, 10**9, False, Rounding.UP, 10)
assert (3, True) == shift_right_rounded(0b1011, 2, False, Rounding.HALF_EVEN, 2)


def type_name(x):
    return type(x).__name__


class RadixNumber(object):
    """
    An arbitrary precision floating point number in base RADIX.

    Instances are immutable.  Subclasses set RADIX and call internal_setup().

    RadixNumber(content, exponent=0) where content is:
        int                    mantissa, e.g. ExtendedDecimal(15, -1) is 1.5
        str                    ExtendedDecimal('1.5')
        float                  exact value of the double, ExtendedDecimal(0.5)
        another RadixNumber    exact conversion
    """
    RADIX = None

    __slots__ = ('_mantissa', '_exponent', '_flags')

    ZERO = None
    NEGATIVE_ZERO = None
    ONE = None
    TEN = None
    NAN = None
    SIGNALING_NAN = None
    POSITIVE_INFINITY = None
    NEGATIVE_INFINITY = None

    def __init__(self, content=0, exponent=0):
        if content is None:
            raise self.ConstructorTypeError("{}(None) is not supported".format(type_name(self)))
        if not isinstance(exponent, int):
            raise self.ConstructorTypeError("exponent must be an int, not a " + type_name(exponent))
        if isinstance(content, int):
            other = self.create(content, exponent)
        elif exponent != 0:
            raise self.ConstructorValueError("An exponent only goes with an int mantissa")
        elif isinstance(content, str):
            other = self.from_string(content)
        elif isinstance(content, float):
            other = self.from_double(content)
        elif isinstance(content, type(self)):
            other = content
        else:
            other = self._from_other(content)
            if other is None:
                raise self.ConstructorTypeError("{outer}({inner}) is not supported".format(
                    outer=type_name(self),
                    inner=type_name(content),
                ))
        self._mantissa = other._mantissa
        self._exponent = other._exponent
        self._flags = other._flags

    class ConstructorTypeError(TypeError):
        """e.g. ExtendedDecimal(object()) or ExtendedDecimal([])"""

    class ConstructorValueError(ValueError):
        """e.g. ExtendedDecimal('1.5', 3) or ExtendedDecimal.create_nan(-1)"""

    @classmethod
    def _from_other(cls, content):
        """Exact conversion from another numeric type, or None if unsupported."""
        return None

    def __getstate__(self):
        return self._mantissa, self._exponent, self._flags

    def __setstate__(self, state):
        self._mantissa, self._exponent, self._flags = state

    @classmethod
    def internal_setup(cls):
        """Initialize the constants after the subclass is otherwise defined."""
        cls.ZERO = cls._new(0, 0, 0)
        cls.NEGATIVE_ZERO = cls._new(0, 0, _NEGATIVE)
        cls.ONE = cls._new(1, 0, 0)
        cls.TEN = cls._new(10, 0, 0)
        cls.NAN = cls._new(0, 0, _QUIET_NAN)
        cls.SIGNALING_NAN = cls._new(0, 0, _SIGNALING_NAN)
        cls.POSITIVE_INFINITY = cls._new(0, 0, _INFINITY)
        cls.NEGATIVE_INFINITY = cls._new(0, 0, _INFINITY | _NEGATIVE)

    @classmethod
    def _new(cls, mantissa, exponent, flags):
        number = object.__new__(cls)
        number._mantissa = mantissa
        number._exponent = exponent
        number._flags = flags
        return number

    @classmethod
    def _finite(cls, negative, mantissa, exponent):
        return cls._new(mantissa, exponent, _NEGATIVE if negative else 0)

    @classmethod
    def _infinity(cls, negative):
        return cls.NEGATIVE_INFINITY if negative else cls.POSITIVE_INFINITY

    @classmethod
    def create(cls, mantissa, exponent=0):
        """A finite number from a signed mantissa and an exponent."""
        if mantissa is None or exponent is None:
            raise TypeError("mantissa and exponent are required")
        if not isinstance(mantissa, int) or not isinstance(exponent, int):
            raise cls.ConstructorTypeError("mantissa and exponent must be ints")
        return cls._finite(mantissa < 0, abs(int(mantissa)), int(exponent))

    @classmethod
    def create_nan(cls, payload=0, signaling=False, negative=False, context=None):
        if payload is None:
            raise TypeError("payload is required")
        if payload < 0:
            raise cls.ConstructorValueError("NaN payload {} is negative".format(payload))
        flags = (_SIGNALING_NAN if signaling else _QUIET_NAN) | (_NEGATIVE if negative else 0)
        return cls._new(payload, 0, flags)._fit_payload(context)

    @classmethod
    def from_int(cls, value):
        if value is None:
            raise TypeError("value is required")
        return cls.create(value, 0)

    # Queries
    # -------
    def is_nan(self):
        return bool(self._flags & _NAN)

    def is_quiet_nan(self):
        return bool(self._flags & _QUIET_NAN)

    def is_signaling_nan(self):
        return bool(self._flags & _SIGNALING_NAN)

    def is_infinity(self):
        return bool(self._flags & _INFINITY)

    def is_positive_infinity(self):
        return self._flags & (_INFINITY | _NEGATIVE) == _INFINITY

    def is_negative_infinity(self):
        return self._flags & (_INFINITY | _NEGATIVE) == _INFINITY | _NEGATIVE

    def is_negative(self):
        return bool(self._flags & _NEGATIVE)

    def is_finite(self):
        return not self._flags & _SPECIAL

    def is_zero(self):
        return not self._flags & _SPECIAL and self._mantissa == 0

    def is_integral(self):
        if not self.is_finite():
            return False
        if self._exponent >= 0 or self._mantissa == 0:
            return True
        if -self._exponent > digit_count(self._mantissa, self.RADIX):
            return False
        return self._mantissa % self.RADIX ** -self._exponent == 0

    @property
    def sign(self):
        """-1, 0 or 1.  Zero for zeros only, so a NaN is -1 or 1."""
        if self.is_zero():
            return 0
        return -1 if self._flags & _NEGATIVE else 1

    @property
    def mantissa(self):
        return -self._mantissa if self._flags & _NEGATIVE else self._mantissa

    @property
    def unsigned_mantissa(self):
        return self._mantissa

    @property
    def exponent(self):
        return self._exponent

    def _adjusted(self):
        return self._exponent + digit_count(self._mantissa, self.RADIX) - 1

    def equals(self, other):
        """Same representation, e.g. 1.5 equals 1.5 but not 1.50"""
        return (
            isinstance(other, RadixNumber) and
            other.RADIX == self.RADIX and
            other._flags == self._flags and
            other._mantissa == self._mantissa and
            other._exponent == self._exponent
        )

    def _exact_parts(self):
        negative = bool(self._flags & _NEGATIVE)
        if self._flags & _NAN:
            return numeric.ExactParts(numeric.NAN, negative, 0, 0, 0, 1)
        if self._flags & _INFINITY:
            return numeric.ExactParts(numeric.INFINITY, negative, 0, 0, 0, 1)
        if self.RADIX == 2:
            return numeric.ExactParts(None, negative, self._mantissa, self._exponent, 0, 1)
        return numeric.ExactParts(None, negative, self._mantissa, 0, self._exponent, 1)

    # Comparison
    # ----------
    def compare_to(self, other):
        """-1, 0 or 1.  Total numeric order:  -Infinity < finite < +Infinity < NaN"""
        if other is None:
            return 1
        if isinstance(other, type(self)):
            return self._compare(other)
        return numeric.compare_exact(self, other)

    def _compare(self, other):
        if self._flags & _NAN:
            return 0 if other._flags & _NAN else 1
        if other._flags & _NAN:
            return -1
        self_sign = self.sign
        other_sign = other.sign
        if self_sign != other_sign:
            return 1 if self_sign > other_sign else -1
        if self_sign == 0:
            return 0
        if self._flags & _INFINITY:
            return 0 if other._flags & _INFINITY else self_sign
        if other._flags & _INFINITY:
            return -self_sign
        return self_sign * self._compare_magnitude(other)

    def _compare_magnitude(self, other):
        """Compare nonzero finite magnitudes, adjusted exponents first."""
        self_adjusted = self._adjusted()
        other_adjusted = other._adjusted()
        if self_adjusted != other_adjusted:
            return 1 if self_adjusted > other_adjusted else -1
        exponent = min(self._exponent, other._exponent)
        mine = self._mantissa * self.RADIX ** (self._exponent - exponent)
        theirs = other._mantissa * self.RADIX ** (other._exponent - exponent)
        return (mine > theirs) - (mine < theirs)

    def _compare_total(self, other):
        """Tie break for equal values:  -0 < +0, and 1.50 < 1.5 (reversed for negatives)."""
        c = self._compare(other)
        if c != 0 or self._flags & _SPECIAL or other._flags & _SPECIAL:
            return c
        if self.is_negative() != other.is_negative():
            return -1 if self.is_negative() else 1
        c = (self._exponent > other._exponent) - (self._exponent < other._exponent)
        return -c if self.is_negative() else c

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

    # Rounding
    # --------
    @classmethod
    def _precision_of(cls, context):
        """(precision in digits, largest mantissa or None) for a context."""
        precision = context.precision
        if precision and context.is_precision_in_bits and cls.RADIX != 2:
            max_mantissa = (1 << precision) - 1
            return digit_count(max_mantissa, cls.RADIX), max_mantissa
        return precision, None

    @classmethod
    def _invalid(cls, context):
        add_flags(context, PrecisionContext.FLAG_INVALID)
        return cls.NAN

    @classmethod
    def _overflow(cls, negative, context, precision, max_mantissa):
        add_flags(context, PrecisionContext.FLAG_OVERFLOW | PrecisionContext.FLAG_INEXACT | PrecisionContext.FLAG_ROUNDED)
        rounding = context.rounding
        if rounding == Rounding.UNNECESSARY:
            return cls._invalid(context)
        if precision and (
            rounding in (Rounding.DOWN, Rounding.ZERO_FIVE_UP) or
            (rounding == Rounding.CEILING and negative) or
            (rounding == Rounding.FLOOR and not negative)
        ):
            largest = max_mantissa if max_mantissa is not None else cls.RADIX ** precision - 1
            return cls._finite(negative, largest, context.exponent_max - precision + 1)
        return cls._infinity(negative)

    @classmethod
    def _discard_digits(cls, negative, mantissa, shift, rounding, precision, max_mantissa):
        """
        Round away the last shift digits, more if the mantissa is still too big.

        Returns (mantissa, digits discarded, inexact), or None when rounding is needed but forbidden.
        """
        radix = cls.RADIX
        shift = max(shift, 0)
        while True:
            kept, inexact = shift_right_rounded(mantissa, shift, negative, rounding, radix)
            if inexact and rounding == Rounding.UNNECESSARY:
                return None
            if precision and kept == radix ** precision:
                # NOTE:  Rounding carried into a new digit, e.g. 9.99 to 10.0
                kept //= radix
                shift += 1
            if max_mantissa is not None and kept > max_mantissa:
                shift += 1
                continue
            return kept, shift, inexact

    @classmethod
    def _round(cls, negative, mantissa, exponent, context, sticky=False):
        """
        The number nearest (-1)**negative * mantissa * RADIX**exponent that the context allows.

        sticky - the true magnitude is a little more than mantissa (less than one unit in its last digit)
                 The caller must supply more digits than the precision keeps.
        """
        radix = cls.RADIX
        if sticky:
            mantissa = mantissa * radix * radix + 1
            exponent -= 2
        if context is None:
            return cls._finite(negative, mantissa, exponent)
        precision, max_mantissa = cls._precision_of(context)
        F = PrecisionContext
        if not context.has_exponent_range:
            if precision == 0 or mantissa == 0:
                return cls._finite(negative, mantissa, exponent)
            rounded = cls._discard_digits(
                negative,
                mantissa,
                digit_count(mantissa, radix) - precision,
                context.rounding,
                precision,
                max_mantissa,
            )
            if rounded is None:
                return cls._invalid(context)
            mantissa, shift, inexact = rounded
            add_flags(context, (F.FLAG_ROUNDED if shift else 0) | (F.FLAG_INEXACT if inexact else 0))
            return cls._finite(negative, mantissa, exponent + shift)

        exponent_min = context.exponent_min
        exponent_max = context.exponent_max
        if precision == 0:
            if mantissa == 0:
                if exponent > exponent_max:
                    add_flags(context, F.FLAG_CLAMPED)
                    exponent = exponent_max
                return cls._finite(negative, 0, exponent)
            adjusted = exponent + digit_count(mantissa, radix) - 1
            if adjusted > exponent_max:
                return cls._overflow(negative, context, 0, None)
            if adjusted < exponent_min:
                add_flags(context, F.FLAG_SUBNORMAL)
            return cls._finite(negative, mantissa, exponent)

        e_tiny = exponent_min - precision + 1
        e_top = exponent_max - precision + 1
        if mantissa == 0:
            highest = e_top if context.clamp_normal_exponents else exponent_max
            clamped = min(max(exponent, e_tiny), highest)
            if clamped != exponent:
                add_flags(context, F.FLAG_CLAMPED)
            return cls._finite(negative, 0, clamped)

        target = exponent + digit_count(mantissa, radix) - precision
        if target > e_top:
            return cls._overflow(negative, context, precision, max_mantissa)
        subnormal = target < e_tiny
        if subnormal:
            target = e_tiny
        flags = 0
        inexact = False
        if target > exponent or max_mantissa is not None:
            rounded = cls._discard_digits(
                negative,
                mantissa,
                target - exponent,
                context.rounding,
                precision,
                max_mantissa,
            )
            if rounded is None:
                return cls._invalid(context)
            mantissa, shift, inexact = rounded
            if shift:
                flags |= F.FLAG_ROUNDED
                exponent += shift
            if inexact:
                flags |= F.FLAG_INEXACT
            if exponent > e_top and mantissa != 0:
                add_flags(context, flags)
                return cls._overflow(negative, context, precision, max_mantissa)
        if subnormal:
            flags |= F.FLAG_SUBNORMAL
            if inexact:
                flags |= F.FLAG_UNDERFLOW
        if mantissa == 0:
            flags |= F.FLAG_CLAMPED
        if context.clamp_normal_exponents and exponent > e_top:
            mantissa *= radix ** (exponent - e_top)
            exponent = e_top
            flags |= F.FLAG_CLAMPED
            if max_mantissa is not None and mantissa > max_mantissa:
                add_flags(context, flags)
                return cls._overflow(negative, context, precision, max_mantissa)
        add_flags(context, flags)
        return cls._finite(negative, mantissa, exponent)

    def _fit_payload(self, context, flags=None):
        """This NaN, with its payload cut to what the context's precision can hold."""
        if flags is None:
            flags = self._flags
        payload = self._mantissa
        if context is not None and context.precision:
            precision, _ = self._precision_of(context)
            limit = precision - (1 if context.clamp_normal_exponents else 0)
            if digit_count(payload, self.RADIX) > limit:
                payload %= self.RADIX ** max(limit, 0)
        if payload == self._mantissa and flags == self._flags:
            return self
        return self._new(payload, 0, flags)

    def _quieted(self, context=None):
        return self._fit_payload(context, _QUIET_NAN | (self._flags & _NEGATIVE))

    def _check_nans(self, other, context):
        """NaN result for NaN operands, or None.  A signaling NaN raises TrapError."""
        for operand in (self, other):
            if operand is not None and operand._flags & _SIGNALING_NAN:
                add_flags(context, PrecisionContext.FLAG_INVALID)
                raise TrapError(
                    PrecisionContext.FLAG_INVALID,
                    context,
                    operand._quieted(context),
                    "Signaling NaN operand " + operand.to_string(),
                )
        if self._flags & _QUIET_NAN:
            return self._quieted(context)
        if other is not None and other._flags & _QUIET_NAN:
            return other._quieted(context)
        return None

    def _coerce(self, other):
        if other is None:
            raise TypeError("A {} operand is required, not None".format(type_name(self)))
        if isinstance(other, type(self)):
            return other
        return type(self)(other)

    # Arithmetic
    # ----------
    # NOTE:  Each public method works on trappable(context), then trigger_traps() merges
    #        the flags it raised into the caller's context and raises TrapError if trapped.

    def add(self, other, context=None):
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._add(other, working, False), working, context)

    def subtract(self, other, context=None):
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._add(other, working, True), working, context)

    def _add(self, other, context, negate_other):
        nan = self._check_nans(other, context)
        if nan is not None:
            return nan
        cls = type(self)
        radix = self.RADIX
        self_negative = self.is_negative()
        other_negative = other.is_negative() != negate_other
        if self._flags & _INFINITY:
            if other._flags & _INFINITY and self_negative != other_negative:
                return self._invalid(context)
            return self
        if other._flags & _INFINITY:
            return cls._infinity(other_negative)
        rounding = context.rounding if context is not None else Rounding.HALF_EVEN
        precision = self._precision_of(context)[0] if context is not None else 0
        exponent = min(self._exponent, other._exponent)
        if self._mantissa == 0 and other._mantissa == 0:
            negative = (self_negative and other_negative) or (
                self_negative != other_negative and rounding == Rounding.FLOOR
            )
            return cls._round(negative, 0, exponent, context)
        if self._mantissa == 0 or other._mantissa == 0:
            if self._mantissa == 0:
                negative, mantissa, its_exponent = other_negative, other._mantissa, other._exponent
            else:
                negative, mantissa, its_exponent = self_negative, self._mantissa, self._exponent
            if precision:
                exponent = max(exponent, its_exponent - precision - 1)
            return cls._round(negative, mantissa * radix ** (its_exponent - exponent), exponent, context)

        big = (self_negative, self._mantissa, self._exponent)
        small = (other_negative, other._mantissa, other._exponent)
        if big[2] < small[2]:
            big, small = small, big
        if precision:
            # NOTE:  An operand far below the rounding position only matters as a nonzero sticky digit,
            #        so replace it with a 1 just below the kept digits.  E.g. 1E+999999999 + 1
            lowest = big[2] + min(-1, digit_count(big[1], radix) - precision - 2)
            if digit_count(small[1], radix) + small[2] - 1 < lowest:
                small = (small[0], 1, lowest)
        exponent = min(big[2], small[2])
        total = 0
        for negative, mantissa, its_exponent in (big, small):
            scaled = mantissa * radix ** (its_exponent - exponent)
            total += -scaled if negative else scaled
        if total == 0:
            return cls._round(rounding == Rounding.FLOOR, 0, exponent, context)
        return cls._round(total < 0, abs(total), exponent, context)

    def multiply(self, other, context=None):
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._multiply(other, working), working, context)

    def _multiply(self, other, context):
        nan = self._check_nans(other, context)
        if nan is not None:
            return nan
        negative = self.is_negative() != other.is_negative()
        if self._flags & _INFINITY or other._flags & _INFINITY:
            if self.is_zero() or other.is_zero():
                return self._invalid(context)
            return self._infinity(negative)
        return self._round(negative, self._mantissa * other._mantissa, self._exponent + other._exponent, context)

    def multiply_and_add(self, multiplicand, augend, context=None):
        """self * multiplicand + augend, rounded once."""
        multiplicand = self._coerce(multiplicand)
        augend = self._coerce(augend)
        working = trappable(context)
        augend._check_nans(None, working)
        product = self._multiply(multiplicand, None)
        if product.is_nan() and not self.is_nan() and not multiplicand.is_nan():
            return trigger_traps(self._invalid(working), working, context)
        return trigger_traps(product._add(augend, working, False), working, context)

    def divide(self, other, context=None):
        """
        Quotient rounded to the context.

        Without a context (or with unlimited precision) the quotient must be exact:
        ONE.divide(3) raises TrapError(FLAG_INVALID) for the nonterminating expansion.
        """
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._divide(other, working), working, context)

    def _divide_specials(self, other, context, zero_exponent):
        """Result of a division involving NaN, infinity or zero divisor, or None."""
        nan = self._check_nans(other, context)
        if nan is not None:
            return nan
        negative = self.is_negative() != other.is_negative()
        if self._flags & _INFINITY:
            if other._flags & _INFINITY:
                return self._invalid(context)
            return self._infinity(negative)
        if other._flags & _INFINITY:
            if context is not None and context.has_exponent_range and context.precision:
                add_flags(context, PrecisionContext.FLAG_CLAMPED)
                zero_exponent = context.etiny()
            return self._finite(negative, 0, zero_exponent)
        if other._mantissa == 0:
            if self._mantissa == 0:
                return self._invalid(context)
            add_flags(context, PrecisionContext.FLAG_DIVIDE_BY_ZERO)
            return self._infinity(negative)
        return None

    def _divide(self, other, context):
        special = self._divide_specials(other, context, 0)
        if special is not None:
            return special
        cls = type(self)
        radix = self.RADIX
        negative = self.is_negative() != other.is_negative()
        ideal_exponent = self._exponent - other._exponent
        if self._mantissa == 0:
            return cls._round(negative, 0, ideal_exponent, context)
        precision = self._precision_of(context)[0] if context is not None else 0
        if precision == 0:
            mantissa, exponent = self._exact_quotient(other._mantissa, context)
            return cls._round(negative, mantissa, ideal_exponent + exponent, context)
        shift = digit_count(other._mantissa, radix) - digit_count(self._mantissa, radix) + precision + 1
        exponent = ideal_exponent - shift
        if shift >= 0:
            quotient, remainder = divmod(self._mantissa * radix ** shift, other._mantissa)
        else:
            quotient, remainder = divmod(self._mantissa, other._mantissa * radix ** -shift)
        if remainder:
            return cls._round(negative, quotient, exponent, context, sticky=True)
        while exponent < ideal_exponent and quotient % radix == 0:
            quotient //= radix
            exponent += 1
        return cls._round(negative, quotient, exponent, context)

    def _exact_quotient(self, divisor, context):
        """
        Exact self._mantissa / divisor as (mantissa, exponent offset).

        Raises TrapError(FLAG_INVALID) when the quotient has no finite expansion in this radix.
        """
        numerator = self._mantissa
        common = math.gcd(numerator, divisor)
        numerator //= common
        divisor //= common
        twos = (divisor & -divisor).bit_length() - 1
        divisor >>= twos
        if self.RADIX == 2:
            digits = twos
        else:
            fives = 0
            while divisor % 5 == 0:
                divisor //= 5
                fives += 1
            digits = max(twos, fives)
            numerator *= 2 ** (digits - twos) * 5 ** (digits - fives)
        if divisor != 1:
            add_flags(context, PrecisionContext.FLAG_INVALID)
            raise TrapError(PrecisionContext.FLAG_INVALID, context, self.NAN, "Nonterminating expansion")
        return numerator, -digits

    def divide_to_exponent(self, other, exponent, context=None):
        """Quotient rounded to exactly the given exponent, using the context's rounding."""
        other = self._coerce(other)
        if exponent is None:
            raise TypeError("exponent is required")
        working = trappable(context)
        return trigger_traps(self._divide_to_exponent(other, exponent, working), working, context)

    def _divide_to_exponent(self, other, exponent, context):
        special = self._divide_specials(other, context, exponent)
        if special is not None:
            return special
        if context is not None and not context.exponent_within_range(exponent):
            return self._invalid(context)
        radix = self.RADIX
        negative = self.is_negative() != other.is_negative()
        rounding = context.rounding if context is not None else Rounding.HALF_EVEN
        scale = self._exponent - other._exponent - exponent
        if scale >= 0:
            numerator, denominator = self._mantissa * radix ** scale, other._mantissa
        else:
            numerator, denominator = self._mantissa, other._mantissa * radix ** -scale
        quotient, inexact = divide_rounded(numerator, denominator, negative, rounding, radix)
        if inexact:
            if rounding == Rounding.UNNECESSARY:
                return self._invalid(context)
            add_flags(context, PrecisionContext.FLAG_INEXACT | PrecisionContext.FLAG_ROUNDED)
        if context is not None:
            precision, max_mantissa = self._precision_of(context)
            if precision and digit_count(quotient, radix) > precision:
                return self._invalid(context)
            if max_mantissa is not None and quotient > max_mantissa:
                return self._invalid(context)
        return self._finite(negative, quotient, exponent)

    def _integer_quotient(self, other):
        """trunc(|self / other|) for finite nonzero other."""
        scale = self._exponent - other._exponent
        if scale >= 0:
            return self._mantissa * self.RADIX ** scale // other._mantissa
        if -scale > digit_count(self._mantissa, self.RADIX) + digit_count(other._mantissa, self.RADIX):
            return 0
        return self._mantissa // (other._mantissa * self.RADIX ** -scale)

    def _too_long(self, integer, context):
        if context is None:
            return False
        precision, max_mantissa = self._precision_of(context)
        if precision and digit_count(integer, self.RADIX) > precision:
            return True
        return max_mantissa is not None and integer > max_mantissa

    def divide_to_integer_natural_scale(self, other, context=None):
        """Integer part of the quotient, with an exponent as near self.exponent - other.exponent as possible."""
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._divide_to_integer(other, working, natural=True), working, context)

    def divide_to_integer_zero_scale(self, other, context=None):
        """Integer part of the quotient, with exponent 0."""
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._divide_to_integer(other, working, natural=False), working, context)

    def _divide_to_integer(self, other, context, natural):
        ideal_exponent = self._exponent - other._exponent if natural else 0
        special = self._divide_specials(other, context, ideal_exponent)
        if special is not None:
            return special
        radix = self.RADIX
        negative = self.is_negative() != other.is_negative()
        quotient = self._integer_quotient(other)
        if self._too_long(quotient, context):
            return self._invalid(context)
        exponent = 0
        if quotient == 0:
            exponent = ideal_exponent
        elif ideal_exponent < 0:
            quotient *= radix ** -ideal_exponent
            exponent = ideal_exponent
        else:
            while exponent < ideal_exponent and quotient % radix == 0:
                quotient //= radix
                exponent += 1
        if context is None or not natural:
            return self._finite(negative, quotient, exponent)
        return self._round(negative, quotient, exponent, context)

    def remainder(self, other, context=None):
        """self - other * trunc(self / other), with the sign of self."""
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._remainder(other, working, nearest=False), working, context)

    def remainder_near(self, other, context=None):
        """self - other * n, where n is the integer nearest self / other (ties to even)."""
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._remainder(other, working, nearest=True), working, context)

    def _remainder(self, other, context, nearest):
        nan = self._check_nans(other, context)
        if nan is not None:
            return nan
        if self._flags & _INFINITY or (other.is_zero()):
            return self._invalid(context)
        if other._flags & _INFINITY:
            return self._round(self.is_negative(), self._mantissa, self._exponent, context)
        radix = self.RADIX
        exponent = min(self._exponent, other._exponent)
        dividend = self._mantissa * radix ** (self._exponent - exponent)
        divisor = other._mantissa * radix ** (other._exponent - exponent)
        quotient, remainder = divmod(dividend, divisor)
        negative = self.is_negative()
        if nearest and (2 * remainder > divisor or (2 * remainder == divisor and quotient % 2 == 1)):
            remainder = divisor - remainder
            quotient += 1
            negative = not negative
        if self._too_long(quotient, context):
            return self._invalid(context)
        return self._round(negative, remainder, exponent, context)

    # Sign and rounding
    # -----------------
    def _with_sign(self, negative, context):
        nan = self._check_nans(None, context)
        if nan is not None:
            return self._new(nan._mantissa, 0, _QUIET_NAN | (_NEGATIVE if negative else 0))
        if self._flags & _INFINITY:
            return self._infinity(negative)
        return self._round(negative, self._mantissa, self._exponent, context)

    def abs(self, context=None):
        working = trappable(context)
        return trigger_traps(self._with_sign(False, working), working, context)

    def negate(self, context=None):
        working = trappable(context)
        return trigger_traps(self._with_sign(not self.is_negative(), working), working, context)

    def plus(self, context=None):
        working = trappable(context)
        return trigger_traps(self._with_sign(self.is_negative(), working), working, context)

    def round_to_precision(self, context=None):
        return self.plus(context)

    def round_to_binary_precision(self, context=None):
        """Round with the context's precision counted in bits, e.g. PrecisionContext.CLI_DECIMAL"""
        if context is None:
            return self.plus(None)
        bits_context = context.with_precision_in_bits(True).with_blank_flags()
        return trigger_traps(self._with_sign(self.is_negative(), bits_context), bits_context, context)

    def round_to_exponent(self, exponent, context=None):
        """
        Round to the given exponent if this one is smaller, then to the context's precision.

        e.g. ExtendedDecimal('123.456').round_to_exponent(-1) is 123.5
        but ExtendedDecimal('123').round_to_exponent(-1) stays 123
        """
        if exponent is None:
            raise TypeError("exponent is required")
        working = trappable(context)
        return trigger_traps(self._round_to_exponent(exponent, working), working, context)

    def _round_to_exponent(self, exponent, context):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if self._flags & _INFINITY or self._exponent >= exponent:
            return self._with_sign(self.is_negative(), context)
        if context is not None and not context.exponent_within_range(exponent):
            return self._invalid(context)
        rounding = context.rounding if context is not None else Rounding.HALF_EVEN
        negative = self.is_negative()
        mantissa, inexact = shift_right_rounded(self._mantissa, exponent - self._exponent, negative, rounding, self.RADIX)
        if inexact and rounding == Rounding.UNNECESSARY:
            return self._invalid(context)
        add_flags(context, PrecisionContext.FLAG_ROUNDED | (PrecisionContext.FLAG_INEXACT if inexact else 0))
        return self._round(negative, mantissa, exponent, context)

    def round_to_exponent_exact(self, exponent, context=None):
        """Like round_to_exponent() but the context's precision is ignored."""
        if exponent is None:
            raise TypeError("exponent is required")
        working = trappable(context)
        return trigger_traps(self._round_to_exponent_exact(exponent, working), working, context)

    def _round_to_exponent_exact(self, exponent, context):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if self._flags & _INFINITY or self._exponent >= exponent:
            return self._with_sign(self.is_negative(), context)
        return self._quantize(exponent, context, ignore_precision=True)

    def round_to_integral_exact(self, context=None):
        return self.round_to_exponent_exact(0, context)

    def round_to_integral_no_rounded_flag(self, context=None):
        """Like round_to_integral_exact() but never raising FLAG_INEXACT or FLAG_ROUNDED."""
        if context is None:
            return self._round_to_exponent_exact(0, None)
        working = context.with_blank_flags()
        result = self._round_to_exponent_exact(0, working)
        working.flags &= ~(PrecisionContext.FLAG_INEXACT | PrecisionContext.FLAG_ROUNDED)
        return trigger_traps(result, working, context)

    def quantize(self, other, context=None):
        """
        This value with the exponent of other (a number, or an int exponent).

        FLAG_INVALID if the result would not fit the context's precision.
        """
        if other is None:
            raise TypeError("other is required")
        working = trappable(context)
        if isinstance(other, int) and not isinstance(other, bool):
            exponent = other
            nan = self._check_nans(None, working)
        else:
            other = self._coerce(other)
            exponent = other._exponent
            nan = self._check_nans(other, working)
            if nan is None and other._flags & _INFINITY:
                if self._flags & _INFINITY:
                    return trigger_traps(self._with_sign(self.is_negative(), working), working, context)
                return trigger_traps(self._invalid(working), working, context)
        if nan is not None:
            return trigger_traps(nan, working, context)
        if self._flags & _INFINITY:
            return trigger_traps(self._invalid(working), working, context)
        return trigger_traps(self._quantize(exponent, working), working, context)

    def _quantize(self, exponent, context, ignore_precision=False):
        radix = self.RADIX
        range_context = context
        if context is not None and ignore_precision:
            range_context = context.with_precision(0)
        if range_context is not None and not range_context.exponent_within_range(exponent):
            return self._invalid(context)
        rounding = context.rounding if context is not None else Rounding.HALF_EVEN
        negative = self.is_negative()
        precision = 0 if context is None or ignore_precision else self._precision_of(context)[0]
        flags = 0
        if self._mantissa == 0:
            mantissa = 0
        elif self._exponent >= exponent:
            if precision and self._exponent - exponent > precision + 10:
                return self._invalid(context)
            mantissa = self._mantissa * radix ** (self._exponent - exponent)
        else:
            mantissa, inexact = shift_right_rounded(self._mantissa, exponent - self._exponent, negative, rounding, radix)
            if inexact and rounding == Rounding.UNNECESSARY:
                return self._invalid(context)
            flags = PrecisionContext.FLAG_ROUNDED | (PrecisionContext.FLAG_INEXACT if inexact else 0)
        if not ignore_precision and self._too_long(mantissa, context):
            return self._invalid(context)
        if context is None or not context.has_exponent_range:
            add_flags(context, flags)
            return self._finite(negative, mantissa, exponent)
        if mantissa != 0 and exponent + digit_count(mantissa, radix) - 1 > context.exponent_max:
            return self._invalid(context)
        add_flags(context, flags)
        clamping = range_context.with_blank_flags()
        result = self._round(negative, mantissa, exponent, clamping)
        add_flags(context, clamping.flags)
        return result
        # NOTE:  _round() only adds FLAG_SUBNORMAL, or pads to exponent_max - precision + 1 with FLAG_CLAMPED.

    def reduce(self, context=None):
        """Round to the context, then strip trailing zeros, e.g. 1.500 becomes 1.5 and 0.00 becomes 0"""
        working = trappable(context)
        return trigger_traps(self._reduce(working), working, context)

    def _reduce(self, context):
        rounded = self._with_sign(self.is_negative(), context)
        if not rounded.is_finite():
            return rounded
        radix = self.RADIX
        mantissa = rounded._mantissa
        exponent = rounded._exponent
        if mantissa == 0:
            exponent = 0
        else:
            while mantissa % radix == 0:
                mantissa //= radix
                exponent += 1
        if context is not None and context.clamp_normal_exponents:
            clamping = context.with_blank_flags()
            result = self._round(rounded.is_negative(), mantissa, exponent, clamping)
            add_flags(context, clamping.flags & ~PrecisionContext.FLAG_CLAMPED)
            return result
        return self._finite(rounded.is_negative(), mantissa, exponent)

    # Min and max
    # -----------
    @classmethod
    def max(cls, first, second, context=None):
        """The greater, or the number if the other is a quiet NaN."""
        return cls._min_max(first, second, context, larger=True, magnitude=False)

    @classmethod
    def min(cls, first, second, context=None):
        return cls._min_max(first, second, context, larger=False, magnitude=False)

    @classmethod
    def max_magnitude(cls, first, second, context=None):
        return cls._min_max(first, second, context, larger=True, magnitude=True)

    @classmethod
    def min_magnitude(cls, first, second, context=None):
        return cls._min_max(first, second, context, larger=False, magnitude=True)

    @classmethod
    def _min_max(cls, first, second, context, larger, magnitude):
        first = cls.ZERO._coerce(first)
        second = cls.ZERO._coerce(second)
        working = trappable(context)
        if first.is_signaling_nan() or second.is_signaling_nan():
            first._check_nans(second, working)
        if first.is_nan() and second.is_nan():
            return trigger_traps(first._quieted(working), working, context)
        if first.is_nan():
            chosen = second
        elif second.is_nan():
            chosen = first
        else:
            c = 0
            if magnitude:
                c = first._with_sign(False, None)._compare(second._with_sign(False, None))
            if c == 0:
                c = first._compare(second)
            if c == 0:
                c = first._compare_total(second)
            chosen = first if (c >= 0) == larger else second
            if c == 0:
                chosen = first
        return trigger_traps(chosen._with_sign(chosen.is_negative(), working), working, context)

    # Neighbors
    # ---------
    def next_plus(self, context):
        """Smallest number greater than this one, that the context can represent."""
        working = trappable(context)
        return trigger_traps(self._next(working, up=True), working, context)

    def next_minus(self, context):
        """Largest number less than this one, that the context can represent."""
        working = trappable(context)
        return trigger_traps(self._next(working, up=False), working, context)

    def next_toward(self, other, context):
        """The neighbor of this number in the direction of other."""
        other = self._coerce(other)
        working = trappable(context)
        return trigger_traps(self._next_toward(other, working), working, context)

    def _bounded(self, context):
        return context is not None and context.precision and context.has_exponent_range

    def _next(self, context, up):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if not self._bounded(context):
            return self._invalid(context)
        precision, max_mantissa = self._precision_of(context)
        if self._flags & _INFINITY:
            if self.is_negative() == up:
                largest = max_mantissa if max_mantissa is not None else self.RADIX ** precision - 1
                return self._finite(self.is_negative(), largest, context.exponent_max - precision + 1)
            return self
        directed = context.with_rounding(Rounding.CEILING if up else Rounding.FLOOR)
        rounded = self._round(self.is_negative(), self._mantissa, self._exponent, directed)
        if rounded._compare(self) != 0:
            return rounded
        tiny = self._finite(not up, 1, directed.etiny() - 1)
        return rounded._add(tiny, directed, False)

    def _next_toward(self, other, context):
        nan = self._check_nans(other, context)
        if nan is not None:
            return nan
        if not self._bounded(context):
            return self._invalid(context)
        c = self._compare(other)
        if c == 0:
            if self._flags & _INFINITY:
                return self._infinity(other.is_negative())
            return self._finite(other.is_negative(), self._mantissa, self._exponent)
        result = self._next(context.with_no_flags(), up=c < 0)
        F = PrecisionContext
        if result.is_infinity():
            add_flags(context, F.FLAG_OVERFLOW | F.FLAG_INEXACT | F.FLAG_ROUNDED)
        elif result.is_zero() or result._adjusted() < context.exponent_min:
            add_flags(context, F.FLAG_UNDERFLOW | F.FLAG_SUBNORMAL | F.FLAG_INEXACT | F.FLAG_ROUNDED)
            if result.is_zero():
                add_flags(context, F.FLAG_CLAMPED)
        return result

    # Roots and powers
    # ----------------
    def square_root(self, context):
        """Square root rounded half-even to the context, which must have a precision."""
        working = trappable(context)
        return trigger_traps(self._square_root(working), working, context)

    def _square_root(self, context):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if context is None or not context.precision:
            return self._invalid(context)
        if self._flags & _INFINITY:
            return self._invalid(context) if self.is_negative() else self
        if self._mantissa == 0:
            return self._round(self.is_negative(), 0, self._exponent // 2, context)
        if self.is_negative():
            return self._invalid(context)
        radix = self.RADIX
        precision = self._precision_of(context)[0] + 1
        mantissa = self._mantissa
        exponent = self._exponent
        if exponent % 2:
            mantissa *= radix
            exponent -= 1
        root_exponent = exponent // 2
        length = (digit_count(mantissa, radix) + 1) // 2
        shift = precision - length
        if shift >= 0:
            mantissa *= radix ** (2 * shift)
            exact = True
        else:
            mantissa, remainder = divmod(mantissa, radix ** (-2 * shift))
            exact = remainder == 0
        root_exponent -= shift
        root = math.isqrt(mantissa)
        exact = exact and root * root == mantissa
        half_even = context.with_rounding(Rounding.HALF_EVEN).with_blank_flags()
        if exact:
            if shift >= 0:
                root //= radix ** shift
            else:
                root *= radix ** -shift
            root_exponent += shift
            result = self._round(False, root, root_exponent, half_even)
        else:
            result = self._round(False, root, root_exponent, half_even, sticky=True)
        add_flags(context, half_even.flags)
        return result

    def power(self, exponent, context=None):
        """
        This number raised to a power, e.g. ExtendedDecimal(2).power(-2) is 0.25

        An integral exponent may be an int.  A non-integral one, e.g. ExtendedDecimal('0.5'),
        needs a context with a precision, and the result is correctly rounded to it.
        """
        if exponent is None:
            raise TypeError("exponent is required")
        working = trappable(context)
        if isinstance(exponent, RadixNumber):
            exponent = self._coerce(exponent)
            nan = self._check_nans(exponent, working)
            if nan is not None:
                return trigger_traps(nan, working, context)
            if not exponent.is_integral():
                return trigger_traps(self._real_power(exponent, working), working, context)
            exponent = exponent.to_big_integer()
        elif not isinstance(exponent, int):
            raise TypeError("An int or {} exponent is required, not a {}".format(
                type(self).__name__,
                type_name(exponent),
            ))
        nan = self._check_nans(None, working)
        if nan is not None:
            return trigger_traps(nan, working, context)
        return trigger_traps(self._power(exponent, working), working, context)

    def _power(self, n, context):
        negative = self.is_negative() and n % 2 == 1
        if n == 0:
            if self.is_zero():
                return self._invalid(context)
            return self._round(False, 1, 0, context)
        if self._flags & _INFINITY:
            return self._infinity(negative) if n > 0 else self._finite(negative, 0, 0)
        if self._mantissa == 0:
            if n > 0:
                return self._round(negative, 0, self._exponent * n, context)
            return self._infinity(negative)
        if n > 0:
            return self._power_magnitude(negative, n, context)
        denominator = self._power_magnitude(False, -n, self._guard_context(-n, context))
        return self._finite(negative, 1, 0)._divide(denominator, context)

    def _guard_context(self, n, context):
        """Extra digits for intermediate results, or None for exact."""
        if context is None or not context.precision:
            return None
        precision = self._precision_of(context)[0]
        return PrecisionContext(precision + digit_count(n, self.RADIX) + 3, Rounding.DOWN).with_blank_flags()

    def _power_magnitude(self, negative, n, context):
        radix = self.RADIX
        precision = self._precision_of(context)[0] if context is not None else 0
        if not precision or digit_count(self._mantissa, radix) * n <= 2 * precision + 20:
            return self._round(negative, self._mantissa ** n, self._exponent * n, context)
        # NOTE:  Square and multiply with truncated intermediates.  The result is within an ulp
        #        but, unlike the other operations, not always correctly rounded.
        guard = self._guard_context(n, context)
        base = self._finite(False, self._mantissa, self._exponent)
        result = self._finite(False, 1, 0)
        for bit in bin(n)[2:]:
            result = result._multiply(result, guard)
            if bit == '1':
                result = result._multiply(base, guard)
        inexact = bool(guard.flags & PrecisionContext.FLAG_INEXACT)
        return self._round(negative, result._mantissa, result._exponent, context, sticky=inexact)

    def _real_power(self, y, context):
        """self ** y for a y that is not an integer, or is infinite."""
        if context is None or not context.precision:
            return self._invalid(context)
        if self._flags & _INFINITY:
            if self.is_negative():
                return self._invalid(context)
            return self._finite(False, 0, 0) if y.is_negative() else self._infinity(False)
        if self._mantissa == 0:
            return self._infinity(False) if y.is_negative() else self._finite(False, 0, 0)
        if self.is_negative():
            return self._invalid(context)
        c = self._compare(self.ONE)
        if c == 0:
            return self._one_rounded(context)
        if y._flags & _INFINITY:
            grows = (c > 0) != y.is_negative()
            return self._infinity(False) if grows else self._finite(False, 0, 0)
        exact = self._exact_power(y, context)
        if exact is not None:
            return exact
        radix = self.RADIX
        mantissa, exponent = self._mantissa, self._exponent
        y_whole = y._whole_magnitude() + 1
        q_bits = (y_whole * (abs(exponent) + mantissa.bit_length() + 1)).bit_length() + 3
        ln_guard = y_whole.bit_length() + abs(exponent).bit_length() + 6
        scale = radix ** -y._exponent
        # NOTE:  |y * ln(self)| / ln(radix) < 2**(q_bits - 1)

        def approximate(bits):
            wide = bits + q_bits + 3
            log_self = (
                fixed_point.ln_integer_fixed(mantissa, wide + ln_guard) +
                exponent * fixed_point.ln_radix_fixed(radix, wide + ln_guard)
            )
            z = (log_self * y._mantissa // scale) >> ln_guard
            if y.is_negative():
                z = -z
            log_radix = fixed_point.ln_radix_fixed(radix, wide)
            q = z // log_radix
            reduced = (z - q * log_radix) >> (wide - bits)
            return False, fixed_point.exp_fixed(reduced, bits), bits, q, 6

        return self._correctly_rounded(approximate, context)

    def _one_rounded(self, context):
        """1 to the full precision, inexact, the way a non-integral power of 1 comes out."""
        precision = self._precision_of(context)[0]
        result = self._round(False, self.RADIX ** (precision - 1), 1 - precision, context)
        add_flags(context, PrecisionContext.FLAG_INEXACT | PrecisionContext.FLAG_ROUNDED)
        return result

    def _exact_power(self, y, context):
        """
        self ** y when it has a finite expansion, else None.

        With y = a/b in lowest terms, that happens only when self = P/Q with both P and Q
        perfect b-th powers.  Both are under 2**limit, so b > limit rules it out.
        """
        radix = self.RADIX
        y_mantissa, y_exponent = y._mantissa, y._exponent
        while y_mantissa % radix == 0:
            y_mantissa //= radix
            y_exponent += 1
        denominator = radix ** -y_exponent
        limit = self._mantissa.bit_length() + abs(self._exponent) * (4 if radix == 10 else 1)
        if -y_exponent >= limit.bit_length():
            return None
            # NOTE:  b is a multiple of 2**-y_exponent, already past limit.
        common = math.gcd(y_mantissa, denominator)
        a, b = y_mantissa // common, denominator // common
        if b > limit:
            return None
        if self._exponent >= 0:
            p, q = self._mantissa * radix ** self._exponent, 1
        else:
            p, q = self._mantissa, radix ** -self._exponent
            common = math.gcd(p, q)
            p, q = p // common, q // common
        root_p = fixed_point.integer_root(p, b)
        root_q = fixed_point.integer_root(q, b)
        if root_p ** b != p or root_q ** b != q:
            return None
        base = self._finite(False, root_p, 0)._divide(self._finite(False, root_q, 0), None)
        return base._power(-a if y.is_negative() else a, context)

    def _whole_magnitude(self):
        """floor(|self|) for a finite number"""
        if self._exponent >= 0:
            return self._mantissa * self.RADIX ** self._exponent
        return self._mantissa // self.RADIX ** -self._exponent

    def _fixed_magnitude(self, bits):
        """floor(|self| * 2**bits) for a finite number"""
        if self._exponent >= 0:
            return (self._mantissa * self.RADIX ** self._exponent) << bits
        return (self._mantissa << bits) // self.RADIX ** -self._exponent

    @classmethod
    def _correctly_rounded(cls, approximate, context):
        """
        A value no finite expansion represents, rounded to the context.

        approximate(bits) returns (negative, v, v_bits, scale, error_bits):  the magnitude is
        within 2**error_bits units of v / 2**v_bits * RADIX**scale.  Take enough digits
        that rounding the value one unit below and one unit above gives the same result,
        doubling bits until it does.
        """
        radix = cls.RADIX
        precision = cls._precision_of(context)[0]
        bits_per_digit = math.log2(radix)
        bits = int((precision + 4) * bits_per_digit) + 32
        while True:
            negative, v, v_bits, scale, error_bits = approximate(bits)
            k = int((v_bits - error_bits - 2) / bits_per_digit) - 1
            mantissa = (v * radix ** k) >> v_bits
            # NOTE:  mantissa is now within a quarter unit of the magnitude * RADIX**(k - scale)
            if digit_count(mantissa, radix) >= precision + 2:
                low = context.with_blank_flags()
                high = context.with_blank_flags()
                below = cls._round(negative, mantissa - 1, scale - k, low, sticky=True)
                above = cls._round(negative, mantissa + 1, scale - k, high, sticky=True)
                if below.equals(above) and low.flags == high.flags:
                    add_flags(context, high.flags)
                    return above
            bits *= 2

    # Logarithms and exponentials
    # ---------------------------
    def exp(self, context):
        """e raised to this power, rounded half-even to the context, which must have a precision."""
        working = trappable(context)
        return trigger_traps(self._exp(working), working, context)

    def _exp(self, context):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if context is None or not context.precision:
            return self._invalid(context)
        if self._flags & _INFINITY:
            return self._finite(False, 0, 0) if self.is_negative() else self
        half_even = context.with_rounding(Rounding.HALF_EVEN).with_blank_flags()
        result = self._exp_rounded(half_even)
        add_flags(context, half_even.flags)
        return result

    def _exp_rounded(self, context):
        if self._mantissa == 0:
            return self._round(False, 1, 0, context)
        radix = self.RADIX
        negative = self.is_negative()
        if context.has_exponent_range:
            precision, max_mantissa = self._precision_of(context)
            limit = 3 * (max(abs(context.exponent_min), abs(context.exponent_max)) + precision + 2)
            adjusted = self._exponent + digit_count(self._mantissa, radix) - 1
            if adjusted >= digit_count(limit, radix) or self._whole_magnitude() > limit:
                if negative:
                    return self._round(False, 0, context.etiny() - 2, context, sticky=True)
                return self._overflow(False, context, precision, max_mantissa)
            # NOTE:  e**limit overflows any exponent range, by far.
        q_bits = self._whole_magnitude().bit_length() + 2

        def approximate(bits):
            wide = bits + q_bits + 3
            log_radix = fixed_point.ln_radix_fixed(radix, wide)
            x = self._fixed_magnitude(wide)
            if negative:
                x = -x
            q = x // log_radix
            reduced = (x - q * log_radix) >> (wide - bits)
            return False, fixed_point.exp_fixed(reduced, bits), bits, q, 6
            # NOTE:  e**x = e**(x - q ln(radix)) * radix**q

        return self._correctly_rounded(approximate, context)

    def log(self, context):
        """Natural logarithm, rounded half-even to the context, which must have a precision."""
        working = trappable(context)
        return trigger_traps(self._log(working, False), working, context)

    def log10(self, context):
        """Base 10 logarithm, rounded half-even.  Exact for a power of ten, e.g. 3 for 1000."""
        working = trappable(context)
        return trigger_traps(self._log(working, True), working, context)

    def _log(self, context, base_ten):
        nan = self._check_nans(None, context)
        if nan is not None:
            return nan
        if context is None or not context.precision:
            return self._invalid(context)
        if self.is_zero():
            return self._infinity(True)
        if self.is_negative():
            return self._invalid(context)
        if self._flags & _INFINITY:
            return self
        half_even = context.with_rounding(Rounding.HALF_EVEN).with_blank_flags()
        result = self._log_rounded(half_even, base_ten)
        add_flags(context, half_even.flags)
        return result

    def _log_rounded(self, context, base_ten):
        radix = self.RADIX
        mantissa, exponent = self._mantissa, self._exponent
        if base_ten:
            n = self._power_of_ten()
            if n is not None:
                return self._round(n < 0, abs(n), 0, context)
        elif self._compare(self.ONE) == 0:
            return self._round(False, 0, 0, context)
        ln_guard = abs(exponent).bit_length() + 4
        ten_guard = (abs(exponent) + mantissa.bit_length()).bit_length() + 8

        def approximate(bits):
            if base_ten:
                wide = bits + ten_guard
                s = (
                    fixed_point.ln_integer_fixed(mantissa, wide) +
                    exponent * fixed_point.ln_radix_fixed(radix, wide)
                )
                return s < 0, (abs(s) << bits) // fixed_point.ln_radix_fixed(10, wide), bits, 0, 3
            wide = bits + ln_guard
            s = fixed_point.ln_integer_fixed(mantissa, wide) + exponent * fixed_point.ln_radix_fixed(radix, wide)
            return s < 0, abs(s) >> ln_guard, bits, 0, 3

        return self._correctly_rounded(approximate, context)

    def _power_of_ten(self):
        """n when this positive number is exactly 10**n, else None."""
        mantissa, exponent = self._mantissa, self._exponent
        while mantissa % self.RADIX == 0:
            mantissa //= self.RADIX
            exponent += 1
        if self.RADIX == 10:
            return exponent if mantissa == 1 else None
        if exponent < 0 or not 2 * exponent < mantissa.bit_length() <= 3 * exponent + 1:
            return None
        return exponent if mantissa == 5 ** exponent else None
        # NOTE:  In binary, 10**n is 5**n * 2**n, and 5**n has between 2n+1 and 3n+1 bits.

    @classmethod
    def pi(cls, context):
        """pi, rounded to the context, which must have a precision.  ExtendedDecimal.pi(DECIMAL64)"""
        working = trappable(context)
        if working is None or not working.precision:
            return trigger_traps(cls._invalid(working), working, context)

        def approximate(bits):
            return False, fixed_point.pi_fixed(bits), bits, 0, 3

        return trigger_traps(cls._correctly_rounded(approximate, working), working, context)

    def compare_to_with_context(self, other, treat_quiet_nans_as_signaling=False, context=None):
        """compare_to() as a number:  -1, 0, 1 or NaN if either operand is NaN."""
        other = self._coerce(other)
        working = trappable(context)
        nan = self._check_nans(other, working)
        if nan is not None:
            if treat_quiet_nans_as_signaling:
                add_flags(working, PrecisionContext.FLAG_INVALID)
            return trigger_traps(nan, working, context)
        c = self._compare(other)
        return trigger_traps(self._finite(c < 0, abs(c), 0), working, context)

    # Integers
    # --------
    def to_big_integer(self):
        """Truncate toward zero.  ArithmeticRangeError for infinity and NaN."""
        if not self.is_finite():
            raise ArithmeticRangeError("{} has no integer value".format(self.to_string()))
        if self._exponent >= 0:
            magnitude = self._mantissa * self.RADIX ** self._exponent
        elif -self._exponent > digit_count(self._mantissa, self.RADIX):
            magnitude = 0
        else:
            magnitude = self._mantissa // self.RADIX ** -self._exponent
        return -magnitude if self.is_negative() else magnitude

    def to_big_integer_exact(self):
        """ArithmeticRangeError unless the value is an integer."""
        if not self.is_integral():
            raise ArithmeticRangeError("{} is not an integer".format(self.to_string()))
        return self.to_big_integer()

    def __int__(self):
        return self.to_big_integer()

    def __float__(self):
        return self.to_double()

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return "{}('{}')".format(type_name(self), self.to_string())

    # Operators
    # ---------
    # NOTE:  Operators are exact.  Division raises TrapError when the quotient does not terminate.
    def _binary_op(self, method, other, reflected):
        if isinstance(other, RadixNumber) and other.RADIX != self.RADIX and self.RADIX == 2:
            return NotImplemented   # let the decimal side convert this one exactly
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

    def __add__(self, other): return self._binary_op(RadixNumber.add, other, False)
    def __radd__(self, other): return self._binary_op(RadixNumber.add, other, True)
    def __sub__(self, other): return self._binary_op(RadixNumber.subtract, other, False)
    def __rsub__(self, other): return self._binary_op(RadixNumber.subtract, other, True)
    def __mul__(self, other): return self._binary_op(RadixNumber.multiply, other, False)
    def __rmul__(self, other): return self._binary_op(RadixNumber.multiply, other, True)
    def __truediv__(self, other): return self._binary_op(RadixNumber.divide, other, False)
    def __rtruediv__(self, other): return self._binary_op(RadixNumber.divide, other, True)
    def __mod__(self, other): return self._binary_op(RadixNumber.remainder, other, False)
    def __rmod__(self, other): return self._binary_op(RadixNumber.remainder, other, True)
    def __floordiv__(self, other): return self._binary_op(RadixNumber.divide_to_integer_zero_scale, other, False)
    def __rfloordiv__(self, other): return self._binary_op(RadixNumber.divide_to_integer_zero_scale, other, True)
    def __pow__(self, other): return self.power(other) if isinstance(other, int) else NotImplemented
