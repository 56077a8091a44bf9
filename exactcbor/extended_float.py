"""
ExtendedFloat is an arbitrary precision binary floating point number.

    value = (-1)**negative * mantissa * 2**exponent

Every float is exactly an ExtendedFloat.  For an ExtendedFloat context the precision is in bits.
"""

import math

from .context import PrecisionContext, Rounding, TrapError, add_flags, trappable, trigger_traps
from .radix import RadixNumber, digit_count
from . import extended_decimal
from . import ieee


class ExtendedFloat(RadixNumber):
    """Binary member of the numeric tower.  See RadixNumber for the arithmetic."""
    RADIX = 2

    __slots__ = ()

    # NOTE:  Rounding when a decimal has no exact binary value and no context was given.
    INEXACT_DEFAULT = PrecisionContext(53, Rounding.HALF_EVEN)

    @classmethod
    def _from_other(cls, content):
        if isinstance(content, extended_decimal.ExtendedDecimal):
            return cls.from_extended_decimal(content)
        return None

    def decomposition(self):
        if self.is_infinity():
            special = ieee.INFINITY
        elif self.is_signaling_nan():
            special = ieee.SIGNALING_NAN
        elif self.is_nan():
            special = ieee.QUIET_NAN
        else:
            special = None
        return ieee.Decomposition(self.is_negative(), special, self.unsigned_mantissa, self.exponent)

    @classmethod
    def _from_decomposition(cls, decomposition):
        negative = decomposition.negative
        if decomposition.special == ieee.INFINITY:
            return cls._infinity(negative)
        if decomposition.special is not None:
            return cls.create_nan(
                decomposition.mantissa,
                signaling=decomposition.special == ieee.SIGNALING_NAN,
                negative=negative,
            )
        return cls._finite(negative, decomposition.mantissa, decomposition.exponent)

    @classmethod
    def from_double(cls, x):
        if x is None:
            raise TypeError("from_double() needs a float, not None")
        return cls._from_decomposition(ieee.decompose_double(float(x)))

    @classmethod
    def from_single(cls, x):
        if x is None:
            raise TypeError("from_single() needs a float, not None")
        x = ieee.round_to_single(float(x))
        return cls._from_decomposition(ieee.SINGLE.decompose_bits(ieee.SINGLE.to_bits(x)))

    @classmethod
    def from_string(cls, text, context=None):
        """Parse decimal text, e.g. ExtendedFloat.from_string('0.375') is exactly 3 * 2**-3"""
        return cls.from_extended_decimal(extended_decimal.ExtendedDecimal.from_string(text), context)

    @classmethod
    def from_extended_decimal(cls, d, context=None):
        """
        Binary value of a decimal, rounded once to the context.

        Without a context:  exact if d is a binary fraction, else rounded per INEXACT_DEFAULT.
        With a context of unlimited precision:  exact, or TrapError(FLAG_INVALID) if there is no exact binary value.
        """
        if d is None:
            raise TypeError("from_extended_decimal() needs an ExtendedDecimal, not None")
        if context is None:
            exact = cls._exact_from_decimal(d)
            if exact is not None:
                return exact
            context = cls.INEXACT_DEFAULT
        working = trappable(context)
        return trigger_traps(cls._from_decimal(d, working), working, context)

    @classmethod
    def _exact_from_decimal(cls, d):
        """The same value, or None if d is not a binary fraction."""
        if not d.is_finite():
            return cls._from_decimal(d, None)
        mantissa = d.unsigned_mantissa
        exponent = d.exponent
        if exponent >= 0:
            return cls._finite(d.is_negative(), mantissa * 5 ** exponent, exponent)
        if mantissa == 0:
            return cls._finite(d.is_negative(), 0, 0)
        if -exponent > digit_count(mantissa):
            return None
        quotient, remainder = divmod(mantissa, 5 ** -exponent)
        if remainder:
            return None
        return cls._finite(d.is_negative(), quotient, exponent)

    @classmethod
    def _from_decimal(cls, d, context):
        if d.is_signaling_nan() or d.is_quiet_nan():
            return cls.create_nan(d.unsigned_mantissa, d.is_signaling_nan(), d.is_negative(), context)
        negative = d.is_negative()
        if d.is_infinity():
            return cls._infinity(negative)
        mantissa = d.unsigned_mantissa
        exponent = d.exponent
        if mantissa == 0:
            return cls._round(negative, 0, 0, context)
        precision = context.precision
        if precision and context.has_exponent_range:
            # NOTE:  Decimal exponents too far out to matter.  10**A is more than 2**(3*A),
            #        and 10**(A+1) is less than 2**(3*(A+1)) when A+1 is negative.
            adjusted = d._adjusted()
            if 3 * adjusted > context.exponent_max + 1:
                return cls._round(negative, 1, context.exponent_max + 1, context)
            if 3 * (adjusted + 1) < context.etiny() - 2:
                return cls._round(negative, 1, context.etiny() - 2, context)
        if exponent >= 0:
            return cls._round(negative, mantissa * 5 ** exponent, exponent, context)
        denominator = 5 ** -exponent
        if not precision:
            exact = cls._exact_from_decimal(d)
            if exact is None:
                add_flags(context, PrecisionContext.FLAG_INVALID)
                raise TrapError(PrecisionContext.FLAG_INVALID, context, cls.NAN, "Nonterminating binary expansion")
            return cls._round(negative, exact.unsigned_mantissa, exact.exponent, context)
        shift = precision + 2 + denominator.bit_length() - mantissa.bit_length()
        if shift >= 0:
            quotient, remainder = divmod(mantissa << shift, denominator)
        else:
            quotient, remainder = divmod(mantissa, denominator << -shift)
        return cls._round(negative, quotient, exponent - shift, context, sticky=remainder != 0)

    def to_extended_decimal(self):
        """Exact decimal value."""
        return extended_decimal.ExtendedDecimal.from_extended_float(self)

    def _to_binary_format(self, form, context):
        negative = self.is_negative()
        if self.is_nan():
            bits = form.compose_nan(negative, self.unsigned_mantissa, self.is_signaling_nan())
            return form.from_bits(bits)
        if self.is_infinity():
            return -math.inf if negative else math.inf
        rounded = self._round(negative, self.unsigned_mantissa, self.exponent, context)
        if rounded.is_infinity():
            return -math.inf if negative else math.inf
        magnitude = math.ldexp(rounded.unsigned_mantissa, rounded.exponent)
        return -magnitude if negative else magnitude

    def to_double(self):
        """Nearest float, ties to even."""
        return self._to_binary_format(ieee.DOUBLE, PrecisionContext.BINARY64)

    def to_single(self):
        """Nearest binary32, ties to even, as the float of equal value."""
        return self._to_binary_format(ieee.SINGLE, PrecisionContext.BINARY32)

    def to_string(self):
        return self.to_extended_decimal().to_string()

    def to_engineering_string(self):
        return self.to_extended_decimal().to_engineering_string()

    def to_plain_string(self):
        return self.to_extended_decimal().to_plain_string()


ExtendedFloat.internal_setup()
