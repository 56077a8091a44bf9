"""
ExtendedDecimal is an arbitrary precision decimal floating point number.

    ExtendedDecimal('1.265e-4') == ExtendedDecimal(1265, -7)
    ExtendedDecimal(0.1) is the exact value of the double nearest 0.1, 55 digits long

Text forms follow the General Decimal Arithmetic to-scientific-string and to-engineering-string
algorithms, so every rendering parses back to an identical representation.
"""

import decimal
import re

from .context import PrecisionContext, trappable, trigger_traps
from .errors import FormatError
from .radix import RadixNumber, digits_to_int, int_to_digits, type_name
from . import extended_float
from . import ieee


_NUMBER_PATTERN = re.compile(r"""
    \A
    (?P<sign> [-+] )?
    (?:
        (?P<integer> [0-9]+ )
        (?: \. (?P<fraction> [0-9]+ ) )?
        (?: E (?P<exponent_sign> [-+] )? (?P<exponent> [0-9]+ ) )?
    |
        (?P<infinity> Inf (?: inity )? )
    |
        (?P<signaling> s )? NaN (?P<payload> [0-9]* )
    )
    \Z
""", re.ASCII | re.IGNORECASE | re.VERBOSE)


def _signed_digits(n):
    return ('+' if n >= 0 else '-') + int_to_digits(abs(n))


assert '+0' == _signed_digits(0)
assert '-12' == _signed_digits(-12)


class ExtendedDecimal(RadixNumber):
    """Decimal member of the numeric tower.  See RadixNumber for the arithmetic."""
    RADIX = 10

    __slots__ = ()

    @classmethod
    def _from_other(cls, content):
        if isinstance(content, extended_float.ExtendedFloat):
            return cls.from_extended_float(content)
        if isinstance(content, decimal.Decimal):
            return cls.from_python_decimal(content)
        return None

    class StringParseError(FormatError):
        """e.g. ExtendedDecimal.from_string('1.') or ExtendedDecimal.from_string('0x10')"""

    # Text
    # ----
    @classmethod
    def from_string(cls, text, context=None):
        """
        Parse '[+|-]digits[.digits][E[+|-]digits]', Infinity, Inf, NaN[payload] or sNaN[payload].

        Case insensitive.  Without a context the value is exact, however many digits.
        """
        if text is None:
            raise TypeError("from_string() needs a str, not None")
        if not isinstance(text, str):
            raise TypeError("from_string() needs a str, not a " + type_name(text))
        match = _NUMBER_PATTERN.match(text)
        if match is None:
            raise cls.StringParseError("Not a number:  " + repr(text[:100]))
        negative = match.group('sign') == '-'
        if match.group('infinity') is not None:
            return cls._infinity(negative)
        if match.group('integer') is None:
            payload = match.group('payload')
            return cls.create_nan(
                digits_to_int(payload) if payload else 0,
                signaling=match.group('signaling') is not None,
                negative=negative,
                context=context,
            )
        fraction = match.group('fraction') or ''
        mantissa = digits_to_int(match.group('integer') + fraction)
        exponent = 0
        if match.group('exponent') is not None:
            exponent = digits_to_int(match.group('exponent'))
            if match.group('exponent_sign') == '-':
                exponent = -exponent
        exponent -= len(fraction)
        working = trappable(context)
        return trigger_traps(cls._round(negative, mantissa, exponent, working), working, context)

    def _special_string(self):
        sign = '-' if self.is_negative() else ''
        if self.is_infinity():
            return sign + 'Infinity'
        name = 'sNaN' if self.is_signaling_nan() else 'NaN'
        payload = int_to_digits(self.unsigned_mantissa) if self.unsigned_mantissa else ''
        return sign + name + payload

    def _scientific_string(self, engineering):
        if not self.is_finite():
            return self._special_string()
        digits = int_to_digits(self.unsigned_mantissa)
        exponent = self.exponent
        left_digits = exponent + len(digits)
        if exponent <= 0 and left_digits > -6:
            dot_place = left_digits
        elif not engineering:
            dot_place = 1
        elif self.unsigned_mantissa == 0:
            dot_place = (left_digits + 1) % 3 - 1
        else:
            dot_place = (left_digits - 1) % 3 + 1

        if dot_place <= 0:
            integer_part = '0'
            fraction_part = '.' + '0' * -dot_place + digits
        elif dot_place >= len(digits):
            integer_part = digits + '0' * (dot_place - len(digits))
            fraction_part = ''
        else:
            integer_part = digits[:dot_place]
            fraction_part = '.' + digits[dot_place:]
        if left_digits == dot_place:
            exponent_part = ''
        else:
            exponent_part = 'E' + _signed_digits(left_digits - dot_place)
        sign = '-' if self.is_negative() else ''
        return sign + integer_part + fraction_part + exponent_part

    def to_string(self):
        """Scientific notation when the exponent is positive or the number is very small, e.g. 1.23E+5"""
        return self._scientific_string(engineering=False)

    def to_engineering_string(self):
        """Like to_string() but exponents are multiples of 3, e.g. 123E+3"""
        return self._scientific_string(engineering=True)

    def to_plain_string(self):
        """No exponent ever, e.g. 123000 or 0.0000001"""
        if not self.is_finite():
            return self._special_string()
        sign = '-' if self.is_negative() else ''
        digits = int_to_digits(self.unsigned_mantissa)
        exponent = self.exponent
        if exponent >= 0:
            if self.unsigned_mantissa == 0:
                return sign + '0'
            return sign + digits + '0' * exponent
        point = len(digits) + exponent
        if point > 0:
            return sign + digits[:point] + '.' + digits[point:]
        return sign + '0.' + '0' * -point + digits

    # Binary conversions
    # ------------------
    @classmethod
    def _from_decomposition(cls, decomposition):
        """Exact value of mantissa * 2**exponent, e.g. 5 * 2**-3 is 625 * 10**-4"""
        negative = decomposition.negative
        if decomposition.special == ieee.INFINITY:
            return cls._infinity(negative)
        if decomposition.special is not None:
            return cls.create_nan(
                decomposition.mantissa,
                signaling=decomposition.special == ieee.SIGNALING_NAN,
                negative=negative,
            )
        mantissa = decomposition.mantissa
        exponent = decomposition.exponent
        if exponent >= 0:
            return cls._finite(negative, mantissa << exponent, 0)
        return cls._finite(negative, mantissa * 5 ** -exponent, exponent)

    @classmethod
    def from_double(cls, x):
        """Exact value of a float, e.g. from_double(0.1).to_string() has 55 significant digits."""
        if x is None:
            raise TypeError("from_double() needs a float, not None")
        return cls._from_decomposition(ieee.decompose_double(float(x)))

    @classmethod
    def from_single(cls, x):
        """Exact value of a binary32 (given as the float of equal value, rounded if need be)."""
        if x is None:
            raise TypeError("from_single() needs a float, not None")
        x = ieee.round_to_single(float(x))
        return cls._from_decomposition(ieee.SINGLE.decompose_bits(ieee.SINGLE.to_bits(x)))

    @classmethod
    def from_extended_float(cls, binary):
        if binary is None:
            raise TypeError("from_extended_float() needs an ExtendedFloat, not None")
        return cls._from_decomposition(binary.decomposition())

    @classmethod
    def from_python_decimal(cls, d):
        """Exact value of a decimal.Decimal, payloads and signed zeros included."""
        sign, digits, exponent = d.as_tuple()
        mantissa = int(decimal.Decimal((0, digits, 0))) if digits else 0
        if exponent == 'F':
            return cls._infinity(bool(sign))
        if exponent in ('n', 'N'):
            return cls.create_nan(mantissa, signaling=exponent == 'N', negative=bool(sign))
        return cls._finite(bool(sign), mantissa, exponent)

    def to_python_decimal(self):
        """Same value as a decimal.Decimal, e.g. for the standard library's formatting."""
        if self.is_infinity():
            return decimal.Decimal('-Infinity' if self.is_negative() else 'Infinity')
        if self.is_nan():
            return decimal.Decimal(self._special_string())
        return decimal.Decimal((int(self.is_negative()), tuple(int(c) for c in int_to_digits(self.unsigned_mantissa)), self.exponent))

    def to_extended_float(self, context=None):
        """
        Nearest binary value.

        Without a context the conversion is exact when this is a binary fraction
        (e.g. 0.375) and otherwise rounded half-even to 53 bits with no exponent limits.
        """
        return extended_float.ExtendedFloat.from_extended_decimal(self, context)

    def to_double(self):
        """Nearest float, ties to even, overflowing to infinity, underflowing to a signed zero."""
        binary = extended_float.ExtendedFloat.from_extended_decimal(self, PrecisionContext.BINARY64)
        return binary.to_double()

    def to_single(self):
        """Nearest binary32, as a float."""
        binary = extended_float.ExtendedFloat.from_extended_decimal(self, PrecisionContext.BINARY32)
        return binary.to_single()


ExtendedDecimal.internal_setup()
