"""
Exact comparison and hashing across every numeric kind the package carries.

Each value is normalized to

    (-1)**negative * numerator * 2**exponent2 * 10**exponent10 / denominator

so int, float, Fraction, decimal.Decimal, ExtendedDecimal, ExtendedFloat and ExtendedRational
compare and hash by mathematical value, however far apart their exponents.
"""

import collections
import decimal
import fractions
import math
import sys


ExactParts = collections.namedtuple(
    'ExactParts',
    'special negative numerator exponent2 exponent10 denominator',
)

NAN = 'NaN'
INFINITY = 'Infinity'

_LOG2_10_SCALE = 10 ** 20
_LOG2_10_FLOOR = 332192809488736234787   # log2(10) * 10**20, rounded down


def exact_parts(x):
    """Normalize a number.  TypeError if x is not a supported kind of number."""
    if isinstance(x, int):
        return ExactParts(None, x < 0, abs(x), 0, 0, 1)
    if isinstance(x, float):
        negative = math.copysign(1.0, x) < 0
        if math.isnan(x):
            return ExactParts(NAN, negative, 0, 0, 0, 1)
        if math.isinf(x):
            return ExactParts(INFINITY, negative, 0, 0, 0, 1)
        numerator, denominator = abs(x).as_integer_ratio()
        return ExactParts(None, negative, numerator, 1 - denominator.bit_length(), 0, 1)
    if isinstance(x, fractions.Fraction):
        return ExactParts(None, x < 0, abs(x.numerator), 0, 0, x.denominator)
    if isinstance(x, decimal.Decimal):
        negative = x.is_signed()
        if x.is_nan():
            return ExactParts(NAN, negative, 0, 0, 0, 1)
        if x.is_infinite():
            return ExactParts(INFINITY, negative, 0, 0, 0, 1)
        sign_digits_exponent = x.as_tuple()
        numerator = int(decimal.Decimal((0, sign_digits_exponent.digits, 0)))
        return ExactParts(None, negative, numerator, 0, sign_digits_exponent.exponent, 1)
    try:
        method = x._exact_parts
    except AttributeError:
        raise TypeError("Not a number:  " + type(x).__name__)
    return method()


assert exact_parts(-3) == ExactParts(None, True, 3, 0, 0, 1)
assert exact_parts(0.75) == ExactParts(None, False, 3, -2, 0, 1)
assert exact_parts(decimal.Decimal('-1.50')) == ExactParts(None, True, 150, 0, -2, 1)


def _sign(parts):
    if parts.special is None and parts.numerator == 0:
        return 0
    return -1 if parts.negative else 1


def compare_shifted(p, p_shift, q, q_shift):
    """Compare p * 2**p_shift with q * 2**q_shift, non-negative p and q, without building huge shifts."""
    if p == 0 or q == 0:
        return (p > q) - (p < q)
    p_length = p.bit_length() + p_shift
    q_length = q.bit_length() + q_shift
    if p_length != q_length:
        return 1 if p_length > q_length else -1
    # NOTE:  Equal lengths mean the shift difference is at most the size of the integers.
    if p_shift > q_shift:
        p <<= p_shift - q_shift
    else:
        q <<= q_shift - p_shift
    return (p > q) - (p < q)


assert 0 == compare_shifted(1, 10**12, 2, 10**12 - 1)
assert 1 == compare_shifted(3, 10**12, 1, 10**12 + 1)
assert -1 == compare_shifted(1, -10**12, 1, 0)


def _power_of_ten_bounds(power, bits):
    """(low, high, shift) with low * 2**shift <= 10**power <= high * 2**shift, keeping about bits bits."""
    low = high = 1
    shift = 0
    base_low = base_high = 10
    base_shift = 0

    def trimmed(low, high, shift):
        excess = high.bit_length() - bits
        if excess > 0:
            low >>= excess
            high = -((-high) >> excess)
            shift += excess
        return low, high, shift

    while power:
        if power & 1:
            low, high, shift = trimmed(low * base_low, high * base_high, shift + base_shift)
        power >>= 1
        if power:
            base_low, base_high, base_shift = trimmed(base_low * base_low, base_high * base_high, 2 * base_shift)
    return low, high, shift


assert (10**9, 10**9, 0) == _power_of_ten_bounds(9, 64)
assert _power_of_ten_bounds(1000, 64)[0] << _power_of_ten_bounds(1000, 64)[2] <= 10**1000
assert _power_of_ten_bounds(1000, 64)[1] << _power_of_ten_bounds(1000, 64)[2] >= 10**1000


def _compare_magnitude(a, b):
    """Compare nonzero finite magnitudes."""
    left = a.numerator * b.denominator
    right = b.numerator * a.denominator
    binary = a.exponent2 - b.exponent2
    decimal_power = a.exponent10 - b.exponent10
    reverse = decimal_power < 0
    if reverse:
        left, right, binary, decimal_power = right, left, -binary, -decimal_power
    # Now compare left * 2**binary * 10**decimal_power with right, decimal_power >= 0.
    left_shift = max(binary, 0)
    right_shift = max(-binary, 0)
    c = _compare_by_logarithm(left, left_shift, decimal_power, right, right_shift)
    if c == 0:
        c = _compare_with_power_of_ten(left, left_shift, decimal_power, right, right_shift)
    return -c if reverse else c


def _compare_by_logarithm(left, left_shift, decimal_power, right, right_shift):
    """Settle the order from base-2 logarithm bounds, or 0 if they overlap."""
    scale = _LOG2_10_SCALE
    left_low = (left.bit_length() - 1 + left_shift) * scale + decimal_power * _LOG2_10_FLOOR
    left_high = (left.bit_length() + left_shift) * scale + decimal_power * (_LOG2_10_FLOOR + 1)
    right_low = (right.bit_length() - 1 + right_shift) * scale
    right_high = (right.bit_length() + right_shift) * scale
    if left_low > right_high:
        return 1
    if left_high < right_low:
        return -1
    return 0


def _compare_with_power_of_ten(left, left_shift, decimal_power, right, right_shift):
    if decimal_power <= right.bit_length() + 64:
        return compare_shifted(left * 10 ** decimal_power, left_shift, right, right_shift)
    # NOTE:  right < 5**decimal_power so it cannot hold the factor equality needs.
    #        Narrow the bounds on 10**decimal_power until they settle the order.
    bits = 64
    while True:
        low, high, shift = _power_of_ten_bounds(decimal_power, bits)
        if compare_shifted(left * low, left_shift + shift, right, right_shift) > 0:
            return 1
        if compare_shifted(left * high, left_shift + shift, right, right_shift) < 0:
            return -1
        bits *= 2


def compare_exact(a, b):
    """
    -1, 0 or 1, comparing mathematical values.

    Total order:  -Infinity < finite < +Infinity < NaN, with every NaN equal and -0 == +0.
    TypeError if either is not a supported kind of number.
    """
    a = exact_parts(a)
    b = exact_parts(b)
    if a.special == NAN or b.special == NAN:
        return (a.special == NAN) - (b.special == NAN)
    a_sign = _sign(a)
    b_sign = _sign(b)
    if a_sign != b_sign:
        return 1 if a_sign > b_sign else -1
    if a_sign == 0:
        return 0
    if a.special == INFINITY or b.special == INFINITY:
        return a_sign * ((a.special == INFINITY) - (b.special == INFINITY))
    return a_sign * _compare_magnitude(a, b)


assert 0 == compare_exact(0.5, fractions.Fraction(1, 2))
assert 0 == compare_exact(-0.0, 0)
assert 1 == compare_exact(float('nan'), float('inf'))
assert -1 == compare_exact(decimal.Decimal('1E+999999999'), decimal.Decimal('1.0000001E+999999999'))
assert 1 == compare_exact(decimal.Decimal('1E-999999'), 0.0)
assert -1 == compare_exact(decimal.Decimal('0.1'), 0.1)


def hash_exact(x):
    """Same as hash() of an equal int, float, Fraction or decimal.Decimal."""
    parts = exact_parts(x)
    info = sys.hash_info
    if parts.special == NAN:
        return info.nan
    if parts.special == INFINITY:
        return -info.inf if parts.negative else info.inf
    modulus = info.modulus
    numerator = parts.numerator
    denominator = parts.denominator
    common = math.gcd(numerator, denominator)
    numerator //= common
    denominator //= common
    if denominator % modulus == 0:
        result = info.inf
    else:
        result = (
            numerator % modulus *
            pow(2, parts.exponent2, modulus) *
            pow(10, parts.exponent10, modulus) *
            pow(denominator, -1, modulus)
        ) % modulus
    if parts.negative:
        result = -result
    return -2 if result == -1 else result


assert hash(0.1) == hash_exact(0.1)
assert hash(-1) == hash_exact(-1)
assert hash(decimal.Decimal('1.25')) == hash_exact(fractions.Fraction(5, 4))
assert hash(decimal.Decimal('-1E+100')) == hash_exact(decimal.Decimal('-1E+100'))
