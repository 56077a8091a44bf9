"""
Binary fixed point approximations behind exp(), log(), log10(), pi() and power().

An integer V stands for V / 2**bits.  Each function states how many units (of 2**-bits)
its answer may be off.  RadixNumber asks for more bits until the error cannot change
the rounded result.
"""

import math


def atanh_fixed(numerator, denominator, bits):
    """atanh(numerator / denominator) * 2**bits, within 2 units, for 0 <= 3 * numerator <= denominator"""
    assert 0 <= 3 * numerator <= denominator
    guard = bits.bit_length() + 8
    wide = bits + guard
    u = (numerator << wide) // denominator
    u_squared = u * u >> wide
    power = u
    total = u
    k = 3
    while power:
        power = power * u_squared >> wide
        total += power // k
        k += 2
    return total >> guard


def atan_inverse_fixed(n, bits):
    """atan(1 / n) * 2**bits, within 2 units, for an integer n >= 2"""
    guard = bits.bit_length() + 8
    wide = bits + guard
    n_squared = n * n
    power = (1 << wide) // n
    total = power
    k = 3
    subtract = True
    while power:
        power //= n_squared
        if subtract:
            total -= power // k
        else:
            total += power // k
        subtract = not subtract
        k += 2
    return total >> guard


def ln_radix_fixed(radix, bits):
    """ln(radix) * 2**bits, within 2 units, for radix 2 or 10"""
    guard = 8
    ln2 = 2 * atanh_fixed(1, 3, bits + guard)
    if radix == 2:
        return ln2 >> guard
    if radix == 10:
        return (3 * ln2 + 2 * atanh_fixed(1, 9, bits + guard)) >> guard
        # NOTE:  ln(10) = 3 ln(2) + ln(10/8), and ln(10/8) = 2 atanh(1/9)
    raise ValueError("No logarithm for radix {}".format(radix))


assert abs(ln_radix_fixed(2, 20) - 726817) <= 2
assert abs(ln_radix_fixed(10, 20) - 2414436) <= 2


def ln_integer_fixed(n, bits):
    """ln(n) * 2**bits, within 2 units, for an integer n >= 1"""
    top = n.bit_length() - 1
    guard = top.bit_length() + 4
    wide = bits + guard
    low = 1 << top
    fraction = 2 * atanh_fixed(n - low, n + low, wide)
    # NOTE:  n / 2**top is in [1, 2), and ln(f) = 2 atanh((f - 1) / (f + 1))
    return (top * ln_radix_fixed(2, wide) + fraction) >> guard


assert ln_integer_fixed(1, 20) == 0
assert abs(ln_integer_fixed(10, 20) - 2414436) <= 2


def exp_fixed(y, bits):
    """exp(y / 2**bits) * 2**bits, within 2 units, for 0 <= y < 3 * 2**bits"""
    assert 0 <= y < 3 << bits
    halvings = max(4, math.isqrt(bits))
    guard = halvings + bits.bit_length() + 16
    wide = bits + guard
    z = (y << guard) >> halvings
    total = 1 << wide
    term = 1 << wide
    k = 1
    while term:
        term = (term * z >> wide) // k
        total += term
        k += 1
    for _ in range(halvings):
        total = total * total >> wide
    return total >> guard


assert exp_fixed(0, 20) == 1 << 20
assert abs(exp_fixed(1 << 20, 20) - 2850325) <= 4


def pi_fixed(bits):
    """pi * 2**bits, within 2 units"""
    guard = bits.bit_length() + 8
    wide = bits + guard
    return (16 * atan_inverse_fixed(5, wide) - 4 * atan_inverse_fixed(239, wide)) >> guard
    # NOTE:  Machin's formula, pi/4 = 4 atan(1/5) - atan(1/239)


assert abs(pi_fixed(20) - 3294199) <= 2


def integer_root(n, k):
    """Largest integer r with r**k <= n, for n >= 0 and k >= 1"""
    if n < 2 or k == 1:
        return n
    r = 1 << -(-n.bit_length() // k)
    while True:
        s = ((k - 1) * r + n // r ** (k - 1)) // k
        if s >= r:
            return r
        r = s


assert integer_root(1000, 3) == 10
assert integer_root(999, 3) == 9
assert integer_root(2 ** 100, 10) == 1024
assert integer_root(15, 2) == 3
