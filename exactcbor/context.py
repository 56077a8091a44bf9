"""
Rounding configuration for ExtendedDecimal and ExtendedFloat arithmetic.

A PrecisionContext says how many digits (or bits) a result may keep,
how to round away the rest, and what range the adjusted exponent may occupy.
It is an immutable value.  The one exception is the flags accumulator of a
context made by with_blank_flags(), which operations OR their conditions into.

    ctx = PrecisionContext.DECIMAL64.with_blank_flags()
    x = ExtendedDecimal.from_string('1').divide(ExtendedDecimal.from_string('3'), ctx)
    assert ctx.flags & PrecisionContext.FLAG_INEXACT
"""

from .errors import InvalidOperationError


class Rounding(object):
    """
    Rounding modes.

    The value of each member is its name, so repr(ctx) reads naturally.
    Rounding.name_from_code and Rounding.ALL are set up after the class is defined.
    """
    UP           = 'UP'             # away from zero
    DOWN         = 'DOWN'           # toward zero, i.e. truncate
    CEILING      = 'CEILING'        # toward positive infinity
    FLOOR        = 'FLOOR'          # toward negative infinity
    HALF_UP      = 'HALF_UP'        # nearest, ties away from zero
    HALF_DOWN    = 'HALF_DOWN'      # nearest, ties toward zero
    HALF_EVEN    = 'HALF_EVEN'      # nearest, ties to an even last digit
    UNNECESSARY  = 'UNNECESSARY'    # any rounding at all is an invalid operation
    ZERO_FIVE_UP = 'ZERO_FIVE_UP'   # away from zero only if the last kept digit is 0 or 5

    ALL = None

    @classmethod
    def internal_setup(cls):
        """Initialize Rounding.ALL after the class is otherwise defined."""
        cls.ALL = frozenset(getattr(cls, attr) for attr in dir(cls) if attr.isupper() and attr != 'ALL')


Rounding.internal_setup()
assert Rounding.HALF_EVEN in Rounding.ALL
assert len(Rounding.ALL) == 9


class TrapError(ArithmeticError):
    """
    An arithmetic condition happened that the context traps.

    e.g. ExtendedDecimal.ONE.divide(ExtendedDecimal.ZERO, PrecisionContext.DECIMAL32.with_traps(
             PrecisionContext.FLAG_DIVIDE_BY_ZERO))

    Also raised, trapped or not, for a signaling NaN operand,
    and for an exact division whose quotient never terminates.

    .error    - the single flag that triggered the trap, e.g. PrecisionContext.FLAG_INVALID
    .context  - the caller's context, or None
    .result   - what the operation would have returned had it not trapped
    """
    def __init__(self, error, context=None, result=None, message=None):
        self.error = error
        self.context = context
        self.result = result
        if message is None:
            message = "Trapped {}".format(PrecisionContext.flag_names(error))
        super(TrapError, self).__init__(message)


class PrecisionContext(object):
    """
    Immutable description of precision, rounding and exponent range.

    precision - maximum number of significant digits of a result, 0 for unlimited
                (counted in bits when precision_in_bits, and always in bits for ExtendedFloat)
    rounding - a Rounding member
    exponent_min, exponent_max - bounds on the adjusted exponent
                                 (exponent + number of digits - 1), or both None for unbounded
    clamp_normal_exponents - keep exponents at or below exponent_max - precision + 1
                             by padding the mantissa with trailing zeros
    traps - flags that raise TrapError instead of only being recorded
    """
    FLAG_INEXACT        = 0x01
    FLAG_ROUNDED        = 0x02
    FLAG_SUBNORMAL      = 0x04
    FLAG_UNDERFLOW      = 0x08
    FLAG_OVERFLOW       = 0x10
    FLAG_CLAMPED        = 0x20
    FLAG_INVALID        = 0x40
    FLAG_DIVIDE_BY_ZERO = 0x80

    FLAGS_SERIOUS = FLAG_INVALID | FLAG_DIVIDE_BY_ZERO | FLAG_OVERFLOW | FLAG_UNDERFLOW
    # NOTE:  Trap priority:  serious conditions first (lowest bit first), then these in order:
    FLAGS_MILD_IN_TRAP_ORDER = (FLAG_SUBNORMAL, FLAG_INEXACT, FLAG_ROUNDED, FLAG_CLAMPED)

    __slots__ = (
        '_precision',
        '_rounding',
        '_exponent_min',
        '_exponent_max',
        '_clamp_normal_exponents',
        '_precision_in_bits',
        '_traps',
        '_has_flags',
        '_flags',
    )

    def __init__(
        self,
        precision=0,
        rounding=Rounding.HALF_EVEN,
        exponent_min=None,
        exponent_max=None,
        clamp_normal_exponents=False,
        precision_in_bits=False,
        traps=0,
    ):
        if precision is None:
            raise TypeError("precision must be an int, not None")
        if not isinstance(precision, int) or isinstance(precision, bool):
            raise self.ConstructorTypeError("precision must be an int, not a " + type(precision).__name__)
        if precision < 0:
            raise self.ConstructorValueError("precision {} is negative".format(precision))
        if rounding not in Rounding.ALL:
            raise self.ConstructorValueError("Unknown rounding {!r}".format(rounding))
        if (exponent_min is None) != (exponent_max is None):
            raise self.ConstructorValueError("Give both exponent_min and exponent_max, or neither")
        if exponent_min is not None and exponent_min > exponent_max:
            raise self.ConstructorValueError("exponent_min {} exceeds exponent_max {}".format(
                exponent_min,
                exponent_max,
            ))
        self._precision = precision
        self._rounding = rounding
        self._exponent_min = exponent_min
        self._exponent_max = exponent_max
        self._clamp_normal_exponents = bool(clamp_normal_exponents)
        self._precision_in_bits = bool(precision_in_bits)
        self._traps = traps
        self._has_flags = False
        self._flags = 0

    class ConstructorTypeError(TypeError):
        """e.g. PrecisionContext(precision='34')"""

    class ConstructorValueError(ValueError):
        """e.g. PrecisionContext(precision=-1) or PrecisionContext(rounding='SIDEWAYS')"""

    def _copy(self, **changes):
        """A new context with some settings changed.  Flags are not copied."""
        settings = dict(
            precision=self._precision,
            rounding=self._rounding,
            exponent_min=self._exponent_min,
            exponent_max=self._exponent_max,
            clamp_normal_exponents=self._clamp_normal_exponents,
            precision_in_bits=self._precision_in_bits,
            traps=self._traps,
        )
        settings.update(changes)
        return type(self)(**settings)

    @property
    def precision(self):
        return self._precision

    @property
    def rounding(self):
        return self._rounding

    @property
    def exponent_min(self):
        return self._exponent_min

    @property
    def exponent_max(self):
        return self._exponent_max

    @property
    def has_exponent_range(self):
        return self._exponent_min is not None

    @property
    def clamp_normal_exponents(self):
        return self._clamp_normal_exponents

    @property
    def is_precision_in_bits(self):
        return self._precision_in_bits

    @property
    def traps(self):
        return self._traps

    @property
    def has_flags(self):
        return self._has_flags

    @property
    def flags(self):
        return self._flags

    @flags.setter
    def flags(self, value):
        if not self._has_flags:
            raise InvalidOperationError("This context has no flags, use with_blank_flags()")
        self._flags = value

    def with_precision(self, precision):
        return self._copy(precision=precision)

    def with_rounding(self, rounding):
        return self._copy(rounding=rounding)

    def with_exponent_range(self, exponent_min, exponent_max):
        return self._copy(exponent_min=exponent_min, exponent_max=exponent_max)

    def with_unlimited_exponents(self):
        return self._copy(exponent_min=None, exponent_max=None)

    def with_exponent_clamp(self, clamp_normal_exponents):
        return self._copy(clamp_normal_exponents=clamp_normal_exponents)

    def with_precision_in_bits(self, precision_in_bits):
        return self._copy(precision_in_bits=precision_in_bits)

    def with_traps(self, traps):
        return self._copy(traps=traps)

    def with_blank_flags(self):
        """A copy of this context that records the conditions operations raise."""
        new_context = self._copy()
        new_context._has_flags = True
        return new_context

    def with_no_flags(self):
        return self._copy()

    def exponent_within_range(self, exponent):
        """Is exponent between etiny and exponent_max?  (True without an exponent range.)"""
        if not self.has_exponent_range:
            return True
        if self._precision == 0:
            return self._exponent_min <= exponent <= self._exponent_max
        return self.etiny() <= exponent <= self._exponent_max

    def etiny(self):
        """Smallest exponent a subnormal result can have:  exponent_min - precision + 1"""
        return self._exponent_min - self._precision + 1

    def __repr__(self):
        return (
            "PrecisionContext(precision={p}, rounding=Rounding.{r}, "
            "exponent_min={emin}, exponent_max={emax}, clamp_normal_exponents={clamp}, "
            "precision_in_bits={bits}, traps={traps})"
        ).format(
            p=self._precision,
            r=self._rounding,
            emin=self._exponent_min,
            emax=self._exponent_max,
            clamp=self._clamp_normal_exponents,
            bits=self._precision_in_bits,
            traps=self._traps,
        )

    @classmethod
    def for_precision(cls, precision):
        return cls(precision=precision)

    @classmethod
    def for_rounding(cls, rounding):
        return cls(rounding=rounding)

    @classmethod
    def for_precision_and_rounding(cls, precision, rounding):
        return cls(precision=precision, rounding=rounding)

    @classmethod
    def flag_names(cls, flags):
        """E.g. 'INEXACT|ROUNDED' for FLAG_INEXACT | FLAG_ROUNDED"""
        names = [
            attr[len('FLAG_'):]
            for attr in sorted(dir(cls), key=lambda a: getattr(cls, a) if a.startswith('FLAG_') else 0)
            if attr.startswith('FLAG_') and flags & getattr(cls, attr)
        ]
        return '|'.join(names) or 'nothing'

    # Presets
    # -------
    UNLIMITED = None
    DECIMAL32 = None
    DECIMAL64 = None
    DECIMAL128 = None
    BINARY16 = None
    BINARY32 = None
    BINARY64 = None
    BINARY128 = None
    CLI_DECIMAL = None
    BASIC_DEFAULT = None

    @classmethod
    def internal_setup(cls):
        """Initialize the preset contexts after the class is otherwise defined."""
        cls.UNLIMITED     = cls()
        cls.DECIMAL32     = cls(7, Rounding.HALF_EVEN, -95, 96, clamp_normal_exponents=True)
        cls.DECIMAL64     = cls(16, Rounding.HALF_EVEN, -383, 384, clamp_normal_exponents=True)
        cls.DECIMAL128    = cls(34, Rounding.HALF_EVEN, -6143, 6144, clamp_normal_exponents=True)
        cls.BINARY16      = cls(11, Rounding.HALF_EVEN, -14, 15)
        cls.BINARY32      = cls(24, Rounding.HALF_EVEN, -126, 127)
        cls.BINARY64      = cls(53, Rounding.HALF_EVEN, -1022, 1023)
        cls.BINARY128     = cls(113, Rounding.HALF_EVEN, -16382, 16383)
        cls.CLI_DECIMAL   = cls(96, Rounding.HALF_EVEN, 0, 28, clamp_normal_exponents=True, precision_in_bits=True)
        cls.BASIC_DEFAULT = cls(9, Rounding.HALF_UP, -999999999, 999999999)


PrecisionContext.internal_setup()
assert PrecisionContext.BINARY64.etiny() == -1074
assert PrecisionContext.flag_names(PrecisionContext.FLAG_INEXACT | PrecisionContext.FLAG_ROUNDED) == 'INEXACT|ROUNDED'


def trappable(context):
    """
    The context an operation should write its flags into.

    If the caller's context traps anything, the operation works on a private
    copy with blank flags, so trigger_traps() can see exactly what this one operation raised.
    """
    if context is None or context.traps == 0:
        return context
    return context.with_blank_flags()


def trigger_traps(result, working_context, caller_context):
    """Merge the flags an operation raised into the caller's context, then raise TrapError if trapped."""
    if working_context is None or working_context is caller_context:
        return result
    raised = working_context.flags
    if raised == 0:
        return result
    if caller_context.has_flags:
        caller_context.flags |= raised
    trapped = raised & caller_context.traps
    if trapped == 0:
        return result
    serious = trapped & PrecisionContext.FLAGS_SERIOUS
    if serious:
        lowest_serious = serious & -serious
        raise TrapError(lowest_serious, caller_context, result)
    for flag in PrecisionContext.FLAGS_MILD_IN_TRAP_ORDER:
        if trapped & flag:
            raise TrapError(flag, caller_context, result)
    return result


def add_flags(context, flags):
    """Record conditions in a context, if it is recording."""
    if context is not None and context.has_flags:
        context.flags |= flags
