"""
exactcbor - CBOR data with exact arbitrary precision numbers.

Usage example:

    import exactcbor

    item = exactcbor.CBORObject.from_object({'price': exactcbor.ExtendedDecimal('19.99')})
    data = item.encode_to_bytes()
    assert exactcbor.CBORObject.decode_from_bytes(data) == item

Usage example:

    from exactcbor import ExtendedDecimal, PrecisionContext, Rounding

    third = ExtendedDecimal(1).divide(3, PrecisionContext(10, Rounding.HALF_EVEN))   # 0.3333333333
"""

import logging

from .context import PrecisionContext
from .context import Rounding
from .context import TrapError
from .errors import ArithmeticRangeError
from .errors import CBORError
from .errors import FormatError
from .errors import InvalidOperationError
from .extended_decimal import ExtendedDecimal
from .extended_float import ExtendedFloat
from .rational import ExtendedRational
from .cbor import CBORObject
from .cbor import CBORType

__all__ = [
    'PrecisionContext',
    'Rounding',
    'TrapError',
    'ArithmeticRangeError',
    'CBORError',
    'FormatError',
    'InvalidOperationError',
    'ExtendedDecimal',
    'ExtendedFloat',
    'ExtendedRational',
    'CBORObject',
    'CBORType',
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

from . import version
__version__ = version.__doc__
