"""
CBOR binary encoding and decoding (RFC 8949).

    data = CBORObject.from_object([1, 'two']).encode_to_bytes()   # b'\\x82\\x01\\x63two'
    item = CBORObject.decode_from_bytes(data)

The decoder trusts nothing:  every malformation is a CBORError, and a declared length
is checked against the input before anything that size is allocated.
"""

import io
import logging
import struct

from .errors import CBORError
from . import cbor
from . import ieee


logger = logging.getLogger(__name__)

CBOR_UINT   = 0
CBOR_NEGINT = 1
CBOR_BYTES  = 2
CBOR_TEXT   = 3
CBOR_ARRAY  = 4
CBOR_MAP    = 5
CBOR_TAG    = 6
CBOR_7      = 7   # floats and simple values

CBOR_UINT8_FOLLOWS  = 24
CBOR_UINT16_FOLLOWS = 25
CBOR_UINT32_FOLLOWS = 26
CBOR_UINT64_FOLLOWS = 27
CBOR_VAR_FOLLOWS    = 31

CBOR_FLOAT16 = 0xF9
CBOR_FLOAT32 = 0xFA
CBOR_FLOAT64 = 0xFB
CBOR_BREAK   = 0xFF

_ARGUMENT_FORMATS = {
    CBOR_UINT8_FOLLOWS: '>B',
    CBOR_UINT16_FOLLOWS: '>H',
    CBOR_UINT32_FOLLOWS: '>I',
    CBOR_UINT64_FOLLOWS: '>Q',
}


def rejected(message):
    """Log and make the error for malformed input.  Use:  raise rejected('...')"""
    logger.debug("Rejected CBOR:  %s", message)
    return CBORError(message)


class BytesSource(object):
    """Bytes to decode, all in memory."""
    def __init__(self, data):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("CBOR data must be bytes, not a " + type(data).__name__)
        self._data = bytes(data)
        self._position = 0

    def read(self, n):
        end = self._position + n
        if end > len(self._data):
            raise rejected("Truncated:  {} bytes wanted at offset {}, {} there".format(
                n,
                self._position,
                len(self._data) - self._position,
            ))
        chunk = self._data[self._position:end]
        self._position = end
        return chunk

    def peek(self):
        """The next byte, not consumed, or None at the end."""
        if self._position >= len(self._data):
            return None
        return self._data[self._position]

    def remaining(self):
        return len(self._data) - self._position

    @property
    def position(self):
        return self._position


class StreamSource(object):
    """Bytes to decode from a binary file-like object, read only as far as needed."""
    CHUNK_SIZE = 65536

    def __init__(self, stream):
        self._stream = stream
        self._lookahead = b''
        self._position = 0

    def _read_some(self, n):
        data = self._stream.read(n)
        if data is None:
            return b''
        return bytes(data)

    def read(self, n):
        pieces = [self._lookahead[:n]]
        got = len(pieces[0])
        self._lookahead = self._lookahead[n:]
        while got < n:
            # NOTE:  A declared length is only a claim, so never ask the stream for it all at once.
            piece = self._read_some(min(n - got, self.CHUNK_SIZE))
            if not piece:
                raise rejected("Truncated:  {} bytes wanted at offset {}, {} there".format(
                    n,
                    self._position,
                    got,
                ))
            pieces.append(piece)
            got += len(piece)
        self._position += n
        return b''.join(pieces)

    def peek(self):
        if not self._lookahead:
            self._lookahead = self._read_some(1)
        if not self._lookahead:
            return None
        return self._lookahead[0]

    def remaining(self):
        """Unknown for a stream."""
        return None

    @property
    def position(self):
        return self._position


class Decoder(object):
    """Decode CBOR items from a BytesSource or StreamSource."""
    MAX_DEPTH_DEFAULT = 200

    def __init__(self, source, max_depth=None, allow_duplicate_keys=False):
        self._source = source
        self._max_depth = self.MAX_DEPTH_DEFAULT if max_depth is None else max_depth
        self._allow_duplicate_keys = allow_duplicate_keys
        self._from_bignum_tag = {}

    def decode_item(self):
        """The next item."""
        if self._source.peek() is None:
            raise rejected("No CBOR data")
        try:
            return self._read_item(0)
        except RecursionError:
            raise rejected("Nested too deeply")
        finally:
            self._from_bignum_tag.clear()

    def decode_only_item(self):
        """The one and only item, CBORError if anything follows it."""
        item = self.decode_item()
        if self._source.peek() is not None:
            raise rejected("{} bytes left over after the item".format(self._source.remaining()))
        return item

    def _read_byte(self):
        return self._source.read(1)[0]

    def _read_argument(self, info):
        """The count, value or length in a header, or None for indefinite length."""
        if info < CBOR_UINT8_FOLLOWS:
            return info
        if info in _ARGUMENT_FORMATS:
            argument_format = _ARGUMENT_FORMATS[info]
            return struct.unpack(argument_format, self._source.read(struct.calcsize(argument_format)))[0]
        if info == CBOR_VAR_FOLLOWS:
            return None
        raise rejected("Reserved additional information {}".format(info))

    def _check_length(self, count, minimum_bytes_each):
        remaining = self._source.remaining()
        if remaining is not None and count * minimum_bytes_each > remaining:
            raise rejected("Length {} is more than the {} bytes left".format(count, remaining))

    def _read_item(self, depth):
        if depth > self._max_depth:
            raise rejected("Nested deeper than {}".format(self._max_depth))
        initial = self._read_byte()
        major = initial >> 5
        info = initial & 0x1F
        if major == CBOR_7:
            return self._read_simple_or_float(initial, info)
        argument = self._read_argument(info)
        if argument is None and major in (CBOR_UINT, CBOR_NEGINT, CBOR_TAG):
            raise rejected("Major type {} cannot have indefinite length".format(major))
        if major == CBOR_UINT:
            return cbor.CBORObject(cbor.integer_kind(argument), argument)
        if major == CBOR_NEGINT:
            return cbor.CBORObject(cbor.integer_kind(-1 - argument), -1 - argument)
        if major == CBOR_BYTES:
            return cbor.CBORObject(cbor.BYTES, self._read_string(major, argument))
        if major == CBOR_TEXT:
            return cbor.CBORObject(cbor.TEXT, self._read_string(major, argument))
        if major == CBOR_ARRAY:
            return self._read_array(argument, depth)
        if major == CBOR_MAP:
            return self._read_map(argument, depth)
        return self._read_tagged(argument, depth)

    def _read_simple_or_float(self, initial, info):
        if initial == CBOR_FLOAT16:
            return cbor.CBORObject(cbor.SINGLE, ieee.HALF.from_bits(struct.unpack('>H', self._source.read(2))[0]))
        if initial == CBOR_FLOAT32:
            return cbor.CBORObject(cbor.SINGLE, ieee.SINGLE.from_bits(struct.unpack('>I', self._source.read(4))[0]))
        if initial == CBOR_FLOAT64:
            return cbor.CBORObject(cbor.DOUBLE, ieee.DOUBLE.from_bits(struct.unpack('>Q', self._source.read(8))[0]))
        if initial == CBOR_BREAK:
            raise rejected("Break outside an indefinite length item")
        if info < CBOR_UINT8_FOLLOWS:
            return cbor.CBORObject.from_simple_value(info)
        if info == CBOR_UINT8_FOLLOWS:
            value = self._read_byte()
            if value < 32:
                raise rejected("Simple value {} must be one byte, not two".format(value))
            return cbor.CBORObject.from_simple_value(value)
        raise rejected("Reserved additional information {}".format(info))

    def _read_string(self, major, length):
        if length is not None:
            self._check_length(length, 1)
            return self._decoded(major, self._source.read(length))
        pieces = []
        while True:
            initial = self._source.peek()
            if initial is None:
                raise rejected("Truncated indefinite length string")
            if initial == CBOR_BREAK:
                self._read_byte()
                break
            self._read_byte()
            if initial >> 5 != major:
                raise rejected("Chunk of major type {} in a string of major type {}".format(initial >> 5, major))
            chunk_length = self._read_argument(initial & 0x1F)
            if chunk_length is None:
                raise rejected("Indefinite length chunk in an indefinite length string")
            self._check_length(chunk_length, 1)
            pieces.append(self._decoded(major, self._source.read(chunk_length)))
        return (b'' if major == CBOR_BYTES else '').join(pieces)

    @staticmethod
    def _decoded(major, raw):
        if major == CBOR_BYTES:
            return raw
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise rejected("Invalid UTF-8 text:  " + str(e))

    def _at_break(self):
        initial = self._source.peek()
        if initial is None:
            raise rejected("Truncated indefinite length item")
        if initial == CBOR_BREAK:
            self._read_byte()
            return True
        return False

    def _read_array(self, count, depth):
        elements = []
        if count is None:
            while not self._at_break():
                elements.append(self._read_item(depth + 1))
        else:
            self._check_length(count, 1)
            for _ in range(count):
                elements.append(self._read_item(depth + 1))
        return cbor.CBORObject(cbor.ARRAY, elements)

    def _read_map(self, count, depth):
        entries = {}
        if count is not None:
            self._check_length(count, 2)
        index = 0
        while True:
            if count is None:
                if self._at_break():
                    break
            elif index >= count:
                break
            key = self._read_item(depth + 1)
            value = self._read_item(depth + 1)
            if key in entries and not self._allow_duplicate_keys:
                raise rejected("Duplicate map key " + str(key))
            entries[key] = value
            index += 1
        return cbor.CBORObject(cbor.MAP, entries)

    def _read_tagged(self, tag, depth):
        if self._source.peek() == CBOR_BREAK:
            raise rejected("Tag {} followed by a break".format(tag))
        item = self._read_item(depth + 1)
        if tag in (4, 5) and item.kind == cbor.ARRAY and item.value:
            # NOTE:  Only tags 264 and 265 take a bignum exponent.
            if id(item.value[0]) in self._from_bignum_tag:
                raise rejected("Tag {} exponent is a bignum".format(tag))
        try:
            tagged = cbor.CBORObject.tagged(tag, item)
        except CBORError as e:
            raise rejected(str(e))
        if tag in cbor.BIGNUM_TAGS:
            self._from_bignum_tag[id(tagged)] = tagged
        return tagged


class Encoder(object):
    """Encode CBORObjects in the shortest forms, except strings may be chunked on request."""
    CHUNK_SIZE_DEFAULT = 4096

    def __init__(self, use_indefinite_strings=False, chunk_size=None):
        self._use_indefinite_strings = use_indefinite_strings
        self._chunk_size = self.CHUNK_SIZE_DEFAULT if chunk_size is None else chunk_size

    def encode(self, item):
        out = io.BytesIO()
        self._write(item, out)
        return out.getvalue()

    def write(self, item, stream):
        stream.write(self.encode(item))

    @staticmethod
    def _head(major, argument):
        if argument < CBOR_UINT8_FOLLOWS:
            return struct.pack('>B', major << 5 | argument)
        for info in (CBOR_UINT8_FOLLOWS, CBOR_UINT16_FOLLOWS, CBOR_UINT32_FOLLOWS, CBOR_UINT64_FOLLOWS):
            argument_format = _ARGUMENT_FORMATS[info]
            if argument < 1 << (8 * struct.calcsize(argument_format)):
                return struct.pack('>B', major << 5 | info) + struct.pack(argument_format, argument)
        raise ValueError("CBOR argument {} does not fit 64 bits".format(argument))

    def _write_integer(self, n, out):
        if 0 <= n < cbor.UINT64_LIMIT:
            out.write(self._head(CBOR_UINT, n))
        elif -cbor.UINT64_LIMIT <= n < 0:
            out.write(self._head(CBOR_NEGINT, -1 - n))
        else:
            magnitude = n if n >= 0 else -1 - n
            out.write(self._head(CBOR_TAG, 2 if n >= 0 else 3))
            out.write(self._head(CBOR_BYTES, (magnitude.bit_length() + 7) // 8))
            out.write(magnitude.to_bytes((magnitude.bit_length() + 7) // 8, 'big'))

    def _write_double_bits(self, bits, out):
        out.write(struct.pack('>BQ', CBOR_FLOAT64, bits))

    def _write_special(self, number, out):
        """Negative zero, infinities and NaNs of the Extended kinds go as doubles."""
        if number.is_nan():
            payload = getattr(number, 'unsigned_mantissa', 0)
            bits = ieee.DOUBLE.compose_nan(number.is_negative(), payload, number.is_signaling_nan())
            self._write_double_bits(bits, out)
        elif number.is_infinity():
            out.write(struct.pack('>Bd', CBOR_FLOAT64, float('-inf') if number.is_negative() else float('inf')))
        else:
            out.write(struct.pack('>Bd', CBOR_FLOAT64, -0.0))

    def _write_fraction(self, tag, exponent, mantissa, out):
        if not -cbor.UINT64_LIMIT <= exponent < cbor.UINT64_LIMIT:
            tag += 260
        out.write(self._head(CBOR_TAG, tag))
        out.write(self._head(CBOR_ARRAY, 2))
        self._write_integer(exponent, out)
        self._write_integer(mantissa, out)

    def _write_string(self, major, raw, out):
        if not self._use_indefinite_strings:
            out.write(self._head(major, len(raw)))
            out.write(raw)
            return
        out.write(struct.pack('>B', major << 5 | CBOR_VAR_FOLLOWS))
        start = 0
        while start < len(raw):
            end = min(start + self._chunk_size, len(raw))
            if major == CBOR_TEXT:
                # NOTE:  Chunks split between characters, never inside a UTF-8 sequence.
                while end < len(raw) and raw[end] & 0xC0 == 0x80:
                    end -= 1
                if end == start:
                    end = start + 1
                    while end < len(raw) and raw[end] & 0xC0 == 0x80:
                        end += 1
            out.write(self._head(major, end - start))
            out.write(raw[start:end])
            start = end
        out.write(struct.pack('>B', CBOR_BREAK))

    def _write(self, item, out):
        for tag in item.get_tags():
            out.write(self._head(CBOR_TAG, tag))
        kind = item.kind
        value = item.value
        if kind == cbor.SIMPLE:
            if value < CBOR_UINT8_FOLLOWS:
                out.write(struct.pack('>B', CBOR_7 << 5 | value))
            else:
                out.write(struct.pack('>BB', CBOR_7 << 5 | CBOR_UINT8_FOLLOWS, value))
        elif kind in (cbor.INTEGER, cbor.BIG_INTEGER):
            self._write_integer(value, out)
        elif kind == cbor.SINGLE:
            out.write(struct.pack('>BI', CBOR_FLOAT32, ieee.SINGLE.to_bits(value)))
        elif kind == cbor.DOUBLE:
            self._write_double_bits(ieee.DOUBLE.to_bits(value), out)
        elif kind in (cbor.DECIMAL, cbor.BINARY):
            if not value.is_finite() or (value.is_zero() and value.is_negative()):
                self._write_special(value, out)
            else:
                self._write_fraction(4 if kind == cbor.DECIMAL else 5, value.exponent, value.mantissa, out)
        elif kind == cbor.RATIONAL:
            if not value.is_finite() or (value.is_zero() and value.is_negative()):
                self._write_special(value, out)
            else:
                out.write(self._head(CBOR_TAG, cbor.RATIONAL_TAG))
                out.write(self._head(CBOR_ARRAY, 2))
                self._write_integer(value.numerator, out)
                self._write_integer(value.denominator, out)
        elif kind == cbor.BYTES:
            self._write_string(CBOR_BYTES, value, out)
        elif kind == cbor.TEXT:
            self._write_string(CBOR_TEXT, value.encode('utf-8'), out)
        elif kind == cbor.ARRAY:
            out.write(self._head(CBOR_ARRAY, len(value)))
            for element in value:
                self._write(element, out)
        else:
            out.write(self._head(CBOR_MAP, len(value)))
            for key, element in value.items():
                self._write(key, out)
                self._write(element, out)
