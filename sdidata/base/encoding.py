# Licensed under the GPLv3 - see LICENSE
"""Encoders and decoders that keep forbidden byte values out of a carrier.

Many digital video paths reserve or clamp certain byte values (notably
0x00 and 0xFF), so any data tunnelled through a video frame should avoid
them.  Two complementary schemes are implemented here:

- `~sdidata.base.encoding.SafeValueCodec` re-expresses a fixed-width
  number (e.g., a length) in a smaller radix and adds an offset to every
  digit, so that the digits never take the forbidden values.
- `~sdidata.base.encoding.EscapeCodec` substitutes every reserved byte of
  an arbitrary payload with a two-byte escape sequence.
"""
import numpy as np

from .utils import InvalidDigit, get_converter


__all__ = ['MalformedPayload', 'SafeValueCodec', 'EscapeCodec',
           'SAFE_U32_254', 'SAFE_U32_255', 'ESCAPE_BYTE',
           'SDI_ESCAPE', 'LEGACY_ESCAPE',
           'encode_safe_u32', 'decode_safe_u32']


class MalformedPayload(ValueError):
    """Escaped payload that cannot be decoded."""
    pass


class SafeValueCodec:
    """Encoder/decoder of fixed-width values that avoid forbidden bytes.

    On encoding, the value is converted from radix 256 to ``base`` using
    `~sdidata.base.utils.RadixConverter`, left-padded with zero digits to
    ``width``, and each digit is increased by ``offset``.  For ``base=254``
    and ``offset=1``, every encoded byte thus lies in [1, 254], i.e., it is
    never 0x00 nor 0xFF; for ``base=255``, bytes lie in [1, 255].  Digits
    are written most significant first.

    Decoding inverts the steps; any byte that does not correspond to a
    valid digit (e.g., 0x00) signals malformed input.

    Note that ``base ** width`` need not exceed the range of the value one
    would like to encode: in particular, both ``254**4`` and ``255**4`` are
    smaller than ``2**32``.  Values larger than `max_value` cannot be
    represented and are refused rather than silently truncated.

    Parameters
    ----------
    base : int
        Radix of the encoded digits.  Should be at most ``256 - offset``.
    offset : int, optional
        Value added to each digit.  Default: 1.
    width : int, optional
        Number of encoded bytes.  Default: 4.
    """

    def __init__(self, base, offset=1, width=4):
        if not 2 <= base <= 256 - offset or offset < 0:
            raise ValueError("base + offset should fit in a byte.")
        self.base = base
        self.offset = offset
        self.width = width
        self._encoder = get_converter(256, base)
        self._decoder = get_converter(base, 256)

    @property
    def max_value(self):
        """Largest value that can be encoded in ``width`` bytes."""
        return self.base ** self.width - 1

    @property
    def forbidden(self):
        """Byte values that never appear in the encoded bytes."""
        return (set(range(self.offset))
                | set(range(self.base + self.offset, 256)))

    def encode(self, value):
        """Encode a value to ``width`` safe bytes.

        Parameters
        ----------
        value : int
            Non-negative value, at most `max_value`.

        Returns
        -------
        encoded : bytes
        """
        value = int(value)
        if not 0 <= value <= self.max_value:
            raise ValueError("value {0} cannot be represented with {1} digits "
                             "of radix {2}.".format(value, self.width,
                                                    self.base))
        # Conversion starts from the big-endian bytes of the value, but
        # goes via RadixConverter, so that arbitrary widths work too.
        nbytes = max((value.bit_length() + 7) // 8, 1)
        digits = self._encoder(value.to_bytes(nbytes, 'big'))
        assert len(digits) <= self.width
        encoded = np.zeros(self.width, dtype='u1')
        encoded[self.width - len(digits):] = digits
        encoded += self.offset
        return encoded.tobytes()

    def decode(self, encoded):
        """Decode ``width`` safe bytes to a value.

        Parameters
        ----------
        encoded : bytes or array of byte

        Returns
        -------
        value : int

        Raises
        ------
        InvalidDigit
            If any of the bytes is not a valid encoded digit.
        """
        encoded = np.frombuffer(bytes(encoded), dtype='u1')
        if len(encoded) != self.width:
            raise ValueError("should have exactly {0} encoded bytes."
                             .format(self.width))
        # Subtract in a signed type so that underflow shows up as -1.
        digits = encoded.astype(np.int16) - self.offset
        if np.any(digits < 0):
            raise InvalidDigit("encoded value contains a byte below {0}."
                               .format(self.offset))
        return int.from_bytes(self._decoder(digits).tobytes(), 'big')

    def __eq__(self, other):
        return (type(self) is type(other)
                and (self.base, self.offset, self.width)
                == (other.base, other.offset, other.width))

    def __repr__(self):
        return "{0}(base={1}, offset={2}, width={3})".format(
            self.__class__.__name__, self.base, self.offset, self.width)


SAFE_U32_254 = SafeValueCodec(254)
"""Codec for 32-bit lengths which avoids both 0x00 and 0xFF."""
SAFE_U32_255 = SafeValueCodec(255)
"""Codec for 32-bit lengths which avoids 0x00 only."""


def encode_safe_u32(value):
    """Encode a 32-bit length to 4 bytes, none of which is 0x00 or 0xFF."""
    return SAFE_U32_254.encode(value)


def decode_safe_u32(encoded):
    """Decode 4 bytes encoded with `encode_safe_u32`."""
    return SAFE_U32_254.decode(encoded)


class EscapeCodec:
    """Encoder/decoder that escapes reserved bytes in a payload.

    Every reserved byte in the payload is replaced by a pair
    ``(escape, code)``, where the code identifies which reserved value was
    replaced.  The escape byte itself is always reserved as well, so that in
    the escaped payload it only ever appears as the start of a pair.

    Encoding and decoding are done with look-up tables, so they act on
    a whole payload at once.

    Parameters
    ----------
    escape : int
        The escape byte.
    codes : dict
        Codes for the reserved literal byte values (which should not include
        the escape byte itself).
    escape_code : int
        Code used for the escape byte itself.

    Notes
    -----
    Codes must be at least 1, unique, and differ from the escape byte.
    """

    def __init__(self, escape, codes, escape_code):
        if escape in codes:
            raise ValueError("escape byte cannot also be a reserved literal; "
                             "pass its code as ``escape_code``.")
        codes = dict(codes)
        codes[escape] = escape_code
        if len(set(codes.values())) != len(codes):
            raise ValueError("codes should be unique.")
        for value, code in codes.items():
            if not (0 <= value < 256 and 1 <= code < 256 and code != escape):
                raise ValueError("invalid code {0} for byte {1}."
                                 .format(code, value))

        self.escape = escape
        self.codes = codes
        # Look-up tables: code to use for each byte (0 if not reserved),
        # and byte represented by each code (-1 if not a valid code).
        self._encode_lut = np.zeros(256, dtype='u1')
        self._decode_lut = np.full(256, -1, dtype=np.int16)
        for value, code in codes.items():
            self._encode_lut[value] = code
            self._decode_lut[code] = value

    @property
    def reserved(self):
        """Byte values that never appear unescaped in the encoded payload."""
        return set(self.codes)

    def encode(self, payload):
        """Escape all reserved bytes in the payload.

        Parameters
        ----------
        payload : bytes or array of byte

        Returns
        -------
        escaped : bytes
            At most twice as long as the input.
        """
        words = np.frombuffer(bytes(payload), dtype='u1')
        codes = self._encode_lut[words]
        reserved = codes != 0
        # Each byte moves forward by the number of escapes before it.
        positions = np.arange(len(words)) + np.cumsum(reserved) - reserved
        escaped = np.empty(len(words) + np.count_nonzero(reserved), 'u1')
        escaped[positions] = np.where(reserved, self.escape, words)
        escaped[positions[reserved] + 1] = codes[reserved]
        return escaped.tobytes()

    def decode(self, escaped):
        """Restore the reserved bytes in an escaped payload.

        Parameters
        ----------
        escaped : bytes or array of byte

        Returns
        -------
        payload : bytes

        Raises
        ------
        MalformedPayload
            If an escape byte is not followed by a valid code, including
            when it is the last byte.
        """
        words = np.frombuffer(bytes(escaped), dtype='u1')
        starts = np.flatnonzero(words == self.escape)
        if len(starts) == 0:
            return words.tobytes()

        if starts[-1] == len(words) - 1:
            raise MalformedPayload("escaped payload ends with an escape byte.")

        values = self._decode_lut[words[starts + 1]]
        if np.any(values < 0):
            bad = words[starts + 1][values < 0][0]
            raise MalformedPayload("unexpected escape code {0}.".format(bad))

        payload = words.copy()
        payload[starts + 1] = values
        return np.delete(payload, starts).tobytes()

    def __eq__(self, other):
        return (type(self) is type(other)
                and self.escape == other.escape
                and self.codes == other.codes)

    def __repr__(self):
        return "{0}(escape={1}, codes={2})".format(
            self.__class__.__name__, self.escape, self.codes)


ESCAPE_BYTE = 254
"""Escape byte used by all formats."""

SDI_ESCAPE = EscapeCodec(ESCAPE_BYTE, {0: 1, 255: 3}, escape_code=2)
"""Escapes 0x00, 0xFE and 0xFF: 0 -> (254, 1), 254 -> (254, 2), 255 -> (254, 3).
"""
LEGACY_ESCAPE = EscapeCodec(ESCAPE_BYTE, {0: 1}, escape_code=2)
"""Escapes only 0x00 (and the escape byte): 0 -> (254, 1), 254 -> (254, 2)."""
