# Licensed under the GPLv3 - see LICENSE
"""
Definitions for legacy frame headers.

The legacy scheme encodes lengths in radix 255, which guarantees only that
no header byte is 0x00.  Frames were originally sent without marker, i.e.,
as `LegacyHeader`; `LegacyTaggedHeader` adds the magic marker.
"""
from ..base.header import (HeaderParser, FrameHeaderBase, MAGIC_NUMBER,
                           one_word_struct, two_word_struct)
from ..base.encoding import SAFE_U32_255


__all__ = ['LegacyHeader', 'LegacyTaggedHeader']


_EMPTY_LENGTH = int.from_bytes(SAFE_U32_255.encode(0), 'big')


class LegacyHeader(FrameHeaderBase):
    """Decoder/encoder of an untagged legacy frame header.

    A single big-endian 32-bit word with the escaped payload length encoded
    with `~sdidata.base.encoding.SAFE_U32_255`.

    Parameters
    ----------
    words : tuple of int, or None
        One 32-bit unsigned int header word.  If `None`, set to a list of
        zeros for later initialisation.
    verify : bool, optional
        Whether to do basic verification of integrity.  Default: `True`.
    """
    _header_parser = HeaderParser(
        (('safe_length', (0, 0, 32, _EMPTY_LENGTH)),))
    _struct = one_word_struct
    _safe_codec = SAFE_U32_255


class LegacyTaggedHeader(FrameHeaderBase):
    """Decoder/encoder of a tagged legacy frame header.

    Like `LegacyHeader`, but preceded by the magic marker.
    """
    _header_parser = HeaderParser(
        (('magic', (0, 0, 32, MAGIC_NUMBER)),
         ('safe_length', (1, 0, 32, _EMPTY_LENGTH))))
    _struct = two_word_struct
    _safe_codec = SAFE_U32_255
