# Licensed under the GPLv3 - see LICENSE
"""
Definitions for SDI frame headers.

Implements header classes for frames with lengths encoded in radix 254, such
that no header byte is 0x00 or 0xFF, as is required for the active video of
serial digital interface (SDI) links.  Two variants exist: `SDIHeader` starts
with the magic marker 0xDEADB00B, which allows one to distinguish frames from
arbitrary video; `SDIUntaggedHeader` holds just the length.
"""
from ..base.header import (HeaderParser, FrameHeaderBase, MAGIC_NUMBER,
                           one_word_struct, two_word_struct)
from ..base.encoding import SAFE_U32_254


__all__ = ['SDIHeader', 'SDIUntaggedHeader']


_EMPTY_LENGTH = int.from_bytes(SAFE_U32_254.encode(0), 'big')


class SDIHeader(FrameHeaderBase):
    """Decoder/encoder of a tagged SDI frame header.

    The header consists of two big-endian 32-bit words: the magic marker,
    and the escaped payload length encoded with
    `~sdidata.base.encoding.SAFE_U32_254`.

    Parameters
    ----------
    words : tuple of int, or None
        Two 32-bit unsigned int header words.  If `None`, set to a list of
        zeros for later initialisation.
    verify : bool, optional
        Whether to do basic verification of integrity.  Default: `True`.

    Returns
    -------
    header : `SDIHeader`
    """

    _header_parser = HeaderParser(
        (('magic', (0, 0, 32, MAGIC_NUMBER)),
         ('safe_length', (1, 0, 32, _EMPTY_LENGTH))))
    _struct = two_word_struct
    _safe_codec = SAFE_U32_254


class SDIUntaggedHeader(FrameHeaderBase):
    """Decoder/encoder of an untagged SDI frame header.

    The header is a single big-endian 32-bit word holding the escaped payload
    length encoded with `~sdidata.base.encoding.SAFE_U32_254`.

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
    _safe_codec = SAFE_U32_254
