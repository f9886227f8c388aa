# Licensed under the GPLv3 - see LICENSE
"""
Definitions for SDI payloads.

Implements a SDIPayload class used to store escaped payload bytes, in which
0x00, 0xFE and 0xFF are replaced by the pairs (0xFE, 1), (0xFE, 2), and
(0xFE, 3), respectively.
"""
from ..base.payload import PayloadBase
from ..base.encoding import SDI_ESCAPE


__all__ = ['SDIPayload']


class SDIPayload(PayloadBase):
    """Container for escaping and un-escaping SDI payloads.

    Parameters
    ----------
    words : `~numpy.ndarray`
        Array of bytes holding the escaped payload.
    header : `~sdidata.sdi.SDIHeader`, optional
        If given, used to check the size of the payload.
    """
    _escape_codec = SDI_ESCAPE
