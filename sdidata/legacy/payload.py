# Licensed under the GPLv3 - see LICENSE
"""Definitions for legacy payloads, in which only 0x00 is reserved."""
from ..base.payload import PayloadBase
from ..base.encoding import LEGACY_ESCAPE


__all__ = ['LegacyPayload']


class LegacyPayload(PayloadBase):
    """Container for escaping and un-escaping legacy payloads.

    0x00 is replaced by (0xFE, 1), and the escape byte 0xFE by (0xFE, 2).
    """
    _escape_codec = LEGACY_ESCAPE
