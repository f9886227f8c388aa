# Licensed under the GPLv3 - see LICENSE
"""Definitions for legacy frames."""
from ..base.frame import FrameBase
from .header import LegacyHeader, LegacyTaggedHeader
from .payload import LegacyPayload


__all__ = ['LegacyFrame', 'write_frame', 'read_frame']


class LegacyFrame(FrameBase):
    """Representation of a legacy frame, consisting of a header and payload.

    Parameters
    ----------
    header : `~sdidata.legacy.LegacyHeader` or
             `~sdidata.legacy.LegacyTaggedHeader`
        Wrapper around the encoded header words.
    payload : `~sdidata.legacy.LegacyPayload`
        Wrapper around the escaped payload.
    verify : bool
        Whether to do basic verification of integrity.  Default: `True`.
    """
    _header_classes = {True: LegacyTaggedHeader, False: LegacyHeader}
    _payload_class = LegacyPayload


def write_frame(carrier, payload, use_magic=False):
    """Write a payload as a legacy frame at the start of a carrier.

    As `sdidata.sdi.write_frame`, except that by default no magic marker is
    written.
    """
    LegacyFrame.write(carrier, payload, magic=use_magic)


def read_frame(carrier, expect_magic=False):
    """Read the payload of a legacy frame at the start of a carrier.

    As `sdidata.sdi.read_frame`, except that by default no magic marker is
    expected.
    """
    frame = LegacyFrame.read(carrier, magic=expect_magic)
    return None if frame is None else frame.data
