# Licensed under the GPLv3 - see LICENSE
"""
Definitions for SDI frames.

Implements a SDIFrame class that can be used to hold a header and a payload,
and functions to write a payload to, or read it from, a carrier.
"""
from ..base.frame import FrameBase
from .header import SDIHeader, SDIUntaggedHeader
from .payload import SDIPayload


__all__ = ['SDIFrame', 'write_frame', 'read_frame']


class SDIFrame(FrameBase):
    """Representation of a SDI frame, consisting of a header and payload.

    Parameters
    ----------
    header : `~sdidata.sdi.SDIHeader` or `~sdidata.sdi.SDIUntaggedHeader`
        Wrapper around the encoded header words.
    payload : `~sdidata.sdi.SDIPayload`
        Wrapper around the escaped payload.
    verify : bool
        Whether to do basic verification of integrity.  Default: `True`.

    Notes
    -----
    The frame can also be instantiated using class methods:

      fromdata : escape data as payload and create a matching header

      frombuffer : get header and payload from a carrier

      read : like frombuffer, but returns `None` if there is no frame

    Of course, one can also do the opposite:

      tobuffer : write header and payload into a carrier

      tofile : write header and payload to a filehandle

      data : property that yields the un-escaped payload
    """
    _header_classes = {True: SDIHeader, False: SDIUntaggedHeader}
    _payload_class = SDIPayload


def write_frame(carrier, payload, use_magic=True):
    """Write a payload as a SDI frame at the start of a carrier.

    Parameters
    ----------
    carrier : bytearray, memoryview, or `~numpy.ndarray`
        Writable carrier, e.g., a video frame.  Bytes beyond the frame are
        left untouched.
    payload : bytes or str
        Data to write.  A `str` is encoded as UTF-8.  If empty, a valid
        frame with zero length is written.
    use_magic : bool, optional
        Whether to start the frame with the magic marker.  Default: `True`.

    Raises
    ------
    ~sdidata.base.frame.PayloadTooLarge
        If the frame does not fit in the carrier, in which case the carrier
        is not modified.
    """
    SDIFrame.write(carrier, payload, magic=use_magic)


def read_frame(carrier, expect_magic=True):
    """Read the payload of a SDI frame at the start of a carrier.

    Parameters
    ----------
    carrier : bytes, bytearray, memoryview, or `~numpy.ndarray`
        Carrier possibly holding a frame.
    expect_magic : bool, optional
        Whether the frame should start with the magic marker.
        Default: `True`.

    Returns
    -------
    payload : bytes or `None`
        `None` if the carrier does not hold a frame with data.

    Raises
    ------
    ~sdidata.base.encoding.MalformedPayload
        If the escaped payload is corrupt.
    """
    frame = SDIFrame.read(carrier, magic=expect_magic)
    return None if frame is None else frame.data
