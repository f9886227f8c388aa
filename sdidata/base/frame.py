# Licensed under the GPLv3 - see LICENSE
"""
Base definitions for frames embedded in carriers.

A frame consists of a header (optional magic marker plus safe-encoded
length) and an escaped payload, and is written at the start of a carrier,
typically a raw video frame.  The remainder of the carrier is filler that
is neither written nor interpreted.

Defines a frame class FrameBase that holds a header and payload, and can
be written to and read from a carrier.
"""
import numpy as np

from .header import MAGIC_NUMBER
from .utils import InvalidDigit


__all__ = ['PayloadTooLarge', 'carrier_array', 'FrameBase']


class PayloadTooLarge(ValueError):
    """Payload that does not fit in a carrier."""
    pass


def carrier_array(carrier):
    """Flat array of bytes sharing memory with the carrier.

    Parameters
    ----------
    carrier : bytes, bytearray, memoryview, or `~numpy.ndarray`
        Carrier buffer.  Arrays can have any shape and dtype, but should be
        contiguous.
    """
    if isinstance(carrier, np.ndarray):
        if not carrier.flags.c_contiguous:
            raise ValueError("carrier array should be contiguous.")
        return carrier.reshape(-1).view('u1')

    return np.frombuffer(carrier, dtype='u1')


class FrameBase:
    """Representation of a frame, consisting of a header and payload.

    Subclasses should define:

      _header_classes : dict with the header classes to use for tagged
      (key `True`) and untagged (key `False`) frames.

      _payload_class : payload class.

    Parameters
    ----------
    header : `~sdidata.base.header.FrameHeaderBase`
        Wrapper around the encoded header words.
    payload : `~sdidata.base.payload.PayloadBase`
        Wrapper around the escaped payload.
    verify : bool
        Whether to do basic verification of integrity.  Default: `True`.

    Notes
    -----
    The Frame can also be instantiated using class methods:

      fromdata : escape data as payload and create a matching header

      frombuffer : get header and payload from a carrier

      fromfile : read header and payload from a filehandle

    Of course, one can also do the opposite:

      tobuffer : write header and payload into a carrier

      tofile : write header and payload to a filehandle

      data : property that yields the un-escaped payload

    For reading and writing carriers that possibly do not hold a frame,
    the ``read`` and ``write`` class methods are more convenient.
    """

    _header_classes = {}
    _payload_class = None

    def __init__(self, header, payload, verify=True):
        self.header = header
        self.payload = payload
        if verify:
            self.verify()

    def verify(self):
        """Simple verification.  To be added to by subclasses."""
        assert isinstance(self.header, tuple(self._header_classes.values()))
        assert isinstance(self.payload, self._payload_class)
        assert self.payload.nbytes == self.header.payload_nbytes

    @classmethod
    def fromdata(cls, data, magic=True, verify=True):
        """Construct frame from data.

        Parameters
        ----------
        data : bytes, str, or `~numpy.ndarray` of byte
            Data to be escaped.  A `str` is encoded as UTF-8.
        magic : bool, optional
            Whether to include the magic marker.  Default: `True`.
        verify : bool, optional
            Whether to do basic checks of frame integrity.  Default: `True`.

        Raises
        ------
        PayloadTooLarge
            If the escaped length cannot be encoded in the header.
        """
        payload = cls._payload_class.fromdata(data)
        header_class = cls._header_classes[magic]
        try:
            header = header_class.fromvalues(payload_nbytes=payload.nbytes,
                                             verify=verify)
        except ValueError as exc:
            raise PayloadTooLarge("escaped payload of {0} bytes is too large "
                                  "for a {1}.".format(payload.nbytes,
                                                      header_class.__name__)
                                  ) from exc
        return cls(header, payload, verify=verify)

    @classmethod
    def fromfile(cls, fh, magic=True, verify=True):
        """Read a frame from a filehandle."""
        header = cls._header_classes[magic].fromfile(fh, verify=verify)
        payload = cls._payload_class.fromfile(fh, header)
        return cls(header, payload, verify=verify)

    def tofile(self, fh):
        """Write encoded frame to filehandle."""
        self.header.tofile(fh)
        self.payload.tofile(fh)

    @classmethod
    def frombuffer(cls, carrier, magic=True, verify=True):
        """Get a frame from the start of a carrier.

        Unlike `read`, this raises an exception if the carrier does not
        hold a valid frame.

        Parameters
        ----------
        carrier : bytes, bytearray, memoryview, or `~numpy.ndarray`
            Carrier holding the frame.
        magic : bool, optional
            Whether the frame should start with a magic marker.
            Default: `True`.
        verify : bool, optional
            Whether to do basic checks of frame integrity.  Default: `True`.
        """
        carrier = carrier_array(carrier)
        header = cls._header_classes[magic].frombuffer(carrier, verify=verify)
        payload = cls._payload_class.frombuffer(carrier, header)
        return cls(header, payload, verify=verify)

    def tobuffer(self, carrier):
        """Write the frame at the start of a carrier.

        Parameters
        ----------
        carrier : bytearray, memoryview, or `~numpy.ndarray`
            Writable carrier.  Bytes beyond the frame are left untouched.

        Raises
        ------
        PayloadTooLarge
            If the frame does not fit in the carrier.  In this case, the
            carrier is not modified.
        """
        carrier = carrier_array(carrier)
        if not carrier.flags.writeable:
            raise TypeError("carrier is not writable.")
        if self.nbytes > len(carrier):
            raise PayloadTooLarge("frame of {0} bytes does not fit in carrier "
                                  "of {1} bytes.".format(self.nbytes,
                                                         len(carrier)))
        self.header.tobuffer(carrier)
        self.payload.tobuffer(carrier, self.header.nbytes)

    @classmethod
    def read(cls, carrier, magic=True):
        """Get a frame from a carrier, if it holds one with data.

        Foreign or corrupted carriers are expected, so this does not raise
        if there is no frame.  The payload is not un-escaped yet.

        Parameters
        ----------
        carrier : bytes, bytearray, memoryview, or `~numpy.ndarray`
            Carrier possibly holding a frame.
        magic : bool, optional
            Whether the frame should start with a magic marker.
            Default: `True`.

        Returns
        -------
        frame : instance of this class, or `None`
            `None` if the magic marker does not match, if the length is
            malformed, zero, or exceeds the remaining capacity.
        """
        carrier = carrier_array(carrier)
        header_class = cls._header_classes[magic]
        if len(carrier) < header_class.nbytes:
            return None

        header = header_class.frombuffer(carrier, verify=False)
        if magic and header['magic'] != MAGIC_NUMBER:
            return None

        try:
            payload_nbytes = header.payload_nbytes
        except InvalidDigit:
            return None

        if not 0 < payload_nbytes <= len(carrier) - header.nbytes:
            return None

        payload = cls._payload_class.frombuffer(carrier, header)
        return cls(header, payload, verify=False)

    @classmethod
    def write(cls, carrier, data, magic=True):
        """Escape data and write it as a frame at the start of a carrier.

        An empty payload gives a valid frame with zero length.

        Parameters
        ----------
        carrier : bytearray, memoryview, or `~numpy.ndarray`
            Writable carrier.
        data : bytes, str, or `~numpy.ndarray` of byte
            Payload.  A `str` is encoded as UTF-8.
        magic : bool, optional
            Whether to start the frame with a magic marker.  Default: `True`.

        Returns
        -------
        frame : instance of this class
            The frame that was written.

        Raises
        ------
        PayloadTooLarge
            If the frame does not fit in the carrier.  In this case, the
            carrier is not modified.
        """
        frame = cls.fromdata(data, magic=magic)
        frame.tobuffer(carrier)
        return frame

    @property
    def tagged(self):
        """Whether the frame starts with a magic marker."""
        return self.header.tagged

    @property
    def data(self):
        """Un-escaped payload bytes."""
        return self.payload.data

    @property
    def text(self):
        """Payload decoded as UTF-8 text."""
        return self.payload.text

    @property
    def nbytes(self):
        """Size of the encoded frame in bytes."""
        return self.header.nbytes + self.payload.nbytes

    def __len__(self):
        """Number of un-escaped payload bytes."""
        return len(self.payload)

    def __getitem__(self, item):
        return self.header[item]

    def keys(self):
        return self.header.keys()

    def __contains__(self, key):
        return key in self.header

    def __eq__(self, other):
        return (type(self) is type(other)
                and self.header == other.header
                and self.payload == other.payload)

    def __repr__(self):
        return "<{0} header={1}, payload={2}>".format(
            self.__class__.__name__, self.header, self.payload)
