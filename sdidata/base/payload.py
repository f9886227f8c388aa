# Licensed under the GPLv3 - see LICENSE
"""
Base definitions for payloads.

Defines a payload class PayloadBase that holds the escaped bytes of a frame
payload, and gives access to the original bytes (or text) encoded in them.
"""
import numpy as np
from astropy.utils import lazyproperty


__all__ = ['PayloadBase']


class PayloadBase:
    """Container for escaping and un-escaping payloads.

    Any subclass should define ``_escape_codec``, an
    `~sdidata.base.encoding.EscapeCodec` instance.

    Parameters
    ----------
    words : `~numpy.ndarray`
        Array of bytes holding the escaped payload.
    header : header instance, optional
        If given, used to check the size of the payload.
    """
    _escape_codec = None
    _dtype_word = np.dtype('u1')
    _encoding = 'utf-8'

    def __init__(self, words, *, header=None):
        if words.dtype != self._dtype_word:
            raise ValueError("escaped data should have dtype {0}"
                             .format(self._dtype_word))
        if header is not None and header.payload_nbytes != words.nbytes:
            raise ValueError("header payload size should be {0}"
                             .format(words.nbytes))
        self.words = words

    @classmethod
    def fromfile(cls, fh, header=None, *, payload_nbytes=None):
        """Read an escaped payload from a filehandle.

        Parameters
        ----------
        fh : filehandle
            From which data is read.
        header : header instance, optional
            If given, used to infer ``payload_nbytes``.
        payload_nbytes : int, optional
            Number of bytes to read.  Required if no ``header`` is given.
        """
        if header is not None:
            payload_nbytes = header.payload_nbytes
        elif payload_nbytes is None:
            raise ValueError("payload_nbytes or header should be passed in.")

        s = fh.read(payload_nbytes)
        if len(s) < payload_nbytes:
            raise EOFError("could not read full payload.")
        return cls(np.frombuffer(s, dtype=cls._dtype_word), header=header)

    def tofile(self, fh):
        """Write escaped payload to filehandle."""
        return fh.write(self.words.tobytes())

    @classmethod
    def frombuffer(cls, carrier, header):
        """Get the escaped payload that follows a header in a carrier.

        Parameters
        ----------
        carrier : `~numpy.ndarray` of byte
            Flat array of bytes holding the frame.
        header : header instance
            Used to infer the offset and size of the payload.
        """
        start = header.nbytes
        stop = start + header.payload_nbytes
        if stop > len(carrier):
            raise EOFError("carrier too small to hold the payload.")
        return cls(carrier[start:stop].copy(), header=header)

    def tobuffer(self, carrier, offset):
        """Write escaped payload into a carrier, starting at ``offset``."""
        carrier[offset:offset+self.nbytes] = self.words

    @classmethod
    def fromdata(cls, data, header=None):
        """Escape data as a payload.

        Parameters
        ----------
        data : bytes, str, or `~numpy.ndarray` of byte
            Data to be escaped.  A `str` is encoded as UTF-8 first.
        header : header instance, optional
            If given, it should be consistent with the escaped size.
        """
        if isinstance(data, str):
            data = data.encode(cls._encoding)
        escaped = cls._escape_codec.encode(data)
        return cls(np.frombuffer(escaped, dtype=cls._dtype_word).copy(),
                   header=header)

    @lazyproperty
    def data(self):
        """Original, un-escaped payload bytes.

        Raises `~sdidata.base.encoding.MalformedPayload` if the escaped
        payload cannot be decoded.
        """
        return self._escape_codec.decode(self.words)

    @property
    def text(self):
        """Payload decoded as UTF-8 text."""
        return self.data.decode(self._encoding)

    @property
    def nbytes(self):
        """Size of the escaped payload in bytes."""
        return self.words.nbytes

    def __len__(self):
        """Number of un-escaped bytes."""
        return len(self.data)

    def __eq__(self, other):
        return (type(self) is type(other)
                and np.array_equal(self.words, other.words))

    def __repr__(self):
        return "<{0} nbytes={1}>".format(self.__class__.__name__, self.nbytes)
