# Licensed under the GPLv3 - see LICENSE
"""Common classes for accessing carriers as binary files and streams.

Carriers are fixed-size buffers, typically raw video frames, that each may
hold a frame.  A file of carriers is simply a concatenation of them.

For access as binary files, `~sdidata.base.base.CarrierFileReader` and
`~sdidata.base.base.CarrierFileWriter` add methods to read or write a
single carrier, frame, or payload.

For access as streams, `~sdidata.base.base.CarrierStreamReader` and
`~sdidata.base.base.CarrierStreamWriter` deal with carriers sized as video
frames, keep track of the frame number and corresponding time, and, for the
writer, hold a bounded queue of payloads waiting to be sent.

The `~sdidata.base.base.FileOpener` class helps create the ``open``
function that is expected to exist for each format.
"""
import io
import functools
import textwrap
import threading
import warnings
from collections import deque
from contextlib import contextmanager

import numpy as np
import astropy.units as u

from .encoding import MalformedPayload
from .frame import PayloadTooLarge


__all__ = ['FileBase', 'CarrierFileReader', 'CarrierFileWriter',
           'CarrierStreamBase', 'CarrierStreamReader', 'CarrierStreamWriter',
           'FileOpener']


class FileBase:
    """File wrapper, used to add frame methods to a binary data file.

    The underlying file is stored in ``fh_raw`` and all attributes that do not
    exist on the class itself are looked up on it.

    Subclasses should define ``_frame_class``.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    carrier_nbytes : int
        Size of each carrier in bytes.
    magic : bool, optional
        Whether frames start with a magic marker.  Default: `True`.
    """
    fh_raw = None
    _frame_class = None

    def __init__(self, fh_raw, carrier_nbytes, magic=True):
        self.fh_raw = fh_raw
        self.carrier_nbytes = carrier_nbytes
        self.magic = magic

    def __getattr__(self, attr):
        """Try to get things on the current open file if it is not on self."""
        if not attr.startswith('_'):
            try:
                return getattr(self.fh_raw, attr)
            except AttributeError:
                pass
        #  __getattribute__ to raise appropriate error.
        return self.__getattribute__(attr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.fh_raw.close()

    @contextmanager
    def temporary_offset(self, offset=None, whence=0):
        """Context manager for temporarily seeking to another file position.

        On exiting the ``with-block``, the file pointer is moved back to its
        original position.  Parameters are as for :meth:`io.IOBase.seek`.
        """
        oldpos = self.tell()
        try:
            if offset is not None:
                self.seek(offset, whence)
            yield self
        finally:
            self.seek(oldpos)

    def __repr__(self):
        return ("{0}(fh_raw={1}, carrier_nbytes={2}, magic={3})"
                .format(self.__class__.__name__, self.fh_raw,
                        self.carrier_nbytes, self.magic))


class CarrierFileReader(FileBase):
    """Reader of files holding a sequence of carriers.

    Parameters are as for `~sdidata.base.base.FileBase`.
    """

    @property
    def number_of_carriers(self):
        """Number of complete carriers in the file."""
        with self.temporary_offset(0, 2):
            return self.tell() // self.carrier_nbytes

    def read_carrier(self):
        """Read a single carrier.

        Returns
        -------
        carrier : `~numpy.ndarray` of byte
        """
        s = self.fh_raw.read(self.carrier_nbytes)
        if len(s) < self.carrier_nbytes:
            raise EOFError("could not read full carrier.")
        return np.frombuffer(s, dtype='u1')

    def read_frame(self):
        """Read a carrier and get the frame in it.

        Returns
        -------
        frame : frame instance or `None`
            `None` if the carrier does not hold a frame with data.
        """
        return self._frame_class.read(self.read_carrier(), magic=self.magic)

    def read_payload(self):
        """Read a carrier and get the payload held in it.

        Returns
        -------
        payload : bytes or `None`
            `None` if the carrier does not hold a frame with data.

        Raises
        ------
        MalformedPayload
            If the escaped payload in the carrier is corrupt.
        """
        frame = self.read_frame()
        return None if frame is None else frame.data


class CarrierFileWriter(FileBase):
    """Writer of files holding a sequence of carriers.

    Parameters are as for `~sdidata.base.base.FileBase`.
    """

    def write_frame(self, data=b''):
        """Write a single carrier holding a frame with the given payload.

        The carrier bytes beyond the frame are set to zero.

        Parameters
        ----------
        data : bytes, str, or `~numpy.ndarray` of byte, optional
            Payload to write.  By default, an empty frame is written.

        Raises
        ------
        PayloadTooLarge
            If the frame does not fit in the carrier.  In this case, nothing
            is written.
        """
        carrier = np.zeros(self.carrier_nbytes, dtype='u1')
        self._frame_class.write(carrier, data, magic=self.magic)
        return self.fh_raw.write(carrier.tobytes())


class CarrierStreamBase:
    """Base for carrier stream readers and writers.

    Subclasses should define ``_file_reader_class`` or
    ``_file_writer_class`` as appropriate.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw carrier stream.
    width, height : int, optional
        Size of the video frames in pixels.  Default: 1920x1080.
    bytes_per_pixel : int, optional
        Default: 4 (e.g., for ARGB or BGRA).
    frame_rate : `~astropy.units.Quantity`, optional
        Video frames per second.  Default: 25 Hz.
    magic : bool, optional
        Whether frames start with a magic marker.  Default: `True`.
    """

    def __init__(self, fh_raw, width=1920, height=1080, bytes_per_pixel=4,
                 frame_rate=25*u.Hz, magic=True):
        self.width = width
        self.height = height
        self.bytes_per_pixel = bytes_per_pixel
        self._frame_rate = u.Quantity(frame_rate, u.Hz)
        self.fh_raw = fh_raw
        self.frame_nr = 0

    @property
    def carrier_nbytes(self):
        """Size of a carrier in bytes."""
        return self.width * self.height * self.bytes_per_pixel

    @property
    def magic(self):
        """Whether frames start with a magic marker."""
        return self.fh_raw.magic

    @property
    def frame_rate(self):
        """Number of video frames per second."""
        return self._frame_rate

    @property
    def time(self):
        """Time stamp of the current carrier, relative to the first."""
        return (self.frame_nr / self._frame_rate).to(u.ms)

    def tell(self, unit=None):
        """Current position in the stream.

        Parameters
        ----------
        unit : `~astropy.units.Unit` or str, optional
            Time unit the position should be returned in.  By default,
            the frame number is returned.
        """
        if unit is None:
            return self.frame_nr
        return self.time.to(unit)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.fh_raw.close()

    def __repr__(self):
        return ("<{s.__class__.__name__} name={s.name} frame_nr={s.frame_nr}\n"
                "    width={s.width}, height={s.height}, "
                "bytes_per_pixel={s.bytes_per_pixel},\n"
                "    frame_rate={s.frame_rate}, magic={s.magic}>"
                .format(s=self))

    @property
    def name(self):
        return getattr(self.fh_raw, 'name', None)


class CarrierStreamReader(CarrierStreamBase):
    """Reader of payloads from a stream of carriers.

    Parameters are as for `~sdidata.base.base.CarrierStreamBase`, with the
    addition of:

    encoding : str or None, optional
        Used to decode payloads to text.  If `None`, payloads are returned
        as bytes.  Default: 'utf-8'.
    """
    _file_reader_class = None

    def __init__(self, fh_raw, width=1920, height=1080, bytes_per_pixel=4,
                 frame_rate=25*u.Hz, magic=True, encoding='utf-8'):
        self.encoding = encoding
        fh_raw = self._file_reader_class(
            fh_raw, width * height * bytes_per_pixel, magic=magic)
        super().__init__(fh_raw, width=width, height=height,
                         bytes_per_pixel=bytes_per_pixel,
                         frame_rate=frame_rate, magic=magic)

    def readable(self):
        """Whether the file can be read and decoded."""
        return self.fh_raw.readable()

    def seek(self, frame_nr):
        """Move to the carrier with the given frame number."""
        frame_nr = int(frame_nr)
        if frame_nr < 0:
            raise ValueError("cannot seek before the start of the stream.")
        self.fh_raw.seek(frame_nr * self.carrier_nbytes)
        self.frame_nr = frame_nr
        return self.frame_nr

    def read(self):
        """Read the payload of the next carrier.

        A corrupt payload is not fatal: a warning is issued and it is
        treated as if the carrier held no data.

        Returns
        -------
        payload : str, bytes, or `None`
            `None` if the carrier does not hold a frame with data.

        Raises
        ------
        EOFError
            If there are no more complete carriers.
        """
        frame = self.fh_raw.read_frame()
        frame_nr = self.frame_nr
        self.frame_nr += 1
        if frame is None:
            return None

        try:
            payload = frame.data
            if self.encoding is not None:
                payload = payload.decode(self.encoding)
        except (MalformedPayload, UnicodeDecodeError) as exc:
            warnings.warn("dropping corrupt payload in frame {0}: {1}"
                          .format(frame_nr, exc))
            return None

        return payload

    def __iter__(self):
        """Iterate over the payloads in the remaining carriers.

        Carriers without data are skipped.
        """
        while True:
            try:
                payload = self.read()
            except EOFError:
                return

            if payload is not None:
                yield payload


class CarrierStreamWriter(CarrierStreamBase):
    """Writer of payloads to a stream of carriers.

    Payloads are queued with `put`, and each call to `write_carrier` sends
    the oldest queued payload in a new carrier, or an empty frame if there
    is none.  Any number of threads can queue payloads, but only one should
    write carriers.

    Parameters are as for `~sdidata.base.base.CarrierStreamBase`, with the
    addition of:

    maxsize : int, optional
        Maximum number of queued payloads.  If the queue is full, the oldest
        payload is dropped.  Default: 16.
    """
    _file_writer_class = None

    def __init__(self, fh_raw, width=1920, height=1080, bytes_per_pixel=4,
                 frame_rate=25*u.Hz, magic=True, maxsize=16):
        fh_raw = self._file_writer_class(
            fh_raw, width * height * bytes_per_pixel, magic=magic)
        super().__init__(fh_raw, width=width, height=height,
                         bytes_per_pixel=bytes_per_pixel,
                         frame_rate=frame_rate, magic=magic)
        self._queue = deque(maxlen=maxsize)
        self._lock = threading.Lock()

    @property
    def maxsize(self):
        """Maximum number of queued payloads."""
        return self._queue.maxlen

    @property
    def pending(self):
        """Number of queued payloads."""
        return len(self._queue)

    def put(self, payload):
        """Queue a payload for sending.

        Parameters
        ----------
        payload : str or bytes
            A `str` is encoded as UTF-8.
        """
        with self._lock:
            if len(self._queue) == self._queue.maxlen:
                warnings.warn("payload queue full; dropping oldest payload.")
            self._queue.append(payload)

    def write_carrier(self):
        """Write the next carrier, holding the oldest queued payload.

        If the payload does not fit in the carrier, a warning is issued and
        an empty frame is written instead.

        Returns
        -------
        frame_nr : int
            Frame number of the carrier written.
        """
        with self._lock:
            payload = self._queue.popleft() if self._queue else b''

        try:
            self.fh_raw.write_frame(payload)
        except PayloadTooLarge as exc:
            warnings.warn("skipping payload in frame {0}: {1}"
                          .format(self.frame_nr, exc))
            self.fh_raw.write_frame(b'')

        self.frame_nr += 1
        return self.frame_nr - 1

    def write(self, payload):
        """Queue a payload and write the next carrier."""
        self.put(payload)
        return self.write_carrier()

    def flush(self):
        """Write carriers until no payloads are queued."""
        while self._queue:
            self.write_carrier()

    def close(self):
        self.flush()
        super().close()


class FileOpener:
    """File opener for a carrier format.

    Each instance can be used as a function to open a carrier file or stream.
    It is probably best used inside a wrapper, so that the documentation
    can reflect the docstring of ``__call__`` rather than of this class.

    Parameters
    ----------
    fmt : str
        Name of the format.
    classes : dict
        With the file/stream reader/writer classes keyed by mode, i.e.,
        'rb', 'wb', 'rs', and 'ws'.
    """

    def __init__(self, fmt, classes):
        self.fmt = fmt
        self.classes = classes

    def normalize_mode(self, mode):
        if mode in self.classes:
            return mode
        if mode[::-1] in self.classes:
            return mode[::-1]
        if mode in {'r', 'w'}:
            return mode + 's'

        raise ValueError(f'invalid mode: {mode} '
                         f'({self.fmt} supports {set(self.classes)}).')

    def get_fh(self, name, mode):
        """Ensure name is a filehandle, opening it if necessary."""
        if hasattr(name, 'read') or hasattr(name, 'write'):
            return name

        return io.open(name, mode=mode[0] + 'b')

    def __call__(self, name, mode='rs', **kwargs):
        """
        Open carrier file for reading or writing.

        Opened as a binary file, one gets a wrapped filehandle that adds
        methods to read/write a carrier or frame.  Opened as a stream, the
        handle is wrapped further, with methods to read/write payloads,
        keeping track of frame numbers and time.

        Parameters
        ----------
        name : str or filehandle
            File name or filehandle.
        mode : {'rb', 'wb', 'rs', or 'ws'}, optional
            Whether to open for reading or writing, and as a regular binary
            file or as a stream. Default: 'rs', for reading a stream.
        **kwargs
            Additional arguments when opening the file.
        """
        mode = self.normalize_mode(mode)
        fh = self.get_fh(name, mode)
        try:
            return self.classes[mode](fh, **kwargs)
        except Exception:
            if fh is not name:
                fh.close()
            raise

    def wrapped(self, module=None, doc=None):
        """Wrap as a function named open, replacing docstring and module."""

        @functools.wraps(self.__call__)
        def open(*args, **kwargs):
            return self(*args, **kwargs)

        if doc:
            open.__doc__ = doc

        if module:
            open.__module__ = module

        return open

    @classmethod
    def create(cls, ns, doc=None):
        """Create a standard opener for the given namespace.

        This assumes that the namespace contains file and stream readers
        and writers with standard names, ``<fmt>FileReader``,
        ``<fmt>FileWriter``, ``<fmt>StreamReader``, and ``<fmt>StreamWriter``,
        where ``fmt`` is the name of the format (which is inferred by looking
        for a ``*StreamReader`` entry).

        Parameters
        ----------
        ns : dict
            Namespace to look in.  Generally, pass in ``globals()`` at the
            call site.
        doc : str, optional
            Extra documentation to add to that of the opener's ``__call__``
            method.
        """
        module = ns.get('__name__', None)
        for key in ns:
            if key.endswith('StreamReader') and key != 'CarrierStreamReader':
                fmt = key.replace('StreamReader', '')
                break
        else:  # noqa
            raise ValueError('namespace does not contain a StreamReader, '
                             'so fmt cannot be guessed.')

        classes = {mode: ns[fmt + cls_type] for (mode, cls_type) in {
            'rb': 'FileReader',
            'wb': 'FileWriter',
            'rs': 'StreamReader',
            'ws': 'StreamWriter'}.items()}
        opener = cls(fmt, classes)
        if doc is not None:
            doc = (textwrap.dedent(opener.__call__.__doc__).replace(
                'Open carrier file', f'Open {fmt} carrier file') + doc)
        return opener.wrapped(module=module, doc=doc)
