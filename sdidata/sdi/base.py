# Licensed under the GPLv3 - see LICENSE
from ..base.base import (
    CarrierFileReader, CarrierFileWriter,
    CarrierStreamReader, CarrierStreamWriter, FileOpener)
from .frame import SDIFrame


__all__ = ['SDIFileReader', 'SDIFileWriter',
           'SDIStreamReader', 'SDIStreamWriter', 'open']


class SDIFileReader(CarrierFileReader):
    """Simple reader for files holding SDI carriers.

    Wraps a binary filehandle, providing methods such as `read_carrier`,
    `read_frame`, and `read_payload`.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    carrier_nbytes : int, optional
        Size of each carrier in bytes.  Default: 8294400 (1920x1080x4).
    magic : bool, optional
        Whether frames start with the magic marker.  Default: `True`.
    """
    _frame_class = SDIFrame

    def __init__(self, fh_raw, carrier_nbytes=1920*1080*4, magic=True):
        super().__init__(fh_raw, carrier_nbytes, magic=magic)


class SDIFileWriter(CarrierFileWriter):
    """Simple writer for files holding SDI carriers.

    Adds `write_frame` method to the binary file wrapper.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    carrier_nbytes : int, optional
        Size of each carrier in bytes.  Default: 8294400 (1920x1080x4).
    magic : bool, optional
        Whether frames start with the magic marker.  Default: `True`.
    """
    _frame_class = SDIFrame

    def __init__(self, fh_raw, carrier_nbytes=1920*1080*4, magic=True):
        super().__init__(fh_raw, carrier_nbytes, magic=magic)


class SDIStreamReader(CarrierStreamReader):
    """SDI carrier stream reader.

    Reads payloads from a stream of video frames.

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
        Whether frames start with the magic marker.  Default: `True`.
    encoding : str or None, optional
        Used to decode payloads to text.  If `None`, payloads are returned
        as bytes.  Default: 'utf-8'.
    """
    _file_reader_class = SDIFileReader


class SDIStreamWriter(CarrierStreamWriter):
    """SDI carrier stream writer.

    Writes queued payloads into a stream of video frames, one per frame.

    Parameters
    ----------
    fh_raw : filehandle
        For writing carriers to storage.
    width, height : int, optional
        Size of the video frames in pixels.  Default: 1920x1080.
    bytes_per_pixel : int, optional
        Default: 4 (e.g., for ARGB or BGRA).
    frame_rate : `~astropy.units.Quantity`, optional
        Video frames per second.  Default: 25 Hz.
    magic : bool, optional
        Whether frames start with the magic marker.  Default: `True`.
    maxsize : int, optional
        Maximum number of queued payloads.  If the queue is full, the oldest
        payload is dropped.  Default: 16.
    """
    _file_writer_class = SDIFileWriter


open = FileOpener.create(globals(), doc="""
--- For reading or writing a binary file :
    (see `~sdidata.sdi.base.SDIFileReader`, `~sdidata.sdi.base.SDIFileWriter`)

carrier_nbytes : int, optional
    Size of each carrier in bytes.  Default: 8294400 (1920x1080x4).
magic : bool, optional
    Whether frames start with the magic marker.  Default: `True`.

--- For reading or writing a stream :
    (see `~sdidata.sdi.base.SDIStreamReader`, `~sdidata.sdi.base.SDIStreamWriter`)

width, height : int, optional
    Size of the video frames in pixels.  Default: 1920x1080.
bytes_per_pixel : int, optional
    Default: 4.
frame_rate : `~astropy.units.Quantity`, optional
    Video frames per second.  Default: 25 Hz.
magic : bool, optional
    Whether frames start with the magic marker.  Default: `True`.
encoding : str or None, optional
    For reading only: used to decode payloads to text.  Default: 'utf-8'.
maxsize : int, optional
    For writing only: maximum number of queued payloads.  Default: 16.

Returns
-------
Filehandle
    :class:`~sdidata.sdi.base.SDIFileReader` or
    :class:`~sdidata.sdi.base.SDIFileWriter` (binary), or
    :class:`~sdidata.sdi.base.SDIStreamReader` or
    :class:`~sdidata.sdi.base.SDIStreamWriter` (stream).
""")
