# Licensed under the GPLv3 - see LICENSE
from ..base.base import (
    CarrierFileReader, CarrierFileWriter,
    CarrierStreamReader, CarrierStreamWriter, FileOpener)
from .frame import LegacyFrame


__all__ = ['LegacyFileReader', 'LegacyFileWriter',
           'LegacyStreamReader', 'LegacyStreamWriter', 'open']


class LegacyFileReader(CarrierFileReader):
    """Simple reader for files holding legacy carriers.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    carrier_nbytes : int, optional
        Size of each carrier in bytes.  Default: 8294400 (1920x1080x4).
    magic : bool, optional
        Whether frames start with the magic marker.  Default: `False`.
    """
    _frame_class = LegacyFrame

    def __init__(self, fh_raw, carrier_nbytes=1920*1080*4, magic=False):
        super().__init__(fh_raw, carrier_nbytes, magic=magic)


class LegacyFileWriter(CarrierFileWriter):
    """Simple writer for files holding legacy carriers.

    Parameters are as for `LegacyFileReader`.
    """
    _frame_class = LegacyFrame

    def __init__(self, fh_raw, carrier_nbytes=1920*1080*4, magic=False):
        super().__init__(fh_raw, carrier_nbytes, magic=magic)


class LegacyStreamReader(CarrierStreamReader):
    """Legacy carrier stream reader.

    Parameters are as for `~sdidata.sdi.base.SDIStreamReader`, except that
    by default no magic marker is expected.
    """
    _file_reader_class = LegacyFileReader

    def __init__(self, fh_raw, magic=False, **kwargs):
        super().__init__(fh_raw, magic=magic, **kwargs)


class LegacyStreamWriter(CarrierStreamWriter):
    """Legacy carrier stream writer.

    Parameters are as for `~sdidata.sdi.base.SDIStreamWriter`, except that
    by default no magic marker is written.
    """
    _file_writer_class = LegacyFileWriter

    def __init__(self, fh_raw, magic=False, **kwargs):
        super().__init__(fh_raw, magic=magic, **kwargs)


open = FileOpener.create(globals(), doc="""
Keyword arguments are as for `sdidata.sdi.open`, except that by default
``magic=False``.
""")
