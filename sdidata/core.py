# Licensed under the GPLv3 - see LICENSE
"""Format-independent routines to open carrier files."""
import importlib


__all__ = ['FORMATS', 'open']


FORMATS = ('sdi', 'legacy')
"""Available carrier formats."""


def open(name, mode='rs', format='sdi', **kwargs):
    """Open a carrier file for reading or writing.

    Opened as a binary file, one gets a wrapped filehandle that adds
    methods to read/write a carrier or frame.  Opened as a stream, the
    handle is wrapped further, with methods to read/write payloads.

    Parameters
    ----------
    name : str or filehandle
        File name or filehandle.
    mode : {'rb', 'wb', 'rs', or 'ws'}, optional
        Whether to open for reading or writing, and as a regular binary
        file or as a stream.  Default: 'rs', for reading a stream.
    format : str, optional
        The format the file is in, one of `FORMATS`.  Since formats cannot
        be distinguished from the carriers, this should be known.
        Default: 'sdi'.
    **kwargs
        Additional arguments when opening the file.  See the ``open``
        function of the format for details.

    Returns
    -------
    fh : filehandle
        Filehandle of the format opened in the given mode.
    """
    if format not in FORMATS:
        raise ValueError("format should be one of {0}.".format(FORMATS))

    module = importlib.import_module('.' + format, package='sdidata')
    return module.open(name, mode, **kwargs)
