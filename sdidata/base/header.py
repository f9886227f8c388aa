# Licensed under the GPLv3 - see LICENSE
"""
Base definitions for frame headers.

A frame header is a short sequence of big-endian 32-bit words at the start of
a carrier.  It holds an (optional) magic marker, and the length of the
escaped payload following it, encoded such that the header contains no
forbidden byte values.  The words are interpreted with a `HeaderParser`,
which gives dict-like access to the values encoded in them.
"""
import struct
import warnings
from copy import copy

import numpy as np

from .utils import fixedvalue


__all__ = ['MAGIC_NUMBER', 'one_word_struct', 'two_word_struct',
           'make_parser', 'make_setter', 'get_default',
           'ParserDict', 'HeaderParser', 'FrameHeaderBase']


MAGIC_NUMBER = 0xDEADB00B
"""Marker at the start of a tagged frame."""

one_word_struct = struct.Struct('>I')
"""Struct instance that packs/unpacks 1 big-endian unsigned 32-bit integer."""
two_word_struct = struct.Struct('>2I')
"""Struct instance that packs/unpacks 2 big-endian unsigned 32-bit integers."""


def make_parser(word_index, bit_index, bit_length, default=None):
    """Construct a function that gets specific bits from header words.

    Parameters
    ----------
    word_index : int
        Index into the words passed to the function.
    bit_index : int
        Index to the starting bit of the part to be extracted.
    bit_length : int
        Number of bits to be extracted.

    Returns
    -------
    parser : function
        To be used as ``parser(words)``.
    """
    if bit_length == 32:
        assert bit_index == 0

        def parser(words):
            return words[word_index]

    else:
        bit_mask = (1 << bit_length) - 1

        def parser(words):
            return (words[word_index] >> bit_index) & bit_mask

    return parser


def make_setter(word_index, bit_index, bit_length, default=None):
    """Construct a function that sets specific bits in header words.

    Parameters are as for `make_parser`, with ``default`` used if the
    value passed to the setter is `None`.

    Returns
    -------
    setter : function
        To be used as ``setter(words, value)``.
    """
    def setter(words, value):
        bit_mask = (1 << bit_length) - 1
        if value is None:
            if default is None:
                raise ValueError("no default value so cannot set to 'None'.")
            value = default
        elif value & bit_mask != value:
            raise ValueError("{0} cannot be represented with {1} bits"
                             .format(value, bit_length))
        bit_mask <<= bit_index
        word = words[word_index]
        words[word_index] = ((word | bit_mask) ^ bit_mask) | (value
                                                              << bit_index)
        return words

    return setter


def get_default(word_index, bit_index, bit_length, default=None):
    """Return the default value from a header keyword description."""
    return default


class ParserDict:
    """Lazily evaluated dictionary of parsers, setters, or defaults.

    Implemented as a non-data descriptor, which on first access on an
    instance creates the dict and stores it on the instance, so that later
    access gets the dict directly.

    Parameters
    ----------
    function : callable
        Used to create the entries from header keyword descriptions.
        Typically one of ``make_parser``, ``make_setter``, or ``get_default``.
    """

    def __init__(self, function):
        self.function = function

    def __set_name__(self, owner, name):
        self.name = name
        self.__doc__ = f"Lazily evaluated dict of {name}"

    def __get__(self, instance, cls=None):
        if instance is None:
            return self
        d = {key: self.function(*definition)
             for key, definition in instance.items()}
        setattr(instance, self.name, d)
        return d


class HeaderParser(dict):
    """Parser & setter for header keywords.

    Initialised like a dict, with (ordered) key, value pairs, with each value
    a tuple of ``(word_index, bit_index, bit_length[, default])``.

    The ``parsers``, ``setters``, and ``defaults`` properties give dicts of
    functions that get a given keyword from header words, set the
    corresponding part of the header words to a value, or the default value
    (if any).  They are calculated on first access.
    """
    parsers = ParserDict(make_parser)
    setters = ParserDict(make_setter)
    defaults = ParserDict(get_default)


class FrameHeaderBase:
    """Base class for all frame headers.

    Subclasses should define:

      _struct : `~struct.Struct` instance that can pack/unpack header words.

      _header_parser : `HeaderParser` instance, with a ``safe_length`` key and
      possibly a ``magic`` key.

      _safe_codec : `~sdidata.base.encoding.SafeValueCodec` instance used
      to encode the payload length.

    Parameters
    ----------
    words : tuple or list of int, or None
        Header words (32-bit unsigned int).  If given as a tuple, the header
        is immutable.  If `None`, set to a list of zeros for later
        initialisation (and skip any verification).
    verify : bool, optional
        Whether to do basic verification of integrity.  Default: `True`.
    """

    _struct = struct.Struct('')
    _header_parser = HeaderParser()
    _safe_codec = None

    _properties = ('payload_nbytes',)
    """Properties accessible/usable in initialisation."""

    def __init__(self, words, verify=True):
        if words is None:
            words = [0] * (self._struct.size // 4)
            verify = False

        self.words = words
        if verify:
            self.verify()

    def verify(self):
        """Verify header integrity."""
        assert len(self.words) == (self._struct.size // 4)
        if self.tagged:
            assert self['magic'] == MAGIC_NUMBER
        assert 0 <= self.payload_nbytes

    @fixedvalue
    def tagged(cls):
        """Whether the header starts with a magic marker."""
        return 'magic' in cls._header_parser

    @fixedvalue
    def nbytes(cls):
        """Size of the header in bytes."""
        return cls._struct.size

    @property
    def payload_nbytes(self):
        """Size of the escaped payload in bytes.

        Raises `~sdidata.base.utils.InvalidDigit` if the encoded length
        is malformed.
        """
        return self._safe_codec.decode(
            self['safe_length'].to_bytes(4, 'big'))

    @payload_nbytes.setter
    def payload_nbytes(self, payload_nbytes):
        self['safe_length'] = int.from_bytes(
            self._safe_codec.encode(payload_nbytes), 'big')

    @property
    def frame_nbytes(self):
        """Size of the frame (header plus escaped payload) in bytes."""
        return self.nbytes + self.payload_nbytes

    @property
    def mutable(self):
        """Whether the header can be modified."""
        return not isinstance(self.words, tuple)

    @mutable.setter
    def mutable(self, mutable):
        self.words = list(self.words) if mutable else tuple(self.words)

    def copy(self):
        """Create a mutable and independent copy of the header."""
        new = self.__class__(copy(self.words), verify=False)
        new.mutable = True
        return new

    def __copy__(self):
        return self.copy()

    @classmethod
    def fromvalues(cls, *, verify=True, **kwargs):
        """Initialise a header from parsed values or properties.

        Here, the parsed values must be given as keyword arguments, i.e., for
        any ``header = cls(<words>)``, ``cls.fromvalues(**header) == header``.
        Values can also be set using properties, i.e., ``payload_nbytes``.

        Given defaults:

        magic : 0xDEADB00B (tagged headers only)
        safe_length : that of an empty payload
        """
        self = cls(None, verify=False)
        for key in set(self.keys()).difference(kwargs.keys()):
            default = self._header_parser.defaults[key]
            if default is not None:
                kwargs[key] = default

        self.update(verify=verify, **kwargs)
        return self

    @classmethod
    def fromkeys(cls, *, verify=True, **kwargs):
        """Initialise a header from parsed values.

        Like fromvalues, but without any interpretation of keywords.

        Raises
        ------
        KeyError : if not all keys required are present in ``kwargs``
        """
        self = cls(None, verify=False)
        if set(kwargs) != set(self.keys()):
            raise KeyError("input should contain exactly the keys {0}"
                           .format(set(self.keys())))
        self.update(verify=verify, **kwargs)
        return self

    def update(self, *, verify=True, **kwargs):
        """Update the header by setting keywords or properties.

        Parameters
        ----------
        verify : bool, optional
            If `True` (default), verify integrity after updating.
        **kwargs
            Arguments used to set keywords and properties.
        """
        for key in set(kwargs.keys()).intersection(self.keys()):
            self[key] = kwargs.pop(key)

        for key in self._properties:
            if key in kwargs:
                setattr(self, key, kwargs.pop(key))

        if kwargs:
            warnings.warn("some keywords unused in header update: {0}"
                          .format(kwargs))

        if verify:
            self.verify()

    @classmethod
    def fromfile(cls, fh, verify=True):
        """Read a header from a filehandle.

        The header constructed will be immutable.
        """
        s = fh.read(cls._struct.size)
        if len(s) != cls._struct.size:
            raise EOFError
        return cls(cls._struct.unpack(s), verify=verify)

    def tofile(self, fh):
        """Write the header to a filehandle."""
        return fh.write(self._struct.pack(*self.words))

    @classmethod
    def frombuffer(cls, carrier, verify=True):
        """Get a header from the start of a carrier.

        Parameters
        ----------
        carrier : `~numpy.ndarray` of byte
            Flat array of bytes holding the frame.
        verify : bool, optional
            Whether to do basic verification of integrity.  Default: `True`.
        """
        if len(carrier) < cls._struct.size:
            raise EOFError("carrier too small to hold a header.")
        return cls(cls._struct.unpack(carrier[:cls._struct.size].tobytes()),
                   verify=verify)

    def tobuffer(self, carrier):
        """Write the header to the start of a carrier."""
        carrier[:self.nbytes] = np.frombuffer(
            self._struct.pack(*self.words), dtype='u1')

    def __getitem__(self, item):
        """Get the value of a particular header item from the header words."""
        try:
            return self._header_parser.parsers[item](self.words)
        except KeyError:
            raise KeyError("{0} header does not contain {1}"
                           .format(self.__class__.__name__, item))

    def __setitem__(self, item, value):
        """Set the value of a particular header item in the header words.

        If value is `None`, set the item to its default value (if it exists).
        """
        if not self.mutable:
            raise TypeError("header is immutable. Set '.mutable` attribute "
                            "or make a copy.")
        try:
            self._header_parser.setters[item](self.words, value)
        except KeyError:
            raise KeyError("{0} header does not contain {1}"
                           .format(self.__class__.__name__, item))

    def keys(self):
        """All keys defined for this header."""
        return self._header_parser.keys()

    def __contains__(self, key):
        return key in self.keys()

    def __eq__(self, other):
        return (type(self) is type(other)
                and tuple(self.words) == tuple(other.words))

    def __repr__(self):
        name = self.__class__.__name__
        outs = ["{0}: {1}".format(k, hex(self[k])) for k in self.keys()]
        return "<{} {}>".format(name, (",\n  " + " "*len(name)).join(outs))
