# Licensed under the GPLv3 - see LICENSE
"""Base implementations shared between all formats.

A carrier (typically a raw video frame) holds a frame, which consists of a
header and payload.  Base classes implementing the encoding and decoding of
these are found in the corresponding `~sdidata.base.header`,
`~sdidata.base.payload` and `~sdidata.base.frame` modules, with the
`~sdidata.base.encoding` module providing the schemes used to keep
forbidden byte values out of both.  Those rely on the radix conversion in
`~sdidata.base.utils`.

The `~sdidata.base.base` module defines file and stream readers and writers
that read or write sequences of carriers.
"""
from .utils import (InvalidRadix, InvalidDigit,  # noqa
                    RadixConverter, convert_base, get_converter)
from .encoding import (MalformedPayload, SafeValueCodec, EscapeCodec,  # noqa
                       encode_safe_u32, decode_safe_u32)
from .header import MAGIC_NUMBER, HeaderParser, FrameHeaderBase  # noqa
from .payload import PayloadBase  # noqa
from .frame import PayloadTooLarge, FrameBase  # noqa
