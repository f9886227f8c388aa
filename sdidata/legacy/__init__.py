# Licensed under the GPLv3 - see LICENSE
"""Legacy data tunnel.

Payloads are escaped such that they contain no 0x00 bytes, and preceded by
a header with a length encoded in radix 255.  By default, frames carry no
magic marker.  This scheme cannot be mixed with `sdidata.sdi`.
"""
from .base import open  # noqa
from .header import LegacyHeader, LegacyTaggedHeader  # noqa
from .payload import LegacyPayload  # noqa
from .frame import LegacyFrame, read_frame, write_frame  # noqa
