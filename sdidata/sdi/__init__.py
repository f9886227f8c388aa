# Licensed under the GPLv3 - see LICENSE
"""SDI data tunnel.

Payloads are escaped such that they contain no 0x00, 0xFE, or 0xFF bytes,
and preceded by a header with a length encoded in radix 254 (and,
optionally, the magic marker 0xDEADB00B).  The resulting frames can be
sent as the active video of a serial digital interface (SDI) link, which
reserves 0x00 and 0xFF.
"""
from .base import open  # noqa
from .header import SDIHeader, SDIUntaggedHeader  # noqa
from .payload import SDIPayload  # noqa
from .frame import SDIFrame, read_frame, write_frame  # noqa
