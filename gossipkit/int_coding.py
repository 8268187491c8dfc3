"""Network byte order encoding of 32 and 16 bit integers."""

import struct

_U32 = struct.Struct("!I")
_U16 = struct.Struct("!H")


def pack_int(value: int) -> bytes:
    """Encode ``value`` as 4 big-endian bytes, wrapping to 32 bits."""
    return _U32.pack(value & 0xFFFFFFFF)


def pack_int16(value: int) -> bytes:
    """Encode ``value`` as 2 big-endian bytes, wrapping to 16 bits."""
    return _U16.pack(value & 0xFFFF)


def unpack_int(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 32 bit big-endian integer at ``offset``."""
    return _U32.unpack_from(data, offset)[0]


def unpack_int16(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 16 bit big-endian integer at ``offset``."""
    return _U16.unpack_from(data, offset)[0]