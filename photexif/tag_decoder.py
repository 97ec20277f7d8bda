# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
TIFF tag value decoder

Decodes the value of a single IFD entry. An entry carries 4 raw bytes
that hold the value itself when it fits in 4 bytes, and otherwise an
offset (relative to the start of the TIFF payload) to where the value
bytes are stored.

Copyright 2025 DNAi inc.
"""

import struct
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Union


class ByteOrder(Enum):
    """TIFF byte order. The value is the matching struct prefix."""
    LITTLE_ENDIAN = '<'
    BIG_ENDIAN = '>'

    @property
    def marker(self) -> bytes:
        return b'II' if self is ByteOrder.LITTLE_ENDIAN else b'MM'


class ExifTagType(IntEnum):
    """EXIF tag data types"""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# EXIF tag sizes in bytes
TAG_SIZES: Dict[int, int] = {
    ExifTagType.BYTE: 1,
    ExifTagType.ASCII: 1,
    ExifTagType.SHORT: 2,
    ExifTagType.LONG: 4,
    ExifTagType.RATIONAL: 8,
    ExifTagType.SBYTE: 1,
    ExifTagType.UNDEFINED: 1,
    ExifTagType.SSHORT: 2,
    ExifTagType.SLONG: 4,
    ExifTagType.SRATIONAL: 8,
    ExifTagType.FLOAT: 4,
    ExifTagType.DOUBLE: 8,
}

# struct format characters for the non-rational numeric types
_STRUCT_CODES: Dict[int, str] = {
    ExifTagType.BYTE: 'B',
    ExifTagType.SBYTE: 'b',
    ExifTagType.UNDEFINED: 'B',
    ExifTagType.SHORT: 'H',
    ExifTagType.SSHORT: 'h',
    ExifTagType.LONG: 'I',
    ExifTagType.SLONG: 'i',
    ExifTagType.FLOAT: 'f',
    ExifTagType.DOUBLE: 'd',
}

DecodedValue = Union[int, float, str, List[Union[int, float]]]


def type_size(type_code: int) -> Optional[int]:
    """Size in bytes of one value of ``type_code``, None if unsupported."""
    return TAG_SIZES.get(type_code)


def value_span(type_code: int, count: int) -> Optional[int]:
    """Total number of value bytes for an entry, None if the type is unsupported."""
    size = type_size(type_code)
    if size is None:
        return None
    return size * count


def rational(numerator: int, denominator: int) -> float:
    """Divide a rational pair; a zero denominator yields 0."""
    if denominator == 0:
        return 0
    return numerator / denominator


def decode_value(
    payload: Union[bytes, memoryview],
    type_code: int,
    count: int,
    raw_bytes: bytes,
    byte_order: ByteOrder,
) -> Optional[DecodedValue]:
    """
    Decode the value of one IFD entry.

    Args:
        payload: The whole TIFF payload (pointer targets are relative to it)
        type_code: EXIF type code of the entry (1-12)
        count: Number of values in the entry
        raw_bytes: The 4 value-or-offset bytes of the entry
        byte_order: Byte order of the payload

    Returns:
        A scalar when count is 1, a list of values otherwise, a string for
        ASCII entries, or None if the entry cannot be decoded
    """
    total = value_span(type_code, count)
    if total is None:
        return None
    if count == 0:
        return '' if type_code == ExifTagType.ASCII else None

    if total <= 4:
        data = raw_bytes[:total]
        if len(data) < total:
            return None
    else:
        if len(raw_bytes) < 4:
            return None
        offset = struct.unpack(f'{byte_order.value}I', raw_bytes[:4])[0]
        if offset + total > len(payload):
            return None
        data = payload[offset:offset + total]

    return _unpack(data, type_code, count, byte_order)


def _unpack(data: Union[bytes, memoryview], type_code: int, count: int, byte_order: ByteOrder) -> DecodedValue:
    if type_code == ExifTagType.ASCII:
        return _decode_ascii(data)

    endian = byte_order.value
    values: List[Any]
    if type_code in (ExifTagType.RATIONAL, ExifTagType.SRATIONAL):
        code = 'I' if type_code == ExifTagType.RATIONAL else 'i'
        parts = struct.unpack(f'{endian}{count * 2}{code}', data)
        values = [rational(parts[i], parts[i + 1]) for i in range(0, len(parts), 2)]
    else:
        values = list(struct.unpack(f'{endian}{count}{_STRUCT_CODES[type_code]}', data))

    if count == 1:
        return values[0]
    return values


def _decode_ascii(data: Union[bytes, memoryview]) -> str:
    # Stops at NUL or at the first byte outside printable ASCII
    end = 0
    for byte in data:
        if byte < 0x20 or byte > 0x7E:
            break
        end += 1
    return bytes(data[:end]).decode('ascii')
