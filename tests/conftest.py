"""
Shared fixtures: builders for small TIFF, JPEG and PNG files.

IFD entries are given as ``(tag_id, type_code, value)``. ASCII values are
``str`` (a NUL terminator is added), rationals are ``(numerator,
denominator)`` tuples, and multi-value entries are lists.
"""

import struct

import pytest

ASCII = 2
RATIONAL = 5
SRATIONAL = 10

_STRUCT_CODES = {1: 'B', 3: 'H', 4: 'I', 6: 'b', 7: 'B', 8: 'h', 9: 'i', 11: 'f', 12: 'd'}


def _encode(type_code, value, endian):
    if type_code == ASCII:
        raw = value.encode('ascii') + b'\x00'
        return raw, len(raw)
    values = value if isinstance(value, list) else [value]
    if type_code in (RATIONAL, SRATIONAL):
        code = 'I' if type_code == RATIONAL else 'i'
        flat = [part for pair in values for part in pair]
        return struct.pack(f'{endian}{len(flat)}{code}', *flat), len(values)
    code = _STRUCT_CODES[type_code]
    return struct.pack(f'{endian}{len(values)}{code}', *values), len(values)


def _ifd_size(entries, endian):
    size = 2 + 12 * len(entries) + 4
    for type_code, value in ((e[1], e[2]) for e in entries):
        raw, _ = _encode(type_code, value, endian)
        if len(raw) > 4:
            size += len(raw) + (len(raw) & 1)
    return size


def _build_ifd(entries, start, endian):
    entries = sorted(entries, key=lambda e: e[0])
    data_offset = start + 2 + 12 * len(entries) + 4
    head = struct.pack(f'{endian}H', len(entries))
    body = b''
    for tag_id, type_code, value in entries:
        raw, count = _encode(type_code, value, endian)
        if len(raw) <= 4:
            field = raw.ljust(4, b'\x00')
        else:
            field = struct.pack(f'{endian}I', data_offset + len(body))
            body += raw + b'\x00' * (len(raw) & 1)
        head += struct.pack(f'{endian}HHI', tag_id, type_code, count) + field
    head += struct.pack(f'{endian}I', 0)
    return head + body


def make_tiff(ifd0, exif=None, gps=None, byte_order='<'):
    """Build a TIFF payload with IFD0 and optional Exif and GPS sub-IFDs."""
    endian = byte_order
    ifd0 = list(ifd0)
    if exif is not None:
        ifd0.append((0x8769, 4, 0))
    if gps is not None:
        ifd0.append((0x8825, 4, 0))

    exif_offset = 8 + _ifd_size(ifd0, endian)
    gps_offset = exif_offset + (_ifd_size(exif, endian) if exif is not None else 0)
    pointers = {0x8769: exif_offset, 0x8825: gps_offset}
    ifd0 = [
        (tag, type_code, pointers[tag]) if tag in pointers and value == 0 else (tag, type_code, value)
        for tag, type_code, value in ifd0
    ]

    marker = b'II' if endian == '<' else b'MM'
    data = marker + struct.pack(f'{endian}HI', 42, 8) + _build_ifd(ifd0, 8, endian)
    if exif is not None:
        data += _build_ifd(exif, exif_offset, endian)
    if gps is not None:
        data += _build_ifd(gps, gps_offset, endian)
    return data


def make_jpeg(tiff=None, segments=()):
    """Build a JPEG with an optional EXIF APP1 segment after ``segments``."""
    data = b'\xff\xd8'
    data += b'\xff\xe0' + struct.pack('>H', 16) + b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
    for segment in segments:
        data += segment
    if tiff is not None:
        payload = b'Exif\x00\x00' + tiff
        data += b'\xff\xe1' + struct.pack('>H', len(payload) + 2) + payload
    data += b'\xff\xda' + struct.pack('>H', 8) + b'\x01\x01\x00\x00\x3f\x00'
    data += b'\x12\x34\x56\x78'
    data += b'\xff\xd9'
    return data


def make_png(width=640, height=480, extra=b''):
    """Build a PNG signature and IHDR chunk followed by ``extra`` bytes."""
    ihdr = struct.pack('>II', width, height) + b'\x08\x02\x00\x00\x00'
    return (
        b'\x89PNG\r\n\x1a\n'
        + struct.pack('>I', len(ihdr)) + b'IHDR' + ihdr + b'\x00\x00\x00\x00'
        + extra
    )


CAMERA_IFD0 = [
    (0x010F, ASCII, 'Canon'),
    (0x0110, ASCII, 'EOS R5'),
    (0x0112, 3, 6),
    (0x011A, RATIONAL, (72, 1)),
    (0x011B, RATIONAL, (72, 1)),
    (0x0128, 3, 2),
    (0x0131, ASCII, 'Firmware 1.8.1'),
    (0x0132, ASCII, '2023:06:01 12:00:00'),
]

CAMERA_EXIF = [
    (0x829A, RATIONAL, (1, 250)),
    (0x829D, RATIONAL, (28, 10)),
    (0x8822, 3, 3),
    (0x8827, 3, 400),
    (0x9000, 7, [48, 50, 51, 50]),
    (0x9003, ASCII, '2023:06:01 09:30:15'),
    (0x9004, ASCII, '2023:06:01 09:30:16'),
    (0x9207, 3, 5),
    (0x9209, 3, 16),
    (0x920A, RATIONAL, (50, 1)),
    (0xA002, 4, 1920),
    (0xA003, 4, 1080),
    (0xA403, 3, 0),
    (0xA433, ASCII, 'Canon'),
    (0xA434, ASCII, 'RF50mm F1.8 STM'),
]

CAMERA_GPS = [
    (0x0001, ASCII, 'N'),
    (0x0002, RATIONAL, [(40, 1), (26, 1), (46, 1)]),
    (0x0003, ASCII, 'W'),
    (0x0004, RATIONAL, [(79, 1), (58, 1), (56, 1)]),
    (0x0005, 1, 1),
    (0x0006, RATIONAL, (100, 1)),
]


@pytest.fixture
def camera_tiff():
    """Little-endian TIFF with camera, exposure and GPS tags."""
    return make_tiff(CAMERA_IFD0, CAMERA_EXIF, CAMERA_GPS)


@pytest.fixture
def camera_tiff_be():
    """The camera TIFF in big-endian byte order."""
    return make_tiff(CAMERA_IFD0, CAMERA_EXIF, CAMERA_GPS, byte_order='>')


@pytest.fixture
def camera_jpeg(camera_tiff):
    return make_jpeg(camera_tiff)
