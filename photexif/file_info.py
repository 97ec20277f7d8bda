# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Basic file information

Size, format and MIME type of the buffer, plus the pixel dimensions that
PNG, GIF, BMP and WebP declare in their file headers.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from photexif.format_detector import ContainerFormat, FormatDetector

Dimensions = Tuple[Optional[int], Optional[int]]


@dataclass(frozen=True)
class FileInfo:
    """File-level facts that do not depend on EXIF."""
    file_size: int
    format: ContainerFormat
    mime_type: Optional[str] = None
    filename: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file_size': self.file_size,
            'format': self.format.value,
            'mime_type': self.mime_type,
            'filename': self.filename,
            'width': self.width,
            'height': self.height,
        }


def extract_basic_file_info(
    file_data: bytes,
    format_name: ContainerFormat,
    filename: Optional[str] = None,
) -> FileInfo:
    """
    Build the FileInfo of a buffer.

    Args:
        file_data: Complete file content
        format_name: Detected container format
        filename: Optional display name, copied as-is

    Returns:
        FileInfo with header dimensions where the format exposes them
    """
    width, height = read_header_dimensions(file_data, format_name)
    return FileInfo(
        file_size=len(file_data),
        format=format_name,
        mime_type=FormatDetector.mime_type(format_name),
        filename=filename,
        width=width,
        height=height,
    )


def read_header_dimensions(file_data: bytes, format_name: ContainerFormat) -> Dimensions:
    """Pixel dimensions from the container header, (None, None) if unavailable."""
    reader = _DIMENSION_READERS.get(format_name)
    if reader is None:
        return None, None
    return reader(file_data)


def _png_dimensions(data: bytes) -> Dimensions:
    # Signature (8) + chunk length (4) + 'IHDR' (4), then width and height
    if len(data) < 24 or data[12:16] != b'IHDR':
        return None, None
    width, height = struct.unpack('>II', data[16:24])
    return width, height


def _gif_dimensions(data: bytes) -> Dimensions:
    # Logical screen descriptor follows the 6-byte header
    if len(data) < 10:
        return None, None
    width, height = struct.unpack('<HH', data[6:10])
    return width, height


def _bmp_dimensions(data: bytes) -> Dimensions:
    # BITMAPINFOHEADER: width and height are signed, negative height means top-down
    if len(data) < 26:
        return None, None
    width, height = struct.unpack('<ii', data[18:26])
    return abs(width), abs(height)


def _webp_dimensions(data: bytes) -> Dimensions:
    offset = 12
    while offset + 8 <= len(data):
        chunk_type = data[offset:offset + 4]
        chunk_size = struct.unpack('<I', data[offset + 4:offset + 8])[0]
        chunk_data = data[offset + 8:offset + 8 + chunk_size]

        if chunk_type == b'VP8X' and len(chunk_data) >= 10:
            # flags(1) + reserved(3) + width-1 (3) + height-1 (3)
            width = int.from_bytes(chunk_data[4:7], 'little') + 1
            height = int.from_bytes(chunk_data[7:10], 'little') + 1
            return width, height
        if chunk_type == b'VP8 ' and len(chunk_data) >= 10:
            # Frame tag (3) + start code (3), then 14-bit width and height
            if chunk_data[3:6] == b'\x9d\x01\x2a':
                raw_width, raw_height = struct.unpack('<HH', chunk_data[6:10])
                return raw_width & 0x3FFF, raw_height & 0x3FFF
            return None, None
        if chunk_type == b'VP8L' and len(chunk_data) >= 5:
            # Signature byte 0x2F, then 14-bit width-1 and height-1
            if chunk_data[0] == 0x2F:
                bits = struct.unpack('<I', chunk_data[1:5])[0]
                return (bits & 0x3FFF) + 1, ((bits >> 14) & 0x3FFF) + 1
            return None, None

        # Chunks are padded to an even size
        offset += 8 + chunk_size + (chunk_size & 1)

    return None, None


_DIMENSION_READERS = {
    ContainerFormat.PNG: _png_dimensions,
    ContainerFormat.GIF: _gif_dimensions,
    ContainerFormat.BMP: _bmp_dimensions,
    ContainerFormat.WEBP: _webp_dimensions,
}
