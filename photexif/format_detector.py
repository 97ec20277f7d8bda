# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Container format detector

This module identifies the image container of a byte buffer from the
magic bytes at fixed offsets at the start of the file.

Copyright 2025 DNAi inc.
"""

from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ContainerFormat(Enum):
    """Image container formats recognised by signature."""
    JPEG = 'JPEG'
    PNG = 'PNG'
    WEBP = 'WEBP'
    HEIC = 'HEIC'
    AVIF = 'AVIF'
    GIF = 'GIF'
    TIFF = 'TIFF'
    BMP = 'BMP'
    UNKNOWN = 'Unknown'


class FormatDetector:
    """
    Detects image container formats from file signatures.

    Signatures are tested in a fixed order. A test whose signature does
    not fit in the buffer is skipped, so short and empty buffers simply
    come out as UNKNOWN.
    """

    # (format, offset, accepted signatures), in test order
    FORMAT_SIGNATURES: Tuple[Tuple[ContainerFormat, int, Tuple[bytes, ...]], ...] = (
        (ContainerFormat.JPEG, 0, (b'\xff\xd8',)),
        (ContainerFormat.PNG, 0, (b'\x89PNG',)),
        (ContainerFormat.GIF, 0, (b'GIF',)),
        (ContainerFormat.BMP, 0, (b'BM',)),
        (ContainerFormat.TIFF, 0, (b'II*\x00', b'MM\x00*')),
    )

    # ISO base media file format brands (the 4 bytes after 'ftyp')
    HEIC_BRANDS = frozenset({
        'heic', 'heix', 'hevc', 'hevx', 'heim', 'heis',
        'hevm', 'hevs', 'mif1', 'msf1', 'iso8',
    })
    AVIF_BRANDS = frozenset({'avif'})

    MIME_TYPES: Dict[ContainerFormat, str] = {
        ContainerFormat.JPEG: 'image/jpeg',
        ContainerFormat.PNG: 'image/png',
        ContainerFormat.WEBP: 'image/webp',
        ContainerFormat.HEIC: 'image/heic',
        ContainerFormat.AVIF: 'image/avif',
        ContainerFormat.GIF: 'image/gif',
        ContainerFormat.TIFF: 'image/tiff',
        ContainerFormat.BMP: 'image/bmp',
    }

    @classmethod
    def detect(cls, file_data: Union[bytes, bytearray, memoryview, None]) -> ContainerFormat:
        """
        Detect the container format of a buffer.

        Args:
            file_data: File data (at least the first 12 bytes for full coverage)

        Returns:
            The detected ContainerFormat, UNKNOWN if nothing matched
        """
        if not file_data:
            return ContainerFormat.UNKNOWN
        data = bytes(file_data[:12])

        for format_name, offset, signatures in cls.FORMAT_SIGNATURES:
            for signature in signatures:
                if len(data) < offset + len(signature):
                    continue
                if data[offset:offset + len(signature)] == signature:
                    return format_name

        # RIFF container carrying WebP
        if len(data) >= 12 and data[:4] == b'RIFF' and data[8:12] == b'WEBP':
            return ContainerFormat.WEBP

        # ISO-BMFF: 'ftyp' box at offset 4, major brand at offset 8
        if len(data) >= 12 and data[4:8] == b'ftyp':
            brand = data[8:12].decode('latin-1').lower()
            if brand in cls.HEIC_BRANDS:
                return ContainerFormat.HEIC
            if brand in cls.AVIF_BRANDS:
                return ContainerFormat.AVIF

        return ContainerFormat.UNKNOWN

    @classmethod
    def mime_type(cls, format_name: ContainerFormat) -> Optional[str]:
        """
        Get the conventional MIME type of a container format.

        Args:
            format_name: Detected container format

        Returns:
            MIME type string, or None for UNKNOWN
        """
        return cls.MIME_TYPES.get(format_name)


def detect_format(file_data: Union[bytes, bytearray, memoryview, None]) -> ContainerFormat:
    """Detect the container format of ``file_data``."""
    return FormatDetector.detect(file_data)
