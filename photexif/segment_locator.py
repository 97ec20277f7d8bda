# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF segment locator

Finds the bytes of the TIFF structure that carries EXIF metadata inside a
container:

- TIFF files are the structure themselves.
- JPEG files carry it in an APP1 segment introduced by ``Exif\\0\\0``.
- For PNG, WebP, HEIC, AVIF and anything else, the first bytes of the file
  are searched for a TIFF byte order marker. This is a heuristic and does
  not parse PNG ``eXIf`` chunks or WebP/HEIF ``Exif`` boxes, so it misses
  EXIF stored further into those files.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import Iterator, List, Optional

from photexif.config import DEFAULT_CONFIG, ExtractionConfig
from photexif.diagnostics import Diagnostic, DiagnosticCode, record
from photexif.format_detector import ContainerFormat

logger = logging.getLogger(__name__)

EXIF_HEADER = b'Exif\x00\x00'
TIFF_MARKERS = (b'II*\x00', b'MM\x00*')

# JPEG markers
MARKER_PREFIX = 0xFF
APP1 = 0xE1
SOS = 0xDA  # Start of scan: entropy-coded data follows
EOI = 0xD9
# Markers without a length field: TEM, RST0-RST7 and SOI
STANDALONE_MARKERS = frozenset([0x01] + list(range(0xD0, 0xD9)))


def locate_exif_payload(
    file_data: bytes,
    format_name: ContainerFormat,
    config: Optional[ExtractionConfig] = None,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Optional[bytes]:
    """
    Locate the TIFF payload holding EXIF metadata.

    Args:
        file_data: Complete file content
        format_name: Container format from FormatDetector
        config: Extraction limits (defaults to DEFAULT_CONFIG)
        diagnostics: List that receives problems found while scanning

    Returns:
        Payload bytes starting at the TIFF byte order marker, or None
    """
    config = config or DEFAULT_CONFIG
    if format_name == ContainerFormat.TIFF:
        return bytes(file_data)
    if format_name == ContainerFormat.JPEG:
        return find_jpeg_exif_segment(file_data, config.jpeg_scan_limit, diagnostics)
    candidate = next(iter_tiff_candidates(file_data, config.tiff_scan_limit), None)
    return bytes(candidate) if candidate is not None else None


def find_jpeg_exif_segment(
    file_data: bytes,
    scan_limit: int = 65536,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Optional[bytes]:
    """
    Walk the JPEG marker segments looking for the EXIF APP1 segment.

    Only segments starting within the first ``scan_limit`` bytes are
    examined. A segment whose declared length is below 2 aborts the walk.

    Returns:
        The TIFF bytes following ``Exif\\0\\0``, or None
    """
    limit = min(len(file_data), scan_limit)
    offset = 2  # Skip JPEG SOI marker

    while offset + 1 < limit:
        if file_data[offset] != MARKER_PREFIX:
            logger.debug("No JPEG marker at offset %d, stopping segment scan", offset)
            break

        marker = file_data[offset + 1]

        if marker == MARKER_PREFIX:
            # Fill byte before the real marker
            offset += 1
            continue
        if marker in STANDALONE_MARKERS:
            offset += 2
            continue
        if marker in (SOS, EOI):
            break

        if offset + 4 > len(file_data):
            break
        length = struct.unpack('>H', file_data[offset + 2:offset + 4])[0]
        if length < 2:
            record(
                diagnostics,
                DiagnosticCode.MALFORMED_SEGMENT,
                f"JPEG segment 0xFF{marker:02X} declares length {length}",
                offset,
            )
            break

        if marker == APP1 and file_data[offset + 4:offset + 10] == EXIF_HEADER:
            start = offset + 10
            end = offset + 2 + length
            if end > start:
                return bytes(file_data[start:end])

        offset += 2 + length

    return None


def tiff_header_offsets(file_data: bytes, scan_limit: int = 2048) -> Iterator[int]:
    """Yield offsets of TIFF byte order markers found in the first ``scan_limit`` bytes."""
    window = bytes(file_data[:scan_limit])
    position = 0
    while True:
        found = [i for i in (window.find(marker, position) for marker in TIFF_MARKERS) if i != -1]
        if not found:
            return
        offset = min(found)
        yield offset
        position = offset + 1


def iter_tiff_candidates(file_data: bytes, scan_limit: int = 2048) -> Iterator[memoryview]:
    """
    Yield every candidate TIFF payload (marker to end of file), nearest first.

    Candidates are memoryview slices of ``file_data``; nothing is copied.
    """
    view = memoryview(file_data)
    for offset in tiff_header_offsets(file_data, scan_limit):
        logger.debug("Potential TIFF header at offset %d", offset)
        yield view[offset:]
