# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
photexif - A Pure Python EXIF Extractor

Reads the EXIF metadata embedded in image files held in memory (JPEG,
TIFF, and heuristically PNG, WebP, HEIC, AVIF) and organizes it into
camera, image, settings, datetime, location and technical groups.

All parsing is done by directly reading the binary file structures; no
third-party runtime dependencies are required.

Copyright 2025 DNAi inc.
"""

import logging

__version__ = "0.1.0"
__author__ = "DNAi inc."

from photexif.config import DEFAULT_CONFIG, ExtractionConfig
from photexif.core import ExifExtractor, extract_metadata
from photexif.diagnostics import Diagnostic, DiagnosticCode
from photexif.exceptions import (
    InvalidInputError,
    MalformedHeaderError,
    MetadataReadError,
    PhotexifError,
)
from photexif.file_info import FileInfo, extract_basic_file_info
from photexif.format_detector import ContainerFormat, FormatDetector, detect_format
from photexif.organizer import OrganizedMetadata, organize
from photexif.segment_locator import iter_tiff_candidates, locate_exif_payload
from photexif.tag_decoder import ByteOrder, ExifTagType, decode_value
from photexif.tiff_structure import TagDictionary, TiffStructure, TiffStructureParser, parse_tiff

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ExifExtractor",
    "extract_metadata",
    "ExtractionConfig",
    "DEFAULT_CONFIG",
    "Diagnostic",
    "DiagnosticCode",
    "PhotexifError",
    "InvalidInputError",
    "MetadataReadError",
    "MalformedHeaderError",
    "FileInfo",
    "extract_basic_file_info",
    "ContainerFormat",
    "FormatDetector",
    "detect_format",
    "OrganizedMetadata",
    "organize",
    "locate_exif_payload",
    "iter_tiff_candidates",
    "ByteOrder",
    "ExifTagType",
    "decode_value",
    "TagDictionary",
    "TiffStructure",
    "TiffStructureParser",
    "parse_tiff",
]
