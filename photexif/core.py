# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Core photexif API

This module provides the main entry point for extracting EXIF metadata
from an in-memory image file. It chains the format detector, the segment
locator, the TIFF structure parser and the metadata organizer.

Malformed input never raises: problems are reported as diagnostics on the
returned OrganizedMetadata. Only calling the API with arguments of the
wrong type raises (InvalidInputError).

Copyright 2025 DNAi inc.
"""

import logging
from typing import List, Optional, Union

from photexif.config import DEFAULT_CONFIG, ExtractionConfig
from photexif.diagnostics import Diagnostic, DiagnosticCode, record
from photexif.exceptions import InvalidInputError
from photexif.file_info import FileInfo, extract_basic_file_info
from photexif.format_detector import ContainerFormat, FormatDetector
from photexif.organizer import OrganizedMetadata, minimal_metadata, organize
from photexif.segment_locator import iter_tiff_candidates, locate_exif_payload
from photexif.tiff_structure import TiffStructure, parse_tiff

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class ExifExtractor:
    """
    EXIF metadata extractor.

    Holds only its configuration; every call to extract() works on its
    own buffer and diagnostics, so one instance can be shared freely.

    Example:
        >>> extractor = ExifExtractor()
        >>> metadata = extractor.extract(open('photo.jpg', 'rb').read(), 'photo.jpg')
        >>> metadata.camera.get('model')
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        """
        Initialize the extractor.

        Args:
            config: Extraction limits (defaults to DEFAULT_CONFIG)
        """
        if config is not None and not isinstance(config, ExtractionConfig):
            raise InvalidInputError(
                f"config must be an ExtractionConfig, got {type(config).__name__}"
            )
        self.config = config or DEFAULT_CONFIG

    def extract(self, file_data: Optional[BytesLike], filename: Optional[str] = None) -> OrganizedMetadata:
        """
        Extract and organize the EXIF metadata of a file.

        Args:
            file_data: Complete file content
            filename: Optional display name, used in log messages and
                      copied into file_info

        Returns:
            OrganizedMetadata (has_exif is False when no EXIF was found)

        Raises:
            InvalidInputError: If file_data is not bytes-like or filename
                               is not a string
        """
        if file_data is not None and not isinstance(file_data, (bytes, bytearray, memoryview)):
            raise InvalidInputError(
                f"file_data must be bytes, bytearray or memoryview, got {type(file_data).__name__}"
            )
        if filename is not None and not isinstance(filename, str):
            raise InvalidInputError(f"filename must be a string, got {type(filename).__name__}")

        diagnostics: List[Diagnostic] = []
        if not file_data:
            record(diagnostics, DiagnosticCode.EMPTY_INPUT, "No file data supplied")
            info = FileInfo(file_size=0, format=ContainerFormat.UNKNOWN, filename=filename)
            return minimal_metadata(info, diagnostics)

        data = bytes(file_data)
        try:
            return self._extract(data, filename, diagnostics)
        except Exception as e:
            logger.exception("Unexpected error extracting metadata from %s", filename or "<buffer>")
            record(diagnostics, DiagnosticCode.INTERNAL_ERROR, f"{type(e).__name__}: {e}")
            info = FileInfo(file_size=len(data), format=ContainerFormat.UNKNOWN, filename=filename)
            return minimal_metadata(info, diagnostics)

    def _extract(self, data: bytes, filename: Optional[str], diagnostics: List[Diagnostic]) -> OrganizedMetadata:
        name = filename or "<buffer>"
        format_name = FormatDetector.detect(data)
        logger.debug("%s: detected format %s (%d bytes)", name, format_name.value, len(data))
        if format_name == ContainerFormat.UNKNOWN:
            record(diagnostics, DiagnosticCode.UNRECOGNIZED_FORMAT, "No known container signature")

        file_info = extract_basic_file_info(data, format_name, filename)

        if format_name in (ContainerFormat.JPEG, ContainerFormat.TIFF):
            structure = self._parse_located(data, format_name, diagnostics)
        else:
            structure = self._parse_candidates(data, diagnostics)

        metadata = organize(structure, file_info, diagnostics)
        logger.debug(
            "%s: has_exif=%s, %d diagnostics", name, metadata.has_exif, len(metadata.diagnostics)
        )
        return metadata

    def _parse_located(
        self, data: bytes, format_name: ContainerFormat, diagnostics: List[Diagnostic]
    ) -> Optional[TiffStructure]:
        payload = locate_exif_payload(data, format_name, self.config, diagnostics)
        if payload is None:
            record(diagnostics, DiagnosticCode.NO_EXIF_PAYLOAD, "No EXIF segment found")
            return None
        return parse_tiff(payload, self.config, diagnostics)

    def _parse_candidates(self, data: bytes, diagnostics: List[Diagnostic]) -> Optional[TiffStructure]:
        # The first candidate that yields tags wins. If none does, the
        # diagnostics of the nearest candidate explain why.
        first_attempt: Optional[List[Diagnostic]] = None
        for payload in iter_tiff_candidates(data, self.config.tiff_scan_limit):
            attempt: List[Diagnostic] = []
            structure = parse_tiff(payload, self.config, attempt)
            if structure is not None and (len(structure.ifd0) or structure.exif_ifd):
                diagnostics.extend(attempt)
                return structure
            if first_attempt is None:
                first_attempt = attempt

        if first_attempt is None:
            record(diagnostics, DiagnosticCode.NO_EXIF_PAYLOAD, "No embedded TIFF header found")
        else:
            diagnostics.extend(first_attempt)
        return None


def extract_metadata(
    file_data: Optional[BytesLike],
    filename: Optional[str] = None,
    config: Optional[ExtractionConfig] = None,
) -> OrganizedMetadata:
    """
    Extract and organize the EXIF metadata of a file.

    Args:
        file_data: Complete file content
        filename: Optional display name
        config: Extraction limits (defaults to DEFAULT_CONFIG)

    Returns:
        OrganizedMetadata
    """
    return ExifExtractor(config).extract(file_data, filename)
