# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Extraction diagnostics

Problems found in the input data are collected as Diagnostic records and
returned with the extracted metadata instead of being raised.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class DiagnosticCode(Enum):
    """Kind of problem found while extracting metadata."""
    EMPTY_INPUT = "empty_input"  # No bytes to look at
    UNRECOGNIZED_FORMAT = "unrecognized_format"  # No container signature matched
    NO_EXIF_PAYLOAD = "no_exif_payload"  # Container known, no EXIF/TIFF segment
    MALFORMED_SEGMENT = "malformed_segment"  # JPEG marker segment with a bad length
    MALFORMED_TIFF_HEADER = "malformed_tiff_header"  # Byte order, magic or IFD0 offset invalid
    MALFORMED_IFD_ENTRY = "malformed_ifd_entry"  # One directory entry skipped
    INTERNAL_ERROR = "internal_error"  # Unexpected failure caught at the API boundary


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found in the input."""
    code: DiagnosticCode
    message: str
    offset: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'message': self.message,
            'offset': self.offset,
        }


def record(diagnostics: Optional[List[Diagnostic]], code: DiagnosticCode,
           message: str, offset: Optional[int] = None) -> None:
    """Append a diagnostic to ``diagnostics`` if a list was supplied."""
    if diagnostics is not None:
        diagnostics.append(Diagnostic(code, message, offset))
