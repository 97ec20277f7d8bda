# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Extraction limits

Copyright 2025 DNAi inc.
"""


class ExtractionConfig:
    """
    Limits that bound the work done on a single buffer.

    The defaults keep the cost of one extraction predictable on
    adversarial input. Instances are treated as read-only by the library.
    """

    def __init__(
        self,
        jpeg_scan_limit: int = 65536,
        tiff_scan_limit: int = 2048,
        max_ifd_entries: int = 500,
        follow_sub_ifds: bool = True,
        max_value_count: int = 65536,
    ):
        """
        Initialize the configuration.

        Args:
            jpeg_scan_limit: Number of leading bytes searched for the APP1
                             EXIF segment in a JPEG file
            tiff_scan_limit: Number of leading bytes searched for an embedded
                             TIFF header in other containers
            max_ifd_entries: Largest directory entry count accepted before
                             the directory is treated as corrupt
            follow_sub_ifds: If False, only IFD0 is parsed
            max_value_count: Largest value count accepted for a single
                             directory entry; larger entries are skipped

        Raises:
            ValueError: If a limit is not a positive integer
        """
        for name, value in (
            ('jpeg_scan_limit', jpeg_scan_limit),
            ('tiff_scan_limit', tiff_scan_limit),
            ('max_ifd_entries', max_ifd_entries),
            ('max_value_count', max_value_count),
        ):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        self.jpeg_scan_limit = jpeg_scan_limit
        self.tiff_scan_limit = tiff_scan_limit
        self.max_ifd_entries = max_ifd_entries
        self.follow_sub_ifds = bool(follow_sub_ifds)
        self.max_value_count = max_value_count

    def __repr__(self) -> str:
        return (
            f"ExtractionConfig(jpeg_scan_limit={self.jpeg_scan_limit}, "
            f"tiff_scan_limit={self.tiff_scan_limit}, "
            f"max_ifd_entries={self.max_ifd_entries}, "
            f"follow_sub_ifds={self.follow_sub_ifds}, "
            f"max_value_count={self.max_value_count})"
        )


DEFAULT_CONFIG = ExtractionConfig()
