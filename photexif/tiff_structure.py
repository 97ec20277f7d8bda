# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
TIFF file structure parser

This module parses the TIFF structure that carries EXIF metadata: the
8-byte header, IFD0, and the Exif and GPS sub-IFDs that IFD0 points to.

Sub-IFD pointers are followed exactly one level deep. A sub-IFD is never
searched for further pointers, so offsets pointing back at IFD0 cannot
make the parser loop.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Union

from photexif.config import DEFAULT_CONFIG, ExtractionConfig
from photexif.diagnostics import Diagnostic, DiagnosticCode, record
from photexif.exceptions import MalformedHeaderError
from photexif.exif_tags import (
    EXIF_IFD,
    EXIF_IFD_POINTER,
    GPS_IFD,
    GPS_IFD_POINTER,
    IFD0,
    tag_name,
)
from photexif.tag_decoder import ByteOrder, TAG_SIZES, decode_value, value_span

logger = logging.getLogger(__name__)

TIFF_MAGIC = 42
TIFF_HEADER_SIZE = 8
IFD_ENTRY_SIZE = 12


@dataclass(frozen=True)
class TiffHeader:
    """Byte order and IFD0 location read from the 8-byte TIFF header."""
    byte_order: ByteOrder
    ifd0_offset: int


@dataclass(frozen=True)
class IfdEntry:
    """One 12-byte IFD directory entry, value not yet decoded."""
    tag_id: int
    type_code: int
    count: int
    raw_value: bytes
    offset: int

    def pointer(self, byte_order: ByteOrder) -> int:
        """The raw value bytes read as an offset into the payload."""
        return struct.unpack(f'{byte_order.value}I', self.raw_value)[0]


class TagDictionary(Mapping):
    """
    Read-only mapping of tag id to decoded value for one IFD.

    A name-indexed view is built once at construction; names are resolved
    in the namespace of the IFD (GPS ids are looked up in the GPS table).
    """

    def __init__(self, ifd_name: str, values: Dict[int, Any], offset: Optional[int] = None):
        self.ifd_name = ifd_name
        self.offset = offset
        self._values = dict(values)
        self._by_name = MappingProxyType(
            {tag_name(tag_id, ifd_name): value for tag_id, value in self._values.items()}
        )

    def __getitem__(self, tag_id: int) -> Any:
        return self._values[tag_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TagDictionary({self.ifd_name!r}, {len(self)} tags)"

    @property
    def by_name(self) -> Mapping:
        """Read-only view keyed by tag name."""
        return self._by_name

    def name_of(self, tag_id: int) -> str:
        return tag_name(tag_id, self.ifd_name)

    def get_by_name(self, name: str, default: Any = None) -> Any:
        return self._by_name.get(name, default)


@dataclass(frozen=True)
class TiffStructure:
    """Decoded IFD0 plus the optional Exif and GPS sub-IFDs."""
    byte_order: ByteOrder
    ifd0: TagDictionary
    exif_ifd: Optional[TagDictionary] = None
    gps_ifd: Optional[TagDictionary] = None

    def ifds(self) -> List[TagDictionary]:
        """Parsed directories in precedence order (IFD0, Exif, GPS)."""
        return [ifd for ifd in (self.ifd0, self.exif_ifd, self.gps_ifd) if ifd is not None]

    def is_empty(self) -> bool:
        return not any(len(ifd) for ifd in self.ifds())


class TiffStructureParser:
    """
    TIFF structure parser.

    One instance parses one payload. The only state it keeps is the byte
    order read from the header and the diagnostics list of the call.
    """

    def __init__(
        self,
        payload: Union[bytes, memoryview],
        config: Optional[ExtractionConfig] = None,
        diagnostics: Optional[List[Diagnostic]] = None,
    ):
        """
        Initialize TIFF structure parser.

        Args:
            payload: TIFF data, starting at the byte order marker. Read
                     through a memoryview, so slices of a larger buffer
                     are not copied
            config: Extraction limits (defaults to DEFAULT_CONFIG)
            diagnostics: List that receives problems found while parsing
        """
        self.payload = memoryview(payload)
        self.config = config or DEFAULT_CONFIG
        self.diagnostics = diagnostics if diagnostics is not None else []
        self.byte_order: Optional[ByteOrder] = None

    def parse(self) -> Optional[TiffStructure]:
        """
        Parse the TIFF structure.

        Returns:
            TiffStructure, or None if the header is invalid
        """
        try:
            header = self.read_header()
        except MalformedHeaderError as e:
            logger.debug("Invalid TIFF header: %s", e.message)
            record(self.diagnostics, DiagnosticCode.MALFORMED_TIFF_HEADER, e.message, 0)
            return None

        ifd0 = self.parse_ifd(header.ifd0_offset, IFD0)
        exif_ifd = None
        gps_ifd = None
        if self.config.follow_sub_ifds:
            exif_ifd = self._parse_sub_ifd(ifd0, EXIF_IFD_POINTER, EXIF_IFD)
            gps_ifd = self._parse_sub_ifd(ifd0, GPS_IFD_POINTER, GPS_IFD)

        return TiffStructure(header.byte_order, ifd0, exif_ifd, gps_ifd)

    def read_header(self) -> TiffHeader:
        """
        Read and validate the 8-byte TIFF header.

        Raises:
            MalformedHeaderError: If any header field is invalid
        """
        data = self.payload
        if len(data) < TIFF_HEADER_SIZE:
            raise MalformedHeaderError(f"TIFF payload too short: {len(data)} bytes")

        # Determine endianness
        if data[:2] == b'II':
            self.byte_order = ByteOrder.LITTLE_ENDIAN
        elif data[:2] == b'MM':
            self.byte_order = ByteOrder.BIG_ENDIAN
        else:
            raise MalformedHeaderError(f"Invalid TIFF byte order marker: {data[:2].hex()}")

        magic, ifd0_offset = struct.unpack_from(f'{self.byte_order.value}HI', data, 2)
        if magic != TIFF_MAGIC:
            raise MalformedHeaderError(f"Invalid TIFF magic number: {magic}")
        if ifd0_offset == 0 or ifd0_offset >= len(data):
            raise MalformedHeaderError(
                f"IFD0 offset {ifd0_offset} outside payload of {len(data)} bytes"
            )

        return TiffHeader(self.byte_order, ifd0_offset)

    def parse_ifd(self, offset: int, ifd_name: str) -> TagDictionary:
        """
        Parse an IFD (Image File Directory).

        Bad entries are skipped; the rest of the directory is still read.
        Pointer tags in the directory are not followed.

        Args:
            offset: Offset of the IFD within the payload
            ifd_name: IFD0, ExifIFD or GPSIFD

        Returns:
            TagDictionary of the decoded entries
        """
        data = self.payload
        endian = self.byte_order.value

        if offset + 2 > len(data):
            self._skip(ifd_name, f"no room for entry count at offset {offset}", offset)
            return TagDictionary(ifd_name, {}, offset)

        # Read number of entries
        num_entries = struct.unpack_from(f'{endian}H', data, offset)[0]
        if num_entries > self.config.max_ifd_entries:
            self._skip(
                ifd_name,
                f"entry count {num_entries} exceeds limit of {self.config.max_ifd_entries}",
                offset,
            )
            return TagDictionary(ifd_name, {}, offset)

        values: Dict[int, Any] = {}
        entry_offset = offset + 2

        for index in range(num_entries):
            if entry_offset + IFD_ENTRY_SIZE > len(data):
                self._skip(
                    ifd_name,
                    f"directory truncated after {index} of {num_entries} entries",
                    entry_offset,
                )
                break

            entry = self.read_entry(entry_offset)
            value = self._decode_entry(entry, ifd_name)
            if value is not None:
                if entry.tag_id in values:
                    self._skip(ifd_name, f"duplicate tag 0x{entry.tag_id:04X} ignored", entry.offset)
                else:
                    values[entry.tag_id] = value

            entry_offset += IFD_ENTRY_SIZE

        return TagDictionary(ifd_name, values, offset)

    def read_entry(self, entry_offset: int) -> IfdEntry:
        """Read the 12-byte directory entry at ``entry_offset``."""
        tag_id, type_code, count = struct.unpack_from(
            f'{self.byte_order.value}HHI', self.payload, entry_offset
        )
        raw_value = bytes(self.payload[entry_offset + 8:entry_offset + IFD_ENTRY_SIZE])
        return IfdEntry(tag_id, type_code, count, raw_value, entry_offset)

    def _decode_entry(self, entry: IfdEntry, ifd_name: str) -> Any:
        if entry.type_code not in TAG_SIZES:
            self._skip(
                ifd_name,
                f"tag 0x{entry.tag_id:04X} has unsupported type {entry.type_code}",
                entry.offset,
            )
            return None

        if entry.count > self.config.max_value_count:
            self._skip(
                ifd_name,
                f"tag 0x{entry.tag_id:04X} declares {entry.count} values, "
                f"limit is {self.config.max_value_count}",
                entry.offset,
            )
            return None

        span = value_span(entry.type_code, entry.count)
        if span > 4:
            pointer = entry.pointer(self.byte_order)
            if pointer + span > len(self.payload):
                self._skip(
                    ifd_name,
                    f"tag 0x{entry.tag_id:04X} value at {pointer} ({span} bytes) "
                    f"runs past payload of {len(self.payload)} bytes",
                    entry.offset,
                )
                return None

        value = decode_value(
            self.payload, entry.type_code, entry.count, entry.raw_value, self.byte_order
        )
        if value is None:
            self._skip(
                ifd_name,
                f"tag 0x{entry.tag_id:04X} has bad count {entry.count}",
                entry.offset,
            )
        return value

    def _parse_sub_ifd(self, ifd0: TagDictionary, pointer_tag: int, ifd_name: str) -> Optional[TagDictionary]:
        if pointer_tag not in ifd0:
            return None
        offset = ifd0[pointer_tag]
        if isinstance(offset, bool) or not isinstance(offset, int) \
                or offset <= 0 or offset >= len(self.payload):
            self._skip(IFD0, f"{ifd_name} pointer {offset!r} is out of bounds", None)
            return None
        return self.parse_ifd(offset, ifd_name)

    def _skip(self, ifd_name: str, reason: str, offset: Optional[int]) -> None:
        message = f"{ifd_name}: {reason}"
        logger.debug("Skipping IFD data: %s", message)
        record(self.diagnostics, DiagnosticCode.MALFORMED_IFD_ENTRY, message, offset)


def parse_tiff(
    payload: Union[bytes, memoryview],
    config: Optional[ExtractionConfig] = None,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Optional[TiffStructure]:
    """
    Parse a TIFF payload into its IFD0, Exif and GPS directories.

    Returns:
        TiffStructure, or None if the TIFF header is invalid
    """
    return TiffStructureParser(payload, config, diagnostics).parse()
