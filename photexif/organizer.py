# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Metadata organizer

Merges the IFD0, Exif and GPS directories of a parsed TIFF structure and
sorts the tags into semantic groups (camera, image, settings, datetime,
location, technical, other), adding human-readable descriptions and the
derived values callers usually want: camera description, decimal GPS
coordinates, final pixel dimensions, aspect ratio and megapixels.

Keys inside every group are snake_case forms of the EXIF tag names
(``FNumber`` -> ``f_number``). Interpretations of coded values are stored
beside them with a ``_desc`` suffix.

Copyright 2025 DNAi inc.
"""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from photexif.diagnostics import Diagnostic
from photexif.file_info import FileInfo
from photexif.tag_decoder import ByteOrder
from photexif.tiff_structure import TiffStructure
from photexif.value_formatter import (
    describe_value,
    exif_datetime_to_iso,
    exposure_time_fraction,
    format_version,
)

CAMERA_TAGS = (
    'Make', 'Model', 'Software', 'Artist', 'Copyright', 'LensMake', 'LensModel',
    'CameraOwnerName', 'BodySerialNumber', 'LensSerialNumber', 'LensSpecification',
)

IMAGE_TAGS = (
    'ImageWidth', 'ImageLength', 'PixelXDimension', 'PixelYDimension', 'Orientation',
)

SETTINGS_TAGS = (
    'ExposureTime', 'FNumber', 'ISOSpeedRatings', 'FocalLength', 'Flash',
    'MeteringMode', 'WhiteBalance', 'ExposureProgram', 'ShutterSpeedValue',
    'ApertureValue', 'ExposureBiasValue', 'LightSource', 'FocalLengthIn35mmFilm',
    'ExposureMode', 'SceneCaptureType', 'Contrast', 'Saturation', 'Sharpness',
    'DigitalZoomRatio',
)

DATETIME_TAGS = (
    'DateTime', 'DateTimeOriginal', 'DateTimeDigitized',
    'OffsetTime', 'OffsetTimeOriginal', 'OffsetTimeDigitized',
    'SubSecTime', 'SubSecTimeOriginal', 'SubSecTimeDigitized',
)

TECHNICAL_TAGS = (
    'XResolution', 'YResolution', 'ResolutionUnit', 'Compression', 'ColorSpace',
    'BitsPerSample', 'PhotometricInterpretation', 'SamplesPerPixel',
    'YCbCrPositioning',
)

VERSION_TAGS = frozenset({'ExifVersion', 'FlashpixVersion', 'InteroperabilityVersion'})
POINTER_TAGS = frozenset({'ExifIFDPointer', 'GPSInfoIFDPointer', 'InteroperabilityIFDPointer'})

_SNAKE_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])')


def snake_case(tag_name: str) -> str:
    """
    Convert an EXIF tag name to a snake_case key.

    ``ISOSpeedRatings`` -> ``iso_speed_ratings``; unnamed tags keep their
    hex id whole (``Tag0x00AB`` -> ``tag0x00ab``, ``GPSTag0x00AB`` ->
    ``gps_tag0x00ab``).
    """
    prefix, marker, tag_id = tag_name.partition('Tag0x')
    if marker and all(c in '0123456789ABCDEFabcdef' for c in tag_id):
        lead = f"{snake_case(prefix)}_" if prefix else ''
        return f"{lead}tag0x{tag_id.lower()}"
    return _SNAKE_BOUNDARY.sub('_', tag_name).lower()


@dataclass(frozen=True)
class OrganizedMetadata:
    """
    Grouped, human-oriented view of the metadata of one file.

    Group mappings are read-only. ``to_dict()`` gives a plain nested
    dictionary for serialisation.
    """
    has_exif: bool
    file_info: FileInfo
    camera: Mapping[str, Any]
    image: Mapping[str, Any]
    settings: Mapping[str, Any]
    datetime: Mapping[str, Any]
    location: Mapping[str, Any]
    technical: Mapping[str, Any]
    other: Mapping[str, Any]
    final_width: Optional[int] = None
    final_height: Optional[int] = None
    aspect_ratio: Optional[str] = None
    megapixels: Optional[float] = None
    byte_order: Optional[ByteOrder] = None
    diagnostics: Tuple[Diagnostic, ...] = ()

    GROUPS = ('camera', 'image', 'settings', 'datetime', 'location', 'technical', 'other')

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'has_exif': self.has_exif,
            'file_info': self.file_info.to_dict(),
        }
        for group in self.GROUPS:
            result[group] = _plain(getattr(self, group))
        result.update({
            'final_width': self.final_width,
            'final_height': self.final_height,
            'aspect_ratio': self.aspect_ratio,
            'megapixels': self.megapixels,
            'byte_order': self.byte_order.marker.decode('ascii') if self.byte_order else None,
            'diagnostics': [d.to_dict() for d in self.diagnostics],
        })
        return result


def organize(
    tiff_structure: Optional[TiffStructure],
    file_info: FileInfo,
    diagnostics: Iterable[Diagnostic] = (),
) -> OrganizedMetadata:
    """
    Organize a parsed TIFF structure into semantic groups.

    Args:
        tiff_structure: Parsed structure, or None when no EXIF was found
        file_info: File-level facts of the buffer
        diagnostics: Diagnostics collected by the earlier stages

    Returns:
        OrganizedMetadata. With no structure only file_info and the
        diagnostics are populated.
    """
    diagnostics = tuple(diagnostics)
    if tiff_structure is None:
        return minimal_metadata(file_info, diagnostics)

    tags = merge_tags(tiff_structure)

    camera = _camera_group(tags)
    image = _image_group(tags)
    settings = _settings_group(tags)
    datetime_group = _datetime_group(tags)
    location = _location_group(tags)
    technical = _pick(tags, TECHNICAL_TAGS, describe=True)

    claimed = set(CAMERA_TAGS + IMAGE_TAGS + SETTINGS_TAGS + DATETIME_TAGS + TECHNICAL_TAGS)
    other = {
        snake_case(name): format_version(value) if name in VERSION_TAGS else value
        for name, value in tags.items()
        if name not in claimed and not _is_gps_tag(name)
    }

    width = _positive(tags.get('PixelXDimension')) or _positive(tags.get('ImageWidth'))
    height = _positive(tags.get('PixelYDimension')) or _positive(tags.get('ImageLength'))

    return OrganizedMetadata(
        has_exif=not tiff_structure.is_empty(),
        file_info=file_info,
        camera=MappingProxyType(camera),
        image=MappingProxyType(image),
        settings=MappingProxyType(settings),
        datetime=MappingProxyType(datetime_group),
        location=MappingProxyType(location),
        technical=MappingProxyType(technical),
        other=MappingProxyType(other),
        final_width=width,
        final_height=height,
        aspect_ratio=aspect_ratio(width, height),
        megapixels=megapixels(width, height),
        byte_order=tiff_structure.byte_order,
        diagnostics=diagnostics,
    )


def minimal_metadata(file_info: FileInfo, diagnostics: Iterable[Diagnostic] = ()) -> OrganizedMetadata:
    """OrganizedMetadata for a file without usable EXIF."""
    empty: Mapping[str, Any] = MappingProxyType({})
    return OrganizedMetadata(
        has_exif=False,
        file_info=file_info,
        camera=empty,
        image=empty,
        settings=empty,
        datetime=empty,
        location=empty,
        technical=empty,
        other=empty,
        diagnostics=tuple(diagnostics),
    )


def merge_tags(tiff_structure: TiffStructure) -> Dict[str, Any]:
    """Merge the directories by tag name; IFD0 wins over Exif, Exif over GPS."""
    merged: Dict[str, Any] = {}
    for ifd in tiff_structure.ifds():
        for name, value in ifd.by_name.items():
            if name not in merged:
                merged[name] = list(value) if isinstance(value, list) else value
    return merged


def dms_to_decimal(dms: Any, ref: Any = None) -> Optional[float]:
    """
    Convert GPS degrees/minutes/seconds to signed decimal degrees.

    Args:
        dms: Sequence of at least three numbers
        ref: Reference letter; 'S' and 'W' give a negative result, anything
             else (including a missing reference) a positive one

    Returns:
        Decimal degrees, or None if ``dms`` is not a usable triple
    """
    if not isinstance(dms, (list, tuple)) or len(dms) < 3:
        return None
    degrees, minutes, seconds = dms[:3]
    if not all(_is_number(v) for v in (degrees, minutes, seconds)):
        return None
    decimal = degrees + minutes / 60 + seconds / 3600
    if isinstance(ref, str) and ref.strip().upper() in ('S', 'W'):
        decimal = -decimal
    return decimal


def aspect_ratio(width: Optional[int], height: Optional[int]) -> Optional[str]:
    """``"W:H"`` reduced by the greatest common divisor."""
    if not width or not height or width <= 0 or height <= 0:
        return None
    divisor = math.gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def megapixels(width: Optional[int], height: Optional[int]) -> Optional[float]:
    if not width or not height or width <= 0 or height <= 0:
        return None
    # Tenths of a megapixel, halves rounded up
    return (width * height + 50_000) // 100_000 / 10


def _camera_group(tags: Dict[str, Any]) -> Dict[str, Any]:
    group = _pick(tags, CAMERA_TAGS)

    make = _text(group.get('make'))
    model = _text(group.get('model'))
    if make and model:
        group['description'] = f"{make} {model}"
    elif model:
        group['description'] = model

    lens_make = _text(group.get('lens_make'))
    lens_model = _text(group.get('lens_model'))
    if lens_make and lens_model:
        group['lens_description'] = f"{lens_make} {lens_model}"
    elif lens_model:
        group['lens_description'] = lens_model

    return group


def _image_group(tags: Dict[str, Any]) -> Dict[str, Any]:
    return _pick(tags, IMAGE_TAGS, describe=True)


def _settings_group(tags: Dict[str, Any]) -> Dict[str, Any]:
    group = _pick(tags, SETTINGS_TAGS, describe=True)
    fraction = exposure_time_fraction(group.get('exposure_time'))
    if fraction:
        group['exposure_time_fraction'] = fraction

    aperture = group.get('aperture_value')
    shutter = group.get('shutter_speed_value')
    if _is_number(aperture) and _is_number(shutter):
        # APEX: Av - Tv
        group['exposure_value'] = aperture - shutter
    return group


def _datetime_group(tags: Dict[str, Any]) -> Dict[str, Any]:
    group = _pick(tags, DATETIME_TAGS)
    primary = (
        _text(group.get('date_time_original'))
        or _text(group.get('date_time_digitized'))
        or _text(group.get('date_time'))
    )
    if primary:
        group['primary'] = primary
        iso = exif_datetime_to_iso(primary)
        if iso:
            group['primary_iso'] = iso
    return group


def _location_group(tags: Dict[str, Any]) -> Dict[str, Any]:
    group = {snake_case(name): value for name, value in tags.items() if _is_gps_tag(name)}

    latitude = dms_to_decimal(tags.get('GPSLatitude'), tags.get('GPSLatitudeRef'))
    longitude = dms_to_decimal(tags.get('GPSLongitude'), tags.get('GPSLongitudeRef'))
    if latitude is not None:
        group['latitude'] = latitude
    if longitude is not None:
        group['longitude'] = longitude

    altitude = tags.get('GPSAltitude')
    altitude_ref = tags.get('GPSAltitudeRef')
    if _is_number(altitude):
        group['altitude'] = -altitude if altitude_ref == 1 else altitude
    description = describe_value('GPSAltitudeRef', altitude_ref)
    if description:
        group['altitude_ref_desc'] = description

    has_location = latitude is not None and longitude is not None
    if has_location:
        group['coordinates'] = f"{latitude}, {longitude}"
    group['has_location'] = has_location
    return group


def _pick(tags: Dict[str, Any], names: Sequence[str], describe: bool = False) -> Dict[str, Any]:
    group: Dict[str, Any] = {}
    for name in names:
        if name not in tags:
            continue
        key = snake_case(name)
        value = tags[name]
        group[key] = value
        if describe:
            description = describe_value(name, value)
            if description is not None:
                group[f"{key}_desc"] = description
    return group


def _plain(group: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: list(value) if isinstance(value, list) else value for key, value in group.items()}


def _is_gps_tag(name: str) -> bool:
    return name.startswith('GPS') and name not in POINTER_TAGS


def _positive(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
