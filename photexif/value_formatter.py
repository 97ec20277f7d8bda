# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF value formatter

Turns coded EXIF values into human-readable descriptions, formats EXIF
version fields and exposure times, and converts EXIF date strings to
ISO 8601.

Copyright 2025 DNAi inc.
"""

import re
from datetime import datetime
from fractions import Fraction
from typing import Any, Dict, Optional

ORIENTATION = {
    1: 'Horizontal (normal)',
    2: 'Mirror horizontal',
    3: 'Rotate 180',
    4: 'Mirror vertical',
    5: 'Mirror horizontal and rotate 270 CW',
    6: 'Rotate 90 CW',
    7: 'Mirror horizontal and rotate 90 CW',
    8: 'Rotate 270 CW',
}

EXPOSURE_PROGRAM = {
    0: 'Not Defined',
    1: 'Manual',
    2: 'Program AE',
    3: 'Aperture-priority AE',
    4: 'Shutter speed priority AE',
    5: 'Creative (Slow speed)',
    6: 'Action (High speed)',
    7: 'Portrait',
    8: 'Landscape',
}

METERING_MODE = {
    0: 'Unknown',
    1: 'Average',
    2: 'Center-weighted average',
    3: 'Spot',
    4: 'Multi-spot',
    5: 'Multi-segment',
    6: 'Partial',
    255: 'Other',
}

LIGHT_SOURCE = {
    0: 'Unknown',
    1: 'Daylight',
    2: 'Fluorescent',
    3: 'Tungsten (Incandescent)',
    4: 'Flash',
    9: 'Fine Weather',
    10: 'Cloudy',
    11: 'Shade',
    12: 'Daylight Fluorescent',
    13: 'Day White Fluorescent',
    14: 'Cool White Fluorescent',
    15: 'White Fluorescent',
    16: 'Warm White Fluorescent',
    17: 'Standard Light A',
    18: 'Standard Light B',
    19: 'Standard Light C',
    20: 'D55',
    21: 'D65',
    22: 'D75',
    23: 'D50',
    24: 'ISO Studio Tungsten',
    255: 'Other',
}

EXPOSURE_MODE = {0: 'Auto', 1: 'Manual', 2: 'Auto bracket'}
WHITE_BALANCE = {0: 'Auto', 1: 'Manual'}
SCENE_CAPTURE_TYPE = {0: 'Standard', 1: 'Landscape', 2: 'Portrait', 3: 'Night'}
CONTRAST = {0: 'Normal', 1: 'Soft', 2: 'High'}
SATURATION = {0: 'Normal', 1: 'Low', 2: 'High'}
SHARPNESS = {0: 'Normal', 1: 'Soft', 2: 'Hard'}

COLOR_SPACE = {1: 'sRGB', 2: 'Adobe RGB', 65535: 'Uncalibrated'}
RESOLUTION_UNIT = {1: 'None', 2: 'inches', 3: 'cm'}

COMPRESSION = {
    1: 'Uncompressed',
    2: 'CCITT 1D',
    3: 'T4/Group 3 Fax',
    4: 'T6/Group 4 Fax',
    5: 'LZW',
    6: 'JPEG (old-style)',
    7: 'JPEG',
    8: 'Adobe Deflate',
    32773: 'PackBits',
    32946: 'Deflate',
    34892: 'Lossy JPEG',
}

PHOTOMETRIC_INTERPRETATION = {
    0: 'WhiteIsZero',
    1: 'BlackIsZero',
    2: 'RGB',
    3: 'RGB Palette',
    4: 'Transparency Mask',
    5: 'CMYK',
    6: 'YCbCr',
    8: 'CIELab',
    9: 'ICCLab',
    10: 'ITULab',
    32803: 'Color Filter Array',
    34892: 'Linear Raw',
}

YCBCR_POSITIONING = {1: 'Centered', 2: 'Co-sited'}
GPS_ALTITUDE_REF = {0: 'Above sea level', 1: 'Below sea level'}

# Tag name -> code table
VALUE_DESCRIPTIONS: Dict[str, Dict[int, str]] = {
    'Orientation': ORIENTATION,
    'ExposureProgram': EXPOSURE_PROGRAM,
    'MeteringMode': METERING_MODE,
    'LightSource': LIGHT_SOURCE,
    'ExposureMode': EXPOSURE_MODE,
    'WhiteBalance': WHITE_BALANCE,
    'SceneCaptureType': SCENE_CAPTURE_TYPE,
    'Contrast': CONTRAST,
    'Saturation': SATURATION,
    'Sharpness': SHARPNESS,
    'ColorSpace': COLOR_SPACE,
    'ResolutionUnit': RESOLUTION_UNIT,
    'Compression': COMPRESSION,
    'PhotometricInterpretation': PHOTOMETRIC_INTERPRETATION,
    'YCbCrPositioning': YCBCR_POSITIONING,
    'GPSAltitudeRef': GPS_ALTITUDE_REF,
}

_EXIF_DATETIME = re.compile(
    r'^(\d{4}):(\d{2}):(\d{2})[ T](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?$'
)
_EXIF_DATE = re.compile(r'^(\d{4}):(\d{2}):(\d{2})$')


def describe_value(tag_name: str, value: Any) -> Optional[str]:
    """
    Describe a coded EXIF value.

    Args:
        tag_name: Tag name (e.g. "Orientation", "Flash")
        value: Decoded tag value

    Returns:
        Human-readable description, or None if the tag has no code table
        or the value is not a known integer code
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if tag_name == 'Flash':
        return describe_flash(value)
    table = VALUE_DESCRIPTIONS.get(tag_name)
    if table is None:
        return None
    return table.get(value)


def describe_flash(value: int) -> str:
    """Decode the Flash bit field."""
    if value == 0:
        return 'No Flash'
    # Only the "no flash function" bit set
    if value == 0x20:
        return 'No flash function'

    fired = bool(value & 0x01)
    return_type = (value >> 1) & 0x03
    red_eye = bool(value & 0x40)

    if not fired:
        return 'Off, Did not fire'
    parts = ['On, Fired']
    if return_type == 2:
        parts.append('Return not detected')
    elif return_type == 3:
        parts.append('Return detected')
    if red_eye:
        parts.append('Red-eye reduction')
    return ' | '.join(parts)


def exposure_time_fraction(exposure_time: Any) -> Optional[str]:
    """
    Format an exposure time below one second as a fraction ("1/250").

    Returns None for non-numeric values and for exposures of 1 s or more.
    """
    if isinstance(exposure_time, bool) or not isinstance(exposure_time, (int, float)):
        return None
    if exposure_time <= 0 or exposure_time >= 1:
        return None
    fraction = Fraction(exposure_time).limit_denominator(100000)
    if fraction.numerator == 1:
        return f"1/{fraction.denominator}"
    return f"1/{round(1 / exposure_time)}"


def format_version(value: Any) -> Any:
    """
    Render an EXIF version field (4 ASCII digit bytes) as a string.

    ``[48, 50, 51, 50]`` becomes ``"0232"``. Other values are returned
    unchanged.
    """
    if isinstance(value, list) and value and all(
        isinstance(b, int) and 0x20 <= b <= 0x7E for b in value
    ):
        return bytes(value).decode('ascii')
    return value


def parse_exif_datetime(date_str: Any) -> Optional[datetime]:
    """
    Parse an EXIF date string ("YYYY:MM:DD HH:MM:SS", optional subseconds).

    Returns:
        datetime object or None if parsing fails
    """
    if not date_str or not isinstance(date_str, str):
        return None
    date_str = date_str.strip()

    match = _EXIF_DATETIME.match(date_str)
    if match:
        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        subsec = match.group(7)
        microsecond = int(subsec[:6].ljust(6, '0')) if subsec else 0
        try:
            return datetime(year, month, day, hour, minute, second, microsecond)
        except ValueError:
            return None

    match = _EXIF_DATE.match(date_str)
    if match:
        try:
            return datetime(*(int(g) for g in match.groups()))
        except ValueError:
            return None

    return None


def exif_datetime_to_iso(date_str: Any) -> Optional[str]:
    """Convert an EXIF date string to ISO 8601, None if it does not parse."""
    parsed = parse_exif_datetime(date_str)
    if parsed is None:
        return None
    return parsed.isoformat()
