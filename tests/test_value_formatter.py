from datetime import datetime

import pytest

from photexif.value_formatter import (
    describe_flash,
    describe_value,
    exif_datetime_to_iso,
    exposure_time_fraction,
    format_version,
    parse_exif_datetime,
)


@pytest.mark.parametrize(
    "tag, value, expected",
    [
        ('Orientation', 1, 'Horizontal (normal)'),
        ('Orientation', 8, 'Rotate 270 CW'),
        ('ExposureProgram', 2, 'Program AE'),
        ('MeteringMode', 255, 'Other'),
        ('LightSource', 21, 'D65'),
        ('ColorSpace', 65535, 'Uncalibrated'),
        ('Compression', 6, 'JPEG (old-style)'),
        ('YCbCrPositioning', 2, 'Co-sited'),
        ('GPSAltitudeRef', 0, 'Above sea level'),
    ],
)
def test_describe_value(tag, value, expected):
    assert describe_value(tag, value) == expected


def test_describe_value_unknowns():
    assert describe_value('Orientation', 9) is None
    assert describe_value('Make', 1) is None
    assert describe_value('Orientation', '6') is None
    assert describe_value('Orientation', True) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 'No Flash'),
        (0x20, 'No flash function'),
        (0x10, 'Off, Did not fire'),
        (0x01, 'On, Fired'),
        (0x07, 'On, Fired | Return detected'),
        (0x45, 'On, Fired | Return not detected | Red-eye reduction'),
    ],
)
def test_describe_flash(value, expected):
    assert describe_flash(value) == expected
    assert describe_value('Flash', value) == expected


def test_exposure_time_fraction():
    assert exposure_time_fraction(1 / 250) == '1/250'
    assert exposure_time_fraction(0.5) == '1/2'
    assert exposure_time_fraction(0.3) == '1/3'
    assert exposure_time_fraction(2) is None
    assert exposure_time_fraction(0) is None
    assert exposure_time_fraction('fast') is None


def test_format_version():
    assert format_version([48, 50, 51, 50]) == '0232'
    assert format_version([2, 2, 0, 0]) == [2, 2, 0, 0]
    assert format_version(230) == 230


def test_parse_exif_datetime():
    assert parse_exif_datetime('2023:06:01 09:30:15') == datetime(2023, 6, 1, 9, 30, 15)
    assert parse_exif_datetime('2023:06:01 09:30:15.25') == datetime(2023, 6, 1, 9, 30, 15, 250000)
    assert parse_exif_datetime('2023:06:01') == datetime(2023, 6, 1)
    assert parse_exif_datetime('0000:00:00 00:00:00') is None
    assert parse_exif_datetime('yesterday') is None
    assert parse_exif_datetime(None) is None


def test_exif_datetime_to_iso():
    assert exif_datetime_to_iso('2023:06:01 09:30:15') == '2023-06-01T09:30:15'
    assert exif_datetime_to_iso('not a date') is None
