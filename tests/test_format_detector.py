import pytest

from photexif.format_detector import ContainerFormat, FormatDetector, detect_format


@pytest.mark.parametrize(
    "data, expected",
    [
        (b'\xff\xd8\xff\xe0\x00\x10JFIF', ContainerFormat.JPEG),
        (b'\x89PNG\r\n\x1a\n', ContainerFormat.PNG),
        (b'GIF89a\x01\x00\x01\x00', ContainerFormat.GIF),
        (b'BM\x00\x00\x00\x00', ContainerFormat.BMP),
        (b'II*\x00\x08\x00\x00\x00', ContainerFormat.TIFF),
        (b'MM\x00*\x00\x00\x00\x08', ContainerFormat.TIFF),
        (b'RIFF\x24\x00\x00\x00WEBPVP8 ', ContainerFormat.WEBP),
        (b'\x00\x00\x00\x18ftypheic\x00\x00\x00\x00', ContainerFormat.HEIC),
        (b'\x00\x00\x00\x18ftypmif1\x00\x00\x00\x00', ContainerFormat.HEIC),
        (b'\x00\x00\x00\x1cftypavif\x00\x00\x00\x00', ContainerFormat.AVIF),
    ],
)
def test_detects_signatures(data, expected):
    assert FormatDetector.detect(data) == expected


def test_brand_comparison_ignores_case():
    assert detect_format(b'\x00\x00\x00\x18ftypHEIC\x00\x00\x00\x00') == ContainerFormat.HEIC
    assert detect_format(b'\x00\x00\x00\x18ftypAVIF\x00\x00\x00\x00') == ContainerFormat.AVIF


def test_unknown_ftyp_brand():
    assert detect_format(b'\x00\x00\x00\x18ftypisom\x00\x00\x00\x00') == ContainerFormat.UNKNOWN


@pytest.mark.parametrize("data", [b'', None, b'\xff', b'RIFF', b'hello world, not an image'])
def test_short_or_foreign_data_is_unknown(data):
    assert detect_format(data) == ContainerFormat.UNKNOWN


def test_riff_without_webp_is_unknown():
    assert detect_format(b'RIFF\x24\x00\x00\x00WAVEfmt ') == ContainerFormat.UNKNOWN


def test_accepts_bytearray_and_memoryview():
    assert detect_format(bytearray(b'\xff\xd8\xff')) == ContainerFormat.JPEG
    assert detect_format(memoryview(b'\x89PNG')) == ContainerFormat.PNG


def test_mime_types():
    assert FormatDetector.mime_type(ContainerFormat.JPEG) == 'image/jpeg'
    assert FormatDetector.mime_type(ContainerFormat.HEIC) == 'image/heic'
    assert FormatDetector.mime_type(ContainerFormat.UNKNOWN) is None
