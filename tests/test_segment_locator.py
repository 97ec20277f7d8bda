import struct

from conftest import make_jpeg, make_png, make_tiff
from photexif.config import ExtractionConfig
from photexif.diagnostics import DiagnosticCode
from photexif.format_detector import ContainerFormat
from photexif.segment_locator import (
    find_jpeg_exif_segment,
    iter_tiff_candidates,
    locate_exif_payload,
    tiff_header_offsets,
)

TIFF = make_tiff([(0x010F, 2, 'Canon')])


def _segment(marker, body):
    return b'\xff' + bytes([marker]) + struct.pack('>H', len(body) + 2) + body


def test_jpeg_app1_payload(camera_jpeg, camera_tiff):
    assert locate_exif_payload(camera_jpeg, ContainerFormat.JPEG) == camera_tiff


def test_jpeg_without_exif():
    assert locate_exif_payload(make_jpeg(), ContainerFormat.JPEG) is None


def test_non_exif_app1_is_skipped():
    xmp = _segment(0xE1, b'http://ns.adobe.com/xap/1.0/\x00<x:xmpmeta/>')
    data = make_jpeg(TIFF, segments=[xmp])
    assert find_jpeg_exif_segment(data) == TIFF


def test_fill_bytes_before_marker():
    payload = b'Exif\x00\x00' + TIFF
    data = b'\xff\xd8\xff\xff\xff' + b'\xe1' + struct.pack('>H', len(payload) + 2) + payload
    assert find_jpeg_exif_segment(data) == TIFF


def test_standalone_markers_have_no_length():
    payload = b'Exif\x00\x00' + TIFF
    data = b'\xff\xd8\xff\xd0' + _segment(0xE1, payload)
    assert find_jpeg_exif_segment(data) == TIFF


def test_scan_stops_at_start_of_scan():
    data = b'\xff\xd8' + _segment(0xDA, b'\x00' * 6) + _segment(0xE1, b'Exif\x00\x00' + TIFF)
    assert find_jpeg_exif_segment(data) is None


def test_scan_stops_at_non_marker_byte():
    data = b'\xff\xd8\x00' + _segment(0xE1, b'Exif\x00\x00' + TIFF)
    assert find_jpeg_exif_segment(data) is None


def test_segment_length_below_two_is_malformed():
    data = b'\xff\xd8\xff\xe0\x00\x01' + _segment(0xE1, b'Exif\x00\x00' + TIFF)
    diagnostics = []

    assert find_jpeg_exif_segment(data, diagnostics=diagnostics) is None
    assert [d.code for d in diagnostics] == [DiagnosticCode.MALFORMED_SEGMENT]
    assert diagnostics[0].offset == 2


def test_app1_length_past_buffer_is_clipped():
    data = b'\xff\xd8\xff\xe1' + struct.pack('>H', 5000) + b'Exif\x00\x00' + TIFF
    assert find_jpeg_exif_segment(data) == TIFF


def test_app1_beyond_scan_limit_is_not_found():
    padding = _segment(0xE0, b'\x00' * 200)
    data = make_jpeg(TIFF, segments=[padding])

    assert locate_exif_payload(data, ContainerFormat.JPEG) == TIFF
    config = ExtractionConfig(jpeg_scan_limit=100)
    assert locate_exif_payload(data, ContainerFormat.JPEG, config) is None


def test_tiff_is_its_own_payload():
    assert locate_exif_payload(TIFF, ContainerFormat.TIFF) == TIFF


def test_heuristic_scan_finds_embedded_tiff():
    data = make_png(extra=b'\x00\x00\x00\x00eXIf' + TIFF)
    payload = locate_exif_payload(data, ContainerFormat.PNG)
    assert payload == TIFF


def test_heuristic_scan_is_bounded():
    data = make_png(extra=b'\x00' * 3000 + TIFF)
    assert locate_exif_payload(data, ContainerFormat.PNG) is None
    assert locate_exif_payload(data, ContainerFormat.PNG, ExtractionConfig(tiff_scan_limit=4096)) == TIFF


def test_candidates_in_order():
    big_endian = make_tiff([(0x010F, 2, 'Canon')], byte_order='>')
    data = b'junk' + b'II*\x00garbage' + big_endian
    offsets = list(tiff_header_offsets(data))

    assert offsets == [4, 15]
    candidates = list(iter_tiff_candidates(data))
    assert candidates[1] == big_endian
    # Candidates are views onto the input, not copies of it
    assert all(isinstance(candidate, memoryview) for candidate in candidates)
    assert all(candidate.obj is data for candidate in candidates)


def test_unknown_format_uses_heuristic():
    data = b'\x00' * 16 + TIFF
    assert locate_exif_payload(data, ContainerFormat.UNKNOWN) == TIFF
    assert locate_exif_payload(b'\x00' * 64, ContainerFormat.UNKNOWN) is None
