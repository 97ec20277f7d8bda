import struct

from conftest import make_png
from photexif.file_info import extract_basic_file_info, read_header_dimensions
from photexif.format_detector import ContainerFormat


def test_png_dimensions():
    info = extract_basic_file_info(make_png(1024, 768), ContainerFormat.PNG, 'a.png')
    assert (info.width, info.height) == (1024, 768)
    assert info.mime_type == 'image/png'
    assert info.filename == 'a.png'


def test_gif_dimensions():
    data = b'GIF89a' + struct.pack('<HH', 320, 200) + b'\x00' * 3
    assert read_header_dimensions(data, ContainerFormat.GIF) == (320, 200)


def test_bmp_top_down_height_is_positive():
    data = b'BM' + b'\x00' * 16 + struct.pack('<ii', 100, -50) + b'\x00' * 28
    assert read_header_dimensions(data, ContainerFormat.BMP) == (100, 50)


def test_webp_vp8x_dimensions():
    chunk = b'\x00\x00\x00\x00' + (1919).to_bytes(3, 'little') + (1079).to_bytes(3, 'little')
    data = b'RIFF' + struct.pack('<I', 4 + 8 + len(chunk)) + b'WEBP'
    data += b'VP8X' + struct.pack('<I', len(chunk)) + chunk
    assert read_header_dimensions(data, ContainerFormat.WEBP) == (1920, 1080)


def test_webp_vp8l_dimensions():
    bits = (640 - 1) | ((480 - 1) << 14)
    chunk = b'\x2f' + struct.pack('<I', bits)
    data = b'RIFF' + struct.pack('<I', 0) + b'WEBP' + b'VP8L' + struct.pack('<I', len(chunk)) + chunk
    assert read_header_dimensions(data, ContainerFormat.WEBP) == (640, 480)


def test_webp_vp8_dimensions():
    chunk = b'\x00\x00\x00' + b'\x9d\x01\x2a' + struct.pack('<HH', 800, 600)
    data = b'RIFF' + struct.pack('<I', 0) + b'WEBP' + b'VP8 ' + struct.pack('<I', len(chunk)) + chunk
    assert read_header_dimensions(data, ContainerFormat.WEBP) == (800, 600)


def test_truncated_headers_give_no_dimensions():
    assert read_header_dimensions(b'\x89PNG\r\n\x1a\n', ContainerFormat.PNG) == (None, None)
    assert read_header_dimensions(b'GIF89a', ContainerFormat.GIF) == (None, None)
    assert read_header_dimensions(b'RIFF\x00\x00\x00\x00WEBP', ContainerFormat.WEBP) == (None, None)


def test_formats_without_header_dimensions():
    info = extract_basic_file_info(b'\xff\xd8\xff\xd9', ContainerFormat.JPEG)
    assert info.width is None and info.height is None
    assert info.to_dict() == {
        'file_size': 4,
        'format': 'JPEG',
        'mime_type': 'image/jpeg',
        'filename': None,
        'width': None,
        'height': None,
    }
