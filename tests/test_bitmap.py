import io
import struct

import numpy as np
import PIL.Image
import pytest

from fractal_bmp.bitmap import (
    HEADER_SIZE,
    PixelPosition,
    array_colorer,
    bitmap_size,
    encode_array,
    encode_bitmap,
    file_size,
    read_bitmap,
    row_padding,
    write_bitmap,
    write_header,
    write_pixels,
)
from fractal_bmp.colors import Color
from fractal_bmp.errors import BitmapFormatError


def _checker(position: PixelPosition) -> Color:
    return Color(position.column * 40 % 256, position.row * 30 % 256, (position.row + position.column) % 256)


def test_header_for_two_by_two():
    header = write_header(2, 2)
    assert len(header) == HEADER_SIZE == 54
    assert header == bytes.fromhex(
        '424d' '46000000' '00000000' '36000000'
        '28000000' '02000000' '02000000' '0100' '1800' '00000000'
        '10000000' '130b0000' '130b0000' '00000000' '00000000'
    )


@pytest.mark.parametrize('width, padding', [(1, 1), (2, 2), (3, 3), (4, 0), (5, 1), (400, 0)])
def test_row_padding(width, padding):
    assert row_padding(width) == padding


@pytest.mark.parametrize('width, height', [(1, 1), (2, 2), (3, 5), (4, 3), (17, 9)])
def test_sizes_are_consistent(width, height):
    data = encode_bitmap(width, height, _checker)
    assert len(data) == file_size(width, height) == 54 + height * (width * 3 + row_padding(width))
    size, = struct.unpack_from('<I', data, 2)
    data_size, = struct.unpack_from('<I', data, 34)
    assert size == len(data)
    assert data_size == bitmap_size(width, height)


def test_pixels_are_bgr_with_padding_per_row():
    colors = {
        (0, 0): Color(1, 2, 3),
        (0, 1): Color(4, 5, 6),
        (1, 0): Color(7, 8, 9),
        (1, 1): Color(10, 11, 12),
    }
    data = write_pixels(2, 2, lambda pos: colors[pos.row, pos.column])
    assert data == bytes([3, 2, 1, 6, 5, 4, 0, 0, 9, 8, 7, 12, 11, 10, 0, 0])


def test_positions_are_visited_row_major():
    visited = []

    def record(position):
        visited.append(tuple(position))
        return Color(0, 0, 0)

    write_pixels(3, 2, record)
    assert visited == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]


def test_streaming_writer_matches_encoder():
    sink = io.BytesIO()
    written = write_bitmap(sink, 5, 3, _checker)
    assert sink.getvalue() == encode_bitmap(5, 3, _checker)
    assert written == file_size(5, 3)


def test_array_encoder_matches_callback_encoder():
    rng = np.random.default_rng(7)
    colors = rng.integers(0, 256, size=(6, 5, 3), dtype=np.uint8)
    assert encode_array(colors) == encode_bitmap(5, 6, array_colorer(colors))


def test_array_encoder_rejects_bad_shapes():
    with pytest.raises(ValueError):
        encode_array(np.zeros((4, 4), dtype=np.uint8))


def test_round_trip_through_decoder():
    data = encode_bitmap(7, 3, _checker)
    decoded = read_bitmap(data)
    assert (decoded.width, decoded.height) == (7, 3)
    for row in range(3):
        for col in range(7):
            color = _checker(PixelPosition(row, col))
            assert tuple(decoded.pixels[row, col]) == (color.red, color.green, color.blue)


def test_pillow_reads_first_row_as_bottom_line():
    colors = np.array(
        [
            [[255, 0, 0], [0, 255, 0], [0, 0, 255]],
            [[10, 20, 30], [40, 50, 60], [70, 80, 90]],
        ],
        dtype=np.uint8,
    )
    with PIL.Image.open(io.BytesIO(encode_array(colors))) as image:
        assert image.size == (3, 2)
        pixels = np.array(image.convert('RGB'))
    np.testing.assert_array_equal(pixels, colors[::-1])


@pytest.mark.parametrize(
    'mutate',
    [
        lambda data: b'XX' + data[2:],
        lambda data: data[:40],
        lambda data: data[:-1],
        lambda data: data[:28] + struct.pack('<H', 32) + data[30:],
        lambda data: data[:30] + struct.pack('<I', 1) + data[34:],
        lambda data: data[:14] + struct.pack('<I', 12) + data[18:],
        lambda data: data[:18] + struct.pack('<i', 0) + data[22:],
    ],
)
def test_decoder_rejects_malformed_input(mutate):
    with pytest.raises(BitmapFormatError):
        read_bitmap(mutate(encode_bitmap(2, 2, _checker)))
