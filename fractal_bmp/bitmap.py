"""Uncompressed 24-bit Windows bitmap encoding.

Layout: a 14 byte BITMAPFILEHEADER, a 40 byte BITMAPINFOHEADER, then one BGR
triple per pixel with every scanline zero-padded to a multiple of four bytes.
Scanlines are stored in whatever order the caller supplies them; BMP readers
display the first stored scanline at the bottom.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, NamedTuple

import numpy as np

from .colors import Color
from .errors import BitmapFormatError

FILE_HEADER_SIZE = 14
DIB_HEADER_SIZE = 40
HEADER_SIZE = FILE_HEADER_SIZE + DIB_HEADER_SIZE
BITS_PER_PIXEL = 24
BI_RGB = 0
# 2835 pixels per metre, about 72 DPI.
PRINT_RESOLUTION = 0x0B13

_FILE_HEADER = struct.Struct("<2sIHHI")
_DIB_HEADER = struct.Struct("<IiiHHIIiiII")


class PixelPosition(NamedTuple):
    row: int
    column: int


PositionToColor = Callable[[PixelPosition], Color]


def row_padding(width: int) -> int:
    return (4 - (width * 3) % 4) % 4


def bitmap_size(width: int, height: int) -> int:
    """Size of the pixel array including scanline padding."""

    return height * (width * 3 + row_padding(width))


def file_size(width: int, height: int) -> int:
    return HEADER_SIZE + bitmap_size(width, height)


def write_header(width: int, height: int) -> bytes:
    """Return the 54 header bytes for a ``width`` x ``height`` image."""

    file_header = _FILE_HEADER.pack(b"BM", file_size(width, height), 0, 0, HEADER_SIZE)
    dib_header = _DIB_HEADER.pack(
        DIB_HEADER_SIZE,
        width,
        height,
        1,
        BITS_PER_PIXEL,
        BI_RGB,
        bitmap_size(width, height),
        PRINT_RESOLUTION,
        PRINT_RESOLUTION,
        0,
        0,
    )
    return file_header + dib_header


def iter_rows(width: int, height: int, position_to_color: PositionToColor):
    """Yield the encoded bytes of each scanline, padding included."""

    padding = bytes(row_padding(width))
    for row in range(height):
        line = bytearray()
        for column in range(width):
            line += position_to_color(PixelPosition(row, column)).to_bgr()
        line += padding
        yield bytes(line)


def write_pixels(width: int, height: int, position_to_color: PositionToColor) -> bytes:
    """Encode every position in row-major order, outer loop over rows."""

    return b"".join(iter_rows(width, height, position_to_color))


def encode_bitmap(width: int, height: int, position_to_color: PositionToColor) -> bytes:
    return write_header(width, height) + write_pixels(width, height, position_to_color)


def write_bitmap(sink: BinaryIO, width: int, height: int, position_to_color: PositionToColor) -> int:
    """Stream a bitmap into ``sink`` one scanline at a time.

    Returns the number of bytes written. Errors raised by ``sink`` propagate
    and may leave a partial file behind.
    """

    written = sink.write(write_header(width, height))
    for line in iter_rows(width, height, position_to_color):
        written += sink.write(line)
    return written


def encode_array(colors: np.ndarray) -> bytes:
    """Encode an ``(height, width, 3)`` RGB array, row 0 written first."""

    colors = np.asarray(colors, dtype=np.uint8)
    if colors.ndim != 3 or colors.shape[2] != 3:
        raise ValueError(f"Expected an (height, width, 3) array, got shape {colors.shape}.")
    height, width, _ = colors.shape
    stride = width * 3 + row_padding(width)
    rows = np.zeros((height, stride), dtype=np.uint8)
    rows[:, : width * 3] = colors[..., ::-1].reshape(height, width * 3)
    return write_header(width, height) + rows.tobytes()


def array_colorer(colors: np.ndarray) -> PositionToColor:
    """Expose a precomputed RGB buffer as a position-to-color callback."""

    def position_to_color(position: PixelPosition) -> Color:
        red, green, blue = colors[position.row, position.column]
        return Color(int(red), int(green), int(blue))

    return position_to_color


@dataclass(frozen=True)
class DecodedBitmap:
    width: int
    height: int
    pixels: np.ndarray  # (height, width, 3) RGB in stored scanline order


def read_bitmap(data: bytes) -> DecodedBitmap:
    """Decode a 24-bit BI_RGB bitmap such as the ones :func:`encode_bitmap` writes."""

    if len(data) < HEADER_SIZE:
        raise BitmapFormatError(f"Bitmap is {len(data)} bytes, shorter than its {HEADER_SIZE} byte header.")
    magic, declared_size, _, _, offset = _FILE_HEADER.unpack_from(data, 0)
    if magic != b"BM":
        raise BitmapFormatError(f"Bad bitmap magic {magic!r}.")
    (
        dib_size,
        width,
        height,
        planes,
        bits_per_pixel,
        compression,
        _,
        _,
        _,
        _,
        _,
    ) = _DIB_HEADER.unpack_from(data, FILE_HEADER_SIZE)
    if dib_size != DIB_HEADER_SIZE:
        raise BitmapFormatError(f"Unsupported DIB header size {dib_size}.")
    if planes != 1 or bits_per_pixel != BITS_PER_PIXEL or compression != BI_RGB:
        raise BitmapFormatError(
            f"Only uncompressed 24-bit bitmaps are supported (planes={planes}, "
            f"bpp={bits_per_pixel}, compression={compression})."
        )
    if width <= 0 or height <= 0:
        raise BitmapFormatError(f"Unsupported bitmap dimensions {width}x{height}.")

    stride = width * 3 + row_padding(width)
    end = offset + stride * height
    if len(data) < end or declared_size < end:
        raise BitmapFormatError(f"Bitmap pixel data is truncated: need {end} bytes, have {len(data)}.")

    rows = np.frombuffer(data, dtype=np.uint8, count=stride * height, offset=offset).reshape(height, stride)
    pixels = rows[:, : width * 3].reshape(height, width, 3)[..., ::-1].copy()
    return DecodedBitmap(width=width, height=height, pixels=pixels)
