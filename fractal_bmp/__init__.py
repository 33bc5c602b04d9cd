"""Public API for fractal bitmap rendering."""

from .bitmap import (
    DecodedBitmap,
    PixelPosition,
    encode_array,
    encode_bitmap,
    read_bitmap,
    write_bitmap,
    write_header,
    write_pixels,
)
from .colors import Color, map_color, map_colors
from .complex_value import ComplexValue
from .errors import BitmapFormatError, ConfigurationError, FractalError
from .fractals import (
    DEFAULT_MAX_ITERATIONS,
    EscapeResult,
    Fractal,
    Julia,
    Mandelbrot,
    Newton,
    RootResult,
    classify,
    classify_grid,
)
from .renderer import (
    RenderParameters,
    RenderResult,
    pixel_colorer,
    pixel_to_complex,
    render_bitmap,
    render_frame,
    render_to_file,
)

__all__ = [
    "BitmapFormatError",
    "Color",
    "ComplexValue",
    "ConfigurationError",
    "DEFAULT_MAX_ITERATIONS",
    "DecodedBitmap",
    "EscapeResult",
    "Fractal",
    "FractalError",
    "Julia",
    "Mandelbrot",
    "Newton",
    "PixelPosition",
    "RenderParameters",
    "RenderResult",
    "RootResult",
    "classify",
    "classify_grid",
    "encode_array",
    "encode_bitmap",
    "map_color",
    "map_colors",
    "pixel_colorer",
    "pixel_to_complex",
    "read_bitmap",
    "render_bitmap",
    "render_frame",
    "render_to_file",
    "write_bitmap",
    "write_header",
    "write_pixels",
]
