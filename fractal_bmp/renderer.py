"""Rendering a fractal over a rectangle of the complex plane into a bitmap."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from os import PathLike
from typing import Union

import numpy as np

from .bitmap import PixelPosition, PositionToColor, array_colorer, encode_array, encode_bitmap, write_bitmap
from .colors import Color, map_color, map_colors
from .complex_value import ComplexValue
from .errors import ConfigurationError
from .fractals import Fractal, classify, classify_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of a fractal."""

    width: int
    height: int
    real_range: tuple[float, float]
    imag_range: tuple[float, float]
    fractal: Fractal

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}.")
        for name in ("real_range", "imag_range"):
            value = tuple(getattr(self, name))
            if len(value) != 2:
                raise ConfigurationError(f"{name} must be a (start, end) pair, got {value!r}.")
            if not all(np.isfinite(v) for v in value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}.")
            object.__setattr__(self, name, (float(value[0]), float(value[1])))
        if not isinstance(self.fractal, Fractal):
            raise ConfigurationError(f"fractal must be a Fractal, got {self.fractal!r}.")


@dataclass(frozen=True)
class RenderResult:
    """Per-pixel classification values and their colors, row 0 first."""

    values: np.ndarray
    colors: np.ndarray


def pixel_to_complex(params: RenderParameters, row: int, col: int) -> ComplexValue:
    """Linearly interpolate pixel ``(row, col)`` onto the requested rectangle."""

    dtype = params.fractal.dtype
    r0, r1 = (dtype(v) for v in params.real_range)
    i0, i1 = (dtype(v) for v in params.imag_range)
    real = r0 + (dtype(col) / dtype(params.width)) * (r1 - r0)
    imag = i0 + (dtype(row) / dtype(params.height)) * (i1 - i0)
    return ComplexValue(real, imag)


def _sample_axes(params: RenderParameters) -> tuple[np.ndarray, np.ndarray]:
    dtype = params.fractal.dtype
    r0, r1 = (dtype(v) for v in params.real_range)
    i0, i1 = (dtype(v) for v in params.imag_range)
    cols = np.arange(params.width, dtype=dtype) / dtype(params.width)
    rows = np.arange(params.height, dtype=dtype) / dtype(params.height)
    return r0 + cols * (r1 - r0), i0 + rows * (i1 - i0)


def pixel_colorer(params: RenderParameters) -> PositionToColor:
    """Return the per-pixel pipeline: coordinates, classification, color."""

    fractal = params.fractal

    def position_to_color(position: PixelPosition) -> Color:
        point = pixel_to_complex(params, position.row, position.column)
        return map_color(classify(point, fractal))

    return position_to_color


def render_frame(params: RenderParameters) -> RenderResult:
    """Classify and color every pixel of the frame in one vectorized pass."""

    real, imag = _sample_axes(params)
    grid_real, grid_imag = np.meshgrid(real, imag)
    values = classify_grid(grid_real, grid_imag, params.fractal)
    return RenderResult(values=values, colors=map_colors(values, params.fractal))


def render_bitmap(params: RenderParameters, *, per_pixel: bool = False) -> bytes:
    """Render ``params`` into the bytes of a complete bitmap file."""

    start = time.perf_counter()
    if per_pixel:
        data = encode_bitmap(params.width, params.height, pixel_colorer(params))
    else:
        data = encode_array(render_frame(params).colors)
    logger.debug(
        "Rendered %dx%d %s in %.3f seconds",
        params.width,
        params.height,
        type(params.fractal.spec).__name__,
        time.perf_counter() - start,
    )
    return data


def render_to_file(params: RenderParameters, path: Union[str, PathLike], *, per_pixel: bool = False) -> int:
    """Render straight into the file at ``path``; returns the bytes written.

    With ``per_pixel`` the header is written before any pixel has been
    computed, so a failure part way through leaves a truncated file. The
    buffered path classifies the whole frame before the file is opened.
    """

    if per_pixel:
        position_to_color = pixel_colorer(params)
    else:
        position_to_color = array_colorer(render_frame(params).colors)
    with open(path, "wb") as sink:
        written = write_bitmap(sink, params.width, params.height, position_to_color)
    logger.debug("Wrote %d bytes to %s", written, path)
    return written
