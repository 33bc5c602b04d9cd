"""Mapping from classification results to RGB colors."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .fractals import ClassificationResult, EscapeResult, Fractal, Newton, RootResult


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int

    def to_bgr(self) -> bytes:
        return bytes((self.blue, self.green, self.red))


ROOT_PALETTE = (
    Color(255, 0, 0),
    Color(0, 255, 0),
    Color(0, 0, 255),
    Color(0, 255, 255),
)
# Roots past the palette all share this color.
OVERFLOW_COLOR = Color(30, 30, 30)


def map_color(result: ClassificationResult) -> Color:
    """Grayscale for escape counts, palette entry for Newton roots."""

    if isinstance(result, EscapeResult):
        channel = result.iterations_used * 255 // result.max_iterations
        return Color(channel, channel, channel)
    if isinstance(result, RootResult):
        if 0 <= result.closest_index < len(ROOT_PALETTE):
            return ROOT_PALETTE[result.closest_index]
        return OVERFLOW_COLOR
    raise TypeError(f"Cannot map {result!r} to a color.")


_PALETTE_ARRAY = np.array(
    [(c.red, c.green, c.blue) for c in ROOT_PALETTE] + [(OVERFLOW_COLOR.red, OVERFLOW_COLOR.green, OVERFLOW_COLOR.blue)],
    dtype=np.uint8,
)


def map_escape_colors(iterations: np.ndarray, max_iterations: int) -> np.ndarray:
    """Array counterpart of :func:`map_color` for escape counts."""

    gray = (np.asarray(iterations, dtype=np.int64) * 255 // max_iterations).astype(np.uint8)
    return np.stack([gray, gray, gray], axis=-1)


def map_root_colors(closest: np.ndarray) -> np.ndarray:
    """Array counterpart of :func:`map_color` for Newton root indices."""

    closest = np.asarray(closest, dtype=np.int64)
    overflow = len(ROOT_PALETTE)
    index = np.where((closest >= 0) & (closest < overflow), closest, overflow)
    return _PALETTE_ARRAY[index]


def map_colors(values: np.ndarray, fractal: Fractal) -> np.ndarray:
    """Color a :func:`~fractal_bmp.fractals.classify_grid` result."""

    if isinstance(fractal.spec, Newton):
        return map_root_colors(values)
    return map_escape_colors(values, fractal.max_iterations)
