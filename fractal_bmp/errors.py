"""Exceptions raised by the fractal rendering core."""


class FractalError(Exception):
    """Base class for errors raised by :mod:`fractal_bmp`."""


class ConfigurationError(FractalError, ValueError):
    """A render or fractal was configured with values the core cannot use."""


class BitmapFormatError(FractalError, ValueError):
    """A byte stream is not a bitmap this package knows how to read."""
