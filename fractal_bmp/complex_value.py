"""A minimal complex number over a single numpy floating-point precision."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

Real = Union[float, int, np.floating]


def _coerce(value: Real) -> np.floating:
    if isinstance(value, np.floating):
        return value
    return np.float64(value)


@dataclass(frozen=True)
class ComplexValue:
    """Immutable ``real + imag*i`` value.

    Components are numpy floating scalars so that division by a zero divisor
    follows IEEE semantics (inf/nan) instead of raising.
    """

    real: np.floating
    imag: np.floating

    def __post_init__(self) -> None:
        object.__setattr__(self, "real", _coerce(self.real))
        object.__setattr__(self, "imag", _coerce(self.imag))

    @classmethod
    def of(cls, real: Real, imag: Real = 0.0, dtype: type = np.float64) -> ComplexValue:
        """Build a value whose components are both of ``dtype``."""

        return cls(dtype(real), dtype(imag))

    @property
    def dtype(self) -> np.dtype:
        return self.real.dtype

    def add(self, other: ComplexValue) -> ComplexValue:
        return ComplexValue(self.real + other.real, self.imag + other.imag)

    def subtract(self, other: ComplexValue) -> ComplexValue:
        return ComplexValue(self.real - other.real, self.imag - other.imag)

    def multiply(self, other: ComplexValue) -> ComplexValue:
        return ComplexValue(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    def divide(self, other: ComplexValue) -> ComplexValue:
        """Multiply by the conjugate of ``other`` over its squared magnitude.

        A zero divisor produces non-finite components.
        """

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            divisor = other.magnitude_squared()
            return ComplexValue(
                (self.real * other.real + self.imag * other.imag) / divisor,
                (self.imag * other.real - self.real * other.imag) / divisor,
            )

    def magnitude_squared(self) -> np.floating:
        return self.real * self.real + self.imag * self.imag

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply
    __truediv__ = divide

    def __repr__(self) -> str:
        return f"ComplexValue({float(self.real)!r}, {float(self.imag)!r})"
