"""Fractal specifications and the point classification algorithms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np

from .complex_value import ComplexValue
from .errors import ConfigurationError

DEFAULT_MAX_ITERATIONS = 1000
ESCAPE_THRESHOLD = 4.0

PRECISIONS = {
    "double": np.float64,
    "single": np.float32,
}


@dataclass(frozen=True)
class Mandelbrot:
    """``z <- z*z + point`` starting from zero."""


@dataclass(frozen=True)
class Julia:
    """``z <- z*z + seed`` starting from the point itself."""

    seed: ComplexValue


@dataclass(frozen=True)
class Newton:
    """Newton's method on the monic polynomial with the given roots."""

    roots: tuple[ComplexValue, ...]

    def __init__(self, roots: Sequence[ComplexValue]) -> None:
        object.__setattr__(self, "roots", tuple(roots))


FractalSpec = Union[Mandelbrot, Julia, Newton]


@dataclass(frozen=True)
class EscapeResult:
    iterations_used: int
    max_iterations: int


@dataclass(frozen=True)
class RootResult:
    closest_index: int
    root_count: int


ClassificationResult = Union[EscapeResult, RootResult]


@dataclass(frozen=True)
class Fractal:
    """A fractal specification together with its iteration budget."""

    spec: FractalSpec
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    precision: str = "single"
    dtype: type = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.spec, (Mandelbrot, Julia, Newton)):
            raise ConfigurationError(f"Unknown fractal specification {self.spec!r}.")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, (int, np.integer)):
            raise ConfigurationError("max_iterations must be an integer.")
        if self.max_iterations <= 0:
            raise ConfigurationError(f"max_iterations must be positive, got {self.max_iterations}.")
        if isinstance(self.spec, Newton) and not self.spec.roots:
            raise ConfigurationError("A Newton fractal needs at least one root.")
        if self.precision not in PRECISIONS:
            raise ConfigurationError(
                f"Unknown precision '{self.precision}'. Valid choices: {', '.join(sorted(PRECISIONS))}."
            )
        object.__setattr__(self, "max_iterations", int(self.max_iterations))
        object.__setattr__(self, "dtype", PRECISIONS[self.precision])

    def cast(self, value: ComplexValue) -> ComplexValue:
        return ComplexValue.of(value.real, value.imag, self.dtype)


def classify(point: ComplexValue, fractal: Fractal) -> ClassificationResult:
    """Classify a single point of the complex plane."""

    point = fractal.cast(point)
    spec = fractal.spec
    if isinstance(spec, Mandelbrot):
        zero = ComplexValue.of(0.0, 0.0, fractal.dtype)
        return _escape_time(zero, point, fractal.max_iterations)
    if isinstance(spec, Julia):
        return _escape_time(point, fractal.cast(spec.seed), fractal.max_iterations)
    if isinstance(spec, Newton):
        roots = [fractal.cast(root) for root in spec.roots]
        return _newton(point, roots, fractal.max_iterations)
    raise ConfigurationError(f"Unknown fractal specification {spec!r}.")


def _escape_time(z: ComplexValue, addend: ComplexValue, max_iterations: int) -> EscapeResult:
    with np.errstate(all="ignore"):
        for i in range(1, max_iterations + 1):
            z = z * z + addend
            if z.magnitude_squared() > ESCAPE_THRESHOLD:
                return EscapeResult(i, max_iterations)
    return EscapeResult(max_iterations, max_iterations)


def _newton(z: ComplexValue, roots: list[ComplexValue], iterations: int) -> RootResult:
    one = ComplexValue.of(1.0, 0.0, z.dtype.type)

    # Fixed step count, no convergence test. The derivative sum starts at one.
    with np.errstate(all="ignore"):
        for _ in range(iterations):
            diffs = [z - root for root in roots]
            poly = one
            deriv = one
            for j, diff in enumerate(diffs):
                poly = _accumulate(poly, diff)
                partial = one
                for k, other in enumerate(diffs):
                    if k != j:
                        partial = _accumulate(partial, other)
                deriv = deriv + partial
            z = z - poly / deriv

        closest = 0
        smallest = (z - roots[0]).magnitude_squared()
        for j in range(1, len(roots)):
            distance = (z - roots[j]).magnitude_squared()
            if distance < smallest:
                smallest = distance
                closest = j
    return RootResult(closest, len(roots))


def _accumulate(acc: ComplexValue, factor: ComplexValue) -> ComplexValue:
    """Running product step whose imaginary part reuses the updated real part."""

    real = acc.real * factor.real - acc.imag * factor.imag
    return ComplexValue(real, real * factor.imag + acc.imag * factor.real)


def classify_grid(real: np.ndarray, imag: np.ndarray, fractal: Fractal) -> np.ndarray:
    """Classify every point of a grid at once.

    ``real`` and ``imag`` must broadcast to the same shape. Returns an integer
    array holding ``iterations_used`` for escape-time fractals and
    ``closest_index`` for Newton fractals, identical to calling
    :func:`classify` point by point.
    """

    dtype = fractal.dtype
    real, imag = np.broadcast_arrays(np.asarray(real, dtype=dtype), np.asarray(imag, dtype=dtype))
    spec = fractal.spec
    if isinstance(spec, Mandelbrot):
        zr = np.zeros(real.shape, dtype=dtype)
        zi = np.zeros(real.shape, dtype=dtype)
        return _escape_time_grid(zr, zi, real, imag, fractal.max_iterations)
    if isinstance(spec, Julia):
        seed = fractal.cast(spec.seed)
        return _escape_time_grid(real.copy(), imag.copy(), seed.real, seed.imag, fractal.max_iterations)
    if isinstance(spec, Newton):
        roots = [fractal.cast(root) for root in spec.roots]
        return _newton_grid(real.copy(), imag.copy(), roots, fractal.max_iterations)
    raise ConfigurationError(f"Unknown fractal specification {spec!r}.")


def _escape_time_grid(zr, zi, cr, ci, max_iterations: int) -> np.ndarray:
    counts = np.full(zr.shape, max_iterations, dtype=np.int64)
    active = np.ones(zr.shape, dtype=bool)

    with np.errstate(all="ignore"):
        for i in range(1, max_iterations + 1):
            if not active.any():
                break
            new_r = zr * zr - zi * zi + cr
            new_i = zr * zi + zi * zr + ci
            zr = np.where(active, new_r, zr)
            zi = np.where(active, new_i, zi)
            escaped = active & (zr * zr + zi * zi > ESCAPE_THRESHOLD)
            counts[escaped] = i
            active &= ~escaped
    return counts


def _accumulate_grid(ar, ai, br, bi):
    real = ar * br - ai * bi
    return real, real * bi + ai * br


def _newton_grid(zr, zi, roots: list[ComplexValue], iterations: int) -> np.ndarray:
    dtype = zr.dtype.type
    one, zero = dtype(1.0), dtype(0.0)

    with np.errstate(all="ignore"):
        for _ in range(iterations):
            diffs = [(zr - root.real, zi - root.imag) for root in roots]
            poly_r = np.full(zr.shape, one)
            poly_i = np.full(zr.shape, zero)
            deriv_r = np.full(zr.shape, one)
            deriv_i = np.full(zr.shape, zero)
            for j, (dr, di) in enumerate(diffs):
                poly_r, poly_i = _accumulate_grid(poly_r, poly_i, dr, di)
                part_r = np.full(zr.shape, one)
                part_i = np.full(zr.shape, zero)
                for k, (other_r, other_i) in enumerate(diffs):
                    if k != j:
                        part_r, part_i = _accumulate_grid(part_r, part_i, other_r, other_i)
                deriv_r = deriv_r + part_r
                deriv_i = deriv_i + part_i
            divisor = deriv_r * deriv_r + deriv_i * deriv_i
            step_r = (poly_r * deriv_r + poly_i * deriv_i) / divisor
            step_i = (poly_i * deriv_r - poly_r * deriv_i) / divisor
            zr = zr - step_r
            zi = zi - step_i

        closest = np.zeros(zr.shape, dtype=np.int64)
        smallest = _distance(zr, zi, roots[0])
        for j in range(1, len(roots)):
            distance = _distance(zr, zi, roots[j])
            closer = distance < smallest
            closest[closer] = j
            smallest = np.where(closer, distance, smallest)
    return closest


def _distance(zr, zi, root: ComplexValue):
    dr = zr - root.real
    di = zi - root.imag
    return dr * dr + di * di
