import numpy as np
import pytest

from fractal_bmp.complex_value import ComplexValue


def _as_complex(value):
    return complex(float(value.real), float(value.imag))


def test_components_are_numpy_scalars():
    value = ComplexValue(1, 2.5)
    assert isinstance(value.real, np.float64)
    assert isinstance(value.imag, np.float64)


def test_of_respects_dtype():
    value = ComplexValue.of(1.5, -2.0, np.float32)
    assert value.real.dtype == np.float32
    assert (value * value).real.dtype == np.float32


def test_addition():
    assert ComplexValue(8.5, 5.25) + ComplexValue(-4.0, 0.25) == ComplexValue(4.5, 5.5)


def test_subtraction():
    assert ComplexValue(120.5, 10.0) - ComplexValue(-110.0, 4.0) == ComplexValue(230.5, 6.0)


def test_multiplication():
    result = ComplexValue(120.4, 10.0) * ComplexValue(-110.0, 4.0)
    assert result.real == pytest.approx(-13284.0)
    assert result.imag == pytest.approx(-618.4)


def test_multiplication_rule():
    # (1 + 2i)(3 + 4i) = -5 + 10i
    assert ComplexValue(1, 2).multiply(ComplexValue(3, 4)) == ComplexValue(-5, 10)


def test_division():
    # (-5 + 10i) / (3 + 4i) = 1 + 2i
    assert ComplexValue(-5, 10) / ComplexValue(3, 4) == ComplexValue(1, 2)


def test_division_matches_builtin_complex():
    a, b = ComplexValue(0.3, -1.7), ComplexValue(2.25, 0.5)
    assert _as_complex(a / b) == pytest.approx(_as_complex(a) / _as_complex(b))


def test_division_by_zero_is_not_finite():
    # The conjugate products vanish too, so both components become nan.
    result = ComplexValue(1.0, 1.0) / ComplexValue(0.0, 0.0)
    assert not np.isfinite(result.imag)
    assert np.isnan(result.real)


def test_zero_over_zero_is_nan():
    result = ComplexValue(0.0, 0.0) / ComplexValue(0.0, 0.0)
    assert np.isnan(result.real) and np.isnan(result.imag)


def test_magnitude_squared():
    assert ComplexValue(3, -4).magnitude_squared() == 25.0


def test_values_are_immutable():
    value = ComplexValue(1, 2)
    with pytest.raises(AttributeError):
        value.real = 3
