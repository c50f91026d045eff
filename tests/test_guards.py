from math import inf, nan

from learnmet.guards import clamp, clamp_non_negative, finite_or_zero, round_half_up, safe_divide


def test_safe_divide_zero_denominator_returns_default():
    assert safe_divide(5, 0) == 0.0
    assert safe_divide(5, None) == 0.0
    assert safe_divide(5, 0, default=-1.0) == -1.0


def test_safe_divide_non_finite_quotient_returns_default():
    assert safe_divide(inf, 2) == 0.0
    assert safe_divide(nan, 2) == 0.0
    assert safe_divide(1, inf) == 0.0


def test_safe_divide_regular_division():
    assert safe_divide(30, 120) == 0.25


def test_clamp_non_negative():
    assert clamp_non_negative(-3) == 0.0
    assert clamp_non_negative(2.5) == 2.5
    assert clamp_non_negative(nan) == 0.0


def test_clamp_bounds_and_non_finite():
    assert clamp(150, 0, 100) == 100
    assert clamp(-5, 0, 100) == 0
    assert clamp(nan, -1, 1) == -1
    assert clamp(None, 0, 1) == 0


def test_finite_or_zero():
    assert finite_or_zero(None) == 0.0
    assert finite_or_zero(inf) == 0.0
    assert finite_or_zero("12.5") == 12.5
    assert finite_or_zero("abc") == 0.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(12.25, 1) == 12.3
