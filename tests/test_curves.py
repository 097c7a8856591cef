"""Tests for the complexity curve renderer."""

from __future__ import annotations

import pytest

from codementor.curves import CurveShape, classify_curve, curve_points, normalize_label, svg_path


@pytest.mark.parametrize(
    ("label", "shape"),
    [
        ("O(1)", CurveShape.CONSTANT),
        ("O(log n)", CurveShape.LOGARITHMIC),
        ("O(n)", CurveShape.LINEAR),
        ("O(n log n)", CurveShape.LINEARITHMIC),
        ("O(n^2)", CurveShape.QUADRATIC),
        ("O(n²)", CurveShape.QUADRATIC),
        ("O(n*n)", CurveShape.QUADRATIC),
        ("O(n^3)", CurveShape.EXPONENTIAL),
        ("O(2^n)", CurveShape.EXPONENTIAL),
        ("O(2ⁿ)", CurveShape.EXPONENTIAL),
        ("O(n!)", CurveShape.EXPONENTIAL),
        ("O(?)", CurveShape.LINEAR),
        ("", CurveShape.LINEAR),
    ],
)
def test_classify_curve(label: str, shape: CurveShape) -> None:
    assert classify_curve(label) is shape


def test_normalize_label() -> None:
    assert normalize_label(" O(N Log N) ") == "o(nlogn)"
    assert normalize_label("O(n³)") == "o(n^3)"


def test_fifty_one_points_over_grid() -> None:
    points = curve_points("O(n)")

    assert len(points) == 51
    assert points[0][0] == 0
    assert points[-1][0] == 100
    assert all(0 <= y <= 100 for _, y in points)


def test_constant_is_flat() -> None:
    assert {y for _, y in curve_points("O(1)")} == {90}


def test_linear_midpoint() -> None:
    points = dict(curve_points("O(?)"))
    assert points[50.0] == pytest.approx(70)


def test_quadratic_reaches_top() -> None:
    points = curve_points("O(n^2)")
    assert points[0] == (0.0, 100.0)
    assert points[-1] == (100.0, 0.0)


def test_exponential_is_clamped() -> None:
    assert curve_points("O(2^n)")[-1][1] == 0


def test_heights_never_decrease() -> None:
    for label in ("O(log n)", "O(n)", "O(n log n)", "O(n^2)", "O(2^n)"):
        ys = [y for _, y in curve_points(label)]
        assert ys == sorted(ys, reverse=True), label


def test_svg_path() -> None:
    path = svg_path("O(1)")
    assert path.startswith("M 0,90 L 2,90")
    assert path.endswith("L 100,90")
    assert path.count(" L ") == 50
