"""
Complexity curve renderer.

Maps a free-text Big-O label to sampled points on a 100x100 grid with the
vertical axis inverted for top-down plotting.
"""

from __future__ import annotations

import math
from enum import Enum


GRID_SIZE = 100
SAMPLE_STEP = 2

_SUPERSCRIPTS = str.maketrans({"²": "^2", "³": "^3", "ⁿ": "^n"})


class CurveShape(str, Enum):
    CONSTANT = "constant"
    LOGARITHMIC = "logarithmic"
    LINEAR = "linear"
    LINEARITHMIC = "linearithmic"
    QUADRATIC = "quadratic"
    EXPONENTIAL = "exponential"


def normalize_label(label: str) -> str:
    return "".join((label or "").lower().translate(_SUPERSCRIPTS).split())


def classify_curve(label: str) -> CurveShape:
    """Pick a shape by substring sniffing; linear when nothing matches."""
    text = normalize_label(label)
    if "1" in text and "n" not in text:
        return CurveShape.CONSTANT
    if "logn" in text and "nlogn" not in text:
        return CurveShape.LOGARITHMIC
    if "nlogn" in text:
        return CurveShape.LINEARITHMIC
    if "n^2" in text or "n*n" in text:
        return CurveShape.QUADRATIC
    if "n^3" in text or "2^n" in text or "!" in text:
        return CurveShape.EXPONENTIAL
    return CurveShape.LINEAR


def _height(shape: CurveShape, t: float) -> float:
    if shape is CurveShape.CONSTANT:
        return 10.0
    if shape is CurveShape.LOGARITHMIC:
        return 15 * math.log2(t + 1)
    if shape is CurveShape.LINEARITHMIC:
        return 2.5 * t * math.log2(t + 1)
    if shape is CurveShape.QUADRATIC:
        return t ** 2
    if shape is CurveShape.EXPONENTIAL:
        return 2 ** (t / 1.5)
    return 6 * t


def curve_points(label: str) -> list[tuple[float, float]]:
    shape = classify_curve(label)
    points = []
    for x in range(0, GRID_SIZE + 1, SAMPLE_STEP):
        y = min(_height(shape, x / 10), GRID_SIZE)
        points.append((float(x), round(GRID_SIZE - y, 4)))
    return points


def svg_path(label: str) -> str:
    """Points joined as an SVG path: ``M x,y L x,y ...``."""
    coords = [f"{x:g},{y:g}" for x, y in curve_points(label)]
    return "M " + " L ".join(coords)
