"""
Dashboard view model: the shapes the rendering layer needs from a report.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from .curves import curve_points
from .models import DetectedLanguage, ParsedReport


class CurvePair(BaseModel):
    before: str
    after: str
    beforePoints: list[tuple[float, float]]
    afterPoints: list[tuple[float, float]]

    @classmethod
    def from_labels(cls, before: str, after: str) -> "CurvePair":
        return cls(
            before=before,
            after=after,
            beforePoints=curve_points(before),
            afterPoints=curve_points(after),
        )


class Dashboard(BaseModel):
    score: int
    band: Literal["good", "fair", "poor"]
    time: CurvePair
    space: CurvePair
    optimizedCode: Optional[str] = None
    downloadName: str


def score_band(score: int) -> Literal["good", "fair", "poor"]:
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    return "poor"


def download_name(language: DetectedLanguage) -> str:
    return f"optimized_code.{language.extension}"


def build_dashboard(
    report: ParsedReport,
    language: DetectedLanguage = DetectedLanguage.PLAINTEXT,
) -> Optional[Dashboard]:
    """Dashboard for a report, or ``None`` until its metrics are complete."""
    metrics = report.metrics
    if metrics is None:
        return None
    return Dashboard(
        score=metrics.score,
        band=score_band(metrics.score),
        time=CurvePair.from_labels(metrics.timeBefore, metrics.timeAfter),
        space=CurvePair.from_labels(metrics.spaceBefore, metrics.spaceAfter),
        optimizedCode=report.optimizedCode,
        downloadName=download_name(language),
    )
