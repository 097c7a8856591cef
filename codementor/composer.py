"""
Stream composer.

Turns one analysis request into the ordered fragments of a review:
header, language line, warnings, optional edge-case checklist, the
optimized code block and finally the metrics block.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterator, Optional

from .classifier import classify
from .complexity import (
    count_lines,
    count_loops,
    estimate_space,
    estimate_time,
    health_score,
    time_class_for,
)
from .models import AnalysisRequest, DetectedLanguage, Metrics, ReviewOptions
from .profiles import Profile, get_profile
from .rewriter import rewrite
from .templates import (
    CLOSING_FENCE,
    DEEP_LOOPS_WARNING,
    EDGE_CASES,
    HEADER,
    OPTIMIZED_HEADER,
    TWO_LOOPS_WARNING,
    build_language_line,
    build_metrics_block,
    build_opening_fence,
    build_size_warning,
)

logger = logging.getLogger(__name__)


def fence_tag(language: DetectedLanguage, profile: Profile) -> str:
    if profile.fence_uses_language:
        return language.value
    return "python" if language is DetectedLanguage.PYTHON else "plaintext"


def is_oversized(line_count: int, profile: Profile) -> bool:
    return profile.check_code_size and line_count > profile.max_lines


def collect_warnings(line_count: int, loop_count: int, profile: Profile) -> list[str]:
    warnings = []
    if is_oversized(line_count, profile):
        warnings.append(build_size_warning(line_count, profile.max_lines))
    if loop_count == 2:
        warnings.append(TWO_LOOPS_WARNING)
    elif loop_count >= 3:
        warnings.append(DEEP_LOOPS_WARNING)
    return warnings


def generate(
    request: AnalysisRequest,
    options: Optional[ReviewOptions] = None,
) -> Iterator[str]:
    """
    Produce the review fragments for ``request`` lazily.

    The profile is resolved before the first fragment so an unknown
    profile name fails immediately.

    Raises:
        ValueError: If ``options.profile`` is not a known profile
    """
    options = options or ReviewOptions()
    profile = get_profile(options.profile)
    return _fragments(request.sourceText, options.languageOverride, profile)


def _fragments(
    code: str,
    language_override: Optional[DetectedLanguage],
    profile: Profile,
) -> Iterator[str]:
    yield HEADER

    language = language_override or classify(code)
    yield build_language_line(language)

    loop_count = count_loops(code)
    time_before = time_class_for(loop_count, profile)
    space_before = estimate_space(code)

    line_count = count_lines(code)
    for warning in collect_warnings(line_count, loop_count, profile):
        yield warning + "\n"

    if profile.include_edge_cases:
        yield EDGE_CASES

    yield OPTIMIZED_HEADER
    yield build_opening_fence(fence_tag(language, profile))

    result = rewrite(code, language, time_before, profile)
    yield result.optimizedCode
    yield CLOSING_FENCE

    time_after = result.timeAfter or estimate_time(result.optimizedCode, profile)
    space_after = result.spaceAfter or estimate_space(result.optimizedCode)
    metrics = Metrics(
        score=health_score(
            loop_count,
            profile,
            oversized=is_oversized(line_count, profile),
            time_before=time_before,
            time_after=time_after,
        ),
        timeBefore=time_before.value,
        timeAfter=time_after.value,
        spaceBefore=space_before.value,
        spaceAfter=space_after.value,
    )
    logger.debug(
        "Composed %s review (%s, rule=%s, score=%d)",
        profile.name,
        language.value,
        result.rule,
        metrics.score,
    )
    yield build_metrics_block(metrics)


async def stream(
    request: AnalysisRequest,
    options: Optional[ReviewOptions] = None,
) -> AsyncIterator[str]:
    """Async form of :func:`generate`; yields to the event loop between fragments."""
    for fragment in generate(request, options):
        yield fragment
        await asyncio.sleep(0)
