"""
Loop-count complexity heuristics.

Counts ``for``/``while`` tokens rather than nesting depth, so two sequential
loops score the same as two nested ones.
"""

from __future__ import annotations

import re

from .models import ComplexityClass
from .profiles import Profile


LOOP_PATTERN = re.compile(r"\b(for|while)\b")
COLLECTION_PATTERN = re.compile(r"(\[\]|\{|\bset\(|\bdict\()")

MAX_SCORE = 100


def count_loops(code: str) -> int:
    return len(LOOP_PATTERN.findall(code))


def count_lines(code: str) -> int:
    return len(code.splitlines())


def time_class_for(loop_count: int, profile: Profile) -> ComplexityClass:
    if loop_count <= 0:
        return ComplexityClass.CONSTANT
    if loop_count == 1:
        return ComplexityClass.LINEAR
    if loop_count == 2:
        return ComplexityClass.QUADRATIC
    return profile.deep_loop_class


def estimate_time(code: str, profile: Profile) -> ComplexityClass:
    return time_class_for(count_loops(code), profile)


def estimate_space(code: str) -> ComplexityClass:
    """O(n) when any list/dict/set literal or constructor shows up."""
    if COLLECTION_PATTERN.search(code):
        return ComplexityClass.LINEAR
    return ComplexityClass.CONSTANT


def loop_penalty(loop_count: int, profile: Profile) -> int:
    if loop_count <= 0:
        return 0
    single, double, deep = profile.loop_penalties
    if loop_count == 1:
        return single
    if loop_count == 2:
        return double
    return deep


def health_score(
    loop_count: int,
    profile: Profile,
    oversized: bool = False,
    time_before: ComplexityClass | None = None,
    time_after: ComplexityClass | None = None,
) -> int:
    """
    Score the original code, clamped to [0, 100].

    Args:
        loop_count: Loop keywords in the original code
        profile: Active profile (penalty table and bonus)
        oversized: Whether the code-size warning fired
        time_before: Time class of the original code
        time_after: Time class after rewriting

    Returns:
        Integer health score
    """
    score = MAX_SCORE - loop_penalty(loop_count, profile)
    if oversized:
        score -= profile.size_penalty
    if (
        profile.improvement_bonus
        and time_before is not None
        and time_after is not None
        and time_after.rank < time_before.rank
    ):
        score += profile.improvement_bonus
    return max(0, min(MAX_SCORE, score))
