"""
Heuristic rewrite rules.

A short ordered table of ``(language, structural signal)`` gated rules. At
most one rule fires; when none does, the code comes back untouched with
advisory comments appended.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from .models import ComplexityClass, DetectedLanguage, RewriteResult
from .profiles import FULL, Profile
from .templates import (
    DUPLICATE_USERS_CODE,
    GENERIC_SUGGESTION,
    MAX_SUBARRAY_CODE,
    RANGE_LEN_SUGGESTION,
    build_comment,
)

logger = logging.getLogger(__name__)


ACCUMULATOR_PATTERN = re.compile(r"\b(max_sum|current_sum|max_so_far)\b")
DEBUG_CALL = "console.log("
QUOTES = "\"'`"
_MARKER = "\x00"


@dataclass(frozen=True)
class RewriteRule:
    name: str
    language: DetectedLanguage
    min_time: ComplexityClass
    applies: Callable[[str], bool]
    transform: Callable[[str], str]
    time_after: Optional[ComplexityClass] = None
    space_after: Optional[ComplexityClass] = None

    def matches(
        self,
        code: str,
        language: DetectedLanguage,
        original_time: ComplexityClass,
    ) -> bool:
        return (
            language is self.language
            and original_time.rank >= self.min_time.rank
            and self.applies(code)
        )


def _call_end(text: str, start: int) -> Optional[int]:
    """
    Index just past the parenthesis closing a call opened before ``start``.

    Parentheses inside quoted or template literals are not counted.
    """
    depth = 1
    quote = None
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 1
            elif char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return None


def strip_debug_prints(code: str) -> str:
    """
    Remove every ``console.log(...)`` call and its trailing semicolon.

    Lines left empty by the removal are dropped; lines that were already
    blank are kept.
    """
    pieces = []
    pos = 0
    while True:
        start = code.find(DEBUG_CALL, pos)
        if start == -1:
            break
        end = _call_end(code, start + len(DEBUG_CALL))
        if end is None:
            break
        semicolon = re.match(r"[ \t]*;", code[end:])
        if semicolon:
            end += semicolon.end()
        pieces.append(code[pos:start])
        pieces.append(_MARKER)
        pos = end
    pieces.append(code[pos:])
    marked = "".join(pieces)

    lines = []
    for line in marked.split("\n"):
        if _MARKER not in line:
            lines.append(line)
            continue
        cleaned = line.replace(_MARKER, "").rstrip()
        if cleaned.strip():
            lines.append(cleaned)
    return "\n".join(lines)


REWRITE_RULES: tuple[RewriteRule, ...] = (
    RewriteRule(
        name="duplicate-usernames",
        language=DetectedLanguage.PYTHON,
        min_time=ComplexityClass.CUBIC,
        applies=lambda code: "username" in code,
        transform=lambda code: DUPLICATE_USERS_CODE,
        # The canonical version still mentions ``for`` four times
        time_after=ComplexityClass.LINEAR,
        space_after=ComplexityClass.LINEAR,
    ),
    RewriteRule(
        name="max-subarray-scan",
        language=DetectedLanguage.PYTHON,
        min_time=ComplexityClass.QUADRATIC,
        applies=lambda code: ACCUMULATOR_PATTERN.search(code) is not None,
        transform=lambda code: MAX_SUBARRAY_CODE,
    ),
    RewriteRule(
        name="strip-debug-prints",
        language=DetectedLanguage.JAVASCRIPT,
        min_time=ComplexityClass.CONSTANT,
        applies=lambda code: DEBUG_CALL in code,
        transform=strip_debug_prints,
    ),
)


def rules_for(profile: Profile) -> list[RewriteRule]:
    """Rules enabled by the profile, in table order."""
    return [rule for rule in REWRITE_RULES if rule.name in profile.rewrite_rules]


def rewrite(
    code: str,
    language: DetectedLanguage,
    original_time: ComplexityClass,
    profile: Profile = FULL,
) -> RewriteResult:
    """
    Run the rule table against ``code``.

    Args:
        code: Original source
        language: Detected (or overridden) language
        original_time: Time class estimated for the original source
        profile: Profile selecting the enabled rules and comment style

    Returns:
        RewriteResult with ``improved`` set when a rule fired
    """
    for rule in rules_for(profile):
        if not rule.matches(code, language, original_time):
            continue
        optimized = rule.transform(code)
        if optimized == code:
            continue
        logger.debug("Rewrite rule %s fired", rule.name)
        return RewriteResult(
            optimizedCode=optimized,
            improved=True,
            rule=rule.name,
            timeAfter=rule.time_after,
            spaceAfter=rule.space_after,
        )

    prefix = language.comment_prefix if profile.language_comments else "#"
    optimized = code
    if language is DetectedLanguage.PYTHON and "range(len(" in code:
        optimized += build_comment(RANGE_LEN_SUGGESTION, prefix)
    optimized += build_comment(GENERIC_SUGGESTION, prefix)
    return RewriteResult(optimizedCode=optimized)
