"""
Review profiles.

A profile bundles every behaviour that differs between the full and the
minimal review engine: checklist, size warnings, scoring table, the class
assigned to deeply looped code, fence tags, comment style and rewrite rules.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .models import ComplexityClass


class Profile(BaseModel):
    """Data-driven switch for the stream composer."""

    model_config = ConfigDict(frozen=True)

    name: str
    include_edge_cases: bool = False
    check_code_size: bool = False
    max_lines: int = Field(default=50, ge=1)

    # Penalties for 1, 2 and 3+ loop keywords
    loop_penalties: tuple[int, int, int] = (10, 25, 40)
    size_penalty: int = 0
    improvement_bonus: int = 0

    deep_loop_class: ComplexityClass = ComplexityClass.CUBIC
    fence_uses_language: bool = False
    language_comments: bool = False
    rewrite_rules: tuple[str, ...] = ("duplicate-usernames",)


FULL = Profile(
    name="full",
    include_edge_cases=True,
    check_code_size=True,
    max_lines=50,
    loop_penalties=(15, 30, 50),
    size_penalty=10,
    improvement_bonus=10,
    deep_loop_class=ComplexityClass.EXPONENTIAL,
    fence_uses_language=True,
    language_comments=True,
    rewrite_rules=("duplicate-usernames", "max-subarray-scan", "strip-debug-prints"),
)

MINIMAL = Profile(name="minimal")

PROFILES: dict[str, Profile] = {
    FULL.name: FULL,
    MINIMAL.name: MINIMAL,
}


def get_profile(name: str) -> Profile:
    """
    Look up a profile by name.

    Raises:
        ValueError: If the name is not a known profile
    """
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown profile '{name}'. Expected one of: {', '.join(PROFILES)}"
        ) from None
