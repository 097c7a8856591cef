"""
Pattern-based language classifier.

Rules are evaluated in list order and the first match wins. The patterns
overlap (a Python file that mentions ``console.log`` in a string is still
Python), so the order is part of the contract.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .models import DetectedLanguage


@dataclass(frozen=True)
class LanguageRule:
    pattern: re.Pattern[str]
    language: DetectedLanguage

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


LANGUAGE_RULES: tuple[LanguageRule, ...] = (
    LanguageRule(re.compile(r"^\s*def\s+\w+\(", re.MULTILINE), DetectedLanguage.PYTHON),
    LanguageRule(re.compile(r"console\.log|function\s+\w+"), DetectedLanguage.JAVASCRIPT),
    LanguageRule(re.compile(r"System\.out\.println|public\s+class"), DetectedLanguage.JAVA),
    LanguageRule(re.compile(r"#include\s*<"), DetectedLanguage.CPP),
    LanguageRule(re.compile(r"using\s+System"), DetectedLanguage.CSHARP),
)


def classify(
    source_text: str,
    rules: tuple[LanguageRule, ...] = LANGUAGE_RULES,
) -> DetectedLanguage:
    """Return the language of the first matching rule, or plaintext."""
    rule = first_match(source_text, rules)
    return rule.language if rule else DetectedLanguage.PLAINTEXT


def first_match(
    source_text: str,
    rules: tuple[LanguageRule, ...] = LANGUAGE_RULES,
) -> Optional[LanguageRule]:
    for rule in rules:
        if rule.matches(source_text):
            return rule
    return None
