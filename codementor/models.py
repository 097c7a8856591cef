"""
Data models for the streaming code review pipeline.

Pydantic models shared by the composer, the incremental parser and the API.
Wire-facing field names are camelCase so the JSON matches the stream format.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class DetectedLanguage(str, Enum):
    """Closed set of languages the classifier can report."""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    JAVA = "java"
    CPP = "cpp"
    CSHARP = "csharp"
    PLAINTEXT = "plaintext"

    @property
    def label(self) -> str:
        return _LANGUAGE_LABELS[self]

    @property
    def comment_prefix(self) -> str:
        return "#" if self in (DetectedLanguage.PYTHON, DetectedLanguage.PLAINTEXT) else "//"

    @property
    def extension(self) -> str:
        return _LANGUAGE_EXTENSIONS[self]


_LANGUAGE_LABELS = {
    DetectedLanguage.PYTHON: "Python",
    DetectedLanguage.JAVASCRIPT: "JavaScript",
    DetectedLanguage.JAVA: "Java",
    DetectedLanguage.CPP: "C++",
    DetectedLanguage.CSHARP: "C#",
    DetectedLanguage.PLAINTEXT: "PLAINTEXT",
}

_LANGUAGE_EXTENSIONS = {
    DetectedLanguage.PYTHON: "py",
    DetectedLanguage.JAVASCRIPT: "js",
    DetectedLanguage.JAVA: "java",
    DetectedLanguage.CPP: "cpp",
    DetectedLanguage.CSHARP: "cs",
    DetectedLanguage.PLAINTEXT: "txt",
}


class ComplexityClass(str, Enum):
    """Coarse Big-O buckets, declared in ascending order."""

    CONSTANT = "O(1)"
    LOGARITHMIC = "O(log n)"
    LINEAR = "O(n)"
    LINEARITHMIC = "O(n log n)"
    QUADRATIC = "O(n^2)"
    CUBIC = "O(n^3)"
    EXPONENTIAL = "O(2^n)"

    @property
    def rank(self) -> int:
        return list(ComplexityClass).index(self)


class AnalysisRequest(BaseModel):
    """Immutable input to one analysis run."""

    model_config = ConfigDict(frozen=True)

    sourceText: str = Field(description="Source code to review")


class ReviewOptions(BaseModel):
    """Composer configuration."""

    model_config = ConfigDict(frozen=True)

    profile: str = Field(default="full", description="Profile name: full or minimal")
    languageOverride: Optional[DetectedLanguage] = Field(
        default=None, description="Skip classification and use this language"
    )


class Metrics(BaseModel):
    """
    Machine-readable metrics block.

    Field order is the serialization order of the metrics fragment.
    """

    score: int = Field(ge=0, le=100, description="Health score of the original code")
    timeBefore: str = Field(description="Time complexity before rewriting")
    timeAfter: str = Field(description="Time complexity after rewriting")
    spaceBefore: str = Field(description="Space complexity before rewriting")
    spaceAfter: str = Field(description="Space complexity after rewriting")


class CodeBlock(BaseModel):
    """A closed fenced code block found in the report."""

    languageTag: str = Field(default="", description="Fence tag, empty when absent")
    code: str


class ParsedReport(BaseModel):
    """Structured view recomputed from the stream buffer."""

    cleanMarkdown: str = ""
    metrics: Optional[Metrics] = None
    codeBlocks: list[CodeBlock] = Field(default_factory=list)

    @computed_field
    @property
    def optimizedCode(self) -> Optional[str]:
        """Code of the last closed block, if any."""
        if not self.codeBlocks:
            return None
        return self.codeBlocks[-1].code

    @computed_field
    @property
    def complete(self) -> bool:
        return self.metrics is not None


class RewriteResult(BaseModel):
    """Outcome of running the rewrite rule table."""

    optimizedCode: str
    improved: bool = False
    rule: Optional[str] = Field(default=None, description="Name of the rule that fired")
    timeAfter: Optional[ComplexityClass] = Field(
        default=None, description="Time class forced by the rule"
    )
    spaceAfter: Optional[ComplexityClass] = Field(
        default=None, description="Space class forced by the rule"
    )


class ReviewRecord(BaseModel):
    """A completed review, persisted per owner."""

    id: str
    timestamp: int = Field(description="Milliseconds since the epoch")
    owner: str
    code: str
    language: DetectedLanguage
    profile: str
    result: str = Field(description="Full streamed report text")
