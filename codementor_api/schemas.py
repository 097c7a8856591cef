"""
Pydantic models for the codementor API.
"""
from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from codementor.dashboard import Dashboard
from codementor.markdown import MarkdownNode
from codementor.models import DetectedLanguage, ParsedReport, ReviewOptions, ReviewRecord
from codementor.profiles import PROFILES

from .config import settings


OWNER_PATTERN = re.compile(r"^[\w.@-]{1,64}$")


def _language_or_auto(value: str) -> str:
    value = (value or "").strip().lower()
    allowed = {language.value for language in DetectedLanguage}
    return value if value in allowed else "auto"


def _language_override(value: str) -> Optional[DetectedLanguage]:
    return None if value == "auto" else DetectedLanguage(value)


class ReviewRequest(BaseModel):
    """Request payload for a review run."""
    code: str = Field(..., min_length=1, description="Source code to review")
    profile: Optional[str] = Field(default=None, description="full or minimal; server default when omitted")
    language: str = Field(default="auto", description="Language override (auto for detection)")
    owner: Optional[str] = Field(default=None, description="History owner; the review is stored when set")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Code cannot be empty or whitespace only")
        if len(v) > settings.MAX_CODE_LENGTH:
            raise ValueError(f"Code exceeds {settings.MAX_CODE_LENGTH} characters")
        return v

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().lower()
        if v not in PROFILES:
            raise ValueError(f"Unknown profile: {v}")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        return _language_or_auto(v)

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not OWNER_PATTERN.match(v):
            raise ValueError("Owner must be 1-64 characters of letters, digits, '.', '@', '_' or '-'")
        return v

    def to_options(self) -> ReviewOptions:
        return ReviewOptions(
            profile=self.profile or settings.REVIEW_PROFILE,
            languageOverride=_language_override(self.language),
        )


class ReviewResponse(BaseModel):
    """Completed review."""
    success: bool = True
    buffer: str
    report: ParsedReport
    dashboard: Optional[Dashboard] = None
    record: Optional[ReviewRecord] = None


class ParseRequest(BaseModel):
    """A possibly partial stream buffer."""
    buffer: str = Field(default="", description="Concatenated fragments received so far")


class ParseResponse(BaseModel):
    success: bool = True
    report: ParsedReport
    nodes: list[MarkdownNode] = Field(default_factory=list)


class DownloadRequest(BaseModel):
    buffer: str = Field(..., description="Review text containing the optimized code block")
    language: str = Field(default="auto", description="Language used for the file extension")

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        return _language_or_auto(v)

    def resolve_language(self, fence_tag: str) -> DetectedLanguage:
        """Explicit language, else the fence tag when it names one, else plaintext."""
        explicit = _language_override(self.language)
        if explicit:
            return explicit
        tag = _language_or_auto(fence_tag)
        return _language_override(tag) or DetectedLanguage.PLAINTEXT


class CurveResponse(BaseModel):
    label: str
    shape: str
    points: list[tuple[float, float]]
    path: str


class HistoryResponse(BaseModel):
    success: bool = True
    owner: str
    records: list[ReviewRecord] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    error: str
    code: Optional[str] = None
