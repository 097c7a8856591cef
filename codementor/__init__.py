"""Streaming heuristic code review engine."""

from .analyzer import CodeReviewer, ReviewOutcome, ReviewUpdate
from .classifier import classify
from .composer import generate, stream
from .curves import curve_points, svg_path
from .dashboard import Dashboard, build_dashboard
from .history import HistoryStoreError, MemoryHistoryStore, RedisHistoryStore
from .markdown import render_html, render_markdown
from .models import (
    AnalysisRequest,
    CodeBlock,
    ComplexityClass,
    DetectedLanguage,
    Metrics,
    ParsedReport,
    ReviewOptions,
    ReviewRecord,
)
from .profiles import FULL, MINIMAL, Profile, get_profile
from .report_parser import parse_report
from .rewriter import rewrite

__version__ = "1.0.0"

__all__ = [
    "AnalysisRequest",
    "CodeBlock",
    "CodeReviewer",
    "ComplexityClass",
    "Dashboard",
    "DetectedLanguage",
    "FULL",
    "HistoryStoreError",
    "MINIMAL",
    "MemoryHistoryStore",
    "Metrics",
    "ParsedReport",
    "Profile",
    "RedisHistoryStore",
    "ReviewOptions",
    "ReviewOutcome",
    "ReviewRecord",
    "ReviewUpdate",
    "build_dashboard",
    "classify",
    "curve_points",
    "generate",
    "get_profile",
    "parse_report",
    "render_html",
    "render_markdown",
    "rewrite",
    "stream",
    "svg_path",
]
