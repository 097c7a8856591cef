"""
Incremental report parser.

``parse_report`` is a pure function of the accumulated stream buffer. It is
called after every fragment, so it must accept any prefix of a review,
including the empty string and text cut off in the middle of the metrics
JSON.

The metrics section opens on a line holding only ``<metrics>``. Such lines
inside a fenced code block belong to the reviewed code and are skipped.
"""

from __future__ import annotations

import json
import re
from bisect import bisect_left
from typing import Optional

from pydantic import ValidationError

from .models import CodeBlock, Metrics, ParsedReport
from .templates import METRICS_CLOSE, METRICS_OPEN


METRICS_OPEN_PATTERN = re.compile(r"^<metrics>$", re.MULTILINE)
FENCE_LINE_PATTERN = re.compile(r"^```", re.MULTILINE)
CODE_BLOCK_PATTERN = re.compile(r"```(\w*)\n([\s\S]*?)\n```")


def find_metrics_open(buffer: str) -> int:
    """Offset of the last metrics opener outside a code fence, or -1."""
    fences = [match.start() for match in FENCE_LINE_PATTERN.finditer(buffer)]
    found = -1
    for match in METRICS_OPEN_PATTERN.finditer(buffer):
        # An odd number of fence lines before the opener means we are inside one
        if bisect_left(fences, match.start()) % 2 == 0:
            found = match.start()
    return found


def split_metrics(buffer: str) -> str:
    """Text before the metrics section, or the whole buffer if none yet."""
    index = find_metrics_open(buffer)
    if index == -1:
        return buffer
    return buffer[:index].rstrip()


def extract_metrics(buffer: str) -> Optional[Metrics]:
    """Metrics from the closed metrics section; ``None`` while incomplete."""
    index = find_metrics_open(buffer)
    if index == -1:
        return None
    start = index + len(METRICS_OPEN)
    end = buffer.find(METRICS_CLOSE, start)
    if end == -1:
        return None
    try:
        return Metrics.model_validate(json.loads(buffer[start:end]))
    except (ValueError, ValidationError, RecursionError):
        # Still streaming, not a metrics object, or nested too deep to decode
        return None


def extract_code_blocks(markdown: str) -> list[CodeBlock]:
    return [
        CodeBlock(languageTag=match.group(1), code=match.group(2))
        for match in CODE_BLOCK_PATTERN.finditer(markdown)
    ]


def parse_report(buffer: str) -> ParsedReport:
    clean = split_metrics(buffer)
    return ParsedReport(
        cleanMarkdown=clean,
        metrics=extract_metrics(buffer),
        codeBlocks=extract_code_blocks(clean),
    )
