"""
Best-effort markdown micro-renderer.

Not CommonMark: closed code fences are split out first, then every other
line is classified on its own (headings, list items, blank lines,
paragraphs with ``**bold**`` spans). Incomplete markup is left as text.
"""

from __future__ import annotations

import html
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field


FENCE_SPLIT_PATTERN = re.compile(r"(```\w*\n[\s\S]*?\n```)")
FENCE_PATTERN = re.compile(r"```(\w*)\n([\s\S]*?)\n```")
BOLD_SPLIT_PATTERN = re.compile(r"(\*\*.*?\*\*)")

HEADING_PREFIXES = (("### ", 3), ("## ", 2), ("# ", 1))
LIST_PREFIXES = ("- ", "* ")


class InlineSpan(BaseModel):
    text: str
    bold: bool = False


class MarkdownNode(BaseModel):
    """One presentational block."""

    kind: Literal["heading", "list_item", "line_break", "paragraph", "code_block"]
    level: Optional[int] = None
    spans: list[InlineSpan] = Field(default_factory=list)
    language: Optional[str] = None
    code: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


def parse_inline(line: str) -> list[InlineSpan]:
    """Split a line into plain and bold spans; unpaired markers stay literal."""
    spans = []
    for index, segment in enumerate(BOLD_SPLIT_PATTERN.split(line)):
        if not segment:
            continue
        if index % 2 == 1:
            spans.append(InlineSpan(text=segment[2:-2], bold=True))
        else:
            spans.append(InlineSpan(text=segment))
    return spans


def render_line(line: str) -> MarkdownNode:
    for prefix, level in HEADING_PREFIXES:
        if line.startswith(prefix):
            return MarkdownNode(
                kind="heading", level=level, spans=[InlineSpan(text=line[len(prefix):])]
            )
    if line.startswith(LIST_PREFIXES):
        return MarkdownNode(kind="list_item", spans=[InlineSpan(text=line[2:])])
    if line.strip() == "":
        return MarkdownNode(kind="line_break")
    return MarkdownNode(kind="paragraph", spans=parse_inline(line))


def render_markdown(markdown: str) -> list[MarkdownNode]:
    nodes = []
    for index, part in enumerate(FENCE_SPLIT_PATTERN.split(markdown)):
        if index % 2 == 1:
            match = FENCE_PATTERN.match(part)
            nodes.append(
                MarkdownNode(
                    kind="code_block",
                    language=match.group(1) or "code",
                    code=match.group(2),
                )
            )
            continue
        nodes.extend(render_line(line) for line in part.split("\n"))
    return nodes


def _render_spans(spans: list[InlineSpan]) -> str:
    return "".join(
        f"<strong>{html.escape(span.text)}</strong>" if span.bold else html.escape(span.text)
        for span in spans
    )


def render_html(nodes: list[MarkdownNode]) -> str:
    """Serialize nodes to escaped HTML fragments, one per line."""
    out = []
    for node in nodes:
        if node.kind == "heading":
            out.append(f"<h{node.level}>{_render_spans(node.spans)}</h{node.level}>")
        elif node.kind == "list_item":
            out.append(f"<li>{_render_spans(node.spans)}</li>")
        elif node.kind == "line_break":
            out.append("<br>")
        elif node.kind == "code_block":
            language = html.escape(node.language or "code", quote=True)
            out.append(
                f'<pre data-language="{language}"><code>{html.escape(node.code or "")}</code></pre>'
            )
        else:
            out.append(f"<p>{_render_spans(node.spans)}</p>")
    return "\n".join(out)
