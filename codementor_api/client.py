"""
Streaming client for the codementor API.

Posts a source file to ``/api/v1/review/stream``, echoes fragments as they
arrive and re-parses the growing buffer after every chunk.

Usage:
    python -m codementor_api.client path/to/file.py --url http://localhost:8080
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, Optional

import httpx

from codementor.analyzer import ReviewOutcome
from codementor.dashboard import score_band
from codementor.models import ParsedReport
from codementor.report_parser import parse_report


STREAM_PATH = "/api/v1/review/stream"


async def consume_review(
    client: httpx.AsyncClient,
    code: str,
    profile: Optional[str] = None,
    language: str = "auto",
    owner: Optional[str] = None,
    on_update: Optional[Callable[[str, ParsedReport], None]] = None,
) -> ReviewOutcome:
    """
    Stream one review and return the final buffer and report.

    Args:
        client: HTTP client with the API base URL configured
        code: Source code to review
        profile: Review profile, server default when None
        language: Language override or "auto"
        owner: History owner
        on_update: Called with (chunk, report) after every chunk

    Raises:
        httpx.HTTPStatusError: If the API rejects the request
    """
    payload = {"code": code, "language": language}
    if profile:
        payload["profile"] = profile
    if owner:
        payload["owner"] = owner

    buffer = ""
    report = parse_report(buffer)
    async with client.stream("POST", STREAM_PATH, json=payload, timeout=30.0) as response:
        if response.is_error:
            await response.aread()
            response.raise_for_status()
        async for chunk in response.aiter_text():
            buffer += chunk
            report = parse_report(buffer)
            if on_update:
                on_update(chunk, report)

    return ReviewOutcome(buffer=buffer, report=report)


def print_summary(report: ParsedReport) -> None:
    print()
    print("=" * 60)
    if report.metrics is None:
        print("Stream ended before the metrics block")
        print("=" * 60)
        return
    metrics = report.metrics
    print(f"Health score:  {metrics.score} ({score_band(metrics.score)})")
    print(f"Time:          {metrics.timeBefore} -> {metrics.timeAfter}")
    print(f"Space:         {metrics.spaceBefore} -> {metrics.spaceAfter}")
    print(f"Code blocks:   {len(report.codeBlocks)}")
    print("=" * 60)


async def run(args: argparse.Namespace) -> int:
    code = Path(args.path).read_text(encoding="utf-8")

    def echo(chunk: str, report: ParsedReport) -> None:
        # Metrics JSON is summarized at the end instead of echoed
        if "<metrics>" not in chunk:
            sys.stdout.write(chunk)
            sys.stdout.flush()

    async with httpx.AsyncClient(base_url=args.url) as client:
        try:
            outcome = await consume_review(
                client,
                code,
                profile=args.profile,
                language=args.language,
                owner=args.owner,
                on_update=echo,
            )
        except httpx.HTTPStatusError as exc:
            print(f"\nReview rejected ({exc.response.status_code}): {exc.response.text}", file=sys.stderr)
            return 1
        except httpx.TransportError as exc:
            print(f"\nCould not reach {args.url}: {exc}", file=sys.stderr)
            return 1

    print_summary(outcome.report)

    if args.save and outcome.report.optimizedCode is not None:
        Path(args.save).write_text(outcome.report.optimizedCode, encoding="utf-8")
        print(f"Optimized code written to {args.save}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stream a code review from a codementor server")
    parser.add_argument("path", help="Source file to review")
    parser.add_argument("--url", default="http://localhost:8080", help="API base URL")
    parser.add_argument("--profile", choices=["full", "minimal"], default=None)
    parser.add_argument("--language", default="auto", help="Language override")
    parser.add_argument("--owner", default=None, help="Store the review under this owner")
    parser.add_argument("--save", default=None, help="Write the optimized code to this path")
    return parser


def main() -> int:
    return asyncio.run(run(build_parser().parse_args()))


if __name__ == "__main__":
    sys.exit(main())
