"""
Code reviewer.

Drives the stream composer the way an interactive caller does: accumulate
every fragment into one buffer, re-parse the buffer after each fragment and
persist the finished review.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from pydantic import BaseModel

from .classifier import classify
from .composer import stream
from .history import HistoryStore, make_record
from .models import AnalysisRequest, ParsedReport, ReviewOptions, ReviewRecord
from .profiles import get_profile
from .report_parser import parse_report

logger = logging.getLogger(__name__)


class ReviewUpdate(BaseModel):
    """State of a run after one more fragment arrived."""

    fragment: str
    buffer: str
    report: ParsedReport


class ReviewOutcome(BaseModel):
    buffer: str
    report: ParsedReport
    record: Optional[ReviewRecord] = None


class CodeReviewer:
    """
    Streaming code reviewer.

    Takes code as input, yields incremental report updates, and stores the
    completed review when a history store and owner are given.
    """

    def __init__(
        self,
        options: Optional[ReviewOptions] = None,
        store: Optional[HistoryStore] = None,
    ):
        self.options = options or ReviewOptions()
        self.profile = get_profile(self.options.profile)
        self._store = store

    @staticmethod
    def _validate(code: str) -> str:
        if not code or not code.strip():
            raise ValueError("Code cannot be empty")
        return code

    async def _persist(self, code: str, owner: Optional[str], buffer: str) -> Optional[ReviewRecord]:
        if not owner or self._store is None:
            return None
        language = self.options.languageOverride or classify(code)
        record = make_record(owner, code, language, self.profile.name, buffer)
        await self._store.append(owner, record)
        logger.info("Stored review %s for %s", record.id, owner)
        return record

    async def fragments(self, code: str, owner: Optional[str] = None) -> AsyncIterator[str]:
        """
        Yield the raw review fragments.

        The record is stored once the consumer asks past the metrics
        fragment; a consumer that stops earlier leaves no history entry.

        Raises:
            ValueError: If code is empty
            HistoryStoreError: If the record cannot be stored
        """
        self._validate(code)
        buffer = ""
        async for fragment in stream(AnalysisRequest(sourceText=code), self.options):
            buffer += fragment
            yield fragment
        await self._persist(code, owner, buffer)

    async def updates(self, code: str) -> AsyncIterator[ReviewUpdate]:
        """Yield a fresh ParsedReport after every fragment."""
        buffer = ""
        async for fragment in self.fragments(code):
            buffer += fragment
            yield ReviewUpdate(fragment=fragment, buffer=buffer, report=parse_report(buffer))

    async def review(self, code: str, owner: Optional[str] = None) -> ReviewOutcome:
        """
        Run a full review.

        Args:
            code: Source code to review (any language)
            owner: History owner; the record is stored only for completed runs

        Returns:
            ReviewOutcome with the final buffer, its parsed report and the
            stored record, if any

        Raises:
            ValueError: If code is empty
            HistoryStoreError: If the record cannot be stored
        """
        buffer = ""
        report = ParsedReport()
        async for update in self.updates(code):
            buffer = update.buffer
            report = update.report

        record = None
        if report.complete:
            record = await self._persist(code, owner, buffer)
        return ReviewOutcome(buffer=buffer, report=report, record=record)
