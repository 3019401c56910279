"""Ticketed background analysis of uploaded GC logs."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Protocol

from .analyzer import LogAnalyzer
from .errors import LogReadError
from .models import AnalysisSettings, GcAnalyzedData
from .parser import CmsLogParser

logger = logging.getLogger(__name__)


class AnalysisStatus(str, Enum):
    NOT_READY = "NOT_READY"
    ANALYZING = "ANALYZING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class Ticketer(Protocol):
    """Status store the analysis job reports into."""

    def get_log_file(self, ticket: int) -> Path:
        ...

    def set_status(self, ticket: int, status: AnalysisStatus) -> None:
        ...

    def set_result(self, ticket: int, result: GcAnalyzedData) -> None:
        ...


class InMemoryTicketer:
    """Process-local Ticketer; safe to share between job threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = 0
        self._log_files: dict[int, Path] = {}
        self._statuses: dict[int, AnalysisStatus] = {}
        self._results: dict[int, GcAnalyzedData] = {}

    def issue_ticket(self) -> int:
        """Issue the next ticket number, starting at 1."""
        with self._lock:
            self._counter += 1
            return self._counter

    def set_log_file(self, ticket: int, path: Path) -> None:
        with self._lock:
            self._log_files[ticket] = path

    def get_log_file(self, ticket: int) -> Path:
        with self._lock:
            try:
                return self._log_files[ticket]
            except KeyError:
                raise KeyError(f"No log file registered for ticket {ticket}") from None

    def set_status(self, ticket: int, status: AnalysisStatus) -> None:
        with self._lock:
            self._statuses[ticket] = status

    def get_status(self, ticket: int) -> AnalysisStatus:
        with self._lock:
            return self._statuses.get(ticket, AnalysisStatus.NOT_READY)

    def set_result(self, ticket: int, result: GcAnalyzedData) -> None:
        with self._lock:
            self._results[ticket] = result

    def get_result(self, ticket: int) -> GcAnalyzedData | None:
        with self._lock:
            return self._results.get(ticket)


class LogAnalyzeJob:
    """Parse and analyze the log of one ticket, recording status transitions.

    Each run builds its own parser and analyzer, so jobs may run concurrently.
    """

    def __init__(
        self, ticketer: Ticketer, ticket: int, settings: AnalysisSettings | None = None
    ) -> None:
        self.ticketer = ticketer
        self.ticket = ticket
        self.settings = settings

    def run(self) -> None:
        self.ticketer.set_status(self.ticket, AnalysisStatus.ANALYZING)
        parser = CmsLogParser()
        try:
            events = parser.parse_file(self.ticketer.get_log_file(self.ticket))
            if parser.read_error is not None:
                raise LogReadError(parser.read_error)
            result = LogAnalyzer(events, self.settings).analyze_data()
            self.ticketer.set_result(self.ticket, result)
            self.ticketer.set_status(self.ticket, AnalysisStatus.COMPLETED)
        except Exception:
            self.ticketer.set_status(self.ticket, AnalysisStatus.ERROR)
            logger.exception("Failed to analyze the log of ticket %d", self.ticket)
