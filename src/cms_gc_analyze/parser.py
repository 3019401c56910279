"""CMS log parser: writer-thread line reassembly on top of the line grammar."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from .classify import build_event
from .grammar import CmsGcLogGrammar
from .models import GcEvent

logger = logging.getLogger(__name__)

UNKNOWN_THREAD = -1
MAX_THREAD_ID = 2**31 - 1


class CmsLogParser:
    """Parse a CMS GC log into GcEvents.

    The JVM's foreground pause logger and background concurrent-phase logger
    share one file handle, so a pause report may be cut off at ``[CMS`` and only
    finished after a block from the other thread. Each ``<writer thread='N'/>``
    line switches the current thread; cut lines are kept per thread until the
    same thread writes again.

    One instance handles one pass over one log and is not thread safe.
    """

    WRITER_THREAD_PATTERN: re.Pattern[str] = re.compile(r"<writer thread='(?P<thread>\d+)'/>")
    INCOMPLETE_LINE_PATTERN: re.Pattern[str] = re.compile(r"GC.*\[CMS$")

    def __init__(self) -> None:
        self.current_thread: int = UNKNOWN_THREAD
        self.parsed_lines = 0
        self.dropped_lines = 0
        self.read_error: str | None = None
        self._grammar = CmsGcLogGrammar()
        self._incomplete_lines: dict[int, str] = {}

    @property
    def pending_threads(self) -> list[int]:
        """Thread ids still holding an unfinished line."""
        return list(self._incomplete_lines)

    def parse_file(self, path: Path) -> list[GcEvent]:
        """Parse a log file; I/O failures yield [] and set ``read_error``."""
        try:
            with path.open(encoding="utf-8", errors="replace") as f:
                return self.parse(f)
        except OSError as e:
            logger.error("Cannot read GC log %s: %s", path, e)
            self.read_error = f"Cannot read {path}: {e}"
        return []

    def parse(self, log_lines: Iterable[str]) -> list[GcEvent]:
        """Parse log lines in order into GcEvents."""
        events: list[GcEvent] = []
        for line in log_lines:
            event = self.parse_line(line)
            if event is not None:
                events.append(event)

        if self._incomplete_lines:
            logger.debug("Unfinished lines left for threads %s", self.pending_threads)
        return events

    def parse_line(self, line: str) -> GcEvent | None:
        line = line.rstrip("\r\n")

        if line.startswith("<writer"):
            self.current_thread = self.parse_writer_thread_id(line)
            return None

        if self.INCOMPLETE_LINE_PATTERN.search(line):
            self._incomplete_lines[self.current_thread] = line
            return None

        previous = self._incomplete_lines.pop(self.current_thread, None)
        if previous is not None:
            line = previous + line
        return self.parse_gc_event(line)

    def parse_writer_thread_id(self, line: str) -> int:
        match = self.WRITER_THREAD_PATTERN.fullmatch(line.strip())
        if match:
            digits = match.group("thread").lstrip("0") or "0"
            # length first: int() rejects very long digit strings
            if len(digits) <= len(str(MAX_THREAD_ID)) and int(digits) <= MAX_THREAD_ID:
                return int(digits)
        logger.warning("Writer thread id must be a number up to %d: %s", MAX_THREAD_ID, line)
        return UNKNOWN_THREAD

    def parse_gc_event(self, line: str) -> GcEvent | None:
        """Parse one complete line; grammar mismatches are dropped."""
        node = self._grammar.parse(line)
        if node is None:
            self.dropped_lines += 1
            logger.debug("Dropped unparsable line: %s", line)
            return None

        event = build_event(node, self.current_thread)
        self.parsed_lines += 1
        return event
