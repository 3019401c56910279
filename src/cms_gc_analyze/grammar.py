"""Recursive grammar for one complete CMS GC log line.

The line must already be reassembled: a pause report cut in half by another
writer thread does not match. Following JVM options produce the format::

    -XX:+UseConcMarkSweepGC -XX:+UnlockDiagnosticVMOptions -XX:+LogVMOutput
    -XX:+PrintGCDetails -XX:+PrintGCTimeStamps

Grammar (WS is ``[ \\t\\f]*``)::

    InputLine       <- ConcurrentEvent / (Event Times)
    Event           <- (TimeStamp ':' WS)? '[' Type (WS '(' Detail ')')? (':' WS)?
                       WS Event* WS UsageAndElapsed ']' WS
    UsageAndElapsed <- UsageChange? (',' WS Event)? (',' WS Time)?
    UsageChange     <- (Size Arrow)? Size '(' Size ')'
    Size            <- Digits WS 'K' WS
    Arrow           <- '->' / '-&gt;'
    Detail          <- 'System.gc()' / [^)]+
    Times           <- '[Times:' WS 'user=' Time ' sys=' Time ', real=' Time ']'
    ConcurrentEvent <- TimeStamp ':' WS '[CMS-concurrent-' [^:\\]]+
                       (':' WS Time '/' Time ']' WS Times)?
    Time            <- Digits '.' Digits ' secs'?

Text after a complete match is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from pydantic import BaseModel, Field

# Every type string an Event can carry, in match order. The classifier relies on
# this closed set; keep the two in sync.
GRAMMAR_TYPES: tuple[str, ...] = (
    "GC",
    "ParNew",
    "CMS",
    "Full GC",
    "Metaspace",
    "1 CMS-initial-mark",
    "YG occupancy",
    "Rescan (parallel)",
    "weak refs processing",
    "class unloading",
    "scrub symbol table",
    "scrub string table",
    "1 CMS-remark",
)
CONCURRENT_TYPE_PREFIX = "CMS-concurrent-"

_WS = r"[ \t\f]*"
_TIME = r"\d+\.\d+"


def timestamp_to_millis(literal: str) -> int:
    """Convert a ``ddd.ddd`` uptime literal to an integer by dropping the point."""
    return int(literal.replace(".", ""))


class GcEventNode(BaseModel):
    """Intermediate parse tree node; children keep source nesting order."""

    type: str = ""
    detail: str | None = None
    timestamp: int | None = None

    # Kilobytes
    prev_usage: int | None = None
    after_usage: int | None = None
    capacity: int | None = None

    # Seconds
    elapsed_time: float | None = None
    user: float | None = None
    sys: float | None = None
    real: float | None = None
    cms_cpu_time: float | None = None
    cms_wall_time: float | None = None

    children: list[GcEventNode] = Field(default_factory=list)

    def type_and_detail(self) -> str:
        if self.detail:
            return f"{self.type} ({self.detail})"
        return self.type

    def iter_preorder(self) -> Iterator[GcEventNode]:
        """Yield this node, then every descendant in document order."""
        yield self
        for child in self.children:
            yield from child.iter_preorder()


class CmsGcLogGrammar:
    """PEG-style recursive-descent parser over compiled patterns."""

    TIMESTAMP_PREFIX: re.Pattern[str] = re.compile(rf"(?P<time>{_TIME}):{_WS}")
    TYPE: re.Pattern[str] = re.compile("|".join(re.escape(t) for t in GRAMMAR_TYPES))
    DETAIL: re.Pattern[str] = re.compile(rf"{_WS}\((?P<detail>System\.gc\(\)|[^)]+)\)")
    TYPE_SEPARATOR: re.Pattern[str] = re.compile(rf":{_WS}")
    WHITESPACE: re.Pattern[str] = re.compile(_WS)
    USAGE_CHANGE: re.Pattern[str] = re.compile(
        rf"(?:(?P<prev>\d+){_WS}K{_WS}(?:->|-&gt;))?"
        rf"(?P<after>\d+){_WS}K{_WS}\((?P<capacity>\d+){_WS}K{_WS}\)"
    )
    COMMA: re.Pattern[str] = re.compile(rf",{_WS}")
    DURATION: re.Pattern[str] = re.compile(rf"(?P<time>{_TIME})(?: secs)?")
    CLOSE: re.Pattern[str] = re.compile(rf"\]{_WS}")
    TIMES: re.Pattern[str] = re.compile(
        rf"\[Times:{_WS}user=(?P<user>{_TIME})(?: secs)?"
        rf" sys=(?P<sys>{_TIME})(?: secs)?"
        rf", real=(?P<real>{_TIME})(?: secs)?\]"
    )
    CONCURRENT_START: re.Pattern[str] = re.compile(
        rf"(?P<time>{_TIME}):{_WS}\[{re.escape(CONCURRENT_TYPE_PREFIX)}(?P<phase>[^:\]]+)"
    )
    CONCURRENT_TIMES: re.Pattern[str] = re.compile(
        rf":{_WS}(?P<cpu>{_TIME})(?: secs)?/(?P<wall>{_TIME})(?: secs)?\]{_WS}"
    )

    def parse(self, line: str) -> GcEventNode | None:
        """Parse one reassembled line; None when no alternative matches."""
        node = self._concurrent_event(line)
        if node is not None:
            return node
        return self._pause_report(line)

    def _concurrent_event(self, line: str) -> GcEventNode | None:
        match = self.CONCURRENT_START.match(line)
        if not match:
            return None

        node = GcEventNode(
            type=CONCURRENT_TYPE_PREFIX + match.group("phase"),
            timestamp=timestamp_to_millis(match.group("time")),
        )
        # "-start" phases stop at the bracket; completed phases carry timings
        if (cpu_wall := self.CONCURRENT_TIMES.match(line, match.end())) and (
            times := self.TIMES.match(line, cpu_wall.end())
        ):
            node.cms_cpu_time = float(cpu_wall.group("cpu"))
            node.cms_wall_time = float(cpu_wall.group("wall"))
            self._apply_times(node, times)
        return node

    def _pause_report(self, line: str) -> GcEventNode | None:
        parsed = self._event(line, 0)
        if parsed is None:
            return None
        node, pos = parsed
        times = self.TIMES.match(line, pos)
        if not times:
            return None
        self._apply_times(node, times)
        return node

    def _event(self, text: str, pos: int) -> tuple[GcEventNode, int] | None:
        node = GcEventNode()

        if stamp := self.TIMESTAMP_PREFIX.match(text, pos):
            node.timestamp = timestamp_to_millis(stamp.group("time"))
            pos = stamp.end()

        if not text.startswith("[", pos):
            return None
        pos += 1

        type_match = self.TYPE.match(text, pos)
        if not type_match:
            return None
        node.type = type_match.group()
        pos = type_match.end()

        if detail := self.DETAIL.match(text, pos):
            node.detail = detail.group("detail")
            pos = detail.end()
        if separator := self.TYPE_SEPARATOR.match(text, pos):
            pos = separator.end()
        pos = self._skip_whitespace(text, pos)

        while (child := self._event(text, pos)) is not None:
            sub_event, pos = child
            node.children.append(sub_event)

        pos = self._skip_whitespace(text, pos)
        pos = self._usage_and_elapsed(text, pos, node)

        close = self.CLOSE.match(text, pos)
        if not close:
            return None
        return node, close.end()

    def _usage_and_elapsed(self, text: str, pos: int, node: GcEventNode) -> int:
        if usage := self.USAGE_CHANGE.match(text, pos):
            if usage.group("prev") is not None:
                node.prev_usage = int(usage.group("prev"))
            node.after_usage = int(usage.group("after"))
            node.capacity = int(usage.group("capacity"))
            pos = usage.end()

        # Trailing sub-event, e.g. ", [Metaspace: ...]"
        if comma := self.COMMA.match(text, pos):
            if (child := self._event(text, comma.end())) is not None:
                sub_event, pos = child
                node.children.append(sub_event)

        if (comma := self.COMMA.match(text, pos)) and (
            elapsed := self.DURATION.match(text, comma.end())
        ):
            node.elapsed_time = float(elapsed.group("time"))
            pos = elapsed.end()

        return pos

    def _skip_whitespace(self, text: str, pos: int) -> int:
        match = self.WHITESPACE.match(text, pos)
        return match.end() if match else pos

    @staticmethod
    def _apply_times(node: GcEventNode, times: re.Match[str]) -> None:
        node.user = float(times.group("user"))
        node.sys = float(times.group("sys"))
        node.real = float(times.group("real"))
