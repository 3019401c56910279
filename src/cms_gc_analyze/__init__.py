"""Pause-time statistics for CMS garbage-collector logs."""

from __future__ import annotations

__version__ = "1.0.0"

from .analyzer import LogAnalyzer
from .errors import (
    GcAnalyzeError,
    InsufficientDataError,
    LevelOutOfRangeError,
    LogReadError,
    StatisticsError,
    UnknownEventTypeError,
)
from .jobs import AnalysisStatus, InMemoryTicketer, LogAnalyzeJob, Ticketer
from .models import AnalysisSettings, GcAnalyzedData, GcEvent
from .parser import CmsLogParser
from .stats import Statistics

__all__ = [
    "AnalysisSettings",
    "AnalysisStatus",
    "CmsLogParser",
    "GcAnalyzeError",
    "GcAnalyzedData",
    "GcEvent",
    "InMemoryTicketer",
    "InsufficientDataError",
    "LevelOutOfRangeError",
    "LogAnalyzeJob",
    "LogAnalyzer",
    "LogReadError",
    "Statistics",
    "StatisticsError",
    "Ticketer",
    "UnknownEventTypeError",
    "__version__",
]
