"""Aggregate parsed GcEvents into a GcAnalyzedData report."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from typing import TypeVar

from .errors import InsufficientDataError
from .grammar import CONCURRENT_TYPE_PREFIX
from .models import (
    PAUSE_LOG_TYPES,
    AnalysisSettings,
    GcAnalyzedData,
    GcConcurrentStat,
    GcEstimatedPauseTime,
    GcEvent,
    GcPauseOutliers,
    GcPauseStat,
    LogType,
)
from .stats import Statistics

logger = logging.getLogger(__name__)

R = TypeVar("R")

CONCURRENT_PHASE_ORDER: tuple[str, ...] = tuple(
    CONCURRENT_TYPE_PREFIX + phase
    for phase in (
        "mark-start",
        "mark",
        "preclean-start",
        "preclean",
        "abortable-preclean-start",
        "abortable-preclean",
        "sweep-start",
        "sweep",
        "reset-start",
        "reset",
    )
)


def _or_none(compute: Callable[[], R]) -> R | None:
    """Run a statistic, mapping a too-small sample to None."""
    try:
        return compute()
    except InsufficientDataError:
        return None


def concurrent_phase_rank(type_detail: str) -> int:
    """Sort key for concurrent phases; unknown phases go after the known ones."""
    try:
        return CONCURRENT_PHASE_ORDER.index(type_detail)
    except ValueError:
        return len(CONCURRENT_PHASE_ORDER)


class LogAnalyzer:
    """Builds per-category pause statistics and concurrent-phase counts."""

    def __init__(self, events: Sequence[GcEvent], settings: AnalysisSettings | None = None) -> None:
        self.gc_events = list(events)
        self.settings = settings or AnalysisSettings()

    def analyze_data(
        self,
        mean_levels: Sequence[float] | None = None,
        outlier_levels: Sequence[float] | None = None,
    ) -> GcAnalyzedData:
        """Analyze the events.

        Args:
            mean_levels: Mean estimation levels (default 0.01, 0.05, 0.1).
            outlier_levels: Outlier detection levels (default 0.01, 0.1, 0.25).

        Raises:
            LevelOutOfRangeError: a level is outside (0, 1].
        """
        if mean_levels is None:
            mean_levels = self.settings.mean_levels
        if outlier_levels is None:
            outlier_levels = self.settings.outlier_levels

        pauses = [
            self.analyze_pause_time(log_type, mean_levels, outlier_levels)
            for log_type in PAUSE_LOG_TYPES
        ]
        return GcAnalyzedData(pauses=pauses, concurrences=self.analyze_concurrent_events())

    def analyze_pause_time(
        self,
        log_type: LogType,
        mean_levels: Sequence[float],
        outlier_levels: Sequence[float],
    ) -> GcPauseStat:
        data = [e for e in self.gc_events if e.log_type == log_type]
        stats = Statistics(data, lambda e: e.pause_time)
        logger.debug("Analyzing %d %s events", len(data), log_type)

        means = [
            GcEstimatedPauseTime(level=level, mean=_or_none(lambda: stats.estimate_mean(level)))
            for level in mean_levels
        ]
        outliers = [
            GcPauseOutliers(level=level, events=_or_none(lambda: stats.get_outliers(level)))
            for level in outlier_levels
        ]

        return GcPauseStat(
            type=log_type,
            count=len(data),
            total_pause_time=stats.total_sum(),
            sample_mean=_or_none(stats.sample_mean),
            sample_std_dev=_or_none(stats.sample_std_dev),
            sample_median=_or_none(stats.sample_median),
            min_event=_or_none(stats.get_min),
            max_event=_or_none(stats.get_max),
            means=means,
            outliers=outliers,
        )

    def analyze_concurrent_events(self) -> list[GcConcurrentStat]:
        counts = Counter(e.type_detail for e in self.gc_events if e.log_type == "CMS_CONCURRENT")
        # sorted() is stable, so unknown phases keep first-seen order
        ordered = sorted(counts.items(), key=lambda item: concurrent_phase_rank(item[0]))
        return [
            GcConcurrentStat(type_detail=type_detail, count=count)
            for type_detail, count in ordered
        ]
