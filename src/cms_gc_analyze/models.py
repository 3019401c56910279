"""Pydantic models shared by the parser, the analyzer and the report surface."""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# ============================================================
# TYPE ALIASES
# ============================================================

LogType: TypeAlias = Literal[
    "FULL_GC", "MINOR_GC", "CMS_INIT_MARK", "CMS_FINAL_REMARK", "CMS_CONCURRENT"
]
SecondsValue: TypeAlias = float
Level: TypeAlias = Annotated[float, Field(gt=0.0, le=1.0)]

# Stop-the-world categories, in report order.
PAUSE_LOG_TYPES: tuple[LogType, ...] = (
    "FULL_GC",
    "MINOR_GC",
    "CMS_INIT_MARK",
    "CMS_FINAL_REMARK",
)

DEFAULT_MEAN_LEVELS: tuple[float, ...] = (0.01, 0.05, 0.1)
DEFAULT_OUTLIER_LEVELS: tuple[float, ...] = (0.01, 0.1, 0.25)

# ============================================================
# EVENT MODEL
# ============================================================


class GcEvent(BaseModel):
    """One logical CMS log line, flattened."""

    model_config = ConfigDict(frozen=True)

    thread: int = 0
    timestamp: int = 0  # uptime in milliseconds, e.g. "126.426" -> 126426
    log_type: LogType
    pause_time: SecondsValue = 0.0
    user_time: SecondsValue = 0.0
    sys_time: SecondsValue = 0.0
    real_time: SecondsValue = 0.0

    # CMS_CONCURRENT only
    cms_cpu_time: SecondsValue = 0.0
    cms_wall_time: SecondsValue = 0.0

    # CMS_FINAL_REMARK only
    ref_time: SecondsValue | None = None

    type_detail: str = ""


# ============================================================
# REPORT MODELS
# ============================================================


class MeanRange(BaseModel):
    """Closed interval estimated for the population mean."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @property
    def width(self) -> float:
        return self.max - self.min


class GcEstimatedPauseTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: float
    mean: MeanRange | None = None  # None: fewer than two samples


class GcPauseOutliers(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: float
    events: list[GcEvent] | None = None  # None: fewer than three samples


class GcPauseStat(BaseModel):
    """Pause-time summary of one stop-the-world category."""

    model_config = ConfigDict(frozen=True)

    type: LogType
    count: int = 0
    total_pause_time: SecondsValue = 0.0
    sample_mean: SecondsValue | None = None
    sample_std_dev: SecondsValue | None = None
    sample_median: SecondsValue | None = None
    min_event: GcEvent | None = None
    max_event: GcEvent | None = None
    means: list[GcEstimatedPauseTime] = Field(default_factory=list)
    outliers: list[GcPauseOutliers] = Field(default_factory=list)


class GcConcurrentStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_detail: str
    count: int


class GcAnalyzedData(BaseModel):
    """Complete analysis report.

    ``pauses`` always holds one entry per ``PAUSE_LOG_TYPES`` member, in that
    order. ``concurrences`` follows the canonical CMS concurrent-phase order.
    """

    model_config = ConfigDict(frozen=True)

    pauses: list[GcPauseStat] = Field(default_factory=list)
    concurrences: list[GcConcurrentStat] = Field(default_factory=list)


# ============================================================
# CONFIGURATION
# ============================================================


class AnalysisSettings(BaseModel):
    """Significance levels used by the analyzer.

    Mean levels are two-sided (0.05 gives a 95% interval); outlier levels are
    the Grubbs significance before the per-observation correction.
    """

    mean_levels: list[Level] = Field(default_factory=lambda: list(DEFAULT_MEAN_LEVELS))
    outlier_levels: list[Level] = Field(default_factory=lambda: list(DEFAULT_OUTLIER_LEVELS))
