"""Descriptive statistics, mean estimation and outlier detection.

Every precondition violation raises a :class:`StatisticsError` subclass:

* :class:`InsufficientDataError` when the sample is too small (mean, median,
  min and max need one value; variance, deviation and mean estimation need two;
  outlier detection needs three);
* :class:`LevelOutOfRangeError` when a level is outside ``(0, 1]``.

Only :meth:`Statistics.total_sum` is defined for an empty sample.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Callable, Sequence
from functools import cached_property
from typing import Generic, TypeVar

from scipy.stats import t as student_t

from .errors import InsufficientDataError, LevelOutOfRangeError
from .models import MeanRange

T = TypeVar("T")


def _check_level(level: float) -> None:
    if not 0.0 < level <= 1.0:
        raise LevelOutOfRangeError(level)


class Statistics(Generic[T]):
    """Statistics over entities, using ``value_of`` to extract each scalar.

    Entities are kept so min/max and outliers return the entity itself.
    """

    def __init__(self, data: Sequence[T], value_of: Callable[[T], float]) -> None:
        self._data = list(data)
        self._value_of = value_of

    def __len__(self) -> int:
        return len(self._data)

    def _require(self, count: int) -> None:
        if len(self._data) < count:
            raise InsufficientDataError(count, len(self._data))

    @cached_property
    def _values(self) -> list[float]:
        return [self._value_of(item) for item in self._data]

    @cached_property
    def _mean(self) -> float:
        return statistics.fmean(self._values)

    @cached_property
    def _std_dev(self) -> float:
        return math.sqrt(self.sample_variance())

    # ------------------------------------------------------------
    # Descriptive statistics
    # ------------------------------------------------------------

    def total_sum(self) -> float:
        return math.fsum(self._values)

    def sample_mean(self) -> float:
        self._require(1)
        return self._mean

    def sample_median(self) -> float:
        """Middle value; the mean of the two middle values for even counts."""
        self._require(1)
        return statistics.median(self._values)

    def sample_variance(self) -> float:
        """Unbiased sample variance, sum((x - mean)^2) / (n - 1)."""
        self._require(2)
        return statistics.variance(self._values, self._mean)

    def sample_std_dev(self) -> float:
        self._require(2)
        return self._std_dev

    def get_min(self) -> T:
        """Entity with the smallest value (first one on ties)."""
        self._require(1)
        return min(self._data, key=self._value_of)

    def get_max(self) -> T:
        """Entity with the largest value (first one on ties)."""
        self._require(1)
        return max(self._data, key=self._value_of)

    # ------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------

    def estimate_mean(self, confidence_level: float) -> MeanRange:
        """Two-sided Student-t interval for the population mean.

        Args:
            confidence_level: Significance of the interval in (0, 1]; 0.01 gives
                a 99% interval, 0.05 a 95% interval, 0.1 a 90% interval.

        Returns:
            ``mean +/- |t(level / 2, n - 1)| * stddev / sqrt(n)``
        """
        _check_level(confidence_level)
        self._require(2)

        n = len(self._data)
        score_t = student_t.ppf(confidence_level / 2, n - 1)
        error = abs(score_t * self._std_dev / math.sqrt(n))
        return MeanRange(min=self._mean - error, max=self._mean + error)

    def get_outliers(self, significance_level: float) -> list[T]:
        """Upper-tail outliers by Grubbs' test.

        Short pauses are never reported; only values far above the mean are.
        See https://www.itl.nist.gov/div898/handbook/eda/section3/eda35h1.htm

        Args:
            significance_level: Level in (0, 1], e.g. 0.01, 0.1 or 0.25.

        Returns:
            Entities whose standardized value exceeds the Grubbs critical value,
            in their original order.
        """
        _check_level(significance_level)
        self._require(3)

        if self._std_dev == 0.0:
            return []

        n = len(self._data)
        score_t = student_t.ppf(significance_level / n, n - 2)
        critical = ((n - 1) / math.sqrt(n)) * math.sqrt(score_t**2 / (n - 2 + score_t**2))

        return [
            item
            for item, value in zip(self._data, self._values)
            if (value - self._mean) / self._std_dev > critical
        ]
