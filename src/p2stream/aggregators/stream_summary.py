from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from p2stream.errors import InsufficientData, InvalidParameter
from p2stream.histogram import HistogramEstimator
from p2stream.models import QuantileEstimate, StreamSummary
from p2stream.quantile import QuantileEstimator
from p2stream.stream import coerce_batch

logger = logging.getLogger(__name__)

DEFAULT_QUANTILES: tuple[float, ...] = (0.01, 0.05, 0.5, 0.95, 0.99)


class StreamSummaryAggregator:
    """Streaming summary via Welford moments + P² quantile and histogram markers."""

    def __init__(
        self,
        quantiles: Sequence[float] = DEFAULT_QUANTILES,
        bins: int | None = None,
    ) -> None:
        if not quantiles and bins is None:
            raise InvalidParameter("at least one quantile or a bin count is required")
        self._count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self._min = math.inf
        self._max = -math.inf
        self._quantiles = [QuantileEstimator(p) for p in quantiles]
        self._histogram = HistogramEstimator(bins) if bins is not None else None

    @property
    def count(self) -> int:
        return self._count

    def update(self, values: NDArray[np.number]) -> None:
        data = coerce_batch(values)
        value_count = int(data.size)
        logger.debug("Updating summary with %d values.", value_count)
        if value_count == 0:
            return

        batch_mean = float(np.mean(data))
        batch_m2 = float(np.var(data, ddof=0)) * value_count
        self._merge_batch(value_count, batch_mean, batch_m2)
        self._min = min(self._min, float(np.min(data)))
        self._max = max(self._max, float(np.max(data)))
        for estimator in self._quantiles:
            estimator.extend(data)
        if self._histogram is not None:
            self._histogram.extend(data)
        logger.debug("Updated summary count=%d.", self._count)

    def finalize(self) -> StreamSummary:
        if self._count == 0:
            logger.error("Finalize called without any values.")
            raise InsufficientData("No values provided for stream summary.")
        summary = StreamSummary(
            count=self._count,
            mean=self._mean,
            std=math.sqrt(self._m2 / self._count),
            min=self._min,
            max=self._max,
            quantiles=[
                QuantileEstimate(p=estimator.p, value=estimator.estimate())
                for estimator in self._quantiles
            ],
            histogram=(
                self._histogram.histogram() if self._histogram is not None else None
            ),
        )
        logger.debug(
            "Finalized summary: count=%d mean=%.6f std=%.6f min=%.6f max=%.6f.",
            summary.count,
            summary.mean,
            summary.std,
            summary.min,
            summary.max,
        )
        return summary

    def _merge_batch(self, count: int, mean: float, m2: float) -> None:
        if self._count == 0:
            self._count = count
            self._mean = mean
            self._m2 = m2
            return

        n1 = self._count
        n2 = count
        delta = mean - self._mean
        total = n1 + n2
        self._mean = self._mean + (delta * n2 / total)
        self._m2 = self._m2 + m2 + (delta * delta * n1 * n2 / total)
        self._count = total
