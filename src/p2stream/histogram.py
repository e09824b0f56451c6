"""Equal-frequency histograms with the P² algorithm.

``bins`` bins need ``2 * bins + 1`` markers at quantiles ``j / (2 * bins)``:
even markers are bin edges, odd markers the bin medians.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterable, Mapping
from numbers import Integral
from typing import Any

import numpy as np
from numpy.typing import NDArray

from p2stream.errors import IndexOutOfRange, InsufficientData, InvalidParameter
from p2stream.markers import Marker
from p2stream.models import (
    EstimatorSnapshot,
    HistogramBin,
    MarkerState,
    coerce_snapshot,
)
from p2stream.stream import MarkerStream

logger = logging.getLogger(__name__)


def histogram_targets(bins: int) -> tuple[float, ...]:
    cells = 2 * bins
    return tuple(j / cells for j in range(cells + 1))


class HistogramEstimator:
    """Track ``bins`` equal-frequency bin boundaries simultaneously."""

    def __init__(self, bins: int) -> None:
        if isinstance(bins, bool) or not isinstance(bins, Integral):
            raise InvalidParameter(f"bins must be an integer, got {bins!r}")
        if bins < 1:
            raise InvalidParameter("bins must be >= 1")
        self._bins = int(bins)
        self._stream = MarkerStream(histogram_targets(self._bins))

    def __repr__(self) -> str:
        return f"HistogramEstimator(bins={self._bins}, count={self._stream.count})"

    def __len__(self) -> int:
        return self._stream.count

    @property
    def bins(self) -> int:
        return self._bins

    @property
    def target(self) -> int:
        return self._bins

    @property
    def count(self) -> int:
        return self._stream.count

    @property
    def warm(self) -> bool:
        return self._stream.warm

    @property
    def markers(self) -> tuple[Marker, ...]:
        return self._stream.markers

    def add(self, value: float) -> None:
        self._stream.add(value)

    def extend(self, values: Iterable[float] | NDArray[np.number]) -> None:
        self._stream.extend(values)

    def boundary(self, index: int) -> float:
        """Height of marker ``index`` in ``0..2*bins``; even indices are bin edges."""
        return self._stream.height(index)

    def boundaries(self) -> list[float]:
        return [self._stream.height(j) for j in range(self._stream.size)]

    def marker_count(self, index: int) -> int:
        """Number of observations less than or equal to marker ``index``."""
        return self._stream.position(index)

    def bin_count(self, index: int) -> int:
        """Estimated number of observations in bin ``index``.

        Bin 0 spans ``[boundary(0), boundary(2)]``; bin ``j > 0`` spans
        ``(boundary(2j), boundary(2j+2)]``, so the counts add up to ``count``.
        """
        if not 0 <= index < self._bins:
            raise IndexOutOfRange(f"bin index {index} outside 0..{self._bins - 1}")
        if self._stream.count == 0:
            raise InsufficientData("No samples provided for histogram estimation.")

        lower_marker, upper_marker = 2 * index, 2 * index + 2
        if self._stream.warm:
            upper = self._stream.position(upper_marker)
            lower = 0 if index == 0 else self._stream.position(lower_marker)
            return upper - lower

        ordered = sorted(self._stream.buffered())
        upper = bisect_right(ordered, self._stream.height(upper_marker))
        lower = (
            0
            if index == 0
            else bisect_right(ordered, self._stream.height(lower_marker))
        )
        return upper - lower

    def bin_counts(self) -> list[int]:
        return [self.bin_count(j) for j in range(self._bins)]

    def histogram(self) -> list[HistogramBin]:
        edges = self.boundaries()
        return [
            HistogramBin(
                lower=edges[2 * j],
                middle=edges[2 * j + 1],
                upper=edges[2 * j + 2],
                count=self.bin_count(j),
            )
            for j in range(self._bins)
        ]

    def reset(self) -> None:
        self._stream.reset()

    def snapshot(self) -> EstimatorSnapshot:
        warm = self._stream.warm
        return EstimatorSnapshot(
            kind="histogram",
            target=self._bins,
            count=self._stream.count,
            markers=[MarkerState.from_marker(m) for m in self._stream.markers],
            buffer=None if warm else self._stream.buffered(),
        )

    @classmethod
    def restore(
        cls, state: EstimatorSnapshot | Mapping[str, Any] | str | bytes
    ) -> HistogramEstimator:
        snapshot = coerce_snapshot(state)
        if snapshot.kind != "histogram":
            raise InvalidParameter(
                f"cannot restore a {snapshot.kind} snapshot as a histogram estimator"
            )
        estimator = cls(snapshot.target)  # type: ignore[arg-type]
        estimator._stream = MarkerStream.from_state(
            estimator._stream.quantiles,
            snapshot.count,
            [marker.to_marker() for marker in snapshot.markers],
            snapshot.buffer,
        )
        logger.debug("Restored %r.", estimator)
        return estimator


def new_histogram_estimator(bins: int) -> HistogramEstimator:
    return HistogramEstimator(bins)


__all__ = ["HistogramEstimator", "histogram_targets", "new_histogram_estimator"]
