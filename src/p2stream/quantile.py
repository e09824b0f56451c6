"""Streaming quantile estimation using the P² algorithm (Jain & Chlamtac, 1985).

Five markers track the minimum, ``p/2``, ``p``, ``(1+p)/2`` and the maximum.
Memory O(1), update O(1). Until five observations have arrived the estimate
is the exact order statistic of the values seen so far.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from numbers import Real
from typing import Any

import numpy as np
from numpy.typing import NDArray

from p2stream.errors import InvalidParameter
from p2stream.markers import Marker
from p2stream.models import EstimatorSnapshot, MarkerState, coerce_snapshot
from p2stream.stream import MarkerStream

logger = logging.getLogger(__name__)

QUANTILE_MARKERS = 5


def quantile_targets(p: float) -> tuple[float, ...]:
    return (0.0, p / 2.0, p, (1.0 + p) / 2.0, 1.0)


class QuantileEstimator:
    """P² quantile estimator with constant memory."""

    def __init__(self, p: float) -> None:
        if isinstance(p, bool) or not isinstance(p, Real):
            raise InvalidParameter(f"quantile must be a real number, got {p!r}")
        if not (math.isfinite(p) and 0.0 < p < 1.0):
            raise InvalidParameter("quantile must be in (0, 1)")
        self._p = float(p)
        self._stream = MarkerStream(quantile_targets(self._p))

    def __repr__(self) -> str:
        return f"QuantileEstimator(p={self._p}, count={self._stream.count})"

    def __len__(self) -> int:
        return self._stream.count

    @property
    def p(self) -> float:
        return self._p

    @property
    def target(self) -> float:
        return self._p

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
        """Observe one sample."""
        self._stream.add(value)

    def extend(self, values: Iterable[float] | NDArray[np.number]) -> None:
        """Observe a batch; nothing is applied unless every value is finite."""
        self._stream.extend(values)

    def estimate(self) -> float:
        """Current estimate of the ``p`` quantile."""
        return self._stream.height(2)

    def marker_height(self, index: int) -> float:
        """Height of marker ``index``: 0 min, 1 p/2, 2 p, 3 (1+p)/2, 4 max."""
        return self._stream.height(index)

    def marker_count(self, index: int) -> int:
        """Number of observations less than or equal to marker ``index``."""
        return self._stream.position(index)

    def reset(self) -> None:
        self._stream.reset()

    def snapshot(self) -> EstimatorSnapshot:
        warm = self._stream.warm
        return EstimatorSnapshot(
            kind="quantile",
            target=self._p,
            count=self._stream.count,
            markers=[MarkerState.from_marker(m) for m in self._stream.markers],
            buffer=None if warm else self._stream.buffered(),
        )

    @classmethod
    def restore(
        cls, state: EstimatorSnapshot | Mapping[str, Any] | str | bytes
    ) -> QuantileEstimator:
        snapshot = coerce_snapshot(state)
        if snapshot.kind != "quantile":
            raise InvalidParameter(
                f"cannot restore a {snapshot.kind} snapshot as a quantile estimator"
            )
        estimator = cls(snapshot.target)
        estimator._stream = MarkerStream.from_state(
            estimator._stream.quantiles,
            snapshot.count,
            [marker.to_marker() for marker in snapshot.markers],
            snapshot.buffer,
        )
        logger.debug("Restored %r.", estimator)
        return estimator


def new_quantile_estimator(p: float) -> QuantileEstimator:
    return QuantileEstimator(p)


__all__ = [
    "QUANTILE_MARKERS",
    "QuantileEstimator",
    "new_quantile_estimator",
    "quantile_targets",
]
