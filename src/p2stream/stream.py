from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from numbers import Real

import numpy as np
from numpy.typing import NDArray

from p2stream.engine import adjust
from p2stream.errors import (
    IndexOutOfRange,
    InsufficientData,
    InvalidInput,
    InvalidParameter,
)
from p2stream.markers import InitializationBuffer, Marker, WarmMarkers

logger = logging.getLogger(__name__)


def coerce_observation(value: object) -> float:
    """Return ``value`` as a float or raise InvalidInput."""
    if isinstance(value, bool) or not isinstance(value, Real):
        logger.error("Rejected non-numeric observation of type %s.", type(value))
        raise InvalidInput(f"observation must be a real number, got {value!r}")
    try:
        x = float(value)
    except OverflowError:
        logger.error("Rejected observation too large for a float.")
        raise InvalidInput("observation is too large to represent as a float") from None
    if not math.isfinite(x):
        logger.error("Rejected non-finite observation %s.", x)
        raise InvalidInput(f"observation must be finite, got {x}")
    return x


def coerce_batch(values: Iterable[float] | NDArray[np.number]) -> NDArray[np.float64]:
    """Flatten ``values`` to float64 and reject the batch if any entry is bad."""
    try:
        raw = np.asarray(values if isinstance(values, np.ndarray) else list(values))
    except (TypeError, ValueError) as exc:
        logger.error("Rejected batch that is not numeric: %s.", exc)
        raise InvalidInput(f"batch must contain real numbers: {exc}") from exc
    if raw.size and raw.dtype.kind not in "iuf":
        logger.error("Rejected batch with dtype %s.", raw.dtype)
        raise InvalidInput(f"batch must contain real numbers, got dtype {raw.dtype}")
    data = raw.astype(np.float64).reshape(-1)
    if not np.all(np.isfinite(data)):
        bad = int(np.count_nonzero(~np.isfinite(data)))
        logger.error("Rejected batch with %d non-finite values.", bad)
        raise InvalidInput(f"batch contains {bad} non-finite values")
    return data


class MarkerStream:
    """Cold/warm state machine driving the adjustment engine.

    Both estimators own one of these, parameterized by their target
    quantile array; it holds either an InitializationBuffer or WarmMarkers,
    never both.
    """

    def __init__(self, quantiles: Sequence[float]) -> None:
        self._quantiles = tuple(float(q) for q in quantiles)
        self._count = 0
        self._state: InitializationBuffer | WarmMarkers = InitializationBuffer(
            len(self._quantiles)
        )

    @property
    def quantiles(self) -> tuple[float, ...]:
        return self._quantiles

    @property
    def size(self) -> int:
        return len(self._quantiles)

    @property
    def count(self) -> int:
        return self._count

    @property
    def warm(self) -> bool:
        return isinstance(self._state, WarmMarkers)

    @property
    def markers(self) -> tuple[Marker, ...]:
        """Copies of the current markers; empty while cold."""
        if isinstance(self._state, WarmMarkers):
            return tuple(replace(marker) for marker in self._state.markers)
        return ()

    def buffered(self) -> list[float]:
        if isinstance(self._state, InitializationBuffer):
            return self._state.values()
        return []

    def add(self, value: object) -> None:
        self._apply(coerce_observation(value))

    def extend(self, values: Iterable[float] | NDArray[np.number]) -> None:
        data = coerce_batch(values)
        for x in data.tolist():
            self._apply(x)
        logger.debug("Ingested batch of %d values count=%d.", data.size, self._count)

    def _apply(self, x: float) -> None:
        state = self._state
        if isinstance(state, InitializationBuffer):
            state.push(x)
            self._count += 1
            if state.full:
                self._state = WarmMarkers(state.seed(self.size, self._quantiles))
            return
        adjust(state.markers, x)
        self._count += 1

    def height(self, index: int) -> float:
        """Height of marker ``index``, or the exact order statistic while cold."""
        self._check_index(index)
        state = self._state
        if isinstance(state, WarmMarkers):
            return state.markers[index].height
        return state.order_statistic(self._quantiles[index])

    def position(self, index: int) -> int:
        self._check_index(index)
        state = self._state
        if isinstance(state, WarmMarkers):
            return state.markers[index].position
        if self._count == 0:
            raise InsufficientData("No samples provided for marker positions.")
        raise InsufficientData(
            f"marker positions exist after {self.size} observations "
            f"(have {self._count})"
        )

    def reset(self) -> None:
        self._count = 0
        self._state = InitializationBuffer(self.size)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexOutOfRange(
                f"marker index {index} outside 0..{self.size - 1}"
            )

    @classmethod
    def from_state(
        cls,
        quantiles: Sequence[float],
        count: int,
        markers: Sequence[Marker],
        buffer: Sequence[float] | None,
    ) -> MarkerStream:
        """Rebuild a stream from persisted parts, checking every invariant."""
        stream = cls(quantiles)
        size = stream.size
        if count < 0:
            raise InvalidParameter("count must be >= 0")

        if count < size:
            if markers:
                raise InvalidParameter("cold state must not carry markers")
            values = list(buffer or [])
            if len(values) != count:
                raise InvalidParameter(
                    f"cold state buffer holds {len(values)} values, count is {count}"
                )
            buffer_state = InitializationBuffer(size)
            for value in values:
                if not math.isfinite(value):
                    raise InvalidParameter("buffered values must be finite")
                buffer_state.push(float(value))
            stream._state = buffer_state
            stream._count = count
            return stream

        if buffer:
            raise InvalidParameter("warm state must not carry a buffer")
        restored = [replace(marker) for marker in markers]
        _check_warm_invariants(restored, stream.quantiles, count)
        stream._state = WarmMarkers(restored)
        stream._count = count
        return stream


def _check_warm_invariants(
    markers: list[Marker], quantiles: tuple[float, ...], count: int
) -> None:
    if len(markers) != len(quantiles):
        raise InvalidParameter(
            f"expected {len(quantiles)} markers, got {len(markers)}"
        )
    for marker, q in zip(markers, quantiles, strict=True):
        if not math.isclose(marker.increment, q, rel_tol=1e-12, abs_tol=1e-12):
            raise InvalidParameter(
                f"marker increment {marker.increment} does not match target {q}"
            )
    first, last = markers[0], markers[-1]
    if first.position != 1 or first.desired_position != 1.0:
        raise InvalidParameter("minimum marker must sit at rank 1")
    if last.position != count:
        raise InvalidParameter(
            f"maximum marker rank {last.position} does not match count {count}"
        )
    for left, right in zip(markers, markers[1:]):
        if left.position >= right.position:
            raise InvalidParameter("marker positions must be strictly increasing")
        if left.height > right.height:
            raise InvalidParameter("marker heights must be non-decreasing")
        if left.desired_position >= right.desired_position:
            raise InvalidParameter(
                "marker desired positions must be strictly increasing"
            )
