from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from p2stream.errors import InsufficientData, InvalidParameter, Uninitialized

logger = logging.getLogger(__name__)


def _float_list() -> list[float]:
    return []


@dataclass
class Marker:
    """A tracked (position, height) pair plus its desired-rank bookkeeping."""

    height: float
    position: int
    desired_position: float
    increment: float

    def __post_init__(self) -> None:
        if isinstance(self.position, bool) or not isinstance(self.position, int):
            raise InvalidParameter("position must be an integer")
        if self.position < 1:
            raise InvalidParameter("position must be >= 1")
        if not math.isfinite(self.height):
            raise InvalidParameter("height must be finite")
        if not math.isfinite(self.desired_position):
            raise InvalidParameter("desired_position must be finite")
        if not 0.0 <= self.increment <= 1.0:
            raise InvalidParameter("increment must be in [0, 1]")


@dataclass
class InitializationBuffer:
    """Cold state: raw observations collected until the markers can be seeded."""

    capacity: int
    _values: list[float] = field(default_factory=_float_list)
    _sealed: bool = False

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise InvalidParameter("capacity must be >= 1")

    def __len__(self) -> int:
        return len(self._values)

    @property
    def full(self) -> bool:
        return len(self._values) == self.capacity

    def values(self) -> list[float]:
        return list(self._values)

    def push(self, value: float) -> None:
        if self._sealed:
            raise Uninitialized("buffer already seeded; markers are warm")
        if self.full:
            raise Uninitialized(
                f"buffer holds {self.capacity} values and must be seeded"
            )
        self._values.append(value)

    def order_statistic(self, fraction: float) -> float:
        """Exact order statistic at rank ``round(fraction * (n - 1))``."""
        if not self._values:
            raise InsufficientData("No samples provided for quantile estimation.")
        ordered = sorted(self._values)
        return ordered[round(fraction * (len(ordered) - 1))]

    def seed(self, markers_len: int, quantiles: Sequence[float]) -> list[Marker]:
        """Turn the buffered values into markers and drop the buffer.

        Marker ``i`` starts at rank ``i + 1`` with the ``i``-th smallest
        value as its height. Its desired position starts at
        ``1 + (k - 1) * q_i`` and grows by ``q_i`` per later observation.
        """
        if self._sealed:
            raise Uninitialized("buffer already seeded")
        if len(self._values) != markers_len or len(quantiles) != markers_len:
            raise Uninitialized(
                f"seeding {markers_len} markers requires exactly {markers_len} "
                f"buffered values (have {len(self._values)}) and targets "
                f"(have {len(quantiles)})"
            )

        ordered = sorted(self._values)
        last = markers_len - 1
        markers = [
            Marker(
                height=height,
                position=index + 1,
                desired_position=1.0 + last * q,
                increment=q,
            )
            for index, (height, q) in enumerate(zip(ordered, quantiles, strict=True))
        ]
        self._values = []
        self._sealed = True
        logger.debug(
            "Seeded %d markers from buffered values min=%.6f max=%.6f.",
            markers_len,
            ordered[0],
            ordered[-1],
        )
        return markers


@dataclass
class WarmMarkers:
    """Warm state: the ordered marker array, no raw values retained."""

    markers: list[Marker]

    def heights(self) -> list[float]:
        return [marker.height for marker in self.markers]

    def positions(self) -> list[int]:
        return [marker.position for marker in self.markers]
