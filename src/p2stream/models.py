from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from p2stream.errors import InvalidParameter
from p2stream.markers import Marker


class MarkerState(BaseModel):
    """Persisted form of a single marker."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    position: int
    height: float
    desired_position: float
    increment: float

    @classmethod
    def from_marker(cls, marker: Marker) -> MarkerState:
        return cls(
            position=marker.position,
            height=marker.height,
            desired_position=marker.desired_position,
            increment=marker.increment,
        )

    def to_marker(self) -> Marker:
        return Marker(
            height=self.height,
            position=self.position,
            desired_position=self.desired_position,
            increment=self.increment,
        )


class EstimatorSnapshot(BaseModel):
    """Checkpoint of an estimator; ``buffer`` is set only while cold."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    kind: Literal["quantile", "histogram"]
    target: float | int
    count: int
    markers: list[MarkerState]
    buffer: list[float] | None = None


class QuantileEstimate(BaseModel):
    """Estimated value for one tracked quantile."""

    model_config = ConfigDict(extra="forbid", strict=True)

    p: float
    value: float


class HistogramBin(BaseModel):
    """One equal-frequency bin: its edges, midpoint marker and estimated count."""

    model_config = ConfigDict(extra="forbid", strict=True)

    lower: float
    middle: float
    upper: float
    count: int


class StreamSummary(BaseModel):
    """Immutable summary of a finished stream."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    count: int
    mean: float
    std: float
    min: float
    max: float
    quantiles: list[QuantileEstimate]
    histogram: list[HistogramBin] | None = None


def coerce_snapshot(
    state: EstimatorSnapshot | Mapping[str, Any] | str | bytes,
) -> EstimatorSnapshot:
    """Accept a snapshot model, its ``model_dump()`` dict or its JSON text."""
    if isinstance(state, EstimatorSnapshot):
        return state
    try:
        if isinstance(state, (str, bytes)):
            return EstimatorSnapshot.model_validate_json(state)
        return EstimatorSnapshot.model_validate(dict(state))
    except ValidationError as exc:
        raise InvalidParameter(f"malformed estimator snapshot: {exc}") from exc
