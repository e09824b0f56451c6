from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from p2stream.markers import Marker
    from p2stream.models import EstimatorSnapshot


@runtime_checkable
class StreamingEstimator(Protocol):
    """Capabilities shared by every marker-based estimator."""

    @property
    def count(self) -> int:
        """Total observations ingested."""
        ...

    @property
    def markers(self) -> tuple[Marker, ...]:
        """Copies of the current markers; empty while cold."""
        ...

    def add(self, value: float) -> None:
        """Observe one finite value."""
        ...

    def extend(self, values: Iterable[float] | NDArray[np.number]) -> None:
        """Observe a batch of finite values."""
        ...

    def reset(self) -> None:
        """Forget every observation, keeping the target."""
        ...

    def snapshot(self) -> EstimatorSnapshot:
        """Return a checkpoint suitable for ``restore``."""
        ...
