from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray


class ValueSource(ABC):
    """Stream numeric observations in bounded chunks."""

    @abstractmethod
    def iter_chunks(self) -> Iterator[NDArray[np.float64]]:
        """Yield flat float64 arrays one chunk at a time."""
        raise NotImplementedError
