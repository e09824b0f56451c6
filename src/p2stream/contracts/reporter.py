from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from p2stream.models import StreamSummary


class Reporter(ABC):
    """Render stream summaries for presentation."""

    @abstractmethod
    def render(self, summary: StreamSummary, source_name: str) -> None:
        """Render the summary to the configured output."""
        raise NotImplementedError
