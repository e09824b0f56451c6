from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from p2stream.contracts import Reporter
from p2stream.models import HistogramBin, QuantileEstimate, StreamSummary


def _format_p(p: float) -> str:
    return f"p{p * 100:g}"


class RichReporter(Reporter):
    """Render stream summaries using Rich tables."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def render(self, summary: StreamSummary, source_name: str) -> None:
        self._console.print()
        self._console.print(f"Summary for {source_name}", style="bold underline")
        self._console.print(Rule(style="dim"))
        self._console.print(self._build_summary_section(summary))
        self._console.print()

        self._console.print("Quantiles", style="bold")
        self._console.print(Rule(style="dim"))
        self._console.print(self._build_quantile_section(summary.quantiles))
        self._console.print()

        if summary.histogram is not None:
            self._render_histogram(summary.histogram)

    @staticmethod
    def _build_summary_section(summary: StreamSummary) -> Table:
        table = Table.grid(padding=(0, 3))
        table.add_column("Metric", style="bold cyan")
        table.add_column("Value")

        table.add_row("count:", f"{summary.count:,}")
        table.add_row("mean:", f"{summary.mean:.6f}")
        table.add_row("std:", f"{summary.std:.6f}")
        table.add_row("min:", f"{summary.min:.6f}")
        table.add_row("max:", f"{summary.max:.6f}")
        return table

    @staticmethod
    def _build_quantile_section(quantiles: Sequence[QuantileEstimate]) -> Table:
        table = Table.grid(padding=(0, 3))
        table.add_column("Quantile", style="bold cyan")
        table.add_column("Estimate")
        if not quantiles:
            table.add_row("none", "")
        for estimate in quantiles:
            table.add_row(f"{_format_p(estimate.p)}:", f"{estimate.value:.6f}")
        return table

    def _render_histogram(self, bins: Sequence[HistogramBin]) -> None:
        self._console.print(f"Histogram ({len(bins)} bins)", style="bold")
        self._console.print(Rule(style="dim"))

        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=True,
            header_style="bold",
            expand=True,
            padding=(0, 2),
        )
        table.add_column("Bin", ratio=1)
        table.add_column("Lower", ratio=2, justify="right")
        table.add_column("Median", ratio=2, justify="right")
        table.add_column("Upper", ratio=2, justify="right")
        table.add_column("Count", ratio=2, justify="right")

        for index, item in enumerate(bins):
            table.add_row(
                str(index),
                f"{item.lower:.6f}",
                f"{item.middle:.6f}",
                f"{item.upper:.6f}",
                f"{item.count:,}",
            )
        self._console.print(table)
