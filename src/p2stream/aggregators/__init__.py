from .stream_summary import DEFAULT_QUANTILES, StreamSummaryAggregator

__all__ = ["DEFAULT_QUANTILES", "StreamSummaryAggregator"]
