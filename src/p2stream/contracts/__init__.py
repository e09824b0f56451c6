from .estimator import StreamingEstimator
from .reporter import Reporter
from .value_source import ValueSource

__all__ = [
    "Reporter",
    "StreamingEstimator",
    "ValueSource",
]
