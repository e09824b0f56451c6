from .errors import (
    IndexOutOfRange,
    InsufficientData,
    InvalidInput,
    InvalidParameter,
    P2Error,
    Uninitialized,
)
from .histogram import HistogramEstimator, new_histogram_estimator
from .markers import Marker
from .models import EstimatorSnapshot, MarkerState
from .quantile import QuantileEstimator, new_quantile_estimator

__all__ = [
    "EstimatorSnapshot",
    "HistogramEstimator",
    "IndexOutOfRange",
    "InsufficientData",
    "InvalidInput",
    "InvalidParameter",
    "Marker",
    "MarkerState",
    "P2Error",
    "QuantileEstimator",
    "Uninitialized",
    "new_histogram_estimator",
    "new_quantile_estimator",
]
