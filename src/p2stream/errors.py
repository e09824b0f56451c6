from __future__ import annotations


class P2Error(Exception):
    """Base class for all p2stream errors."""


class InvalidParameter(P2Error, ValueError):
    """Estimator target or restored state is out of range."""


class InvalidInput(P2Error, ValueError):
    """Observation is not a finite real number."""


class InsufficientData(P2Error, ValueError):
    """Read attempted before any observation was ingested."""


class IndexOutOfRange(P2Error, IndexError):
    """Marker or bin index outside the estimator's domain."""


class Uninitialized(P2Error, RuntimeError):
    """Cold-state buffer used out of order."""


__all__ = [
    "IndexOutOfRange",
    "InsufficientData",
    "InvalidInput",
    "InvalidParameter",
    "P2Error",
    "Uninitialized",
]
