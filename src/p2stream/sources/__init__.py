from .numpy_source import NumpyValueSource
from .text import TextValueSource

__all__ = ["NumpyValueSource", "TextValueSource"]
