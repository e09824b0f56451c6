from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from p2stream.contracts import ValueSource
from p2stream.errors import InvalidInput, InvalidParameter

logger = logging.getLogger(__name__)


class NumpyValueSource(ValueSource):
    """Stream a ``.npy`` array, memory-mapped and flattened, in chunks."""

    def __init__(self, path: str | Path, chunk_size: int = 65536) -> None:
        if chunk_size < 1:
            raise InvalidParameter("chunk_size must be >= 1")
        self._path = Path(path)
        self._chunk_size = chunk_size

    def iter_chunks(self) -> Iterator[NDArray[np.float64]]:
        try:
            array = np.load(self._path, mmap_mode="r", allow_pickle=False)
        except (ValueError, EOFError) as exc:
            logger.error("Could not read %s as a .npy array: %s.", self._path, exc)
            raise InvalidInput(f"{self._path} is not a valid .npy file: {exc}") from exc
        if not isinstance(array, np.ndarray):
            # np.load hands back an NpzFile for .npz archives.
            array.close()
            logger.error("File %s is not a single .npy array.", self._path)
            raise InvalidInput(f"{self._path} is not a single .npy array")
        if array.dtype.kind not in "iuf":
            logger.error("Array %s has non-numeric dtype %s.", self._path, array.dtype)
            raise InvalidInput(f"{self._path} holds non-numeric dtype {array.dtype}")

        flat = array.reshape(-1)
        logger.info(
            "Starting streaming for %s shape=%s dtype=%s.",
            self._path,
            array.shape,
            array.dtype,
        )
        for start in range(0, int(flat.size), self._chunk_size):
            chunk = np.asarray(
                flat[start : start + self._chunk_size], dtype=np.float64
            )
            logger.debug("Yielding chunk at %d size=%d.", start, int(chunk.size))
            yield chunk
        logger.info("Completed streaming for %s (values=%d).", self._path, flat.size)
