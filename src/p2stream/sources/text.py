from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

import numpy as np
from numpy.typing import NDArray

from p2stream.contracts import ValueSource
from p2stream.errors import InvalidInput, InvalidParameter

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[,\s]+")


class TextValueSource(ValueSource):
    """Stream numbers from a text file (or ``-`` for stdin).

    Values may be separated by whitespace or commas; ``#`` starts a comment.
    """

    def __init__(self, path: str | Path, chunk_size: int = 65536) -> None:
        if chunk_size < 1:
            raise InvalidParameter("chunk_size must be >= 1")
        self._path = path if path == "-" else Path(path)
        self._chunk_size = chunk_size

    def iter_chunks(self) -> Iterator[NDArray[np.float64]]:
        if self._path == "-":
            yield from self._iter_stream(sys.stdin)
            return
        with open(self._path, encoding="utf-8") as handle:
            yield from self._iter_stream(handle)

    def _iter_stream(self, handle: TextIO) -> Iterator[NDArray[np.float64]]:
        logger.info("Starting streaming for %s.", self._path)
        pending: list[float] = []
        value_count = 0
        try:
            for line_number, line in enumerate(handle, start=1):
                content = line.split("#", 1)[0].strip()
                if not content:
                    continue
                for token in _SEPARATORS.split(content):
                    if not token:
                        continue
                    try:
                        pending.append(float(token))
                    except ValueError:
                        logger.error(
                            "Malformed value %r at %s line %d.",
                            token,
                            self._path,
                            line_number,
                        )
                        raise InvalidInput(
                            f"line {line_number}: {token!r} is not a number"
                        ) from None
                    if len(pending) == self._chunk_size:
                        value_count += len(pending)
                        yield np.asarray(pending, dtype=np.float64)
                        pending = []
            if pending:
                value_count += len(pending)
                yield np.asarray(pending, dtype=np.float64)
        except UnicodeDecodeError as exc:
            logger.error("Could not decode %s as UTF-8: %s.", self._path, exc)
            raise InvalidInput(f"{self._path} is not valid UTF-8 text: {exc}") from exc
        finally:
            logger.info(
                "Completed streaming for %s (values=%d).", self._path, value_count
            )
