from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from p2stream.errors import InvalidInput, InvalidParameter
from p2stream.sources import NumpyValueSource, TextValueSource


def test_text_source_parses_separators_and_comments(tmp_path: Path) -> None:
    path = tmp_path / "values.txt"
    path.write_text("# header\n1.5, 2\n\n3 4e1\t-5  # trailing\n", encoding="utf-8")

    chunks = list(TextValueSource(path).iter_chunks())

    assert len(chunks) == 1
    np.testing.assert_array_equal(chunks[0], [1.5, 2.0, 3.0, 40.0, -5.0])
    assert chunks[0].dtype == np.float64


def test_text_source_respects_chunk_size(tmp_path: Path) -> None:
    path = tmp_path / "values.txt"
    path.write_text("\n".join(str(i) for i in range(7)), encoding="utf-8")

    chunks = list(TextValueSource(path, chunk_size=3).iter_chunks())

    assert [chunk.size for chunk in chunks] == [3, 3, 1]
    np.testing.assert_array_equal(np.concatenate(chunks), np.arange(7.0))


def test_text_source_reports_malformed_line(tmp_path: Path) -> None:
    path = tmp_path / "values.txt"
    path.write_text("1\n2\nthree\n", encoding="utf-8")

    with pytest.raises(InvalidInput, match="line 3"):
        list(TextValueSource(path).iter_chunks())


def test_text_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        list(TextValueSource(tmp_path / "missing.txt").iter_chunks())


def test_numpy_source_flattens_in_chunks(tmp_path: Path) -> None:
    path = tmp_path / "values.npy"
    data = np.arange(10, dtype=np.int32).reshape(2, 5)
    np.save(path, data)

    chunks = list(NumpyValueSource(path, chunk_size=4).iter_chunks())

    assert [chunk.size for chunk in chunks] == [4, 4, 2]
    assert all(chunk.dtype == np.float64 for chunk in chunks)
    np.testing.assert_array_equal(np.concatenate(chunks), np.arange(10.0))


def test_numpy_source_rejects_non_numeric(tmp_path: Path) -> None:
    path = tmp_path / "labels.npy"
    np.save(path, np.array(["a", "b"]))

    with pytest.raises(InvalidInput, match="non-numeric"):
        list(NumpyValueSource(path).iter_chunks())


@pytest.mark.parametrize("source_type", [TextValueSource, NumpyValueSource])
def test_sources_reject_bad_chunk_size(
    source_type: type[TextValueSource] | type[NumpyValueSource], tmp_path: Path
) -> None:
    with pytest.raises(InvalidParameter):
        source_type(tmp_path / "values", chunk_size=0)


def test_text_source_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "values.txt"
    path.write_bytes(b"1.0\n\xff\xfe 2.0\n")

    with pytest.raises(InvalidInput, match="UTF-8"):
        list(TextValueSource(path).iter_chunks())


def test_numpy_source_rejects_text_file(tmp_path: Path) -> None:
    path = tmp_path / "values.npy"
    path.write_text("1.0\n2.0\n", encoding="utf-8")

    with pytest.raises(InvalidInput, match="not a valid .npy file"):
        list(NumpyValueSource(path).iter_chunks())


def test_numpy_source_rejects_npz_archive(tmp_path: Path) -> None:
    path = tmp_path / "values.npy"
    with path.open("wb") as handle:
        np.savez(handle, values=np.arange(4.0))

    with pytest.raises(InvalidInput, match="not a single .npy array"):
        list(NumpyValueSource(path).iter_chunks())


def test_numpy_source_rejects_boolean_array(tmp_path: Path) -> None:
    path = tmp_path / "flags.npy"
    np.save(path, np.array([True, False]))

    with pytest.raises(InvalidInput, match="non-numeric"):
        list(NumpyValueSource(path).iter_chunks())
