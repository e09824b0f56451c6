from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from rich.console import Console

from p2stream.cli import run_cli


def _console() -> Console:
    return Console(
        record=True,
        force_terminal=False,
        color_system=None,
        width=120,
    )


def _write_values(tmp_path: Path, count: int = 100) -> Path:
    path = tmp_path / "values.txt"
    path.write_text(
        "\n".join(str(float(i)) for i in range(1, count + 1)) + "\n",
        encoding="utf-8",
    )
    return path


def test_cli_summarize_happy_path(tmp_path: Path) -> None:
    path = _write_values(tmp_path)
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    output = console.export_text()
    assert exit_code == 0
    assert "Summary for values.txt" in output
    assert "Quantiles" in output
    assert "p50:" in output
    assert "p99:" in output
    assert "Histogram (" not in output


def test_cli_summarize_with_histogram(tmp_path: Path) -> None:
    path = _write_values(tmp_path)
    console = _console()

    exit_code = run_cli(
        ["summarize", str(path), "-q", "0.5", "--bins", "4"], console=console
    )

    output = console.export_text()
    assert exit_code == 0
    assert "Histogram (4 bins)" in output
    assert "p50:" in output
    assert "p99:" not in output


def test_cli_summarize_json(tmp_path: Path) -> None:
    path = _write_values(tmp_path)
    console = _console()

    exit_code = run_cli(
        ["summarize", str(path), "--json", "-q", "0.25", "-q", "0.75", "--bins", "2"],
        console=console,
    )

    payload = json.loads(console.export_text())
    assert exit_code == 0
    assert payload["count"] == 100
    assert payload["min"] == 1.0
    assert payload["max"] == 100.0
    assert [item["p"] for item in payload["quantiles"]] == [0.25, 0.75]
    assert sum(item["count"] for item in payload["histogram"]) == 100


def test_cli_summarize_npy(tmp_path: Path) -> None:
    path = tmp_path / "samples.npy"
    np.save(path, np.linspace(0.0, 1.0, 501))
    console = _console()

    exit_code = run_cli(["summarize", str(path), "--json"], console=console)

    payload = json.loads(console.export_text())
    assert exit_code == 0
    assert payload["count"] == 501
    median = next(item for item in payload["quantiles"] if item["p"] == 0.5)
    assert abs(median["value"] - 0.5) < 0.01


def test_cli_summarize_missing_file(tmp_path: Path) -> None:
    console = _console()

    exit_code = run_cli(["summarize", str(tmp_path / "nope.txt")], console=console)

    assert exit_code == 2
    assert "Input not found" in console.export_text()


def test_cli_summarize_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.txt"
    path.write_text("# nothing here\n", encoding="utf-8")
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    assert exit_code == 1
    assert "No values to summarize" in console.export_text()


def test_cli_summarize_invalid_data(tmp_path: Path) -> None:
    path = tmp_path / "bad.txt"
    path.write_text("1\n2\nnan\n", encoding="utf-8")
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    assert exit_code == 1
    assert "Invalid data" in console.export_text()


def test_cli_summarize_invalid_quantile(tmp_path: Path) -> None:
    path = _write_values(tmp_path)
    console = _console()

    exit_code = run_cli(["summarize", str(path), "-q", "1.5"], console=console)

    assert exit_code == 2
    assert "Invalid argument" in console.export_text()


def test_cli_summarize_undecodable_text(tmp_path: Path) -> None:
    path = tmp_path / "values.txt"
    path.write_bytes(b"1.0\n\xff\xfe 2.0\n")
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    assert exit_code == 1
    assert "Invalid data" in console.export_text()


def test_cli_summarize_npy_with_text_body(tmp_path: Path) -> None:
    path = tmp_path / "values.npy"
    path.write_text("1.0\n2.0\n", encoding="utf-8")
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    assert exit_code == 1
    assert "Invalid data" in console.export_text()


def test_cli_summarize_npz_under_npy_name(tmp_path: Path) -> None:
    path = tmp_path / "values.npy"
    with path.open("wb") as handle:
        np.savez(handle, values=np.arange(4.0))
    console = _console()

    exit_code = run_cli(["summarize", str(path)], console=console)

    assert exit_code == 1
    assert "Invalid data" in console.export_text()
