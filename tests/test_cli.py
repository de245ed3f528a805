# tests/test_cli.py
from __future__ import annotations

import io
import subprocess
import sys
from pathlib import Path

import pytest
from conftest import SCENARIO

from strictstrings.cli import main

_ERRORS = b"Unknown exception\x00connection refused\x00bad allocation"


@pytest.fixture
def scenario_file(tmp_path: Path) -> Path:
    f = tmp_path / "sample.bin"
    f.write_bytes(SCENARIO)
    return f


def test_cli_extracts_strings(scenario_file: Path, capsys: pytest.CaptureFixture[str]):
    assert main([str(scenario_file), "-q"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "Hello, world!\n"
    assert captured.err == ""


def test_cli_status_on_stderr(scenario_file: Path, capsys: pytest.CaptureFixture[str]):
    assert main([str(scenario_file)]) == 0
    captured = capsys.readouterr()
    assert captured.out == "Hello, world!\n"
    assert "Found 3 candidate strings" in captured.err
    assert "language" in captured.err


def test_cli_bytes_flag(scenario_file: Path, capsys: pytest.CaptureFixture[str]):
    main([str(scenario_file), "-q", "--bytes"])
    assert capsys.readouterr().out == (
        "Hello, world!\t0x00000000-0x0000000d ascii 13 bytes\n"
    )


def test_cli_language_zero(scenario_file: Path, capsys: pytest.CaptureFixture[str]):
    main([str(scenario_file), "-q", "-t", "0"])
    assert capsys.readouterr().out.splitlines() == [
        "Hello, world!",
        "48656c6c6f776f726c64",
    ]


def test_cli_sort(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    f = tmp_path / "errors.bin"
    f.write_bytes(_ERRORS)
    main([str(f), "-q"])
    assert capsys.readouterr().out.splitlines() == [
        "Unknown exception",
        "connection refused",
        "bad allocation",
    ]
    main([str(f), "-q", "--sort"])
    assert capsys.readouterr().out.splitlines() == [
        "bad allocation",
        "connection refused",
        "Unknown exception",
    ]


def test_cli_encoding_selection(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    f = tmp_path / "wide.bin"
    f.write_bytes(b"\xff\xfe" + "Unknown exception".encode("utf-16-le"))
    assert main([str(f), "-q", "-e", "ascii"]) == 1
    assert main([str(f), "-q", "-e", "wide"]) == 0
    assert capsys.readouterr().out == "Unknown exception\n"


def test_cli_out_file(scenario_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    out = tmp_path / "strings.txt"
    assert main([str(scenario_file), "-q", "-o", str(out)]) == 0
    assert out.read_text() == "Hello, world!\n"
    assert capsys.readouterr().out == ""


def test_cli_logs_directory(scenario_file: Path, tmp_path: Path):
    logs = tmp_path / "logs"
    main([str(scenario_file), "-q", "-l", str(logs)])
    assert (logs / "filtered_by_language.txt").read_text() == (
        "48656c6c6f776f726c64\t0x0000000e\n"
    )
    assert (logs / "filtered_by_ngram.txt").read_text() == "xk7!!!\t0x00000023\n"
    assert (logs / "filtered_by_similarity.txt").read_text() == ""


def test_cli_no_strings_found(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    f = tmp_path / "noise.bin"
    f.write_bytes(b"\x00\x01\x02\xff")
    assert main([str(f)]) == 1
    assert "No strings found." in capsys.readouterr().err


def test_cli_empty_file(tmp_path: Path):
    f = tmp_path / "empty.bin"
    f.write_bytes(b"")
    assert main([str(f), "-q"]) == 1


def test_cli_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    missing = tmp_path / "missing.bin"
    assert main([str(missing)]) == 1
    assert f"strictstrings: {missing}:" in capsys.readouterr().err


def test_cli_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(SCENARIO)))
    assert main(["-", "-q"]) == 0
    assert capsys.readouterr().out == "Hello, world!\n"


@pytest.mark.parametrize(
    "args",
    [
        ["-m", "10", "-M", "5"],
        ["-m", "0"],
        ["-s", "0"],
        ["-s", "1.5"],
        ["-t", "-0.1"],
        ["-W", "-1"],
        ["--workers", "0"],
        ["--model", "no-such-model"],
    ],
)
def test_cli_bad_settings_exit_2(scenario_file: Path, args: list[str]):
    with pytest.raises(SystemExit) as exc_info:
        main([str(scenario_file), *args])
    assert exc_info.value.code == 2


def test_cli_version(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "1.0.0" in capsys.readouterr().out


def test_cli_module_entry_point(scenario_file: Path):
    result = subprocess.run(
        [sys.executable, "-m", "strictstrings", str(scenario_file), "-q"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert result.stdout == "Hello, world!\n"
