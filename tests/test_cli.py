from __future__ import annotations

from pathlib import Path

import pytest

from cli import main


@pytest.fixture
def tables(tmp_path: Path) -> tuple[Path, Path]:
    buyers = tmp_path / "buyers.csv"
    suppliers = tmp_path / "suppliers.csv"
    buyers.write_text("PartNo,Name\n1,Bolt\n2,Screw\n", encoding="utf-8")
    suppliers.write_text("PartNo,Dept\n1,23\n1,07\n3,12\n", encoding="utf-8")
    return buyers, suppliers


def _result_block(out: str) -> list[str]:
    block = out.split("=== RESULT ===\n", 1)[1]
    return [line.rstrip() for line in block.strip("\n").split("\n")]


def test_demo_prints_three_tables(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--demo"])
    out = capsys.readouterr().out

    assert code == 0
    assert "=== BUYERS TABLE ===" in out
    assert "=== SUPPLIERS IN DEPT 23 ===" in out
    assert "=== JOINED DATA ===" in out
    assert "Bolt, hex" in out


def test_join_defaults_to_shared_column(tables, capsys: pytest.CaptureFixture[str]) -> None:
    buyers, suppliers = tables
    code = main([str(buyers), str(suppliers), "--width", "8"])
    out = capsys.readouterr().out

    assert code == 0
    assert "=== BUYERS ===" in out
    assert "=== SUPPLIERS ===" in out
    assert _result_block(out) == [
        "PartNo  Name    Dept",
        "-" * 24,
        "1       Bolt    23",
        "1       Bolt    07",
    ]


def test_select_and_project_pipeline(tables, capsys: pytest.CaptureFixture[str]) -> None:
    buyers, suppliers = tables
    code = main(
        [str(buyers), str(suppliers), "--join", "PartNo", "--select", "Dept=07", "--project", "Name,Dept", "--width", "6"]
    )
    out = capsys.readouterr().out

    assert code == 0
    assert _result_block(out) == ["Name  Dept", "-" * 12, "Bolt  07"]


def test_single_table_select(tables, capsys: pytest.CaptureFixture[str]) -> None:
    _, suppliers = tables
    code = main([str(suppliers), "--select", "Dept=23", "--width", "7"])
    out = capsys.readouterr().out

    assert code == 0
    assert _result_block(out) == ["PartNo Dept", "-" * 14, "1      23"]


def test_unknown_column_exits_with_error(tables, capsys: pytest.CaptureFixture[str]) -> None:
    buyers, _ = tables
    code = main([str(buyers), "--select", "Missing=x"])
    captured = capsys.readouterr()
    err = captured.err

    assert code == 1
    assert "Error [ColumnNotFound]" in err
    assert captured.out == ""


def test_missing_file_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main([str(tmp_path / "absent.csv")])
    err = capsys.readouterr().err

    assert code == 1
    assert "Error [SourceUnavailable]" in err


def test_bad_selection_argument_is_usage_error(tables) -> None:
    buyers, _ = tables
    with pytest.raises(SystemExit) as excinfo:
        main([str(buyers), "--select", "Dept"])
    assert excinfo.value.code == 2


def test_requires_input_without_demo() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_tables_without_shared_column(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    left = tmp_path / "l.csv"
    right = tmp_path / "r.csv"
    left.write_text("a\n1\n", encoding="utf-8")
    right.write_text("b\n1\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main([str(left), str(right)])
    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert "tables share no column" in captured.err
    assert captured.out == ""


def test_custom_delimiter(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "t.csv"
    path.write_text('a;b\n1;"x;y"\n3;4\n', encoding="utf-8")
    code = main([str(path), "--delimiter", ";", "--select", "a=1", "--width", "4"])
    out = capsys.readouterr().out

    assert code == 0
    assert _result_block(out) == ["a   b", "-" * 8, "1   x;y"]


@pytest.mark.parametrize(
    ("flag", "value", "message"),
    [
        ("--delimiter", ";;", "delimiter must be a single character"),
        ("--delimiter", '"', "delimiter must be a single character"),
        ("--delimiter", "", "delimiter must be a single character"),
        ("--width", "0", "column width must be at least 1"),
        ("--width", "-1", "column width must be at least 1"),
        ("--width", "wide", "invalid literal"),
    ],
)
def test_rejects_bad_delimiter_and_width(
    tables, capsys: pytest.CaptureFixture[str], flag: str, value: str, message: str
) -> None:
    buyers, _ = tables
    with pytest.raises(SystemExit) as excinfo:
        main([str(buyers), flag, value])
    captured = capsys.readouterr()

    assert excinfo.value.code == 2
    assert message in captured.err
    assert captured.out == ""


def test_width_one_is_accepted(tables, capsys: pytest.CaptureFixture[str]) -> None:
    buyers, _ = tables
    assert main([str(buyers), "--width", "1"]) == 0
    assert _result_block(capsys.readouterr().out)[0] == "PartNoName"


@pytest.mark.parametrize(
    "extra",
    [
        ["in.csv"],
        ["--select", "Dept=23"],
        ["--project", "Name"],
        ["--join", "PartNo"],
    ],
)
def test_demo_rejects_inputs_and_operators(extra: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--demo", *extra])

    assert excinfo.value.code == 2
    assert "--demo takes no input tables" in capsys.readouterr().err
