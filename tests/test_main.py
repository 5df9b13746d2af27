import csv
from datetime import datetime

import pytest

from file_importer import main as main_module
from file_importer.main import main, parse_args


@pytest.fixture
def src(tmp_path, set_mtime):
    d = tmp_path / "src"
    d.mkdir()
    note = d / "note.txt"
    note.write_text("hello")
    set_mtime(note, datetime(2022, 1, 2, 12, 0))
    return d


def test_parse_args_defaults(tmp_path):
    opts = parse_args(["--from", str(tmp_path / "a"), "--to", str(tmp_path / "b")])
    assert opts.source == (tmp_path / "a").resolve()
    assert opts.extension_filter is None
    assert opts.start_date == 0
    assert opts.end_date == 99999999
    assert opts.max_workers == 10
    assert not opts.dry_run and not opts.strict


def test_parse_args_all_options(tmp_path):
    opts = parse_args([
        "--from", "a", "--to", "b", "--filter", "JPG",
        "--start", "20220101", "--end", "20221231",
        "--workers", "3", "--dry-run", "--strict", "-v",
        "--report-csv", str(tmp_path / "r.csv"),
    ])
    assert opts.extension_filter == "JPG"
    assert (opts.start_date, opts.end_date) == (20220101, 20221231)
    assert opts.max_workers == 3
    assert opts.dry_run and opts.strict and opts.verbose


@pytest.mark.parametrize("argv", [
    [],
    ["--from", "a"],
    ["--to", "b"],
    ["--from", "a", "--to", "b", "--start", "2022-01-01"],
    ["--from", "a", "--to", "b", "--end", "123456789"],
    ["--from", "a", "--to", "b", "--workers", "0"],
])
def test_bad_arguments_exit_nonzero(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        parse_args(argv)
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_main_imports_files(src, tmp_path):
    dest = tmp_path / "dest"
    report = tmp_path / "report.csv"

    main(["--from", str(src), "--to", str(dest), "--report-csv", str(report)])

    assert (dest / "2022-01-02-txt" / "note.txt").read_text() == "hello"
    with open(report, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["Status"] for r in rows] == ["copied"]


def test_main_writes_log_file(src, tmp_path):
    log_file = tmp_path / "logs" / "import.log"
    main(["--from", str(src), "--to", str(tmp_path / "dest"), "--log-file", str(log_file)])
    assert "File Importer Started" in log_file.read_text(encoding="utf-8")


def test_main_missing_source_exits_1(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--from", str(tmp_path / "nope"), "--to", str(tmp_path / "dest")])
    assert exc.value.code == 1


def test_main_per_file_failures_are_not_fatal(src, tmp_path):
    dest = tmp_path / "dest"
    (dest / "2022-01-02-txt" / "note.txt").mkdir(parents=True)

    # Completes normally without --strict
    main(["--from", str(src), "--to", str(dest)])

    with pytest.raises(SystemExit) as exc:
        main(["--from", str(src), "--to", str(dest), "--strict"])
    assert exc.value.code == 1


def test_main_keyboard_interrupt(src, tmp_path, monkeypatch):
    def interrupted(self, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module.FileImporterApp, "run", interrupted)
    with pytest.raises(SystemExit) as exc:
        main(["--from", str(src), "--to", str(tmp_path / "dest")])
    assert exc.value.code == 1
