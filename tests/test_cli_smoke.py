import json

import numpy as np
import pytest

from pyopticsof.cli import load_table, main


def _write_line_csv(path, *, with_ids: bool = False, header: bool = False) -> None:
    rows = []
    if header:
        rows.append("id,x" if with_ids else "x")
    for name, value in zip(["p0", "p1", "p2", "p3", "far"], [0.0, 1.0, 2.0, 3.0, 10.0]):
        rows.append(f"{name},{value}" if with_ids else f"{value}")
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")


def test_cli_importable():
    assert callable(main)


def test_cli_scores_csv_and_writes_report(tmp_path, capsys):
    data = tmp_path / "line.csv"
    _write_line_csv(data, with_ids=True, header=True)
    out = tmp_path / "report.json"
    records = tmp_path / "records.jsonl"

    code = main(
        [
            str(data),
            "--min-pts",
            "2",
            "--ids-column",
            "--skip-header",
            "1",
            "--top",
            "2",
            "--output",
            str(out),
            "--records",
            str(records),
        ]
    )
    assert code == 0

    printed = capsys.readouterr().out.strip().splitlines()
    assert len(printed) == 2
    assert printed[0].split("\t")[:2] == ["1", "far"]

    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["config"]["min_pts"] == 2
    assert report["n_objects"] == 5
    scores = {entry["id"]: entry["score"] for entry in report["result"]["scores"]}
    assert [entry["id"] for entry in report["result"]["scores"]] == ["p0", "p1", "p2", "p3", "far"]
    assert scores["far"] == pytest.approx(4.0)
    assert report["result"]["meta"]["observed_max"] == pytest.approx(4.0)
    assert report["top"][0]["id"] == "far"
    assert report["schema_version"] == 1

    lines = records.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 5
    first = json.loads(lines[0])
    assert first["id"] == "far"
    assert first["rank"] == 1
    assert first["normalized"] == 1.0


def test_cli_reads_npy_with_config(tmp_path, capsys):
    data = tmp_path / "line.npy"
    np.save(data, np.asarray([0.0, 1.0, 2.0, 3.0, 10.0]))
    config = tmp_path / "cfg.json"
    config.write_text(json.dumps({"optics_of": {"min_pts": 2, "backend": "sklearn"}}), encoding="utf-8")

    code = main([str(data), "--config", str(config), "--top", "1"])
    assert code == 0
    assert capsys.readouterr().out.split("\t")[1] == "4"


def test_cli_requires_min_pts(tmp_path, capsys):
    data = tmp_path / "line.csv"
    _write_line_csv(data)

    code = main([str(data)])
    assert code == 1
    assert "--min-pts" in capsys.readouterr().err


def test_cli_reports_insufficient_data(tmp_path, capsys):
    data = tmp_path / "line.csv"
    _write_line_csv(data)

    code = main([str(data), "--min-pts", "9"])
    assert code == 1
    assert "min_pts=9" in capsys.readouterr().err


def test_cli_rejects_min_pts_of_one(tmp_path, capsys):
    data = tmp_path / "line.csv"
    _write_line_csv(data)

    code = main([str(data), "--min-pts", "1"])
    assert code == 1
    assert "min_pts" in capsys.readouterr().err


def test_load_table_whitespace_text(tmp_path):
    data = tmp_path / "points.txt"
    data.write_text("0 0\n1 1\n2 2\n", encoding="utf-8")

    X, ids = load_table(data)
    assert X.shape == (3, 2)
    assert ids is None


def test_load_table_reports_non_numeric_values(tmp_path):
    data = tmp_path / "points.csv"
    _write_line_csv(data, header=True)

    try:
        load_table(data)
    except ValueError as exc:
        assert "--skip-header" in str(exc)
    else:
        raise AssertionError("Expected ValueError for the header row")
