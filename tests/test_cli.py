import os

from stormeda.cli import main


def test_cli_writes_report_charts_and_export(tmp_path, storm_csv, event_types_file, capsys):
    out = tmp_path / "report.docx"
    export = tmp_path / "summary.csv"
    code = main([
        "--data", storm_csv,
        "--event-types", event_types_file,
        "--out", str(out),
        "--export", str(export),
    ])
    assert code == 0
    assert out.exists()
    assert export.exists()
    charts = tmp_path / "report_charts"
    assert "top_fatalities.png" in os.listdir(charts)

    printed = capsys.readouterr().out
    assert "Summarized 6 event types from 2007 onwards." in printed
    assert f"Report written to {out}" in printed


def test_cli_custom_charts_dir_and_cutoff(tmp_path, storm_csv):
    charts = tmp_path / "png"
    code = main([
        "--data", storm_csv,
        "--out", str(tmp_path / "r.docx"),
        "--charts-dir", str(charts),
        "--since", "2011",
    ])
    assert code == 0
    assert charts.is_dir()


def test_cli_missing_file_fails_without_report(tmp_path, capsys):
    out = tmp_path / "report.docx"
    code = main(["--data", str(tmp_path / "missing.csv.bz2"), "--out", str(out)])
    assert code == 1
    assert not out.exists()
    assert "Error:" in capsys.readouterr().out


def test_cli_bad_quantile_fails(tmp_path, storm_csv, capsys):
    code = main(["--data", storm_csv, "--out", str(tmp_path / "r.docx"), "--quantile", "1.5"])
    assert code == 1
    assert "quantile must be between 0 and 1" in capsys.readouterr().out


def test_cli_failed_report_leaves_no_export(tmp_path, storm_csv, capsys):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    export = tmp_path / "summary.csv"
    code = main([
        "--data", storm_csv,
        "--out", str(blocker / "report.docx"),
        "--charts-dir", str(tmp_path / "charts"),
        "--export", str(export),
    ])
    assert code == 1
    assert not export.exists()
    assert "Error:" in capsys.readouterr().out
