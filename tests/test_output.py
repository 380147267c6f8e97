"""Tests for report sinks and report finalization."""

import threading

import polars as pl
import yaml

from subsystem_audit.output import (
    REPORT_HEADERS,
    ReportSink,
    ReportSinks,
    finalize_reports,
    read_report,
    sort_report,
)


def test_sink_writes_header_and_rows(tmp_path):
    path = tmp_path / "errors.tbl"
    sink = ReportSink(path, REPORT_HEADERS["errors"])

    sink.write_row("Iron Transport", "line 1: unexpected end")
    sink.close()

    assert path.read_text() == (
        "Subsystem\terror_message\n"
        "Iron Transport\tline 1: unexpected end\n"
    )
    assert sink.row_count == 1


def test_sink_replaces_embedded_tabs(tmp_path):
    path = tmp_path / "errors.tbl"
    sink = ReportSink(path, REPORT_HEADERS["errors"])

    sink.write_row("Name", "bad\tmessage\nhere")
    sink.close()

    assert path.read_text().splitlines()[1] == "Name\tbad message here"


def test_write_rows_are_contiguous(tmp_path):
    """Rows written in one call never interleave with another writer's rows."""
    path = tmp_path / "bvSummary.tbl"
    sink = ReportSink(path, REPORT_HEADERS["bvSummary"])

    def worker(name):
        for _ in range(20):
            sink.write_rows([(name, "", 0, "1", "0", i) for i in range(5)])

    threads = [threading.Thread(target=worker, args=(f"S{i}",)) for i in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    sink.close()

    lines = path.read_text().splitlines()[1:]
    assert len(lines) == 6 * 20 * 5
    for start in range(0, len(lines), 5):
        block = lines[start:start + 5]
        assert len({line.split("\t")[0] for line in block}) == 1
        assert [line.split("\t")[-1] for line in block] == ["0", "1", "2", "3", "4"]


def test_report_sinks_create_all_files(tmp_path):
    out_dir = tmp_path / "reports"

    with ReportSinks(out_dir) as sinks:
        sinks["missing"].write_row("Heme Uptake", "", "", "", "", "")

    assert set(p.name for p in out_dir.glob("*.tbl")) == {
        f"{name}.tbl" for name in REPORT_HEADERS
    }
    assert sinks.paths["subReport"] == out_dir / "subReport.tbl"


def test_sort_report_is_stable(tmp_path):
    path = tmp_path / "badVariants.tbl"
    path.write_text(
        "Subsystem\tgood\tgenome_id\texpected\tactual\texpected_roles\tactual_roles\n"
        "Zinc\t\t1.1\t1\t0\tA/B\t/A\n"
        "Iron\t\t2.2\t2\t0\t/A, B\t/A\n"
        "Iron\t\t1.1\t2\t0\tB/A\t/A\n"
    )

    assert sort_report(path, ["Subsystem"]) == 3

    assert path.read_text().splitlines()[1:] == [
        "Iron\t\t2.2\t2\t0\t/A, B\t/A",
        "Iron\t\t1.1\t2\t0\tB/A\t/A",
        "Zinc\t\t1.1\t1\t0\tA/B\t/A",
    ]


def test_read_report_keeps_strings(tmp_path):
    path = tmp_path / "ivSummary.tbl"
    path.write_text("Subsystem\tgood\tbad_ids\tinvalid\tactual\tcount\nIron\tY\t0\t-1\t0\t3\n")

    df = read_report(path)

    assert df.schema["count"] == pl.String
    assert df["invalid"].to_list() == ["-1"]


def test_finalize_reports(tmp_path):
    out_dir = tmp_path / "reports"
    with ReportSinks(out_dir) as sinks:
        sinks["subReport"].write_row("Zinc", 1, 1, 0, 0, 0, 0, 0, 0, 0)
        sinks["subReport"].write_row("Iron", 2, 3, 0, 0, 1, 1, 0, 0, 0)

    outputs = finalize_reports(out_dir, {"processed": 2})

    assert outputs["reports"]["subReport"] == out_dir / "subReport.tbl"
    lines = (out_dir / "subReport.tbl").read_text().splitlines()
    assert lines[1].startswith("Iron\t")
    assert lines[2].startswith("Zinc\t")

    with open(outputs["provenance"]) as f:
        provenance = yaml.safe_load(f)
    assert provenance["row_counts"]["subReport"] == 2
    assert provenance["row_counts"]["errors"] == 0
    assert provenance["statistics"] == {"processed": 2}
    assert "subReport.tbl" in provenance["output_files"]
    assert "generated_at" in provenance


def test_finalize_skips_missing_reports(tmp_path):
    (tmp_path / "errors.tbl").write_text("Subsystem\terror_message\n")

    outputs = finalize_reports(tmp_path)

    assert list(outputs["reports"]) == ["errors"]
