"""Deterministic report finalization with provenance sidecar."""

from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml

from subsystem_audit.output.sinks import REPORT_HEADERS, REPORT_SUFFIX

# Column each report is sorted on after the run. Sorts are stable, so rows
# written contiguously by one subsystem keep their relative order.
SORT_KEYS: dict[str, list[str]] = {
    "subReport": ["Subsystem"],
    "badVariants": ["Subsystem"],
    "bvSummary": ["Subsystem"],
    "ivSummary": ["Subsystem"],
    "missing": ["Subsystem"],
    "errors": ["Subsystem"],
    "badIds": ["Subsystem"],
    "mismatch": ["feature_id"],
    "oldCodes": ["Subsystem"],
}


def read_report(path: Path) -> pl.DataFrame:
    """Read a report file with every column as a string."""
    return pl.read_csv(
        path,
        separator="\t",
        quote_char=None,
        infer_schema_length=0,
    )


def sort_report(path: Path, sort_by: list[str]) -> int:
    """
    Rewrite a report file sorted on the given columns.

    Subsystems finish in nondeterministic order when validated in parallel;
    sorting makes repeated runs on the same inputs produce identical files.

    Args:
        path: Report file (tab-separated with header)
        sort_by: Columns to sort on

    Returns:
        Number of data rows in the report
    """
    df = read_report(path)
    df = df.sort(sort_by, maintain_order=True)
    df.write_csv(path, separator="\t", include_header=True, quote_style="never")
    return df.height


def finalize_reports(output_dir: Path, statistics: dict | None = None) -> dict:
    """
    Sort every report in the output directory and write a provenance sidecar.

    Args:
        output_dir: Directory holding the .tbl report files
        statistics: Run totals to record in the sidecar

    Returns:
        Dictionary with output file paths:
        {
            "reports": {report name: Path},
            "provenance": Path to YAML provenance sidecar
        }

    Notes:
        - Reports missing from the directory are skipped
        - Provenance YAML includes:
          - generated_at timestamp
          - output_files list
          - row_counts per report
          - statistics passed in by the caller
    """
    output_dir = Path(output_dir)
    reports: dict[str, Path] = {}
    row_counts: dict[str, int] = {}

    for name in REPORT_HEADERS:
        path = output_dir / f"{name}{REPORT_SUFFIX}"
        if not path.is_file():
            continue
        row_counts[name] = sort_report(path, SORT_KEYS[name])
        reports[name] = path

    provenance_path = output_dir / "reports.provenance.yaml"
    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [path.name for path in reports.values()],
        "row_counts": row_counts,
        "statistics": statistics or {},
    }
    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    return {
        "reports": reports,
        "provenance": provenance_path,
    }
