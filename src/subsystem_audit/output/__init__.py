"""Output generation: concurrent report streams and deterministic finalization."""

from subsystem_audit.output.sinks import REPORT_HEADERS, ReportSink, ReportSinks
from subsystem_audit.output.writers import finalize_reports, read_report, sort_report

__all__ = [
    "REPORT_HEADERS",
    "ReportSink",
    "ReportSinks",
    "finalize_reports",
    "read_report",
    "sort_report",
]
