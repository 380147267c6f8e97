"""Shared tab-separated report streams written by concurrent workers.

Every stream has its own lock, so workers writing different reports never
wait on each other.
"""

import threading
from pathlib import Path
from typing import Iterable

# Report file base name -> header columns
REPORT_HEADERS: dict[str, list[str]] = {
    "subReport": [
        "Subsystem", "roles", "genomes", "bad_ids", "bad_roles",
        "bad_variants", "serious", "invalid", "mismatch", "bad_genomes",
    ],
    "badVariants": [
        "Subsystem", "good", "genome_id", "expected", "actual",
        "expected_roles", "actual_roles",
    ],
    "bvSummary": ["Subsystem", "good", "bad_ids", "expected", "actual", "count"],
    "ivSummary": ["Subsystem", "good", "bad_ids", "invalid", "actual", "count"],
    "missing": ["Subsystem", "version", "superclass", "class", "subclass", "good"],
    "errors": ["Subsystem", "error_message"],
    "badIds": ["Subsystem", "roles", "good", "bad_ids"],
    "mismatch": ["feature_id", "actual_role", "subsystem_role"],
    "oldCodes": ["Subsystem", "roles", "active_genomes", "good", "total_codes", "old_codes"],
}

REPORT_SUFFIX = ".tbl"


def _clean(value: object) -> str:
    return str(value).replace("\t", " ").replace("\n", " ")


class ReportSink:
    """One tab-separated report file guarded by its own lock."""

    def __init__(self, path: Path, header: list[str]):
        self.path = Path(path)
        self.header = header
        self.row_count = 0
        self._lock = threading.Lock()
        self._handle = open(self.path, "w", encoding="utf-8", newline="\n")
        self._handle.write("\t".join(header) + "\n")

    def write_row(self, *fields: object) -> None:
        self.write_rows([fields])

    def write_rows(self, rows: Iterable[Iterable[object]]) -> None:
        """Write several rows contiguously under one lock acquisition."""
        lines = ["\t".join(_clean(f) for f in row) + "\n" for row in rows]
        if not lines:
            return
        with self._lock:
            self._handle.writelines(lines)
            self.row_count += len(lines)

    def flush(self) -> None:
        with self._lock:
            self._handle.flush()

    def close(self) -> None:
        with self._lock:
            if not self._handle.closed:
                self._handle.close()


class ReportSinks:
    """The full set of audit report streams for one output directory.

    Use as a context manager so every file is closed when the run ends.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._sinks: dict[str, ReportSink] = {}
        try:
            for name, header in REPORT_HEADERS.items():
                self._sinks[name] = ReportSink(self.output_dir / f"{name}{REPORT_SUFFIX}", header)
        except OSError:
            self.close()
            raise

    def __getitem__(self, name: str) -> ReportSink:
        return self._sinks[name]

    def __iter__(self):
        return iter(self._sinks.values())

    @property
    def paths(self) -> dict[str, Path]:
        return {name: sink.path for name, sink in self._sinks.items()}

    def flush(self) -> None:
        for sink in self._sinks.values():
            sink.flush()

    def close(self) -> None:
        for sink in self._sinks.values():
            sink.close()

    def __enter__(self) -> "ReportSinks":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
