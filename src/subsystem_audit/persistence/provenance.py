"""Run provenance for an audit: what was read, with which settings, and when."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProvenanceTracker:
    """Collects the steps of one audit run and writes them as a JSON sidecar.

    The sidecar ties a report directory to the CoreSEED inputs and the
    configuration hash that produced it.
    """

    def __init__(self, pipeline_version: str, config: "AuditConfig"):
        self.pipeline_version = pipeline_version
        self.config_hash = config.config_hash()
        self.inputs = {
            "core_dir": str(config.core_dir),
            "roles_file": str(config.resolved_roles_file()),
            "filter_file": str(config.filter_file) if config.filter_file else None,
            "workers": config.validation.workers,
        }
        self.processing_steps: list[dict] = []
        self.created_at = _stamp()

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        step = {"step_name": step_name, "timestamp": _stamp()}
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def create_metadata(self) -> dict:
        return {
            "pipeline_version": self.pipeline_version,
            "inputs": self.inputs,
            "config_hash": self.config_hash,
            "created_at": self.created_at,
            "processing_steps": self.processing_steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Write the metadata next to an output as {output_path}.provenance.json.

        Returns:
            Path of the written sidecar
        """
        sidecar_path = output_path.with_suffix(".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)
        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    @classmethod
    def from_config(cls, config: "AuditConfig") -> "ProvenanceTracker":
        """Create a tracker stamped with the installed subsystem_audit version."""
        from subsystem_audit import __version__

        return cls(__version__, config)
