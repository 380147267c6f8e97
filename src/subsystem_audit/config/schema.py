"""Pydantic models for audit configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ValidationSettings(BaseModel):
    """Settings for the variant rule validation pass."""

    workers: int = Field(
        default=4,
        ge=1,
        le=256,
        description="Number of subsystems validated concurrently",
    )
    feature_types: list[str] = Field(
        default_factory=lambda: ["peg", "rna"],
        min_length=1,
        description="Feature types whose functional assignments are read",
    )
    progress_interval_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Minimum seconds between genome progress messages in one subsystem",
    )


class AuditConfig(BaseModel):
    """Main audit configuration."""

    core_dir: Path = Field(
        ...,
        description="CoreSEED data directory (contains Organisms and Subsystems)",
    )
    output_dir: Path = Field(
        ...,
        description="Directory receiving the report files",
    )
    roles_file: Path | None = Field(
        default=None,
        description="Role definition file (default: subsystem.roles in core_dir)",
    )
    filter_file: Path | None = Field(
        default=None,
        description="Tab-separated file of subsystem names to check (first column)",
    )
    clear_output: bool = Field(
        default=False,
        description="Erase the output directory before writing reports",
    )
    validation: ValidationSettings = Field(
        default_factory=ValidationSettings,
        description="Validation pass settings",
    )

    @field_validator("output_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def organism_dir(self) -> Path:
        return self.core_dir / "Organisms"

    @property
    def subsystem_dir(self) -> Path:
        return self.core_dir / "Subsystems"

    def resolved_roles_file(self) -> Path:
        """Role definition file, falling back to the CoreSEED default location."""
        if self.roles_file is not None:
            return self.roles_file
        return self.core_dir / "subsystem.roles"

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values, recorded in
        the provenance sidecar so report sets can be tied to their inputs.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
