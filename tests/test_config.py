"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from subsystem_audit.config import load_config, load_config_with_overrides
from subsystem_audit.config.schema import AuditConfig


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config("config/default.yaml")

    assert isinstance(config, AuditConfig)
    assert config.core_dir == Path("FIGdisk/FIG/Data")
    assert config.roles_file is None
    assert config.clear_output is False
    assert config.validation.workers == 4
    assert config.validation.feature_types == ["peg", "rna"]


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text(f"""
output_dir: {tmp_path / "out"}
validation:
  workers: 2
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    # Check that error mentions missing field
    assert "core_dir" in str(exc_info.value)


def test_invalid_worker_count(tmp_path):
    """Test that workers < 1 raises ValidationError."""
    invalid_config = tmp_path / "invalid_workers.yaml"
    invalid_config.write_text(f"""
core_dir: {tmp_path}
output_dir: {tmp_path / "out"}
validation:
  workers: 0
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "workers" in str(exc_info.value)


def test_empty_feature_types_rejected(tmp_path):
    invalid_config = tmp_path / "invalid_types.yaml"
    invalid_config.write_text(f"""
core_dir: {tmp_path}
output_dir: {tmp_path / "out"}
validation:
  feature_types: []
""")

    with pytest.raises(ValidationError):
        load_config(invalid_config)


def test_config_hash_deterministic():
    """Test that config hash is deterministic and changes with config."""
    config1 = load_config("config/default.yaml")
    config2 = load_config("config/default.yaml")

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64

    config3 = load_config_with_overrides(
        "config/default.yaml",
        {"validation.workers": 8},
    )
    assert config3.config_hash() != config1.config_hash()


def test_config_overrides():
    """Test dotted overrides reach nested sections and None is ignored."""
    config = load_config_with_overrides(
        "config/default.yaml",
        {
            "validation.workers": 16,
            "clear_output": True,
            "roles_file": None,
        },
    )

    assert config.validation.workers == 16
    assert config.clear_output is True
    assert config.roles_file is None


def test_invalid_override_rejected():
    """Test that overrides are validated like file values."""
    with pytest.raises(ValidationError):
        load_config_with_overrides(
            "config/default.yaml",
            {"validation.progress_interval_seconds": 0},
        )


def test_output_dir_created(tmp_path):
    """Test that output_dir is created on load."""
    out_dir = tmp_path / "nested" / "reports"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"""
core_dir: {tmp_path}
output_dir: {out_dir}
""")

    load_config(config_path)

    assert out_dir.is_dir()


def test_derived_paths(tmp_path):
    config = AuditConfig(core_dir=tmp_path / "Data", output_dir=tmp_path / "out")

    assert config.organism_dir == tmp_path / "Data" / "Organisms"
    assert config.subsystem_dir == tmp_path / "Data" / "Subsystems"
    assert config.resolved_roles_file() == tmp_path / "Data" / "subsystem.roles"

    custom = AuditConfig(
        core_dir=tmp_path / "Data",
        output_dir=tmp_path / "out",
        roles_file=tmp_path / "my.roles",
    )
    assert custom.resolved_roles_file() == tmp_path / "my.roles"


def test_missing_config_file():
    with pytest.raises(FileNotFoundError):
        load_config("does/not/exist.yaml")
