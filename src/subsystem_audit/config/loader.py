"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import AuditConfig


def load_config(config_path: Path | str) -> AuditConfig:
    """
    Load and validate audit configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated AuditConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        yaml_content = f.read()

    return pydantic_yaml.parse_yaml_raw_as(AuditConfig, yaml_content)


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> AuditConfig:
    """
    Load config from YAML and apply command-line overrides.

    Keys may be dotted ("validation.workers") to reach nested sections.
    Overrides whose value is None are ignored, so unset CLI options leave
    the file value in place.

    Args:
        config_path: Path to YAML configuration file
        overrides: Dictionary of values to override

    Returns:
        Validated AuditConfig with overrides applied

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If final config is invalid
    """
    config = load_config(config_path)
    config_dict = config.model_dump()

    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_dict
        for part in parts[:-1]:
            target = target[part]
        target[parts[-1]] = value

    # Re-validate so overrides get the same checks as file values
    return AuditConfig.model_validate(config_dict)
