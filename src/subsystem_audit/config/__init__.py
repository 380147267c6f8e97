from .loader import load_config, load_config_with_overrides
from .schema import AuditConfig, ValidationSettings

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "AuditConfig",
    "ValidationSettings",
]
