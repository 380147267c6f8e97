"""Variant rule validation engine.

Builds lenient and strict role sets per (subsystem, genome), predicts the
variant from the subsystem's rules, classifies disagreements with the
spreadsheet, and coordinates parallel validation across subsystems.
"""

from subsystem_audit.validation.classifier import (
    Classification,
    Outcome,
    classify,
    is_inactive_code,
    is_new_style_code,
)
from subsystem_audit.validation.coordinator import (
    RunSummary,
    SubsystemResult,
    ValidationCoordinator,
)
from subsystem_audit.validation.progress import ProgressSnapshot, ProgressTracker
from subsystem_audit.validation.role_check import (
    ROLE_CHECK_COLUMNS,
    RoleNameMismatch,
    check_bad_variant_roles,
    find_role_name_mismatches,
)
from subsystem_audit.validation.role_sets import (
    NamingMismatchLog,
    ResolvedRole,
    RoleSetBuilder,
    RoleSets,
    resolve_function_map,
)

__all__ = [
    "Classification",
    "Outcome",
    "classify",
    "is_inactive_code",
    "is_new_style_code",
    "RunSummary",
    "SubsystemResult",
    "ValidationCoordinator",
    "ProgressSnapshot",
    "ProgressTracker",
    "ROLE_CHECK_COLUMNS",
    "RoleNameMismatch",
    "check_bad_variant_roles",
    "find_role_name_mismatches",
    "NamingMismatchLog",
    "ResolvedRole",
    "RoleSetBuilder",
    "RoleSets",
    "resolve_function_map",
]
