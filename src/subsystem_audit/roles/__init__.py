"""Role identity: functional-assignment parsing and role dictionary lookups.

Provides the lenient (synonym-tolerant) and strict (exact recorded text)
role resolution used to separate rule defects from role-naming drift.
"""

from subsystem_audit.roles.functions import (
    clean_role_text,
    normalize_role_name,
    roles_of_function,
)
from subsystem_audit.roles.identity import RoleDefinition, RoleIdentity

__all__ = [
    "clean_role_text",
    "normalize_role_name",
    "roles_of_function",
    "RoleDefinition",
    "RoleIdentity",
]
