"""Role dictionary with lenient and strict role resolution."""

import logging
from dataclasses import dataclass
from pathlib import Path

import polars as pl

from subsystem_audit.roles.functions import clean_role_text, normalize_role_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleDefinition:
    """A canonical role.

    Attributes:
        role_id: Stable role identifier
        name: Canonical role name (first name registered for the id)
    """
    role_id: str
    name: str


class RoleIdentity:
    """Resolves free-text role names to stable role identifiers.

    Lenient resolution goes through the synonym dictionary, so case,
    punctuation, comments and EC numbers do not matter. Strict resolution
    additionally requires the observed text to equal the name a subsystem
    recorded for the role.

    The dictionary is read-only once loaded and may be shared across threads.
    """

    def __init__(self):
        self._by_key: dict[str, str] = {}
        self._definitions: dict[str, RoleDefinition] = {}

    def register(self, role_id: str, name: str) -> None:
        """Register a name (canonical or synonym) for a role id.

        The first id registered for a normalized key keeps it.
        """
        key = normalize_role_name(name)
        if not key:
            return
        if role_id not in self._definitions:
            self._definitions[role_id] = RoleDefinition(role_id, clean_role_text(name))
        existing = self._by_key.setdefault(key, role_id)
        if existing != role_id:
            logger.debug(
                f"Role name '{name}' for {role_id} already belongs to {existing}"
            )

    def resolve_lenient(self, role_text: str) -> str | None:
        """Return the role id for a role name, or None if it is not a known role."""
        return self._by_key.get(normalize_role_name(role_text))

    def resolve_strict(
        self,
        role_id: str,
        role_text: str,
        recorded_name: str | None,
    ) -> bool:
        """Check that observed role text is exactly the subsystem's recorded name.

        Args:
            role_id: Role id the text leniently resolved to
            role_text: Role name observed in a functional assignment
            recorded_name: Name the subsystem recorded for role_id

        Returns:
            True only if the text resolves to role_id and matches the
            recorded name once comments and surrounding blanks are removed
        """
        if recorded_name is None:
            return False
        if self.resolve_lenient(role_text) != role_id:
            return False
        return clean_role_text(role_text) == clean_role_text(recorded_name)

    def canonical_name(self, role_id: str) -> str | None:
        definition = self._definitions.get(role_id)
        return definition.name if definition else None

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, role_id: str) -> bool:
        return role_id in self._definitions

    @classmethod
    def load(cls, roles_file: Path | str) -> "RoleIdentity":
        """Load a role definition file.

        Each line is tab-delimited: role id, checksum, role name. An id that
        appears on several lines has synonyms; its first line supplies the
        canonical name. Two-column lines (id, name) are also accepted, mixed
        freely with three-column ones; the name is the last field present.
        Bytes that are not valid UTF-8 are replaced rather than rejected.

        Args:
            roles_file: Path to the role definition file

        Returns:
            Populated RoleIdentity

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        roles_file = Path(roles_file)
        if not roles_file.is_file():
            raise FileNotFoundError(
                f"Role definition file {roles_file} is not found or unreadable."
            )

        df = pl.read_csv(
            roles_file,
            separator="\t",
            has_header=False,
            quote_char=None,
            schema={"role_id": pl.String, "field_2": pl.String, "field_3": pl.String},
            truncate_ragged_lines=True,
            encoding="utf8-lossy",
        )
        df = df.select(
            "role_id",
            pl.coalesce("field_3", "field_2").alias("name"),
        )

        identity = cls()
        for role_id, name in df.iter_rows():
            if role_id and name:
                identity.register(role_id.strip(), name)

        logger.info(f"{len(identity)} roles found in definition file {roles_file}")
        return identity
