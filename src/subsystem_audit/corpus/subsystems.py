"""Subsystem directories: spreadsheet, rules and metadata.

A subsystem directory is named after the subsystem with spaces replaced by
underscores and contains:
- spreadsheet: role section ("abbr <TAB> role name"), "//", subset
  section, "//", then rows ("genome_id <TAB> variant_code <TAB> cells...")
- checkvariant_definitions / checkvariant_rules: variant rules (optional)
- CLASSIFICATION: superclass <TAB> class <TAB> subclass (optional)
- VERSION: version number (optional)
- EXCHANGABLE: marker for a public, curated ("good") subsystem
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from subsystem_audit.roles import RoleIdentity
from subsystem_audit.rules import VariantRuleSet

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "//"


def dir_to_name(directory: Path | str) -> str:
    """Convert a subsystem directory to the subsystem name."""
    return Path(directory).name.replace("_", " ")


@dataclass(frozen=True)
class SubsystemRole:
    """One role column of a subsystem spreadsheet.

    Attributes:
        abbreviation: Column abbreviation used in rules
        name: Role name exactly as recorded by the subsystem
        role_id: Role id from the role dictionary (None if not found)
    """
    abbreviation: str
    name: str
    role_id: str | None = None


@dataclass
class Subsystem:
    """A loaded subsystem. Immutable once loaded; safe to read from threads."""

    name: str
    roles: list[SubsystemRole]
    rows: dict[str, str]
    rules: VariantRuleSet
    version: str = ""
    classification: tuple[str, str, str] = ("", "", "")
    good: bool = False
    _names_by_id: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self):
        """Index recorded role names by role id (first column wins)."""
        self._names_by_id = {}
        for role in self.roles:
            if role.role_id is not None:
                self._names_by_id.setdefault(role.role_id, role.name)

    @property
    def role_count(self) -> int:
        return len(self.roles)

    @property
    def row_genomes(self) -> list[str]:
        return list(self.rows)

    @property
    def role_ids(self) -> frozenset[str]:
        return frozenset(self._names_by_id)

    @property
    def bad_ids(self) -> list[str]:
        return self.rules.bad_ids

    @property
    def bad_id_count(self) -> int:
        return len(self.rules.bad_ids)

    @property
    def good_flag(self) -> str:
        return "Y" if self.good else ""

    def has_rules(self) -> bool:
        return self.rules.has_rules()

    def recorded_name(self, role_id: str) -> str | None:
        """Role name the subsystem recorded for a role id."""
        return self._names_by_id.get(role_id)

    def in_vocabulary(self, role_id: str | None) -> bool:
        return role_id is not None and role_id in self._names_by_id

    def count_absent_roles(self, observed_role_ids: frozenset[str]) -> int:
        """Count roles with no dictionary id or never observed in the corpus."""
        return sum(
            1 for role in self.roles
            if role.role_id is None or role.role_id not in observed_role_ids
        )


def parse_spreadsheet(text: str) -> tuple[list[tuple[str, str]], dict[str, str]]:
    """
    Parse a subsystem spreadsheet.

    Args:
        text: Contents of the spreadsheet file

    Returns:
        Tuple of (roles, rows)
        - roles: (abbreviation, role name) pairs in column order
        - rows: genome id -> variant code, spreadsheet order, first row wins
    """
    roles: list[tuple[str, str]] = []
    rows: dict[str, str] = {}
    section = 0
    for line in text.splitlines():
        if line.strip() == SECTION_SEPARATOR:
            section += 1
            continue
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        if section == 0:
            roles.append((parts[0].strip(), parts[1].strip()))
        elif section >= 2:
            genome_id = parts[0].strip()
            if genome_id:
                rows.setdefault(genome_id, parts[1].strip())
    return roles, rows


def _read_optional(path: Path) -> str:
    if not path.is_file():
        return ""
    return path.read_text(encoding="utf-8", errors="replace")


def read_subsystem_filter(filter_file: Path) -> set[str]:
    """Read subsystem names from the first column of a tab-separated file with headers."""
    df = pl.read_csv(
        filter_file,
        separator="\t",
        quote_char=None,
        infer_schema_length=0,
        truncate_ragged_lines=True,
        encoding="utf8-lossy",
    )
    names = df.get_column(df.columns[0]).drop_nulls().to_list()
    return {name.strip().replace("_", " ") for name in names if name.strip()}


class SubsystemRepository:
    """Discovers and loads subsystem directories under a CoreSEED data directory."""

    def __init__(self, subsystem_dir: Path):
        subsystem_dir = Path(subsystem_dir)
        if not subsystem_dir.is_dir():
            raise FileNotFoundError(f"No subsystem directory found at {subsystem_dir}.")
        self.subsystem_dir = subsystem_dir

    def list_directories(self, names: set[str] | None = None) -> list[Path]:
        """List subsystem directories, optionally restricted to the given names.

        Only directories containing a spreadsheet are subsystems.
        """
        directories = sorted(
            child for child in self.subsystem_dir.iterdir()
            if child.is_dir() and (child / "spreadsheet").is_file()
        )
        if names is not None:
            directories = [d for d in directories if dir_to_name(d) in names]
        logger.info(f"{len(directories)} subsystems found in {self.subsystem_dir}")
        return directories

    def find(self, name: str) -> Path | None:
        """Locate the directory of a subsystem by name."""
        directory = self.subsystem_dir / name.replace(" ", "_")
        if (directory / "spreadsheet").is_file():
            return directory
        return None

    def load(self, directory: Path, roles: RoleIdentity) -> Subsystem:
        """Load a subsystem.

        Args:
            directory: Subsystem directory
            roles: Role dictionary used to assign role ids to columns

        Returns:
            Loaded Subsystem

        Raises:
            RuleParseError: If the variant rules are malformed
        """
        name = dir_to_name(directory)
        role_pairs, rows = parse_spreadsheet(_read_optional(directory / "spreadsheet"))
        subsystem_roles = [
            SubsystemRole(abbr, role_name, roles.resolve_lenient(role_name))
            for abbr, role_name in role_pairs
        ]
        abbreviations = {role.abbreviation: role.role_id for role in subsystem_roles}

        rules = VariantRuleSet.compile(
            abbreviations,
            definitions_text=_read_optional(directory / "checkvariant_definitions"),
            rules_text=_read_optional(directory / "checkvariant_rules"),
            source=name,
        )

        classification = _read_optional(directory / "CLASSIFICATION").splitlines()
        classes = classification[0].split("\t") if classification else []
        classes = [c.strip() for c in classes[:3]] + [""] * (3 - len(classes[:3]))

        version_lines = _read_optional(directory / "VERSION").split()
        version = version_lines[0] if version_lines else ""

        return Subsystem(
            name=name,
            roles=subsystem_roles,
            rows=rows,
            rules=rules,
            version=version,
            classification=(classes[0], classes[1], classes[2]),
            good=(directory / "EXCHANGABLE").is_file(),
        )
