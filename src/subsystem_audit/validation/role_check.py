"""Role-name discrepancy check for the genomes behind serious bad variants.

A subsystem's recorded role name is the standard one, but genomes often carry
the same role with cosmetic differences (comments, EC numbers, case). For
each (subsystem, genome) pair in a bad-variants report, this lists every
feature whose role leniently matches a subsystem role but not its text.
"""

from dataclasses import dataclass

import polars as pl
import structlog

from subsystem_audit.corpus import GenomeRepository, Subsystem, SubsystemRepository
from subsystem_audit.roles import RoleIdentity, roles_of_function

logger = structlog.get_logger()

ROLE_CHECK_COLUMNS = ["subsystem", "role_id", "fid", "actual", "expected"]


@dataclass(frozen=True)
class RoleNameMismatch:
    subsystem: str
    role_id: str
    fid: str
    actual: str
    expected: str


def find_role_name_mismatches(
    subsystem: Subsystem,
    function_map: dict[str, str],
    roles: RoleIdentity,
) -> list[RoleNameMismatch]:
    """List features whose role text differs from the subsystem's recorded name."""
    mismatches: list[RoleNameMismatch] = []
    for fid, function in function_map.items():
        for role_text in roles_of_function(function):
            role_id = roles.resolve_lenient(role_text)
            if not subsystem.in_vocabulary(role_id):
                continue
            recorded = subsystem.recorded_name(role_id)
            if not roles.resolve_strict(role_id, role_text, recorded):
                mismatches.append(
                    RoleNameMismatch(subsystem.name, role_id, fid, role_text, recorded or "")
                )
    return mismatches


def _find_column(df: pl.DataFrame, name: str) -> str:
    for column in df.columns:
        if column.lower() == name:
            return column
    raise ValueError(f"Input report has no '{name}' column.")


def check_bad_variant_roles(
    bad_variants: pl.DataFrame,
    subsystems: SubsystemRepository,
    genomes: GenomeRepository,
    roles: RoleIdentity,
    feature_types: list[str],
) -> pl.DataFrame:
    """
    Check role naming for every (subsystem, genome) pair in a bad-variants report.

    Args:
        bad_variants: Bad-variants report (needs subsystem and genome_id columns)
        subsystems: Subsystem repository to load subsystems from
        genomes: Genome repository to read functional assignments from
        roles: Role dictionary
        feature_types: Feature types whose assignments are read

    Returns:
        DataFrame with columns subsystem, role_id, fid, actual, expected

    Raises:
        ValueError: If a column is missing or a subsystem name is unknown
    """
    sub_col = _find_column(bad_variants, "subsystem")
    genome_col = _find_column(bad_variants, "genome_id")

    subsystem: Subsystem | None = None
    genome_cache: dict[str, dict[str, str]] = {}
    mismatches: list[RoleNameMismatch] = []
    pair_count = 0

    for sub_name, genome_id in bad_variants.select([sub_col, genome_col]).iter_rows():
        pair_count += 1
        if subsystem is None or subsystem.name != sub_name:
            directory = subsystems.find(sub_name)
            if directory is None:
                raise ValueError(f'Invalid subsystem name "{sub_name}".')
            logger.info("loading_subsystem", subsystem=sub_name)
            subsystem = subsystems.load(directory, roles)
        if genome_id not in genome_cache:
            genome_cache[genome_id] = genomes.functional_assignments(genome_id, feature_types)
        mismatches.extend(
            find_role_name_mismatches(subsystem, genome_cache[genome_id], roles)
        )

    logger.info(
        "role_check_complete",
        pairs=pair_count,
        mismatches=len(mismatches),
    )
    return pl.DataFrame(
        {
            column: [getattr(m, column) for m in mismatches]
            for column in ROLE_CHECK_COLUMNS
        },
        schema={column: pl.String for column in ROLE_CHECK_COLUMNS},
    )
