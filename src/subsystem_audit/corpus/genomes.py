"""Genome functional assignments from a CoreSEED organism directory.

Layout of one genome:
    Organisms/<genome_id>/GENOME                         genome name
    Organisms/<genome_id>/assigned_functions             fid <TAB> function
    Organisms/<genome_id>/Features/<type>/deleted.features
Later lines of assigned_functions override earlier ones.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

logger = logging.getLogger(__name__)

GENOME_ID_PATTERN = re.compile(r"^\d+\.\d+$")
FID_PATTERN = re.compile(r"^fig\|\d+\.\d+\.([^.]+)\.\d+$")


def feature_type(fid: str) -> str | None:
    """Return the feature type of a FIG feature id ("fig|83333.1.peg.4" -> "peg")."""
    match = FID_PATTERN.match(fid)
    return match.group(1) if match else None


def read_tsv(path: Path, columns: list[str]) -> pl.DataFrame:
    """Read a headerless tab-separated file as strings.

    Short lines are padded with nulls, extra fields are dropped, and bytes
    that are not valid UTF-8 are replaced. A missing or empty file reads as
    an empty frame.
    """
    schema = {column: pl.String for column in columns}
    if not path.is_file() or path.stat().st_size == 0:
        return pl.DataFrame(schema=schema)
    return pl.read_csv(
        path,
        separator="\t",
        has_header=False,
        quote_char=None,
        schema=schema,
        truncate_ragged_lines=True,
        encoding="utf8-lossy",
    )


class GenomeRepository:
    """Read-only access to the genomes of a CoreSEED organism directory."""

    def __init__(self, organism_dir: Path):
        organism_dir = Path(organism_dir)
        if not organism_dir.is_dir():
            raise FileNotFoundError(f"No organism directory found at {organism_dir}.")
        self.organism_dir = organism_dir

    def list_genome_ids(self) -> list[str]:
        return sorted(
            child.name
            for child in self.organism_dir.iterdir()
            if child.is_dir() and GENOME_ID_PATTERN.match(child.name)
        )

    def genome_name(self, genome_id: str) -> str:
        name_file = self.organism_dir / genome_id / "GENOME"
        if not name_file.is_file():
            return "unknown genome"
        with name_file.open(encoding="utf-8", errors="replace") as f:
            return f.readline().strip()

    def functional_assignments(
        self,
        genome_id: str,
        feature_types: list[str],
    ) -> dict[str, str]:
        """Map feature ids to functional assignments for one genome.

        Args:
            genome_id: Genome to read
            feature_types: Feature types to keep (e.g. ["peg", "rna"])

        Returns:
            Dictionary of feature id -> function, deleted features excluded
        """
        genome_dir = self.organism_dir / genome_id
        wanted = sorted(set(feature_types))

        deleted: list[str] = []
        for ftype in wanted:
            deleted_df = read_tsv(
                genome_dir / "Features" / ftype / "deleted.features", ["fid"]
            )
            deleted.extend(
                deleted_df.get_column("fid").str.strip_chars().drop_nulls().to_list()
            )

        assignment_file = genome_dir / "assigned_functions"
        if not assignment_file.is_file():
            logger.warning(f"No assigned_functions file for genome {genome_id}")
            return {}

        df = (
            read_tsv(assignment_file, ["fid", "function"])
            .drop_nulls()
            .filter(
                ~pl.col("fid").is_in(pl.Series(deleted, dtype=pl.String))
                & pl.col("fid").str.extract(FID_PATTERN.pattern, 1)
                .is_in(pl.Series(wanted, dtype=pl.String))
            )
            .unique(subset=["fid"], keep="last", maintain_order=True)
        )
        return dict(df.iter_rows())


@dataclass
class GenomeCorpus:
    """All genomes' function maps, loaded once and shared read-only.

    Attributes:
        functions: genome id -> (feature id -> functional assignment)
        names: genome id -> genome name
    """
    functions: dict[str, dict[str, str]] = field(default_factory=dict)
    names: dict[str, str] = field(default_factory=dict)

    def __contains__(self, genome_id: str) -> bool:
        return genome_id in self.functions

    def __len__(self) -> int:
        return len(self.functions)

    def function_map(self, genome_id: str) -> dict[str, str]:
        return self.functions[genome_id]


def load_corpus(repository: GenomeRepository, feature_types: list[str]) -> GenomeCorpus:
    """Load the function map of every genome in the repository."""
    corpus = GenomeCorpus()
    for genome_id in repository.list_genome_ids():
        genome_name = repository.genome_name(genome_id)
        logger.info(f"Processing role set for {genome_id}: {genome_name}")
        function_map = repository.functional_assignments(genome_id, feature_types)
        corpus.names[genome_id] = genome_name
        corpus.functions[genome_id] = function_map
        logger.info(f"{len(function_map)} functions found in {genome_id}")
    logger.info(f"Loaded {len(corpus)} genomes from {repository.organism_dir}")
    return corpus
