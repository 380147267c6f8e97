"""CoreSEED data adapters: organism directories and subsystem directories."""

from subsystem_audit.corpus.genomes import (
    GenomeCorpus,
    GenomeRepository,
    feature_type,
    load_corpus,
)
from subsystem_audit.corpus.subsystems import (
    Subsystem,
    SubsystemRepository,
    SubsystemRole,
    dir_to_name,
    parse_spreadsheet,
    read_subsystem_filter,
)

__all__ = [
    "GenomeCorpus",
    "GenomeRepository",
    "feature_type",
    "load_corpus",
    "Subsystem",
    "SubsystemRepository",
    "SubsystemRole",
    "dir_to_name",
    "parse_spreadsheet",
    "read_subsystem_filter",
]
