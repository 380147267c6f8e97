"""Parallel validation of every subsystem's variant rules.

Subsystems are fanned out over a fixed-size thread pool; the rows of one
subsystem are evaluated sequentially by a single worker. Results go to the
shared report sinks (one lock per report) and are tallied into a RunSummary
on the calling thread.
"""

import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from subsystem_audit.corpus import GenomeCorpus, Subsystem, SubsystemRepository, dir_to_name
from subsystem_audit.output import ReportSinks
from subsystem_audit.roles import RoleIdentity
from subsystem_audit.rules import RuleParseError
from subsystem_audit.validation.classifier import (
    Outcome,
    classify,
    is_inactive_code,
    is_new_style_code,
)
from subsystem_audit.validation.progress import ProgressTracker
from subsystem_audit.validation.role_sets import (
    NamingMismatchLog,
    ResolvedRole,
    RoleSetBuilder,
    resolve_function_map,
)

logger = structlog.get_logger()


@dataclass
class SubsystemResult:
    """Tallies for one validated subsystem."""
    name: str
    rows: int = 0
    bad_genomes: int = 0
    has_rules: bool = True
    outcomes: Counter = field(default_factory=Counter)
    bad_variant_pairs: Counter = field(default_factory=Counter)
    invalid_pairs: Counter = field(default_factory=Counter)

    @property
    def bad_variants(self) -> int:
        return sum(n for outcome, n in self.outcomes.items() if outcome.is_bad_variant)


@dataclass
class RunSummary:
    """Aggregate counters for a whole validation run."""
    subsystems_total: int = 0
    processed: int = 0
    parse_errors: int = 0
    missing_rules: int = 0
    rows: int = 0
    bad_genomes: int = 0
    outcomes: Counter = field(default_factory=Counter)

    def add(self, result: SubsystemResult | None) -> None:
        if result is None:
            self.parse_errors += 1
            return
        self.processed += 1
        self.rows += result.rows
        self.bad_genomes += result.bad_genomes
        if not result.has_rules:
            self.missing_rules += 1
        self.outcomes.update(result.outcomes)

    def to_dict(self) -> dict:
        return {
            "subsystems_total": self.subsystems_total,
            "processed": self.processed,
            "parse_errors": self.parse_errors,
            "missing_rules": self.missing_rules,
            "rows": self.rows,
            "bad_genomes": self.bad_genomes,
            "outcomes": {outcome.value: self.outcomes.get(outcome, 0) for outcome in Outcome},
        }


def _sorted_counts(counts: Counter) -> list[tuple[tuple[str, str], int]]:
    """Count entries, highest count first, ties broken by key."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


class ValidationCoordinator:
    """Validates subsystems against a preloaded genome corpus.

    The corpus and role dictionary are read-only and shared by all workers.
    Each genome's roles are resolved against the dictionary once, up front.
    """

    def __init__(
        self,
        corpus: GenomeCorpus,
        roles: RoleIdentity,
        repository: SubsystemRepository,
        sinks: ReportSinks,
        workers: int = 4,
        progress_interval: float = 5.0,
    ):
        self.corpus = corpus
        self.roles = roles
        self.repository = repository
        self.sinks = sinks
        self.workers = workers
        self.progress_interval = progress_interval
        self.builder = RoleSetBuilder(roles, NamingMismatchLog(sinks["mismatch"]))
        self.progress = ProgressTracker(0)

        self._resolved: dict[str, list[ResolvedRole]] = {
            genome_id: resolve_function_map(roles, function_map)
            for genome_id, function_map in corpus.functions.items()
        }
        self.observed_role_ids = frozenset(
            role.role_id for resolved in self._resolved.values() for role in resolved
        )
        logger.info(
            "corpus_roles_resolved",
            genomes=len(self._resolved),
            distinct_roles=len(self.observed_role_ids),
        )

    def run(self, directories: list[Path]) -> RunSummary:
        """Validate every subsystem directory and return the run totals.

        A subsystem with unparseable rules is reported and skipped; any other
        exception aborts the run after cancelling the pending work.
        """
        summary = RunSummary(subsystems_total=len(directories))
        self.progress = ProgressTracker(len(directories))
        logger.info("validation_start", subsystems=len(directories), workers=self.workers)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            future_to_dir = {
                executor.submit(self.analyze_subsystem, directory): directory
                for directory in directories
            }
            try:
                for future in as_completed(future_to_dir):
                    summary.add(future.result())
            except Exception:
                for future in future_to_dir:
                    future.cancel()
                raise

        logger.info("validation_complete", **summary.to_dict())
        return summary

    def analyze_subsystem(self, directory: Path) -> SubsystemResult | None:
        """Load and validate one subsystem; None if its rules do not parse."""
        name = dir_to_name(directory)
        try:
            subsystem = self.repository.load(directory, self.roles)
        except RuleParseError as e:
            logger.error("subsystem_parse_failed", subsystem=name, error=str(e))
            self.sinks["errors"].write_row(name, str(e))
            self.progress.skip()
            return None

        result = self.process_subsystem(subsystem)
        self.sinks.flush()
        return result

    def process_subsystem(self, subsystem: Subsystem) -> SubsystemResult:
        """Validate the rows of a loaded subsystem and write its report lines."""
        name = subsystem.name
        good = subsystem.good_flag
        bad_id_count = subsystem.bad_id_count
        result = SubsystemResult(
            name=name,
            rows=len(subsystem.rows),
            has_rules=subsystem.has_rules(),
        )
        logger.info("validating_subsystem", subsystem=name, rows=result.rows)

        active_genomes = 0
        new_codes: set[str] = set()
        old_codes: set[str] = set()
        for genome_id, code in subsystem.rows.items():
            if genome_id not in self.corpus:
                result.bad_genomes += 1
            if not is_inactive_code(code):
                active_genomes += 1
            if is_new_style_code(code):
                new_codes.add(code)
            else:
                old_codes.add(code)

        if result.has_rules:
            self._validate_rows(subsystem, result)
            variant_columns = [
                result.bad_variants,
                result.outcomes[Outcome.MISMATCH_SERIOUS],
                result.outcomes[Outcome.INVALID],
                result.outcomes[Outcome.MISMATCH_NAMING],
            ]
        else:
            self.sinks["missing"].write_row(
                name, subsystem.version, *subsystem.classification, good,
            )
            variant_columns = ["", "", "", ""]

        self.sinks["subReport"].write_row(
            name,
            subsystem.role_count,
            result.rows,
            bad_id_count,
            subsystem.count_absent_roles(self.observed_role_ids),
            *variant_columns,
            result.bad_genomes,
        )

        if old_codes:
            self.sinks["oldCodes"].write_row(
                name,
                subsystem.role_count,
                active_genomes,
                good,
                len(old_codes) + len(new_codes),
                ", ".join(sorted(old_codes)),
            )

        self.sinks["bvSummary"].write_rows(
            (name, good, bad_id_count, expected, actual, count)
            for (expected, actual), count in _sorted_counts(result.bad_variant_pairs)
        )
        self.sinks["ivSummary"].write_rows(
            (name, good, bad_id_count, expected, actual, count)
            for (expected, actual), count in _sorted_counts(result.invalid_pairs)
        )

        if bad_id_count > 0:
            self.sinks["badIds"].write_row(
                name, subsystem.role_count, good, ", ".join(subsystem.bad_ids),
            )

        snapshot = self.progress.complete()
        logger.info(
            "subsystems_progress",
            completed=snapshot.completed,
            total=snapshot.total,
            per_subsystem=str(snapshot.per_subsystem),
            remaining=str(snapshot.remaining),
        )
        return result

    def _validate_rows(self, subsystem: Subsystem, result: SubsystemResult) -> None:
        """Classify every known genome row of a ruled subsystem."""
        good = subsystem.good_flag
        details: list[tuple] = []
        checked = 0
        last_message = time.monotonic()

        for genome_id, expected in subsystem.rows.items():
            if genome_id not in self.corpus:
                continue
            role_sets = self.builder.build_resolved(subsystem, self._resolved[genome_id])
            record = classify(subsystem, expected, role_sets)
            result.outcomes[record.outcome] += 1

            if record.outcome is Outcome.INVALID:
                result.invalid_pairs[record.pair] += 1
            elif record.outcome.is_bad_variant:
                result.bad_variant_pairs[record.pair] += 1
                if record.outcome is Outcome.MISMATCH_SERIOUS:
                    details.append((
                        subsystem.name, good, genome_id, record.expected, record.actual,
                        record.expected_roles, record.actual_roles,
                    ))

            checked += 1
            now = time.monotonic()
            if now - last_message >= self.progress_interval:
                last_message = now
                logger.info(
                    "genome_progress",
                    subsystem=subsystem.name,
                    genomes=checked,
                    bad_variants=result.bad_variants,
                    serious=result.outcomes[Outcome.MISMATCH_SERIOUS],
                    mismatches=result.outcomes[Outcome.MISMATCH_NAMING],
                )

        self.sinks["badVariants"].write_rows(details)
        logger.info(
            "subsystem_validated",
            subsystem=subsystem.name,
            genomes=checked,
            bad_variants=result.bad_variants,
            serious=result.outcomes[Outcome.MISMATCH_SERIOUS],
            invalid=result.outcomes[Outcome.INVALID],
            mismatches=result.outcomes[Outcome.MISMATCH_NAMING],
        )
