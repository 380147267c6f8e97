"""Rule check command: validate every subsystem's variant rules.

Writes these reports to the output directory:
- subReport.tbl: one summary line per subsystem
- badVariants.tbl: serious mismatches with role analyses
- bvSummary.tbl / ivSummary.tbl: mismatch and invalid-variant pair counts
- missing.tbl, errors.tbl, badIds.tbl, oldCodes.tbl: subsystem-level problems
- mismatch.tbl: features whose role text differs from the subsystem's
"""

import logging
import shutil
import sys
from pathlib import Path

import click

from subsystem_audit.config.loader import load_config_with_overrides
from subsystem_audit.corpus import (
    GenomeRepository,
    SubsystemRepository,
    load_corpus,
    read_subsystem_filter,
)
from subsystem_audit.output import ReportSinks, finalize_reports
from subsystem_audit.persistence import ProvenanceTracker
from subsystem_audit.roles import RoleIdentity
from subsystem_audit.validation import Outcome, ValidationCoordinator

logger = logging.getLogger(__name__)


def clear_directory(directory: Path) -> None:
    """Remove everything inside a directory, keeping the directory itself."""
    for child in directory.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


@click.command('check')
@click.option(
    '--core-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='CoreSEED data directory (overrides config core_dir)'
)
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Report directory (overrides config output_dir)'
)
@click.option(
    '--roles',
    'roles_file',
    type=click.Path(path_type=Path),
    default=None,
    help='Role definition file (default: subsystem.roles in the CoreSEED directory)'
)
@click.option(
    '--filter',
    'filter_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Tab-separated file of subsystem names to check (first column, with header)'
)
@click.option(
    '--clear',
    is_flag=True,
    help='Erase the output directory before writing reports'
)
@click.option(
    '--workers',
    type=int,
    default=None,
    help='Number of subsystems validated concurrently'
)
@click.pass_context
def check(ctx, core_dir, output_dir, roles_file, filter_file, clear, workers):
    """Check subsystem variant rules against the spreadsheet variant codes.

    Loads every CoreSEED genome once, then validates subsystems in parallel.
    For each spreadsheet row the variant predicted by the rules is compared
    with the recorded variant. Disagreements are split into invalid codes
    (no rule exists), role-naming mismatches, and serious rule defects.

    Pipeline steps:
    1. Load configuration
    2. Load role definitions
    3. Load genome functional assignments
    4. Discover subsystems (optionally filtered)
    5. Prepare output directory
    6. Validate subsystems
    7. Sort reports and write provenance

    Examples:

        # Check every subsystem
        subsystem-audit check --core-dir FIGdisk/FIG/Data

        # Check a list of subsystems into a fresh directory
        subsystem-audit check --filter subs.tbl --output-dir out --clear
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Subsystem Rule Check ===", bold=True))
    click.echo()

    try:
        # Step 1: Load configuration
        click.echo(click.style("Step 1: Loading configuration...", bold=True))
        config = load_config_with_overrides(config_path, {
            "core_dir": core_dir,
            "output_dir": output_dir,
            "roles_file": roles_file,
            "filter_file": filter_file,
            "clear_output": True if clear else None,
            "validation.workers": workers,
        })
        provenance = ProvenanceTracker.from_config(config)
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
        click.echo()

        # Step 2: Role definitions
        click.echo(click.style("Step 2: Loading role definitions...", bold=True))
        roles_path = config.resolved_roles_file()
        roles = RoleIdentity.load(roles_path)
        click.echo(click.style(f"  {len(roles)} roles loaded from {roles_path}", fg='green'))
        click.echo()
        provenance.record_step('load_roles', {'role_count': len(roles)})

        # Step 3: Genomes
        click.echo(click.style("Step 3: Loading genome functional assignments...", bold=True))
        genomes = GenomeRepository(config.organism_dir)
        corpus = load_corpus(genomes, config.validation.feature_types)
        click.echo(click.style(f"  {len(corpus)} genomes loaded", fg='green'))
        click.echo()
        provenance.record_step('load_genomes', {'genome_count': len(corpus)})

        # Step 4: Subsystems
        click.echo(click.style("Step 4: Discovering subsystems...", bold=True))
        repository = SubsystemRepository(config.subsystem_dir)
        names = read_subsystem_filter(config.filter_file) if config.filter_file else None
        directories = repository.list_directories(names)
        click.echo(click.style(f"  {len(directories)} subsystems to check", fg='green'))
        click.echo()

        # Step 5: Output directory
        click.echo(click.style("Step 5: Preparing output directory...", bold=True))
        out_dir = config.output_dir
        if config.clear_output:
            clear_directory(out_dir)
            click.echo(f"  Erased {out_dir}")
        click.echo(click.style(f"  Reports will be written to {out_dir}", fg='green'))
        click.echo()

        # Step 6: Validation
        click.echo(click.style("Step 6: Validating subsystem rules...", bold=True))
        with ReportSinks(out_dir) as sinks:
            coordinator = ValidationCoordinator(
                corpus,
                roles,
                repository,
                sinks,
                workers=config.validation.workers,
                progress_interval=config.validation.progress_interval_seconds,
            )
            summary = coordinator.run(directories)
        click.echo(click.style(
            f"  {summary.processed} subsystems validated, {summary.parse_errors} with rule errors",
            fg='green' if summary.parse_errors == 0 else 'yellow'
        ))
        click.echo()
        provenance.record_step('validate_subsystems', summary.to_dict())

        # Step 7: Finalize
        click.echo(click.style("Step 7: Sorting reports and writing provenance...", bold=True))
        outputs = finalize_reports(out_dir, summary.to_dict())
        provenance_path = provenance.save_sidecar(out_dir / "audit")
        click.echo(click.style(f"  Report provenance: {outputs['provenance']}", fg='green'))
        click.echo(click.style(f"  Run provenance: {provenance_path}", fg='green'))
        click.echo()

        click.echo(click.style("=== Rule Check Summary ===", bold=True))
        click.echo(f"Subsystems checked: {summary.processed}/{summary.subsystems_total}")
        click.echo(f"  - Missing rules: {summary.missing_rules}")
        click.echo(f"  - Rule errors: {summary.parse_errors}")
        click.echo(f"Spreadsheet rows: {summary.rows}")
        click.echo(f"  - Unknown genomes: {summary.bad_genomes}")
        click.echo(f"  - Matches: {summary.outcomes[Outcome.MATCH]}")
        click.echo(f"  - Invalid variants: {summary.outcomes[Outcome.INVALID]}")
        click.echo(f"  - Naming mismatches: {summary.outcomes[Outcome.MISMATCH_NAMING]}")
        click.echo(f"  - Serious mismatches: {summary.outcomes[Outcome.MISMATCH_SERIOUS]}")
        click.echo()
        click.echo(click.style("Rule check complete!", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Rule check failed: {e}", fg='red'), err=True)
        logger.exception("Rule check failed")
        sys.exit(1)
