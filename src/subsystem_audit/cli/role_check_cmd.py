"""Role check command: find non-standard role names behind bad variants."""

import logging
import sys
from pathlib import Path

import click

from subsystem_audit.config.loader import load_config_with_overrides
from subsystem_audit.corpus import GenomeRepository, SubsystemRepository
from subsystem_audit.output import read_report
from subsystem_audit.roles import RoleIdentity
from subsystem_audit.validation import check_bad_variant_roles

logger = logging.getLogger(__name__)


@click.command('role-check')
@click.option(
    '--core-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='CoreSEED data directory (overrides config core_dir)'
)
@click.option(
    '--input',
    'input_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Bad-variants report (default: {output_dir}/badVariants.tbl)'
)
@click.option(
    '--output',
    'output_path',
    type=click.Path(path_type=Path),
    default=None,
    help='Role-name report (default: {output_dir}/roleCheck.tbl)'
)
@click.option(
    '--roles',
    'roles_file',
    type=click.Path(path_type=Path),
    default=None,
    help='Role definition file (default: subsystem.roles in the CoreSEED directory)'
)
@click.pass_context
def role_check(ctx, core_dir, input_path, output_path, roles_file):
    """List role-name discrepancies for the genomes in a bad-variants report.

    A genome feature may carry a subsystem role under a cosmetically different
    name (comment, EC number, capitalization). For each subsystem/genome pair
    in the report, every such feature is listed with its actual and expected
    role names.
    """
    config_path = ctx.obj['config_path']

    try:
        config = load_config_with_overrides(config_path, {
            "core_dir": core_dir,
            "roles_file": roles_file,
        })
        if input_path is None:
            input_path = config.output_dir / "badVariants.tbl"
        if output_path is None:
            output_path = config.output_dir / "roleCheck.tbl"

        roles = RoleIdentity.load(config.resolved_roles_file())
        genomes = GenomeRepository(config.organism_dir)
        subsystems = SubsystemRepository(config.subsystem_dir)

        bad_variants = read_report(input_path)
        click.echo(f"Checking {bad_variants.height} bad-variant rows from {input_path}")

        result = check_bad_variant_roles(
            bad_variants,
            subsystems,
            genomes,
            roles,
            config.validation.feature_types,
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result.write_csv(output_path, separator="\t", include_header=True, quote_style="never")

        click.echo(click.style(
            f"{result.height} role-name mismatches written to {output_path}",
            fg='green'
        ))

    except Exception as e:
        click.echo(click.style(f"Role check failed: {e}", fg='red'), err=True)
        logger.exception("Role check failed")
        sys.exit(1)
