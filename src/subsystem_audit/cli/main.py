"""Main CLI entry point for subsystem-audit.

Provides command group with global options and subcommands for audit operations.
"""

import logging
from pathlib import Path

import click

from subsystem_audit import __version__
from subsystem_audit.config.loader import load_config
from subsystem_audit.cli.check_cmd import check
from subsystem_audit.cli.role_check_cmd import role_check


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to audit configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Subsystem-audit: check CoreSEED subsystem variant rules against the spreadsheets.

    Predicts each genome's variant from the subsystem rules, compares it with
    the curated variant code, and reports missing rules, rule defects and
    role-naming drift.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display tool information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Subsystem Audit v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Inputs:", bold=True))
        click.echo(f"  CoreSEED Directory: {config.core_dir}")
        click.echo(f"  Role File:          {config.resolved_roles_file()}")
        click.echo(f"  Subsystem Filter:   {config.filter_file or '(all subsystems)'}")
        click.echo()

        click.echo(click.style("Output:", bold=True))
        click.echo(f"  Report Directory: {config.output_dir}")
        click.echo(f"  Clear Before Run: {'yes' if config.clear_output else 'no'}")
        click.echo()

        click.echo(click.style("Validation:", bold=True))
        click.echo(f"  Workers: {config.validation.workers}")
        click.echo(f"  Feature Types: {', '.join(config.validation.feature_types)}")
        click.echo(f"  Progress Interval: {config.validation.progress_interval_seconds}s")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


cli.add_command(check)
cli.add_command(role_check)


if __name__ == '__main__':
    cli()
